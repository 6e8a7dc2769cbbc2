"""DS-OS design system tooling."""

__version__ = "1.0.0"
