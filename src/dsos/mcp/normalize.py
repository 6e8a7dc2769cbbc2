"""Helpers for reading the loosely structured payloads the Figma tools return.

``extract_component`` hands payloads on verbatim; these helpers are for the
consumers that need a node tree or a flat variable table out of them.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any


class InvalidDesignContext(ValueError):
    """The design context does not contain a recognisable node."""

    pass


# Layout and style keys copied through unchanged when present
PASSTHROUGH_KEYS = (
    "constraints",
    "layoutMode",
    "primaryAxisSizingMode",
    "counterAxisSizingMode",
    "primaryAxisAlignItems",
    "counterAxisAlignItems",
    "paddingLeft",
    "paddingRight",
    "paddingTop",
    "paddingBottom",
    "itemSpacing",
    "cornerRadius",
    "rectangleCornerRadii",
    "opacity",
    "blendMode",
    "style",
    "characters",
    "boundVariables",
    "componentPropertyDefinitions",
    "variantProperties",
)


@dataclass
class DesignNode:
    """A Figma node in the shape the extraction pipeline expects."""

    id: str | None
    name: str
    type: str
    children: list[Any] = field(default_factory=list)
    fills: list[Any] = field(default_factory=list)
    strokes: list[Any] = field(default_factory=list)
    effects: list[Any] = field(default_factory=list)
    absolute_bounding_box: dict[str, float] | None = None
    properties: dict[str, Any] = field(default_factory=dict)
    """Layout and style keys from PASSTHROUGH_KEYS, under their wire names."""


def node_data_from_context(design_context: Any) -> dict[str, Any]:
    """
    Find the node inside a design context payload.

    Looks at ``document``, then ``node``, then the payload itself if it
    carries an ``id``.

    Raises:
        InvalidDesignContext: If none of those is present.
    """
    if not isinstance(design_context, dict):
        raise InvalidDesignContext("Invalid MCP design context format")
    for key in ("document", "node"):
        if isinstance(design_context.get(key), dict):
            return design_context[key]
    if design_context.get("id"):
        return design_context
    raise InvalidDesignContext("Could not extract node data from MCP design context")


def _meta_or_root(defs: Any, key: str) -> dict[str, Any]:
    if not isinstance(defs, dict):
        return {}
    meta = defs.get("meta")
    if isinstance(meta, dict) and isinstance(meta.get(key), dict):
        return meta[key]
    value = defs.get(key)
    return value if isinstance(value, dict) else {}


def variables_from_defs(defs: Any) -> dict[str, Any]:
    """Variables table from a variable-defs payload (``meta.variables`` first)."""
    return _meta_or_root(defs, "variables")


def collections_from_defs(defs: Any) -> dict[str, Any]:
    """Variable collections from a variable-defs payload."""
    return _meta_or_root(defs, "variableCollections")


def _channel(value: float) -> int:
    # Half-up rounding, not banker's rounding
    return math.floor(value * 255 + 0.5)


def _number(value: Any) -> Any:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def format_variable_value(value: Any, resolved_type: str) -> str:
    """
    Render a variable value as CSS.

    COLOR values are ``{r, g, b, a}`` with 0-1 channels.
    """
    if resolved_type == "COLOR" and isinstance(value, dict):
        r, g, b = (_channel(value.get(c, 0)) for c in "rgb")
        a = value.get("a")
        return f"rgba({r}, {g}, {b}, {1 if a is None else _number(a)})"
    if resolved_type == "FLOAT":
        return f"{_number(value)}px"
    return str(value)


def to_design_node(data: dict[str, Any]) -> DesignNode:
    """Map a raw MCP node payload onto a DesignNode."""
    return DesignNode(
        id=data.get("id") or data.get("nodeId"),
        name=data.get("name") or data.get("componentName") or "Component",
        type=data.get("type") or "COMPONENT",
        children=list(data.get("children") or []),
        fills=list(data.get("fills") or []),
        strokes=list(data.get("strokes") or []),
        effects=list(data.get("effects") or []),
        absolute_bounding_box=data.get("absoluteBoundingBox") or data.get("bounds"),
        properties={k: data[k] for k in PASSTHROUGH_KEYS if data.get(k) is not None},
    )
