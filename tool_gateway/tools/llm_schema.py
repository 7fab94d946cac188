"""
LLM Schema Nodes - the restricted schema vocabulary offered to LLMs

The schema translator produces a tree of the small, immutable node types
defined here. Each node renders itself to the JSON Schema subset accepted by
OpenAI function calling and Anthropic tool use.

Rendering conventions:
- Every object property is listed in "required". A property the caller may
  omit is expressed as nullable instead (anyOf with a {"type": "null"}
  branch), and the executor strips nulls before its retry pass.
- Unions render as a flat "anyOf" whose branches each carry a "type"
  (recursive $ref branches excepted). Nested unions are flattened and
  duplicate branches removed.
- Records render with "additionalProperties" only; "propertyNames" is never
  emitted.
- Recursive definitions render under "$defs" and are referenced with
  "#/$defs/<name>".

Pattern: Value objects (frozen dataclasses)
Pattern: Composite (each node renders its children)
"""

import json
from dataclasses import dataclass, field
from typing import Any, Optional, Union


def passthrough_object_schema() -> dict[str, Any]:
    """The schema used whenever a tool's real schema cannot be offered."""
    return {"type": "object", "properties": {}, "additionalProperties": True}


class LlmNode:
    """Base class for all schema nodes."""

    def render(self) -> dict[str, Any]:
        raise NotImplementedError


# =============================================================================
# Leaves
# =============================================================================


@dataclass(frozen=True)
class LlmString(LlmNode):
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    pattern: Optional[str] = None
    format: Optional[str] = None

    def render(self) -> dict[str, Any]:
        out: dict[str, Any] = {"type": "string"}
        if self.min_length is not None:
            out["minLength"] = self.min_length
        if self.max_length is not None:
            out["maxLength"] = self.max_length
        if self.pattern is not None:
            out["pattern"] = self.pattern
        if self.format is not None:
            out["format"] = self.format
        return out


@dataclass(frozen=True)
class LlmNumber(LlmNode):
    integer: bool = False
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    exclusive_minimum: Optional[float] = None
    exclusive_maximum: Optional[float] = None
    multiple_of: Optional[float] = None

    def render(self) -> dict[str, Any]:
        out: dict[str, Any] = {"type": "integer" if self.integer else "number"}
        for key, value in (
            ("minimum", self.minimum),
            ("maximum", self.maximum),
            ("exclusiveMinimum", self.exclusive_minimum),
            ("exclusiveMaximum", self.exclusive_maximum),
            ("multipleOf", self.multiple_of),
        ):
            if value is not None:
                out[key] = value
        return out


@dataclass(frozen=True)
class LlmBoolean(LlmNode):
    def render(self) -> dict[str, Any]:
        return {"type": "boolean"}


@dataclass(frozen=True)
class LlmNever(LlmNode):
    """A schema no value satisfies."""

    def render(self) -> dict[str, Any]:
        return {"not": {}}


@dataclass(frozen=True)
class LlmEnum(LlmNode):
    """A closed set of JSON primitive values."""

    values: tuple[Any, ...]

    def render(self) -> dict[str, Any]:
        groups: dict[str, list[Any]] = {}
        for value in self.values:
            groups.setdefault(_json_type(value), []).append(_json_value(value))

        branches: list[dict[str, Any]] = []
        for json_type, values in groups.items():
            if json_type == "null":
                branches.append({"type": "null"})
            else:
                branches.append({"type": json_type, "enum": values})

        if len(branches) == 1:
            return branches[0]
        return {"anyOf": branches}


# =============================================================================
# Containers
# =============================================================================


@dataclass(frozen=True)
class LlmArray(LlmNode):
    items: LlmNode
    min_items: Optional[int] = None
    max_items: Optional[int] = None

    def render(self) -> dict[str, Any]:
        out: dict[str, Any] = {"type": "array", "items": self.items.render()}
        if self.min_items is not None:
            out["minItems"] = self.min_items
        if self.max_items is not None:
            out["maxItems"] = self.max_items
        return out


@dataclass(frozen=True)
class LlmTuple(LlmNode):
    """
    Fixed positional items, optionally followed by a repeated rest item.

    Rendered as an array of the union of all item schemas with the length
    bounds the tuple implies. Position-level typing is left to the executor.
    """

    items: tuple[LlmNode, ...]
    rest: Optional[LlmNode] = None

    def render(self) -> dict[str, Any]:
        members = list(self.items)
        if self.rest is not None:
            members.append(self.rest)

        out: dict[str, Any] = {"type": "array"}
        if members:
            out["items"] = LlmUnion(tuple(members)).render()
        else:
            out["items"] = {"type": "string"}
        if self.items:
            out["minItems"] = len(self.items)
        if self.rest is None:
            out["maxItems"] = len(self.items)
        return out


@dataclass(frozen=True)
class LlmProperty:
    name: str
    schema: LlmNode
    description: Optional[str] = None


@dataclass(frozen=True)
class LlmObject(LlmNode):
    """
    Object with named properties.

    additional is False for a closed object, True for an open one, or a node
    typing every extra key's value.
    """

    properties: tuple[LlmProperty, ...] = ()
    additional: Union[bool, LlmNode] = False

    def render(self) -> dict[str, Any]:
        properties: dict[str, Any] = {}
        for prop in self.properties:
            rendered = prop.schema.render()
            if prop.description:
                rendered["description"] = prop.description
            properties[prop.name] = rendered

        out: dict[str, Any] = {
            "type": "object",
            "properties": properties,
            "required": list(properties),
        }
        if isinstance(self.additional, LlmNode):
            out["additionalProperties"] = self.additional.render()
        else:
            out["additionalProperties"] = self.additional
        return out


@dataclass(frozen=True)
class LlmRecord(LlmNode):
    """Mapping with uniformly typed values."""

    key: LlmNode
    value: LlmNode

    def render(self) -> dict[str, Any]:
        return {"type": "object", "additionalProperties": self.value.render()}


# =============================================================================
# Combinators
# =============================================================================


@dataclass(frozen=True)
class LlmUnion(LlmNode):
    options: tuple[LlmNode, ...]

    def render(self) -> dict[str, Any]:
        branches: list[dict[str, Any]] = []
        seen: set[str] = set()
        for option in self.options:
            if isinstance(option, LlmNever):
                continue
            for branch in _branches(option.render()):
                key = json.dumps(branch, sort_keys=True, default=str)
                if key not in seen:
                    seen.add(key)
                    branches.append(branch)

        if not branches:
            return LlmNever().render()
        if len(branches) == 1:
            return branches[0]
        return {"anyOf": branches}


@dataclass(frozen=True)
class LlmNullable(LlmNode):
    inner: LlmNode

    def render(self) -> dict[str, Any]:
        if isinstance(self.inner, LlmNever):
            return {"type": "null"}
        branches = _branches(self.inner.render())
        if {"type": "null"} not in branches:
            branches.append({"type": "null"})
        return {"anyOf": branches}


@dataclass(frozen=True)
class LlmIntersection(LlmNode):
    members: tuple[LlmNode, ...]

    def render(self) -> dict[str, Any]:
        parts: list[dict[str, Any]] = []
        for member in self.members:
            rendered = member.render()
            if set(rendered) == {"allOf"}:
                parts.extend(rendered["allOf"])
            else:
                parts.append(rendered)
        if len(parts) == 1:
            return parts[0]
        return {"allOf": parts}


@dataclass(frozen=True)
class LlmRef(LlmNode):
    """Deferred reference to a named definition (recursive types)."""

    name: str

    def render(self) -> dict[str, Any]:
        return {"$ref": f"#/$defs/{self.name}"}


# =============================================================================
# Document
# =============================================================================


@dataclass(frozen=True)
class LlmSchemaDocument:
    """A translated schema: a root node plus its named definitions."""

    root: LlmNode
    definitions: dict[str, LlmNode] = field(default_factory=dict)

    def resolve(self, node: LlmNode) -> LlmNode:
        """Follow references until a concrete node is reached."""
        seen: set[str] = set()
        while isinstance(node, LlmRef) and node.name not in seen:
            seen.add(node.name)
            target = self.definitions.get(node.name)
            if target is None:
                break
            node = target
        return node

    def render(self, root: Optional[LlmNode] = None) -> dict[str, Any]:
        """
        Render the document as JSON Schema.

        Args:
            root: Node to render in place of self.root. The registry passes
                the unwrapped object root here.
        """
        out = (root or self.root).render()
        if self.definitions:
            out["$defs"] = {
                name: node.render() for name, node in self.definitions.items()
            }
        return out


# =============================================================================
# Helpers
# =============================================================================


def _branches(rendered: dict[str, Any]) -> list[dict[str, Any]]:
    if set(rendered) == {"anyOf"}:
        return list(rendered["anyOf"])
    return [rendered]


def _json_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    return "string"


def _json_value(value: Any) -> Any:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    return str(value)
