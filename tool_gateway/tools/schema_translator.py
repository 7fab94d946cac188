"""
Schema Translator - pydantic core schemas to LLM schema nodes

This module converts the validation schema of a tool (any type pydantic's
TypeAdapter accepts, usually a BaseModel subclass) into the restricted
vocabulary of tool_gateway.tools.llm_schema.

The walk is over pydantic-core's CoreSchema: a tagged union of dicts
discriminated by their "type" key. The translation is lossy on purpose.
Whatever the LLM-facing schema cannot express is widened, never narrowed;
the executor re-validates every call against the original type, so the
translated schema only has to guide the model, not police it.

Node policy:
- Temporal leaves (date, datetime, time, timedelta) become non-empty strings
  with a format hint.
- "any", unknown node kinds, and transforms whose input shape cannot be
  recovered become the bounded unknown shape: a nullable union of string,
  number, boolean, array of primitives, and open object.
- Wrappers (default, nullable, custom-error) are unwrapped. A default makes
  the value omittable, which is expressed as nullable.
- Transforms (function-*, chain) translate their non-transform side.
- Recursive definitions are translated once per reference and emitted as
  named definitions.

Pattern: Recursive descent over a tagged union
Pattern: Pure function (per-call state lives in a throwaway _Translation)
"""

import re
from enum import Enum
from typing import Any, Optional

from pydantic import TypeAdapter

from tool_gateway.tools.llm_schema import (
    LlmArray,
    LlmBoolean,
    LlmEnum,
    LlmIntersection,
    LlmNever,
    LlmNode,
    LlmNullable,
    LlmNumber,
    LlmObject,
    LlmProperty,
    LlmRecord,
    LlmRef,
    LlmSchemaDocument,
    LlmString,
    LlmTuple,
    LlmUnion,
)

CoreSchema = dict[str, Any]

TRANSFORM_TYPES = frozenset(
    {"function-after", "function-before", "function-wrap", "function-plain", "chain"}
)

_TEMPORAL_FORMATS = {
    "date": "date",
    "datetime": "date-time",
    "time": "time",
    "timedelta": "duration",
}

_STRING_FORMATS = {
    "str": None,
    "bytes": None,
    "json": None,
    "complex": None,
    "uuid": "uuid",
    "url": "uri",
    "multi-host-url": "uri",
}

_PRIMITIVE = LlmUnion((LlmString(), LlmNumber(), LlmBoolean()))

# Nullable union of every JSON shape, one level deep.
BOUNDED_UNKNOWN: LlmNode = LlmNullable(
    LlmUnion(
        (
            LlmString(),
            LlmNumber(),
            LlmBoolean(),
            LlmArray(items=_PRIMITIVE),
            LlmObject(additional=True),
        )
    )
)

_DEFINITION_NAME = re.compile(r"[^A-Za-z0-9_.-]+")


# =============================================================================
# Public API
# =============================================================================


def translate_core_schema(schema: CoreSchema) -> LlmSchemaDocument:
    """
    Translate a pydantic core schema.

    Args:
        schema: A CoreSchema, e.g. TypeAdapter(Model).core_schema.

    Returns:
        LlmSchemaDocument with the translated root and any recursive
        definitions.
    """
    return _Translation().run(schema)


def translate_type(tp: Any) -> LlmSchemaDocument:
    """
    Translate a Python type.

    Args:
        tp: Anything TypeAdapter accepts, or a TypeAdapter.

    Returns:
        LlmSchemaDocument for the type.

    Example:
        >>> class Args(BaseModel):
        ...     limit: int = 10
        >>> translate_type(Args).render()["properties"]["limit"]
        {'anyOf': [{'type': 'integer'}, {'type': 'null'}]}
    """
    adapter = tp if isinstance(tp, TypeAdapter) else TypeAdapter(tp)
    return translate_core_schema(adapter.core_schema)


def plain_side(schema: CoreSchema) -> Optional[CoreSchema]:
    """
    Find the non-transform schema behind a transform node.

    - function-after: the validated input schema.
    - function-before / function-wrap: the declared JSON input schema, else
      the inner schema.
    - function-plain: the declared JSON input schema, else nothing.
    - chain: the first step, then the last step.

    Returns:
        The plain schema, or None when none can be recovered.
    """
    schema_type = schema.get("type")
    if schema_type == "function-after":
        return schema["schema"]
    if schema_type in ("function-before", "function-wrap"):
        return schema.get("json_schema_input_schema") or schema["schema"]
    if schema_type == "function-plain":
        return schema.get("json_schema_input_schema")
    if schema_type == "chain":
        steps = schema.get("steps") or []
        for step in steps[:1] + steps[-1:]:
            side = plain_side(step) if step.get("type") in TRANSFORM_TYPES else step
            if side is not None:
                return side
        return None
    return schema


# =============================================================================
# Translation State
# =============================================================================


class _Translation:
    """
    One translation run.

    Attributes:
        _raw_definitions: ref -> core schema, gathered from "definitions"
            nodes and from any node carrying a "ref".
        _names: ref -> definition name in the output document.
        _translated: definition name -> translated node.
    """

    def __init__(self) -> None:
        self._raw_definitions: dict[str, CoreSchema] = {}
        self._names: dict[str, str] = {}
        self._translated: dict[str, LlmNode] = {}

    def run(self, schema: CoreSchema) -> LlmSchemaDocument:
        root = self.visit(schema)
        return LlmSchemaDocument(root=root, definitions=dict(self._translated))

    # =========================================================================
    # Dispatch
    # =========================================================================

    def visit(self, schema: CoreSchema) -> LlmNode:
        ref = schema.get("ref")
        if ref is not None:
            self._raw_definitions.setdefault(ref, schema)

        schema_type = schema.get("type")

        if schema_type in _TEMPORAL_FORMATS:
            return LlmString(min_length=1, format=_TEMPORAL_FORMATS[schema_type])
        if schema_type in _STRING_FORMATS:
            return self._string(schema, _STRING_FORMATS[schema_type])
        if schema_type in ("int", "float", "decimal"):
            return self._number(schema)
        if schema_type == "bool":
            return LlmBoolean()
        if schema_type == "none":
            return LlmNullable(LlmNever())
        if schema_type == "literal":
            return LlmEnum(tuple(_plain_value(v) for v in schema.get("expected", [])))
        if schema_type == "enum":
            return LlmEnum(tuple(member.value for member in schema.get("members", [])))

        if schema_type in ("default", "nullable"):
            return LlmNullable(self.visit(schema["schema"]))
        if schema_type == "custom-error":
            return self.visit(schema["schema"])
        if schema_type == "lax-or-strict":
            return self.visit(schema["lax_schema"])
        if schema_type == "json-or-python":
            return self.visit(schema["json_schema"])

        if schema_type in ("list", "set", "frozenset", "generator"):
            return self._array(schema)
        if schema_type == "tuple":
            return self._tuple(schema)
        if schema_type == "dict":
            return self._dict(schema)
        if schema_type in ("union", "tagged-union"):
            return self._union(schema)

        if schema_type == "model":
            return self._model(schema)
        if schema_type == "model-fields":
            return self._model_fields(schema, None)
        if schema_type == "typed-dict":
            return self._typed_dict(schema)
        if schema_type == "dataclass":
            return self._dataclass(schema)
        if schema_type == "dataclass-args":
            return self._dataclass_args(schema, None)

        if schema_type == "definitions":
            for definition in schema.get("definitions", []):
                self._raw_definitions.setdefault(definition["ref"], definition)
            return self.visit(schema["schema"])
        if schema_type == "definition-ref":
            return self._definition_ref(schema)

        if schema_type == "chain" and not any(
            step.get("type") in TRANSFORM_TYPES for step in schema.get("steps", [])
        ):
            return self._intersection(schema["steps"])
        if schema_type in TRANSFORM_TYPES:
            side = plain_side(schema)
            return BOUNDED_UNKNOWN if side is None else self.visit(side)

        # any, is-instance, callable, arguments, call, ...
        return BOUNDED_UNKNOWN

    # =========================================================================
    # Leaves
    # =========================================================================

    def _string(self, schema: CoreSchema, fmt: Optional[str]) -> LlmNode:
        if schema["type"] != "str":
            return LlmString(format=fmt)
        pattern = schema.get("pattern")
        return LlmString(
            min_length=schema.get("min_length"),
            max_length=schema.get("max_length"),
            pattern=pattern if isinstance(pattern, str) else None,
        )

    def _number(self, schema: CoreSchema) -> LlmNode:
        return LlmNumber(
            integer=schema["type"] == "int",
            minimum=_bound(schema.get("ge")),
            maximum=_bound(schema.get("le")),
            exclusive_minimum=_bound(schema.get("gt")),
            exclusive_maximum=_bound(schema.get("lt")),
            multiple_of=_bound(schema.get("multiple_of")),
        )

    # =========================================================================
    # Containers
    # =========================================================================

    def _array(self, schema: CoreSchema) -> LlmNode:
        items_schema = schema.get("items_schema")
        items = self.visit(items_schema) if items_schema else BOUNDED_UNKNOWN
        return LlmArray(
            items=items,
            min_items=schema.get("min_length"),
            max_items=schema.get("max_length"),
        )

    def _tuple(self, schema: CoreSchema) -> LlmNode:
        items = [self.visit(item) for item in schema.get("items_schema", [])]
        variadic = schema.get("variadic_item_index")
        if variadic is None:
            return LlmTuple(items=tuple(items))
        rest = items.pop(variadic)
        return LlmTuple(items=tuple(items), rest=rest)

    def _dict(self, schema: CoreSchema) -> LlmNode:
        keys_schema = schema.get("keys_schema")
        values_schema = schema.get("values_schema")
        return LlmRecord(
            key=self.visit(keys_schema) if keys_schema else LlmString(),
            value=self.visit(values_schema) if values_schema else BOUNDED_UNKNOWN,
        )

    def _union(self, schema: CoreSchema) -> LlmNode:
        choices = schema.get("choices", [])
        if isinstance(choices, dict):
            choices = list(choices.values())

        options = []
        for choice in choices:
            choice_schema = choice[0] if isinstance(choice, tuple) else choice
            option = self.visit(choice_schema)
            if not isinstance(option, LlmNever):
                options.append(option)

        if not options:
            return LlmNever()
        if len(options) == 1:
            return options[0]
        return LlmUnion(tuple(options))

    def _intersection(self, steps: list[CoreSchema]) -> LlmNode:
        members = tuple(self.visit(step) for step in steps)
        if len(members) == 1:
            return members[0]
        return LlmIntersection(members)

    # =========================================================================
    # Objects
    # =========================================================================

    def _model(self, schema: CoreSchema) -> LlmNode:
        inner = schema["schema"]
        if schema.get("root_model"):
            return self.visit(inner)

        extra = (schema.get("config") or {}).get("extra_fields_behavior")
        inner = _peel_transforms(inner)
        if inner.get("type") == "model-fields":
            return self._model_fields(inner, extra)
        return self.visit(inner)

    def _model_fields(self, schema: CoreSchema, extra: Optional[str]) -> LlmNode:
        properties = [
            self._property(name, field)
            for name, field in schema.get("fields", {}).items()
        ]
        return LlmObject(
            properties=tuple(properties),
            additional=self._additional(
                schema.get("extra_behavior") or extra, schema.get("extras_schema")
            ),
        )

    def _typed_dict(self, schema: CoreSchema) -> LlmNode:
        total = schema.get("total", True)
        properties = []
        for name, field in schema.get("fields", {}).items():
            omittable = not field.get("required", total)
            properties.append(self._property(name, field, omittable))

        extra = schema.get("extra_behavior") or (schema.get("config") or {}).get(
            "extra_fields_behavior"
        )
        return LlmObject(
            properties=tuple(properties),
            additional=self._additional(extra, schema.get("extras_schema")),
        )

    def _dataclass(self, schema: CoreSchema) -> LlmNode:
        extra = (schema.get("config") or {}).get("extra_fields_behavior")
        inner = _peel_transforms(schema["schema"])
        if inner.get("type") == "dataclass-args":
            return self._dataclass_args(inner, extra)
        return self.visit(inner)

    def _dataclass_args(self, schema: CoreSchema, extra: Optional[str]) -> LlmNode:
        properties = [
            self._property(field["name"], field)
            for field in schema.get("fields", [])
            if field.get("init", True) is not False
        ]
        return LlmObject(
            properties=tuple(properties),
            additional=self._additional(schema.get("extra_behavior") or extra, None),
        )

    def _property(
        self, name: str, field: CoreSchema, omittable: bool = False
    ) -> LlmProperty:
        node = self.visit(field["schema"])
        if omittable and not isinstance(node, LlmNullable):
            node = LlmNullable(node)
        return LlmProperty(
            name=_property_name(name, field),
            schema=node,
            description=_description(field),
        )

    def _additional(
        self, extra: Optional[str], extras_schema: Optional[CoreSchema]
    ) -> Any:
        if extra != "allow":
            return False
        if extras_schema is None:
            return True
        catch_all = self.visit(extras_schema)
        if isinstance(catch_all, LlmNever):
            return False
        return catch_all

    # =========================================================================
    # Recursion
    # =========================================================================

    def _definition_ref(self, schema: CoreSchema) -> LlmNode:
        ref = schema["schema_ref"]
        if ref in self._names:
            return LlmRef(self._names[ref])

        target = self._raw_definitions.get(ref)
        if target is None:
            return BOUNDED_UNKNOWN

        # The name is assigned before descending, so a cycle back to this ref
        # resolves to LlmRef instead of recursing.
        name = self._assign_name(ref, target)
        self._translated[name] = self.visit(target)
        return LlmRef(name)

    def _assign_name(self, ref: str, target: CoreSchema) -> str:
        cls = target.get("cls")
        base = getattr(cls, "__name__", None) or ref.split(":", 1)[0].rsplit(".", 1)[-1]
        base = _DEFINITION_NAME.sub("_", base) or "Definition"

        name = base
        taken = set(self._names.values())
        suffix = 2
        while name in taken:
            name = f"{base}_{suffix}"
            suffix += 1
        self._names[ref] = name
        return name


# =============================================================================
# Helpers
# =============================================================================


def _peel_transforms(schema: CoreSchema) -> CoreSchema:
    """Strip model/dataclass validator wrappers around the fields schema."""
    while schema.get("type") in ("function-after", "function-before", "function-wrap"):
        schema = schema["schema"]
    return schema


def _property_name(name: str, field: CoreSchema) -> str:
    alias = field.get("validation_alias")
    if isinstance(alias, str):
        return alias
    if isinstance(alias, list) and alias:
        paths = alias if isinstance(alias[0], list) else [alias]
        for path in paths:
            if len(path) == 1 and isinstance(path[0], str):
                return path[0]
    return name


def _description(field: CoreSchema) -> Optional[str]:
    metadata = field.get("metadata") or {}
    updates = metadata.get("pydantic_js_updates") or {}
    description = updates.get("description")
    return description if isinstance(description, str) else None


def _bound(value: Any) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _plain_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value
