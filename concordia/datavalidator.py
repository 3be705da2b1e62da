"""Validates JSON data instances against compiled Concordia schemas.

Validation is strict: JSON types must match exactly (a boolean is not a
number, a numeric string is not a number), a missing or null value is only
accepted where the schema marks it optional, and constant-length arrays must
match their schema's length exactly. Keys that the schema does not describe
are ignored.
"""

import json
from typing import Any, List, Optional, Union

from jsonpointer import JsonPointer

from concordia.errors import DataTypeError, render_fragment
from concordia.hooks import HookRegistry, default_registry
from concordia.schema import (
    ArrayKind,
    ArraySchema,
    Kind,
    ObjectSchema,
    ReferenceSchema,
    SchemaNode,
)

PathPart = Union[str, int]


def pointer(parts: List[PathPart]) -> str:
    """Builds a JSON Pointer from a list of keys and indexes."""
    return JsonPointer.from_parts(parts).path


class DataValidator:
    """Validates data against a compiled schema, running data-phase hooks."""

    def __init__(self, registry: Optional[HookRegistry] = None) -> None:
        self.registry = registry if registry is not None else default_registry

    def validate(self, schema: SchemaNode, data: Any) -> None:
        """Validates a datum against a compiled node.

        Raises:
            DataTypeError: If the datum does not match the schema
        """
        self._validate(schema, data, [])

    def _validate(self, schema: SchemaNode, data: Any, parts: List[PathPart]) -> None:
        if data is None:
            if schema.optional:
                return
            raise DataTypeError("The data is null and not optional", pointer(parts), data)

        if isinstance(schema, ReferenceSchema):
            self._validate(schema.target(), data, parts)
            return

        kind = schema.kind
        if kind == Kind.BOOLEAN:
            if not isinstance(data, bool):
                raise DataTypeError(
                    f"The value is not a boolean: {render_fragment(data)}", pointer(parts), data)
        elif kind == Kind.NUMBER:
            if not isinstance(data, (int, float)) or isinstance(data, bool):
                raise DataTypeError(
                    f"The value is not a number: {render_fragment(data)}", pointer(parts), data)
        elif kind == Kind.STRING:
            if not isinstance(data, str):
                raise DataTypeError(
                    f"The value is not a string: {render_fragment(data)}", pointer(parts), data)
        elif kind == Kind.OBJECT:
            self._validate_object(schema, data, parts)
        else:
            self._validate_array(schema, data, parts)

        self.registry.run_data_hook(kind, schema.raw, data)

    def _validate_object(self, schema: ObjectSchema, data: Any, parts: List[PathPart]) -> None:
        if not isinstance(data, dict):
            raise DataTypeError(
                f"The data is not a JSON object: {render_fragment(data)}", pointer(parts), data)
        for field_def in schema.fields:
            # an unnamed reference describes more fields of this same object
            if field_def.is_aggregate:
                self._validate(field_def.schema.target(), data, parts)
                continue
            if field_def.name not in data:
                if field_def.schema.optional:
                    continue
                raise DataTypeError(
                    f"The field '{field_def.name}' is missing from the data",
                    pointer(parts), data)
            self._validate(field_def.schema, data[field_def.name], parts + [field_def.name])

    def _validate_array(self, schema: ArraySchema, data: Any, parts: List[PathPart]) -> None:
        if not isinstance(data, list):
            raise DataTypeError(
                f"The data is not a JSON array: {render_fragment(data)}", pointer(parts), data)
        if schema.array_kind == ArrayKind.CONSTANT_LENGTH:
            # Trailing optional entries still have to be present, as nulls.
            if len(schema.element_schemas) != len(data):
                raise DataTypeError(
                    f"The schema array and the data array are of different lengths: "
                    f"expected {len(schema.element_schemas)}, got {len(data)}",
                    pointer(parts), data)
            for index, (element_schema, element) in enumerate(zip(schema.element_schemas, data)):
                self._validate(element_schema, element, parts + [index])
        else:
            for index, element in enumerate(data):
                self._validate(schema.element_schema, element, parts + [index])


def parse_data_document(data: Any) -> Any:
    """Parses data text if necessary and checks that the result is an object or array."""
    document = data
    if isinstance(data, (str, bytes, bytearray)):
        try:
            document = json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise DataTypeError(f"The data is not valid JSON: {e}", cause=e) from e
    check_document_root(document)
    return document


def check_document_root(document: Any) -> None:
    """Checks that an already parsed data document is a JSON object or array."""
    if not isinstance(document, (dict, list)):
        raise DataTypeError(
            "The data must either be a JSON object or a JSON array or a string "
            "representing one of the two", value=document)


def validate_data(schema: SchemaNode, data: Any, registry: Optional[HookRegistry] = None) -> Any:
    """Validates a data document against a compiled root node and returns it."""
    document = parse_data_document(data)
    DataValidator(registry).validate(schema, document)
    return document
