"""Checks that one compiled schema extends (conforms to) another.

An extending schema conforms to an original when every datum described by
the original's structure is described the same way by the extender: same
kinds, same array sub-kinds and lengths, every required original field
present, and no field made optional that the original requires. The
extender may add fields and may make optional fields required.

Both schemas must be compiled, so every reference is already resolved;
reference slots are compared through the root of the document they refer
to, using the slot's own 'optional' flag.
"""

from typing import List

from concordia.datavalidator import PathPart, pointer
from concordia.errors import ConformanceError
from concordia.schema import ArrayKind, ArraySchema, Kind, ObjectSchema, SchemaNode


def _describe(kind: Kind) -> str:
    article = 'an' if kind.value[0] in 'aeiou' else 'a'
    return f"{article} {kind.value}"


class ConformanceChecker:
    """Recursively compares an original schema with an extending schema."""

    def check(self, original: SchemaNode, extender: SchemaNode) -> None:
        """
        Raises:
            ConformanceError: If the extender does not conform to the original
        """
        self._check(original, extender, [])

    def _check(self, original: SchemaNode, extender: SchemaNode, parts: List[PathPart]) -> None:
        original_target = original.target()
        extender_target = extender.target()
        kind = original_target.kind
        if extender_target.kind != kind:
            raise ConformanceError(
                f"The original schema defined {_describe(kind)}, but the extending schema does not",
                pointer(parts), extender_target.raw)

        if kind == Kind.OBJECT:
            self._check_object(original_target, extender_target, parts)
        elif kind == Kind.ARRAY:
            self._check_array(original_target, extender_target, parts)

        self._check_options(original, extender, parts)

    def _check_object(self, original: ObjectSchema, extender: ObjectSchema,
                      parts: List[PathPart]) -> None:
        extender_fields = {field_def.name: field_def for field_def in extender.aggregated_fields()}
        for original_field in original.aggregated_fields():
            extender_field = extender_fields.get(original_field.name)
            if extender_field is None:
                if original_field.schema.optional:
                    continue
                raise ConformanceError(
                    f"The original schema has a field that is not optional and not found "
                    f"in the extending schema ('{original_field.name}')",
                    pointer(parts), extender.raw)
            self._check(original_field.schema, extender_field.schema, parts + [original_field.name])

    def _check_array(self, original: ArraySchema, extender: ArraySchema,
                     parts: List[PathPart]) -> None:
        if original.array_kind != extender.array_kind:
            raise ConformanceError(
                f"The original schema defined a {original.array_kind.value} array, "
                f"but the extending schema did not", pointer(parts), extender.raw)
        if original.array_kind == ArrayKind.CONSTANT_TYPE:
            self._check(original.element_schema, extender.element_schema, parts + ['*'])
            return
        if len(original.element_schemas) != len(extender.element_schemas):
            raise ConformanceError(
                f"The original schema and the extending schema are different lengths: "
                f"{len(original.element_schemas)} and {len(extender.element_schemas)}",
                pointer(parts), extender.raw)
        for index, (original_element, extender_element) in enumerate(
                zip(original.element_schemas, extender.element_schemas)):
            self._check(original_element, extender_element, parts + [index])

    def _check_options(self, original: SchemaNode, extender: SchemaNode,
                       parts: List[PathPart]) -> None:
        # an extender may only narrow optionality, never widen it
        if not original.optional and extender.optional:
            raise ConformanceError(
                "The original schema did not allow a field to be optional, but the "
                "extending schema does", pointer(parts), extender.raw)


def conforms_to(original: SchemaNode, extender: SchemaNode) -> None:
    """Raises ConformanceError if 'extender' does not conform to 'original'."""
    ConformanceChecker().check(original, extender)
