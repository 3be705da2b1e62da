"""Compiled representation of Concordia schemas.

A compiled schema is a tree of frozen ``SchemaNode`` objects. The node classes
form a closed set: one class per ``Kind`` plus ``ReferenceSchema``, which
stands in an object field or array slot whose definition lives in an
externally referenced document.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Tuple

from concordia.constants import (
    KEYWORD_DOC,
    KEYWORD_NAME,
    KEYWORD_OPTIONAL,
    KEYWORD_REFERENCE,
    KEYWORD_SCHEMA,
    KEYWORD_TYPE,
    TYPE_ARRAY,
    TYPE_BOOLEAN,
    TYPE_NUMBER,
    TYPE_OBJECT,
    TYPE_STRING,
)


class Kind(Enum):
    """The five Concordia types."""
    BOOLEAN = TYPE_BOOLEAN
    NUMBER = TYPE_NUMBER
    STRING = TYPE_STRING
    OBJECT = TYPE_OBJECT
    ARRAY = TYPE_ARRAY

    @classmethod
    def from_type_name(cls, type_name: str) -> Optional['Kind']:
        """Returns the kind for a 'type' keyword value, or None if unknown."""
        for kind in cls:
            if kind.value == type_name:
                return kind
        return None


class ArrayKind(Enum):
    """The two array sub-kinds."""
    CONSTANT_TYPE = 'constant-type'
    CONSTANT_LENGTH = 'constant-length'


@dataclass(frozen=True)
class SchemaNode:
    """Attributes shared by every compiled node."""
    doc: Optional[str] = None
    optional: bool = False
    name: Optional[str] = None
    extras: Dict[str, Any] = field(default_factory=dict, hash=False)
    raw: Any = field(default=None, compare=False, repr=False)

    kind: ClassVar[Optional[Kind]] = None

    @property
    def type_name(self) -> str:
        return self.kind.value if self.kind else 'unknown'

    def target(self) -> 'SchemaNode':
        """Returns the node that defines this slot's structure."""
        return self

    def to_json(self) -> Dict[str, Any]:
        """Renders this node back into a Concordia schema fragment."""
        result: Dict[str, Any] = {}
        if self.name is not None:
            result[KEYWORD_NAME] = self.name
        result[KEYWORD_TYPE] = self.type_name
        self._options_to_json(result)
        self._body_to_json(result)
        result.update(self.extras)
        return result

    def _options_to_json(self, result: Dict[str, Any]) -> None:
        if self.doc is not None:
            result[KEYWORD_DOC] = self.doc
        if self.optional:
            result[KEYWORD_OPTIONAL] = True

    def _body_to_json(self, result: Dict[str, Any]) -> None:
        pass


@dataclass(frozen=True)
class BooleanSchema(SchemaNode):
    kind: ClassVar[Kind] = Kind.BOOLEAN


@dataclass(frozen=True)
class NumberSchema(SchemaNode):
    kind: ClassVar[Kind] = Kind.NUMBER


@dataclass(frozen=True)
class StringSchema(SchemaNode):
    kind: ClassVar[Kind] = Kind.STRING


@dataclass(frozen=True)
class FieldDef:
    """
    One entry of an object schema's 'schema' array.

    A field without a name is an unnamed aggregation: its schema is a
    ReferenceSchema whose referenced root is an object, and the referenced
    fields are merged into the enclosing level.
    """
    name: Optional[str]
    schema: SchemaNode

    @property
    def is_aggregate(self) -> bool:
        return self.name is None

    @property
    def is_reference(self) -> bool:
        return isinstance(self.schema, ReferenceSchema)


@dataclass(frozen=True)
class ObjectSchema(SchemaNode):
    fields: Tuple[FieldDef, ...] = ()

    kind: ClassVar[Kind] = Kind.OBJECT

    def aggregated_fields(self) -> List[FieldDef]:
        """Returns the named fields of this level, expanding unnamed aggregations."""
        result: List[FieldDef] = []
        for field_def in self.fields:
            if field_def.is_aggregate:
                referenced = field_def.schema.target()
                result.extend(referenced.aggregated_fields())
            else:
                result.append(field_def)
        return result

    def field_names(self) -> List[str]:
        return [field_def.name for field_def in self.aggregated_fields()]

    def get_field(self, name: str) -> Optional[FieldDef]:
        for field_def in self.aggregated_fields():
            if field_def.name == name:
                return field_def
        return None

    def _body_to_json(self, result: Dict[str, Any]) -> None:
        fields = []
        for field_def in self.fields:
            fields.append(field_def.schema.to_json())
        result[KEYWORD_SCHEMA] = fields


@dataclass(frozen=True)
class ArraySchema(SchemaNode):
    element_schema: Optional[SchemaNode] = None
    element_schemas: Optional[Tuple[SchemaNode, ...]] = None

    kind: ClassVar[Kind] = Kind.ARRAY

    @property
    def array_kind(self) -> ArrayKind:
        if self.element_schemas is not None:
            return ArrayKind.CONSTANT_LENGTH
        return ArrayKind.CONSTANT_TYPE

    def _body_to_json(self, result: Dict[str, Any]) -> None:
        if self.array_kind == ArrayKind.CONSTANT_LENGTH:
            result[KEYWORD_SCHEMA] = [element.to_json() for element in self.element_schemas]
        else:
            result[KEYWORD_SCHEMA] = self.element_schema.to_json()


@dataclass(frozen=True)
class ResolvedReference:
    """A referenced document, fetched and compiled once at compile time."""
    url: str
    schema: SchemaNode


@dataclass(frozen=True)
class ReferenceSchema(SchemaNode):
    """A slot whose definition is an externally referenced document."""
    url: str = ''
    reference: Optional[ResolvedReference] = None

    @property
    def kind(self) -> Optional[Kind]:
        if self.reference is None:
            return None
        return self.reference.schema.kind

    def target(self) -> SchemaNode:
        return self.reference.schema

    def to_json(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        if self.name is not None:
            result[KEYWORD_NAME] = self.name
        result[KEYWORD_REFERENCE] = self.url
        self._options_to_json(result)
        result.update(self.extras)
        return result
