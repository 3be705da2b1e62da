"""Validates Concordia schema documents and compiles them into node trees.

The compiler walks the raw JSON document top-down, dispatching on the 'type'
keyword. Slots that carry a '$ref' keyword are handed to the reference
resolver, which fetches and compiles the referenced document with this same
compiler. The first violation raises a SchemaStructureError (or a
ReferenceResolutionError for a broken reference).
"""

import copy
import json
import logging
from typing import Any, Dict, List, Optional, Set

from concordia.constants import (
    CORE_KEYWORDS,
    KEYWORD_DOC,
    KEYWORD_NAME,
    KEYWORD_OPTIONAL,
    KEYWORD_SCHEMA,
    KEYWORD_TYPE,
    ROOT_TYPES,
)
from concordia.errors import ConcordiaError, SchemaStructureError
from concordia.fetcher import HttpSchemaFetcher, SchemaFetcher
from concordia.hooks import HookRegistry, default_registry
from concordia.references import ReferenceResolver
from concordia.schema import (
    ArraySchema,
    BooleanSchema,
    FieldDef,
    Kind,
    NumberSchema,
    ObjectSchema,
    ReferenceSchema,
    ResolvedReference,
    SchemaNode,
    StringSchema,
)

logger = logging.getLogger(__name__)


def parse_schema_document(schema: Any) -> Dict[str, Any]:
    """Parses schema text if necessary and checks that the result is a JSON object.

    Dictionaries are deep-copied so the compiled schema owns its fragments.
    """
    document = schema
    if isinstance(schema, (str, bytes, bytearray)):
        try:
            document = json.loads(schema)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise SchemaStructureError(f"The schema is not valid JSON: {e}", cause=e) from e
    else:
        document = copy.deepcopy(schema)
    if not isinstance(document, dict):
        raise SchemaStructureError(
            "The schema must either be a JSON object or a string representing a JSON object.",
            fragment=document)
    return document


class SchemaCompiler:
    """
    Compiles schema documents.

    One compiler is used for a root document and for every document it
    references, so that all of them share the hook registry, the fetcher and
    the resolver's cycle detection and body cache.
    """

    def __init__(self, registry: Optional[HookRegistry] = None,
                 fetcher: Optional[SchemaFetcher] = None) -> None:
        self.registry = registry if registry is not None else default_registry
        self.fetcher = fetcher if fetcher is not None else HttpSchemaFetcher()
        self.resolver = ReferenceResolver(self)

    def compile(self, schema: Any) -> SchemaNode:
        """Validates a root schema document and returns its compiled root node.

        Args:
            schema: JSON text or an already parsed JSON object

        Raises:
            SchemaStructureError: If the document violates the meta-schema
            ReferenceResolutionError: If a referenced schema cannot be used
        """
        document = parse_schema_document(schema)
        self._validate_root(document)
        return self._compile_node(document, None)

    def _validate_root(self, document: Dict[str, Any]) -> None:
        if KEYWORD_TYPE not in document:
            raise SchemaStructureError(
                f"The root object's '{KEYWORD_TYPE}' field is missing", fragment=document)
        root_type = document[KEYWORD_TYPE]
        if root_type is None:
            raise SchemaStructureError(
                f"The root object's '{KEYWORD_TYPE}' field cannot be null", fragment=document)
        if not isinstance(root_type, str):
            raise SchemaStructureError(
                f"The root object's '{KEYWORD_TYPE}' field must be a string", fragment=document)
        if root_type not in ROOT_TYPES:
            raise SchemaStructureError(
                f"The root object's '{KEYWORD_TYPE}' field must either be "
                f"'{ROOT_TYPES[0]}' or '{ROOT_TYPES[1]}'", fragment=document)
        if KEYWORD_OPTIONAL in document:
            raise SchemaStructureError(
                f"The '{KEYWORD_OPTIONAL}' field is not allowed at the root of the definition",
                fragment=document)

    def _compile_node(self, obj: Dict[str, Any], name: Optional[str]) -> SchemaNode:
        if KEYWORD_TYPE not in obj:
            raise SchemaStructureError(
                f"The '{KEYWORD_TYPE}' field is missing", fragment=obj, field_name=name)
        type_name = obj[KEYWORD_TYPE]
        if type_name is None:
            raise SchemaStructureError(
                f"The '{KEYWORD_TYPE}' field cannot be null", fragment=obj, field_name=name)
        if not isinstance(type_name, str):
            raise SchemaStructureError(
                f"The '{KEYWORD_TYPE}' field is not a string", fragment=obj, field_name=name)
        kind = Kind.from_type_name(type_name)
        if kind is None:
            raise SchemaStructureError(
                f"The schema declares an unknown type: {type_name}", fragment=obj, field_name=name)

        if kind == Kind.BOOLEAN:
            node = BooleanSchema(**self._options(obj, name))
        elif kind == Kind.NUMBER:
            node = NumberSchema(**self._options(obj, name))
        elif kind == Kind.STRING:
            node = StringSchema(**self._options(obj, name))
        elif kind == Kind.OBJECT:
            node = self._compile_object(obj, name)
        else:
            node = self._compile_array(obj, name)

        try:
            self.registry.run_schema_hook(kind, obj)
        except ConcordiaError as e:
            # reference resolution must not wrap a hook's own error
            e.hook_error = True
            raise
        return node

    def _require_schema_keyword(self, obj: Dict[str, Any], name: Optional[str]) -> Any:
        if KEYWORD_SCHEMA not in obj:
            raise SchemaStructureError(
                f"The '{KEYWORD_SCHEMA}' field is missing", fragment=obj, field_name=name)
        value = obj[KEYWORD_SCHEMA]
        if value is None:
            raise SchemaStructureError(
                f"The '{KEYWORD_SCHEMA}' field's value is null", fragment=obj, field_name=name)
        return value

    def _compile_object(self, obj: Dict[str, Any], name: Optional[str]) -> ObjectSchema:
        elements = self._require_schema_keyword(obj, name)
        if not isinstance(elements, list):
            raise SchemaStructureError(
                f"The '{KEYWORD_SCHEMA}' field's value must be a JSON array",
                fragment=obj, field_name=name)

        names: Set[str] = set()
        fields: List[FieldDef] = []
        for index, element in enumerate(elements):
            self._check_element(element, index, obj)
            if KEYWORD_NAME in element:
                field_name = element[KEYWORD_NAME]
                if field_name is None:
                    raise SchemaStructureError(
                        f"The '{KEYWORD_NAME}' field for the JSON object at index {index} is null",
                        fragment=obj, index=index)
                if not isinstance(field_name, str):
                    raise SchemaStructureError(
                        f"The type of the '{KEYWORD_NAME}' field for the JSON object at "
                        f"index {index} is not a string", fragment=obj, index=index)
                self._claim_name(names, field_name, obj, index)
                fields.append(FieldDef(field_name, self._compile_slot(element, index, field_name)))
                continue

            reference = self.resolver.resolve(element, required_kind=Kind.OBJECT, index=index)
            if reference is None:
                raise SchemaStructureError(
                    f"The '{KEYWORD_NAME}' field for the JSON object at index {index} is missing",
                    fragment=obj, index=index)
            node = self._reference_node(element, reference, None)
            if node.optional:
                logger.warning("'%s' has no effect on an unnamed reference: %s",
                               KEYWORD_OPTIONAL, reference.url)
            for aggregated_name in reference.schema.field_names():
                self._claim_name(names, aggregated_name, obj, index)
            fields.append(FieldDef(None, node))

        return ObjectSchema(fields=tuple(fields), **self._options(obj, name))

    def _compile_array(self, obj: Dict[str, Any], name: Optional[str]) -> ArraySchema:
        definition = self._require_schema_keyword(obj, name)
        # a JSON array defines a constant-length array, a JSON object a constant-type array
        if isinstance(definition, list):
            element_schemas = []
            for index, element in enumerate(definition):
                self._check_element(element, index, obj)
                element_schemas.append(self._compile_slot(element, index, None))
            return ArraySchema(element_schemas=tuple(element_schemas), **self._options(obj, name))
        if isinstance(definition, dict):
            element_schema = self._compile_slot(definition, None, None)
            return ArraySchema(element_schema=element_schema, **self._options(obj, name))
        raise SchemaStructureError(
            f"The '{KEYWORD_SCHEMA}' field's type must be either an array or an object",
            fragment=obj, field_name=name)

    def _check_element(self, element: Any, index: int, parent: Dict[str, Any]) -> None:
        if element is None:
            raise SchemaStructureError(
                f"The element at index {index} of the '{KEYWORD_SCHEMA}' field is null",
                fragment=parent, index=index)
        if not isinstance(element, dict):
            raise SchemaStructureError(
                f"The element at index {index} of the '{KEYWORD_SCHEMA}' field is not a JSON object",
                fragment=parent, index=index)

    def _claim_name(self, names: Set[str], field_name: str, obj: Dict[str, Any], index: int) -> None:
        if field_name in names:
            raise SchemaStructureError(
                f"The field '{field_name}' is defined multiple times",
                fragment=obj, index=index, field_name=field_name)
        names.add(field_name)

    def _compile_slot(self, element: Dict[str, Any], index: Optional[int],
                      name: Optional[str]) -> SchemaNode:
        """Compiles an object field or array slot, which may be a reference."""
        reference = self.resolver.resolve(element, index=index)
        if reference is not None:
            return self._reference_node(element, reference, name)
        return self._compile_node(element, name)

    def _reference_node(self, element: Dict[str, Any], reference: ResolvedReference,
                        name: Optional[str]) -> ReferenceSchema:
        return ReferenceSchema(url=reference.url, reference=reference,
                               **self._options(element, name))

    def _options(self, obj: Dict[str, Any], name: Optional[str]) -> Dict[str, Any]:
        """Validates the options common to every type and returns the node attributes."""
        doc = obj.get(KEYWORD_DOC)
        if KEYWORD_DOC in obj and not isinstance(doc, str):
            raise SchemaStructureError(
                f"The '{KEYWORD_DOC}' field's value must be of type string",
                fragment=obj, field_name=name)
        optional = obj.get(KEYWORD_OPTIONAL, False)
        if not isinstance(optional, bool):
            raise SchemaStructureError(
                f"The '{KEYWORD_OPTIONAL}' field's value must be of type boolean",
                fragment=obj, field_name=name)
        extras = {key: value for key, value in obj.items() if key not in CORE_KEYWORDS}
        return {
            'doc': doc,
            'optional': optional,
            'name': name,
            'extras': extras,
            'raw': obj,
        }


def compile_schema(schema: Any, registry: Optional[HookRegistry] = None,
                   fetcher: Optional[SchemaFetcher] = None) -> SchemaNode:
    """Compiles a schema document into its root node."""
    return SchemaCompiler(registry, fetcher).compile(schema)
