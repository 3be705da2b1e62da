"""The compiled schema handle."""

import logging
from typing import Any, Dict, Optional

from concordia.conformance import conforms_to
from concordia.datavalidator import validate_data
from concordia.errors import ConformanceError, SchemaStructureError
from concordia.fetcher import SchemaFetcher
from concordia.hooks import HookRegistry, default_registry
from concordia.schema import SchemaNode
from concordia.schemavalidator import SchemaCompiler

logger = logging.getLogger(__name__)


class Concordia:
    """
    A validated, reference-resolved Concordia schema.

    Construction validates the schema document and resolves every reference
    in it; an invalid document raises and no object is created. The compiled
    schema never changes afterwards.

    Args:
        schema: A JSON object, or JSON text representing one
        registry: Hook registry to consult; the process-wide one by default
        fetcher: Fetcher for referenced schemas; HTTP and files by default
    """

    def __init__(self, schema: Any, registry: Optional[HookRegistry] = None,
                 fetcher: Optional[SchemaFetcher] = None) -> None:
        if schema is None:
            raise SchemaStructureError("The schema is null.")
        self.registry = registry if registry is not None else default_registry
        compiler = SchemaCompiler(self.registry, fetcher)
        self.fetcher = compiler.fetcher
        self._schema = compiler.compile(schema)
        logger.debug("Compiled schema with root type '%s'", self._schema.type_name)

    @property
    def schema(self) -> SchemaNode:
        """The compiled root node."""
        return self._schema

    def validate_data(self, data: Any) -> Any:
        """
        Validates a data instance against this schema.

        Args:
            data: A JSON object or array, or JSON text representing one

        Returns:
            The validated data; the parsed value if text was given.

        Raises:
            DataTypeError: If the data does not match the schema
        """
        return validate_data(self._schema, data, self.registry)

    def conforms_to(self, original: Any) -> None:
        """
        Verifies that this schema extends the given original schema.

        Args:
            original: A Concordia object, or a schema document that is compiled
                with this object's registry and fetcher

        Raises:
            ConformanceError: If this schema does not conform to the original
        """
        if original is None:
            raise ConformanceError("The original schema is null.")
        if not isinstance(original, Concordia):
            original = Concordia(original, self.registry, self.fetcher)
        conforms_to(original.schema, self._schema)

    def to_json(self) -> Dict[str, Any]:
        """Renders the compiled schema back into a schema document."""
        return self._schema.to_json()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Concordia):
            return NotImplemented
        return self._schema == other._schema

    __hash__ = None

    def __repr__(self) -> str:
        return f"Concordia(type={self._schema.type_name!r})"
