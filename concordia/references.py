"""Resolves '$ref' keywords into compiled sub-schemas.

A reference is fetched, parsed and compiled as a root document of its own,
once, while the referencing schema is compiled. Data validation only ever
uses the resulting ResolvedReference.
"""

import json
import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional

import requests

from concordia.constants import KEYWORD_REFERENCE
from concordia.errors import ReferenceResolutionError, SchemaStructureError
from concordia.schema import Kind, ResolvedReference

if TYPE_CHECKING:
    from concordia.schemavalidator import SchemaCompiler

logger = logging.getLogger(__name__)


class ReferenceResolver:
    """
    Fetches and compiles referenced documents for a SchemaCompiler.

    Bodies are cached per URL for the lifetime of the resolver. A URL that is
    referenced again while it is still being compiled is a reference cycle
    and fails resolution.
    """

    def __init__(self, compiler: 'SchemaCompiler') -> None:
        self.compiler = compiler
        self.content_cache: Dict[str, str] = {}
        self._stack: List[str] = []

    def resolve(self, fragment: Dict[str, Any], required_kind: Optional[Kind] = None,
                index: Optional[int] = None) -> Optional[ResolvedReference]:
        """
        Resolves the reference keyword of a schema fragment.

        Args:
            fragment: The JSON object that may carry a '$ref' keyword
            required_kind: Kind the referenced root must have, if any
            index: Index of the fragment in its parent's 'schema' array

        Returns:
            The resolved reference, or None if the fragment has no '$ref'.

        Raises:
            ReferenceResolutionError: If the reference cannot be resolved
        """
        if KEYWORD_REFERENCE not in fragment:
            return None
        url = fragment[KEYWORD_REFERENCE]
        if url is None:
            raise ReferenceResolutionError(
                f"The '{KEYWORD_REFERENCE}' field for the JSON object is null, which is not allowed",
                ReferenceResolutionError.REASON_MALFORMED, index=index)
        if not isinstance(url, str):
            raise ReferenceResolutionError(
                f"The '{KEYWORD_REFERENCE}' field for the JSON object must be a string "
                f"to reference an external schema", ReferenceResolutionError.REASON_MALFORMED,
                index=index)
        if url in self._stack:
            chain = ' -> '.join(self._stack + [url])
            raise ReferenceResolutionError(
                f"Reference cycle detected: {chain}", ReferenceResolutionError.REASON_CYCLE,
                url=url, index=index)

        body = self._fetch(url, index)
        try:
            document = json.loads(body)
        except json.JSONDecodeError as e:
            raise ReferenceResolutionError(
                f"The sub-schema is not valid JSON: {e}", ReferenceResolutionError.REASON_UNPARSEABLE,
                url=url, index=index, cause=e) from e

        self._stack.append(url)
        try:
            schema = self.compiler.compile(document)
        except ReferenceResolutionError as e:
            if e.hook_error:
                raise
            raise ReferenceResolutionError(
                e.message, e.reason, url=url, status_code=e.status_code, index=index,
                expected_kind=e.expected_kind, actual_kind=e.actual_kind, cause=e) from e
        except SchemaStructureError as e:
            if e.hook_error:
                raise
            raise ReferenceResolutionError(
                str(e), ReferenceResolutionError.REASON_INVALID, url=url, index=index,
                cause=e) from e
        finally:
            self._stack.pop()

        if required_kind is not None and schema.kind != required_kind:
            raise ReferenceResolutionError(
                f"The sub-schema must have a root type of '{required_kind.value}'. "
                f"Instead, it had a root type of '{schema.type_name}'",
                ReferenceResolutionError.REASON_ROOT_KIND, url=url, index=index,
                expected_kind=required_kind.value, actual_kind=schema.type_name)

        logger.debug("Resolved reference %s (root type '%s')", url, schema.type_name)
        return ResolvedReference(url=url, schema=schema)

    def _fetch(self, url: str, index: Optional[int]) -> str:
        if url in self.content_cache:
            logger.debug("Using cached body for %s", url)
            return self.content_cache[url]
        try:
            result = self.compiler.fetcher.fetch(url)
        except (requests.RequestException, OSError, ValueError) as e:
            raise ReferenceResolutionError(
                f"The sub-schema could not be retrieved: {e}",
                ReferenceResolutionError.REASON_TRANSPORT, url=url, index=index, cause=e) from e
        if not result.ok:
            raise ReferenceResolutionError(
                f"The sub-schema could not be retrieved ({result.status_code})",
                ReferenceResolutionError.REASON_STATUS, url=url,
                status_code=result.status_code, index=index)
        if not result.body:
            raise ReferenceResolutionError(
                f"The sub-schema was not returned from the remote location: {url}",
                ReferenceResolutionError.REASON_EMPTY, url=url, index=index)
        self.content_cache[url] = result.body
        return result.body
