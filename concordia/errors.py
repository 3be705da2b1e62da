"""Exceptions raised while compiling schemas and validating data.

Every failure is terminal: the first error found unwinds the whole call and
no partial results are returned. The classes carry structured context so that
callers can branch on the kind of failure without parsing messages.
"""

import json
from typing import Any, Optional


def render_fragment(fragment: Any, limit: int = 200) -> str:
    """Renders a JSON fragment for inclusion in an error message."""
    try:
        text = json.dumps(fragment, sort_keys=True)
    except (TypeError, ValueError):
        text = repr(fragment)
    if len(text) > limit:
        text = text[:limit - 3] + '...'
    return text


class ConcordiaError(Exception):
    """
    Base class for all Concordia failures.

    Attributes:
        message: Human-readable error description
        context: Optional context about where the error occurred
        cause: Optional underlying exception that caused this error
        hook_error: True when the error was raised by a schema-phase hook
    """

    hook_error = False

    def __init__(self, message: str, context: Optional[str] = None,
                 cause: Optional[BaseException] = None) -> None:
        self.message = message
        self.context = context
        self.cause = cause
        full_message = message
        if context:
            full_message = f"{message} (context: {context})"
        super().__init__(full_message)


class SchemaStructureError(ConcordiaError):
    """
    Raised when a schema document violates the Concordia meta-schema.

    Attributes:
        fragment: The JSON fragment that failed validation
        index: Index of the offending element inside a 'schema' array, if any
        field_name: Name of the offending field, if any
    """

    def __init__(self, message: str, fragment: Any = None,
                 index: Optional[int] = None, field_name: Optional[str] = None,
                 cause: Optional[BaseException] = None) -> None:
        self.fragment = fragment
        self.index = index
        self.field_name = field_name
        context = render_fragment(fragment) if fragment is not None else None
        super().__init__(message, context, cause)


class DataTypeError(ConcordiaError):
    """
    Raised when a data instance does not match a compiled schema.

    Attributes:
        path: JSON Pointer to the offending datum ('' is the document root)
        value: The offending datum
    """

    def __init__(self, message: str, path: str = '', value: Any = None,
                 cause: Optional[BaseException] = None) -> None:
        self.path = path
        self.value = value
        super().__init__(message, f"at '{path}'" if path else None, cause)


class ReferenceResolutionError(ConcordiaError):
    """
    Raised when a '$ref' keyword cannot be resolved into a valid schema.

    Attributes:
        url: The referenced URL, if it could be read
        reason: One of the REASON_* constants
        status_code: Status code returned by the fetcher, if any
        index: Index of the referencing element inside a 'schema' array
        expected_kind: Required root type name of the referenced schema
        actual_kind: Actual root type name of the referenced schema
    """

    REASON_MALFORMED = 'malformed'
    REASON_STATUS = 'status'
    REASON_EMPTY = 'empty'
    REASON_UNPARSEABLE = 'unparseable'
    REASON_INVALID = 'invalid'
    REASON_ROOT_KIND = 'root_kind'
    REASON_CYCLE = 'cycle'
    REASON_TRANSPORT = 'transport'

    def __init__(self, message: str, reason: str, url: Optional[str] = None,
                 status_code: Optional[int] = None, index: Optional[int] = None,
                 expected_kind: Optional[str] = None,
                 actual_kind: Optional[str] = None,
                 cause: Optional[BaseException] = None) -> None:
        self.reason = reason
        self.url = url
        self.status_code = status_code
        self.index = index
        self.expected_kind = expected_kind
        self.actual_kind = actual_kind
        if index is not None:
            message = f"The referenced schema was invalid at index {index}: {message}"
        super().__init__(message, url, cause)


class ConformanceError(ConcordiaError):
    """
    Raised when an extending schema does not conform to an original schema.

    Attributes:
        path: Location of the mismatch, as field names and indexes from the root
        fragment: The offending fragment of the extending schema
    """

    def __init__(self, message: str, path: str = '', fragment: Any = None) -> None:
        self.path = path
        self.fragment = fragment
        super().__init__(message, render_fragment(fragment) if fragment is not None else None)


class ExtensionHookError(ConcordiaError):
    """
    Convenience exception for extension hooks that reject a schema or a datum.

    Hooks may raise any exception; Concordia never wraps or swallows them.
    """
