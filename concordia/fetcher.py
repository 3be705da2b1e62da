"""Fetchers that retrieve referenced schema documents.

The resolver only depends on the ``SchemaFetcher`` protocol: a synchronous
``fetch(url)`` returning a ``FetchResult``. ``HttpSchemaFetcher`` is the
default; ``MappingSchemaFetcher`` serves documents from memory, which is
useful for import maps and tests.
"""

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Protocol
from urllib.parse import unquote, urlparse

import requests

from concordia.constants import DEFAULT_FETCH_TIMEOUT

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchResult:
    """Status code and body returned for a fetched URL."""
    status_code: int
    body: Optional[str] = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class SchemaFetcher(Protocol):
    def fetch(self, url: str) -> FetchResult:
        ...


class HttpSchemaFetcher:
    """
    Fetches 'http' and 'https' URLs with requests and 'file' URLs (or bare
    paths) from the local filesystem. A missing file is reported as 404.
    """

    def __init__(self, timeout: float = DEFAULT_FETCH_TIMEOUT,
                 session: Optional[requests.Session] = None,
                 schemes: Iterable[str] = ('http', 'https', 'file')) -> None:
        self.timeout = timeout
        self.session = session or requests.Session()
        self.schemes = set(schemes)

    def fetch(self, url: str) -> FetchResult:
        """
        Fetches the content of the given URL.

        Raises:
            requests.RequestException: If the HTTP request could not be made.
            OSError: If a local file exists but cannot be read.
            ValueError: If the URL scheme is not supported.
        """
        parsed_url = urlparse(url)
        scheme = parsed_url.scheme.lower()
        # a one-letter scheme is a Windows drive letter
        if len(scheme) == 1:
            scheme = ''
        if scheme not in self.schemes and not (scheme == '' and 'file' in self.schemes):
            raise ValueError(f"Unsupported URL scheme: {scheme or '(none)'}")

        if scheme in ('http', 'https'):
            logger.debug("GET %s", url)
            response = self.session.get(url, timeout=self.timeout)
            return FetchResult(response.status_code, response.text)

        if scheme == 'file':
            file_path = unquote(parsed_url.path)
            if parsed_url.netloc and parsed_url.netloc != 'localhost':
                file_path = parsed_url.netloc + file_path
            # On Windows, a file URL might start with a '/' but it's not part of the actual path
            if os.name == 'nt' and file_path.startswith('/'):
                file_path = file_path[1:]
        else:
            file_path = url
        if not os.path.isfile(file_path):
            logger.debug("File not found for %s", url)
            return FetchResult(404, None)
        with open(file_path, 'r', encoding='utf-8') as f:
            return FetchResult(200, f.read())


class MappingSchemaFetcher:
    """
    Serves schema documents from a URL mapping.

    Mapping values may be JSON text, a parsed JSON value (serialized on
    fetch) or a complete FetchResult. URLs that are not mapped go to the
    fallback fetcher, or are reported as 404 if there is none.
    """

    def __init__(self, mapping: Optional[Dict[str, Any]] = None,
                 fallback: Optional[SchemaFetcher] = None) -> None:
        self.mapping: Dict[str, Any] = dict(mapping or {})
        self.fallback = fallback
        self.fetched: List[str] = []

    def add(self, url: str, document: Any) -> None:
        self.mapping[url] = document

    def fetch(self, url: str) -> FetchResult:
        self.fetched.append(url)
        if url not in self.mapping:
            if self.fallback is not None:
                return self.fallback.fetch(url)
            return FetchResult(404, None)
        document = self.mapping[url]
        if isinstance(document, FetchResult):
            return document
        if document is None or isinstance(document, str):
            return FetchResult(200, document)
        return FetchResult(200, json.dumps(document))
