"""Validates JSON instance files against Concordia schema files.

This module backs the command line: it loads schema and instance files,
runs compilation, data validation and conformance checks, and reports
results.
"""

import json
import logging
import sys
from typing import Any, List, Optional, Tuple

from concordia.compiled import Concordia
from concordia.constants import DEFAULT_FETCH_TIMEOUT, TYPE_ARRAY
from concordia.datavalidator import DataValidator, check_document_root
from concordia.errors import ConcordiaError
from concordia.fetcher import HttpSchemaFetcher, SchemaFetcher

logger = logging.getLogger(__name__)


class ValidationResult:
    """Result of validating a JSON instance against a schema."""

    def __init__(self, is_valid: bool, errors: List[str] = None, instance_path: str = None):
        self.is_valid = is_valid
        self.errors = errors or []
        self.instance_path = instance_path

    def __str__(self) -> str:
        if self.is_valid:
            return "✓ Valid" + (f": {self.instance_path}" if self.instance_path else "")
        prefix = f"{self.instance_path}: " if self.instance_path else ""
        return f"✗ Invalid: {prefix}" + "; ".join(self.errors)

    def __repr__(self) -> str:
        return f"ValidationResult(is_valid={self.is_valid}, errors={self.errors})"


def load_schema_file(schema_file: str, fetcher: Optional[SchemaFetcher] = None) -> Concordia:
    """Reads and compiles a schema file.

    Raises:
        ConcordiaError: If the schema is invalid
        OSError: If the file cannot be read
    """
    with open(schema_file, 'r', encoding='utf-8') as f:
        text = f.read()
    return Concordia(text, fetcher=fetcher)


def validate_instance(instance: Any, schema: Concordia) -> ValidationResult:
    """Validates a parsed JSON instance against a compiled schema.

    The instance is used as is: a string is a string, not JSON text.

    Returns:
        ValidationResult with validation status and the error, if any
    """
    try:
        check_document_root(instance)
        DataValidator(schema.registry).validate(schema.schema, instance)
        return ValidationResult(is_valid=True)
    except ConcordiaError as e:
        return ValidationResult(is_valid=False, errors=[str(e)])


def read_instances(instance_file: str, schema_is_array: bool) -> List[Tuple[Any, str]]:
    """Reads the instances of a JSON (single value or array) or JSONL file.

    A top-level array is a single instance when the schema's root is an
    array, and a list of instances otherwise. A JSONL line that does not
    parse is returned as its JSONDecodeError.
    """
    with open(instance_file, 'r', encoding='utf-8') as f:
        content = f.read().strip()

    try:
        data = json.loads(content)
        if isinstance(data, list) and not schema_is_array:
            return [(item, f"{instance_file}[{i}]") for i, item in enumerate(data)]
        return [(data, instance_file)]
    except json.JSONDecodeError:
        pass

    instances = []
    for i, line in enumerate(content.split('\n')):
        line = line.strip()
        if not line:
            continue
        try:
            instances.append((json.loads(line), f"{instance_file}:{i+1}"))
        except json.JSONDecodeError as e:
            logger.debug("Line %d of %s is not JSON: %s", i + 1, instance_file, e)
            instances.append((e, f"{instance_file}:{i+1}"))
    return instances


def validate_file(instance_file: str, schema: Concordia) -> List[ValidationResult]:
    """Validates the instance(s) in a file against a compiled schema.

    Returns:
        List of ValidationResult for each instance in the file
    """
    schema_is_array = schema.schema.type_name == TYPE_ARRAY
    results = []
    for instance, path in read_instances(instance_file, schema_is_array):
        if isinstance(instance, json.JSONDecodeError):
            result = ValidationResult(is_valid=False, errors=[f"The line is not valid JSON: {instance}"])
        else:
            result = validate_instance(instance, schema)
        result.instance_path = path
        results.append(result)
    return results


def validate_json_instances(
    input_files: List[str],
    schema_file: str,
    verbose: bool = False,
    fetcher: Optional[SchemaFetcher] = None
) -> Tuple[int, int]:
    """Validates multiple JSON instance files against a schema file.

    Returns:
        Tuple of (valid_count, invalid_count)
    """
    schema = load_schema_file(schema_file, fetcher)
    valid_count = 0
    invalid_count = 0

    for input_file in input_files:
        for result in validate_file(input_file, schema):
            if result.is_valid:
                valid_count += 1
            else:
                invalid_count += 1
            if verbose:
                print(result)

    return valid_count, invalid_count


# Command entry points for the concordia CLI

def check(schema: str, timeout: float = DEFAULT_FETCH_TIMEOUT, quiet: bool = False) -> None:
    """Compiles a schema file and reports whether it is valid.

    Args:
        schema: Path to the schema file
        timeout: Timeout in seconds for fetching referenced schemas
        quiet: Suppress output, exit with code 0 if valid, 1 if invalid
    """
    try:
        load_schema_file(schema, HttpSchemaFetcher(timeout=timeout))
    except ConcordiaError as e:
        if not quiet:
            print(f"✗ Invalid schema: {schema}: {e}")
        sys.exit(1)
    if not quiet:
        print(f"✓ Valid schema: {schema}")


def validate(
    input: List[str],
    schema: str,
    timeout: float = DEFAULT_FETCH_TIMEOUT,
    quiet: bool = False
) -> None:
    """Validates JSON instances against a Concordia schema.

    Args:
        input: List of JSON files to validate
        schema: Path to the schema file
        timeout: Timeout in seconds for fetching referenced schemas
        quiet: Suppress output, exit with code 0 if valid, 1 if invalid
    """
    valid_count, invalid_count = validate_json_instances(
        input_files=input,
        schema_file=schema,
        verbose=not quiet,
        fetcher=HttpSchemaFetcher(timeout=timeout)
    )

    if not quiet:
        total = valid_count + invalid_count
        print(f"\nValidation summary: {valid_count}/{total} instances valid")

    if invalid_count > 0:
        sys.exit(1)


def conforms(
    input: str,
    original: str,
    timeout: float = DEFAULT_FETCH_TIMEOUT,
    quiet: bool = False
) -> None:
    """Checks that the schema in 'input' extends the schema in 'original'.

    Args:
        input: Path to the extending schema file
        original: Path to the original schema file
        timeout: Timeout in seconds for fetching referenced schemas
        quiet: Suppress output, exit with code 0 if conforming, 1 otherwise
    """
    fetcher = HttpSchemaFetcher(timeout=timeout)
    try:
        extender = load_schema_file(input, fetcher)
        extender.conforms_to(load_schema_file(original, fetcher))
    except ConcordiaError as e:
        if not quiet:
            print(f"✗ {input} does not conform to {original}: {e}")
        sys.exit(1)
    if not quiet:
        print(f"✓ {input} conforms to {original}")
