"""Tests for checking that one schema conforms to another."""

import os
import sys
import unittest

current_script_path = os.path.abspath(__file__)
project_root = os.path.dirname(os.path.dirname(current_script_path))
sys.path.append(project_root)

from concordia.conformance import ConformanceChecker, conforms_to
from concordia.errors import ConformanceError
from concordia.fetcher import MappingSchemaFetcher
from concordia.hooks import HookRegistry
from concordia.schemavalidator import compile_schema

ADDRESS_URL = "https://schemas.example.com/address.json"
ADDRESS = {
    "type": "object",
    "schema": [{"name": "street", "type": "string"}, {"name": "zip", "type": "string", "optional": True}]
}


def compile_local(schema):
    return compile_schema(schema, HookRegistry(), MappingSchemaFetcher({ADDRESS_URL: ADDRESS}))


def object_schema(*fields):
    return compile_local({"type": "object", "schema": list(fields)})


class TestReflexivity(unittest.TestCase):
    """Every compiled schema conforms to itself."""

    SCHEMAS = [
        {"type": "object", "schema": []},
        {"type": "array", "schema": []},
        {"type": "array", "schema": {"type": "number", "optional": True}},
        {"type": "array", "schema": [{"type": "string"}, {"type": "boolean", "optional": True}]},
        {
            "type": "object",
            "schema": [
                {"name": "a", "type": "number", "optional": True},
                {"name": "b", "type": "object", "schema": [{"name": "c", "type": "string"}]},
                {"name": "d", "type": "array", "schema": {"type": "array", "schema": [{"type": "number"}]}},
                {"name": "e", "$ref": ADDRESS_URL},
                {"$ref": ADDRESS_URL},
            ]
        },
    ]

    def test_reflexive(self):
        for document in self.SCHEMAS:
            schema = compile_local(document)
            conforms_to(schema, schema)
            conforms_to(schema, compile_local(document))


class TestObjects(unittest.TestCase):

    def test_narrowing_optional_to_required(self):
        original = object_schema({"name": "f", "type": "number", "optional": True})
        extender = object_schema({"name": "f", "type": "number"})
        conforms_to(original, extender)

    def test_widening_required_to_optional(self):
        original = object_schema({"name": "f", "type": "number"})
        extender = object_schema({"name": "f", "type": "number", "optional": True})
        with self.assertRaises(ConformanceError) as ctx:
            conforms_to(original, extender)
        self.assertIn("did not allow a field to be optional", str(ctx.exception))
        self.assertEqual(ctx.exception.path, "/f")

    def test_additional_fields(self):
        original = object_schema({"name": "a", "type": "string"})
        extender = object_schema({"name": "a", "type": "string"}, {"name": "b", "type": "number"})
        conforms_to(original, extender)
        with self.assertRaises(ConformanceError):
            conforms_to(extender, original)

    def test_missing_required_field(self):
        original = object_schema({"name": "a", "type": "string"}, {"name": "b", "type": "number"})
        extender = object_schema({"name": "a", "type": "string"})
        with self.assertRaises(ConformanceError) as ctx:
            conforms_to(original, extender)
        self.assertIn("not optional and not found", str(ctx.exception))
        self.assertIn("'b'", str(ctx.exception))

    def test_missing_optional_field(self):
        original = object_schema({"name": "a", "type": "string"}, {"name": "b", "type": "number", "optional": True})
        extender = object_schema({"name": "a", "type": "string"})
        conforms_to(original, extender)

    def test_field_order_is_irrelevant(self):
        original = object_schema({"name": "a", "type": "string"}, {"name": "b", "type": "number"})
        extender = object_schema({"name": "b", "type": "number"}, {"name": "a", "type": "string"})
        conforms_to(original, extender)

    def test_kind_mismatch(self):
        original = object_schema({"name": "a", "type": "number"})
        extender = object_schema({"name": "a", "type": "string"})
        with self.assertRaises(ConformanceError) as ctx:
            conforms_to(original, extender)
        self.assertIn("The original schema defined a number, but the extending schema does not",
                      str(ctx.exception))
        self.assertEqual(ctx.exception.path, "/a")

    def test_article(self):
        original = object_schema({"name": "a", "type": "object", "schema": []})
        extender = object_schema({"name": "a", "type": "array", "schema": []})
        with self.assertRaises(ConformanceError) as ctx:
            conforms_to(original, extender)
        self.assertIn("defined an object", str(ctx.exception))

    def test_nested_objects(self):
        original = object_schema({"name": "o", "type": "object", "schema": [{"name": "x", "type": "number"}]})
        extender = object_schema({"name": "o", "type": "object", "schema": [{"name": "x", "type": "boolean"}]})
        with self.assertRaises(ConformanceError) as ctx:
            conforms_to(original, extender)
        self.assertEqual(ctx.exception.path, "/o/x")


class TestReferences(unittest.TestCase):
    """References are compared through the documents they resolve to."""

    def test_inline_and_reference_are_equivalent(self):
        inline = object_schema({"name": "address", "type": "object", "schema": ADDRESS["schema"]})
        referenced = object_schema({"name": "address", "$ref": ADDRESS_URL})
        conforms_to(inline, referenced)
        conforms_to(referenced, inline)

    def test_aggregation_and_inline_fields(self):
        aggregated = object_schema({"name": "id", "type": "number"}, {"$ref": ADDRESS_URL})
        inline = object_schema(
            {"name": "id", "type": "number"},
            {"name": "street", "type": "string"},
            {"name": "zip", "type": "string", "optional": True})
        conforms_to(aggregated, inline)
        conforms_to(inline, aggregated)

    def test_reference_slot_optionality(self):
        original = object_schema({"name": "address", "$ref": ADDRESS_URL})
        extender = object_schema({"name": "address", "$ref": ADDRESS_URL, "optional": True})
        with self.assertRaises(ConformanceError):
            conforms_to(original, extender)
        conforms_to(extender, original)


class TestArrays(unittest.TestCase):

    def test_sub_kind_mismatch(self):
        original = compile_local({"type": "array", "schema": {"type": "number"}})
        extender = compile_local({"type": "array", "schema": [{"type": "number"}]})
        with self.assertRaises(ConformanceError) as ctx:
            conforms_to(original, extender)
        self.assertIn("constant-type array", str(ctx.exception))

    def test_length_mismatch(self):
        original = compile_local({"type": "array", "schema": [{"type": "number"}, {"type": "number"}]})
        extender = compile_local({"type": "array", "schema": [{"type": "number"}]})
        with self.assertRaises(ConformanceError) as ctx:
            conforms_to(original, extender)
        self.assertIn("different lengths: 2 and 1", str(ctx.exception))

    def test_element_mismatch(self):
        original = compile_local({"type": "array", "schema": [{"type": "number"}, {"type": "string"}]})
        extender = compile_local({"type": "array", "schema": [{"type": "number"}, {"type": "boolean"}]})
        with self.assertRaises(ConformanceError) as ctx:
            conforms_to(original, extender)
        self.assertEqual(ctx.exception.path, "/1")

    def test_constant_type_elements(self):
        original = compile_local({"type": "array", "schema": {"type": "string", "optional": True}})
        narrowed = compile_local({"type": "array", "schema": {"type": "string"}})
        conforms_to(original, narrowed)
        with self.assertRaises(ConformanceError) as ctx:
            conforms_to(narrowed, original)
        self.assertEqual(ctx.exception.path, "/*")

    def test_checker_object(self):
        schema = compile_local({"type": "array", "schema": []})
        ConformanceChecker().check(schema, schema)


if __name__ == '__main__':
    unittest.main()
