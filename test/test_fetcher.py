"""Tests for the schema fetchers."""

import json
import os
import pathlib
import shutil
import sys
import tempfile
import unittest
from unittest.mock import MagicMock, patch

current_script_path = os.path.abspath(__file__)
project_root = os.path.dirname(os.path.dirname(current_script_path))
sys.path.append(project_root)

from concordia.fetcher import FetchResult, HttpSchemaFetcher, MappingSchemaFetcher


class TestFetchResult(unittest.TestCase):

    def test_ok(self):
        self.assertTrue(FetchResult(200, "{}").ok)
        self.assertTrue(FetchResult(204).ok)
        self.assertFalse(FetchResult(301).ok)
        self.assertFalse(FetchResult(404).ok)
        self.assertFalse(FetchResult(500, "error").ok)


class TestHttpSchemaFetcher(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.schema_path = os.path.join(self.temp_dir, "schema.json")
        with open(self.schema_path, 'w', encoding='utf-8') as f:
            f.write('{"type": "object", "schema": []}')

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    @patch('requests.Session.get')
    def test_http(self, mock_get):
        response = MagicMock()
        response.status_code = 200
        response.text = '{"type": "array", "schema": []}'
        mock_get.return_value = response
        result = HttpSchemaFetcher(timeout=5).fetch("https://example.com/schema.json")
        mock_get.assert_called_once_with("https://example.com/schema.json", timeout=5)
        self.assertEqual(result, FetchResult(200, '{"type": "array", "schema": []}'))

    @patch('requests.Session.get')
    def test_http_status_is_reported(self, mock_get):
        response = MagicMock()
        response.status_code = 503
        response.text = ''
        mock_get.return_value = response
        result = HttpSchemaFetcher().fetch("http://example.com/schema.json")
        self.assertEqual(result.status_code, 503)
        self.assertFalse(result.ok)

    def test_custom_session(self):
        session = MagicMock()
        session.get.return_value.status_code = 200
        session.get.return_value.text = '{}'
        result = HttpSchemaFetcher(session=session).fetch("https://example.com/x.json")
        session.get.assert_called_once_with("https://example.com/x.json", timeout=30)
        self.assertEqual(result.body, '{}')

    def test_file_path(self):
        result = HttpSchemaFetcher().fetch(self.schema_path)
        self.assertEqual(result.status_code, 200)
        self.assertEqual(json.loads(result.body), {"type": "object", "schema": []})

    def test_file_url(self):
        url = pathlib.Path(self.schema_path).as_uri()
        result = HttpSchemaFetcher().fetch(url)
        self.assertEqual(result.status_code, 200)
        self.assertIn('"object"', result.body)

    def test_missing_file(self):
        result = HttpSchemaFetcher().fetch(os.path.join(self.temp_dir, "missing.json"))
        self.assertEqual(result, FetchResult(404, None))

    def test_unsupported_scheme(self):
        with self.assertRaises(ValueError):
            HttpSchemaFetcher().fetch("ftp://example.com/schema.json")

    def test_restricted_schemes(self):
        fetcher = HttpSchemaFetcher(schemes=('https',))
        with self.assertRaises(ValueError):
            fetcher.fetch("http://example.com/schema.json")
        with self.assertRaises(ValueError):
            fetcher.fetch(self.schema_path)


class TestMappingSchemaFetcher(unittest.TestCase):

    def test_text_and_documents(self):
        fetcher = MappingSchemaFetcher({
            "urn:a": '{"type": "object", "schema": []}',
            "urn:b": {"type": "array", "schema": []},
        })
        self.assertEqual(fetcher.fetch("urn:a"), FetchResult(200, '{"type": "object", "schema": []}'))
        self.assertEqual(json.loads(fetcher.fetch("urn:b").body), {"type": "array", "schema": []})
        self.assertEqual(fetcher.fetched, ["urn:a", "urn:b"])

    def test_unknown_url(self):
        self.assertEqual(MappingSchemaFetcher().fetch("urn:missing").status_code, 404)

    def test_fetch_result_value(self):
        fetcher = MappingSchemaFetcher({"urn:a": FetchResult(410)})
        self.assertEqual(fetcher.fetch("urn:a").status_code, 410)

    def test_add(self):
        fetcher = MappingSchemaFetcher()
        fetcher.add("urn:a", {"type": "object", "schema": []})
        self.assertTrue(fetcher.fetch("urn:a").ok)

    def test_fallback(self):
        fallback = MappingSchemaFetcher({"urn:b": "{}"})
        fetcher = MappingSchemaFetcher({"urn:a": "[]"}, fallback=fallback)
        self.assertEqual(fetcher.fetch("urn:b").body, "{}")
        self.assertEqual(fallback.fetched, ["urn:b"])
        self.assertEqual(fetcher.fetch("urn:c").status_code, 404)

    def test_mapping_is_copied(self):
        mapping = {"urn:a": "{}"}
        fetcher = MappingSchemaFetcher(mapping)
        mapping["urn:b"] = "{}"
        self.assertEqual(fetcher.fetch("urn:b").status_code, 404)


if __name__ == '__main__':
    unittest.main()
