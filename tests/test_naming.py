"""Tests for the PascalCase → underscore naming convention.

WHY: Every wire key in requests and every decoded field goes through
to_underscore(). A wrong underscore silently drops arguments or leaves
fields at their defaults.

HOW: Table-driven checks of plain words, single letters, acronym runs
and names that are already in wire form.

RULES:
- Acronym runs get one underscore, never one per letter
"""

from __future__ import annotations

import pytest

from onesky.naming import to_underscore


class TestToUnderscore:
    """to_underscore() converts capitalized words to wire keys."""

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("SourceFileName", "source_file_name"),
            ("Id", "id"),
            ("FileName", "file_name"),
            ("UploadedAtTimestamp", "uploaded_at_timestamp"),
        ],
    )
    def test_pascal_case(self, name, expected):
        assert to_underscore(name) == expected

    def test_leading_acronym_is_one_token(self):
        assert to_underscore("HTTPStatus") == "http_status"

    def test_trailing_acronym_is_one_token(self):
        assert to_underscore("ExportURL") == "export_url"

    def test_inner_acronym_is_one_token(self):
        assert to_underscore("LastHTTPStatusCode") == "last_http_status_code"

    def test_all_caps(self):
        assert to_underscore("ID") == "id"

    def test_camel_case(self):
        assert to_underscore("perPage") == "per_page"

    @pytest.mark.parametrize("name", ["file_name", "page", "is_keeping_all_strings", ""])
    def test_wire_names_unchanged(self, name):
        assert to_underscore(name) == name

    def test_digits_do_not_split(self):
        assert to_underscore("Locale2Name") == "locale2_name"
