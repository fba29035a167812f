"""Tests for media server helper functions."""

import pytest

from mediaserver.utils import (
    coerce_float,
    coerce_int,
    content_disposition,
    guess_content_type,
    parse_genres,
    storage_filename,
    validate_identifier,
)


class TestParseGenres:
    """Genre normalization."""

    def test_comma_separated_string(self):
        assert parse_genres("Action, Drama") == ["Action", "Drama"]

    def test_json_array_string(self):
        assert parse_genres('["Sci-Fi", " Horror "]') == ["Sci-Fi", "Horror"]

    def test_malformed_json_falls_back_to_commas(self):
        assert parse_genres('["Action", Drama') == ['["Action"', "Drama"]

    def test_json_scalar_is_split_as_text(self):
        assert parse_genres("42") == ["42"]

    def test_structured_list(self):
        assert parse_genres(["Comedy", "", "  Romance "]) == ["Comedy", "Romance"]

    def test_single_element_list_is_parsed_as_string(self):
        assert parse_genres(["Action,Comedy"]) == ["Action", "Comedy"]

    def test_order_is_preserved(self):
        assert parse_genres("Drama,Action,Drama") == ["Drama", "Action", "Drama"]

    @pytest.mark.parametrize("value", [None, "", "   ", [], ",,", "[]", ["", " "]])
    def test_empty_values_yield_unknown(self, value):
        assert parse_genres(value) == ["Unknown"]

    def test_custom_fallback(self):
        assert parse_genres(None, fallback="Misc") == ["Misc"]


class TestStorageFilename:
    """On-disk filename construction."""

    def test_keeps_original_extension(self):
        assert storage_filename("abc", "My Movie.mkv", ".mp4") == "abc.mkv"

    def test_uses_last_extension_only(self):
        assert storage_filename("abc", "archive.tar.gz", "") == "abc.gz"

    def test_default_extension_when_missing(self):
        assert storage_filename("abc", "README", ".mp4") == "abc.mp4"
        assert storage_filename("abc", None, ".mp4") == "abc.mp4"

    def test_directory_components_are_ignored(self):
        assert storage_filename("abc", "../../etc/passwd.stl", "") == "abc.stl"
        assert storage_filename("abc", "C:\\models\\part.3mf", "") == "abc.3mf"

    def test_empty_default_extension(self):
        assert storage_filename("abc", "noext", "") == "abc"


class TestValidateIdentifier:
    """Identifier safety checks."""

    @pytest.mark.parametrize("identifier", ["abc", "movie-1", "with space", "ünïcode", "a.b"])
    def test_accepts_plain_names(self, identifier):
        assert validate_identifier(identifier)

    @pytest.mark.parametrize("identifier", ["", ".", "..", "a/b", "../x", "a\\b", "a\x00b"])
    def test_rejects_path_like_names(self, identifier):
        assert not validate_identifier(identifier)


class TestContentType:
    """Content type inference."""

    def test_known_video_types(self):
        assert guess_content_type("abc.mp4") == "video/mp4"
        assert guess_content_type("abc.mkv") == "video/x-matroska"

    def test_print_types(self):
        assert guess_content_type("part.stl") == "model/stl"
        assert guess_content_type("part.zip") == "application/zip"

    def test_unknown_extension(self):
        assert guess_content_type("blob.qqq") == "application/octet-stream"
        assert guess_content_type("noext") == "application/octet-stream"


class TestContentDisposition:
    """Content-Disposition header values."""

    def test_ascii_filename(self):
        assert content_disposition("benchy.stl") == 'attachment; filename="benchy.stl"'

    def test_quotes_are_stripped(self):
        assert content_disposition('a"b.stl') == 'attachment; filename="ab.stl"; filename*=UTF-8\'\'a%22b.stl'

    def test_non_ascii_filename(self):
        header = content_disposition("modèle.stl")
        assert header.startswith('attachment; filename="modle.stl"')
        assert "filename*=UTF-8''mod%C3%A8le.stl" in header

    def test_inline(self):
        assert content_disposition("clip.mp4", "inline") == 'inline; filename="clip.mp4"'


class TestCoercion:
    """Lenient numeric parsing."""

    @pytest.mark.parametrize("value,expected", [
        ("1700000000000", 1700000000000),
        ("12.9", 12),
        (5, 5),
        ("", None),
        (None, None),
        ("soon", None),
        (True, None),
    ])
    def test_coerce_int(self, value, expected):
        assert coerce_int(value) == expected

    @pytest.mark.parametrize("value,expected", [
        ("93.5", 93.5),
        (120, 120.0),
        ("", None),
        ("nan", None),
        ("inf", None),
        ("long", None),
    ])
    def test_coerce_float(self, value, expected):
        assert coerce_float(value) == expected
