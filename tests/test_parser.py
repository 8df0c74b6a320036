import pytest

from codesearch.errors import QueryParseError, UserError
from codesearch.query import parse_nl, resolve_target


def test_plain_text_is_target():
    parsed = parse_nl("parse json")
    assert parsed.target() == "parse json"
    assert parsed.filters() == {}


def test_filters_are_split_from_text():
    parsed = parse_nl("lang:Python repo:acme/parser path:src/ branch:dev parse json")
    assert parsed.target() == "parse json"
    assert parsed.filters() == {
        "repo_name": ["acme/parser"],
        "lang": ["python"],
        "relative_path": ["src/"],
        "repo_ref": ["dev"],
    }


def test_quoted_phrase_and_unknown_keys_stay_in_text():
    parsed = parse_nl('"read file" http://x foo:bar')
    assert parsed.target() == "read file http://x foo:bar"


def test_structural_query_has_no_target():
    parsed = parse_nl("repo:acme/parser lang:rust")
    assert parsed.target() is None
    with pytest.raises(UserError, match="empty search"):
        resolve_target(parsed)


def test_empty_query_has_no_target():
    assert parse_nl("").target() is None
    assert parse_nl('  ""  ').target() is None


def test_unterminated_quote_fails():
    with pytest.raises(QueryParseError):
        parse_nl('"parse json')
