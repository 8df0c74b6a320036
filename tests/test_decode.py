import numpy as np
import pytest

from codesearch.errors import DecodeError
from codesearch.search.decode import REQUIRED_FIELDS, decode_candidate
from codesearch.search.types import RawCandidate

from conftest import make_candidate, make_payload


def test_decodes_full_payload():
    c = make_candidate([0.5, 0.5, 0.0, 0.0], score=0.87)
    s = decode_candidate(c)
    assert s.lang == "python"
    assert s.repo_name == "acme/parser"
    assert s.repo_ref == "main"
    assert s.relative_path == "src/json_parse.py"
    assert s.text.startswith("def parse")
    assert (s.start_line, s.end_line, s.start_byte, s.end_byte) == (10, 11, 200, 245)
    assert s.score == pytest.approx(0.87)
    assert s.embedding == (0.5, 0.5, 0.0, 0.0)
    assert s.to_dict()["embedding"] == [0.5, 0.5, 0.0, 0.0]


def test_payload_is_not_mutated():
    c = make_candidate([1.0, 0.0])
    before = dict(c.payload)
    decode_candidate(c)
    assert c.payload == before


@pytest.mark.parametrize("field", REQUIRED_FIELDS)
def test_missing_field_fails(field):
    c = make_candidate([1.0, 0.0], **{field: None})
    with pytest.raises(DecodeError) as exc:
        decode_candidate(c)
    assert exc.value.field == field


def test_non_string_value_fails():
    c = make_candidate([1.0, 0.0], repo_name=42)
    with pytest.raises(DecodeError, match="expected string"):
        decode_candidate(c)


@pytest.mark.parametrize("value", ["ten", "-1", "1.5", "", " 3"])
def test_non_numeric_line_fails(value):
    c = make_candidate([1.0, 0.0], start_line=value)
    with pytest.raises(DecodeError) as exc:
        decode_candidate(c)
    assert exc.value.field == "start_line"


def test_end_before_start_fails():
    with pytest.raises(DecodeError):
        decode_candidate(make_candidate([1.0, 0.0], start_byte="300", end_byte="10"))


@pytest.mark.parametrize("vector", [None, {"code": [1.0, 0.0]}, [], [[1.0], [0.0]], ["a", "b"], "1,2"])
def test_missing_or_non_dense_vector_fails(vector):
    c = RawCandidate(score=0.1, payload=make_payload(), vector=vector)
    with pytest.raises(DecodeError) as exc:
        decode_candidate(c)
    assert exc.value.field == "vector"


def test_numpy_vector_accepted_and_dim_checked():
    c = RawCandidate(score=0.1, payload=make_payload(), vector=np.ones(3, dtype=np.float32))
    assert len(decode_candidate(c, dim=3).embedding) == 3
    with pytest.raises(DecodeError, match="dimension"):
        decode_candidate(c, dim=4)


@pytest.mark.parametrize("vector", [[float("nan"), 1.0], [float("inf"), 0.0], [1.0, -np.inf]])
def test_non_finite_vector_fails(vector):
    c = RawCandidate(score=0.1, payload=make_payload(), vector=vector)
    with pytest.raises(DecodeError, match="non-finite"):
        decode_candidate(c)
