from fastapi.testclient import TestClient

from codesearch.app import app, get_semantic
from codesearch.errors import EmbeddingError
from codesearch.semantic import Semantic

from conftest import FakeEmbedder, FakeIndex, make_candidate

client = TestClient(app)


def use_semantic(semantic):
    app.dependency_overrides[get_semantic] = lambda: semantic


def teardown_function():
    app.dependency_overrides.clear()


def test_root_ok():
    r = client.get("/")
    assert r.status_code == 200


def test_health_ok():
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_healthz_reports_semantic():
    use_semantic(None)
    assert client.get("/healthz").json()["semantic_configured"] is False
    use_semantic(Semantic(FakeIndex(), FakeEmbedder()))
    assert client.get("/healthz").json()["semantic_configured"] is True


def test_chunks_returns_snippets():
    index = FakeIndex([
        make_candidate([1.0, 0.0, 0.0, 0.0], score=0.9, relative_path="a.py"),
        make_candidate([0.0, 1.0, 0.0, 0.0], score=0.4, relative_path="b.py"),
    ])
    use_semantic(Semantic(index, FakeEmbedder()))

    r = client.get("/semantic/chunks", params={"query": "parse json", "limit": 1})

    assert r.status_code == 200
    snippets = r.json()["snippets"]
    assert len(snippets) == 1
    s = snippets[0]
    assert s["relative_path"] == "a.py"
    assert s["text"].startswith("def parse")
    assert s["start_line"] == 10 and s["end_byte"] == 245
    assert s["embedding"] == [1.0, 0.0, 0.0, 0.0]
    assert set(s) == {
        "lang", "repo_name", "repo_ref", "relative_path", "text", "start_line",
        "end_line", "start_byte", "end_byte", "score", "embedding",
    }
    assert index.calls[0]["limit"] == 4


def test_not_configured_is_configuration_error():
    use_semantic(None)
    r = client.get("/semantic/chunks", params={"query": "parse json", "limit": 5})
    assert r.status_code == 503
    assert r.json() == {"kind": "configuration", "message": "vector index not configured"}


def test_empty_search_is_user_error():
    use_semantic(Semantic(FakeIndex(), FakeEmbedder()))
    r = client.get("/semantic/chunks", params={"query": "", "limit": 5})
    assert r.status_code == 400
    assert r.json() == {"kind": "user", "message": "empty search"}


def test_decode_failure_is_opaque_internal_error():
    index = FakeIndex([make_candidate([1.0, 0.0, 0.0, 0.0], end_line="x")])
    use_semantic(Semantic(index, FakeEmbedder()))
    r = client.get("/semantic/chunks", params={"query": "parse json", "limit": 5})
    assert r.status_code == 500
    assert r.json() == {"kind": "internal", "message": "internal error"}


def test_embedding_failure_is_internal_error():
    use_semantic(Semantic(FakeIndex(), FakeEmbedder(error=EmbeddingError("down"))))
    r = client.get("/semantic/chunks", params={"query": "parse json", "limit": 5})
    assert r.status_code == 500
    assert r.json()["kind"] == "internal"


def test_bad_params_are_user_errors():
    use_semantic(Semantic(FakeIndex(), FakeEmbedder()))
    for params, field in [({"query": "x", "limit": -1}, "limit"), ({"limit": 3}, "query"),
                          ({"query": "x"}, "limit"), ({"query": "x", "limit": "ten"}, "limit")]:
        r = client.get("/semantic/chunks", params=params)
        assert r.status_code == 400
        body = r.json()
        assert set(body) == {"kind", "message"}
        assert body["kind"] == "user"
        assert body["message"].startswith("invalid request: ")
        assert field in body["message"]


def test_large_limit_accepted():
    index = FakeIndex([make_candidate([1.0, 0.0, 0.0, 0.0])])
    use_semantic(Semantic(index, FakeEmbedder()))
    r = client.get("/semantic/chunks", params={"query": "parse json", "limit": 500})
    assert r.status_code == 200
    assert len(r.json()["snippets"]) == 1
    assert index.calls[0]["limit"] == 2000
