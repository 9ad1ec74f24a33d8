"""Tests for wren.http.headers."""

from wren.http.headers import Headers, MutableHeaders


class TestHeaders:
    def test_case_insensitive(self) -> None:
        h = Headers(((b"Content-Type", b"application/json"),))
        assert h["content-type"] == "application/json"
        assert h.get("CONTENT-TYPE") == "application/json"
        assert "Content-Type" in h

    def test_missing(self) -> None:
        h = Headers()
        assert h.get("x-missing") is None
        assert h.get("x-missing", "fallback") == "fallback"
        assert 42 not in h

    def test_multiple_values(self) -> None:
        h = Headers(((b"accept", b"text/html"), (b"Accept", b"application/json")))
        assert h["accept"] == "text/html"
        assert len(h) == 1
        assert list(h) == ["accept"]


class TestMutableHeaders:
    def test_set_replaces(self) -> None:
        h = MutableHeaders()
        h.set("Content-Type", "text/plain")
        h.set("content-type", "application/json")

        assert len(h) == 1
        assert h.get("CONTENT-TYPE") == "application/json"
        assert h.items() == [("content-type", "application/json")]

    def test_delete(self) -> None:
        h = MutableHeaders()
        h.set("X-A", "1")
        h.delete("x-a")
        h.delete("x-never-set")

        assert "X-A" not in h
        assert h.get("x-a") is None

    def test_raw_keeps_order(self) -> None:
        h = MutableHeaders()
        h.set("X-B", "2")
        h.set("X-A", "1")

        assert h.raw() == [(b"x-b", b"2"), (b"x-a", b"1")]
