"""Tests for wren.config — WrenConfig frozen dataclass."""

import pytest

from wren.config import WrenConfig


class TestWrenConfig:
    def test_defaults(self) -> None:
        cfg = WrenConfig()

        assert cfg.debug is False
        assert cfg.logger_name == "wren"
        assert cfg.max_content_length == 16 * 1024 * 1024
        assert cfg.xml_content_type == "application/xml"
        assert cfg.stream_chunk_size == 64 * 1024

    def test_override(self) -> None:
        cfg = WrenConfig(debug=True, max_content_length=1024, xml_content_type="text/xml")

        assert cfg.debug is True
        assert cfg.max_content_length == 1024
        assert cfg.xml_content_type == "text/xml"

    def test_frozen(self) -> None:
        cfg = WrenConfig()
        with pytest.raises(AttributeError):
            cfg.debug = True  # type: ignore[misc]

    def test_slots(self) -> None:
        assert not hasattr(WrenConfig(), "__dict__")
