"""Dispatcher configuration.

One frozen dataclass, passed to ``Wren`` or ``Dispatcher`` and read-only
from then on.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class WrenConfig:
    """Routing and dispatch configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = WrenConfig(debug=True, max_content_length=1024 * 1024)
    """

    # Logging
    debug: bool = False
    logger_name: str = "wren"

    # Request bodies
    max_content_length: int = 16 * 1024 * 1024  # 16 MB
    xml_content_type: str = "application/xml"

    # File responses
    stream_chunk_size: int = 64 * 1024
