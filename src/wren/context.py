"""Per-request handler context."""

from collections.abc import Mapping
from dataclasses import dataclass, field

from wren.http.request import Request
from wren.http.sink import ResponseSink


@dataclass(frozen=True, slots=True)
class RequestContext:
    """What every handler receives as its first argument.

    Created by the dispatcher for one request and dropped once the
    response is written. Never shared between requests.
    """

    sink: ResponseSink
    request: Request
    path_variables: Mapping[str, str] = field(default_factory=dict)

    def variable(self, name: str, default: str | None = None) -> str | None:
        """Return the value of path variable *name*, or *default*."""
        return self.path_variables.get(name, default)
