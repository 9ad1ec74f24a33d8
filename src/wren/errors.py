"""Wren exception hierarchy.

Shared across the pattern compiler, router, binder, envelopes and
dispatcher so every module raises and catches the same types.
"""

from dataclasses import dataclass


class WrenError(Exception):
    """Base for all wren-specific errors."""


class ConfigurationError(WrenError):
    """Raised when routes, handlers, or filters are misconfigured.

    Always raised at registration or freeze time, never while serving.
    """


class InvalidPathError(ConfigurationError):
    """A route template does not follow the path grammar."""

    def __init__(self, template: str) -> None:
        self.template = template
        super().__init__(
            f"Invalid route template {template!r}. Expected '/' or one or more "
            "'/segment' parts where each segment is lowercase alphanumerics "
            "separated by single hyphens, optionally wrapped in braces "
            "(e.g. '/users/{user-id}')."
        )


class HandlerSignatureError(ConfigurationError):
    """A handler's declared shape does not fit its HTTP method."""


@dataclass(frozen=True, slots=True)
class HTTPError(WrenError):
    """An error that maps directly to an HTTP status code."""

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class RouteNotFound(HTTPError):  # noqa: N818
    """404 — no registered route matched the method and path."""

    def __init__(self, method: str, path: str) -> None:
        super().__init__(status=404, detail=f"No route matches {method} {path!r}")


class BindError(WrenError):
    """The request body could not be read or deserialized.

    ``cause`` holds the underlying exception when there is one.
    """

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        self.cause = cause
        super().__init__(message)


class SerializationError(WrenError):
    """A response body could not be marshaled."""
