"""Route registry with first-match lookup.

Entries are kept per HTTP method in registration order. Lookup scans that
list and returns the first entry whose matcher accepts the path, so a
broad template registered early shadows a narrower one registered later.
There is no conflict detection.
"""

import logging

from wren.errors import RouteNotFound
from wren.routing.route import HandlerEntry

logger = logging.getLogger("wren.routing")


class Router:
    """Per-method route lists with linear first-match lookup.

    Usage::

        router = Router()
        router.add(entry)
        router.compile()
        entry = router.lookup("GET", "/users/42")
    """

    __slots__ = ("_compiled", "_pending", "_order", "_table")

    def __init__(self) -> None:
        self._pending: dict[str, list[HandlerEntry]] = {}
        self._table: dict[str, tuple[HandlerEntry, ...]] = {}
        self._order: list[HandlerEntry] = []
        self._compiled = False

    def add(self, entry: HandlerEntry) -> None:
        """Append *entry* to its method's list. Must be called before compile()."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)
        self._pending.setdefault(entry.method, []).append(entry)
        self._order.append(entry)
        logger.debug("Registered %s %s", entry.method, entry.template)

    def compile(self) -> None:
        """Freeze the registry. No more routes can be added."""
        if self._compiled:
            return
        self._table = {method: tuple(entries) for method, entries in self._pending.items()}
        self._compiled = True

    @property
    def compiled(self) -> bool:
        return self._compiled

    @property
    def routes(self) -> list[HandlerEntry]:
        """All registered entries, in registration order."""
        return list(self._order)

    def __len__(self) -> int:
        return len(self._order)

    def lookup(self, method: str, path: str) -> HandlerEntry:
        """Return the first entry for *method* whose template matches *path*.

        Raises ``RouteNotFound`` if nothing matches.
        """
        method = method.upper()
        for entry in self._table.get(method, ()):
            if entry.pattern.matches(path):
                return entry
        raise RouteNotFound(method, path)
