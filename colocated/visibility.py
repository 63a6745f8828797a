"""Lazy-fragment visibility state.

The registry records which lazy fragments are currently consumed and
therefore belong in the next rendered query. The fetched record remembers
which fragments were part of the last document actually sent, so consumers
can tell whether their data has arrived.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from types import MappingProxyType

logger = logging.getLogger(__name__)

VisibilityListener = Callable[[str, bool], None]


class VisibilityRegistry:
    """Visibility of lazy fragments by name.

    Unknown names are not visible. Every effective change bumps ``version``
    and notifies subscribers, so memoised renders know to recompute.

    Example:
        >>> registry = VisibilityRegistry()
        >>> registry.set_visible("CapitalData", True)
        >>> registry.is_visible("CapitalData")
        True
        >>> render_query(HomeQuery, registry.snapshot())
    """

    def __init__(self) -> None:
        self._visible: dict[str, bool] = {}
        self._claims: dict[str, int] = {}
        self._listeners: list[VisibilityListener] = []
        self._version = 0

    @property
    def version(self) -> int:
        return self._version

    def is_visible(self, name: str) -> bool:
        return self._visible.get(name, False)

    def set_visible(self, name: str, visible: bool) -> None:
        """Mark a fragment visible or invisible.

        Setting the current value again is a no-op. This bypasses claim
        counting: ``set_visible(name, False)`` hides the fragment even if
        consumers still hold claims on it.
        """
        visible = bool(visible)
        if name in self._visible and self._visible[name] == visible:
            return
        if not visible:
            self._claims.pop(name, None)
        self._visible[name] = visible
        self._version += 1
        logger.debug(
            "Fragment %s %s",
            name,
            "visible" if visible else "hidden",
            extra={"structured_data": {"fragment": name, "visible": visible, "version": self._version}},
        )
        for listener in list(self._listeners):
            listener(name, visible)

    def acquire(self, name: str) -> int:
        """Add a consumer claim; the fragment is visible while claims remain.

        Returns:
            The number of claims after acquiring.
        """
        count = self._claims.get(name, 0) + 1
        self._claims[name] = count
        self.set_visible(name, True)
        return count

    def release(self, name: str) -> int:
        """Drop a consumer claim, hiding the fragment at zero.

        Returns:
            The number of claims left.
        """
        count = max(self._claims.get(name, 0) - 1, 0)
        if count:
            self._claims[name] = count
        else:
            self.set_visible(name, False)
        return count

    def claims(self, name: str) -> int:
        return self._claims.get(name, 0)

    def subscribe(self, listener: VisibilityListener) -> Callable[[], None]:
        """Call ``listener(name, visible)`` on every change.

        Returns:
            A callable removing the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def snapshot(self) -> Mapping[str, bool]:
        """Read-only copy of the current visibility map."""
        return MappingProxyType(dict(self._visible))

    def clear(self) -> None:
        """Forget all state and listeners."""
        self._visible.clear()
        self._claims.clear()
        self._listeners.clear()
        self._version += 1

    def __contains__(self, name: object) -> bool:
        return name in self._visible

    def __repr__(self) -> str:
        visible = sorted(k for k, v in self._visible.items() if v)
        return f"VisibilityRegistry(visible={visible}, version={self._version})"


class FetchedFragmentsRecord:
    """Fragment names included in the most recently fetched document."""

    def __init__(self, names: Iterable[str] = ()) -> None:
        self._names: frozenset[str] = frozenset(names)

    @property
    def names(self) -> frozenset[str]:
        return self._names

    def replace(self, names: Iterable[str]) -> None:
        """Swap in the fragment names of a newly fetched document."""
        self._names = frozenset(names)
        logger.debug(
            "Fetched fragments updated",
            extra={"structured_data": {"fragments": sorted(self._names)}},
        )

    def clear(self) -> None:
        self._names = frozenset()

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def __repr__(self) -> str:
        return f"FetchedFragmentsRecord({sorted(self._names)})"
