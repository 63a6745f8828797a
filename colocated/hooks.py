"""Entry points for data-fetching code and fragment consumers.

``use_query`` gives fetching code the document to send for a query;
``use_fragment`` lets a consumer claim the lazy fragment it reads and tells
it whether that fragment's data has been fetched yet.

Example:
    >>> session = Session()
    >>> capital = use_fragment(session, CapitalData)
    >>> capital.mount()
    >>> handle = use_query(session, HomeQuery)  # includes CapitalData
    >>> capital.loading
    True
    >>> handle.did_fetch()
    >>> capital.loading
    False
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from types import TracebackType

from colocated.documents import FragmentRef, Part, iter_fragments
from colocated.errors import DocumentStructureError, ErrorContext
from colocated.rendering import RenderedQuery, render_query
from colocated.session import Session

logger = logging.getLogger(__name__)


class QueryHandle:
    """A rendered query and its fetch acknowledgement.

    The handle is fixed to the render that produced it; call ``use_query``
    again after visibility changes to get the new document.
    """

    def __init__(self, session: Session, node: Part, rendered: RenderedQuery) -> None:
        self._session = session
        self.node = node
        self.rendered = rendered

    @property
    def query(self) -> str:
        return self.rendered.query

    @property
    def operation_name(self) -> str:
        return self.rendered.operation_name

    @property
    def fetched_fragments(self) -> tuple[str, ...]:
        return self.rendered.fetched_fragments

    def did_fetch(self) -> None:
        """Record that this document was sent and its response received."""
        self._session.fetched.replace(self.rendered.fetched_fragments)
        logger.info(
            "Fetched %s",
            self.operation_name,
            extra={"structured_data": {"fragments": list(self.fetched_fragments)}},
        )

    def __repr__(self) -> str:
        return f"QueryHandle({self.operation_name!r}, fragments={list(self.fetched_fragments)})"


def use_query(session: Session, node: Part) -> QueryHandle:
    """Render ``node`` against the session's current visibility.

    Renders are memoised per node and recomputed only after the registry
    changes.

    Raises:
        QueryRootSkippedError: If ``node`` is not a query.
        SessionClosedError: If the session is closed.
    """
    registry = session.registry
    version = registry.version

    cached = session.query_cache.get(node)
    if cached is not None and cached[0] == version:
        rendered = cached[1]
    else:
        rendered = render_query(
            node,
            registry.snapshot(),
            settings=session.settings,
            types_writer=session.types_writer,
        )
        session.query_cache[node] = (version, rendered)

    return QueryHandle(session, node, rendered)


def watch_query(
    session: Session,
    node: Part,
    callback: Callable[[QueryHandle], None],
) -> Callable[[], None]:
    """Call ``callback`` with a fresh handle whenever a lazy fragment of
    ``node`` changes visibility.

    Returns:
        A callable that stops watching.
    """
    names = {ref.name for ref in iter_fragments(node) if ref.lazy}

    def on_change(name: str, visible: bool) -> None:
        if name in names:
            callback(use_query(session, node))

    return session.registry.subscribe(on_change)


class FragmentHandle:
    """A consumer of one fragment document.

    ``mount`` claims the fragment's visibility when it is lazy, ``unmount``
    gives the claim back. Use it as a context manager to tie the claim to a
    block.
    """

    def __init__(self, session: Session, node: Part, fragment: FragmentRef) -> None:
        self._session = session
        self.node = node
        self.fragment = fragment
        self._mounted = False

    @property
    def name(self) -> str:
        return self.fragment.name

    @property
    def lazy(self) -> bool:
        return self.fragment.lazy

    @property
    def mounted(self) -> bool:
        return self._mounted

    @property
    def loading(self) -> bool:
        """True while a lazy fragment's data is missing from the last fetch."""
        return self.lazy and self.name not in self._session.fetched

    def mount(self) -> None:
        if self._mounted:
            return
        self._mounted = True
        if not self.lazy:
            return

        registry = self._session.registry
        if self._session.settings.visibility_policy == "refcount":
            registry.acquire(self.name)
        elif not registry.is_visible(self.name):
            registry.set_visible(self.name, True)

    def unmount(self) -> None:
        if not self._mounted:
            return
        self._mounted = False
        if not self.lazy or self._session.closed:
            return

        registry = self._session.registry
        if self._session.settings.visibility_policy == "refcount":
            registry.release(self.name)
        elif registry.is_visible(self.name):
            # Hides the fragment even if other consumers are still mounted.
            registry.set_visible(self.name, False)

    def __enter__(self) -> FragmentHandle:
        self.mount()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.unmount()

    def __repr__(self) -> str:
        return f"FragmentHandle({self.name!r}, lazy={self.lazy}, mounted={self._mounted})"


def use_fragment(session: Session, node: Part) -> FragmentHandle:
    """Create a consumer for a fragment document.

    Raises:
        DocumentStructureError: If ``node`` is not headed by a fragment.
    """
    root = node.root if isinstance(node, Part) else None
    if not isinstance(root, FragmentRef):
        raise DocumentStructureError(
            "Must use the fragment builder with use_fragment",
            context=ErrorContext(
                document=getattr(node, "name", None) or None,
                origin=getattr(node, "origin", None),
            ),
        )
    return FragmentHandle(session, node, root)
