"""Session-scoped state shared by queries and fragment consumers."""

from __future__ import annotations

import logging
from types import TracebackType
from typing import TYPE_CHECKING

from colocated.config import Settings, get_settings
from colocated.errors import SessionClosedError
from colocated.types_output import TypesWriter
from colocated.visibility import FetchedFragmentsRecord, VisibilityRegistry

if TYPE_CHECKING:
    from colocated.documents import Part
    from colocated.rendering import RenderedQuery

logger = logging.getLogger(__name__)


class Session:
    """Holds the visibility registry and fetched record for one session.

    Create one per top-level session (a page, a request, an app instance)
    and pass it to ``use_query`` and ``use_fragment``.

    Example:
        >>> with Session() as session:
        ...     handle = use_query(session, HomeQuery)
        ...     response = transport.execute(handle.query, handle.operation_name)
        ...     handle.did_fetch()
    """

    def __init__(
        self,
        settings: Settings | None = None,
        types_writer: TypesWriter | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._registry = VisibilityRegistry()
        self._fetched = FetchedFragmentsRecord()
        if types_writer is None and self.settings.types_dir is not None:
            types_writer = TypesWriter(self.settings.types_dir)
        self.types_writer = types_writer
        # Part -> (registry version, rendered query)
        self.query_cache: dict[Part, tuple[int, RenderedQuery]] = {}
        self._closed = False
        logger.debug(
            "Session opened",
            extra={"structured_data": {"policy": self.settings.visibility_policy}},
        )

    @property
    def registry(self) -> VisibilityRegistry:
        self._ensure_open()
        return self._registry

    @property
    def fetched(self) -> FetchedFragmentsRecord:
        self._ensure_open()
        return self._fetched

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Tear down the session state. Closing twice is a no-op."""
        if self._closed:
            return
        self._registry.clear()
        self._fetched.clear()
        self.query_cache.clear()
        self._closed = True
        logger.debug("Session closed")

    def _ensure_open(self) -> None:
        if self._closed:
            raise SessionClosedError()

    def __enter__(self) -> Session:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
