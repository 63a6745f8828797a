"""Persistence of exhaustive documents for type generation.

Outside production mode every rendered query is also rendered with all lazy
fragments included. Type generators need that exhaustive document, so the
writer stores it as ``<operation>.graphql`` in a directory of its own.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from colocated.errors import TypesOutputError
from colocated.rendering import RenderedQuery

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class TypesWriter:
    """Writes exhaustive documents to ``directory``.

    Example:
        >>> writer = TypesWriter("generated/graphql")
        >>> render_query(HomeQuery, types_writer=writer)
        >>> Path("generated/graphql/Home.graphql").exists()
        True
    """

    suffix = ".graphql"

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)
        self._written: dict[str, str] = {}

    def path_for(self, operation_name: str) -> Path:
        safe = _UNSAFE_CHARS.sub("_", operation_name) or "anonymous"
        return self.directory / f"{safe}{self.suffix}"

    def write(self, rendered: RenderedQuery) -> Path:
        """Write the document unless the same text was already written.

        Raises:
            TypesOutputError: If the file cannot be written.
        """
        path = self.path_for(rendered.operation_name)
        if self._written.get(rendered.operation_name) == rendered.query:
            return path

        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_text(rendered.query + "\n", encoding="utf-8")
        except OSError as e:
            logger.error(
                "Could not write types document %s: %s",
                path,
                e,
                extra={"structured_data": {"operation": rendered.operation_name}},
            )
            raise TypesOutputError(
                f"Could not write {path}: {e}",
                cause=e,
                path=str(path),
            ) from e

        self._written[rendered.operation_name] = rendered.query
        logger.debug("Wrote types document %s", path)
        return path
