"""Tests for the types document writer."""

from __future__ import annotations

from pathlib import Path

import pytest

from colocated.errors import TypesOutputError
from colocated.rendering import RenderedQuery
from colocated.types_output import TypesWriter


def make_rendered(name: str = "Home", query: str = "query Home { a }") -> RenderedQuery:
    return RenderedQuery(query=query, operation_name=name, fetched_fragments=())


class TestTypesWriter:
    """Tests for TypesWriter."""

    def test_writes_document_named_after_operation(self, tmp_path: Path) -> None:
        writer = TypesWriter(tmp_path / "generated")

        path = writer.write(make_rendered())

        assert path == tmp_path / "generated" / "Home.graphql"
        assert path.read_text() == "query Home { a }\n"

    def test_unsafe_names_are_replaced(self, tmp_path: Path) -> None:
        writer = TypesWriter(tmp_path)
        assert writer.path_for("../Home Page").name == ".._Home_Page.graphql"
        assert writer.path_for("").name == "anonymous.graphql"

    def test_unchanged_document_not_rewritten(self, tmp_path: Path) -> None:
        writer = TypesWriter(tmp_path)
        path = writer.write(make_rendered())
        path.write_text("edited")

        writer.write(make_rendered())

        assert path.read_text() == "edited"

    def test_changed_document_rewritten(self, tmp_path: Path) -> None:
        writer = TypesWriter(tmp_path)
        writer.write(make_rendered())
        path = writer.write(make_rendered(query="query Home { b }"))
        assert path.read_text() == "query Home { b }\n"

    def test_write_failure(self, tmp_path: Path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        writer = TypesWriter(blocker)

        with pytest.raises(TypesOutputError) as exc_info:
            writer.write(make_rendered())

        assert exc_info.value.context.extra["path"] == str(blocker / "Home.graphql")
        assert isinstance(exc_info.value.cause, OSError)
