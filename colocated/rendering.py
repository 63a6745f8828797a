"""Rendering of document trees into GraphQL text.

A document tree is flattened depth first. Every nested part becomes a
dependency: its text is emitted as a separate definition and its name is
substituted at the point of reference.

Example:
    >>> rendered = render_query(HomeQuery, session.registry.snapshot())
    >>> print(rendered.query)
    fragment CountryData on Country { code name }
    query Home { usa: country(code: "US") { ...CountryData } }
    >>> rendered.fetched_fragments
    ['CountryData']
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final, Union

from colocated.config import Settings, get_settings
from colocated.documents import DocumentNode, FragmentRef, Part, QueryRef
from colocated.errors import (
    ColocatedError,
    DocumentStructureError,
    ErrorContext,
    QueryRootSkippedError,
)

if TYPE_CHECKING:
    from colocated.types_output import TypesWriter

logger = logging.getLogger(__name__)

SPREAD_TOKEN: Final = "..."


class Skipped:
    """Render outcome of a part gated by an invisible lazy fragment."""

    _instance: Skipped | None = None

    def __new__(cls) -> Skipped:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SKIPPED"

    def __bool__(self) -> bool:
        return False


SKIPPED: Final = Skipped()


@dataclass
class RenderedDocument:
    """Text of one part plus everything it depends on.

    ``dependency_texts`` and ``dependency_names`` are positionally paired and
    kept in encounter order, duplicates included.
    """

    text: str = ""
    name: str = ""
    dependency_texts: list[str] = field(default_factory=list)
    dependency_names: list[str] = field(default_factory=list)


RenderResult = Union[RenderedDocument, Skipped]


@dataclass(frozen=True)
class RenderedQuery:
    """A complete document ready to be sent to a GraphQL server.

    Attributes:
        query: Fragment definitions followed by the operation, one per line.
        operation_name: Name of the root operation.
        fetched_fragments: Names of the fragments defined in ``query``.
    """

    query: str
    operation_name: str
    fetched_fragments: tuple[str, ...] = ()


def is_skipped(result: RenderResult) -> bool:
    return result is SKIPPED


def render_part(
    node: Part,
    lazy_fragments: Mapping[str, bool],
    *,
    for_types: bool = False,
) -> RenderResult:
    """Render a part and its nested parts.

    Args:
        node: The part to render.
        lazy_fragments: Visibility of lazy fragments by name.
        for_types: Render every lazy fragment regardless of visibility.

    Returns:
        The rendered document, or SKIPPED when the part is headed by a lazy
        fragment that is not visible.

    Raises:
        DocumentStructureError: If the part or one of its descendants is
            malformed.
    """
    _check_part(node)
    rendered = RenderedDocument()
    pieces: list[str] = []

    last = len(node.children)
    for index, segment in enumerate(node.segments):
        pieces.append(segment)
        if index == last:
            break
        child = node.children[index]

        if isinstance(child, FragmentRef):
            if child.lazy and not for_types and not lazy_fragments.get(child.name):
                logger.debug(
                    "Skipping lazy fragment %s",
                    child.name,
                    extra={"structured_data": {"fragment": child.name}},
                )
                return SKIPPED
            rendered.name = child.name
            pieces.append(f"fragment {child.name}")

        elif isinstance(child, QueryRef):
            rendered.name = child.name
            pieces.append(f"query {child.name}")

        elif isinstance(child, Part):
            sub = render_part(child, lazy_fragments, for_types=for_types)
            if isinstance(sub, Skipped):
                _drop_spread(pieces)
            else:
                rendered.dependency_texts.append(sub.text)
                rendered.dependency_texts.extend(sub.dependency_texts)
                rendered.dependency_names.append(sub.name)
                rendered.dependency_names.extend(sub.dependency_names)
                pieces.append(sub.name)

        else:
            raise DocumentStructureError(
                f"Unsupported value embedded in document: {child!r}",
                context=_context_for(node),
                value_type=type(child).__name__,
            )

    rendered.text = "".join(pieces)
    return rendered


def render_query(
    node: Part,
    lazy_fragments: Mapping[str, bool] | None = None,
    *,
    settings: Settings | None = None,
    types_writer: TypesWriter | None = None,
) -> RenderedQuery:
    """Render a query document for sending to the server.

    Outside production mode the document is first rendered with every lazy
    fragment included and handed to ``types_writer``. Failures there are
    logged and never affect the returned query.

    Args:
        node: A part headed by ``query(...)``.
        lazy_fragments: Visibility of lazy fragments by name.
        settings: Settings to use (default: process settings).
        types_writer: Destination for the exhaustive document.

    Returns:
        The complete query text with its operation name and fragment names.

    Raises:
        QueryRootSkippedError: If the root itself is an invisible lazy fragment.
        DocumentStructureError: If the tree is malformed.
    """
    settings = settings or get_settings()
    lazy_fragments = lazy_fragments or {}

    if not settings.production:
        _write_types(node, settings, types_writer)

    rendered = render_part(node, lazy_fragments)
    if not isinstance(rendered, RenderedDocument):
        raise QueryRootSkippedError(context=_context_for(node))

    result = _assemble(rendered, dedupe=settings.dedupe_fragments)
    logger.debug(
        "Rendered query %s",
        result.operation_name,
        extra={
            "structured_data": {
                "operation": result.operation_name,
                "fragments": list(result.fetched_fragments),
            }
        },
    )
    return result


def render_types(node: Part, *, settings: Settings | None = None) -> RenderedQuery:
    """Render ``node`` with every lazy fragment included.

    The result describes every field any consumer may read and is meant for
    type generation, never for sending.
    """
    settings = settings or get_settings()
    rendered = render_part(node, {}, for_types=True)
    if not isinstance(rendered, RenderedDocument):
        raise QueryRootSkippedError(context=_context_for(node))
    return _assemble(rendered, dedupe=settings.dedupe_fragments)


def _write_types(node: Part, settings: Settings, types_writer: TypesWriter | None) -> None:
    try:
        for_types = render_types(node, settings=settings)
        if types_writer is not None:
            types_writer.write(for_types)
    except ColocatedError:
        # Structural errors resurface from the wire render that follows.
        name = getattr(node, "name", "")
        logger.warning(
            "Types document for %s not written",
            name or "<composite>",
            exc_info=True,
            extra={"structured_data": {"operation": name}},
        )


def dedupe_dependencies(
    texts: list[str], names: list[str]
) -> tuple[list[str], list[str]]:
    """Keep the first definition of each fragment name, in order."""
    seen: set[str] = set()
    unique_texts: list[str] = []
    unique_names: list[str] = []
    for text, name in zip(texts, names):
        if name in seen:
            continue
        seen.add(name)
        unique_texts.append(text)
        unique_names.append(name)
    return unique_texts, unique_names


def _assemble(rendered: RenderedDocument, *, dedupe: bool) -> RenderedQuery:
    texts, names = rendered.dependency_texts, rendered.dependency_names
    if dedupe:
        texts, names = dedupe_dependencies(texts, names)
    return RenderedQuery(
        query="\n".join([*texts, rendered.text]),
        operation_name=rendered.name,
        fetched_fragments=tuple(names),
    )


def _drop_spread(pieces: list[str]) -> None:
    # Walk back over empty pieces to the text that precedes the reference.
    for index in range(len(pieces) - 1, -1, -1):
        if not pieces[index]:
            continue
        if pieces[index].endswith(SPREAD_TOKEN):
            pieces[index] = pieces[index][: -len(SPREAD_TOKEN)]
        return


def _check_part(node: Part) -> None:
    if not isinstance(node, Part):
        raise DocumentStructureError(
            f"Expected a document part, got {type(node).__name__}",
            value_type=type(node).__name__,
        )
    if len(node.segments) != len(node.children) + 1:
        raise DocumentStructureError(
            f"Document has {len(node.segments)} text segments for "
            f"{len(node.children)} references; expected {len(node.children) + 1}",
            context=_context_for(node),
        )


def _context_for(node: DocumentNode) -> ErrorContext:
    if isinstance(node, Part):
        return ErrorContext(document=node.name or None, origin=node.origin)
    return ErrorContext()
