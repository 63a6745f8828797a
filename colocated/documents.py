"""Document nodes for colocated GraphQL declarations.

A component declares the data it needs as a document built from literal
GraphQL text interleaved with references to other documents:

Example:
    >>> from colocated import graphql, fragment, lazy_fragment, query
    >>>
    >>> CountryData = graphql(fragment("CountryData"), '''
    ...     on Country {
    ...         code
    ...         name
    ...     }
    ... ''')
    >>>
    >>> CapitalData = graphql(lazy_fragment("CapitalData"), '''
    ...     on Country {
    ...         capital
    ...     }
    ... ''')
    >>>
    >>> HomeQuery = graphql(query("Home"), ''' {
    ...     usa: country(code: "US") {
    ...         ...''', CountryData, '''
    ...         ...''', CapitalData, '''
    ...     }
    ... }''')

Nodes are immutable and construction performs no validation: text is
opaque and malformed names end up in the rendered document verbatim. The
structural checks happen in the renderer.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True)
class FragmentRef:
    """A named, reusable selection.

    Attributes:
        name: The fragment name.
        lazy: Excluded from wire queries unless marked visible.
    """

    name: str
    lazy: bool = False


@dataclass(frozen=True)
class QueryRef:
    """The named root operation of a document."""

    name: str


@dataclass(frozen=True, eq=False)
class Part:
    """Literal text interleaved with child documents.

    ``segments`` has one more item than ``children``: text, child, text,
    child, ..., text. Parts compare by identity, since two declarations with
    the same text are still two declarations.

    Attributes:
        segments: Literal GraphQL text.
        children: Embedded references, in reading order.
        origin: Declaring source file, for developer tooling only.
    """

    segments: tuple[str, ...]
    children: tuple[DocumentNode, ...] = ()
    origin: str | None = field(default=None, compare=False)

    @classmethod
    def from_template(
        cls,
        strings: Iterable[str],
        values: Iterable[DocumentNode] = (),
        origin: str | None = None,
    ) -> Part:
        """Build a part from template-style segments and embedded values.

        The inputs are stored as given; a count mismatch is reported when
        the part is rendered.
        """
        return cls(
            segments=tuple(strings),
            children=tuple(values),
            origin=origin,
        )

    @property
    def root(self) -> DocumentNode | None:
        """First child, which names the document when it is a reference."""
        return self.children[0] if self.children else None

    @property
    def name(self) -> str:
        root = self.root
        if isinstance(root, (FragmentRef, QueryRef)):
            return root.name
        return ""

    @property
    def is_lazy(self) -> bool:
        root = self.root
        return isinstance(root, FragmentRef) and root.lazy

    def __repr__(self) -> str:
        label = self.name or "<composite>"
        return f"Part({label!r}, children={len(self.children)})"


DocumentNode = Union[FragmentRef, QueryRef, Part]


def _join_name(parts: tuple[object, ...]) -> str:
    return "".join(str(p) for p in parts)


def fragment(*parts: object) -> FragmentRef:
    """Declare a fragment header; the name is the concatenation of ``parts``."""
    return FragmentRef(name=_join_name(parts), lazy=False)


def lazy_fragment(*parts: object) -> FragmentRef:
    """Declare a fragment header that is only rendered while visible."""
    return FragmentRef(name=_join_name(parts), lazy=True)


def query(*parts: object) -> QueryRef:
    """Declare a query header; the name is the concatenation of ``parts``."""
    return QueryRef(name=_join_name(parts))


def graphql(*items: str | DocumentNode, origin: str | None = None) -> Part:
    """Build a document from text and references in reading order.

    Adjacent strings are joined and empty segments are inserted around
    adjacent references, so the result always satisfies the text/child
    interleave. Anything that is not a string is kept as a child.

    Args:
        *items: GraphQL text and document nodes.
        origin: Declaring source file (usually ``__file__``), reported in
            structural errors.

    Returns:
        The declared Part.
    """
    segments: list[str] = []
    children: list[DocumentNode] = []
    buffer: list[str] = []

    for item in items:
        if isinstance(item, str):
            buffer.append(item)
        else:
            segments.append("".join(buffer))
            buffer = []
            children.append(item)
    segments.append("".join(buffer))

    return Part(
        segments=tuple(segments),
        children=tuple(children),
        origin=origin,
    )


def iter_fragments(node: DocumentNode) -> Iterator[FragmentRef]:
    """Yield every fragment reference in ``node``, depth first."""
    if isinstance(node, FragmentRef):
        yield node
    elif isinstance(node, Part):
        for child in node.children:
            yield from iter_fragments(child)
