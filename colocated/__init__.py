"""colocated - GraphQL data requirements declared next to the code that reads them.

Components declare the fields they need as small documents. A query
composes those documents, and the renderer flattens the tree into one
GraphQL document with one definition per fragment. Lazy fragments are only
included while a consumer has mounted them.

Example:
    >>> from colocated import Session, graphql, fragment, lazy_fragment, query
    >>> from colocated import use_fragment, use_query
    >>>
    >>> CountryData = graphql(fragment("CountryData"), " on Country { code name }")
    >>> CapitalData = graphql(lazy_fragment("CapitalData"), " on Country { capital }")
    >>> HomeQuery = graphql(
    ...     query("Home"),
    ...     ' { usa: country(code: "US") { ...', CountryData, " ...", CapitalData, " } }",
    ... )
    >>>
    >>> session = Session()
    >>> use_query(session, HomeQuery).fetched_fragments
    ('CountryData',)
    >>> with use_fragment(session, CapitalData):
    ...     use_query(session, HomeQuery).fetched_fragments
    ('CountryData', 'CapitalData')

Documents:
    graphql, fragment, lazy_fragment, query: declaration builders
    Part, FragmentRef, QueryRef: the document node types

Rendering:
    render_part: render one part, or SKIPPED when gated by visibility
    render_query: render a complete query document
    render_types: render with every lazy fragment included

Consumption:
    Session: session-scoped visibility registry and fetched record
    use_query, use_fragment, watch_query: query and consumer entry points
    GraphQLTransport, fetch_query: HTTP execution of rendered documents
"""

from colocated.config import Settings, get_settings, load_settings
from colocated.documents import (
    DocumentNode,
    FragmentRef,
    Part,
    QueryRef,
    fragment,
    graphql,
    iter_fragments,
    lazy_fragment,
    query,
)
from colocated.errors import (
    ColocatedError,
    ConfigError,
    DocumentStructureError,
    ErrorCode,
    ErrorContext,
    QueryRootSkippedError,
    RequestFailedError,
    RequestTimeoutError,
    SessionClosedError,
    TransportConnectionError,
    TransportError,
    TypesOutputError,
)
from colocated.hooks import FragmentHandle, QueryHandle, use_fragment, use_query, watch_query
from colocated.rendering import (
    SKIPPED,
    RenderedDocument,
    RenderedQuery,
    RenderResult,
    Skipped,
    dedupe_dependencies,
    is_skipped,
    render_part,
    render_query,
    render_types,
)
from colocated.session import Session
from colocated.transport import GraphQLError, GraphQLResponse, GraphQLTransport, fetch_query
from colocated.types_output import TypesWriter
from colocated.visibility import FetchedFragmentsRecord, VisibilityRegistry

__version__ = "0.1.0"

__all__ = [
    # Documents
    "DocumentNode",
    "FragmentRef",
    "Part",
    "QueryRef",
    "fragment",
    "graphql",
    "iter_fragments",
    "lazy_fragment",
    "query",
    # Rendering
    "SKIPPED",
    "RenderedDocument",
    "RenderedQuery",
    "RenderResult",
    "Skipped",
    "dedupe_dependencies",
    "is_skipped",
    "render_part",
    "render_query",
    "render_types",
    # State
    "FetchedFragmentsRecord",
    "Session",
    "VisibilityRegistry",
    # Consumption
    "FragmentHandle",
    "QueryHandle",
    "use_fragment",
    "use_query",
    "watch_query",
    # Transport
    "GraphQLError",
    "GraphQLResponse",
    "GraphQLTransport",
    "fetch_query",
    # Types output
    "TypesWriter",
    # Configuration
    "Settings",
    "get_settings",
    "load_settings",
    # Errors
    "ColocatedError",
    "ConfigError",
    "DocumentStructureError",
    "ErrorCode",
    "ErrorContext",
    "QueryRootSkippedError",
    "RequestFailedError",
    "RequestTimeoutError",
    "SessionClosedError",
    "TransportConnectionError",
    "TransportError",
    "TypesOutputError",
]
