"""HTTP transport for rendered documents.

The renderer never talks to a server. This module is the glue data-fetching
code uses to send a rendered document and acknowledge the fetch.

Example:
    >>> with Session() as session, GraphQLTransport("https://countries.trevorblades.com/") as transport:
    ...     response = fetch_query(session, HomeQuery, transport)
    ...     response.get_data("usa.name")
    'United States'
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from types import TracebackType
from typing import Any

import httpx

from colocated.documents import Part
from colocated.errors import RequestFailedError, RequestTimeoutError, TransportConnectionError
from colocated.hooks import use_query
from colocated.session import Session

logger = logging.getLogger(__name__)


@dataclass
class GraphQLError:
    """One entry of a response's ``errors`` array."""

    message: str
    path: tuple[str | int, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GraphQLError:
        return cls(
            message=str(data.get("message", "Unknown error")),
            path=tuple(data.get("path") or ()),
        )

    def __str__(self) -> str:
        if not self.path:
            return self.message
        return f"{self.message} (at {'.'.join(str(p) for p in self.path)})"


@dataclass
class GraphQLResponse:
    """Outcome of executing a rendered document."""

    data: dict[str, Any] | None = None
    errors: list[GraphQLError] = field(default_factory=list)
    status_code: int = 200

    @property
    def successful(self) -> bool:
        """True when the server returned data, no errors and a non-error status."""
        return not self.errors and self.data is not None and self.status_code < 400

    def raise_for_errors(self) -> None:
        """Raise ``RequestFailedError`` unless the response is usable.

        GraphQL errors take precedence over the HTTP status in the message.
        """
        if self.errors:
            raise RequestFailedError(
                message="; ".join(str(e) for e in self.errors),
                status_code=self.status_code,
                errors=[e.message for e in self.errors],
            )
        if self.status_code >= 400:
            raise RequestFailedError(
                message=f"Endpoint answered HTTP {self.status_code}",
                status_code=self.status_code,
            )

    def get_data(self, path: str | None = None) -> Any:
        """Return ``data`` or the value at a dotted path such as ``usa.capital``."""
        node: Any = self.data
        if path is None or node is None:
            return node
        for key in path.split("."):
            if not isinstance(node, dict):
                return None
            node = node.get(key)
        return node


class GraphQLTransport:
    """Sends rendered documents to a GraphQL endpoint over HTTP."""

    def __init__(
        self,
        endpoint: str,
        timeout: float = 30.0,
        default_headers: dict[str, str] | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.timeout = timeout
        self.default_headers = default_headers or {}
        self._client = client
        self._owns_client = client is None

    def connect(self) -> httpx.Client:
        """Return the HTTP client, creating it on first use."""
        if self._client is None:
            headers = {"Content-Type": "application/json", **self.default_headers}
            self._client = httpx.Client(timeout=self.timeout, headers=headers)
            logger.info("GraphQL transport connected to %s", self.endpoint)
        return self._client

    def close(self) -> None:
        """Close the HTTP client if this transport created it."""
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None

    def execute(
        self,
        document_text: str,
        operation_name: str | None = None,
        variables: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> GraphQLResponse:
        """Send a document and parse the response.

        Raises:
            RequestTimeoutError: If the request times out.
            TransportConnectionError: If the request cannot be sent.
        """
        client = self.connect()

        payload: dict[str, Any] = {
            "query": document_text,
            "variables": variables or {},
        }
        if operation_name:
            payload["operationName"] = operation_name

        start_time = time.perf_counter()
        try:
            response = client.post(self.endpoint, json=payload, headers=headers)
        except httpx.TimeoutException as e:
            raise RequestTimeoutError(
                message=f"GraphQL request timed out: {e}",
                cause=e,
                endpoint=self.endpoint,
            ) from e
        except httpx.RequestError as e:
            raise TransportConnectionError(
                message=f"GraphQL request failed: {e}",
                cause=e,
                endpoint=self.endpoint,
            ) from e

        result = self._parse_response(response)
        logger.info(
            "Executed %s: HTTP %s in %.1fms",
            operation_name or "<anonymous>",
            result.status_code,
            (time.perf_counter() - start_time) * 1000,
            extra={
                "structured_data": {
                    "operation": operation_name,
                    "status_code": result.status_code,
                    "errors": len(result.errors),
                }
            },
        )
        return result

    @staticmethod
    def _parse_response(response: httpx.Response) -> GraphQLResponse:
        try:
            body = response.json()
        except json.JSONDecodeError:
            body = None
        if not isinstance(body, dict):
            return GraphQLResponse(status_code=response.status_code)

        return GraphQLResponse(
            data=body.get("data"),
            errors=[GraphQLError.from_dict(e) for e in body.get("errors") or ()],
            status_code=response.status_code,
        )

    def __enter__(self) -> GraphQLTransport:
        self.connect()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()


def fetch_query(
    session: Session,
    node: Part,
    transport: GraphQLTransport,
    variables: dict[str, Any] | None = None,
    *,
    raise_for_errors: bool = True,
) -> GraphQLResponse:
    """Render ``node`` for the session, send it and acknowledge the fetch.

    The fetch is only acknowledged when the server answered without errors,
    so lazy consumers keep reporting ``loading`` after a failed request.
    """
    handle = use_query(session, node)
    response = transport.execute(handle.query, handle.operation_name, variables)
    if raise_for_errors:
        response.raise_for_errors()
    if response.successful:
        handle.did_fetch()
    return response
