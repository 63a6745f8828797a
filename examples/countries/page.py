"""Home page query: the country card always, the capital on demand.

Run against the public countries API::

    python -m examples.countries.page
    colocated render examples.countries.page:HomeQuery --visible CapitalData
"""

from __future__ import annotations

import logging

from colocated import GraphQLTransport, Session, fetch_query, graphql, query, use_fragment
from colocated.logging import configure_logging

from .components import CapitalData, CountryData

logger = logging.getLogger(__name__)

ENDPOINT = "https://countries.trevorblades.com/"

HomeQuery = graphql(
    query("Home"),
    """ {
    usa: country(code: "US") {
        ...""",
    CountryData,
    """
        ...""",
    CapitalData,
    """
    }
}""",
    origin=__file__,
)


def main() -> None:
    configure_logging(level="INFO")

    with Session() as session, GraphQLTransport(ENDPOINT) as transport:
        response = fetch_query(session, HomeQuery, transport)
        print(response.get_data("usa.name"))

        # Showing the capital widget pulls its fragment into the next query.
        with use_fragment(session, CapitalData) as capital:
            print("loading" if capital.loading else "ready")
            response = fetch_query(session, HomeQuery, transport)
            print(response.get_data("usa.capital"))


if __name__ == "__main__":
    main()
