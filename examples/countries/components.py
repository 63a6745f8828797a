"""Fragments declared by the country widgets."""

from colocated import fragment, graphql, lazy_fragment

CountryData = graphql(
    fragment("CountryData"),
    """ on Country {
    code
    name
}""",
    origin=__file__,
)

CapitalData = graphql(
    lazy_fragment("CapitalData"),
    """ on Country {
    capital
}""",
    origin=__file__,
)
