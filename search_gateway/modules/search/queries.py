"""Elasticsearch query DSL builders for filtered property/management search.

Every clause produced by :func:`build_query` goes into one ``bool.must``
list, so optional filters only ever narrow the phrase match.
"""

from __future__ import annotations

from typing import Any

from search_gateway.models.documents import describe
from search_gateway.models.enums import DocumentKind
from search_gateway.modules.search.schemas import FilterSpec

Clause = dict[str, Any]

MARKET_FIELD = "market"


def phrase_clause(search_phrase: str, fields: tuple[str, ...]) -> Clause:
    return {
        "multi_match": {
            "query": search_phrase,
            "fields": list(fields),
            "fuzziness": "AUTO",
            "operator": "or",
        }
    }


def fuzzy_match_clause(field_name: str, value: str) -> Clause:
    return {
        "match": {
            field_name: {
                "query": value,
                "fuzziness": "AUTO",
                "operator": "or",
            }
        }
    }


def market_clause(markets: list[str]) -> Clause:
    """Any-of phrase match on the market field, one phrase per market name."""
    return {
        "bool": {
            "should": [{"match_phrase": {MARKET_FIELD: market}} for market in markets],
            "minimum_should_match": 1,
        }
    }


def build_query(filter_spec: FilterSpec, kind: DocumentKind) -> list[Clause]:
    """Clauses for the primary query, to be combined with logical AND."""
    descriptor = describe(kind)
    clauses = [phrase_clause(filter_spec.search_phrase, descriptor.phrase_fields)]

    optional = (
        ("city", filter_spec.city),
        ("state", filter_spec.state),
        ("streetAddress", filter_spec.street_address),
    )
    for field_name, value in optional:
        if value and descriptor.has_field(field_name):
            clauses.append(fuzzy_match_clause(field_name, value))

    if filter_spec.markets:
        clauses.append(market_clause(filter_spec.markets))
    return clauses


def bool_must(clauses: list[Clause]) -> Clause:
    return {"bool": {"must": clauses}}
