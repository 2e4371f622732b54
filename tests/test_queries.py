"""Tests for the search query builders."""

from search_gateway.models.enums import DocumentKind
from search_gateway.modules.search.queries import (
    bool_must,
    build_query,
    market_clause,
    phrase_clause,
)
from search_gateway.modules.search.schemas import DEFAULT_PAGE_SIZE, FilterSpec


class TestPageSize:
    def test_unset_size_defaults_to_25(self):
        assert FilterSpec(search_phrase="Maple").effective_size == 25

    def test_zero_size_defaults_to_25(self):
        assert FilterSpec(search_phrase="Maple", size=0).effective_size == DEFAULT_PAGE_SIZE

    def test_explicit_size_is_kept(self):
        assert FilterSpec(search_phrase="Maple", size=7).effective_size == 7

    def test_from_alias(self):
        spec = FilterSpec.model_validate({"searchPhrase": "Maple", "from": 50, "size": 10})
        assert spec.from_ == 50
        assert spec.search_phrase == "Maple"


class TestBuildQuery:
    def test_phrase_only(self):
        clauses = build_query(FilterSpec(search_phrase="Maple"), DocumentKind.PROPERTY)
        assert clauses == [
            {
                "multi_match": {
                    "query": "Maple",
                    "fields": ["name", "formerName", "streetAddress"],
                    "fuzziness": "AUTO",
                    "operator": "or",
                }
            }
        ]

    def test_management_phrase_targets_name(self):
        clauses = build_query(FilterSpec(search_phrase="Acme"), DocumentKind.MANAGEMENT)
        assert clauses[0]["multi_match"]["fields"] == ["name"]

    def test_optional_filters_are_appended_in_order(self):
        spec = FilterSpec(
            search_phrase="Maple",
            city="Austin",
            state="TX",
            street_address="12 Maple St",
        )
        clauses = build_query(spec, DocumentKind.PROPERTY)

        assert len(clauses) == 4
        assert clauses[1] == {
            "match": {"city": {"query": "Austin", "fuzziness": "AUTO", "operator": "or"}}
        }
        assert clauses[2]["match"]["state"]["query"] == "TX"
        assert clauses[3]["match"]["streetAddress"]["query"] == "12 Maple St"

    def test_empty_optional_filters_are_skipped(self):
        spec = FilterSpec(search_phrase="Maple", city="", state=None)
        assert len(build_query(spec, DocumentKind.PROPERTY)) == 1

    def test_address_filters_skipped_for_management(self):
        spec = FilterSpec(search_phrase="Acme", city="Austin", state="TX")
        clauses = build_query(spec, DocumentKind.MANAGEMENT)
        assert len(clauses) == 2
        assert "state" in clauses[1]["match"]

    def test_markets_add_an_or_group_as_last_clause(self):
        spec = FilterSpec(search_phrase="Maple", markets=["West", "North East"])
        clauses = build_query(spec, DocumentKind.PROPERTY)
        assert clauses[-1] == market_clause(["West", "North East"])

    def test_everything_is_conjunctive(self):
        spec = FilterSpec(search_phrase="Maple", city="Austin", markets=["West"])
        query = bool_must(build_query(spec, DocumentKind.PROPERTY))
        assert list(query["bool"]) == ["must"]
        assert len(query["bool"]["must"]) == 3


class TestMarketClause:
    def test_one_phrase_per_market_any_of(self):
        clause = market_clause(["West", "South"])
        assert clause == {
            "bool": {
                "should": [
                    {"match_phrase": {"market": "West"}},
                    {"match_phrase": {"market": "South"}},
                ],
                "minimum_should_match": 1,
            }
        }

    def test_order_is_preserved(self):
        should = market_clause(["c", "a", "b"])["bool"]["should"]
        assert [s["match_phrase"]["market"] for s in should] == ["c", "a", "b"]


def test_phrase_clause_fields_are_a_list():
    assert phrase_clause("x", ("a", "b"))["multi_match"]["fields"] == ["a", "b"]
