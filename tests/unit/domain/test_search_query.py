"""Tests for storing and restoring search queries."""

import json

import pytest

from saved_searches.domain.entities.search_query import TRANSIENT_OPTIONS, SearchQuery
from saved_searches.domain.exceptions import QueryDeserializationError, ValidationError


class TestSearchQuerySerialization:

    def test_transient_options_are_not_stored(self):
        query = SearchQuery(
            index_id="jobs",
            keys="python",
            options={
                "execution_context": {"request_id": "abc"},
                "search_display": "page_1",
                "request": {"path": "/search"},
                "fuzzy": True,
            },
        )

        stored = json.loads(query.serialize())

        assert stored["options"] == {"fuzzy": True}
        assert not TRANSIENT_OPTIONS & set(stored["options"])

    def test_restored_query_is_equivalent(self):
        query = SearchQuery(
            index_id="jobs",
            keys=["python", "django"],
            filters=[{"field": "city", "value": "Berlin"}],
            sort=[{"field": "created", "direction": "desc"}],
            limit=20,
        )

        assert SearchQuery.deserialize(query.serialize()) == query

    def test_serialization_is_stable(self):
        first = SearchQuery(index_id="jobs", options={"b": 1, "a": 2})
        second = SearchQuery(index_id="jobs", options={"a": 2, "b": 1})

        assert first.serialize() == second.serialize()

    @pytest.mark.parametrize(
        "payload",
        ["not json", "[1, 2]", '{"keys": "missing index"}', '{"index_id": ""}', ""],
    )
    def test_corrupt_payloads_raise_deserialization_error(self, payload):
        with pytest.raises(QueryDeserializationError):
            SearchQuery.deserialize(payload)


class TestSearchQueryValidation:

    def test_index_is_required(self):
        with pytest.raises(ValidationError):
            SearchQuery(index_id=" ")

    def test_negative_limit_is_rejected(self):
        with pytest.raises(ValidationError):
            SearchQuery(index_id="jobs", limit=-1)

    @pytest.mark.parametrize(
        "keys, expected",
        [("  python  ", "python"), ("", None), (["a", "b"], None), (None, None)],
    )
    def test_original_keys(self, keys, expected):
        assert SearchQuery(index_id="jobs", keys=keys).original_keys() == expected
