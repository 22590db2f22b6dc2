"""Tests for query types and query-string parsing."""

from kubesearch.resources.conditions import (
    DEFAULT_LIMIT,
    Conditions,
    Paging,
    Query,
    parse_conditions,
    parse_paging,
    parse_reverse,
)


class TestParseConditions:
    def test_empty(self):
        assert parse_conditions(None).is_empty()
        assert parse_conditions("").is_empty()

    def test_exact_and_fuzzy(self):
        result = parse_conditions("tier=user,name~edit")
        assert result.match == {"tier": "user"}
        assert result.fuzzy == {"name": "edit"}

    def test_name_alternatives_kept_intact(self):
        assert parse_conditions("name=admin|viewer").match == {"name": "admin|viewer"}

    def test_first_operator_decides(self):
        result = parse_conditions("a~b=c,d=e~f")
        assert result.fuzzy == {"a": "b=c"}
        assert result.match == {"d": "e~f"}

    def test_items_without_operator_or_key_skipped(self):
        result = parse_conditions("garbage,=value,~value,tier=user")
        assert result == Conditions(match={"tier": "user"}, fuzzy={})

    def test_values_taken_literally(self):
        result = parse_conditions("keyword=%41dmin,label~team%3Dx")
        assert result.match == {"keyword": "%41dmin"}
        assert result.fuzzy == {"label": "team%3Dx"}

    def test_empty_value_allowed(self):
        assert parse_conditions("tier=").match == {"tier": ""}

    def test_later_duplicate_wins(self):
        assert parse_conditions("tier=a,tier=b").match == {"tier": "b"}


class TestParseReverse:
    def test_truthy(self):
        for raw in ("true", "True", "1", "yes", " TRUE "):
            assert parse_reverse(raw) is True

    def test_falsy(self):
        for raw in (None, "", "false", "0", "no", "nope"):
            assert parse_reverse(raw) is False

    def test_bool_passthrough(self):
        assert parse_reverse(True) is True


class TestParsePaging:
    def test_absent(self):
        assert parse_paging(None) is None
        assert parse_paging("") is None

    def test_limit_and_page(self):
        paging = parse_paging("limit=2,page=3")
        assert paging == Paging(limit=2, page=3)
        assert paging.offset == 4

    def test_invalid_numbers_fall_back(self):
        assert parse_paging("limit=abc,page=-1") == Paging(limit=DEFAULT_LIMIT, page=1)

    def test_apply_window(self):
        assert Paging(limit=2, page=2).apply([1, 2, 3, 4, 5]) == [3, 4]
        assert Paging(limit=2, page=9).apply([1, 2, 3]) == []


class TestQuery:
    def test_defaults(self):
        query = Query()
        assert query.order_by == "name"
        assert query.reverse is False
        assert query.conditions.is_empty()

    def test_unknown_order_by_falls_back_to_name(self):
        assert Query(order_by="size").order_by == "name"

    def test_from_params(self):
        query = Query.from_params(conditions="tier=user", order_by="create_time", reverse="true")
        assert query == Query(match={"tier": "user"}, order_by="create_time", reverse=True)
