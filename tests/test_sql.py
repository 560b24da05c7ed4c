"""
Tests for sql.py - update and filter clause builders.
"""

import re

import pytest

from jobly.errors import BadRequestError, NoUpdateData
from jobly.repositories import companies, jobs
from jobly.sql import (
    FilterRule,
    SqlFragment,
    build_filter_clause,
    build_update_clause,
    contains_ignore_case,
    escape_like,
    placeholder,
    quote_identifier,
    where,
)


def placeholders_in(clause):
    return [int(n) for n in re.findall(r"\$(\d+)", clause)]


class TestPlaceholders:
    """Test placeholder and identifier helpers."""

    def test_placeholder_is_dollar_position(self):
        assert placeholder(1) == "$1"
        assert placeholder(12) == "$12"

    @pytest.mark.parametrize("position", [0, -1, 1.5, "1", True])
    def test_placeholder_rejects_non_positive_int(self, position):
        with pytest.raises(ValueError):
            placeholder(position)

    def test_quote_identifier(self):
        assert quote_identifier("num_employees") == '"num_employees"'

    def test_next_placeholder_continues_numbering(self):
        fragment = SqlFragment('"a"=$1, "b"=$2', ["x", "y"])
        assert fragment.next_placeholder() == "$3"

    def test_next_placeholder_on_empty_fragment(self):
        assert SqlFragment().next_placeholder() == "$1"

    def test_where_omits_keyword_for_empty_clause(self):
        assert where(SqlFragment()) == ""
        assert where(SqlFragment("salary >= $1", [5])) == "WHERE salary >= $1"


class TestBuildUpdateClause:
    """Test partial update SET clause construction."""

    def test_maps_and_falls_back(self):
        """Mapped names use the column name, others are used verbatim."""
        result = build_update_clause({"firstName": "Aliya", "age": 32}, {"firstName": "first_name"})
        assert result.clause == '"first_name"=$1, "age"=$2'
        assert result.values == ["Aliya", 32]

    def test_three_fields_in_insertion_order(self):
        data = {"firstName": "newFirstName", "age": "newAge", "description": "newDescription"}
        result = build_update_clause(data, {"firstName": "first_name"})
        assert result.clause == '"first_name"=$1, "age"=$2, "description"=$3'
        assert result.values == ["newFirstName", "newAge", "newDescription"]

    def test_empty_data_raises(self):
        with pytest.raises(NoUpdateData):
            build_update_clause({}, {})

    def test_empty_data_is_client_error(self):
        with pytest.raises(BadRequestError) as exc_info:
            build_update_clause({}, {"firstName": "first_name"})
        assert exc_info.value.status == 400

    def test_null_and_bool_values_are_bound(self):
        result = build_update_clause({"logoUrl": None, "active": False}, {"logoUrl": "logo_url"})
        assert result.clause == '"logo_url"=$1, "active"=$2'
        assert result.values == [None, False]

    def test_placeholders_match_values(self):
        data = {f"field{i}": i for i in range(10)}
        result = build_update_clause(data, {})
        assert placeholders_in(result.clause) == list(range(1, 11))
        assert len(result.clause.split(", ")) == 10
        assert result.values == list(range(10))

    def test_identical_inputs_give_identical_output(self):
        data = {"name": "New", "numEmployees": 10}
        first = build_update_clause(data, companies.COLUMN_NAMES)
        second = build_update_clause(data, companies.COLUMN_NAMES)
        assert first == second

    def test_does_not_mutate_inputs(self):
        data = {"numEmployees": 3}
        name_map = {"numEmployees": "num_employees"}
        build_update_clause(data, name_map)
        assert data == {"numEmployees": 3}
        assert name_map == {"numEmployees": "num_employees"}


class TestBuildFilterClause:
    """Test WHERE clause construction from filter rules."""

    def test_empty_criteria(self):
        result = build_filter_clause({}, companies.FILTER_RULES)
        assert result.clause == ""
        assert result.values == []

    def test_company_min_and_max_in_rule_order(self):
        """Rule order wins over the order of the criteria mapping."""
        result = build_filter_clause({"maxEmployees": 50, "minEmployees": 10}, companies.FILTER_RULES)
        assert result.clause == "num_employees >= $1 AND num_employees <= $2"
        assert result.values == [10, 50]

    def test_company_all_filters(self):
        criteria = {"maxEmployees": 50, "name": "net", "minEmployees": 10}
        result = build_filter_clause(criteria, companies.FILTER_RULES)
        assert result.clause == (
            "lower(name) LIKE '%' || lower($1) || '%' ESCAPE '\\'"
            " AND num_employees >= $2"
            " AND num_employees <= $3"
        )
        assert result.values == ["net", 10, 50]

    def test_company_single_later_filter_starts_at_one(self):
        result = build_filter_clause({"maxEmployees": 5}, companies.FILTER_RULES)
        assert result.clause == "num_employees <= $1"
        assert result.values == [5]

    def test_job_has_equity_binds_zero(self):
        result = build_filter_clause({"hasEquity": True}, jobs.FILTER_RULES)
        assert result.clause == "equity > $1"
        assert result.values == [0]

    def test_job_has_equity_false_does_not_filter(self):
        result = build_filter_clause({"hasEquity": False}, jobs.FILTER_RULES)
        assert result == SqlFragment("", [])

    def test_job_all_filters(self):
        criteria = {"hasEquity": True, "minSalary": 1000, "title": "eng"}
        result = build_filter_clause(criteria, jobs.FILTER_RULES)
        assert result.clause == (
            "lower(title) LIKE '%' || lower($1) || '%' ESCAPE '\\'"
            " AND salary >= $2"
            " AND equity > $3"
        )
        assert result.values == ["eng", 1000, 0]

    def test_unrecognized_keys_are_ignored(self):
        result = build_filter_clause({"color": "red", "minSalary": 5}, jobs.FILTER_RULES)
        assert result.clause == "salary >= $1"
        assert result.values == [5]

    def test_every_subset_follows_declared_order(self):
        keys = [rule.key for rule in companies.FILTER_RULES]
        values = {"name": "a", "minEmployees": 1, "maxEmployees": 2}
        for mask in range(1, 2 ** len(keys)):
            chosen = [k for i, k in enumerate(keys) if mask & (1 << i)]
            criteria = {k: values[k] for k in reversed(chosen)}
            result = build_filter_clause(criteria, companies.FILTER_RULES)
            assert result.values == [values[k] for k in chosen]
            assert placeholders_in(result.clause) == list(range(1, len(chosen) + 1))
            assert result.clause.count(" AND ") == len(chosen) - 1

    def test_custom_rule_with_transform(self):
        rules = (
            FilterRule("code", "upper(code) = {param}", transform=str.upper),
            FilterRule("active", "active = {param}", transform=int),
        )
        result = build_filter_clause({"active": True, "code": "ab"}, rules)
        assert result.clause == "upper(code) = $1 AND active = $2"
        assert result.values == ["AB", 1]

    def test_identical_inputs_give_identical_output(self):
        criteria = {"title": "eng", "minSalary": 10}
        assert build_filter_clause(criteria, jobs.FILTER_RULES) == build_filter_clause(criteria, jobs.FILTER_RULES)

    def test_contains_ignore_case_template(self):
        template = contains_ignore_case("title")
        assert template.format(param="$4") == "lower(title) LIKE '%' || lower($4) || '%' ESCAPE '\\'"

    def test_wildcards_in_text_filters_are_escaped(self):
        result = build_filter_clause({"title": "100%_off"}, jobs.FILTER_RULES)
        assert result.values == ["100\\%\\_off"]


class TestEscapeLike:
    """Test LIKE wildcard escaping."""

    def test_escapes_wildcards_and_escape_char(self):
        assert escape_like("50%_a\\") == "50\\%\\_a\\\\"

    def test_plain_text_unchanged(self):
        assert escape_like("net") == "net"

    def test_non_string_passes_through(self):
        assert escape_like(5) == 5
        assert escape_like(None) is None
