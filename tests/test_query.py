"""Tests for JSON:API query-string composition."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from netbeez_agent.query import (
    FilterOperator,
    OperatorFilter,
    Ordering,
    Pagination,
    QueryOptions,
    build_operator_filter,
    render,
)


class TestRender:
    def test_none_renders_nothing(self) -> None:
        assert render(None) == []
        assert render(QueryOptions()) == []

    def test_filters_and_pagination_exact(self) -> None:
        options = QueryOptions(filters={"active": True}, pagination=Pagination(page=2, page_size=10))

        assert render(options) == [
            ("filter[active]", "true"),
            ("page[offset]", "2"),
            ("page[limit]", "10"),
        ]

    def test_unset_filter_values_skipped(self) -> None:
        options = QueryOptions(filters={"name": None, "agents": "", "active": False})
        assert render(options) == [("filter[active]", "false")]

    def test_between_renders_both_values(self) -> None:
        options = QueryOptions(operator_filters={"ts": OperatorFilter.between("100", "200")})

        assert render(options) == [
            ("filter[ts][operator]", "<=>"),
            ("filter[ts][value1]", "100"),
            ("filter[ts][value2]", "200"),
        ]

    @pytest.mark.parametrize("operator", ["=", "<", ">", "<=", ">="])
    def test_unary_operators_render_value1_only(self, operator: str) -> None:
        options = QueryOptions(operator_filters={"severity": OperatorFilter(operator=operator, value1=4)})

        assert render(options) == [
            ("filter[severity][operator]", operator),
            ("filter[severity][value1]", "4"),
        ]

    def test_none_operator_filter_skipped(self) -> None:
        assert render(QueryOptions(operator_filters={"ts": None})) == []

    def test_include_and_ordering(self) -> None:
        options = QueryOptions(
            include=["network_interfaces", "agent_groups"],
            order=Ordering(attributes=["ts", "id"], direction="asc"),
        )

        assert render(options) == [
            ("include", "network_interfaces,agent_groups"),
            ("order[attributes]", "ts,id"),
            ("order[direction]", "asc"),
        ]

    def test_ordering_defaults_to_desc(self) -> None:
        pairs = dict(render(QueryOptions(order=Ordering(attributes="ts"))))
        assert pairs["order[direction]"] == "desc"

    def test_partial_pagination(self) -> None:
        assert render(QueryOptions(pagination=Pagination(page_size=50))) == [("page[limit]", "50")]

    def test_beta_flag(self) -> None:
        assert render(QueryOptions(beta=True)) == [("type", "beta")]

    def test_extra_params_passthrough(self) -> None:
        options = QueryOptions(extra_params={"from": "1700000000", "to": None})
        assert render(options) == [("from", "1700000000")]

    def test_later_rule_wins_on_key_collision(self) -> None:
        options = QueryOptions(filters={"agents": "1"}, extra_params={"filter[agents]": "2", "type": "x"}, beta=True)

        assert render(options) == [("filter[agents]", "2"), ("type", "x")]

    def test_integral_float_rendered_as_int(self) -> None:
        assert render(QueryOptions(pagination=Pagination(page=3))) == [("page[offset]", "3")]
        assert render(QueryOptions(filters={"x": 2.0, "y": 2.5})) == [("filter[x]", "2"), ("filter[y]", "2.5")]

    def test_referentially_transparent(self) -> None:
        options = QueryOptions(
            filters={"agents": "1,2"},
            operator_filters={"ts": OperatorFilter(operator=">=", value1="10")},
            beta=True,
        )
        assert render(options) == render(options)


class TestOperatorFilter:
    def test_between_requires_value2(self) -> None:
        with pytest.raises(ValidationError):
            OperatorFilter(operator="<=>", value1="1")

    @pytest.mark.parametrize("operator", [">=", "<=>"])
    def test_empty_value1_rejected(self, operator: str) -> None:
        with pytest.raises(ValidationError, match="non-empty value1"):
            OperatorFilter(operator=operator, value1="", value2="2" if operator == "<=>" else None)

    def test_unary_rejects_value2(self) -> None:
        with pytest.raises(ValidationError):
            OperatorFilter(operator=">", value1="1", value2="2")

    def test_unknown_operator_rejected(self) -> None:
        with pytest.raises(ValidationError):
            OperatorFilter(operator="!=", value1="1")

    def test_enum_values(self) -> None:
        assert {op.value for op in FilterOperator} == {"=", "<", ">", "<=", ">=", "<=>"}


class TestBuildOperatorFilter:
    def test_requires_operator_and_value1(self) -> None:
        assert build_operator_filter(None, "1") is None
        assert build_operator_filter(">", None) is None
        assert build_operator_filter(">", "") is None

    def test_drops_value2_for_unary(self) -> None:
        op_filter = build_operator_filter(">=", "10", "20")
        assert op_filter is not None
        assert op_filter.operator is FilterOperator.GREATER_OR_EQUAL
        assert op_filter.value2 is None

    def test_between_keeps_value2(self) -> None:
        op_filter = build_operator_filter("<=>", "10", "20")
        assert op_filter == OperatorFilter.between("10", "20")

    def test_between_without_value2_raises(self) -> None:
        with pytest.raises(ValueError):
            build_operator_filter("<=>", "10")

    def test_unknown_operator_raises(self) -> None:
        with pytest.raises(ValueError, match="Invalid filter operator"):
            build_operator_filter("~", "10")
