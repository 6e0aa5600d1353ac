"""JSON:API query-string composition for the NetBeez API.

Translates a structured ``QueryOptions`` value into the ordered list of
query parameters understood by the NetBeez JSON:API endpoints. The key
grammar is bracketed and must be reproduced exactly::

    filter[<field>]=<value>
    filter[<field>][operator]=<op>
    filter[<field>][value1]=<v1>
    filter[<field>][value2]=<v2>        (between only)
    include=<rel1>,<rel2>
    order[attributes]=<f1>,<f2>
    order[direction]=asc|desc
    page[offset]=<n>
    page[limit]=<n>
    type=beta

Usage::

    from netbeez_agent.query import OperatorFilter, QueryOptions, render

    options = QueryOptions(
        filters={"agents": "12,15"},
        operator_filters={"ts": OperatorFilter(operator=">=", value1="1700000000")},
        pagination={"page": 1, "page_size": 50},
    )
    render(options)
    # [("filter[agents]", "12,15"), ("filter[ts][operator]", ">="), ...]
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

logger = logging.getLogger(__name__)

FilterValue = str | int | float | bool


class FilterOperator(str, Enum):
    """Comparison operators accepted by ``filter[<field>][operator]``."""

    EQUAL = "="
    LESS_THAN = "<"
    GREATER_THAN = ">"
    LESS_OR_EQUAL = "<="
    GREATER_OR_EQUAL = ">="
    BETWEEN = "<=>"


class OperatorFilter(BaseModel):
    """A filter on one field using a comparison operator.

    ``between`` (``<=>``) takes two values, every other operator exactly
    one. The arity is checked at construction so a malformed filter never
    reaches the wire.
    """

    model_config = ConfigDict(frozen=True)

    operator: FilterOperator
    value1: FilterValue
    value2: FilterValue | None = None

    @model_validator(mode="after")
    def _check_arity(self) -> OperatorFilter:
        if self.value1 == "":
            raise ValueError(f"operator '{self.operator.value}' requires a non-empty value1")
        if self.operator is FilterOperator.BETWEEN:
            if self.value2 is None or self.value2 == "":
                raise ValueError("operator '<=>' (between) requires value2")
        elif self.value2 is not None:
            raise ValueError(
                f"operator '{self.operator.value}' takes a single value; value2 is only valid with '<=>'"
            )
        return self

    @classmethod
    def between(cls, low: FilterValue, high: FilterValue) -> OperatorFilter:
        return cls(operator=FilterOperator.BETWEEN, value1=low, value2=high)


def build_operator_filter(
    operator: str | None,
    value1: FilterValue | None,
    value2: FilterValue | None = None,
) -> OperatorFilter | None:
    """Build an ``OperatorFilter`` from loose tool parameters.

    Returns None unless both ``operator`` and ``value1`` are given, so an
    unset filter is simply omitted. ``value2`` is only forwarded for the
    between operator.

    Raises:
        ValueError: If the operator is unknown or between lacks ``value2``.
    """
    if not operator or value1 is None or value1 == "":
        return None
    try:
        op = FilterOperator(operator.strip())
    except ValueError:
        valid = ", ".join(o.value for o in FilterOperator)
        raise ValueError(f"Invalid filter operator: '{operator}'. Valid operators: {valid}") from None
    return OperatorFilter(
        operator=op,
        value1=value1,
        value2=value2 if op is FilterOperator.BETWEEN else None,
    )


class Ordering(BaseModel):
    """Sort order: ``order[attributes]`` plus ``order[direction]``."""

    model_config = ConfigDict(frozen=True)

    attributes: str | list[str]
    direction: Literal["asc", "desc"] = "desc"


class Pagination(BaseModel):
    """Offset pagination; either bound may be omitted."""

    model_config = ConfigDict(frozen=True)

    page: int | None = None
    page_size: int | None = None


class QueryOptions(BaseModel):
    """Structured query options for a JSON:API request.

    Built per call by the tools layer and rendered once by ``render``.
    """

    model_config = ConfigDict(frozen=True)

    filters: dict[str, FilterValue | None] = Field(default_factory=dict)
    operator_filters: dict[str, OperatorFilter | None] = Field(default_factory=dict)
    include: str | list[str] | None = None
    order: Ordering | None = None
    pagination: Pagination | None = None
    beta: bool = False
    extra_params: dict[str, str | None] = Field(default_factory=dict)


def _stringify(value: Any) -> str:
    """Render a scalar the way the NetBeez API expects it in a query string."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def _join(value: str | list[str]) -> str:
    if isinstance(value, str):
        return value
    return ",".join(value)


def render(options: QueryOptions | None) -> list[tuple[str, str]]:
    """Render ``QueryOptions`` into ordered query-string pairs.

    Rules are applied in a fixed order (plain filters, operator filters,
    include, ordering, pagination, beta flag, passthrough). When two rules
    produce the same key the later value wins while the key keeps its
    first position.

    Args:
        options: The options to render; ``None`` renders nothing.

    Returns:
        A list of ``(key, value)`` string pairs.
    """
    if options is None:
        return []

    params: dict[str, str] = {}

    for field, value in options.filters.items():
        if value is None or value == "":
            continue
        params[f"filter[{field}]"] = _stringify(value)

    for field, op_filter in options.operator_filters.items():
        if op_filter is None:
            continue
        params[f"filter[{field}][operator]"] = op_filter.operator.value
        params[f"filter[{field}][value1]"] = _stringify(op_filter.value1)
        if op_filter.operator is FilterOperator.BETWEEN:
            params[f"filter[{field}][value2]"] = _stringify(op_filter.value2)

    if options.include:
        params["include"] = _join(options.include)

    if options.order is not None:
        params["order[attributes]"] = _join(options.order.attributes)
        params["order[direction]"] = options.order.direction

    if options.pagination is not None:
        if options.pagination.page is not None:
            params["page[offset]"] = _stringify(options.pagination.page)
        if options.pagination.page_size is not None:
            params["page[limit]"] = _stringify(options.pagination.page_size)

    if options.beta:
        params["type"] = "beta"

    for key, raw in options.extra_params.items():
        if raw is not None:
            params[key] = raw

    pairs = list(params.items())
    logger.debug("Rendered %d query parameter(s)", len(pairs))
    return pairs
