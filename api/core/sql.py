"""
Parameterized statement builders for the record gateway (no I/O).

Condition values are compiled through four variants:
- None             -> IsNull     `col IS NULL`          (no parameter)
- list / tuple     -> In         `col IN ($n, $n+1...)` (one parameter per item)
- {operator, value}-> CustomOp   `col <operator> $n`    (find only)
- anything else    -> Equals     `col = $n`

SQL parameter style is asyncpg's: $1, $2, $3, ...
A single counter runs across every clause of one statement, so the Nth
placeholder always binds the Nth entry of `Statement.args`.

Table names, column names, `order_by` and custom operators are inserted
verbatim. They come from application code, never from request input.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Union

from .errors import UnscopedMutationError, ValidationError


@dataclass(frozen=True)
class Equals:
    value: Any


@dataclass(frozen=True)
class IsNull:
    pass


@dataclass(frozen=True)
class In:
    values: tuple[Any, ...]


@dataclass(frozen=True)
class CustomOp:
    operator: str
    value: Any


Condition = Union[Equals, IsNull, In, CustomOp]

LOGICAL_OPERATORS = ("AND", "OR")


@dataclass(frozen=True)
class Statement:
    sql: str
    args: tuple[Any, ...]


@dataclass(frozen=True)
class QueryOptions:
    columns: str | Sequence[str] = "*"
    order_by: str | None = None
    limit: int | None = None
    offset: int | None = None
    operator: str = "AND"


class _Params:
    """Running placeholder counter shared by all clauses of one statement."""

    def __init__(self) -> None:
        self.args: list[Any] = []

    def bind(self, value: Any) -> str:
        self.args.append(value)
        return f"${len(self.args)}"


def to_condition(value: Any) -> Condition:
    if isinstance(value, (Equals, IsNull, In, CustomOp)):
        return value
    if value is None:
        return IsNull()
    if isinstance(value, Mapping) and "operator" in value:
        operator = str(value["operator"] or "").strip()
        if not operator:
            raise ValidationError("Custom condition operator is empty.")
        return CustomOp(operator=operator, value=value.get("value"))
    if isinstance(value, (list, tuple)):
        return In(values=tuple(value))
    return Equals(value=value)


def _compile_condition(
    column: str,
    condition: Condition,
    params: _Params,
    *,
    allow_custom: bool,
) -> str:
    if isinstance(condition, IsNull):
        return f"{column} IS NULL"

    if isinstance(condition, In):
        if not condition.values:
            raise ValidationError(f"Condition on '{column}' has an empty value list.")
        placeholders = ", ".join(params.bind(v) for v in condition.values)
        return f"{column} IN ({placeholders})"

    if isinstance(condition, CustomOp):
        if not allow_custom:
            raise ValidationError(
                f"Custom operator conditions are only supported for reads (column '{column}')."
            )
        return f"{column} {condition.operator} {params.bind(condition.value)}"

    return f"{column} = {params.bind(condition.value)}"


def _where(
    conditions: Mapping[str, Any],
    params: _Params,
    *,
    operator: str = "AND",
    allow_custom: bool = False,
) -> str:
    clauses = [
        _compile_condition(column, to_condition(value), params, allow_custom=allow_custom)
        for column, value in conditions.items()
    ]
    return f" {operator} ".join(clauses)


def _columns(columns: str | Sequence[str]) -> str:
    if isinstance(columns, str):
        return columns.strip() or "*"
    names = [str(c).strip() for c in columns if str(c).strip()]
    return ", ".join(names) if names else "*"


def _check_int(name: str, value: Any, *, minimum: int) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
        raise ValidationError(f"{name} must be an integer >= {minimum}.")


def normalize_operator(operator: str | None) -> str:
    op = (operator or "AND").strip().upper()
    if op not in LOGICAL_OPERATORS:
        raise ValidationError(f"operator must be one of {list(LOGICAL_OPERATORS)}, got {operator!r}.")
    return op


def build_insert(table: str, fields: Mapping[str, Any], *, returning: str = "*") -> Statement:
    if not fields:
        raise ValidationError("No data provided for insert.")

    params = _Params()
    columns = ", ".join(fields.keys())
    placeholders = ", ".join(params.bind(v) for v in fields.values())
    sql = f"INSERT INTO {table} ({columns}) VALUES ({placeholders}) RETURNING {returning}"
    return Statement(sql=sql, args=tuple(params.args))


def build_select(
    table: str,
    conditions: Mapping[str, Any] | None = None,
    options: QueryOptions | None = None,
) -> Statement:
    options = options or QueryOptions()
    operator = normalize_operator(options.operator)
    _check_int("limit", options.limit, minimum=0)
    _check_int("offset", options.offset, minimum=0)

    params = _Params()
    sql = f"SELECT {_columns(options.columns)} FROM {table}"

    if conditions:
        sql += " WHERE " + _where(conditions, params, operator=operator, allow_custom=True)

    if options.order_by:
        sql += f" ORDER BY {options.order_by}"

    # LIMIT before OFFSET; both are skipped when falsy.
    if options.limit:
        sql += f" LIMIT {params.bind(options.limit)}"
    if options.offset:
        sql += f" OFFSET {params.bind(options.offset)}"

    return Statement(sql=sql, args=tuple(params.args))


def build_update(
    table: str,
    fields: Mapping[str, Any],
    conditions: Mapping[str, Any],
    *,
    returning: str = "*",
) -> Statement:
    if not conditions:
        raise UnscopedMutationError("Update conditions are required to prevent updating all records.")
    if not fields:
        raise ValidationError("No data provided for update.")

    params = _Params()
    set_clause = ", ".join(f"{column} = {params.bind(value)}" for column, value in fields.items())
    where = _where(conditions, params)
    sql = f"UPDATE {table} SET {set_clause} WHERE {where} RETURNING {returning}"
    return Statement(sql=sql, args=tuple(params.args))


def build_delete(table: str, conditions: Mapping[str, Any], *, returning: str = "*") -> Statement:
    if not conditions:
        raise UnscopedMutationError("Delete conditions are required to prevent deleting all records.")

    params = _Params()
    where = _where(conditions, params)
    sql = f"DELETE FROM {table} WHERE {where} RETURNING {returning}"
    return Statement(sql=sql, args=tuple(params.args))
