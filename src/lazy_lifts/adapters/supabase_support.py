"""Shared helpers for Supabase repositories."""

import logging
from collections.abc import Callable
from typing import Any, TypeVar

import httpx
from postgrest.exceptions import APIError

from lazy_lifts.domain.errors import PersistenceError

_logger = logging.getLogger(__name__)

RowT = TypeVar("RowT")


def execute(query: Any, action: str) -> list[dict[str, Any]]:
    """Run a query builder and return its rows.

    Transport and API failures surface as PersistenceError.
    """
    try:
        response = query.execute()
    except (APIError, httpx.HTTPError) as exc:
        _logger.exception("Supabase request failed", extra={"action": action})
        raise PersistenceError(f"Failed to {action}") from exc
    return list(response.data or [])


def parse_rows(
    rows: list[dict[str, Any]], parser: Callable[[dict[str, Any]], RowT], table: str
) -> list[RowT]:
    """Deserialize rows, raising PersistenceError on the first malformed one."""
    parsed = []
    for row in rows:
        try:
            parsed.append(parser(row))
        except (KeyError, TypeError, ValueError) as exc:
            _logger.exception(
                "Malformed row", extra={"table": table, "doc_id": row.get("doc_id")}
            )
            raise PersistenceError(f"Malformed row in {table}") from exc
    return parsed


def require_str(row: dict[str, Any], column: str) -> str:
    """Return a text column, rejecting nulls and non-strings."""
    value = row[column]
    if not isinstance(value, str):
        raise TypeError(f"Column {column} must be text")
    return value
