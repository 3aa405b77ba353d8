"""Shared helpers for list endpoints: id validation, substring search and pagination."""
import uuid
from fastapi import HTTPException, status
from sqlalchemy import or_
from sqlalchemy.orm import Query

ALL = "all"


def validate_id(value: str, label: str) -> str:
    """Ids are UUID strings; anything else is a 400 before touching the database."""
    try:
        return str(uuid.UUID(value))
    except (ValueError, AttributeError, TypeError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid {label} ID")


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def search_filter(query: Query, term: str | None, *columns) -> Query:
    """Case-insensitive substring match on any of the columns. Blank term = no filter."""
    term = (term or "").strip()
    if not term:
        return query
    pattern = _like_pattern(term)
    return query.filter(or_(*(col.ilike(pattern, escape="\\") for col in columns)))


def equals_filter(query: Query, column, value: str | None) -> Query:
    """Exact match unless the value is empty or "all"."""
    if not value or value == ALL:
        return query
    return query.filter(column == value)


def paginate(query: Query, page: int, limit: int) -> tuple[list, int]:
    """Returns (items on this page, total matching)."""
    total = query.order_by(None).count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    return items, total
