"""Reusable filter expressions."""

from sqlalchemy import ColumnElement, or_
from sqlalchemy.orm import InstrumentedAttribute


def search_any(
    term: str, *columns: InstrumentedAttribute[str] | InstrumentedAttribute[str | None]
) -> ColumnElement[bool]:
    """Case-insensitive substring match against any of ``columns``.

    ``%`` and ``_`` in ``term`` match themselves, not any character.
    """
    needle = term.strip()
    return or_(*(column.icontains(needle, autoescape=True) for column in columns))
