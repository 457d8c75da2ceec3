"""Shared request field types."""

from datetime import date, datetime
from typing import Annotated

from pydantic import BeforeValidator


def date_from_timestamp(value: object) -> object:
    """Reduce ISO-8601 timestamps to the calendar date they are written in."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and len(value.strip()) > 10:
        return datetime.fromisoformat(value.strip()).date()
    return value


CalendarDate = Annotated[date, BeforeValidator(date_from_timestamp)]
