"""Shared builders for analytics tests."""

from datetime import date

from src.analytics.models import Entry


def make_entry(entry_date, basis=None, cash_price=None, futures=None, **overrides):
    """Build an Entry with sensible defaults for aggregation tests."""
    if isinstance(entry_date, str):
        entry_date = date.fromisoformat(entry_date)
    data = {
        "id": f"{entry_date.isoformat()}-{basis}-{cash_price}",
        "date": entry_date,
        "elevator_id": "e1",
        "town_id": "t1",
        "elevator_name": "Alpha Terminal",
        "basis": basis,
        "cash_price": cash_price,
        "futures": futures,
    }
    data.update(overrides)
    return Entry(**data)
