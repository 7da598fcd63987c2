"""
Analytics Schema - Data structures for the grain analytics engine.

Entries are read-only snapshots of grain market observations. Every other
structure here is a derived view recomputed on each filter change.
"""

import math
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field, fields
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional


def round_half_up(value: float, places: int) -> float:
    """Round half away from zero on the decimal representation of value."""
    quantum = Decimal(1).scaleb(-places)
    rounded = float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))
    # Normalize negative zero
    return rounded + 0.0


def parse_date(value: Any) -> Optional[date]:
    """Coerce a date, datetime or ISO string to a calendar date."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip()[:10])


def parse_number(value: Any) -> Optional[float]:
    """Coerce a numeric column value to float. Unparseable values become None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(Decimal(str(value).strip()))
    except (InvalidOperation, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


class Measure(str, Enum):
    """Numeric entry field an aggregation runs over."""

    BASIS = "basis"
    CASH_PRICE = "cash_price"
    FUTURES = "futures"

    @property
    def label(self) -> str:
        return _MEASURE_LABELS[self]

    def value_of(self, entry: Any) -> Optional[float]:
        """Read this measure from an Entry or a row mapping."""
        if isinstance(entry, Mapping):
            raw = entry.get(self.value)
        else:
            raw = getattr(entry, self.value, None)
        return parse_number(raw)


_MEASURE_LABELS = {
    Measure.BASIS: "Basis",
    Measure.CASH_PRICE: "Cash Price",
    Measure.FUTURES: "Futures",
}


class ReportType(str, Enum):
    """Report variants served by the engine."""

    BASIS_TREND = "basis_trend"
    PRICE_TREND = "price_trend"
    MASTER_DATA = "master_data"

    @property
    def measure(self) -> Measure:
        if self is ReportType.PRICE_TREND:
            return Measure.CASH_PRICE
        return Measure.BASIS

    @property
    def secondary_measure(self) -> Optional[Measure]:
        if self is ReportType.PRICE_TREND:
            return Measure.FUTURES
        return None

    @property
    def required_measure(self) -> Optional[Measure]:
        """Measure that must be non-null for a row to be fetched at all."""
        if self is ReportType.MASTER_DATA:
            return None
        return self.measure


class Trend(str, Enum):
    """Direction of the regression slope."""

    UP = "up"
    DOWN = "down"
    STABLE = "stable"


@dataclass(frozen=True)
class Entry:
    """One observed grain market record, with denormalized display fields."""

    id: str
    date: date
    elevator_id: str
    town_id: str
    crop_id: Optional[str] = None
    class_id: Optional[str] = None
    cash_price: Optional[float] = None
    futures: Optional[float] = None
    basis: Optional[float] = None
    notes: Optional[str] = None
    crop_name: Optional[str] = None
    class_name: Optional[str] = None
    class_code: Optional[str] = None
    elevator_name: Optional[str] = None
    town_name: Optional[str] = None
    region_id: Optional[str] = None
    region_name: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Entry":
        """Build an entry from an executor row. Unknown keys are ignored."""
        known = {f.name for f in fields(cls)}
        data = {key: value for key, value in row.items() if key in known}
        data["date"] = parse_date(row.get("date"))
        if data["date"] is None:
            raise ValueError(f"Entry {row.get('id')!r} has no date")
        for measure in Measure:
            data[measure.value] = parse_number(row.get(measure.value))
        for key in ("id", "elevator_id", "town_id", "crop_id", "class_id", "region_id"):
            if data.get(key) is not None:
                data[key] = str(data[key])
        data.setdefault("elevator_id", "")
        data.setdefault("town_id", "")
        return cls(**data)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["date"] = self.date.isoformat()
        return data


@dataclass(frozen=True)
class FilterSpec:
    """
    Sparse set of optional constraints, AND-ed together.

    A field left as None means "no constraint". Blank strings are treated
    the same as None.
    """

    crop_class_code: Optional[str] = None
    region_id: Optional[str] = None
    elevator_id: Optional[str] = None
    town_id: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None

    def __post_init__(self):
        for name in ("crop_class_code", "region_id", "elevator_id", "town_id"):
            value = getattr(self, name)
            if value is not None:
                value = str(value).strip() or None
            object.__setattr__(self, name, value)
        for name in ("date_from", "date_to"):
            object.__setattr__(self, name, parse_date(getattr(self, name)))

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "FilterSpec":
        if not data:
            return cls()
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})

    def active_fields(self) -> list[str]:
        """Names of the fields that carry a constraint, in declaration order."""
        return [f.name for f in fields(self) if getattr(self, f.name) is not None]

    def is_empty(self) -> bool:
        return not self.active_fields()

    def to_dict(self) -> dict[str, str]:
        """Only the present constraints, dates as ISO strings."""
        result = {}
        for name in self.active_fields():
            value = getattr(self, name)
            result[name] = value.isoformat() if isinstance(value, date) else value
        return result


@dataclass(frozen=True)
class DailyAggregate:
    """One date's mean measure value across contributing entries."""

    date: date
    value: float
    count: int
    secondary: Optional[float] = None
    secondary_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "value": self.value,
            "count": self.count,
            "secondary": self.secondary,
            "secondary_count": self.secondary_count,
        }


@dataclass(frozen=True)
class TrendSummary:
    """Summary statistics over a daily aggregate series."""

    average: float
    minimum: float
    maximum: float
    trend: Trend
    trend_value: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "average": self.average,
            "minimum": self.minimum,
            "maximum": self.maximum,
            "trend": self.trend.value,
            "trendValue": self.trend_value,
        }


@dataclass(frozen=True)
class GroupStat:
    """Per-group summary statistics for the top-N breakdown."""

    group_key: str
    average: float
    minimum: float
    maximum: float
    count: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Predicate:
    """A single field/operator/bound-value constraint. Values are never inlined."""

    field: str
    operator: str
    value: Any


@dataclass(frozen=True)
class QueryPlan:
    """
    Compiled retrieval request handed to the query executor.

    The source clause always selects active entries; predicates are AND-ed;
    results are always ordered by date ascending.
    """

    report_type: ReportType
    predicates: tuple[Predicate, ...] = ()
    non_null: tuple[Measure, ...] = ()
    order_by: tuple[str, str] = field(default=("date", "ASC"), init=False)

    @property
    def is_unfiltered(self) -> bool:
        return not self.predicates
