"""Grain entry and dimension table functions.

The analytics engine only reads from these tables. The insert helpers exist
for seeding and tests.
"""

import logging
from typing import Any, Optional

from .core import connect, execute, fetch_dicts

logger = logging.getLogger(__name__)

# Dimension tables exposed as filter options, keyed by option group name
DIMENSION_TABLES = {
    "crop_classes": ("crop_classes", "id, code, name"),
    "regions": ("master_regions", "id, name"),
    "elevators": ("master_elevators", "id, name"),
    "towns": ("master_towns", "id, name"),
}

ENTRY_COLUMNS = (
    "id",
    "date",
    "crop_id",
    "class_id",
    "elevator_id",
    "town_id",
    "cash_price",
    "futures",
    "basis",
    "notes",
    "is_active",
)


def get_filter_options() -> dict[str, list[dict[str, Any]]]:
    """
    Get the active rows of every filterable dimension, ordered by name.

    Returns:
        Dict with crop_classes, regions, elevators and towns lists
    """
    con = connect()
    try:
        options = {}
        for group, (table, columns) in DIMENSION_TABLES.items():
            options[group] = fetch_dicts(
                con,
                f"SELECT {columns} FROM {table} WHERE is_active = :active ORDER BY name ASC",
                {"active": True},
            )
        return options
    finally:
        con.close()


def insert_crop(crop_id: str, name: str, code: Optional[str] = None, is_active: bool = True) -> None:
    con = connect()
    try:
        execute(
            con,
            "INSERT INTO master_crops (id, name, code, is_active) VALUES (:id, :name, :code, :is_active)",
            {"id": crop_id, "name": name, "code": code, "is_active": is_active},
        )
        con.commit()
    finally:
        con.close()


def insert_crop_class(
    class_id: str,
    name: str,
    code: str,
    crop_id: Optional[str] = None,
    is_active: bool = True,
) -> None:
    con = connect()
    try:
        execute(
            con,
            """INSERT INTO crop_classes (id, crop_id, name, code, is_active)
               VALUES (:id, :crop_id, :name, :code, :is_active)""",
            {"id": class_id, "crop_id": crop_id, "name": name, "code": code, "is_active": is_active},
        )
        con.commit()
    finally:
        con.close()


def insert_region(region_id: str, name: str, is_active: bool = True) -> None:
    con = connect()
    try:
        execute(
            con,
            "INSERT INTO master_regions (id, name, is_active) VALUES (:id, :name, :is_active)",
            {"id": region_id, "name": name, "is_active": is_active},
        )
        con.commit()
    finally:
        con.close()


def insert_town(
    town_id: str,
    name: str,
    region_id: Optional[str] = None,
    is_active: bool = True,
) -> None:
    """Insert a town and, when given, its active region link."""
    con = connect()
    try:
        execute(
            con,
            "INSERT INTO master_towns (id, name, is_active) VALUES (:id, :name, :is_active)",
            {"id": town_id, "name": name, "is_active": is_active},
        )
        con.commit()
    finally:
        con.close()
    if region_id:
        link_town_region(town_id, region_id)


def link_town_region(town_id: str, region_id: str, is_active: bool = True) -> None:
    con = connect()
    try:
        execute(
            con,
            """INSERT INTO town_regions (town_id, region_id, is_active)
               VALUES (:town_id, :region_id, :is_active)""",
            {"town_id": town_id, "region_id": region_id, "is_active": is_active},
        )
        con.commit()
    finally:
        con.close()


def insert_elevator(elevator_id: str, name: str, is_active: bool = True) -> None:
    con = connect()
    try:
        execute(
            con,
            "INSERT INTO master_elevators (id, name, is_active) VALUES (:id, :name, :is_active)",
            {"id": elevator_id, "name": name, "is_active": is_active},
        )
        con.commit()
    finally:
        con.close()


def insert_grain_entry(data: dict) -> str:
    """
    Insert a grain entry.

    Missing optional columns default to NULL; is_active defaults to True.
    Dates are stored as ISO strings.

    Returns:
        The entry id
    """
    row = {column: data.get(column) for column in ENTRY_COLUMNS}
    if row["is_active"] is None:
        row["is_active"] = True
    if hasattr(row["date"], "isoformat"):
        row["date"] = row["date"].isoformat()

    con = connect()
    try:
        execute(
            con,
            f"""INSERT INTO grain_entries ({", ".join(ENTRY_COLUMNS)})
                VALUES ({", ".join(f":{column}" for column in ENTRY_COLUMNS)})""",
            row,
        )
        con.commit()
    finally:
        con.close()

    logger.debug(f"Inserted grain entry {row['id']} for {row['date']}")
    return row["id"]
