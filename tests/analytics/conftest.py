import pytest

import src.db as db


@pytest.fixture
def seeded_db():
    """
    Seed a small record store:
    - two regions, two towns (one per region), two elevators
    - CWRS and CPSR crop classes
    - six active entries and one soft-deleted entry
    """
    db.insert_crop("wheat", "Wheat")
    db.insert_crop_class("cwrs", "Canada Western Red Spring", "CWRS", crop_id="wheat")
    db.insert_crop_class("cpsr", "Canada Prairie Spring Red", "CPSR", crop_id="wheat")
    db.insert_region("north", "North")
    db.insert_region("south", "South")
    db.insert_town("saskatoon", "Saskatoon", region_id="north")
    db.insert_town("regina", "Regina", region_id="south")
    db.insert_elevator("alpha", "Alpha Terminal")
    db.insert_elevator("beta", "Beta Grain")

    rows = [
        ("g1", "2024-01-01", "cwrs", "alpha", "saskatoon", 10.0, 300.0, 290.0),
        ("g2", "2024-01-01", "cwrs", "beta", "regina", 20.0, 310.0, None),
        ("g3", "2024-01-02", "cwrs", "alpha", "saskatoon", 15.0, None, 291.0),
        ("g4", "2024-01-03", "cpsr", "beta", "regina", None, 305.0, 292.0),
        ("g5", "2024-01-04", "cwrs", "beta", "regina", 30.0, 320.0, 293.0),
        ("g6", "2024-01-05", None, "alpha", "saskatoon", 12.0, None, None),
    ]
    for entry_id, entry_date, class_id, elevator_id, town_id, basis, cash_price, futures in rows:
        db.insert_grain_entry(
            {
                "id": entry_id,
                "date": entry_date,
                "crop_id": "wheat",
                "class_id": class_id,
                "elevator_id": elevator_id,
                "town_id": town_id,
                "basis": basis,
                "cash_price": cash_price,
                "futures": futures,
            }
        )
    db.insert_grain_entry(
        {
            "id": "g-deleted",
            "date": "2024-01-02",
            "class_id": "cwrs",
            "elevator_id": "alpha",
            "town_id": "saskatoon",
            "basis": 999.0,
            "is_active": False,
        }
    )
