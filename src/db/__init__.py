"""Database access layer -- domain-organized package.

All public functions are re-exported here so that consumers can import
``from src.db import connect, execute, ...``.
"""

from .core import (
    connect,
    execute,
    fetch_dicts,
    table_exists,
    get_db_backend,
    get_schema_path,
    init_db,
    assert_tables_exist,
    _prepare_query,
    _is_postgres,
    _normalize_db_url,
    DB_PATH,
    REQUIRED_TABLES,
    ROOT,
    SCHEMA_PATH,
    SCHEMA_POSTGRES_PATH,
)
from .grain import (
    get_filter_options,
    insert_crop,
    insert_crop_class,
    insert_region,
    insert_town,
    link_town_region,
    insert_elevator,
    insert_grain_entry,
)
