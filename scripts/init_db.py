from __future__ import annotations

import importlib
import logging

from dotenv import load_dotenv

from time_tracking.config import get_settings_module
from time_tracking.database.bootstrap import apply_schema, list_tables

logger = logging.getLogger("time_tracking.init_db")


def main() -> None:
    load_dotenv(override=False)
    logging.basicConfig(level="INFO", format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config)
    tables = list_tables(db_config)
    logger.info(
        "Applied schema -> %s@%s:%s/%s (tables=%s)",
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
        len(tables),
    )


if __name__ == "__main__":
    main()
