from __future__ import annotations

import importlib
import logging

from dotenv import load_dotenv

from sitepay.database.bootstrap import apply_schema, list_tables
from sitepay.logging_config import configure_logging
from sitepay.settings import get_settings_module

logger = logging.getLogger("sitepay.scripts.init_db")


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    db_config = dict(settings.DB_CONFIG)

    statements = apply_schema(db_config)
    tables = list_tables(db_config)
    logger.info(
        "schema_applied",
        extra={
            "db": f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}",
            "statements": statements,
            "tables": len(tables),
        },
    )


if __name__ == "__main__":
    main()
