from __future__ import annotations

import importlib
import logging

from dotenv import load_dotenv

from workhub.config import get_settings_module
from workhub.core.log import configure_logging
from workhub.database.bootstrap import apply_schema, ensure_demo_data

logger = logging.getLogger("workhub.scripts.seed_db")


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config)
    ensure_demo_data(db_config)
    logger.info("Seeded database %s (admin@example.com / member@example.com)", db_config.get("database"))


if __name__ == "__main__":
    main()
