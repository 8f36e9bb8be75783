from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.timetrack.timetrack.database.bootstrap import apply_seed_sql
from src.timetrack.timetrack.database.connection import DBConfig
from src.timetrack.timetrack.logging_setup import setup_logging


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    db_config = dict(settings.DB_CONFIG)

    apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
    print(f"OK: Seeded shift catalogue -> {DBConfig.from_mapping(db_config).describe()}")


if __name__ == "__main__":
    main()
