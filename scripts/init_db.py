from __future__ import annotations

import importlib

from hr_payroll.config import get_settings_module
from hr_payroll.database.bootstrap import apply_schema, list_tables
from hr_payroll.database.connection import DBConfig


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    config = DBConfig.from_dict(dict(settings.DB_CONFIG))

    apply_schema(config)
    tables = list_tables(config)
    print(f"OK: Applied schema.sql -> {config.user}@{config.host}:{config.port}/{config.database} (tables={len(tables)})")


if __name__ == "__main__":
    main()
