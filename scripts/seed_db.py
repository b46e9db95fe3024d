from __future__ import annotations

import importlib

from hr_payroll.config import get_settings_module
from hr_payroll.database.bootstrap import apply_seed_sql
from hr_payroll.database.connection import DBConfig


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    config = DBConfig.from_dict(dict(settings.DB_CONFIG))

    count = apply_seed_sql(config)
    print(f"OK: Seeded statutory tables ({count} statements) -> {config.user}@{config.host}:{config.port}/{config.database}")


if __name__ == "__main__":
    main()
