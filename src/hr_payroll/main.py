from __future__ import annotations

import importlib
import logging
import os
from decimal import Decimal
from types import ModuleType
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .common.http import register_error_handlers
from .config import get_settings_module
from .container import Container, build_container
from .database.bootstrap import apply_schema, apply_seed_sql, list_tables
from .database.connection import DBConfig
from .payroll.controller import register as register_payroll
from .timesheet.controller import register as register_timesheet

LOG_FORMAT = "%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]"

logger = logging.getLogger(__name__)


def configure_logging(app: Flask, settings: ModuleType) -> None:
    level = getattr(logging, str(getattr(settings, "LOG_LEVEL", "INFO")).upper(), logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT)

    root = logging.getLogger("hr_payroll")
    root.setLevel(level)
    if not any(isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler) for h in root.handlers):
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)
        root.addHandler(stream_handler)

    log_file = getattr(settings, "LOG_FILE", None)
    if log_file and not any(isinstance(h, logging.FileHandler) for h in root.handlers):
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    app.logger.setLevel(level)


def create_app(*, container: Optional[Container] = None, settings_module: Optional[str] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    configure_logging(app, settings)

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            config = DBConfig.from_dict(db_config)
            apply_schema(config)
            logger.info("Schema ready (tables=%d)", len(list_tables(config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(DBConfig.from_dict(db_config))

        container = build_container(
            db_config=db_config,
            grace_minutes=int(getattr(settings, "GRACE_MINUTES", 5)),
            minimum_wage=Decimal(str(getattr(settings, "MINIMUM_WAGE", "16000.00"))),
        )

    app.extensions["hr_payroll.container"] = container
    register_error_handlers(app)
    register_payroll(app, container)
    register_timesheet(app, container)

    return app
