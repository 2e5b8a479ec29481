from __future__ import annotations

import importlib
import logging

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .container import AppSettings, build_container
from .timeline.controller import register as register_timeline


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=str(getattr(settings, "LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger(__name__).info("worktimeline starting with settings=%s", settings_module)

    container = build_container(
        settings=AppSettings(
            max_operations=int(getattr(settings, "MAX_OPERATIONS", 200)),
            max_workers=int(getattr(settings, "MAX_WORKERS", 10)),
            default_lunch_start=str(getattr(settings, "DEFAULT_LUNCH_START", "12:00")),
            default_lunch_duration=int(getattr(settings, "DEFAULT_LUNCH_DURATION", 60)),
            export_sheet_title=str(getattr(settings, "EXPORT_SHEET_TITLE", "Timeline")),
        )
    )

    register_timeline(app, container)

    return app
