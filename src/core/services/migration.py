"""Run Alembic migrations programmatically, invoked via the migrate Lambda."""

import io
import logging
import os
from pathlib import Path

from alembic.config import Config

from alembic import command

logger = logging.getLogger(__name__)

DEFAULT_ALEMBIC_INI = "/var/task/alembic.ini"


def _alembic_config() -> Config:
    ini_path = Path(os.environ.get("ALEMBIC_CONFIG", DEFAULT_ALEMBIC_INI))
    cfg = Config(str(ini_path))
    cfg.set_main_option("script_location", str(ini_path.parent / "alembic"))
    cfg.attributes["configure_logger"] = False
    return cfg


def run_migrations(revision: str = "head") -> dict[str, str]:
    """Upgrade to ``revision``. Database credentials are resolved by the Alembic env from core.config."""
    cfg = _alembic_config()

    stderr_buf = io.StringIO()
    stream_handler = logging.StreamHandler(stderr_buf)
    alembic_logger = logging.getLogger("alembic")
    alembic_logger.addHandler(stream_handler)

    try:
        command.upgrade(cfg, revision)
        output = stderr_buf.getvalue()
        logger.info("Migration to %s complete: %s", revision, output)
        return {"status": "success", "revision": revision, "output": output}
    except Exception as e:
        logger.error("Migration failed: %s", e)
        raise
    finally:
        alembic_logger.removeHandler(stream_handler)
