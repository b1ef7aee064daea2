import pytest

import main
from shared.config import Settings
from shared.exceptions import ConfigError
from shared.infrastructure.logger import close_logging, get_logger


async def test_startup_failure_leaves_logging_open(tmp_path, monkeypatch):
    monkeypatch.setattr(main, "settings", Settings(DATABASE_URL=None, LOG_DIR=str(tmp_path), _env_file=None))

    try:
        with pytest.raises(ConfigError):
            async with main.lifespan(main.app):
                pass
        get_logger("main").error("Exiting after startup failure")
    finally:
        close_logging()

    written = (tmp_path / "server.log").read_text()
    assert "Database startup failed" in written
    assert "Exiting after startup failure" in written
