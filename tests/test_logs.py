"""Tests for the lighthouse error log file and request context."""

import logging
import re

import pytest

from lighthouse import App, AppConfig, Response
from lighthouse.context import get_config, get_request
from lighthouse.server.logs import configure_file_logging
from lighthouse.testing import TestClient

TIMESTAMP = re.compile(r"^\[\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\] ")


@pytest.fixture
def lighthouse_logger():
    logger = logging.getLogger("lighthouse")
    handlers = list(logger.handlers)
    level = logger.level
    yield logger
    for handler in logger.handlers:
        if handler not in handlers:
            handler.close()
            logger.removeHandler(handler)
    logger.setLevel(level)


class TestFileLogging:
    def test_lines_are_timestamped(self, tmp_path, lighthouse_logger) -> None:
        path = tmp_path / "logs" / "error_log.txt"
        handler = configure_file_logging(path)
        logging.getLogger("lighthouse.data").error("insert into users failed")
        handler.flush()
        line = path.read_text().strip()
        assert TIMESTAMP.match(line)
        assert line.endswith("] insert into users failed")

    def test_idempotent_per_path(self, tmp_path, lighthouse_logger) -> None:
        first = configure_file_logging(tmp_path / "a.log")
        second = configure_file_logging(tmp_path / "a.log")
        other = configure_file_logging(tmp_path / "b.log")
        assert first is second
        assert other is not first

    def test_appends(self, tmp_path, lighthouse_logger) -> None:
        path = tmp_path / "error_log.txt"
        path.write_text("[2024-01-01 00:00:00] earlier\n")
        handler = configure_file_logging(path)
        logging.getLogger("lighthouse").error("later")
        handler.flush()
        assert path.read_text().splitlines()[0].endswith("earlier")
        assert path.read_text().splitlines()[1].endswith("later")

    async def test_app_failures_reach_log_file(self, tmp_path, lighthouse_logger) -> None:
        log_file = tmp_path / "error_log.txt"
        app = App(AppConfig(log_file=log_file))

        @app.route("/boom")
        def boom():
            raise RuntimeError("disk full")

        async with TestClient(app) as client:
            response = await client.get("/boom")
        assert response.status == 500
        for handler in lighthouse_logger.handlers:
            handler.flush()
        assert "disk full in " in log_file.read_text()


class TestContext:
    async def test_request_and_config_visible_to_helpers(self) -> None:
        config = AppConfig(app_name="Ctx")
        app = App(config)

        def describe() -> str:
            return f"{get_config().app_name} {get_request().path}"

        @app.route("/where")
        def where():
            return Response(describe())

        async with TestClient(app) as client:
            assert (await client.get("/where")).text == "Ctx /where"

    def test_outside_request(self) -> None:
        with pytest.raises(LookupError):
            get_request()
        assert get_config().app_name == "Lighthouse"
