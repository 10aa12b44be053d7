import json
import logging
from pathlib import Path

import pytest

from webacl.utils.logging import JsonFormatter, configure_logging, get_logger, logging_config


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("webacl.acl.document", logging.DEBUG, __file__, 1, "split subject", (), None)
    record.__dict__.update(extra)
    return record


def test_json_formatter_keeps_extra_context() -> None:
    payload = json.loads(JsonFormatter().format(_record(subject="owner", fragments=2)))
    assert payload["message"] == "split subject"
    assert payload["level"] == "DEBUG"
    assert payload["logger"] == "webacl.acl.document"
    assert payload["subject"] == "owner"
    assert payload["fragments"] == 2
    assert "lineno" not in payload


def test_logging_config_switches_console_handler(tmp_path: Path) -> None:
    rich = logging_config("debug", tmp_path, rich_console=True)
    assert rich["handlers"]["console"]["class"] == "rich.logging.RichHandler"
    assert rich["root"]["level"] == "DEBUG"

    plain = logging_config("INFO", tmp_path, rich_console=False)
    assert plain["handlers"]["console"]["formatter"] == "json"
    assert plain["handlers"]["file"]["filename"] == str(tmp_path / "webacl.log")


def test_configure_logging_writes_json_lines(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WEBACL_RICH", "0")
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        configure_logging(level="DEBUG", log_dir=tmp_path / "logs")
        get_logger("webacl.test").info("granted", extra={"actor": "alice"})
        for handler in root.handlers:
            handler.flush()
        line = (tmp_path / "logs" / "webacl.log").read_text(encoding="utf-8").strip().splitlines()[-1]
        assert json.loads(line)["actor"] == "alice"
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
