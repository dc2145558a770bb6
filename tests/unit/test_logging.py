from __future__ import annotations

import json

from bindforms import logger as package_logger
from bindforms.logging import configure_logging, get_logger
from bindforms.settings import Settings


def test_stdlib_logger_is_configured(capsys) -> None:
    configure_logging(settings=Settings(log_json=False, log_level="INFO"), force=True)
    logger = get_logger("tests")
    logger.info("hello")

    captured = capsys.readouterr()
    assert "hello" in captured.err.lower()


def test_extra_mapping_is_flattened_into_json_event(capsys) -> None:
    configure_logging(settings=Settings(log_json=True, log_level="INFO"), force=True)
    logger = get_logger("tests")
    logger.info("field bound", extra={"path": "address.city"})

    line = capsys.readouterr().err.strip().splitlines()[-1]
    payload = json.loads(line)
    assert payload["message"] == "field bound"
    assert payload["path"] == "address.city"
    assert "extra" not in payload


def test_package_logger_created_on_import() -> None:
    assert callable(getattr(package_logger, "info", None))
