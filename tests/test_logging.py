from __future__ import annotations

import io
import logging

import orjson

from core.logging import JsonFormatter, configure_logging


def test_json_formatter_includes_extras() -> None:
    record = logging.LogRecord("pt.test", logging.INFO, __file__, 1, "hello %s", ("world",), None)
    record._extra_strategy = "orb"
    payload = orjson.loads(JsonFormatter().format(record))
    assert payload["message"] == "hello world"
    assert payload["level"] == "INFO"
    assert payload["name"] == "pt.test"
    assert payload["strategy"] == "orb"


def test_configure_logging_replaces_its_handlers(tmp_path) -> None:
    root = logging.getLogger()
    before = len(root.handlers)
    stream = io.StringIO()
    configure_logging("DEBUG", stream=stream)
    configure_logging("INFO", log_path=tmp_path / "logs" / "pt.log", stream=stream)
    try:
        assert len(root.handlers) == before + 2
        logging.getLogger("pt.test").info("ready", extra={"_extra_bars": 3})
        line = stream.getvalue().strip().splitlines()[-1]
        assert orjson.loads(line)["bars"] == 3
        assert (tmp_path / "logs" / "pt.log").exists()
    finally:
        for handler in list(root.handlers):
            if getattr(handler, "_pt_handler", False):
                root.removeHandler(handler)
                handler.close()
