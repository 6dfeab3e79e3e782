import json
import logging

from agent_relay.infrastructure.logging.logger import JsonFormatter, logger, setup_logger


def _record(msg, **extra):
    record = logging.LogRecord("agent_relay", logging.INFO, __file__, 1, msg, None, None)
    if extra:
        record.extra = extra
    return record


def test_json_formatter_merges_extra_payload():
    out = json.loads(JsonFormatter().format(_record("Calling provider", trace_id="tr-1", attempt=2)))
    assert out["msg"] == "Calling provider"
    assert out["level"] == "INFO"
    assert out["trace_id"] == "tr-1"
    assert out["attempt"] == 2
    assert out["ts"].endswith("Z")


def test_json_formatter_redacts_long_messages():
    out = json.loads(JsonFormatter(redact_content=True).format(_record("x" * 100)))
    assert out["msg"] == "x" * 64


def test_setup_logger_writes_json_lines(tmp_path):
    setup_logger(tmp_path / "logs")
    try:
        logger.info("Finished batch", extra={"extra": {"succeeded": 2}})
        for handler in logger.handlers:
            handler.flush()
        line = (tmp_path / "logs" / "agent.log").read_text(encoding="utf-8").strip().splitlines()[-1]
        assert json.loads(line)["succeeded"] == 2
    finally:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
