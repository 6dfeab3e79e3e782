import json
import logging
from pathlib import Path
from datetime import datetime, timezone
from typing import Optional, Union


logger = logging.getLogger("agent_relay")


class JsonFormatter(logging.Formatter):
    def __init__(self, redact_content: bool = False):
        super().__init__()
        self._redact_content = redact_content

    def format(self, record: logging.LogRecord) -> str:
        msg = record.getMessage()
        if self._redact_content:
            msg = (msg or "")[:64]
        payload = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "name": record.name,
            "msg": msg,
        }
        extra = getattr(record, "extra", None)
        if isinstance(extra, dict):
            payload.update(extra)
        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logger(log_dir: Optional[Union[str, Path]] = None, redact_content: bool = False) -> logging.Logger:
    """为包 logger 挂上 JSON 行格式的文件输出（logs/agent.log）。

    由入口程序显式调用一次；库代码只通过 logger 写日志，不做任何配置。
    """

    logger.setLevel(logging.INFO)
    target = Path(log_dir or "logs")
    target.mkdir(parents=True, exist_ok=True)
    fh = logging.FileHandler(target / "agent.log", encoding="utf-8")
    fh.setLevel(logging.INFO)
    fh.setFormatter(JsonFormatter(redact_content))
    logger.addHandler(fh)
    return logger
