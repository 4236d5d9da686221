import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from llm_router.config.settings import settings


REDACT_LIMIT = 64


def _redact(value):
    if isinstance(value, str):
        return value[:REDACT_LIMIT]
    return value


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        redact = settings.log_redact_content
        msg = record.getMessage() or ""
        if redact:
            msg = _redact(msg)
        payload = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "name": record.name,
            "msg": msg,
        }
        extra = getattr(record, "extra", None)
        if isinstance(extra, dict):
            # 结构化字段里同样可能带有模型回复或报错正文
            payload.update({k: _redact(v) if redact else v for k, v in extra.items()})
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def setup_logger() -> logging.Logger:
    logger = logging.getLogger("llm_router")
    logger.setLevel(logging.INFO)
    if logger.handlers:
        return logger
    log_dir = Path(settings.log_dir)
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_dir / "router.log", encoding="utf-8")
    except OSError:
        # 日志目录不可写时不影响对话本身
        logger.addHandler(logging.NullHandler())
        return logger
    fh.setLevel(logging.INFO)
    fh.setFormatter(JsonFormatter())
    logger.addHandler(fh)
    return logger


logger = setup_logger()
