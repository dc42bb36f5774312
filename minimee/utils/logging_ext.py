"""
结构化日志扩展：事件埋点 + 诊断输出

说明：MinimeeLogger 是引擎默认的诊断输出（DiagnosticSink），沿用宿主习惯的
1/2/3 三级严重度；宿主可以注入自己的实现替换它。
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

# 事件名常量（集中管理，避免魔法字符串散落各处）
EVENT_DIAGNOSTIC = "minimee.diagnostic"

# 严重度：1=错误，2=警告，3=信息
SEVERITY_ERROR = 1
SEVERITY_WARNING = 2
SEVERITY_INFO = 3

_SEVERITY_LEVELS = {
    SEVERITY_ERROR: logging.ERROR,
    SEVERITY_WARNING: logging.WARNING,
    SEVERITY_INFO: logging.INFO,
}


def severity_to_level(severity: int) -> int:
    """把 1/2/3 严重度换算为 logging 级别；超界按 INFO 处理。"""
    return _SEVERITY_LEVELS.get(int(severity), logging.INFO)


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%SZ"),
            "level": record.levelname,
            "logger": record.name,
        }
        if hasattr(record, "event"):
            payload["event"] = getattr(record, "event")
        # 合并 extra 字段
        for k, v in getattr(record, "extra", {}).items():
            payload[k] = v
        if record.getMessage():
            payload["msg"] = record.getMessage()
        return json.dumps(payload, ensure_ascii=False, default=str)


class EventLogger:
    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or logging.getLogger("minimee")

    def log(self, level: int, event: str, message: str = "", **fields: Any) -> None:
        self.logger.log(level, message, extra={"event": event, "extra": fields})

    def info(self, event: str, message: str = "", **fields: Any) -> None:
        self.log(logging.INFO, event, message, **fields)

    def warning(self, event: str, message: str = "", **fields: Any) -> None:
        self.log(logging.WARNING, event, message, **fields)

    def error(self, event: str, message: str = "", **fields: Any) -> None:
        self.log(logging.ERROR, event, message, **fields)


class MinimeeLogger:
    """默认诊断输出：log(message, severity)，只写日志，从不抛出异常。"""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.events = EventLogger(logger or logging.getLogger("minimee"))

    def log(
        self,
        message: str,
        severity: int = SEVERITY_INFO,
        **fields: Any,
    ) -> None:
        self.events.log(
            severity_to_level(severity),
            EVENT_DIAGNOSTIC,
            f"Minimee: {message}",
            severity=int(severity),
            **fields,
        )


__all__ = [
    "JsonFormatter",
    "EventLogger",
    "MinimeeLogger",
    "severity_to_level",
    "SEVERITY_ERROR",
    "SEVERITY_WARNING",
    "SEVERITY_INFO",
    "EVENT_DIAGNOSTIC",
]
