"""
日志适配器（adapters.logging）：统一的日志输出格式
- TextFormatter：本地调试可读的单行文本（level/ts/logger/event/关键字段/msg）
- JsonFormatter：结构化输出（见 minimee.utils.logging_ext）
- init_logging(settings)：初始化全局日志；可选落盘到单个文件（按大小轮转）

设计要点：
- 事件字段通过 extra={"event": ..., "extra": {...}} 传递，两种格式共用
- 便于 CLI 与宿主共用；重复调用会先移除旧 handler
"""

from __future__ import annotations

import logging
import logging.handlers
from datetime import UTC, datetime
from pathlib import Path

from minimee.core.config.settings import EngineSettings
from minimee.utils.logging_ext import JsonFormatter

# TextFormatter 中优先展示的 extra 字段
_TEXT_FIELDS = ("severity", "hook", "class_name", "session_id", "table", "found")


class TextFormatter(logging.Formatter):
    def __init__(self, max_message_length: int | None = None) -> None:
        super().__init__()
        self.max_len = max(0, int((max_message_length or 0)))

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.now(UTC).isoformat(timespec="seconds").replace("+00:00", "Z")
        parts = [record.levelname, f"ts={ts}", f"logger={record.name}"]
        event = getattr(record, "event", None)
        if event:
            parts.append(f"event={event}")
        extra = getattr(record, "extra", None)
        if isinstance(extra, dict):
            for k in _TEXT_FIELDS:
                if k in extra and extra[k] is not None:
                    parts.append(f"{k}={extra[k]}")
        msg = record.getMessage()
        if self.max_len and isinstance(msg, str) and len(msg) > self.max_len:
            msg = msg[: self.max_len] + "…"
        if msg:
            parts.append(f"msg={msg}")
        return " ".join(parts)


def init_logging(
    settings: EngineSettings,
    *,
    log_file: Path | None = None,
    override_format: str | None = None,
    quiet: bool | None = None,
) -> None:
    """初始化全局日志。
    - 格式：override_format > settings.log_format（json|text）
    - 控制台：默认跟随 settings.log_level；quiet 时至少 WARNING
    - log_file：额外写入文件（RotatingFileHandler，5MB * 3）
    """
    fmt = (override_format or settings.log_format or "text").lower()
    formatter: logging.Formatter = JsonFormatter() if fmt == "json" else TextFormatter()

    root = logging.getLogger()
    root_level = getattr(logging, settings.log_level.upper(), logging.INFO)
    root.setLevel(root_level)
    console_level = logging.WARNING if quiet else root_level

    # 清理旧 handler，避免重复添加
    for h in list(root.handlers):
        root.removeHandler(h)

    console = logging.StreamHandler()
    console.setLevel(console_level)
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
        )
        file_handler.setFormatter(JsonFormatter())
        file_handler.setLevel(root_level)
        root.addHandler(file_handler)
