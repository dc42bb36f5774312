"""
配置校验规范化模块（minimee.core.config.sanitizer）

把来源不可信的原始映射转换为只含已知键、类型统一的配置映射。

核心功能：
- sanitise_settings：丢弃未知键，逐键规范化；非映射输入返回空映射并输出诊断
- sanitise_setting：按键类别规范化单个值（布尔/整数/枚举/路径/URL/透传）

注意：
- remote_mode 的结果依赖注入的 CapabilityProbe，在校验时实时探测
- 规范化是幂等的：对已规范化的映射再次规范化结果不变（能力探测结果不变时）
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any, Mapping

from minimee.core.config.interfaces import CapabilityProbe, DiagnosticSink
from minimee.core.config.schema import (
    FALSY_WORDS,
    NO,
    REMOTE_MODES,
    SETTING_KEYS,
    TRUTHY_WORDS,
    YES,
    key_class,
)
from minimee.core.exceptions import safe_execute
from minimee.core.types import MinimeeSettings
from minimee.utils.logging_ext import SEVERITY_INFO, SEVERITY_WARNING

# 路径：折叠所有重复斜杠（行首也折叠），仅保留紧跟冒号之后的 //
_PATH_SLASHES = re.compile(r"(^|[^:])//+")
# URL：同上，但行首的 // 保留（协议相对地址）
_URL_SLASHES = re.compile(r"([^:])//+")
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
# 尾部裁剪：空白与斜杠一起去掉
_TRAILING = " \t\n\r\x00\x0b/"


def _as_text(value: Any) -> str:
    if value is None or value is False:
        return ""
    return str(value)


def _word(value: Any) -> str:
    return _as_text(value).strip().lower()


def coerce_yes_default_no(value: Any) -> str:
    """默认 no 的布尔：仅明确的真值返回 yes。"""
    return YES if value is True or _word(value) in TRUTHY_WORDS else NO


def coerce_yes_default_yes(value: Any) -> str:
    """默认 yes 的布尔：仅明确的假值返回 no。"""
    return NO if value is False or _word(value) in FALSY_WORDS else YES


def coerce_int(value: Any) -> int:
    """整数转换：取前导整数部分，无法识别时为 0。"""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    m = _LEADING_INT.match(_as_text(value))
    if not m:
        return 0
    try:
        return int(m.group(1))
    except ValueError:
        # 超出整数字符串转换位数上限
        return 0


def clean_path(value: Any) -> str:
    """/a//b///c/ -> /a/b/c；file://host//path -> file://host/path"""
    return _PATH_SLASHES.sub(r"\1/", _as_text(value)).rstrip(_TRAILING)


def clean_url(value: Any) -> str:
    """http://example.com//a//b/ -> http://example.com/a/b；行首 // 保留"""
    return _URL_SLASHES.sub(r"\1/", _as_text(value)).rstrip(_TRAILING)


class Sanitizer:
    """
    配置校验器

    参数：
        probe: remote_mode 使用的运行环境能力探测
        sink: 诊断输出
    """

    def __init__(self, probe: CapabilityProbe, sink: DiagnosticSink) -> None:
        self.probe = probe
        self.sink = sink

    def sanitise_settings(self, settings: Any) -> MinimeeSettings:
        """规范化整份配置，只保留已知键（按固定键顺序输出）。"""
        if not isinstance(settings, Mapping):
            self.sink.log("Trying to sanitise a non-array of settings.", SEVERITY_WARNING)
            return {}

        return {
            key: self.sanitise_setting(key, settings[key])
            for key in SETTING_KEYS
            if key in settings
        }

    def sanitise_setting(self, setting: str, value: Any) -> Any:
        """按键类别规范化单个值；未知键原样返回（调用方负责过滤）。"""
        kind = key_class(setting)

        if kind == "bool_no":
            return coerce_yes_default_no(value)

        if kind == "bool_yes":
            return coerce_yes_default_yes(value)

        if kind == "int":
            return coerce_int(value)

        if kind == "enum":
            return self._remote_mode(value)

        if kind == "path":
            return clean_path(value)

        if kind == "url":
            return clean_url(value)

        return value

    def _probe(self, check, *args) -> bool:
        # 探测失败视为能力不可用
        return bool(
            safe_execute(
                check,
                *args,
                default_return=False,
                log_level=logging.INFO,
                event="config.sanitise.probe_failed",
            )
        )

    def _remote_mode(self, value: Any) -> str:
        # 先归一为合法取值
        mode = _word(value)
        if mode not in REMOTE_MODES:
            mode = "auto"

        # auto 优先尝试 curl
        if mode in ("auto", "curl") and self._probe(self.probe.has_loaded_extension, "curl"):
            self.sink.log("Using CURL for remote files.", SEVERITY_INFO)
            return "curl"

        # auto 模式下回退到 file_get_contents
        if mode in ("auto", "fgc") and self._probe(self.probe.allows_url_fetch):
            self.sink.log("Using file_get_contents() for remote files.", SEVERITY_INFO)
            if not self._probe(self.probe.supports_secure_transport):
                self.sink.log(
                    "Your runtime does not appear to support file_get_contents() over SSL.",
                    SEVERITY_WARNING,
                )
            return "fgc"

        self.sink.log("Remote files cannot be fetched.", SEVERITY_WARNING)
        return ""
