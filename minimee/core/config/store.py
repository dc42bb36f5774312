"""
配置存储模块（minimee.core.config.store）

MinimeeConfig 持有两层配置：
- 默认层：解析时写入一次，此后只读（MappingProxyType）
- 运行时覆盖层：稀疏映射，可整体替换、单键设置或清空

读取时覆盖层优先；未知键输出警告诊断并返回 None，从不抛出异常。

使用示例：
    resolution = resolve_config(context)
    config = resolution.config

    if config.is_yes("debug"):
        ...

    config.set_one("minify", "no")
    config.reset().get("minify")
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from minimee.core.config.interfaces import DiagnosticSink
from minimee.core.config.sanitizer import Sanitizer
from minimee.core.config.schema import KNOWN_KEYS, NO, YES, blank_defaults
from minimee.core.types import MinimeeSettings
from minimee.utils.logging_ext import SEVERITY_ERROR, SEVERITY_WARNING


class MinimeeConfig:
    """
    配置存储（默认层 + 运行时覆盖层）

    属性：
        location: 默认层来源（hook/config/db/default 或 hook 自定义标签）；
            默认层取自会话缓存时为 None
        from_session: 默认层是否取自会话缓存
    """

    def __init__(self, sanitizer: Sanitizer, sink: DiagnosticSink) -> None:
        self.sanitizer = sanitizer
        self.sink = sink
        self._default: Mapping[str, Any] = MappingProxyType(blank_defaults())
        self._runtime: Dict[str, Any] = {}
        self._installed = False
        self.location: Optional[str] = None
        self.from_session = False

    # ------------------------------------------------------
    # 默认层
    # ------------------------------------------------------

    def install_default(self, settings: Mapping[str, Any]) -> bool:
        """写入默认层，每个实例只允许一次；重复写入被忽略并输出错误诊断。"""
        if self._installed:
            self.sink.log("Default settings have already been resolved.", SEVERITY_ERROR)
            return False
        self._default = MappingProxyType(dict(settings))
        self._installed = True
        return True

    @property
    def default(self) -> Mapping[str, Any]:
        return self._default

    @property
    def runtime(self) -> Mapping[str, Any]:
        return MappingProxyType(self._runtime)

    def declare_location(self, tag: str) -> bool:
        """供 hook 声明自定义来源标签；标签已设置时忽略并返回 False。"""
        if self.location is not None and self.location != tag:
            return False
        self.location = tag
        return True

    # ------------------------------------------------------
    # 读取
    # ------------------------------------------------------

    def get(self, key: str) -> Any:
        """先查覆盖层，再查默认层；未知键返回 None。"""
        if key in self._runtime:
            return self._runtime[key]

        if key in self._default:
            return self._default[key]

        self.sink.log(f"`{key}` is not a valid setting.", SEVERITY_WARNING)
        return None

    def get_all(self) -> MinimeeSettings:
        """默认层与覆盖层合并后的完整配置（覆盖层优先）。"""
        return {**self._default, **self._runtime}

    @property
    def settings(self) -> MinimeeSettings:
        return self.get_all()

    def is_yes(self, key: str) -> bool:
        return self.get(key) == YES

    def is_no(self, key: str) -> bool:
        return self.get(key) == NO

    # ------------------------------------------------------
    # 写入（仅作用于覆盖层）
    # ------------------------------------------------------

    def set_all(self, settings: Any) -> None:
        """整体替换覆盖层；空映射视为重置，非映射输入记录警告后清空。"""
        if isinstance(settings, Mapping) and len(settings) == 0:
            self._runtime = {}
            return
        # 非映射输入由 sanitise_settings 输出诊断并返回 {}
        self._runtime = self.sanitizer.sanitise_settings(settings)

    def set_one(self, key: str, value: Any) -> None:
        """设置单个覆盖值；未知键只输出诊断。"""
        if key not in KNOWN_KEYS:
            self.sink.log(f"`{key}` is not a valid setting.", SEVERITY_WARNING)
            return
        self._runtime[key] = self.sanitizer.sanitise_setting(key, value)

    def reset(self) -> "MinimeeConfig":
        """清空覆盖层，默认层与来源标签不变；返回自身以便链式调用。"""
        self._runtime = {}
        return self

    def __repr__(self) -> str:
        return (
            f"MinimeeConfig(location={self.location!r}, "
            f"from_session={self.from_session}, overrides={sorted(self._runtime)})"
        )
