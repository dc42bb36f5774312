"""
运行环境能力探测（adapters.capability）：remote_mode 校验时使用
- RuntimeCapabilityProbe：实时查询当前解释器（扩展模块是否可导入、是否允许按 URL 读取、是否支持 TLS）
- StaticCapabilityProbe：固定结果，供宿主显式声明能力或测试使用

扩展名映射：
- curl -> pycurl 或 requests 可导入
- 其它名称 -> 同名模块可导入
"""

from __future__ import annotations

import importlib.util
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Tuple

# 逻辑扩展名 -> 可满足该能力的 Python 模块
EXTENSION_MODULES: Dict[str, Tuple[str, ...]] = {
    "curl": ("pycurl", "requests"),
    "openssl": ("ssl",),
}


def _module_available(name: str) -> bool:
    try:
        return importlib.util.find_spec(name) is not None
    except (ImportError, ValueError):
        return False


class RuntimeCapabilityProbe:
    def __init__(self, allow_url_fetch: bool = True) -> None:
        self._allow_url_fetch = allow_url_fetch

    def has_loaded_extension(self, name: str) -> bool:
        modules = EXTENSION_MODULES.get(name.lower(), (name,))
        return any(_module_available(m) for m in modules)

    def allows_url_fetch(self) -> bool:
        return bool(self._allow_url_fetch)

    def supports_secure_transport(self) -> bool:
        return self.has_loaded_extension("openssl")


@dataclass
class StaticCapabilityProbe:
    extensions: FrozenSet[str] = field(default_factory=frozenset)
    url_fetch: bool = False
    secure_transport: bool = True

    def has_loaded_extension(self, name: str) -> bool:
        return name.lower() in self.extensions

    def allows_url_fetch(self) -> bool:
        return self.url_fetch

    def supports_secure_transport(self) -> bool:
        return self.secure_transport
