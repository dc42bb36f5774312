"""
外部协作者接口（minimee.core.config.interfaces）

引擎只通过以下窄接口访问宿主，所有实现均在构造时注入：
- HookDispatcher：hook 是否激活 / 调用 hook / 查询已有绑定
- ConfigSource：宿主结构化配置（minimee / base_url / allow_extensions）
- PersistenceSource：扩展表中保存的配置
- SessionCache：按会话隔离的缓存
- DiagnosticSink：诊断输出（1=错误，2=警告，3=信息）
- CapabilityProbe：remote_mode 校验时的运行环境能力探测
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Union


class HookDispatcher(Protocol):
    def active_hook(self, name: str) -> bool:
        ...

    def call(self, name: str, context: Any) -> Any:
        ...

    def has_binding(self, hook: str, priority: int, class_name: str) -> bool:
        ...


class ConfigSource(Protocol):
    def item(self, key: str) -> Any:
        """返回配置项；不存在时返回 False。"""
        ...


class PersistenceSource(Protocol):
    def fetch_settings_blob(self) -> Optional[Union[str, bytes, Mapping[str, Any]]]:
        """返回已启用扩展行中保存的配置；没有记录时返回 None。"""
        ...


class SessionCache(Protocol):
    def has(self, namespace: str, key: str) -> bool:
        ...

    def get(self, namespace: str, key: str) -> Any:
        ...

    def set(self, namespace: str, key: str, value: Any) -> None:
        ...


class DiagnosticSink(Protocol):
    def log(self, message: str, severity: int) -> None:
        ...


class CapabilityProbe(Protocol):
    def has_loaded_extension(self, name: str) -> bool:
        ...

    def allows_url_fetch(self) -> bool:
        ...

    def supports_secure_transport(self) -> bool:
        ...
