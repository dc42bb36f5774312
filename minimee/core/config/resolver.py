"""
配置解析模块（minimee.core.config.resolver）

本模块负责一次完整的配置解析，并保证同一会话内只解析一次。

核心功能：
- ResolverContext：注入全部外部协作者（hook/宿主配置/数据库/会话缓存/能力探测/诊断输出）
- resolve_config：会话缓存命中则原样复用默认层；否则收集 → 合并空白默认值 → 规范化
  → 写入默认层 → 计算期望的 hook 登记 → 写入会话缓存
- Resolution：解析结果（配置存储、来源标签、是否来自会话、期望的 hook 登记）

注意：
- 引擎不会自行登记 hook；是否登记由宿主根据 Resolution.hook_registration 决定
- 会话缓存中的默认层不会再次规范化或与新的来源数据合并
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from minimee import MINIMEE_VER
from minimee.core.config.gatherer import SourceGatherer
from minimee.core.config.interfaces import (
    CapabilityProbe,
    ConfigSource,
    DiagnosticSink,
    HookDispatcher,
    PersistenceSource,
    SessionCache,
)
from minimee.core.config.sanitizer import Sanitizer
from minimee.core.config.schema import (
    EXTENSION_CLASS,
    HTML_HOOK,
    HTML_HOOK_PRIORITY,
    SESSION_NAMESPACE,
    SESSION_SUBKEY,
    YES,
    blank_defaults,
)
from minimee.core.config.store import MinimeeConfig
from minimee.core.exceptions import safe_execute
from minimee.core.types import HookRegistration
from minimee.utils.logging_ext import SEVERITY_INFO, MinimeeLogger


@dataclass
class ResolverContext:
    """
    解析所需的外部协作者

    属性：
        hooks: hook 调度器
        config_source: 宿主结构化配置
        persistence: 扩展表读取（宿主无数据库时为 None）
        session_cache: 当前会话的缓存
        probe: 运行环境能力探测
        root_path: 宿主根目录
        sink: 诊断输出，默认 MinimeeLogger
    """

    hooks: HookDispatcher
    config_source: ConfigSource
    persistence: Optional[PersistenceSource]
    session_cache: SessionCache
    probe: CapabilityProbe
    root_path: str
    sink: Optional[DiagnosticSink] = None

    def diagnostics(self) -> DiagnosticSink:
        if self.sink is None:
            self.sink = MinimeeLogger()
        return self.sink


@dataclass
class Resolution:
    config: MinimeeConfig
    hook_registration: Optional[HookRegistration] = None

    @property
    def location(self) -> Optional[str]:
        return self.config.location

    @property
    def from_session(self) -> bool:
        return self.config.from_session


def _desired_hook_registration(
    config: MinimeeConfig, context: ResolverContext
) -> Optional[HookRegistration]:
    """minify_html 开启且宿主允许扩展、尚未绑定时，返回期望登记的 template_post_parse 绑定。"""
    if config.default.get("minify_html") != YES:
        return None

    allow = safe_execute(
        context.config_source.item,
        "allow_extensions",
        default_return=False,
        log_level=logging.INFO,
    )
    if allow != "y":
        return None

    bound = safe_execute(
        context.hooks.has_binding,
        HTML_HOOK,
        HTML_HOOK_PRIORITY,
        EXTENSION_CLASS,
        default_return=False,
        log_level=logging.INFO,
    )
    if bound:
        return None

    return HookRegistration(
        hook=HTML_HOOK,
        priority=HTML_HOOK_PRIORITY,
        class_name=EXTENSION_CLASS,
        method="minify_html",
        version=MINIMEE_VER,
    )


def resolve_config(
    context: ResolverContext, runtime: Optional[Mapping[str, Any]] = None
) -> Resolution:
    """
    解析配置（每个会话至多一次完整解析）。

    参数：
        context: 外部协作者
        runtime: 可选的运行时覆盖，解析完成后通过 set_all 写入覆盖层

    返回：
        Resolution: 配置存储与期望的 hook 登记
    """
    sink = context.diagnostics()
    sanitizer = Sanitizer(context.probe, sink)
    config = MinimeeConfig(sanitizer, sink)
    registration: Optional[HookRegistration] = None

    cached = None
    if safe_execute(
        context.session_cache.has, SESSION_NAMESPACE, SESSION_SUBKEY, default_return=False
    ):
        cached = safe_execute(
            context.session_cache.get, SESSION_NAMESPACE, SESSION_SUBKEY, default_return=None
        )

    if isinstance(cached, Mapping):
        config.install_default(cached)
        config.from_session = True
        sink.log("Settings have been retrieved from session.", SEVERITY_INFO)
    else:
        gatherer = SourceGatherer(
            hooks=context.hooks,
            config_source=context.config_source,
            persistence=context.persistence,
            sink=sink,
            root_path=context.root_path,
        )
        gathered = gatherer.gather(config)

        # 合并空白默认值，保证默认层包含全部键
        merged = {**blank_defaults(), **gathered.settings}
        config.install_default(sanitizer.sanitise_settings(merged))

        registration = _desired_hook_registration(config, context)

        safe_execute(
            context.session_cache.set,
            SESSION_NAMESPACE,
            SESSION_SUBKEY,
            dict(config.default),
        )
        sink.log("Settings have been saved in session.", SEVERITY_INFO)

    if runtime:
        config.set_all(runtime)

    return Resolution(config=config, hook_registration=registration)
