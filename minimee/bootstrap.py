"""
装配入口（minimee.bootstrap）

根据 EngineSettings 组装默认的外部协作者，宿主可逐个替换：
- hooks：ExtensionHooks（空注册表）
- config_source：YamlConfigSource(settings.host_config) 或空的 DictConfigSource
- persistence：配置了 db_dsn 时为 ExtensionSettingsSource，否则为 None
- probe：RuntimeCapabilityProbe(settings.allow_url_fetch)

使用示例：
    registry = SessionCacheRegistry()
    context = build_resolver_context(load_engine_settings(), registry.cache_for("sess-1"))
    resolution = resolve_config(context)
"""

from __future__ import annotations

from typing import Optional

from minimee.adapters.capability import RuntimeCapabilityProbe
from minimee.adapters.config_source import DictConfigSource, YamlConfigSource
from minimee.adapters.db import DbConnParams, ExtensionSettingsSource
from minimee.adapters.hooks import ExtensionHooks
from minimee.core.config.interfaces import (
    CapabilityProbe,
    ConfigSource,
    DiagnosticSink,
    HookDispatcher,
    PersistenceSource,
    SessionCache,
)
from minimee.core.config.resolver import ResolverContext
from minimee.core.config.settings import EngineSettings


def build_resolver_context(
    settings: EngineSettings,
    session_cache: SessionCache,
    *,
    hooks: Optional[HookDispatcher] = None,
    config_source: Optional[ConfigSource] = None,
    persistence: Optional[PersistenceSource] = None,
    probe: Optional[CapabilityProbe] = None,
    sink: Optional[DiagnosticSink] = None,
) -> ResolverContext:
    if config_source is None:
        config_source = (
            YamlConfigSource(settings.host_config)
            if settings.host_config
            else DictConfigSource()
        )

    if persistence is None:
        params = DbConnParams.from_settings(settings)
        if params is not None:
            persistence = ExtensionSettingsSource(params)

    return ResolverContext(
        hooks=hooks if hooks is not None else ExtensionHooks(),
        config_source=config_source,
        persistence=persistence,
        session_cache=session_cache,
        probe=probe if probe is not None else RuntimeCapabilityProbe(settings.allow_url_fetch),
        root_path=settings.root_path,
        sink=sink,
    )
