"""
配置来源收集模块（minimee.core.config.gatherer）

按优先级依次尝试各配置来源，首个返回非空映射的来源胜出并记录来源标签。

来源优先级：
1. hook：minimee_get_settings 激活时调用，上下文为配置存储本身（hook 可自行声明来源标签）
2. 宿主配置：配置项 minimee 为非空映射
3. 数据库：宿主允许扩展（allow_extensions == "y"）时读取已启用的 Minimee_ext 扩展行
4. 都未命中：空映射，来源标签为 default

之后无论哪个来源胜出，都为 cache_path / cache_url / base_path / base_url 补齐缺省值。

注意：
- 任一来源失败（异常、非映射、无法反序列化）都视为“未找到”，记录信息级诊断后继续
- 本模块从不向调用方抛出异常
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from minimee.core.config.interfaces import (
    ConfigSource,
    DiagnosticSink,
    HookDispatcher,
    PersistenceSource,
)
from minimee.core.config.schema import CONFIG_ITEM, SETTINGS_HOOK
from minimee.core.config.store import MinimeeConfig
from minimee.core.exceptions import SettingsDecodeError, safe_execute
from minimee.core.types import (
    LOCATION_CONFIG,
    LOCATION_DB,
    LOCATION_DEFAULT,
    LOCATION_HOOK,
)
from minimee.utils.logging_ext import SEVERITY_INFO, SEVERITY_WARNING


@dataclass
class GatherResult:
    """来源收集结果：原始配置映射（已补齐缺省路径/URL）与来源标签。"""

    settings: Dict[str, Any] = field(default_factory=dict)
    location: str = LOCATION_DEFAULT


def decode_settings_blob(blob: Any) -> Dict[str, Any]:
    """把数据库中保存的配置反序列化为映射。
    - 已是映射（如 jsonb 列）直接复制
    - bytes/str 按 UTF-8 JSON 解析
    - 结果不是映射时抛出 SettingsDecodeError
    """
    if isinstance(blob, Mapping):
        return dict(blob)
    if isinstance(blob, (bytes, bytearray, memoryview)):
        blob = bytes(blob).decode("utf-8")
    if not isinstance(blob, str):
        raise SettingsDecodeError(
            "扩展配置类型无法识别", context={"blob_type": type(blob).__name__}
        )
    try:
        data = json.loads(blob)
    except ValueError as e:
        raise SettingsDecodeError("扩展配置不是合法的 JSON", cause=e) from e
    if not isinstance(data, Mapping):
        raise SettingsDecodeError(
            "扩展配置反序列化结果不是映射", context={"decoded_type": type(data).__name__}
        )
    return dict(data)


def _non_empty_mapping(value: Any) -> Optional[Dict[str, Any]]:
    if isinstance(value, Mapping) and len(value) > 0:
        return dict(value)
    return None


def _text(value: Any) -> str:
    if value is None or value is False:
        return ""
    return str(value)


class SourceGatherer:
    """
    配置来源收集器

    参数：
        hooks: hook 调度器
        config_source: 宿主结构化配置
        persistence: 扩展表读取（可为 None，表示宿主不提供数据库）
        sink: 诊断输出
        root_path: 宿主根目录（base_path / cache_path 的缺省依据）
    """

    def __init__(
        self,
        hooks: HookDispatcher,
        config_source: ConfigSource,
        persistence: Optional[PersistenceSource],
        sink: DiagnosticSink,
        root_path: str,
    ) -> None:
        self.hooks = hooks
        self.config_source = config_source
        self.persistence = persistence
        self.sink = sink
        self.root_path = root_path

    def gather(self, config: MinimeeConfig) -> GatherResult:
        """依优先级收集原始配置，并把来源标签写到 config.location。"""
        settings = self._from_hook(config)
        if settings is not None:
            # hook 有机会自行声明来源标签，只有仍未设置时才记为 hook
            if config.location is None:
                config.location = LOCATION_HOOK
        else:
            settings = self._from_config()
            if settings is not None:
                config.location = LOCATION_CONFIG
            else:
                settings = self._from_db()
                if settings is not None:
                    config.location = LOCATION_DB

        if settings is None:
            self.sink.log("Could not find any settings to use. Using defaults.", SEVERITY_WARNING)
            config.location = LOCATION_DEFAULT
            settings = {}

        self._apply_fallbacks(settings)
        return GatherResult(settings=settings, location=config.location)

    # ------------------------------------------------------

    def _config_item(self, key: str) -> Any:
        return safe_execute(
            self.config_source.item,
            key,
            default_return=False,
            log_level=logging.INFO,
            event="config.source.failed",
        )

    def _from_hook(self, config: MinimeeConfig) -> Optional[Dict[str, Any]]:
        active = safe_execute(
            self.hooks.active_hook,
            SETTINGS_HOOK,
            default_return=False,
            log_level=logging.INFO,
            event="config.source.failed",
        )
        if not active:
            return None

        result = safe_execute(
            self.hooks.call,
            SETTINGS_HOOK,
            config,
            default_return=None,
            log_level=logging.INFO,
            event="config.source.failed",
        )
        settings = _non_empty_mapping(result)
        if settings is None:
            self.sink.log("Settings hook returned no usable settings.", SEVERITY_INFO)
            return None

        self.sink.log("Settings taken from hook.", SEVERITY_INFO)
        return settings

    def _from_config(self) -> Optional[Dict[str, Any]]:
        settings = _non_empty_mapping(self._config_item(CONFIG_ITEM))
        if settings is None:
            self.sink.log("No settings found in config.", SEVERITY_INFO)
            return None

        self.sink.log("Settings taken from config.", SEVERITY_INFO)
        return settings

    def _from_db(self) -> Optional[Dict[str, Any]]:
        if self.persistence is None or self._config_item("allow_extensions") != "y":
            return None

        blob = safe_execute(
            self.persistence.fetch_settings_blob,
            default_return=None,
            log_level=logging.INFO,
            event="config.source.failed",
        )
        if blob is None:
            self.sink.log("No settings found in database.", SEVERITY_INFO)
            return None

        settings = _non_empty_mapping(
            safe_execute(
                decode_settings_blob,
                blob,
                default_return=None,
                log_level=logging.INFO,
                event="config.source.failed",
            )
        )
        if settings is None:
            self.sink.log("Settings stored in database are empty or malformed.", SEVERITY_INFO)
            return None

        self.sink.log("Settings retrieved from database.", SEVERITY_INFO)
        return settings

    def _apply_fallbacks(self, settings: Dict[str, Any]) -> None:
        base_url = _text(self._config_item("base_url"))

        if not settings.get("cache_path"):
            settings["cache_path"] = f"{self.root_path}/cache"

        if not settings.get("cache_url"):
            settings["cache_url"] = f"{base_url}/cache"

        if not settings.get("base_path"):
            settings["base_path"] = self.root_path

        if not settings.get("base_url"):
            settings["base_url"] = base_url
