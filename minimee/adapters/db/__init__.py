"""
数据库适配器模块初始化（minimee.adapters.db）

本模块提供扩展表配置读取：
- DbConnParams：连接参数
- get_conn：连接管理
- ExtensionSettingsSource：配置收集层使用的数据库来源

示例：
    from minimee.adapters.db import DbConnParams, ExtensionSettingsSource
    from minimee.core.config.settings import load_engine_settings

    params = DbConnParams.from_settings(load_engine_settings())
    source = ExtensionSettingsSource(params) if params else None
"""

from .gateway import (
    DbConnParams,
    ExtensionSettingsSource,
    build_settings_query,
    fetch_extension_settings,
    get_conn,
)

__all__ = [
    "DbConnParams",
    "ExtensionSettingsSource",
    "build_settings_query",
    "fetch_extension_settings",
    "get_conn",
]
