"""
配置解析与校验（minimee.core.config）

- schema：封闭的配置键集合与规范化类别
- sanitizer：逐键校验规范化
- store：默认层 + 运行时覆盖层
- gatherer：按优先级收集配置来源
- resolver：会话级一次性解析
- settings：引擎自身运行配置
"""

from .gatherer import GatherResult, SourceGatherer, decode_settings_blob
from .resolver import Resolution, ResolverContext, resolve_config
from .sanitizer import Sanitizer, clean_path, clean_url, coerce_int
from .schema import KNOWN_KEYS, SETTING_KEYS
from .store import MinimeeConfig

__all__ = [
    "GatherResult",
    "SourceGatherer",
    "decode_settings_blob",
    "Resolution",
    "ResolverContext",
    "resolve_config",
    "Sanitizer",
    "clean_path",
    "clean_url",
    "coerce_int",
    "KNOWN_KEYS",
    "SETTING_KEYS",
    "MinimeeConfig",
]
