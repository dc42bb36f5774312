"""
核心类型定义（minimee.core.types）
- MinimeeSettings：完整配置字典的结构（TypedDict total=False，覆盖层允许只含部分键）
- HookRegistration：解析后希望宿主登记的 hook 绑定（由宿主决定是否登记）
- LOCATION_*：配置来源标签

注意：
- 键集合封闭，新增键需同步更新 minimee.core.config.schema
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypedDict, Union


class MinimeeSettings(TypedDict, total=False):
    base_path: str
    base_url: str
    cache_path: str
    cache_url: str
    combine: str
    combine_css: str
    combine_js: str
    debug: str
    disable: str
    minify: str
    minify_css: str
    minify_html: str
    minify_js: str
    refresh_after: Union[int, str]
    relative_path: str
    remote_mode: str
    remote_refresh_after: Union[int, str]


# 配置来源标签；hook 可以自行声明其它标签
LOCATION_HOOK = "hook"
LOCATION_CONFIG = "config"
LOCATION_DB = "db"
LOCATION_DEFAULT = "default"


@dataclass(frozen=True)
class HookRegistration:
    """在未安装扩展时，让宿主把 minify_html 绑定到 template_post_parse。"""

    hook: str
    priority: int
    class_name: str
    method: str
    version: str
    settings: str = ""
