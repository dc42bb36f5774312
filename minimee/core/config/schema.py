"""
配置键定义模块（minimee.core.config.schema）

本模块定义封闭的配置键集合与每个键的规范化类别：
- 布尔（默认 no）：debug / disable / minify_html
- 布尔（默认 yes）：combine / combine_css / combine_js / minify / minify_js / relative_path
- 整数：refresh_after / remote_refresh_after
- 枚举（运行时能力探测）：remote_mode
- 路径：base_path / cache_path
- URL：base_url / cache_url
- 其它（原样透传）：minify_css
"""

from typing import Dict, FrozenSet, Tuple

# 全部配置键，顺序即默认层的输出顺序
SETTING_KEYS: Tuple[str, ...] = (
    "base_path",
    "base_url",
    "cache_path",
    "cache_url",
    "combine",
    "combine_css",
    "combine_js",
    "debug",
    "disable",
    "minify",
    "minify_css",
    "minify_html",
    "minify_js",
    "refresh_after",
    "relative_path",
    "remote_mode",
    "remote_refresh_after",
)

KNOWN_KEYS: FrozenSet[str] = frozenset(SETTING_KEYS)

BOOL_DEFAULT_NO_KEYS: FrozenSet[str] = frozenset({"debug", "disable", "minify_html"})
BOOL_DEFAULT_YES_KEYS: FrozenSet[str] = frozenset(
    {"combine", "combine_css", "combine_js", "minify", "minify_js", "relative_path"}
)
INT_KEYS: FrozenSet[str] = frozenset({"refresh_after", "remote_refresh_after"})
ENUM_KEYS: FrozenSet[str] = frozenset({"remote_mode"})
PATH_KEYS: FrozenSet[str] = frozenset({"base_path", "cache_path"})
URL_KEYS: FrozenSet[str] = frozenset({"base_url", "cache_url"})

# 布尔字面量（大小写不敏感，去除首尾空白后整体匹配）
TRUTHY_WORDS: FrozenSet[str] = frozenset({"1", "true", "on", "yes", "y"})
FALSY_WORDS: FrozenSet[str] = frozenset({"0", "false", "off", "no", "n"})

# remote_mode 合法取值
REMOTE_MODES: FrozenSet[str] = frozenset({"auto", "curl", "fgc"})

YES = "yes"
NO = "no"

# 会话缓存命名空间
SESSION_NAMESPACE = "Minimee"
SESSION_SUBKEY = "config"

# 宿主侧的固定名称
SETTINGS_HOOK = "minimee_get_settings"
CONFIG_ITEM = "minimee"
EXTENSION_CLASS = "Minimee_ext"
HTML_HOOK = "template_post_parse"
HTML_HOOK_PRIORITY = 10


def blank_defaults() -> Dict[str, str]:
    """返回全部键均为空字符串的初始映射（解析前的默认层）。"""
    return {key: "" for key in SETTING_KEYS}


def key_class(key: str) -> str:
    """返回配置键所属的规范化类别名，未知键返回 "unknown"。"""
    if key in BOOL_DEFAULT_NO_KEYS:
        return "bool_no"
    if key in BOOL_DEFAULT_YES_KEYS:
        return "bool_yes"
    if key in INT_KEYS:
        return "int"
    if key in ENUM_KEYS:
        return "enum"
    if key in PATH_KEYS:
        return "path"
    if key in URL_KEYS:
        return "url"
    if key in KNOWN_KEYS:
        return "passthrough"
    return "unknown"
