"""
minimee 配置解析引擎

从 hook / 宿主配置 / 数据库 / 内置默认值 中解析出唯一一份配置，
逐项校验规范化，并按会话缓存，保证同一会话内只解析一次。
"""

__version__ = "2.0.0"

# 与宿主扩展表中登记的版本号保持一致
MINIMEE_VER = __version__

__all__ = ["__version__", "MINIMEE_VER"]
