"""
统一异常定义和错误处理机制（minimee.core.exceptions）

本模块定义了项目中使用的标准异常类型，确保：
- 异常信息结构化和标准化
- 日志记录的一致性
- 调试信息的完整性

使用方式：
1. 适配器（hook/配置/数据库）失败时抛出对应的异常类
2. 配置来源收集层使用 safe_execute 吸收异常并降级为“未找到”
3. 配置解析对调用方永不抛出异常，失败只体现为空映射/空字符串/None
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)


class BaseAppException(Exception):
    """
    应用程序基础异常类

    所有业务异常都应该继承此类，提供：
    - 结构化的错误信息
    - 错误代码支持
    - 上下文信息记录
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.context = context or {}
        self.cause = cause
        self.timestamp = time.time()

    def to_dict(self) -> Dict[str, Any]:
        """将异常信息转换为字典格式，便于日志记录"""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp,
            "cause": str(self.cause) if self.cause else None,
        }


class ConfigurationError(BaseAppException):
    """配置相关错误"""
    pass


class SettingsSourceError(ConfigurationError):
    """配置来源（hook/宿主配置/数据库）读取失败"""
    pass


class SettingsDecodeError(SettingsSourceError):
    """数据库中保存的配置无法反序列化为映射"""
    pass


class HookError(SettingsSourceError):
    """hook 调用失败"""
    pass


class DatabaseError(BaseAppException):
    """数据库操作错误"""
    pass


class DatabaseConnectionError(DatabaseError):
    """数据库连接错误"""
    pass


def safe_execute(
    func: Callable[..., Any],
    *args,
    default_return: Any = None,
    log_errors: bool = True,
    log_level: int = logging.WARNING,
    event: str = "safe_execute.error",
    **kwargs,
) -> Any:
    """
    安全执行函数，捕获所有异常并返回默认值

    适用于允许降级的路径，如配置来源查询：某一来源失败只意味着“未找到”

    参数：
        func: 要执行的函数
        *args: 函数位置参数
        default_return: 异常时的默认返回值
        log_errors: 是否记录错误日志
        log_level: 记录错误时使用的日志级别
        event: 结构化日志事件名
        **kwargs: 函数关键字参数

    返回：
        函数执行结果或默认值
    """
    try:
        return func(*args, **kwargs)
    except Exception as e:
        if log_errors:
            extra: Dict[str, Any] = {
                "function": getattr(func, "__name__", repr(func)),
                "error": str(e),
                "error_type": type(e).__name__,
            }
            if isinstance(e, BaseAppException):
                extra.update(e.to_dict())
            logger.log(
                log_level,
                f"安全执行函数 {extra['function']} 失败",
                extra={"event": event, "extra": extra},
            )
        return default_return


__all__ = [
    "BaseAppException",
    "ConfigurationError",
    "SettingsSourceError",
    "SettingsDecodeError",
    "HookError",
    "DatabaseError",
    "DatabaseConnectionError",
    "safe_execute",
]
