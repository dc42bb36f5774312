"""
数据库网关（adapters.db.gateway）：读取扩展表中保存的 minimee 配置
- DbConnParams：由 EngineSettings 提取的连接参数（DSN/超时/重试/表名）
- get_conn：连接管理；仅对“建立连接”做重试，退出时确保关闭
- fetch_extension_settings：查询已启用的 Minimee_ext 扩展行，返回其 settings 列
- ExtensionSettingsSource：PersistenceSource 实现，供配置收集层调用

注意：
- 仅读取单行；游标与连接在任何退出路径上都会释放
- 表名来自配置而非用户输入，使用 psycopg.sql.Identifier 拼接
- 连接/查询失败抛出 DatabaseConnectionError/DatabaseError，由配置收集层吸收
"""

from __future__ import annotations

import logging
import time as _time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator, Optional

import psycopg
from psycopg import sql

from minimee.core.config.schema import EXTENSION_CLASS
from minimee.core.config.settings import EngineSettings
from minimee.core.exceptions import DatabaseConnectionError, DatabaseError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DbConnParams:
    """连接参数结构。

    属性：
        dsn: 可供 psycopg.connect 使用的 DSN
        table: 扩展表名（默认 exp_extensions）
        connect_timeout_ms / statement_timeout_ms: 连接与语句超时
        max_retries / retry_delay_ms: 建立连接的重试次数与间隔
    """

    dsn: str
    table: str = "exp_extensions"
    connect_timeout_ms: int = 5000
    statement_timeout_ms: int = 2000
    max_retries: int = 1
    retry_delay_ms: int = 200

    @classmethod
    def from_settings(cls, settings: EngineSettings) -> Optional["DbConnParams"]:
        """未配置 db_dsn 时返回 None（宿主不提供数据库来源）。"""
        if not settings.db_dsn:
            return None
        return cls(
            dsn=settings.db_dsn,
            table=settings.db_table,
            connect_timeout_ms=settings.db_connect_timeout_ms,
            statement_timeout_ms=settings.db_statement_timeout_ms,
            max_retries=settings.db_max_retries,
            retry_delay_ms=settings.db_retry_delay_ms,
        )


@contextmanager
def get_conn(params: DbConnParams) -> Iterator[psycopg.Connection]:
    """
    获取数据库连接。

    - 仅对“建立连接”做重试；进入 with 块后的异常将原样抛出
    - 连接超时：params.connect_timeout_ms
    - 语句超时：params.statement_timeout_ms（连接建立后设置，失败只记录警告）
    """
    attempts = max(1, int(params.max_retries))
    delay = max(0.0, float(params.retry_delay_ms) / 1000.0)

    conn: psycopg.Connection | None = None
    for i in range(attempts):
        try:
            conn = psycopg.connect(
                params.dsn,
                connect_timeout=max(1, int(params.connect_timeout_ms) // 1000),
            )
            break
        except psycopg.Error as e:
            if i < attempts - 1:
                _time.sleep(delay)
                delay *= 2
            else:
                raise DatabaseConnectionError(
                    f"无法建立数据库连接: {e}",
                    context={"dsn_preview": params.dsn[:50] + "...", "attempts": attempts},
                    cause=e,
                ) from e

    assert conn is not None
    try:
        try:
            with conn.cursor() as cur:
                # PostgreSQL 需要时间单位字符串格式，不能使用参数化查询
                timeout_ms = int(params.statement_timeout_ms)
                cur.execute(f"SET statement_timeout TO '{timeout_ms}ms'")
        except (psycopg.DatabaseError, psycopg.InterfaceError) as e:
            logger.warning(
                "设置语句超时失败，使用默认超时设置",
                extra={
                    "event": "db.statement_timeout.set_failed",
                    "extra": {"timeout_ms": int(params.statement_timeout_ms), "error": str(e)},
                },
            )
            conn.rollback()
        yield conn
    finally:
        try:
            conn.close()
        except (psycopg.InterfaceError, psycopg.OperationalError) as e:
            logger.debug(
                "连接关闭时发生错误",
                extra={"event": "db.connection.close_failed", "extra": {"error": str(e)}},
            )


def build_settings_query(table: str) -> sql.Composed:
    return sql.SQL(
        "SELECT settings FROM {} WHERE enabled = %s AND class = %s LIMIT 1"
    ).format(sql.Identifier(table))


def fetch_extension_settings(
    conn: psycopg.Connection, table: str, class_name: str = EXTENSION_CLASS
) -> Optional[Any]:
    """返回已启用扩展行的 settings 列；没有记录时返回 None。"""
    started = _time.perf_counter()
    try:
        with conn.cursor() as cur:
            cur.execute(build_settings_query(table), ("y", class_name))
            row = cur.fetchone()
    except psycopg.Error as e:
        raise DatabaseError(
            f"读取扩展配置失败: {e}",
            context={"table": table, "class_name": class_name},
            cause=e,
        ) from e

    logger.info(
        "扩展配置查询完成",
        extra={
            "event": "db.extension_settings.fetch",
            "extra": {
                "table": table,
                "class_name": class_name,
                "found": row is not None,
                "cost_ms": int((_time.perf_counter() - started) * 1000),
            },
        },
    )
    if row is None:
        return None
    return row[0]


class ExtensionSettingsSource:
    """PersistenceSource 实现：每次调用打开一个连接，读取单行后立即释放。"""

    def __init__(self, params: DbConnParams, class_name: str = EXTENSION_CLASS) -> None:
        self.params = params
        self.class_name = class_name

    def fetch_settings_blob(self) -> Optional[Any]:
        with get_conn(self.params) as conn:
            return fetch_extension_settings(conn, self.params.table, self.class_name)
