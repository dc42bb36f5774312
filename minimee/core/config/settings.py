from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """引擎自身的运行配置（环境变量前缀 MINIMEE_，可放在 .env 中）。"""

    model_config = SettingsConfigDict(
        env_prefix="MINIMEE_", env_file=".env", extra="ignore"
    )

    # 宿主根目录，base_path / cache_path 的缺省依据
    root_path: str = Field(default_factory=lambda: str(Path.cwd()))
    # 宿主结构化配置（YAML），为空时只使用内存中的空配置
    host_config: Optional[Path] = None

    db_dsn: Optional[str] = None
    db_table: str = "exp_extensions"
    db_connect_timeout_ms: int = Field(default=5000, ge=0)
    db_statement_timeout_ms: int = Field(default=2000, ge=0)
    db_max_retries: int = Field(default=1, ge=1)
    db_retry_delay_ms: int = Field(default=200, ge=0)

    # remote_mode=fgc 的前提：运行环境允许按 URL 读取文件
    allow_url_fetch: bool = True

    log_level: str = "INFO"
    log_format: str = "text"


def load_engine_settings(**overrides) -> EngineSettings:
    """读取引擎配置；关键字参数优先于环境变量。"""
    return EngineSettings(**{k: v for k, v in overrides.items() if v is not None})
