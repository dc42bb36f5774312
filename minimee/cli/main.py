from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import List, Optional

import typer

from minimee import __version__
from minimee.adapters.capability import RuntimeCapabilityProbe
from minimee.adapters.logging.init import init_logging
from minimee.adapters.session import SessionCacheRegistry
from minimee.bootstrap import build_resolver_context
from minimee.core.config.resolver import resolve_config
from minimee.core.config.sanitizer import Sanitizer
from minimee.core.config.schema import KNOWN_KEYS
from minimee.core.config.settings import load_engine_settings
from minimee.utils.logging_ext import MinimeeLogger

host_config_option = typer.Option(
    None, help="宿主配置 YAML（覆盖 MINIMEE_HOST_CONFIG）", show_default=False
)
root_path_option = typer.Option(
    None, help="宿主根目录（覆盖 MINIMEE_ROOT_PATH）", show_default=False
)
log_format_option = typer.Option(
    None, help="覆盖日志格式：json|text（默认 MINIMEE_LOG_FORMAT）", show_default=False
)
quiet_option = typer.Option(
    False, "--quiet", help="安静模式（仅控制台 WARNING 及以上）", show_default=False
)

app = typer.Typer(help="minimee 配置解析：查看解析结果 / 校验单个配置值")


def _parse_overrides(pairs: Optional[List[str]]) -> dict:
    overrides = {}
    for pair in pairs or []:
        if "=" not in pair:
            raise typer.BadParameter(f"需要 key=value 形式: {pair}", param_hint="--set")
        key, value = pair.split("=", 1)
        overrides[key.strip()] = value
    return overrides


@app.command()
def version() -> None:
    """打印版本。"""
    typer.echo(f"minimee {__version__}")


@app.command()
def show(
    host_config: Optional[Path] = host_config_option,
    root_path: Optional[str] = root_path_option,
    session: str = typer.Option("cli", help="会话 ID"),
    overrides: Optional[List[str]] = typer.Option(
        None, "--set", help="运行时覆盖，可重复：--set debug=yes", show_default=False
    ),
    log_format: Optional[str] = log_format_option,
    quiet: bool = quiet_option,
) -> None:
    """解析配置并以 JSON 输出（来源标签、合并后的配置、期望的 hook 登记）。
    示例：python -m minimee.cli.main show --host-config configs/host.yaml --set debug=yes
    """
    settings = load_engine_settings(host_config=host_config, root_path=root_path)
    init_logging(settings, override_format=log_format, quiet=quiet)

    registry = SessionCacheRegistry()
    context = build_resolver_context(settings, registry.cache_for(session))
    resolution = resolve_config(context, runtime=_parse_overrides(overrides))

    payload = {
        "location": resolution.location,
        "from_session": resolution.from_session,
        "settings": resolution.config.get_all(),
        "hook_registration": (
            asdict(resolution.hook_registration) if resolution.hook_registration else None
        ),
    }
    typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))


@app.command()
def sanitise(
    key: str = typer.Argument(..., help="配置键，如 debug / base_url / remote_mode"),
    value: str = typer.Argument(..., help="原始值"),
    quiet: bool = quiet_option,
) -> None:
    """输出单个配置值的规范化结果；未知键返回退出码 1。"""
    settings = load_engine_settings()
    init_logging(settings, quiet=quiet)

    if key not in KNOWN_KEYS:
        typer.echo(f"`{key}` is not a valid setting.", err=True)
        raise typer.Exit(code=1)

    sanitizer = Sanitizer(RuntimeCapabilityProbe(settings.allow_url_fetch), MinimeeLogger())
    typer.echo(json.dumps(sanitizer.sanitise_setting(key, value)))


if __name__ == "__main__":
    app()
