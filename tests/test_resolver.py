import json

import pytest

from minimee.adapters.hooks import ExtensionHooks
from minimee.adapters.session import SessionCache, SessionCacheRegistry
from minimee.core.config.resolver import resolve_config
from minimee.core.config.schema import SETTING_KEYS
from minimee.core.types import HookRegistration

from tests.conftest import FakePersistence


def test_default_resolution_contains_every_key(make_context):
    resolution = resolve_config(make_context(config_items={"base_url": "http://example.com/"}))
    settings = resolution.config.get_all()
    assert set(settings) == set(SETTING_KEYS)
    assert resolution.location == "default"
    assert settings["debug"] == "no"
    assert settings["combine"] == "yes"
    assert settings["refresh_after"] == 0
    assert settings["remote_mode"] == "curl"
    assert settings["base_path"] == "/var/www"
    assert settings["cache_path"] == "/var/www/cache"
    assert settings["base_url"] == "http://example.com"
    assert settings["cache_url"] == "http://example.com/cache"
    assert settings["minify_css"] == ""


def test_config_source_resolution(make_context):
    items = {"minimee": {"debug": "y", "cache_path": "/tmp//cache/", "nope": 1}}
    resolution = resolve_config(make_context(config_items=items))
    assert resolution.location == "config"
    assert resolution.config.get("debug") == "yes"
    assert resolution.config.get("cache_path") == "/tmp/cache"
    assert "nope" not in resolution.config.get_all()


def test_db_resolution(make_context):
    db = FakePersistence(json.dumps({"combine_js": "off"}))
    ctx = make_context(config_items={"allow_extensions": "y"}, persistence=db)
    resolution = resolve_config(ctx)
    assert resolution.location == "db"
    assert resolution.config.is_no("combine_js")


def test_resolves_once_per_session(make_context):
    cache = SessionCache("s1")
    first = resolve_config(
        make_context(config_items={"minimee": {"debug": "yes"}}, session_cache=cache)
    )
    assert not first.from_session
    assert cache.has("Minimee", "config")

    # 来源数据变化也不会重新解析
    second = resolve_config(
        make_context(config_items={"minimee": {"debug": "no"}}, session_cache=cache)
    )
    assert second.from_session
    assert second.location is None
    assert second.config.get("debug") == "yes"
    assert dict(second.config.default) == dict(first.config.default)


def test_cached_default_is_not_resanitised(make_context, bare_probe):
    cache = SessionCache("s2")
    cache.set("Minimee", "config", {"debug": "weird", "remote_mode": "curl"})
    resolution = resolve_config(make_context(session_cache=cache, probe=bare_probe))
    assert resolution.config.get("debug") == "weird"
    assert resolution.config.get("remote_mode") == "curl"


def test_sessions_are_isolated(make_context):
    registry = SessionCacheRegistry()
    a = resolve_config(
        make_context(config_items={"minimee": {"debug": "yes"}}, session_cache=registry.cache_for("a"))
    )
    b = resolve_config(
        make_context(config_items={"minimee": {"debug": "no"}}, session_cache=registry.cache_for("b"))
    )
    assert a.config.get("debug") == "yes"
    assert b.config.get("debug") == "no"
    assert registry.end_session("a") is True
    assert "a" not in registry


def test_runtime_overlay_applied_after_resolution(make_context):
    resolution = resolve_config(make_context(), runtime={"debug": "on", "bogus": 1})
    assert resolution.config.get("debug") == "yes"
    assert dict(resolution.config.runtime) == {"debug": "yes"}
    assert resolution.config.reset().get("debug") == "no"


def test_hook_and_location_win(make_context):
    hooks = ExtensionHooks()
    hooks.register("minimee_get_settings", lambda cfg: {"minify": "no"})
    items = {"minimee": {"minify": "yes"}}
    resolution = resolve_config(make_context(hooks=hooks, config_items=items))
    assert resolution.location == "hook"
    assert resolution.config.is_no("minify")


def test_hook_registration_requested_for_minify_html(make_context):
    items = {"minimee": {"minify_html": "yes"}, "allow_extensions": "y"}
    resolution = resolve_config(make_context(config_items=items))
    reg = resolution.hook_registration
    assert isinstance(reg, HookRegistration)
    assert (reg.hook, reg.priority, reg.class_name, reg.method) == (
        "template_post_parse",
        10,
        "Minimee_ext",
        "minify_html",
    )


def test_no_hook_registration_when_already_bound(make_context):
    hooks = ExtensionHooks()
    hooks.register("template_post_parse", lambda out: out, priority=10, class_name="Minimee_ext")
    items = {"minimee": {"minify_html": "yes"}, "allow_extensions": "y"}
    resolution = resolve_config(make_context(hooks=hooks, config_items=items))
    assert resolution.hook_registration is None


def test_no_hook_registration_without_extensions(make_context):
    items = {"minimee": {"minify_html": "yes"}}
    assert resolve_config(make_context(config_items=items)).hook_registration is None


def test_hook_registration_applied_by_host(make_context):
    hooks = ExtensionHooks()
    items = {"minimee": {"minify_html": "yes"}, "allow_extensions": "y"}
    reg = resolve_config(make_context(hooks=hooks, config_items=items)).hook_registration
    assert hooks.apply_registration(reg) is True
    assert hooks.has_binding("template_post_parse", 10, "Minimee_ext")
    assert hooks.apply_registration(reg) is False


@pytest.mark.parametrize("value", [float("inf"), float("nan"), "9" * 5000])
def test_unconvertible_refresh_after_resolves_to_zero(make_context, value):
    resolution = resolve_config(make_context(config_items={"minimee": {"refresh_after": value}}))
    assert resolution.location == "config"
    assert resolution.config.get("refresh_after") == 0


def test_failing_probe_does_not_escape_resolution(make_context):
    class Boom:
        def has_loaded_extension(self, name):
            raise RuntimeError("probe down")

        def allows_url_fetch(self):
            raise RuntimeError("probe down")

        def supports_secure_transport(self):
            raise RuntimeError("probe down")

    resolution = resolve_config(make_context(probe=Boom()))
    assert resolution.config.get("remote_mode") == ""
