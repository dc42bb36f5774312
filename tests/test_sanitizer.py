import pytest

from minimee.adapters.capability import StaticCapabilityProbe
from minimee.core.config.sanitizer import (
    Sanitizer,
    clean_path,
    clean_url,
    coerce_int,
)
from minimee.core.config.schema import SETTING_KEYS
from minimee.utils.logging_ext import SEVERITY_INFO, SEVERITY_WARNING


@pytest.mark.parametrize("value", [True, "1", "true", "ON", "Yes", "y", " YES "])
def test_debug_truthy_values(sanitizer, value):
    assert sanitizer.sanitise_setting("debug", value) == "yes"


@pytest.mark.parametrize("value", [False, "0", "nope-no-match", "", None])
def test_debug_other_values(sanitizer, value):
    assert sanitizer.sanitise_setting("debug", value) == "no"


@pytest.mark.parametrize("value", [False, "0", "false", "OFF", "no", "n"])
def test_combine_falsy_values(sanitizer, value):
    assert sanitizer.sanitise_setting("combine", value) == "no"


@pytest.mark.parametrize("value", ["", "whatever", "yes", True, None, "maybe"])
def test_combine_defaults_to_yes(sanitizer, value):
    assert sanitizer.sanitise_setting("combine", value) == "yes"


def test_every_default_no_and_yes_key(sanitizer):
    for key in ("debug", "disable", "minify_html"):
        assert sanitizer.sanitise_setting(key, "") == "no"
    for key in ("combine", "combine_css", "combine_js", "minify", "minify_js", "relative_path"):
        assert sanitizer.sanitise_setting(key, "") == "yes"


@pytest.mark.parametrize(
    "value,expected",
    [
        ("300", 300), ("12abc", 12), ("abc", 0), ("", 0), (None, 0), (True, 1), (7.9, 7), (" -5", -5),
        (float("inf"), 0), (float("-inf"), 0), (float("nan"), 0), ("9" * 5000, 0),
    ],
)
def test_coerce_int(value, expected):
    assert coerce_int(value) == expected


def test_refresh_keys_are_integers(sanitizer):
    assert sanitizer.sanitise_setting("refresh_after", "60") == 60
    assert sanitizer.sanitise_setting("remote_refresh_after", "x") == 0


def test_clean_path():
    assert clean_path("/a//b///c/") == "/a/b/c"
    assert clean_path("file://host//path") == "file://host/path"
    assert clean_path("//srv//www/") == "/srv/www"


def test_clean_url():
    assert clean_url("http://example.com//a//b/") == "http://example.com/a/b"
    assert clean_url("//cdn.example.com//assets/") == "//cdn.example.com/assets"
    assert clean_url("https://example.com/") == "https://example.com"


def test_minify_css_passes_through(sanitizer):
    assert sanitizer.sanitise_setting("minify_css", "Whatever") == "Whatever"


def test_remote_mode_bogus_prefers_curl(sanitizer, sink):
    assert sanitizer.sanitise_setting("remote_mode", "bogus") == "curl"
    assert "Using CURL for remote files." in sink.messages(SEVERITY_INFO)


def test_remote_mode_falls_back_to_fgc(fgc_probe, sink):
    s = Sanitizer(fgc_probe, sink)
    assert s.sanitise_setting("remote_mode", "bogus") == "fgc"
    assert s.sanitise_setting("remote_mode", "curl") == ""


def test_remote_mode_fgc_without_tls_warns(sink):
    s = Sanitizer(StaticCapabilityProbe(url_fetch=True, secure_transport=False), sink)
    assert s.sanitise_setting("remote_mode", "FGC") == "fgc"
    assert any("SSL" in m for m in sink.messages(SEVERITY_WARNING))


def test_remote_mode_without_capability(bare_probe, sink):
    s = Sanitizer(bare_probe, sink)
    assert s.sanitise_setting("remote_mode", "auto") == ""
    assert "Remote files cannot be fetched." in sink.messages(SEVERITY_WARNING)


def test_explicit_fgc_skips_curl(sanitizer):
    assert sanitizer.sanitise_setting("remote_mode", "fgc") == "fgc"


def test_sanitise_settings_drops_unknown_keys(sanitizer):
    out = sanitizer.sanitise_settings({"debug": "1", "nope": "x", "base_url": "http://a.com//b/"})
    assert out == {"base_url": "http://a.com/b", "debug": "yes"}


def test_sanitise_settings_non_mapping(sanitizer, sink):
    assert sanitizer.sanitise_settings(None) == {}
    assert sanitizer.sanitise_settings(["debug"]) == {}
    assert sink.messages(SEVERITY_WARNING).count("Trying to sanitise a non-array of settings.") == 2


@pytest.mark.parametrize(
    "raw",
    [
        {},
        {"debug": "ON", "combine": "off", "refresh_after": "30s"},
        {"base_path": "/a//b/ /", "cache_url": "http://x.com///c//", "remote_mode": "bogus"},
        {key: "" for key in SETTING_KEYS},
        {"minify_css": "yes", "unknown": 1, "remote_refresh_after": 4.5},
    ],
)
def test_sanitise_settings_is_idempotent(sanitizer, raw):
    once = sanitizer.sanitise_settings(raw)
    assert sanitizer.sanitise_settings(once) == once


def test_idempotent_without_remote_capability(bare_probe, sink):
    s = Sanitizer(bare_probe, sink)
    once = s.sanitise_settings({"remote_mode": "curl"})
    assert once == {"remote_mode": ""}
    assert s.sanitise_settings(once) == once


class _FailingProbe:
    def has_loaded_extension(self, name):
        raise RuntimeError("probe down")

    def allows_url_fetch(self):
        return True

    def supports_secure_transport(self):
        raise RuntimeError("probe down")


def test_remote_mode_survives_failing_probe(sink):
    s = Sanitizer(_FailingProbe(), sink)
    assert s.sanitise_setting("remote_mode", "auto") == "fgc"
    assert s.sanitise_setting("remote_mode", "curl") == ""
    assert "Your runtime does not appear to support file_get_contents() over SSL." in sink.messages(
        SEVERITY_WARNING
    )
