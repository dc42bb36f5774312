from typing import Any, List, Optional, Tuple

import pytest

from minimee.adapters.capability import StaticCapabilityProbe
from minimee.adapters.config_source import DictConfigSource
from minimee.adapters.hooks import ExtensionHooks
from minimee.adapters.session import SessionCache
from minimee.core.config.resolver import ResolverContext
from minimee.core.config.sanitizer import Sanitizer
from minimee.core.config.store import MinimeeConfig


class RecordingSink:
    """记录所有诊断，便于断言。"""

    def __init__(self) -> None:
        self.records: List[Tuple[str, int]] = []

    def log(self, message: str, severity: int) -> None:
        self.records.append((message, severity))

    def messages(self, severity: Optional[int] = None) -> List[str]:
        return [m for m, s in self.records if severity is None or s == severity]


class FakePersistence:
    def __init__(self, blob: Any = None, error: Optional[Exception] = None) -> None:
        self.blob = blob
        self.error = error
        self.calls = 0

    def fetch_settings_blob(self) -> Any:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.blob


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def curl_probe() -> StaticCapabilityProbe:
    return StaticCapabilityProbe(extensions=frozenset({"curl"}), url_fetch=True)


@pytest.fixture
def fgc_probe() -> StaticCapabilityProbe:
    return StaticCapabilityProbe(url_fetch=True, secure_transport=True)


@pytest.fixture
def bare_probe() -> StaticCapabilityProbe:
    return StaticCapabilityProbe()


@pytest.fixture
def sanitizer(curl_probe, sink) -> Sanitizer:
    return Sanitizer(curl_probe, sink)


@pytest.fixture
def store(sanitizer, sink) -> MinimeeConfig:
    return MinimeeConfig(sanitizer, sink)


@pytest.fixture
def make_context(curl_probe, sink):
    """构造 ResolverContext；未指定的协作者使用空实现。"""

    def _make(
        *,
        hooks=None,
        config_items=None,
        persistence=None,
        session_cache=None,
        probe=None,
        root_path="/var/www",
    ) -> ResolverContext:
        return ResolverContext(
            hooks=hooks if hooks is not None else ExtensionHooks(),
            config_source=DictConfigSource(config_items or {}),
            persistence=persistence,
            session_cache=session_cache if session_cache is not None else SessionCache("t"),
            probe=probe if probe is not None else curl_probe,
            root_path=root_path,
            sink=sink,
        )

    return _make
