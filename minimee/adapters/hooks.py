"""
hook 调度适配器（adapters.hooks）：进程内的扩展 hook 注册表
- register：按 hook 名 / 优先级 / 扩展类登记回调
- active_hook / call：供配置收集层查询与调用 minimee_get_settings
- has_binding / apply_registration：处理解析结果中期望的 template_post_parse 绑定

注意：
- 同一 hook 的回调按优先级升序调用，后一个回调的返回值覆盖前一个（最后一次返回值为结果）
- 回调抛出的异常包装为 HookError 向上抛出，由配置收集层吸收
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from minimee.core.exceptions import HookError
from minimee.core.types import HookRegistration
from minimee.utils.logging_ext import EventLogger

logger = logging.getLogger(__name__)


@dataclass
class HookBinding:
    callback: Optional[Callable[..., Any]]
    method: str = ""
    settings: str = ""
    version: str = ""


class ExtensionHooks:
    def __init__(self) -> None:
        # hook -> priority -> class_name -> binding
        self.extensions: Dict[str, Dict[int, Dict[str, HookBinding]]] = defaultdict(dict)
        self.version_numbers: Dict[str, str] = {}
        self.events = EventLogger(logger)

    def register(
        self,
        hook: str,
        callback: Callable[..., Any],
        *,
        priority: int = 10,
        class_name: str = "",
        version: str = "",
    ) -> None:
        name = class_name or getattr(callback, "__qualname__", repr(callback))
        self.extensions[hook].setdefault(priority, {})[name] = HookBinding(
            callback=callback,
            method=getattr(callback, "__name__", ""),
            version=version,
        )
        if version:
            self.version_numbers[name] = version

    def active_hook(self, name: str) -> bool:
        return any(
            b.callback is not None
            for bindings in self.extensions.get(name, {}).values()
            for b in bindings.values()
        )

    def call(self, name: str, context: Any) -> Any:
        result: Any = False
        for priority in sorted(self.extensions.get(name, {})):
            for class_name, binding in self.extensions[name][priority].items():
                if binding.callback is None:
                    continue
                try:
                    result = binding.callback(context)
                except Exception as e:
                    raise HookError(
                        f"hook {name} 调用失败",
                        context={"hook": name, "class_name": class_name},
                        cause=e,
                    ) from e
        return result

    def has_binding(self, hook: str, priority: int, class_name: str) -> bool:
        return class_name in self.extensions.get(hook, {}).get(priority, {})

    def apply_registration(
        self,
        registration: HookRegistration,
        callback: Optional[Callable[..., Any]] = None,
    ) -> bool:
        """登记解析结果给出的绑定；已存在同名绑定时不覆盖，返回是否新登记。"""
        if self.has_binding(
            registration.hook, registration.priority, registration.class_name
        ):
            return False
        self.extensions[registration.hook].setdefault(registration.priority, {})[
            registration.class_name
        ] = HookBinding(
            callback=callback,
            method=registration.method,
            settings=registration.settings,
            version=registration.version,
        )
        self.version_numbers[registration.class_name] = registration.version
        self.events.info(
            "hook.binding.registered",
            hook=registration.hook,
            priority=registration.priority,
            class_name=registration.class_name,
            method=registration.method,
        )
        return True
