"""
宿主配置适配器（adapters.config_source）：向引擎提供 item(key) 查询
- DictConfigSource：内存映射（宿主已解析好的配置）
- YamlConfigSource：读取单个 YAML 文件的顶层映射（yaml.safe_load），结果交给 DictConfigSource

注意：
- 不存在的配置项返回 False
- 文件不存在只记录警告；解析失败记录错误；两种情况都退化为空配置
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml  # type: ignore[import-untyped]

logger = logging.getLogger(__name__)


class DictConfigSource:
    def __init__(self, items: Optional[Mapping[str, Any]] = None) -> None:
        self.data: Dict[str, Any] = dict(items or {})

    def item(self, key: str) -> Any:
        return self.data.get(key, False)

    def set_item(self, key: str, value: Any) -> None:
        self.data[key] = value


class YamlConfigSource(DictConfigSource):
    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        super().__init__(self._load())

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            logger.warning(f"宿主配置文件不存在，使用空配置: {self.path}")
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"加载宿主配置文件失败 {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"宿主配置文件顶层不是映射，忽略: {self.path}")
            return {}
        logger.info(f"成功加载宿主配置文件: {self.path}")
        return data
