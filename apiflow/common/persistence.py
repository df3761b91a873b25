# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""持久化网关：整文档覆盖写入的键值存储"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import yaml

from .config import config
from .util import yaml_dump

logger = logging.getLogger(__name__)


class PersistenceGateway(ABC):
    """键值存储接口；值为可序列化为JSON的结构"""

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """读取键对应的文档；不存在时返回None"""
        raise NotImplementedError

    @abstractmethod
    def put(self, key: str, value: Any) -> None:
        """整体覆盖写入键对应的文档"""
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> None:
        """删除键对应的文档"""
        raise NotImplementedError


class YAMLFileGateway(PersistenceGateway):
    """以YAML文件保存每个键的存储实现"""

    def __init__(self, base_dir: str | Path | None = None) -> None:
        """初始化存储目录"""
        self._base_dir = Path(base_dir if base_dir is not None else config.deploy.data_dir)

    def _key_path(self, key: str) -> Path:
        if not key or "/" in key or key.startswith("."):
            err = f"[YAMLFileGateway] 非法的存储键：{key!r}"
            raise ValueError(err)
        return self._base_dir / f"{key}.yaml"

    def get(self, key: str) -> Any | None:
        """读取YAML文件"""
        path = self._key_path(key)
        if not path.exists():
            return None
        try:
            with path.open(encoding="utf-8") as f:
                return yaml.safe_load(f)
        except yaml.YAMLError:
            logger.exception("[YAMLFileGateway] 读取 %s 失败", path)
            raise

    def put(self, key: str, value: Any) -> None:
        """先写入临时文件再整体替换；失败时保留原有文件"""
        path = self._key_path(key)
        content = yaml_dump(value)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_name(f".{path.name}.tmp")
        try:
            tmp_path.write_text(content, encoding="utf-8")
            tmp_path.replace(path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            logger.exception("[YAMLFileGateway] 保存 %s 失败", path)
            raise
        logger.debug("[YAMLFileGateway] 已保存 %s", path)

    def delete(self, key: str) -> None:
        """删除YAML文件"""
        path = self._key_path(key)
        if path.exists():
            path.unlink()
