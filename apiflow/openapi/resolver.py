# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""Schema引用解析与分类"""

import logging
from typing import Any

from apiflow.common.config import config
from apiflow.exceptions import CyclicReferenceError
from apiflow.schemas.schema import (
    ArraySchema,
    ClassifiedSchema,
    ObjectSchema,
    PrimitiveSchema,
    ReferenceSchema,
)

logger = logging.getLogger(__name__)


def classify_schema(schema: dict[str, Any]) -> ClassifiedSchema:
    """将Schema片段分类为引用、对象、数组或原始类型"""
    if "$ref" in schema:
        return ReferenceSchema(ref=schema["$ref"], raw=schema)
    if "properties" in schema:
        return ObjectSchema(
            properties=schema.get("properties") or {},
            required=schema.get("required") or [],
            raw=schema,
        )
    if schema.get("type") == "array" and schema.get("items") is not None:
        return ArraySchema(items=schema["items"], raw=schema)
    if schema.get("type") == "object":
        return ObjectSchema(required=schema.get("required") or [], raw=schema)
    return PrimitiveSchema(type=schema.get("type"), raw=schema)


class SchemaResolver:
    """在一份API描述文档内解析$ref"""

    def __init__(self, document: dict[str, Any], max_depth: int | None = None) -> None:
        """绑定文档及最大解析深度"""
        self._document = document
        self._max_depth = max_depth if max_depth is not None else config.resolver.max_ref_depth

    @staticmethod
    def _split_pointer(ref: str) -> list[str] | None:
        """将 ``#/a/b`` 形式的引用拆分为路径段；不支持外部引用"""
        if not ref.startswith("#"):
            return None
        pointer = ref[1:].lstrip("/")
        if not pointer:
            return []
        return [seg.replace("~1", "/").replace("~0", "~") for seg in pointer.split("/")]

    def _walk(self, segments: list[str]) -> Any:
        current: Any = self._document
        for segment in segments:
            if isinstance(current, dict) and segment in current:
                current = current[segment]
            elif isinstance(current, list) and segment.isdigit() and int(segment) < len(current):
                current = current[int(segment)]
            else:
                return None
        return current

    def resolve(self, ref: str) -> dict[str, Any] | None:
        """
        解析引用；若结果仍为引用则继续解析

        :param ref: 形如 ``#/components/schemas/Pet`` 的引用
        :return: 解析得到的Schema；任一路径段不存在时返回None
        :raises CyclicReferenceError: 引用链超过最大深度
        """
        current_ref = ref
        for _ in range(self._max_depth):
            segments = self._split_pointer(current_ref)
            if segments is None:
                logger.warning("[SchemaResolver] 不支持外部引用：%s", current_ref)
                return None
            resolved = self._walk(segments)
            if not isinstance(resolved, dict):
                logger.warning("[SchemaResolver] 引用 %s 无法解析", current_ref)
                return None
            if "$ref" not in resolved:
                return resolved
            current_ref = resolved["$ref"]
        logger.warning("[SchemaResolver] 引用 %s 超过最大深度 %d", ref, self._max_depth)
        raise CyclicReferenceError(ref, self._max_depth)

    def deref(self, schema: dict[str, Any] | None) -> dict[str, Any] | None:
        """schema为引用时返回解析结果，否则原样返回"""
        if schema is None or "$ref" not in schema:
            return schema
        return self.resolve(schema["$ref"])

    def resolve_classified(self, schema: dict[str, Any]) -> ClassifiedSchema | None:
        """先解析引用再分类；引用无法解析时返回None"""
        resolved = self.deref(schema)
        if resolved is None:
            return None
        return classify_schema(resolved)
