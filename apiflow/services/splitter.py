# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""输出端口拆分：将嵌套Schema展开为可选择的属性树，并把选中的属性生成为新的输出端口"""

import logging
from typing import Any

from apiflow.common.config import config
from apiflow.constants import ARRAY_ITEMS_NAME, UNKNOWN_PORT_TYPE
from apiflow.exceptions import CyclicReferenceError
from apiflow.openapi.resolver import SchemaResolver, classify_schema
from apiflow.schemas.pipeline import Node, OutputPort
from apiflow.schemas.schema import (
    ArraySchema,
    ClassifiedSchema,
    ObjectSchema,
    PrimitiveSchema,
    PropertyNode,
    ReferenceSchema,
)

logger = logging.getLogger(__name__)


class SchemaSplitter:
    """Schema拆分器"""

    def __init__(self, document: dict[str, Any] | None = None) -> None:
        """document用于解析属性中残留的$ref；为None时引用按未知类型处理"""
        self._resolver = SchemaResolver(document) if document is not None else None
        self._max_depth = config.resolver.max_ref_depth

    def _classify(self, schema: dict[str, Any]) -> ClassifiedSchema | None:
        classified = classify_schema(schema)
        if not isinstance(classified, ReferenceSchema):
            return classified
        if self._resolver is None:
            return None
        try:
            return self._resolver.resolve_classified(schema)
        except CyclicReferenceError:
            logger.warning("[SchemaSplitter] 忽略循环引用：%s", classified.ref)
            return None

    @staticmethod
    def _type_of(classified: ClassifiedSchema | None) -> str:
        if isinstance(classified, ObjectSchema):
            return "object"
        if isinstance(classified, ArraySchema):
            return "array"
        if isinstance(classified, PrimitiveSchema) and classified.type:
            return classified.type
        return UNKNOWN_PORT_TYPE

    def _is_recursive(self, schema: dict[str, Any], seen: frozenset[str]) -> bool:
        """引用已在展开路径上，或展开的引用层数超过最大深度"""
        ref = schema.get("$ref")
        if ref is None:
            return False
        return ref in seen or len(seen) >= self._max_depth

    @staticmethod
    def _with_ref(schema: dict[str, Any], seen: frozenset[str]) -> frozenset[str]:
        ref = schema.get("$ref")
        return seen | {ref} if ref is not None else seen

    def _property(self, name: str, schema: dict[str, Any], path: list[str], seen: frozenset[str]) -> PropertyNode:
        """生成单个属性节点，对象和数组继续展开；自引用的属性作为object叶子"""
        if self._is_recursive(schema, seen):
            logger.warning("[SchemaSplitter] 属性 %s 自引用 %s，停止展开", ".".join(path), schema["$ref"])
            return PropertyNode(name=name, type="object", path=path)

        classified = self._classify(schema)
        node = PropertyNode(name=name, type=self._type_of(classified), path=path)
        if isinstance(classified, ObjectSchema | ArraySchema):
            children = self._expand(classified, path, self._with_ref(schema, seen))
            if children:
                node.children = children
        return node

    def _expand(
        self,
        classified: ObjectSchema | ArraySchema,
        base_path: list[str],
        seen: frozenset[str],
    ) -> list[PropertyNode]:
        if isinstance(classified, ObjectSchema):
            return [
                self._property(name, prop, [*base_path, name], seen)
                for name, prop in classified.properties.items()
            ]

        items_path = [*base_path, ARRAY_ITEMS_NAME]
        if self._is_recursive(classified.items, seen):
            logger.warning("[SchemaSplitter] 数组元素自引用 %s，停止展开", classified.items["$ref"])
            return [PropertyNode(name=ARRAY_ITEMS_NAME, type="object", path=items_path, synthetic=True)]

        item_classified = self._classify(classified.items)
        item_seen = self._with_ref(classified.items, seen)
        items_node = PropertyNode(
            name=ARRAY_ITEMS_NAME,
            type=self._type_of(item_classified),
            path=items_path,
            synthetic=True,
        )
        if isinstance(item_classified, ObjectSchema):
            items_node.children = [
                self._property(name, prop, [*items_path, name], item_seen)
                for name, prop in item_classified.properties.items()
            ] or None
        return [items_node]

    def extract_properties(self, schema: dict[str, Any] | None, base_path: list[str] | None = None) -> list[PropertyNode]:
        """
        递归展开Schema

        对象：每个属性一个节点，path为base_path加属性名；
        数组：一个合成的items节点，元素为对象时其属性挂在items之下；
        再次遇到展开路径上已有的引用时，该属性不再展开
        """
        if not schema:
            return []
        classified = self._classify(schema)
        if not isinstance(classified, ObjectSchema | ArraySchema):
            return []
        return self._expand(classified, list(base_path or []), self._with_ref(schema, frozenset()))

    @staticmethod
    def collect_leaves(properties: list[PropertyNode], prefix: tuple[str, ...] = ()) -> list[PropertyNode]:
        """
        收集叶子属性

        叶子名称为从展开起点到该属性、以点连接的属性名（合成的items节点不计入）
        """
        leaves = []
        for prop in properties:
            names = prefix if prop.synthetic else (*prefix, prop.name)
            if prop.children:
                leaves += SchemaSplitter.collect_leaves(prop.children, names)
            else:
                leaves.append(prop.model_copy(update={"name": ".".join(names) or prop.name}))
        return leaves

    @staticmethod
    def materialize_selected(
        node: Node,
        group_index: int,
        item_index: int,
        selected: list[PropertyNode],
        name_prefix: str | None = None,
    ) -> Node:
        """
        将选中的属性追加为同一输出分组中的新端口

        原端口保持不变；返回新的Node，传入的node不会被修改
        """
        if not selected:
            return node
        if not 0 <= group_index < len(node.outputs) or not 0 <= item_index < len(node.outputs[group_index].items):
            logger.warning("[SchemaSplitter] 节点 %s 不存在输出 (%d, %d)", node.id, group_index, item_index)
            return node

        new_node = node.model_copy(deep=True)
        group = new_node.outputs[group_index]
        for prop in selected:
            group.items.append(OutputPort(
                name=f"{name_prefix}.{prop.name}" if name_prefix else prop.name,
                type=prop.type,
                schema=None,
                path=list(prop.path),
            ))
        logger.info(
            "[SchemaSplitter] 节点 %s 的输出 %s 新增 %d 个端口",
            node.id, node.outputs[group_index].items[item_index].name, len(selected),
        )
        return new_node
