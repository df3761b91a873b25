# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""Node生成器：由API操作或Pipeline输入/输出生成节点"""

import logging
from typing import Any

from apiflow.constants import (
    ARRAY_ITEMS_NAME,
    DEFAULT_NODE_POSITION,
    DEFAULT_PORT_TYPE,
    JSON_CONTENT_TYPE,
    PIPELINE_IO_GROUP,
    PRIMITIVE_RESPONSE_NAME,
)
from apiflow.exceptions import CyclicReferenceError
from apiflow.openapi.resolver import SchemaResolver
from apiflow.schemas.enum_var import NodeKind, ParamLocation
from apiflow.schemas.pipeline import (
    InputPort,
    Node,
    OutputGroup,
    OutputPort,
    PipelineIO,
    PositionItem,
)
from apiflow.schemas.schema import ArraySchema, ObjectSchema, PrimitiveSchema
from apiflow.schemas.service import OperationDescriptor

logger = logging.getLogger(__name__)
PARAM_LOCATIONS = {
    ParamLocation.PATH.value,
    ParamLocation.QUERY.value,
    ParamLocation.HEADER.value,
}


class NodeManager:
    """Node生成器"""

    @staticmethod
    def _default_position(position: PositionItem | None) -> PositionItem:
        if position is not None:
            return position
        return PositionItem(x=DEFAULT_NODE_POSITION[0], y=DEFAULT_NODE_POSITION[1])


    @staticmethod
    def _safe_deref(resolver: SchemaResolver, schema: dict[str, Any] | None) -> dict[str, Any] | None:
        """解析引用；循环引用视为无法解析"""
        try:
            return resolver.deref(schema)
        except CyclicReferenceError:
            logger.warning("[NodeManager] 忽略循环引用：%s", (schema or {}).get("$ref"))
            return None


    @staticmethod
    def _json_schema(resolver: SchemaResolver, container: dict[str, Any] | None) -> dict[str, Any] | None:
        """从requestBody/response中取出application/json的Schema"""
        container = NodeManager._safe_deref(resolver, container)
        if not container:
            return None
        media = (container.get("content") or {}).get(JSON_CONTENT_TYPE)
        if not isinstance(media, dict):
            return None
        schema = media.get("schema")
        return schema if isinstance(schema, dict) else None


    @staticmethod
    def _parameter_inputs(resolver: SchemaResolver, parameters: list[dict[str, Any]]) -> list[InputPort]:
        """path/query/header参数 → 输入端口"""
        inputs = []
        for raw_param in parameters:
            param = NodeManager._safe_deref(resolver, raw_param)
            if param is None:
                logger.warning("[NodeManager] 参数引用无法解析：%s", raw_param.get("$ref"))
                continue
            if param.get("in") not in PARAM_LOCATIONS:
                continue
            schema = NodeManager._safe_deref(resolver, param.get("schema")) or {}
            inputs.append(InputPort(
                name=param["name"],
                type=schema.get("type") or DEFAULT_PORT_TYPE,
                required=bool(param.get("required", False)),
                location=ParamLocation(param["in"]),
            ))
        return inputs


    @staticmethod
    def _body_inputs(resolver: SchemaResolver, request_body: dict[str, Any] | None) -> list[InputPort]:
        """JSON请求体的每个属性 → 输入端口"""
        schema = NodeManager._json_schema(resolver, request_body)
        if schema is None:
            return []
        try:
            classified = resolver.resolve_classified(schema)
        except CyclicReferenceError:
            logger.warning("[NodeManager] 请求体存在循环引用：%s", schema.get("$ref"))
            return []
        if not isinstance(classified, ObjectSchema):
            return []

        inputs = []
        for name, prop in classified.properties.items():
            resolved = NodeManager._safe_deref(resolver, prop)
            if resolved is None:
                logger.warning("[NodeManager] 请求体属性 %s 的引用无法解析，已跳过", name)
                continue
            inputs.append(InputPort(
                name=name,
                type=resolved.get("type") or DEFAULT_PORT_TYPE,
                required=name in classified.required,
                location=ParamLocation.BODY,
            ))
        return inputs


    @staticmethod
    def _response_outputs(resolver: SchemaResolver, schema: dict[str, Any]) -> list[OutputPort]:
        """按Schema分类生成一个状态码下的输出端口"""
        try:
            classified = resolver.resolve_classified(schema)
        except CyclicReferenceError:
            logger.warning("[NodeManager] 响应体存在循环引用：%s", schema.get("$ref"))
            return []
        if classified is None:
            logger.warning("[NodeManager] 响应体引用无法解析：%s", schema.get("$ref"))
            return []

        if isinstance(classified, ObjectSchema):
            outputs = []
            for name, prop in classified.properties.items():
                resolved = NodeManager._safe_deref(resolver, prop)
                if resolved is None:
                    logger.warning("[NodeManager] 响应属性 %s 的引用无法解析，已跳过", name)
                    continue
                outputs.append(OutputPort(
                    name=name,
                    type=resolved.get("type") or DEFAULT_PORT_TYPE,
                    schema=resolved,
                    path=[name],
                ))
            return outputs

        if isinstance(classified, ArraySchema):
            array_schema = classified.raw
            items = NodeManager._safe_deref(resolver, classified.items)
            if items is not None and items is not classified.items:
                array_schema = {**classified.raw, "items": items}
            return [OutputPort(
                name=ARRAY_ITEMS_NAME,
                type="array",
                schema=array_schema,
                path=[ARRAY_ITEMS_NAME],
            )]

        if isinstance(classified, PrimitiveSchema) and classified.type:
            return [OutputPort(
                name=PRIMITIVE_RESPONSE_NAME,
                type=classified.type,
                schema=classified.raw,
                path=[],
            )]
        return []


    @staticmethod
    def synthesize_call_node(
        endpoint: OperationDescriptor,
        document: dict[str, Any],
        position: PositionItem | None = None,
    ) -> Node:
        """
        由API操作生成调用节点

        :param endpoint: 操作描述
        :param document: 操作所属的API描述文档，用于解析$ref
        :param position: 节点位置
        :return: 带有输入端口和按状态码分组的输出端口的节点
        """
        resolver = SchemaResolver(document)
        inputs = NodeManager._parameter_inputs(resolver, endpoint.parameters)
        inputs += NodeManager._body_inputs(resolver, endpoint.request_body)

        outputs = []
        for code, response in endpoint.responses.items():
            schema = NodeManager._json_schema(resolver, response)
            if schema is None:
                continue
            items = NodeManager._response_outputs(resolver, schema)
            if items:
                outputs.append(OutputGroup(statusCode=code, items=items))

        logger.info("[NodeManager] 生成节点 %s：%d 个输入，%d 个输出分组", endpoint.label, len(inputs), len(outputs))
        return Node(
            kind=NodeKind.CALL,
            position=NodeManager._default_position(position),
            label=endpoint.label,
            endpoint=endpoint.model_copy(deep=True),
            inputs=inputs,
            outputs=outputs,
        )


    @staticmethod
    def synthesize_input_node(pipeline_input: PipelineIO, position: PositionItem | None = None) -> Node:
        """Pipeline输入 → 只有一个输出端口的节点"""
        return Node(
            kind=NodeKind.PIPELINE_INPUT,
            position=NodeManager._default_position(position),
            label=pipeline_input.name,
            pipelineIoId=pipeline_input.id,
            outputs=[OutputGroup(
                statusCode=PIPELINE_IO_GROUP,
                items=[OutputPort(name=pipeline_input.name, type=pipeline_input.type, path=[])],
            )],
        )


    @staticmethod
    def synthesize_output_node(pipeline_output: PipelineIO, position: PositionItem | None = None) -> Node:
        """Pipeline输出 → 只有一个输入端口的节点"""
        return Node(
            kind=NodeKind.PIPELINE_OUTPUT,
            position=NodeManager._default_position(position),
            label=pipeline_output.name,
            pipelineIoId=pipeline_output.id,
            inputs=[InputPort(name=pipeline_output.name, type=pipeline_output.type, required=True)],
        )
