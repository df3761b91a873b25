# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""将Pipeline导出为工作流文档"""

import json
import logging
from typing import Any, Literal

from apiflow.common.config import config
from apiflow.common.util import yaml_dump
from apiflow.schemas.enum_var import NodeKind, StepType
from apiflow.schemas.pipeline import Node, Pipeline, PipelineIO
from apiflow.schemas.workflow import (
    ParameterSchema,
    Step,
    StepOperation,
    Workflow,
    WorkflowDocument,
    WorkflowInfo,
    WorkflowParameter,
)

logger = logging.getLogger(__name__)
STEP_TYPES = {
    NodeKind.CALL: StepType.OPERATION,
    NodeKind.PIPELINE_INPUT: StepType.INPUT,
    NodeKind.PIPELINE_OUTPUT: StepType.OUTPUT,
}


class WorkflowExporter:
    """工作流文档导出器"""

    @staticmethod
    def _step(node: Node) -> Step:
        step = Step(id=node.id, name=node.label, type=STEP_TYPES[node.kind])
        if node.kind == NodeKind.CALL and node.endpoint is not None:
            step.operation = StepOperation(method=node.endpoint.method, path=node.endpoint.path)

        # 有手动输入值时使用该值，否则以端口名作为引用
        if node.inputs:
            step.inputs = {
                port.name: port.name if port.value is None or port.value == "" else port.value
                for port in node.inputs
            }

        outputs = list(node.iter_outputs())
        if outputs:
            step.outputs = {
                port.name: WorkflowParameter(schema=ParameterSchema(type=port.type))
                for port in outputs
            }
        return step

    @staticmethod
    def _parameters(items: list[PipelineIO]) -> dict[str, WorkflowParameter] | None:
        if not items:
            return None
        return {
            item.name: WorkflowParameter(
                description=item.description,
                schema=ParameterSchema(type=item.type),
                required=False,
            )
            for item in items
        }

    @staticmethod
    def to_workflow_document(pipeline: Pipeline) -> WorkflowDocument:
        """
        将Pipeline转换为工作流文档

        每个步骤只能有一个next：按连线顺序遍历，同一源节点后出现的连线覆盖先出现的
        """
        steps = {node.id: WorkflowExporter._step(node) for node in pipeline.nodes}

        connections: dict[str, str] = {}
        for edge in pipeline.edges:
            connections[edge.source_node_id] = edge.target_node_id
        for source_id, target_id in connections.items():
            if source_id in steps:
                steps[source_id].next = target_id

        return WorkflowDocument(
            version=config.export.version,
            info=WorkflowInfo(
                title=pipeline.name or config.export.default_title,
                description=pipeline.description,
                version=config.export.info_version,
            ),
            workflow=Workflow(
                id=pipeline.id,
                steps=steps,
                inputs=WorkflowExporter._parameters(pipeline.inputs),
                outputs=WorkflowExporter._parameters(pipeline.outputs),
            ),
        )

    @staticmethod
    def to_dict(document: WorkflowDocument) -> dict[str, Any]:
        """转换为字典；省略值为空的键"""
        return document.model_dump(by_alias=True, exclude_none=True, mode="json")

    @staticmethod
    def dumps(document: WorkflowDocument, fmt: Literal["json", "yaml"] = "json") -> str:
        """以JSON或YAML格式输出文档"""
        data = WorkflowExporter.to_dict(document)
        if fmt == "yaml":
            return yaml_dump(data)
        if fmt != "json":
            err = f"[WorkflowExporter] 不支持的格式：{fmt}"
            raise ValueError(err)
        return json.dumps(data, ensure_ascii=False, indent=2)
