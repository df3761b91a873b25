# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""Pipeline图结构用到的数据结构"""

import uuid
from collections.abc import Iterator
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .enum_var import EdgeRejectReason, NodeKind, ParamLocation
from .service import OperationDescriptor


def generate_id() -> str:
    """生成全局唯一的节点/端口/边ID"""
    return str(uuid.uuid4())


class PipelineModel(BaseModel):
    """允许同时使用字段名和别名构造"""

    model_config = ConfigDict(populate_by_name=True)


class PositionItem(PipelineModel):
    """节点在画布上的位置"""

    x: float = Field(default=0.0)
    y: float = Field(default=0.0)


class InputPort(PipelineModel):
    """
    节点输入端口

    connected为True时恰有一条边指向该端口，此时value无效；该约束由PipelineManager维护
    """

    id: str = Field(default_factory=generate_id)
    name: str
    type: str = Field(default="string")
    value: Any = Field(default=None)
    required: bool = Field(default=False)
    connected: bool = Field(default=False)
    location: ParamLocation | None = Field(default=None)


class OutputPort(PipelineModel):
    """节点输出端口；schema为None表示不可继续拆分"""

    id: str = Field(default_factory=generate_id)
    name: str
    type: str
    schema_: dict[str, Any] | None = Field(default=None, alias="schema")
    path: list[str] = Field(default_factory=list)


class OutputGroup(PipelineModel):
    """同一HTTP状态码下的输出端口"""

    status_code: str = Field(alias="statusCode")
    items: list[OutputPort] = Field(default_factory=list)


class Node(PipelineModel):
    """Pipeline中的节点"""

    id: str = Field(default_factory=generate_id)
    kind: NodeKind = Field(default=NodeKind.CALL)
    position: PositionItem = Field(default_factory=PositionItem)
    label: str = Field(default="")
    endpoint: OperationDescriptor | None = Field(default=None)
    pipeline_io_id: str | None = Field(default=None, alias="pipelineIoId", description="输入/输出节点对应的PipelineIO")
    inputs: list[InputPort] = Field(default_factory=list)
    outputs: list[OutputGroup] = Field(default_factory=list)

    def iter_outputs(self) -> Iterator[OutputPort]:
        """按分组顺序遍历全部输出端口"""
        for group in self.outputs:
            yield from group.items

    def find_output(self, port_id: str) -> OutputPort | None:
        """在所有输出分组中查找端口"""
        return next((port for port in self.iter_outputs() if port.id == port_id), None)

    def find_input(self, port_id: str) -> InputPort | None:
        """查找输入端口"""
        return next((port for port in self.inputs if port.id == port_id), None)


class Edge(PipelineModel):
    """节点间的连线；端口通过ID引用"""

    id: str = Field(default_factory=generate_id)
    source_node_id: str = Field(alias="sourceNodeId")
    target_node_id: str = Field(alias="targetNodeId")
    source_port_id: str = Field(alias="sourcePortId")
    target_port_id: str = Field(alias="targetPortId")


class EdgeResult(PipelineModel):
    """add_edge的结果：成功时带有新边，失败时带有原因"""

    edge: Edge | None = Field(default=None)
    reason: EdgeRejectReason | None = Field(default=None)

    @property
    def accepted(self) -> bool:
        """是否已建立连线"""
        return self.edge is not None


class PipelineIO(PipelineModel):
    """Pipeline级别的输入或输出声明"""

    id: str = Field(default_factory=generate_id)
    name: str
    type: str = Field(default="string")
    description: str | None = Field(default=None)
    value: Any = Field(default=None)


class Pipeline(PipelineModel):
    """完整的Pipeline"""

    id: str = Field(default_factory=generate_id)
    name: str = Field(default="New Pipeline")
    description: str | None = Field(default=None)
    nodes: list[Node] = Field(default_factory=list)
    edges: list[Edge] = Field(default_factory=list)
    inputs: list[PipelineIO] = Field(default_factory=list)
    outputs: list[PipelineIO] = Field(default_factory=list)
    global_variables: dict[str, Any] = Field(default_factory=dict, alias="globalVariables")
    saved_at: str | None = Field(default=None, alias="savedAt")
