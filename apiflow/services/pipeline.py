# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""Pipeline图存储：节点、连线、Pipeline输入输出与全局变量"""

import logging
from datetime import UTC, datetime
from typing import Any

from apiflow.common.config import config
from apiflow.common.persistence import PersistenceGateway
from apiflow.constants import PIPELINE_STORAGE_KEY, PROMOTED_DESCRIPTION_PREFIX
from apiflow.schemas.enum_var import EdgeRejectReason
from apiflow.schemas.pipeline import (
    Edge,
    EdgeResult,
    InputPort,
    Node,
    OutputPort,
    Pipeline,
    PipelineIO,
    PositionItem,
)
from apiflow.schemas.schema import PropertyNode
from apiflow.schemas.service import OperationDescriptor

from .node import NodeManager
from .splitter import SchemaSplitter

logger = logging.getLogger(__name__)


def is_type_compatible(source_type: str, target_type: str) -> bool:
    """类型相同，或源为object（可携带任意字段），或两端均为array"""
    return (
        source_type == target_type
        or source_type == "object"
        or (source_type == "array" and target_type == "array")
    )


class PipelineManager:
    """
    Pipeline图存储

    节点和连线以ID为键保存，端口之间的关系通过ID查找；
    所有修改均同步完成，不存在并发修改。对不存在的ID的操作记录日志后忽略
    """

    def __init__(
        self,
        gateway: PersistenceGateway | None = None,
        pipeline: Pipeline | None = None,
        *,
        autosave: bool | None = None,
    ) -> None:
        """初始化存储；pipeline为None时新建空Pipeline"""
        self._gateway = gateway
        self._autosave = config.pipeline.autosave if autosave is None else autosave
        self._replace(pipeline or Pipeline(name=config.pipeline.default_name))


    def _replace(self, pipeline: Pipeline) -> None:
        """整体替换内存中的Pipeline"""
        pipeline = pipeline.model_copy(deep=True)
        self._nodes: dict[str, Node] = {node.id: node for node in pipeline.nodes}
        self._edges: dict[str, Edge] = {edge.id: edge for edge in pipeline.edges}
        self._meta = pipeline.model_copy(update={"nodes": [], "edges": []})


    def _flush(self) -> None:
        """自动保存：每次修改后写入存储（不更新保存时间）"""
        if self._autosave and self._gateway is not None:
            self._gateway.put(PIPELINE_STORAGE_KEY, self._dump(self.snapshot()))


    @staticmethod
    def _dump(pipeline: Pipeline) -> dict[str, Any]:
        return pipeline.model_dump(by_alias=True, mode="json")


    # ---- 查询 ----

    @property
    def nodes(self) -> list[Node]:
        """按加入顺序排列的节点"""
        return list(self._nodes.values())

    @property
    def edges(self) -> list[Edge]:
        """按加入顺序排列的连线"""
        return list(self._edges.values())

    @property
    def pipeline(self) -> Pipeline:
        """当前Pipeline（只读视图，修改请使用命令方法）"""
        return self.snapshot()

    def get_node(self, node_id: str) -> Node | None:
        """获取节点"""
        return self._nodes.get(node_id)

    def get_edge(self, edge_id: str) -> Edge | None:
        """获取连线"""
        return self._edges.get(edge_id)

    def snapshot(self) -> Pipeline:
        """返回整个Pipeline的深拷贝"""
        pipeline = self._meta.model_copy(deep=True)
        pipeline.nodes = [node.model_copy(deep=True) for node in self._nodes.values()]
        pipeline.edges = [edge.model_copy(deep=True) for edge in self._edges.values()]
        return pipeline


    # ---- 节点 ----

    def add_node(self, node: Node) -> Node:
        """追加节点；仅检查ID"""
        if node.id in self._nodes:
            logger.warning("[PipelineManager] 节点 %s 已存在", node.id)
            return self._nodes[node.id]
        self._nodes[node.id] = node
        logger.info("[PipelineManager] 添加节点 %s（%s）", node.id, node.label)
        self._flush()
        return node


    def add_call_node(
        self,
        endpoint: OperationDescriptor,
        document: dict[str, Any],
        position: PositionItem | None = None,
    ) -> Node:
        """由API操作生成调用节点并加入"""
        return self.add_node(NodeManager.synthesize_call_node(endpoint, document, position))


    def _find_io(self, items: list[PipelineIO], io_id: str) -> PipelineIO | None:
        return next((item for item in items if item.id == io_id), None)


    def add_input_node(self, pipeline_input_id: str, position: PositionItem | None = None) -> Node | None:
        """由Pipeline输入生成输入节点并加入"""
        pipeline_input = self._find_io(self._meta.inputs, pipeline_input_id)
        if pipeline_input is None:
            logger.warning("[PipelineManager] Pipeline输入 %s 不存在", pipeline_input_id)
            return None
        return self.add_node(NodeManager.synthesize_input_node(pipeline_input, position))


    def add_output_node(self, pipeline_output_id: str, position: PositionItem | None = None) -> Node | None:
        """由Pipeline输出生成输出节点并加入"""
        pipeline_output = self._find_io(self._meta.outputs, pipeline_output_id)
        if pipeline_output is None:
            logger.warning("[PipelineManager] Pipeline输出 %s 不存在", pipeline_output_id)
            return None
        return self.add_node(NodeManager.synthesize_output_node(pipeline_output, position))


    def _drop_edge(self, edge_id: str) -> None:
        """删除连线并解除目标端口的连接状态"""
        edge = self._edges.pop(edge_id, None)
        if edge is None:
            return
        target = self._nodes.get(edge.target_node_id)
        port = target.find_input(edge.target_port_id) if target else None
        if port is not None:
            port.connected = False


    def remove_node(self, node_id: str) -> bool:
        """删除节点，并级联删除与其相连的所有连线"""
        if node_id not in self._nodes:
            logger.warning("[PipelineManager] 删除的节点 %s 不存在", node_id)
            return False
        incident = [
            edge.id for edge in self._edges.values()
            if node_id in (edge.source_node_id, edge.target_node_id)
        ]
        for edge_id in incident:
            self._drop_edge(edge_id)
        del self._nodes[node_id]
        logger.info("[PipelineManager] 删除节点 %s 及 %d 条连线", node_id, len(incident))
        self._flush()
        return True


    def remove_nodes_by_service(self, service_id: str) -> int:
        """删除使用指定服务的全部调用节点"""
        node_ids = [
            node.id for node in self._nodes.values()
            if node.endpoint is not None and node.endpoint.service_id == service_id
        ]
        for node_id in node_ids:
            self.remove_node(node_id)
        return len(node_ids)


    def _edge_ports(self, edge: Edge) -> tuple[OutputPort | None, InputPort | None]:
        source = self._nodes.get(edge.source_node_id)
        target = self._nodes.get(edge.target_node_id)
        return (
            source.find_output(edge.source_port_id) if source else None,
            target.find_input(edge.target_port_id) if target else None,
        )


    def _sync_connections(self, node: Node) -> None:
        """
        重建节点的连接状态

        删除端口已不存在或类型已不兼容的连线；输入端口的connected由连线重新计算，已连接的端口清空value
        """
        for edge in list(self._edges.values()):
            if node.id not in (edge.source_node_id, edge.target_node_id):
                continue
            source_port, target_port = self._edge_ports(edge)
            if source_port is None or target_port is None:
                self._drop_edge(edge.id)
            elif not is_type_compatible(source_port.type, target_port.type):
                logger.warning(
                    "[PipelineManager] 端口类型变更，删除连线 %s（%s -> %s）",
                    edge.id, source_port.type, target_port.type,
                )
                self._drop_edge(edge.id)

        targeted = {
            edge.target_port_id for edge in self._edges.values()
            if edge.target_node_id == node.id
        }
        for port in node.inputs:
            port.connected = port.id in targeted
            if port.connected:
                port.value = None


    def update_node(self, node_id: str, data: dict[str, Any]) -> Node | None:
        """浅合并节点数据，data可使用字段名或别名；合并后重新建立连接状态约束"""
        node = self._nodes.get(node_id)
        if node is None:
            logger.warning("[PipelineManager] 更新的节点 %s 不存在", node_id)
            return None
        merged = Node.model_validate({
            **node.model_dump(),
            **data,
            "id": node.id,
        })
        self._nodes[node_id] = merged
        self._sync_connections(merged)
        self._flush()
        return merged


    def set_input_value(self, node_id: str, port_id: str, value: Any) -> bool:
        """手动设置输入端口的值；端口已连接时拒绝"""
        node = self._nodes.get(node_id)
        port = node.find_input(port_id) if node else None
        if port is None:
            logger.warning("[PipelineManager] 输入端口 %s/%s 不存在", node_id, port_id)
            return False
        if port.connected:
            logger.warning("[PipelineManager] 输入端口 %s 已连接，忽略手动输入", port.name)
            return False
        port.value = value
        self._flush()
        return True


    def split_output(
        self,
        node_id: str,
        group_index: int,
        item_index: int,
        selected: list[PropertyNode],
        name_prefix: str | None = None,
    ) -> Node | None:
        """将拆分出的属性追加为节点的新输出端口"""
        node = self._nodes.get(node_id)
        if node is None:
            logger.warning("[PipelineManager] 拆分的节点 %s 不存在", node_id)
            return None
        new_node = SchemaSplitter.materialize_selected(node, group_index, item_index, selected, name_prefix)
        if new_node is not node:
            self._nodes[node_id] = new_node
            self._flush()
        return new_node


    # ---- 连线 ----

    def _reject(self, reason: EdgeRejectReason, detail: str) -> EdgeResult:
        logger.warning("[PipelineManager] 拒绝连线（%s）：%s", reason.value, detail)
        return EdgeResult(reason=reason)


    def add_edge(
        self,
        source_node_id: str | None,
        target_node_id: str | None,
        source_port_id: str | None,
        target_port_id: str | None,
    ) -> EdgeResult:
        """
        建立连线

        源端口在源节点所有输出分组中查找；类型不兼容、端口不存在或目标端口已连接时不做任何修改
        """
        if not (source_node_id and target_node_id and source_port_id and target_port_id):
            return self._reject(EdgeRejectReason.MISSING_ID, "连线参数不完整")

        source = self._nodes.get(source_node_id)
        if source is None:
            return self._reject(EdgeRejectReason.SOURCE_NOT_FOUND, source_node_id)
        target = self._nodes.get(target_node_id)
        if target is None:
            return self._reject(EdgeRejectReason.TARGET_NOT_FOUND, target_node_id)

        source_port = source.find_output(source_port_id)
        if source_port is None:
            return self._reject(EdgeRejectReason.SOURCE_PORT_NOT_FOUND, source_port_id)
        target_port = target.find_input(target_port_id)
        if target_port is None:
            return self._reject(EdgeRejectReason.TARGET_PORT_NOT_FOUND, target_port_id)

        if not is_type_compatible(source_port.type, target_port.type):
            return self._reject(
                EdgeRejectReason.TYPE_MISMATCH,
                f"无法将 {source_port.type} 连接到 {target_port.type}",
            )
        if target_port.connected:
            return self._reject(EdgeRejectReason.TARGET_ALREADY_CONNECTED, target_port.name)

        edge = Edge(
            sourceNodeId=source_node_id,
            targetNodeId=target_node_id,
            sourcePortId=source_port_id,
            targetPortId=target_port_id,
        )
        self._edges[edge.id] = edge
        target_port.connected = True
        target_port.value = None
        logger.info("[PipelineManager] 连线 %s.%s -> %s.%s", source.label, source_port.name, target.label, target_port.name)
        self._flush()
        return EdgeResult(edge=edge)


    def remove_edge(self, edge_id: str) -> bool:
        """删除连线，仅解除其目标端口的连接状态"""
        if edge_id not in self._edges:
            logger.warning("[PipelineManager] 删除的连线 %s 不存在", edge_id)
            return False
        self._drop_edge(edge_id)
        self._flush()
        return True


    # ---- Pipeline属性 ----

    def set_name(self, name: str) -> None:
        """设置Pipeline名称"""
        self._meta.name = name
        self._flush()

    def set_description(self, description: str | None) -> None:
        """设置Pipeline描述"""
        self._meta.description = description
        self._flush()

    def set_global_variable(self, key: str, value: Any) -> None:
        """设置全局变量"""
        self._meta.global_variables[key] = value
        self._flush()

    def remove_global_variable(self, key: str) -> bool:
        """删除全局变量"""
        if key not in self._meta.global_variables:
            return False
        del self._meta.global_variables[key]
        self._flush()
        return True


    # ---- Pipeline输入/输出 ----

    def _add_io(self, items: list[PipelineIO], name: str, type_: str, description: str | None, value: Any) -> PipelineIO:
        item = PipelineIO(name=name, type=type_, description=description, value=value)
        items.append(item)
        self._flush()
        return item

    def add_pipeline_input(
        self, name: str, type_: str = "string", description: str | None = None, value: Any = None,
    ) -> PipelineIO:
        """声明Pipeline输入"""
        return self._add_io(self._meta.inputs, name, type_, description, value)

    def add_pipeline_output(
        self, name: str, type_: str = "string", description: str | None = None, value: Any = None,
    ) -> PipelineIO:
        """声明Pipeline输出"""
        return self._add_io(self._meta.outputs, name, type_, description, value)


    def _update_io(self, items: list[PipelineIO], io_id: str, data: dict[str, Any]) -> PipelineIO | None:
        index = next((i for i, item in enumerate(items) if item.id == io_id), None)
        if index is None:
            logger.warning("[PipelineManager] Pipeline输入/输出 %s 不存在", io_id)
            return None
        updated = PipelineIO.model_validate({**items[index].model_dump(), **data, "id": io_id})
        items[index] = updated

        # 同步绑定的输入/输出节点
        for node in self._nodes.values():
            if node.pipeline_io_id != io_id:
                continue
            node.label = updated.name
            for port in [*node.inputs, *node.iter_outputs()]:
                port.name = updated.name
                port.type = updated.type
            self._sync_connections(node)
        self._flush()
        return updated

    def update_pipeline_input(self, io_id: str, data: dict[str, Any]) -> PipelineIO | None:
        """更新Pipeline输入，并同步对应的输入节点"""
        return self._update_io(self._meta.inputs, io_id, data)

    def update_pipeline_output(self, io_id: str, data: dict[str, Any]) -> PipelineIO | None:
        """更新Pipeline输出，并同步对应的输出节点"""
        return self._update_io(self._meta.outputs, io_id, data)


    def _remove_io(self, items: list[PipelineIO], io_id: str) -> bool:
        item = self._find_io(items, io_id)
        if item is None:
            logger.warning("[PipelineManager] Pipeline输入/输出 %s 不存在", io_id)
            return False
        items.remove(item)
        for node_id in [node.id for node in self._nodes.values() if node.pipeline_io_id == io_id]:
            self.remove_node(node_id)
        self._flush()
        return True

    def remove_pipeline_input(self, io_id: str) -> bool:
        """删除Pipeline输入及其输入节点"""
        return self._remove_io(self._meta.inputs, io_id)

    def remove_pipeline_output(self, io_id: str) -> bool:
        """删除Pipeline输出及其输出节点"""
        return self._remove_io(self._meta.outputs, io_id)


    def promote_output_to_pipeline_output(self, node_id: str, output_port_id: str, name: str) -> PipelineIO | None:
        """将节点的某个输出声明为Pipeline输出；不创建节点或连线"""
        node = self._nodes.get(node_id)
        port = node.find_output(output_port_id) if node else None
        if node is None or port is None:
            logger.warning("[PipelineManager] 推广的输出 %s/%s 不存在", node_id, output_port_id)
            return None
        return self.add_pipeline_output(
            name,
            port.type,
            description=PROMOTED_DESCRIPTION_PREFIX + node.label,
        )


    # ---- 保存/载入 ----

    def save(self, name: str | None = None) -> Pipeline:
        """保存整个Pipeline的快照；整体覆盖，不与已保存内容合并"""
        if name:
            self._meta.name = name
        self._meta.saved_at = datetime.now(tz=UTC).isoformat()
        pipeline = self.snapshot()
        if self._gateway is not None:
            self._gateway.put(PIPELINE_STORAGE_KEY, self._dump(pipeline))
        logger.info("[PipelineManager] 已保存Pipeline %s", pipeline.name)
        return pipeline


    def load(self) -> Pipeline | None:
        """从存储载入Pipeline并整体替换内存状态；不存在时返回None"""
        if self._gateway is None:
            return None
        data = self._gateway.get(PIPELINE_STORAGE_KEY)
        if data is None:
            logger.info("[PipelineManager] 没有已保存的Pipeline")
            return None
        pipeline = Pipeline.model_validate(data)
        self._replace(pipeline)
        logger.info("[PipelineManager] 已载入Pipeline %s", pipeline.name)
        return self.snapshot()
