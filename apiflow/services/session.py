# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""编辑器会话：组装服务中心、图存储、草稿与导出"""

import logging
from typing import Any, Literal

from apiflow.common.log import setup_logging
from apiflow.common.persistence import PersistenceGateway, YAMLFileGateway
from apiflow.schemas.pipeline import Node, PositionItem
from apiflow.schemas.service import OperationDescriptor, ServiceDescriptor

from .draft import InputDraftManager
from .pipeline import PipelineManager
from .service import ServiceCenterManager
from .workflow import WorkflowExporter

logger = logging.getLogger(__name__)


class EditorSession:
    """一次编辑会话"""

    def __init__(
        self,
        gateway: PersistenceGateway | None = None,
        *,
        autosave: bool | None = None,
        log_setup: bool = True,
    ) -> None:
        """
        创建各组件并从存储恢复状态

        :param gateway: 持久化存储；为None时使用配置中的数据目录
        :param autosave: 是否自动保存；为None时使用配置
        :param log_setup: 是否按配置初始化日志
        """
        if log_setup:
            setup_logging()
        self.gateway = gateway if gateway is not None else YAMLFileGateway()
        self.pipeline = PipelineManager(self.gateway, autosave=autosave)
        self.services = ServiceCenterManager(self.gateway, self.pipeline)
        self.drafts = InputDraftManager(self.pipeline)
        self.exporter = WorkflowExporter()

        self.services.load()
        self.pipeline.load()
        logger.info(
            "[EditorSession] 会话已就绪：%d 个服务，%d 个节点",
            len(self.services.list_services()),
            len(self.pipeline.nodes),
        )

    def register_service(self, name: str, description: str | None, document: dict[str, Any]) -> ServiceDescriptor:
        """注册服务"""
        return self.services.add_service(name, description, document)

    def add_endpoint_node(
        self,
        service_id: str,
        endpoint: OperationDescriptor,
        position: PositionItem | None = None,
    ) -> Node:
        """将服务的某个操作作为调用节点加入图中"""
        service = self.services.get_service(service_id)
        return self.pipeline.add_call_node(endpoint, service.document, position)

    def export(self, fmt: Literal["json", "yaml"] = "json") -> str:
        """导出当前Pipeline"""
        document = self.exporter.to_workflow_document(self.pipeline.snapshot())
        return self.exporter.dumps(document, fmt)
