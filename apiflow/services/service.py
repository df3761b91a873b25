# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""服务中心 Manager：注册、校验与删除API描述文档"""

import logging
from typing import Any

from anyio import Path

from apiflow.common.persistence import PersistenceGateway
from apiflow.constants import SERVICES_STORAGE_KEY
from apiflow.exceptions import ServiceNotFoundError
from apiflow.openapi import OpenAPILoader
from apiflow.schemas.service import OperationDescriptor, ServiceDescriptor

from .pipeline import PipelineManager

logger = logging.getLogger(__name__)


class ServiceCenterManager:
    """服务中心管理器"""

    def __init__(
        self,
        gateway: PersistenceGateway | None = None,
        store: PipelineManager | None = None,
    ) -> None:
        """
        初始化服务中心

        :param gateway: 持久化存储；为None时仅保存在内存中
        :param store: 关联的图存储；删除服务时同步删除其调用节点
        """
        self._gateway = gateway
        self._store = store
        self._loader = OpenAPILoader()
        self._services: dict[str, ServiceDescriptor] = {}


    def _flush(self) -> None:
        if self._gateway is None:
            return
        self._gateway.put(
            SERVICES_STORAGE_KEY,
            [service.model_dump(by_alias=True, mode="json") for service in self._services.values()],
        )


    def load(self) -> list[ServiceDescriptor]:
        """从存储载入已注册的服务"""
        if self._gateway is None:
            return []
        data = self._gateway.get(SERVICES_STORAGE_KEY) or []
        self._services = {}
        for item in data:
            service = ServiceDescriptor.model_validate(item)
            self._services[service.id] = service
        logger.info("[ServiceCenterManager] 载入 %d 个服务", len(self._services))
        return self.list_services()


    def add_service(self, name: str, description: str | None, document: dict[str, Any]) -> ServiceDescriptor:
        """
        校验并注册服务

        :param name: 服务名称，不能为空
        :param description: 服务描述
        :param document: 已解析的API描述文档
        :return: 新注册的服务
        """
        if not name or not name.strip():
            err = "[ServiceCenterManager] 服务名称不能为空"
            raise ValueError(err)

        # 校验失败时抛出DocumentValidationError，不做任何修改
        self._loader.check(document)

        service = ServiceDescriptor(name=name.strip(), description=description, openApiDocument=document)
        self._services[service.id] = service
        self._flush()
        logger.info("[ServiceCenterManager] 注册服务 %s（%s）", service.name, service.id)
        return service


    async def upload_service(self, name: str, description: str | None, path: str | Path) -> ServiceDescriptor:
        """从文件读取API描述文档（JSON或YAML）并注册"""
        document = await self._loader.read_document(Path(path))
        return self.add_service(name, description, document)


    def remove_service(self, service_id: str) -> ServiceDescriptor:
        """删除服务，同时删除图中使用该服务的调用节点"""
        service = self._services.pop(service_id, None)
        if service is None:
            err = f"[ServiceCenterManager] 服务 {service_id} 不存在"
            logger.warning(err)
            raise ServiceNotFoundError(err)

        removed = self._store.remove_nodes_by_service(service_id) if self._store is not None else 0
        self._flush()
        logger.info("[ServiceCenterManager] 删除服务 %s，及 %d 个调用节点", service.name, removed)
        return service


    def get_service(self, service_id: str) -> ServiceDescriptor:
        """获取服务"""
        service = self._services.get(service_id)
        if service is None:
            err = f"[ServiceCenterManager] 服务 {service_id} 不存在"
            raise ServiceNotFoundError(err)
        return service


    def list_services(self) -> list[ServiceDescriptor]:
        """按注册顺序列出服务"""
        return list(self._services.values())


    def get_endpoints(self, service_id: str) -> list[OperationDescriptor]:
        """列出服务的全部操作"""
        service = self.get_service(service_id)
        return self._loader.extract_endpoints(service.id, service.document)
