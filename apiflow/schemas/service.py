# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""API描述文档及其操作的数据结构"""

import uuid
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .enum_var import HTTPMethod


class ServiceDescriptor(BaseModel):
    """已注册的外部服务（一份API描述文档）"""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), description="服务ID")
    name: str = Field(description="服务名称")
    description: str | None = Field(default=None, description="服务描述")
    document: dict[str, Any] = Field(alias="openApiDocument", description="API描述文档（paths + components）")


class OperationDescriptor(BaseModel):
    """API描述文档中的单个操作"""

    model_config = ConfigDict(populate_by_name=True)

    service_id: str = Field(alias="serviceId", description="所属服务ID")
    path: str = Field(description="接口路径")
    method: HTTPMethod = Field(description="HTTP方法")
    operation_id: str | None = Field(default=None, alias="operationId")
    summary: str | None = Field(default=None)
    description: str | None = Field(default=None)
    parameters: list[dict[str, Any]] = Field(default_factory=list, description="参数列表")
    request_body: dict[str, Any] | None = Field(default=None, alias="requestBody", description="请求体定义")
    responses: dict[str, dict[str, Any]] = Field(default_factory=dict, description="状态码 → 响应定义")

    @property
    def label(self) -> str:
        """节点默认标题，例如 ``GET /pets``"""
        return f"{self.method.value.upper()} {self.path}"
