# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""导出的工作流文档数据结构"""

from typing import Any

from pydantic import BaseModel, Field

from .enum_var import HTTPMethod, StepType


class ParameterSchema(BaseModel):
    """参数Schema，仅保留类型"""

    type: str


class WorkflowParameter(BaseModel):
    """工作流或步骤的输入/输出参数"""

    description: str | None = None
    schema_: ParameterSchema = Field(alias="schema")
    required: bool | None = None


class StepOperation(BaseModel):
    """步骤对应的HTTP操作"""

    method: HTTPMethod
    path: str


class Step(BaseModel):
    """工作流中的单个步骤"""

    id: str
    name: str
    type: StepType
    operation: StepOperation | None = None
    inputs: dict[str, Any] | None = None
    outputs: dict[str, WorkflowParameter] | None = None
    next: str | None = None


class WorkflowInfo(BaseModel):
    """文档基本信息"""

    title: str
    description: str | None = None
    version: str


class Workflow(BaseModel):
    """工作流主体：步骤以ID为键"""

    id: str
    steps: dict[str, Step] = Field(default_factory=dict)
    inputs: dict[str, WorkflowParameter] | None = None
    outputs: dict[str, WorkflowParameter] | None = None


class WorkflowDocument(BaseModel):
    """导出的工作流文档"""

    version: str
    info: WorkflowInfo
    workflow: Workflow
