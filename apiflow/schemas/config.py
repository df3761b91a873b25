# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""配置文件数据结构"""

from typing import Literal

from pydantic import BaseModel, Field


class DeployConfig(BaseModel):
    """部署配置"""

    data_dir: str = Field(description="数据存储路径", default="./data")


class LoggingConfig(BaseModel):
    """日志配置"""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(description="日志级别", default="INFO")


class ResolverConfig(BaseModel):
    """Schema引用解析配置"""

    max_ref_depth: int = Field(description="引用链最大深度，超过视为循环引用", default=32, ge=1)


class PipelineConfig(BaseModel):
    """Pipeline编辑配置"""

    autosave: bool = Field(description="每次修改后是否自动写入存储", default=True)
    default_name: str = Field(description="新建Pipeline的默认名称", default="New Pipeline")


class ExportConfig(BaseModel):
    """工作流文档导出配置"""

    version: str = Field(description="工作流文档格式版本", default="1.0.0")
    info_version: str = Field(description="info.version 的默认值", default="1.0.0")
    default_title: str = Field(description="Pipeline未命名时使用的标题", default="HTTP Request Pipeline")


class ConfigModel(BaseModel):
    """配置文件的校验Class"""

    deploy: DeployConfig = Field(default_factory=DeployConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
