# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""Manager模块"""
from .draft import InputDraft, InputDraftManager
from .node import NodeManager
from .pipeline import PipelineManager, is_type_compatible
from .service import ServiceCenterManager
from .session import EditorSession
from .splitter import SchemaSplitter
from .workflow import WorkflowExporter

__all__ = [
    "EditorSession",
    "InputDraft",
    "InputDraftManager",
    "NodeManager",
    "PipelineManager",
    "SchemaSplitter",
    "ServiceCenterManager",
    "WorkflowExporter",
    "is_type_compatible",
]
