# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""枚举类型"""

from enum import Enum


class HTTPMethod(str, Enum):
    """
    HTTP方法

    注：定义顺序即为从路径中抽取操作时的遍历顺序
    """

    GET = "get"
    POST = "post"
    PUT = "put"
    DELETE = "delete"
    PATCH = "patch"
    OPTIONS = "options"
    HEAD = "head"


class NodeKind(str, Enum):
    """节点类型"""

    CALL = "call"
    PIPELINE_INPUT = "pipelineInput"
    PIPELINE_OUTPUT = "pipelineOutput"


class ParamLocation(str, Enum):
    """输入端口的参数位置"""

    PATH = "path"
    QUERY = "query"
    HEADER = "header"
    BODY = "body"


class SchemaKind(str, Enum):
    """Schema分类"""

    REFERENCE = "reference"
    OBJECT = "object"
    ARRAY = "array"
    PRIMITIVE = "primitive"


class StepType(str, Enum):
    """导出文档中的步骤类型"""

    OPERATION = "operation"
    INPUT = "input"
    OUTPUT = "output"


class EdgeRejectReason(str, Enum):
    """连线被拒绝的原因"""

    MISSING_ID = "missing_id"
    SOURCE_NOT_FOUND = "source_not_found"
    TARGET_NOT_FOUND = "target_not_found"
    SOURCE_PORT_NOT_FOUND = "source_port_not_found"
    TARGET_PORT_NOT_FOUND = "target_port_not_found"
    TYPE_MISMATCH = "type_mismatch"
    TARGET_ALREADY_CONNECTED = "target_already_connected"
