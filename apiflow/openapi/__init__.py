# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""API描述文档处理"""

from .loader import OpenAPILoader
from .resolver import SchemaResolver, classify_schema

__all__ = [
    "OpenAPILoader",
    "SchemaResolver",
    "classify_schema",
]
