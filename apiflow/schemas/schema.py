# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""JSON Schema片段的分类结果与拆分树"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field

from .enum_var import SchemaKind


class ReferenceSchema(BaseModel):
    """$ref引用"""

    kind: Literal[SchemaKind.REFERENCE] = SchemaKind.REFERENCE
    ref: str
    raw: dict[str, Any]


class ObjectSchema(BaseModel):
    """带properties的对象"""

    kind: Literal[SchemaKind.OBJECT] = SchemaKind.OBJECT
    properties: dict[str, dict[str, Any]] = Field(default_factory=dict)
    required: list[str] = Field(default_factory=list)
    raw: dict[str, Any]


class ArraySchema(BaseModel):
    """数组；items为元素Schema"""

    kind: Literal[SchemaKind.ARRAY] = SchemaKind.ARRAY
    items: dict[str, Any] = Field(default_factory=dict)
    raw: dict[str, Any]


class PrimitiveSchema(BaseModel):
    """其他所有Schema；type可能缺失"""

    kind: Literal[SchemaKind.PRIMITIVE] = SchemaKind.PRIMITIVE
    type: str | None = None
    raw: dict[str, Any]


ClassifiedSchema = Annotated[
    ReferenceSchema | ObjectSchema | ArraySchema | PrimitiveSchema,
    Field(discriminator="kind"),
]


class PropertyNode(BaseModel):
    """Schema拆分树中的一个属性"""

    name: str
    type: str
    path: list[str]
    children: list["PropertyNode"] | None = None
    synthetic: bool = Field(default=False, description="数组元素的合成节点，不计入叶子名称")
