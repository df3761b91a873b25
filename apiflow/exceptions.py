# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""自定义异常类"""


class DocumentParseError(Exception):
    """API描述文件既不是JSON也不是YAML对象"""


class DocumentValidationError(Exception):
    """API描述文档未通过结构校验"""

    def __init__(self, messages: list[str]) -> None:
        """保存校验器返回的全部错误信息"""
        self.messages = messages
        super().__init__("; ".join(messages))


class CyclicReferenceError(Exception):
    """Schema引用链超过最大深度"""

    def __init__(self, ref: str, depth: int) -> None:
        """记录出错的引用"""
        self.ref = ref
        self.depth = depth
        super().__init__(f"引用 {ref} 超过最大解析深度 {depth}")


class ServiceNotFoundError(Exception):
    """服务不存在"""
