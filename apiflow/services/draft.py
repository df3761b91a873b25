# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""输入端口的编辑草稿：提交前不修改图存储"""

import logging
from typing import Any

from pydantic import BaseModel, Field

from .pipeline import PipelineManager

logger = logging.getLogger(__name__)


class InputDraft(BaseModel):
    """单个输入端口的草稿"""

    node_id: str
    port_id: str
    port_type: str
    text: str = Field(default="")


class InputDraftManager:
    """按端口ID保存的编辑草稿"""

    def __init__(self, store: PipelineManager) -> None:
        """绑定图存储"""
        self._store = store
        self._drafts: dict[str, InputDraft] = {}

    @staticmethod
    def _to_text(value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, list):
            return "\n".join(str(item) for item in value)
        return str(value)

    @staticmethod
    def _from_text(text: str, port_type: str) -> Any:
        """数组类型按行拆分，去除空行"""
        if port_type == "array":
            return [line.strip() for line in text.split("\n") if line.strip()]
        return text

    def begin(self, node_id: str, port_id: str) -> InputDraft | None:
        """以当前值创建草稿；端口已连接时不允许编辑"""
        node = self._store.get_node(node_id)
        port = node.find_input(port_id) if node else None
        if port is None:
            logger.warning("[InputDraftManager] 输入端口 %s/%s 不存在", node_id, port_id)
            return None
        if port.connected:
            logger.warning("[InputDraftManager] 输入端口 %s 已连接，不能手动编辑", port.name)
            return None
        draft = InputDraft(node_id=node_id, port_id=port_id, port_type=port.type, text=self._to_text(port.value))
        self._drafts[port_id] = draft
        return draft

    def get(self, port_id: str) -> InputDraft | None:
        """获取草稿"""
        return self._drafts.get(port_id)

    def update(self, port_id: str, text: str) -> InputDraft | None:
        """修改草稿内容"""
        draft = self._drafts.get(port_id)
        if draft is None:
            return None
        draft.text = text
        return draft

    def cancel(self, port_id: str) -> None:
        """放弃草稿"""
        self._drafts.pop(port_id, None)

    def commit(self, port_id: str) -> bool:
        """将草稿写入图存储；端口在此期间被连接时草稿作废"""
        draft = self._drafts.pop(port_id, None)
        if draft is None:
            return False
        return self._store.set_input_value(
            draft.node_id,
            draft.port_id,
            self._from_text(draft.text, draft.port_type),
        )
