# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""API描述文档载入器：解析、结构校验与操作抽取"""

import json
import logging
from copy import deepcopy
from typing import Any

import yaml
from anyio import Path
from openapi_spec_validator import (
    OpenAPIV2SpecValidator,
    OpenAPIV30SpecValidator,
    OpenAPIV31SpecValidator,
)

from apiflow.exceptions import DocumentParseError, DocumentValidationError
from apiflow.schemas.enum_var import HTTPMethod
from apiflow.schemas.service import OperationDescriptor

logger = logging.getLogger(__name__)


class OpenAPILoader:
    """API描述文档载入器"""

    async def read_document(self, path: Path) -> dict[str, Any]:
        """从本地磁盘读取并解析API描述文档"""
        if not await path.exists():
            err = f"[OpenAPILoader] 文件不存在：{path}"
            raise FileNotFoundError(err)
        return self.parse_document(await path.read_text(encoding="utf-8"))


    @staticmethod
    def parse_document(text: str) -> dict[str, Any]:
        """按JSON解析，失败时按YAML解析"""
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            try:
                data = yaml.safe_load(text)
            except yaml.YAMLError as e:
                err = f"[OpenAPILoader] 文档既不是合法的JSON也不是合法的YAML: {e!s}"
                logger.warning(err)
                raise DocumentParseError(err) from e

        if not isinstance(data, dict):
            err = f"[OpenAPILoader] 文档顶层必须是对象，实际为 {type(data).__name__}"
            logger.warning(err)
            raise DocumentParseError(err)
        return data


    @staticmethod
    def validate(document: dict[str, Any]) -> list[str]:
        """使用openapi-spec-validator进行结构校验，返回全部错误信息"""
        version = str(document.get("openapi") or document.get("swagger") or "")
        if version.startswith("2."):
            validator_cls = OpenAPIV2SpecValidator
        elif version.startswith("3.1"):
            validator_cls = OpenAPIV31SpecValidator
        else:
            validator_cls = OpenAPIV30SpecValidator

        try:
            errors = [
                str(getattr(error, "message", error))
                for error in validator_cls(document).iter_errors()
            ]
        except Exception as e:
            logger.exception("[OpenAPILoader] 校验过程中出错")
            errors = [f"{type(e).__name__}: {e!s}"]

        if errors:
            logger.warning("[OpenAPILoader] 文档校验失败，共 %d 条错误", len(errors))
        return errors


    def check(self, document: dict[str, Any]) -> dict[str, Any]:
        """校验文档；不合法时抛出带有错误列表的异常"""
        errors = self.validate(document)
        if errors:
            raise DocumentValidationError(errors)
        return document


    @staticmethod
    def extract_endpoints(service_id: str, document: dict[str, Any]) -> list[OperationDescriptor]:
        """
        将文档拆解为操作列表

        路径按文档顺序遍历，同一路径下按HTTPMethod的定义顺序遍历
        """
        endpoints = []
        for path, path_item in (document.get("paths") or {}).items():
            if not isinstance(path_item, dict):
                continue
            for method in HTTPMethod:
                operation = path_item.get(method.value)
                if not isinstance(operation, dict):
                    continue
                endpoint = OperationDescriptor(
                    serviceId=service_id,
                    path=path,
                    method=method,
                    operationId=operation.get("operationId"),
                    summary=operation.get("summary"),
                    description=operation.get("description"),
                    parameters=deepcopy(operation.get("parameters") or []),
                    responses={
                        str(code): deepcopy(response)
                        for code, response in (operation.get("responses") or {}).items()
                    },
                )
                if operation.get("requestBody"):
                    endpoint.request_body = deepcopy(operation["requestBody"])
                endpoints.append(endpoint)
        logger.debug("[OpenAPILoader] 服务 %s 共抽取 %d 个操作", service_id, len(endpoints))
        return endpoints
