# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""测试共用的API描述文档与fixture"""

from copy import deepcopy
from typing import Any

import pytest

from apiflow.common.persistence import YAMLFileGateway
from apiflow.openapi import OpenAPILoader
from apiflow.schemas.service import OperationDescriptor
from apiflow.services.pipeline import PipelineManager

PETSTORE_DOCUMENT: dict[str, Any] = {
    "openapi": "3.0.3",
    "info": {"title": "Petstore", "version": "1.0.0"},
    "paths": {
        "/pets": {
            "post": {
                "operationId": "createPet",
                "summary": "Create a pet",
                "requestBody": {
                    "required": True,
                    "content": {
                        "application/json": {
                            "schema": {"$ref": "#/components/schemas/NewPet"},
                        },
                    },
                },
                "responses": {
                    "201": {
                        "description": "Created",
                        "content": {
                            "application/json": {
                                "schema": {"$ref": "#/components/schemas/Pet"},
                            },
                        },
                    },
                    "400": {"description": "Bad request"},
                },
            },
            "get": {
                "operationId": "listPets",
                "summary": "List pets",
                "parameters": [
                    {"name": "limit", "in": "query", "schema": {"type": "integer"}},
                    {"name": "X-Trace-Id", "in": "header", "schema": {"type": "string"}},
                    {"name": "session", "in": "cookie", "schema": {"type": "string"}},
                ],
                "responses": {
                    "200": {
                        "description": "A list of pets",
                        "content": {
                            "application/json": {
                                "schema": {
                                    "type": "array",
                                    "items": {"$ref": "#/components/schemas/Pet"},
                                },
                            },
                        },
                    },
                },
            },
        },
        "/pets/{petId}": {
            "delete": {
                "operationId": "deletePet",
                "parameters": [
                    {"name": "petId", "in": "path", "required": True, "schema": {"type": "integer"}},
                ],
                "responses": {"204": {"description": "Deleted"}},
            },
            "get": {
                "operationId": "getPet",
                "parameters": [
                    {"name": "petId", "in": "path", "required": True, "schema": {"type": "integer"}},
                ],
                "responses": {
                    "200": {
                        "description": "A pet",
                        "content": {
                            "application/json": {
                                "schema": {"$ref": "#/components/schemas/Pet"},
                            },
                        },
                    },
                },
            },
        },
        "/pets/count": {
            "get": {
                "operationId": "countPets",
                "responses": {
                    "200": {
                        "description": "Number of pets",
                        "content": {
                            "application/json": {"schema": {"type": "integer"}},
                        },
                    },
                },
            },
        },
        "/owners": {
            "get": {
                "operationId": "getOwnerSummary",
                "responses": {
                    "200": {
                        "description": "Owner summary",
                        "content": {
                            "application/json": {
                                "schema": {
                                    "type": "object",
                                    "properties": {
                                        "owner": {"$ref": "#/components/schemas/Owner"},
                                        "tags": {"type": "array", "items": {"type": "string"}},
                                    },
                                },
                            },
                        },
                    },
                },
            },
        },
    },
    "components": {
        "schemas": {
            "Pet": {
                "type": "object",
                "required": ["id", "name"],
                "properties": {
                    "id": {"type": "integer"},
                    "name": {"type": "string"},
                },
            },
            "NewPet": {
                "type": "object",
                "required": ["name"],
                "properties": {
                    "name": {"type": "string"},
                    "tag": {"type": "string"},
                },
            },
            "Owner": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "address": {
                        "type": "object",
                        "properties": {"city": {"type": "string"}},
                    },
                },
            },
        },
    },
}


@pytest.fixture
def petstore() -> dict[str, Any]:
    """可修改的Petstore文档副本"""
    return deepcopy(PETSTORE_DOCUMENT)


@pytest.fixture
def endpoints(petstore: dict[str, Any]) -> dict[str, OperationDescriptor]:
    """以operationId为键的全部操作"""
    return {
        endpoint.operation_id: endpoint
        for endpoint in OpenAPILoader.extract_endpoints("petstore", petstore)
    }


@pytest.fixture
def gateway(tmp_path) -> YAMLFileGateway:
    """临时目录中的文件存储"""
    return YAMLFileGateway(tmp_path / "data")


@pytest.fixture
def store(gateway: YAMLFileGateway) -> PipelineManager:
    """带自动保存的图存储"""
    return PipelineManager(gateway, autosave=True)
