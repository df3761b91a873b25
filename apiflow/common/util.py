# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""YAML表示器"""

from typing import Any

import yaml


def yaml_str_presenter(dumper, data):  # noqa: ANN001, ANN201, D103
    if "\n" in data:
        return dumper.represent_scalar("tag:yaml.org,2002:str", data, style="|")
    return dumper.represent_scalar("tag:yaml.org,2002:str", data)


def yaml_dump(data: Any) -> str:
    """以保持键顺序、多行字符串块格式的方式输出YAML"""
    yaml.add_representer(str, yaml_str_presenter, Dumper=yaml.SafeDumper)
    return yaml.safe_dump(
        data,
        allow_unicode=True,
        sort_keys=False,
    )
