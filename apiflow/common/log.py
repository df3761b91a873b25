# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""日志配置"""

import logging

from rich.console import Console
from rich.logging import RichHandler

from .config import config

LOGGER_FORMAT = "%(funcName)s() - %(message)s"
DATE_FORMAT = "%y-%b-%d %H:%M:%S"


def setup_logging(level: str | None = None) -> None:
    """使用RichHandler配置根logger"""
    logging.basicConfig(
        level=level or config.logging.level,
        format=LOGGER_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=[RichHandler(rich_tracebacks=True, console=Console(
            color_system="256",
            width=160,
        ))],
        force=True,
    )
