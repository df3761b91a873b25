"""Config类的单元测试"""

from pathlib import Path
from typing import Any

import pytest
import toml
from pydantic import ValidationError
from pytest_mock import MockerFixture

from apiflow.common.config import Config
from apiflow.schemas.config import ConfigModel

MOCK_CONFIG_DATA: dict[str, Any] = {
    "deploy": {"data_dir": "/app/data"},
    "logging": {"level": "DEBUG"},
    "resolver": {"max_ref_depth": 8},
    "pipeline": {"autosave": False, "default_name": "Demo"},
    "export": {"version": "2.0.0", "info_version": "0.1.0", "default_title": "Demo Pipeline"},
}


def test_init_with_custom_config_path(mocker: MockerFixture, tmp_path: Path) -> None:
    """测试使用CONFIG环境变量指定的配置文件"""
    config_file = tmp_path / "config.toml"
    config_file.write_text(toml.dumps(MOCK_CONFIG_DATA), encoding="utf-8")
    mocker.patch.dict("os.environ", {"CONFIG": str(config_file)})

    config = Config.init_config()
    assert isinstance(config, ConfigModel)
    assert config.deploy.data_dir == "/app/data"
    assert config.resolver.max_ref_depth == 8
    assert config.pipeline.autosave is False
    assert config.export.default_title == "Demo Pipeline"


def test_init_with_missing_file(mocker: MockerFixture, tmp_path: Path) -> None:
    """测试配置文件不存在时使用默认值"""
    mocker.patch.dict("os.environ", {"CONFIG": str(tmp_path / "missing.toml")})

    config = Config.init_config()
    assert config.resolver.max_ref_depth == 32
    assert config.pipeline.autosave is True
    assert config.pipeline.default_name == "New Pipeline"
    assert config.export.version == "1.0.0"


def test_partial_config(mocker: MockerFixture, tmp_path: Path) -> None:
    """测试只填写部分配置段"""
    config_file = tmp_path / "config.toml"
    config_file.write_text(toml.dumps({"logging": {"level": "WARNING"}}), encoding="utf-8")
    mocker.patch.dict("os.environ", {"CONFIG": str(config_file)})

    config = Config.init_config()
    assert config.logging.level == "WARNING"
    assert config.deploy.data_dir == "./data"


def test_config_is_frozen() -> None:
    """测试配置对象不可修改"""
    config = Config()
    with pytest.raises(ValidationError):
        config.logging = config.logging  # type: ignore[misc]


def test_invalid_depth() -> None:
    """测试非法的引用深度"""
    with pytest.raises(ValidationError):
        ConfigModel.model_validate({"resolver": {"max_ref_depth": 0}})


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
