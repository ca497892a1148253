"""YAML 配置读取

统一 encoding="utf-8"、空值保护；格式错误统一转换为 ConfigError。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from ebuilder.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

# 配置文件最大 1MB
MAX_YAML_SIZE = 1024 * 1024


def load_yaml(path: str | Path) -> dict[str, Any]:
    """读取 YAML 映射

    文件不存在或为空时返回空字典；顶层不是映射、文件过大、语法错误时抛出 ConfigError。
    IO 错误照常抛出 OSError。
    """
    p = Path(path)
    if not p.exists():
        logger.debug("配置文件不存在，使用默认值: %s", p)
        return {}

    size = p.stat().st_size
    if size > MAX_YAML_SIZE:
        raise ConfigError(f"配置文件 {p} 过大 ({size} 字节)")

    with open(p, encoding="utf-8") as f:
        try:
            result = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"配置文件 {p} 无效: {e}") from e

    if result is None:
        return {}
    if not isinstance(result, dict):
        raise ConfigError(
            f"配置文件 {p} 顶层必须是映射 (实际类型: {type(result).__name__})"
        )
    return result
