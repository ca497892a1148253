"""集中配置管理

支持从 YAML 文件加载 + 编程式覆盖（CLI 选项优先于文件）。
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path

from ebuilder.core.exceptions import ConfigError
from ebuilder.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "~/.config/zig-ebuilder/config.yml"

_FETCH_MODES = ("none", "plain", "hashed")
_MERGE_FALLBACKS = ("incoming", "existing")


def _is_int(value: object) -> bool:
    # YAML 中的 true/false 会被解析为 bool
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass
class Config:
    """全局配置"""

    # 目录（为空时按 XDG_CACHE_HOME / HOME 推导）
    cache_dir: str = ""

    # Zig
    zig_executable: str = "zig"
    build_runner: str = ""
    fetch_timeout: int = 600

    # 依赖解析
    fetch_mode: str = "plain"
    merge_fallback: str = "incoming"

    # 输出
    template: str = "gentoo.ebuild"
    compression_level: int = 6

    # 自定义扩展 (放不到字段里的配置项)
    extra: dict = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        if self.fetch_mode not in _FETCH_MODES:
            raise ConfigError(
                f"无效的拉取策略 '{self.fetch_mode}'，可选: {', '.join(_FETCH_MODES)}"
            )
        if self.merge_fallback not in _MERGE_FALLBACKS:
            raise ConfigError(
                f"无效的 merge_fallback '{self.merge_fallback}'，"
                f"可选: {', '.join(_MERGE_FALLBACKS)}"
            )
        if not _is_int(self.compression_level) or not 1 <= self.compression_level <= 9:
            raise ConfigError(f"compression_level 必须是 1-9 之间的整数: {self.compression_level!r}")
        if not _is_int(self.fetch_timeout) or self.fetch_timeout <= 0:
            raise ConfigError(f"fetch_timeout 必须是正整数（秒）: {self.fetch_timeout!r}")
        if not self.zig_executable:
            raise ConfigError("zig_executable 不能为空")

    @classmethod
    def from_file(cls, path: str = DEFAULT_CONFIG_PATH) -> Config:
        """从 YAML 文件加载配置，不存在则返回默认"""
        data = load_yaml(Path(path).expanduser())
        if not data:
            return cls()
        known = {f.name for f in fields(cls)} - {"extra"}
        matched = {k: v for k, v in data.items() if k in known}
        extra = {k: v for k, v in data.items() if k not in known}
        cfg = cls(**matched)
        cfg.extra = extra
        return cfg

    def override(self, **kwargs: object) -> Config:
        """用非 None 的值覆盖字段（CLI 选项）"""
        for k, v in kwargs.items():
            if v is not None:
                setattr(self, k, v)
        self.validate()
        return self

    def to_dict(self) -> dict:
        return asdict(self)


# 全局单例，首次 import 时不加载文件；由 CLI 入口显式初始化
_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config()
    return _current


def init_config(path: str = DEFAULT_CONFIG_PATH) -> Config:
    """从文件初始化全局配置"""
    global _current  # noqa: PLW0603
    _current = Config.from_file(path)
    logger.debug("配置已加载: %s", path)
    return _current
