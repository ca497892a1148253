"""目录定位

职责:
- 生成器缓存目录: 配置 > $XDG_CACHE_HOME/zig-ebuilder > $HOME/.cache/zig-ebuilder
- 依赖存储目录 deps/ 与包目录 deps/p/
- 项目定位: build.zig 文件或包含它的目录，旁边可选的 build.zig.zon
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from ebuilder.core.config import Config
from ebuilder.core.dep.store import PACKAGES_SUBDIR
from ebuilder.core.exceptions import ConfigError, ProjectNotFoundError
from ebuilder.core.manifest import MANIFEST_FILE_NAME

APP_DIR_NAME = "zig-ebuilder"
DEPENDENCIES_STORAGE_SUBDIR = "deps"
BUILD_ZIG = "build.zig"


def _cache_root(config: Config, environ: Mapping[str, str], events: logging.Logger) -> Path:
    if config.cache_dir:
        return Path(config.cache_dir).expanduser().absolute()

    xdg_cache_home = environ.get("XDG_CACHE_HOME")
    if xdg_cache_home is not None:
        # 按 XDG 规范，必须非空且为绝对路径
        if not xdg_cache_home:
            events.error("XDG_CACHE_HOME 已设置但为空，忽略")
        elif not os.path.isabs(xdg_cache_home):
            events.error("XDG_CACHE_HOME 已设置但不是绝对路径，忽略")
        else:
            return Path(xdg_cache_home) / APP_DIR_NAME

    home = environ.get("HOME")
    if home is None:
        raise ConfigError("XDG_CACHE_HOME 与 HOME 均未设置")
    if not home or not os.path.isabs(home):
        raise ConfigError("XDG_CACHE_HOME 未设置，HOME 为空或不是绝对路径")
    return Path(home) / ".cache" / APP_DIR_NAME


@dataclass
class GeneratorLocations:
    """生成器使用的缓存目录（均为绝对路径）"""

    cache: Path
    dependencies_storage: Path
    packages: Path

    @classmethod
    def make(
        cls,
        config: Config,
        environ: Mapping[str, str] | None = None,
        events: logging.Logger | None = None,
    ) -> GeneratorLocations:
        events = events or logging.getLogger(__name__)
        cache = _cache_root(config, os.environ if environ is None else environ, events)
        storage = cache / DEPENDENCIES_STORAGE_SUBDIR
        packages = storage / PACKAGES_SUBDIR

        events.info("打开缓存目录 \"%s\"...", cache)
        try:
            packages.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigError(f"创建目录 \"{packages}\" 失败: {e}") from e
        return cls(cache=cache, dependencies_storage=storage, packages=packages)


@dataclass
class ProjectLocation:
    """被打包的 Zig 项目"""

    root: Path
    build_zig: Path
    build_zig_zon: Path | None

    @classmethod
    def open(cls, path: str | Path | None, events: logging.Logger) -> ProjectLocation:
        """path 可以是 build.zig 文件或包含它的目录，None 表示当前目录"""
        if path is None:
            events.info("未指定位置，尝试打开当前目录中的 \"%s\"...", BUILD_ZIG)
            build_zig = Path(BUILD_ZIG)
        else:
            p = Path(path)
            if p.is_symlink() and not p.exists():
                raise ProjectNotFoundError(f"无法解析符号链接 \"{p}\"")
            if p.is_file():
                events.info("\"%s\" 是文件，尝试打开...", p)
                build_zig = p
            elif p.is_dir():
                events.info("\"%s\" 是目录，尝试查找其中的 \"%s\"...", p, BUILD_ZIG)
                build_zig = p / BUILD_ZIG
            elif p.exists():
                raise ProjectNotFoundError(f"\"{p}\" 既不是文件也不是目录")
            else:
                raise ProjectNotFoundError(f"文件或目录 \"{p}\" 不存在")

        if not build_zig.is_file():
            raise ProjectNotFoundError(f"找不到 \"{build_zig}\"")

        root = build_zig.parent.absolute()
        zon = root / MANIFEST_FILE_NAME
        if zon.is_file():
            events.info("在旁边找到 \"%s\"", MANIFEST_FILE_NAME)
        else:
            events.warning("打开 \"%s\" 失败，忽略", zon)
        return cls(
            root=root,
            build_zig=build_zig.absolute(),
            build_zig_zon=zon if zon.is_file() else None,
        )
