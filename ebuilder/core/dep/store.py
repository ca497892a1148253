"""包存储访问

zig fetch --global-cache-dir <root> 会把包解压到 <root>/p/<hash>/，
这里只负责定位目录和读取嵌套清单，不写入包内容。
"""

from __future__ import annotations

import logging
from pathlib import Path

from ebuilder.core.manifest import MANIFEST_FILE_NAME, Manifest, read_manifest

logger = logging.getLogger(__name__)

PACKAGES_SUBDIR = "p"


class PackageStore:
    """以内容哈希为键的包存储"""

    def __init__(self, root: Path) -> None:
        self.root = root

    @property
    def packages_dir(self) -> Path:
        return self.root / PACKAGES_SUBDIR

    def package_dir(self, package_hash: str) -> Path:
        return self.packages_dir / package_hash

    def read_nested_manifest(self, directory: Path) -> Manifest | None:
        """读取目录中的 build.zig.zon

        文件不存在返回 None（pristine 包），其他 IO 错误照常抛出。
        """
        try:
            return read_manifest(directory / MANIFEST_FILE_NAME)
        except FileNotFoundError:
            logger.debug("%s 中没有 %s，视为 pristine 包", directory, MANIFEST_FILE_NAME)
            return None
