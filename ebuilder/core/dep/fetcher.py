"""依赖包拉取器

职责:
- 调用 zig fetch 把远程依赖拉取到包存储
- 返回拉取后实际的内容哈希（信任 zig 的计算结果）
- zig 有任何 stderr 输出或非零退出即视为失败，原样保留诊断信息
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path

from ebuilder.core.exceptions import FetchError
from ebuilder.core.manifest import RemoteDependency
from ebuilder.core.zig_process import ZigProcess


class FetchMode(Enum):
    """依赖解析策略

    NONE:   不拉取，输出不含依赖
    PLAIN:  zig fetch，不校验声明的哈希
    HASHED: zig fetch --hash，需要打过补丁的 Zig
    """

    NONE = "none"
    PLAIN = "plain"
    HASHED = "hashed"


class ZigFetcher:
    """基于 zig fetch 的拉取器"""

    def __init__(self, zig: ZigProcess, storage_root: Path) -> None:
        self.zig = zig
        self.storage_root = storage_root

    def command(self, dependency: RemoteDependency, mode: FetchMode) -> list[str]:
        args = ["fetch", "--global-cache-dir", str(self.storage_root)]
        if mode is FetchMode.HASHED:
            args += ["--hash", dependency.hash]
        args.append(dependency.url)
        return args

    def fetch(
        self,
        name: str,
        dependency: RemoteDependency,
        mode: FetchMode,
        *,
        cwd: Path,
        events: logging.Logger,
    ) -> str:
        """拉取单个远程依赖，返回内容哈希

        Raises:
            FetchError: zig fetch 报告错误
        """
        if mode is FetchMode.NONE:
            raise ValueError("FetchMode.NONE 不应触发拉取")

        r = self.zig.run(self.command(dependency, mode), cwd=cwd)
        if r.stderr or not r.success:
            events.error("拉取依赖 \"%s\" 出错，详情见 DEBUG 日志", name)
            events.debug("%s", r.stderr)
            raise FetchError(name, r.stderr or f"zig fetch 退出码 {r.returncode}")

        fetched_hash = r.stdout.strip()
        if not fetched_hash:
            raise FetchError(name, "zig fetch 没有输出哈希")
        if fetched_hash != dependency.hash:
            events.debug("声明哈希 %s 与实际哈希 %s 不同", dependency.hash, fetched_hash)
        return fetched_hash
