"""Zig 可执行文件封装

职责:
- 检测 Zig 版本（决定包哈希文件名格式与 ebuild 中的 ZIG_SLOT）
- 同步执行 zig 子命令（fetch / build）
- 通过自定义 build runner 收集构建报告（系统库、构建选项等）

所有调用都是同步子进程，超时与重试由 zig 自身负责。
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ebuilder.core.exceptions import ZigProcessError
from ebuilder.utils.shell import CommandExecutor, CommandResult, get_executor

_VERSION_RE = re.compile(r"^(\d+)\.(\d+)\.(\d+)(?:-([0-9A-Za-z.\-]+))?(?:\+([0-9A-Za-z.\-]+))?$")


@dataclass(frozen=True)
class ZigVersion:
    """Zig 版本，pre_release 非空表示 live（开发）版本"""

    major: int
    minor: int
    patch: int
    pre_release: str = ""
    raw: str = ""

    @classmethod
    def parse(cls, text: str) -> ZigVersion:
        raw = text.strip()
        m = _VERSION_RE.match(raw)
        if not m:
            raise ZigProcessError(f"无法解析 Zig 版本: \"{raw}\"")
        return cls(
            major=int(m.group(1)),
            minor=int(m.group(2)),
            patch=int(m.group(3)),
            pre_release=m.group(4) or "",
            raw=raw,
        )

    @property
    def is_live(self) -> bool:
        return bool(self.pre_release)

    @property
    def new_package_format(self) -> bool:
        """0.14 起包哈希自带 "名称-版本-" 前缀"""
        return (self.major, self.minor) >= (0, 14)

    @property
    def slot(self) -> str:
        if self.is_live:
            return "9999"
        return f"{self.major}.{self.minor}"


# =========================================================================
# 构建报告（由自定义 build runner 以 JSON 输出）
# =========================================================================


@dataclass
class SystemLibrary:
    name: str
    used_by: list[str] = field(default_factory=list)


@dataclass
class SystemIntegration:
    name: str
    enabled: bool = False


@dataclass
class UserOption:
    name: str
    description: str = ""
    type: str = ""
    values: list[str] | None = None


@dataclass
class BuildReport:
    """zig build 自省结果

    used_dependencies_hashes 为 None 表示 build runner 不支持（0.13）。
    """

    system_libraries: list[SystemLibrary] = field(default_factory=list)
    system_integrations: list[SystemIntegration] = field(default_factory=list)
    user_options: list[UserOption] = field(default_factory=list)
    used_dependencies_hashes: list[str] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BuildReport:
        return cls(
            system_libraries=[
                SystemLibrary(name=d["name"], used_by=list(d.get("used_by", [])))
                for d in data.get("system_libraries", [])
            ],
            system_integrations=[
                SystemIntegration(name=d["name"], enabled=bool(d.get("enabled", False)))
                for d in data.get("system_integrations", [])
            ],
            user_options=[
                UserOption(
                    name=d["name"],
                    description=d.get("description", ""),
                    type=d.get("type", ""),
                    values=d.get("values"),
                )
                for d in data.get("user_options", [])
            ],
            used_dependencies_hashes=data.get("used_dependencies_hashes"),
        )


class ZigProcess:
    """zig 命令调用器"""

    def __init__(
        self,
        executable: str = "zig",
        executor: CommandExecutor | None = None,
        timeout: int | None = None,
    ) -> None:
        self.executable = executable
        self.executor = executor or get_executor()
        self.timeout = timeout
        self._version: ZigVersion | None = None

    def run(self, args: list[str], *, cwd: str | Path = ".") -> CommandResult:
        try:
            return self.executor.execute(
                [self.executable, *args], cwd=cwd, timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise ZigProcessError(f"找不到 Zig 可执行文件: {self.executable}") from e

    def version(self) -> ZigVersion:
        """执行 zig version，结果缓存在实例上"""
        if self._version is None:
            r = self.run(["version"])
            if not r.success:
                raise ZigProcessError(
                    f"zig version 失败 (rc={r.returncode}): {r.stderr.strip()[:500]}"
                )
            self._version = ZigVersion.parse(r.stdout)
        return self._version

    def build_report(
        self,
        project_root: Path,
        build_runner: Path,
        extra_args: list[str],
        events: logging.Logger,
    ) -> BuildReport:
        """用自定义 build runner 执行 zig build，解析其 JSON 输出"""
        args = ["build", "--build-runner", str(build_runner), *extra_args]
        events.debug("zig build 参数: %s", args)
        r = self.run(args, cwd=project_root)
        if not r.success:
            events.debug("%s", r.stderr)
            raise ZigProcessError(
                f"zig build 失败 (rc={r.returncode})，详情见 DEBUG 日志"
            )
        try:
            data = json.loads(r.stdout)
        except json.JSONDecodeError as e:
            raise ZigProcessError(f"build runner 输出不是有效的 JSON: {e}") from e
        if not isinstance(data, dict):
            raise ZigProcessError("build runner 输出必须是 JSON 对象")
        return BuildReport.from_dict(data)
