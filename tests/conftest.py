"""测试公共设施: 假 zig 执行器与包存储构造"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from ebuilder.core.manifest import RemoteDependency
from ebuilder.utils.shell import CommandResult


def make_package_dir(storage_root: Path, package_hash: str, files: dict[str, str]) -> Path:
    """在 <storage_root>/p/<hash>/ 下创建包内容"""
    directory = storage_root / "p" / package_hash
    directory.mkdir(parents=True, exist_ok=True)
    for rel, content in files.items():
        target = directory / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    return directory


class FakeZigExecutor:
    """模拟 zig 可执行文件

    packages: url -> (hash, 文件内容)，fetch 时写入 --global-cache-dir
    failures: url -> stderr，fetch 时报错
    report: zig build（自定义 build runner）输出的 JSON
    """

    def __init__(
        self,
        version: str = "0.14.0",
        packages: dict[str, tuple[str, dict[str, str]]] | None = None,
        failures: dict[str, str] | None = None,
        report: dict | None = None,
    ) -> None:
        self.version = version
        self.report = report or {}
        self.packages = packages or {}
        self.failures = failures or {}
        self.calls: list[list[str]] = []

    def execute(self, cmd, *, cwd=".", env=None, timeout=None) -> CommandResult:
        self.calls.append(list(cmd))
        sub = cmd[1]
        if sub == "version":
            return CommandResult(0, self.version + "\n", "")
        if sub == "fetch":
            storage = Path(cmd[3])
            url = cmd[-1]
            if url in self.failures:
                return CommandResult(1, "", self.failures[url])
            package_hash, files = self.packages[url]
            make_package_dir(storage, package_hash, files)
            return CommandResult(0, package_hash + "\n", "")
        if sub == "build":
            return CommandResult(0, json.dumps(self.report), "")
        return CommandResult(1, "", f"unsupported: {cmd}")

    @property
    def fetched_urls(self) -> list[str]:
        return [c[-1] for c in self.calls if c[1] == "fetch"]


class FakeFetcher:
    """DependencyFetcher 假实现: 直接在包存储中创建目录"""

    def __init__(
        self,
        storage_root: Path,
        packages: dict[str, tuple[str, dict[str, str]]],
    ) -> None:
        self.storage_root = storage_root
        self.packages = packages
        self.fetched: list[str] = []

    def fetch(self, name, dependency: RemoteDependency, mode, *, cwd, events) -> str:
        self.fetched.append(name)
        package_hash, files = self.packages[dependency.url]
        make_package_dir(self.storage_root, package_hash, files)
        return package_hash


@pytest.fixture()
def events() -> logging.Logger:
    return logging.getLogger("ebuilder.test")


@pytest.fixture()
def fake_zig():
    """构造 FakeZigExecutor 的工厂"""
    return FakeZigExecutor


@pytest.fixture()
def fake_fetcher():
    return FakeFetcher


@pytest.fixture()
def make_package():
    return make_package_dir
