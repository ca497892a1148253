"""Git commit → 归档 转换

已知托管服务提供按 commit 下载快照的固定 URL，
例如 GitHub: https://github.com/<user>/<repo>/archive/<commit>.tar.gz。
能转换的 Git 引用原地改为 Archive(tar.gz)，其余保持不变并告警，
最终交给二次归档打包。
"""

from __future__ import annotations

import logging

from ebuilder.core.dep.models import Archive, ArchiveFormat, GitRef, Package
from ebuilder.core.dep.services import service_for_host
from ebuilder.core.exceptions import InvalidLocatorError
from ebuilder.utils.net import split_locator


def repository_path(path: str) -> str:
    """/user/repo.git → user/repo"""
    repository = path.lstrip("/")
    if repository.endswith(".git"):
        repository = repository[: -len(".git")]
    return repository


def transform_git_commit_to_archive(package: Package, events: logging.Logger) -> bool:
    """原地把 GitRef 包改写为归档包，成功返回 True

    服务未知或服务不支持快照时返回 False（非致命，仅告警）。
    """
    if not isinstance(package.kind, GitRef):
        raise ValueError(f"只能转换 Git 引用包: {package.locator}")
    commit = package.kind.commit

    host = package.host
    if host is None:
        events.error("无效的 Git URI: %s", package.locator)
        raise InvalidLocatorError(f"无效的 Git URI（缺少主机名）: {package.locator}")

    service = service_for_host(host)
    if service is None:
        events.warning("请将以下警告报告给 zig-ebuilder 上游:")
        events.warning("未知的托管服务: %s (来自 URL %s)", host, package.locator)
        return False

    archive_url = service.archive_url(repository_path(package.path), commit)
    if archive_url is None:
        events.warning("请将以下警告报告给 zig-ebuilder 上游:")
        events.warning(
            "服务 %s 不支持 Git commit 依赖 (来自 URL %s)", service.base_url, package.locator,
        )
        return False

    try:
        split_locator(archive_url)
    except InvalidLocatorError:
        events.error("转换后的归档 URI 无效: \"%s\"", archive_url)
        raise

    events.debug("Git commit 已转换为归档: %s -> %s", package.locator, archive_url)
    package.locator = archive_url
    package.kind = Archive(ArchiveFormat.TAR_GZ)
    return True
