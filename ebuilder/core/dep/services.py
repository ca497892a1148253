"""已知代码托管服务

职责:
- 主机名 → 服务 映射（大小写不敏感，去掉 "www." 等前缀）
- 规范化定位符的 scheme 与主机（http → https）
- 各服务的归档快照 URL 约定（数据驱动）

新增服务只需在 _SERVICES 中加一行。
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from urllib.parse import SplitResult

from ebuilder.utils.net import locator_host, replace_scheme_and_host


class ResourceType(Enum):
    """资源类型：归档包或 Git 引用"""

    ARCHIVE = "archive"
    GIT_REF = "git_ref"


@dataclass(frozen=True)
class Service:
    """已知托管服务

    base_url: 不带结尾斜杠，已去掉 "www." 前缀，优先 https
    archive_template: 归档快照路径模板，None 表示该服务不支持 Git commit 依赖
    """

    name: str
    host: str
    archive_template: str | None
    mirror: bool = False

    @property
    def base_url(self) -> str:
        return f"https://{self.host}"

    def scheme_for(self, resource_type: ResourceType) -> str:
        if resource_type is ResourceType.GIT_REF:
            return "git+https"
        return "https"

    def archive_url(self, repository: str, commit: str) -> str | None:
        if self.archive_template is None:
            return None
        return self.base_url + self.archive_template.format(repo=repository, commit=commit)


_FORGE_ARCHIVE = "/{repo}/archive/{commit}.tar.gz"
# TODO: GitLab 同样提供 .tar.bz2，待 zig fetch 支持后切换
_GITLAB_ARCHIVE = "/{repo}/-/archive/{commit}.tar.gz"

CODEBERG = Service("codeberg", "codeberg.org", _FORGE_ARCHIVE)
GITHUB = Service("github", "github.com", _FORGE_ARCHIVE)
GITLAB = Service("gitlab", "gitlab.com", _GITLAB_ARCHIVE)
# Hexops 镜像（Zig 发行版与 Mach 项目），只有归档，没有快照约定
MACH = Service("mach", "pkg.machengine.org", None, mirror=True)
SOURCEHUT = Service("sourcehut", "git.sr.ht", _FORGE_ARCHIVE)

_SERVICES: dict[str, Service] = {
    "codeberg.org": CODEBERG,
    "www.codeberg.org": CODEBERG,
    "github.com": GITHUB,
    "www.github.com": GITHUB,
    "gitlab.com": GITLAB,
    "www.gitlab.com": GITLAB,
    # 截至 2024 年没有 "www." 变体
    "pkg.machengine.org": MACH,
    "git.sr.ht": SOURCEHUT,
}


def service_for_host(host: str | None) -> Service | None:
    """按主机名查找服务，未知主机返回 None"""
    if not host:
        return None
    return _SERVICES.get(host.lower())


def is_preferred_mirror(host: str | None) -> bool:
    service = service_for_host(host)
    return service is not None and service.mirror


def canonicalize(parts: SplitResult, resource_type: ResourceType) -> SplitResult:
    """已知服务: 升级 scheme、规范化主机；未知主机原样返回（幂等）"""
    service = service_for_host(locator_host(parts))
    if service is None:
        return parts
    return replace_scheme_and_host(parts, service.scheme_for(resource_type), service.host)
