"""重复包合并策略与最终排序

同一内容哈希可能以不同定位符出现在多个清单中（镜像、http/https、
tarball/Git 等），合并时按以下顺序决定保留哪一个:

  1. 定位符完全相同 → 保留已有记录（名称不一致只告警）
  2. 恰好一方托管在首选镜像（Hexops）上 → 保留镜像
  3. 一方为归档、一方为 Git 引用 → 保留归档
  4. 其余情况无法判断 → 返回 None，由调用方按 fallback 策略处理

情况 1-3 与发现顺序无关；情况 4 依赖顺序。
"""

from __future__ import annotations

import logging

from ebuilder.core.dep.models import Package
from ebuilder.core.dep.services import is_preferred_mirror
from ebuilder.core.exceptions import InvalidLocatorError

MERGE_FALLBACK_INCOMING = "incoming"
MERGE_FALLBACK_EXISTING = "existing"


def choose_best(existing: Package, incoming: Package, events: logging.Logger) -> Package | None:
    """在两个同哈希的包之间选择更合适的一个，无法判断时返回 None"""
    if existing.hash != incoming.hash:
        raise ValueError(
            f"只能合并相同哈希的包: {existing.hash} != {incoming.hash}"
        )

    # pristine 包的名称取决于使用方清单，同 URL 不同名是正常的
    if existing.locator == incoming.locator:
        if (
            existing.name is not None
            and incoming.name is not None
            and existing.name != incoming.name
        ):
            events.warning("发现名称不同的重复包: %s，保留原有名称 %s", incoming.name, existing.name)
        return existing

    existing_host, incoming_host = existing.host, incoming.host
    if existing_host is None or incoming_host is None:
        raise InvalidLocatorError(
            f"定位符缺少主机名: {existing.locator if existing_host is None else incoming.locator}"
        )

    existing_mirror = is_preferred_mirror(existing_host)
    incoming_mirror = is_preferred_mirror(incoming_host)
    if existing_mirror and not incoming_mirror:
        return existing
    if incoming_mirror and not existing_mirror:
        events.warning(
            "重复包中发现更合适的镜像: %s 替代 %s，已替换", incoming_host, existing_host,
        )
        return incoming

    if not existing.is_git_ref and incoming.is_git_ref:
        return existing
    if existing.is_git_ref and not incoming.is_git_ref:
        events.warning("重复包中发现更合适的格式: 归档替代 Git commit，已替换")
        return incoming

    return None


def merge_into(
    packages: dict[str, Package],
    incoming: Package,
    events: logging.Logger,
    fallback: str = MERGE_FALLBACK_INCOMING,
) -> Package:
    """将新包并入以哈希为键的集合，返回保留下来的记录"""
    existing = packages.get(incoming.hash)
    if existing is None:
        packages[incoming.hash] = incoming
        return incoming

    chosen = choose_best(existing, incoming, events)
    if chosen is None:
        events.warning("请将以下警告报告给 zig-ebuilder 上游:")
        if fallback == MERGE_FALLBACK_EXISTING:
            events.warning("发现无法取舍的重复包 (%s)，保留原有记录", incoming.hash)
            chosen = existing
        else:
            events.warning("发现无法取舍的重复包 (%s)，替换为新记录", incoming.hash)
            chosen = incoming

    packages[incoming.hash] = chosen
    return chosen


def sort_packages(packages: list[Package]) -> list[Package]:
    """排序: 有名称的按名称字母序在前，pristine 包在后并按哈希排序"""
    return sorted(
        packages,
        key=lambda p: (p.name is None, p.name if p.name is not None else p.hash),
    )
