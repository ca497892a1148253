"""二次归档打包测试"""

from __future__ import annotations

import io
import tarfile

import pytest

from ebuilder.core.dep.models import Package
from ebuilder.core.dep.packer import (
    FIXED_MTIME,
    GIT_COMMIT_TARBALLS_DIR,
    pack_directory,
    pack_git_commits,
    secondary_archive_name,
    write_git_commits_archive,
)
from ebuilder.core.dep.store import PackageStore


@pytest.fixture()
def store(tmp_path, make_package):
    root = tmp_path / "deps"
    make_package(root, "1220aaaa", {"build.zig": "// a", "src/a.zig": "pub fn a() void {}"})
    make_package(root, "1220bbbb", {"b.zig": "// b"})
    return PackageStore(root)


@pytest.fixture()
def packages(events):
    return [
        Package.from_locator("a", "1220aaaa", "git+https://example.org/a#c1", events),
        Package.from_locator("b", "1220bbbb", "https://example.org/b.tar.gz", events),
    ]


class TestPackDirectory:
    def test_entries_normalized(self, store):
        data = pack_directory(store.package_dir("1220aaaa"))
        with tarfile.open(fileobj=io.BytesIO(data), mode="r:gz") as tar:
            assert tar.getnames() == ["build.zig", "src", "src/a.zig"]
            for info in tar.getmembers():
                assert info.mtime == FIXED_MTIME
                assert info.uid == 0 and info.gid == 0

    def test_deterministic(self, store):
        directory = store.package_dir("1220aaaa")
        assert pack_directory(directory) == pack_directory(directory)


class TestPackGitCommits:
    def test_only_git_refs(self, store, packages, events):
        out = io.BytesIO()
        members = pack_git_commits(packages, store, out, new_hash_format=False, events=events)
        assert members == ["a-1220aaaa.tar.gz"]
        with tarfile.open(fileobj=io.BytesIO(out.getvalue()), mode="r:gz") as tar:
            assert tar.getnames() == ["a-1220aaaa.tar.gz"]

    def test_deterministic(self, store, packages, events):
        first, second = io.BytesIO(), io.BytesIO()
        pack_git_commits(packages, store, first, new_hash_format=True, events=events)
        pack_git_commits(packages, store, second, new_hash_format=True, events=events)
        assert first.getvalue() == second.getvalue()

    def test_missing_directory(self, tmp_path, events):
        p = Package.from_locator("a", "1220ffff", "git+https://example.org/a#c1", events)
        with pytest.raises(FileNotFoundError):
            pack_git_commits([p], PackageStore(tmp_path), io.BytesIO(),
                             new_hash_format=True, events=events)


def test_write_git_commits_archive(tmp_path, store, packages, events):
    target = write_git_commits_archive(
        packages, store, tmp_path / "cache",
        project_name="app", project_version="1.0.0",
        new_hash_format=True, events=events,
    )
    assert target == tmp_path / "cache" / GIT_COMMIT_TARBALLS_DIR / secondary_archive_name("app", "1.0.0")
    assert target.name == "app-1.0.0-git_dependencies.tar.gz"
    with tarfile.open(target, mode="r:gz") as tar:
        assert tar.getnames() == ["1220aaaa.tar.gz"]
