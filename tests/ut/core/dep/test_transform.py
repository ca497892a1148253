"""Git commit → 归档转换测试"""

from __future__ import annotations

import pytest

from ebuilder.core.dep.models import Archive, ArchiveFormat, GitRef, Package
from ebuilder.core.dep.transform import repository_path, transform_git_commit_to_archive


def test_repository_path():
    assert repository_path("/user/repo.git") == "user/repo"
    assert repository_path("/~user/repo") == "~user/repo"


class TestTransform:
    @pytest.mark.parametrize("locator,expected", [
        ("git+https://github.com/user/repo.git?ref=main#c0ffee",
         "https://github.com/user/repo/archive/c0ffee.tar.gz"),
        ("git+http://www.codeberg.org/user/repo#c0ffee",
         "https://codeberg.org/user/repo/archive/c0ffee.tar.gz"),
        ("git+https://gitlab.com/group/repo.git#c0ffee",
         "https://gitlab.com/group/repo/-/archive/c0ffee.tar.gz"),
        ("git+https://git.sr.ht/~user/repo#c0ffee",
         "https://git.sr.ht/~user/repo/archive/c0ffee.tar.gz"),
    ])
    def test_known_services(self, events, locator, expected):
        p = Package.from_locator("dep", "H", locator, events)
        assert transform_git_commit_to_archive(p, events) is True
        assert p.locator == expected
        assert p.kind == Archive(ArchiveFormat.TAR_GZ)

    def test_unknown_service_unchanged(self, events):
        p = Package.from_locator("dep", "H", "git+https://example.org/u/r#c0ffee", events)
        assert transform_git_commit_to_archive(p, events) is False
        assert p.locator == "git+https://example.org/u/r#c0ffee"
        assert p.kind == GitRef("c0ffee")

    def test_mirror_has_no_snapshot(self, events):
        p = Package.from_locator("dep", "H", "git+https://pkg.machengine.org/u/r#c0ffee", events)
        assert transform_git_commit_to_archive(p, events) is False
        assert p.is_git_ref

    def test_archive_rejected(self, events):
        p = Package.from_locator("dep", "H", "https://github.com/u/r/archive/v1.tar.gz", events)
        with pytest.raises(ValueError):
            transform_git_commit_to_archive(p, events)
