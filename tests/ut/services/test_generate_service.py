"""GenerateService 端到端测试（假 zig 执行器）"""

from __future__ import annotations

import logging
import tarfile

import pytest

from ebuilder.core.config import Config
from ebuilder.core.dep.fetcher import FetchMode
from ebuilder.core.exceptions import FetchError, ProjectNotFoundError, RecipeError
from ebuilder.services.generate_service import GenerateRequest, GenerateService

ROOT_ZON = """.{
    .name = .app,
    .version = "1.0.0",
    .dependencies = .{
        .x = .{ .url = "https://github.com/u/x/archive/v1.tar.gz", .hash = "x-1.0.0-AAAA" },
        .y = .{ .url = "git+https://example.org/u/y.git#c0ffee", .hash = "y-0.1.0-BBBB" },
    },
    .paths = .{""},
}
"""

PACKAGES = {
    "https://github.com/u/x/archive/v1.tar.gz": (
        "x-1.0.0-AAAA", {"build.zig.zon": '.{ .name = .x, .version = "1.0.0" }'},
    ),
    "git+https://example.org/u/y.git#c0ffee": ("y-0.1.0-BBBB", {"y.zig": "// y"}),
}


@pytest.fixture()
def project(tmp_path):
    root = tmp_path / "project"
    root.mkdir()
    (root / "build.zig").write_text("", encoding="utf-8")
    (root / "build.zig.zon").write_text(ROOT_ZON, encoding="utf-8")
    return root


@pytest.fixture()
def config(tmp_path):
    return Config(cache_dir=str(tmp_path / "cache"))


def _service(config, executor):
    return GenerateService(config, executor=executor, environ={})


class TestGenerate:
    def test_full_flow(self, project, config, fake_zig, tmp_path):
        executor = fake_zig(version="0.14.0", packages=PACKAGES)
        result = _service(config, executor).generate(GenerateRequest(project_path=str(project)))

        assert result.git_ref_count == 1
        assert "\t[x-1.0.0-AAAA.tar.gz]='https://github.com/u/x/archive/v1.tar.gz'\n" in result.recipe
        assert 'ZIG_SLOT="0.14"' in result.recipe
        assert "app-1.0.0-git_dependencies.tar.gz" in result.recipe

        archive = result.secondary_archive
        assert archive == tmp_path / "cache" / "git_commit_tarballs" / "app-1.0.0-git_dependencies.tar.gz"
        with tarfile.open(archive, mode="r:gz") as tar:
            assert tar.getnames() == ["y-0.1.0-BBBB.tar.gz"]

        fetch = [c for c in executor.calls if c[1] == "fetch"]
        assert fetch[0][:4] == ["zig", "fetch", "--global-cache-dir", str(tmp_path / "cache" / "deps")]
        assert "--hash" not in fetch[0]

    def test_old_hash_format(self, project, config, fake_zig):
        executor = fake_zig(version="0.13.0", packages=PACKAGES)
        result = _service(config, executor).generate(GenerateRequest(project_path=str(project)))
        assert "[x-x-1.0.0-AAAA.tar.gz]" in result.recipe
        assert 'ZIG_SLOT="0.13"' in result.recipe

    def test_hashed_mode(self, project, config, fake_zig):
        executor = fake_zig(packages=PACKAGES)
        _service(config, executor).generate(
            GenerateRequest(project_path=str(project), fetch_mode=FetchMode.HASHED),
        )
        fetch = [c for c in executor.calls if c[1] == "fetch"]
        assert fetch[0][4:6] == ["--hash", "x-1.0.0-AAAA"]

    def test_fetch_none(self, project, config, fake_zig):
        executor = fake_zig(packages=PACKAGES)
        result = _service(config, executor).generate(
            GenerateRequest(project_path=str(project), fetch_mode=FetchMode.NONE),
        )
        assert result.dependencies.packages == []
        assert result.secondary_archive is None
        assert executor.fetched_urls == []

    def test_without_manifest(self, project, config, fake_zig, caplog):
        (project / "build.zig.zon").unlink()
        with caplog.at_level(logging.WARNING):
            result = _service(config, fake_zig()).generate(GenerateRequest(project_path=str(project)))
        skipped = [r for r in caplog.records if "跳过拉取" in r.getMessage()]
        assert [r.levelno for r in skipped] == [logging.WARNING]
        assert result.dependencies.packages == []
        assert "EAPI=8" in result.recipe

    def test_fetch_failure(self, project, config, fake_zig):
        executor = fake_zig(
            packages=PACKAGES,
            failures={"git+https://example.org/u/y.git#c0ffee": "error: unable to connect"},
        )
        with pytest.raises(FetchError, match="unable to connect"):
            _service(config, executor).generate(GenerateRequest(project_path=str(project)))

    def test_missing_project(self, tmp_path, config, fake_zig):
        with pytest.raises(ProjectNotFoundError):
            _service(config, fake_zig()).generate(GenerateRequest(project_path=str(tmp_path / "nope")))

    def test_unknown_template(self, project, config, fake_zig):
        with pytest.raises(RecipeError):
            _service(config, fake_zig(packages=PACKAGES)).generate(
                GenerateRequest(project_path=str(project), template="nope"),
            )


def test_resolve_only(project, config, fake_zig):
    executor = fake_zig(packages=PACKAGES)
    location, _, deps = _service(config, executor).resolve(GenerateRequest(project_path=str(project)))
    assert location.root == project.absolute()
    assert [p.hash for p in deps.packages] == ["x-1.0.0-AAAA", "y-0.1.0-BBBB"]
    assert not any(c[1] == "version" for c in executor.calls)
