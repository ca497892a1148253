"""CLI 命令测试（CliRunner + 假 zig 执行器）"""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from ebuilder.cli import main
from ebuilder.utils.logger import reset_logging
from ebuilder.utils.shell import get_executor, set_executor

ROOT_ZON = """.{
    .name = .app,
    .version = "1.0.0",
    .dependencies = .{
        .x = .{ .url = "https://github.com/u/x/archive/v1.tar.gz", .hash = "x-1.0.0-AAAA" },
    },
}
"""

PACKAGES = {
    "https://github.com/u/x/archive/v1.tar.gz": ("x-1.0.0-AAAA", {"x.zig": ""}),
}


@pytest.fixture()
def zig(fake_zig):
    original = get_executor()
    executor = fake_zig(packages=PACKAGES)
    set_executor(executor)
    yield executor
    set_executor(original)
    reset_logging()


@pytest.fixture()
def project(tmp_path):
    root = tmp_path / "project"
    root.mkdir()
    (root / "build.zig").write_text("", encoding="utf-8")
    (root / "build.zig.zon").write_text(ROOT_ZON, encoding="utf-8")
    return root


@pytest.fixture()
def config_file(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text(f"cache_dir: {tmp_path / 'cache'}\n", encoding="utf-8")
    return path


def _invoke(config_file, *args):
    return CliRunner().invoke(
        main, ["--log-level", "ERROR", "--config", str(config_file), *args],
    )


class TestGenerate:
    def test_stdout(self, zig, project, config_file):
        result = _invoke(config_file, "generate", str(project))
        assert result.exit_code == 0, result.output
        assert "EAPI=8" in result.output
        assert "[x-1.0.0-AAAA.tar.gz]" in result.output

    def test_output_file(self, zig, project, config_file, tmp_path):
        out = tmp_path / "app-1.0.0.ebuild"
        result = _invoke(config_file, "generate", str(project), "--output", str(out))
        assert result.exit_code == 0, result.output
        assert "inherit zig" in out.read_text(encoding="utf-8")

    def test_fetch_none(self, zig, project, config_file):
        result = _invoke(config_file, "generate", str(project), "--fetch", "none")
        assert result.exit_code == 0, result.output
        assert zig.fetched_urls == []

    def test_zig_option(self, zig, project, config_file):
        result = _invoke(config_file, "generate", str(project), "--zig", "/opt/zig/zig")
        assert result.exit_code == 0, result.output
        assert zig.calls[0] == ["/opt/zig/zig", "version"]

    def test_build_args_without_path(self, zig, project, tmp_path, monkeypatch):
        config = tmp_path / "runner.yml"
        config.write_text(
            f"cache_dir: {tmp_path / 'cache'}\nbuild_runner: {tmp_path / 'runner.zig'}\n",
            encoding="utf-8",
        )
        monkeypatch.chdir(project)
        result = _invoke(
            config, "generate", "--fetch", "none",
            "--zig-build-args=-Dfoo=bar", "--zig-build-args", "-Doptimize=ReleaseSafe",
        )
        assert result.exit_code == 0, result.output
        build = [c for c in zig.calls if c[1] == "build"]
        assert build[0][-2:] == ["-Dfoo=bar", "-Doptimize=ReleaseSafe"]

    def test_missing_project(self, zig, config_file, tmp_path):
        result = _invoke(config_file, "generate", str(tmp_path / "nope"))
        assert result.exit_code == 1
        assert "[PROJECT_NOT_FOUND]" in result.output

    def test_fetch_failure(self, zig, project, config_file):
        zig.failures["https://github.com/u/x/archive/v1.tar.gz"] = "error: 404"
        result = _invoke(config_file, "generate", str(project))
        assert result.exit_code == 1
        assert "[FETCH_FAILED]" in result.output
        assert "error: 404" in result.output


class TestDeps:
    def test_table(self, zig, project, config_file):
        result = _invoke(config_file, "deps", str(project))
        assert result.exit_code == 0, result.output
        assert "x-1.0.0-AAAA" in result.output
        assert "Git commit: 0" in result.output

    def test_json(self, zig, project, config_file):
        result = _invoke(config_file, "deps", str(project), "--json")
        assert result.exit_code == 0, result.output
        assert '"hash": "x-1.0.0-AAAA"' in result.output
        assert '"kind": "archive"' in result.output


def test_invalid_config(tmp_path, zig):
    path = tmp_path / "bad.yml"
    path.write_text("fetch_mode: sometimes\n", encoding="utf-8")
    result = CliRunner().invoke(main, ["--config", str(path), "deps"])
    assert result.exit_code == 1
    assert "[CONFIG_ERROR]" in result.output


def test_version():
    result = CliRunner().invoke(main, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output


@pytest.mark.parametrize("content", ["compression_level: high\n", "fetch_timeout: soon\n"])
def test_mistyped_config_value(tmp_path, zig, content):
    path = tmp_path / "bad.yml"
    path.write_text(content, encoding="utf-8")
    result = CliRunner().invoke(main, ["--config", str(path), "deps"])
    assert result.exit_code == 1
    assert "[CONFIG_ERROR]" in result.output
