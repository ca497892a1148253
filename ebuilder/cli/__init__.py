"""zig-ebuilder 命令行接口

CLI 按领域拆分为子模块，每个模块注册自己的命令到 main group。
"""

from __future__ import annotations

import click

from ebuilder import __version__
from ebuilder.cli.errors import run_or_exit
from ebuilder.core.config import DEFAULT_CONFIG_PATH, init_config
from ebuilder.utils.logger import setup_logging

_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--log-level", envvar="EBUILDER_LOG_LEVEL", default="INFO",
    type=click.Choice(_LOG_LEVELS, case_sensitive=False), help="最低日志级别",
)
@click.option("--log-json", envvar="EBUILDER_LOG_JSON", is_flag=True, help="以 JSON 格式输出日志")
@click.option("--config", "-c", "config_path", default=DEFAULT_CONFIG_PATH, help="配置文件路径")
def main(log_level: str, log_json: bool, config_path: str) -> None:
    """zig-ebuilder - Zig 项目的发行版打包描述生成器"""
    setup_logging(level=log_level, json_output=log_json)
    run_or_exit(lambda: init_config(config_path))


# 注册各领域子命令
from ebuilder.cli.cmd_generate import register as _reg_generate  # noqa: E402
from ebuilder.cli.cmd_deps import register as _reg_deps  # noqa: E402

_reg_generate(main)
_reg_deps(main)
