"""CLI 错误输出"""

from __future__ import annotations

from collections.abc import Callable
from typing import IO, TypeVar

import click

from ebuilder.core.exceptions import EbuilderError

T = TypeVar("T")


class CliError(click.ClickException):
    """致命错误: 输出 "错误 [code]: message" 并以非零状态退出"""

    def __init__(self, message: str, code: str = "UNKNOWN") -> None:
        super().__init__(message)
        self.code = code

    def show(self, file: IO[str] | None = None) -> None:
        click.echo(f"错误 [{self.code}]: {self.format_message()}", err=True, file=file)


def run_or_exit(fn: Callable[[], T]) -> T:
    try:
        return fn()
    except EbuilderError as e:
        raise CliError(str(e), e.code) from e
    except OSError as e:
        raise CliError(str(e), "IO_ERROR") from e
