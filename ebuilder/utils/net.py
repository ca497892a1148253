"""网络工具: 资源定位符（URI）拆分与重组"""

from __future__ import annotations

from urllib.parse import SplitResult, urlsplit, urlunsplit

from ebuilder.core.exceptions import InvalidLocatorError


def split_locator(locator: str) -> SplitResult:
    """拆分定位符，必须带 scheme

    Raises:
        InvalidLocatorError: 无法解析或缺少 scheme
    """
    try:
        parts = urlsplit(locator.strip())
    except ValueError as e:
        raise InvalidLocatorError(f"无效的 URI: \"{locator}\": {e}") from e
    if not parts.scheme:
        raise InvalidLocatorError(f"无效的 URI（缺少 scheme）: \"{locator}\"")
    return parts


def locator_host(parts: SplitResult) -> str | None:
    """返回小写主机名，无主机时返回 None"""
    return parts.hostname or None


def replace_scheme_and_host(parts: SplitResult, scheme: str, host: str) -> SplitResult:
    """替换 scheme 与主机名，保留 userinfo 和端口"""
    userinfo, at, hostport = parts.netloc.rpartition("@")
    port = ""
    if not hostport.endswith("]"):
        _, colon, maybe_port = hostport.rpartition(":")
        if colon and maybe_port.isdigit():
            port = f":{maybe_port}"
    netloc = f"{userinfo}{at}{host}{port}"
    return parts._replace(scheme=scheme, netloc=netloc)


def render_locator(parts: SplitResult) -> str:
    return urlunsplit(parts)
