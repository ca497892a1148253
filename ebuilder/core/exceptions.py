"""统一异常体系

所有业务异常继承 EbuilderError，替代散落的 ValueError / RuntimeError。
CLI 层据此输出 "[code] message" 并以非零状态退出。

致命错误（定位符无效、拉取失败、清单错误）一律向上传播，
解析过程不做部分恢复，也不会输出残缺的 ebuild。
"""

from __future__ import annotations


class EbuilderError(Exception):
    """基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(EbuilderError):
    """配置文件无效或缓存目录不可用"""

    code = "CONFIG_ERROR"


class InvalidLocatorError(EbuilderError):
    """定位符无法解析、scheme 未知、归档格式未知或缺少 commit"""

    code = "INVALID_LOCATOR"


class FetchError(EbuilderError):
    """外部拉取工具报告错误，details 保留其原始输出"""

    code = "FETCH_FAILED"

    def __init__(self, dependency: str, details: str) -> None:
        super().__init__(f"拉取依赖 \"{dependency}\" 失败:\n{details.rstrip()}")
        self.dependency = dependency
        self.details = details


class ManifestError(EbuilderError):
    """build.zig.zon 语法或结构错误"""

    code = "MANIFEST_ERROR"


class ProjectNotFoundError(EbuilderError):
    """找不到 build.zig"""

    code = "PROJECT_NOT_FOUND"


class ZigProcessError(EbuilderError):
    """zig 可执行文件调用失败"""

    code = "ZIG_PROCESS_ERROR"


class RecipeError(EbuilderError):
    """打包描述（recipe）格式不支持"""

    code = "RECIPE_ERROR"
