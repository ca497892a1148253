"""zig-ebuilder - 为 Zig 项目生成发行版打包描述（Gentoo ebuild）"""

__version__ = "0.1.0"
