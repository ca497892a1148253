"""ZON（Zig Object Notation）解析器

只覆盖 build.zig.zon 用到的子集:
- 匿名结构体 / 元组: .{ .field = value, ... } / .{ value, ... }
- 字段名: .name 或 .@"quoted name"
- 字符串（含 Zig 转义）与多行字符串（\\ 开头的行）
- 枚举字面量 .name（解析为 str）
- 整数（十/十六/八/二进制，允许下划线）、浮点、字符字面量
- true / false / null
- // 行注释、结尾逗号

结构体解析为 dict，元组解析为 list，空的 .{} 解析为空 dict。
"""

from __future__ import annotations

import re
from typing import Any

from ebuilder.core.exceptions import ManifestError

_IDENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_NUMBER_RE = re.compile(
    r"0x[0-9a-fA-F_]+|0o[0-7_]+|0b[01_]+"
    r"|[0-9][0-9_]*(?:\.[0-9_]+)?(?:[eE][+-]?[0-9]+)?"
)
_SIMPLE_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", "\\": "\\", "'": "'", '"': '"'}


class _Parser:
    def __init__(self, text: str, source: str) -> None:
        self.text = text
        self.source = source
        self.pos = 0

    # ---- 位置 / 错误 ----

    def error(self, message: str) -> ManifestError:
        line = self.text.count("\n", 0, self.pos) + 1
        column = self.pos - (self.text.rfind("\n", 0, self.pos) + 1) + 1
        return ManifestError(f"{self.source}:{line}:{column}: {message}")

    def skip_trivia(self) -> None:
        while self.pos < len(self.text):
            ch = self.text[self.pos]
            if ch in " \t\r\n":
                self.pos += 1
            elif self.text.startswith("//", self.pos):
                end = self.text.find("\n", self.pos)
                self.pos = len(self.text) if end == -1 else end + 1
            else:
                break

    def peek(self, token: str) -> bool:
        self.skip_trivia()
        return self.text.startswith(token, self.pos)

    def expect(self, token: str) -> None:
        if not self.peek(token):
            raise self.error(f"期望 '{token}'")
        self.pos += len(token)

    # ---- 值 ----

    def parse_document(self) -> Any:
        value = self.parse_value()
        self.skip_trivia()
        if self.pos != len(self.text):
            raise self.error("文档结尾存在多余内容")
        return value

    def parse_value(self) -> Any:
        self.skip_trivia()
        if self.pos >= len(self.text):
            raise self.error("意外的文件结尾")
        ch = self.text[self.pos]

        if self.text.startswith(".{", self.pos):
            return self.parse_init()
        if ch == ".":
            self.pos += 1
            return self.parse_identifier()
        if ch == '"':
            return self.parse_string()
        if self.text.startswith("\\\\", self.pos):
            return self.parse_multiline_string()
        if ch == "'":
            return self.parse_char()
        if ch == "-" or ch.isdigit():
            return self.parse_number()

        m = _IDENT_RE.match(self.text, self.pos)
        if m:
            word = m.group(0)
            keywords = {"true": True, "false": False, "null": None}
            if word in keywords:
                self.pos = m.end()
                return keywords[word]
        raise self.error(f"无法识别的值: {self.text[self.pos:self.pos + 16]!r}")

    def parse_init(self) -> dict[str, Any] | list[Any]:
        self.expect(".{")
        if self.peek("}"):
            self.pos += 1
            return {}

        # ".name =" 或 '.@"name" =' 开头的是结构体，否则是元组
        save = self.pos
        is_struct = False
        if self.peek(".") and not self.text.startswith(".{", self.pos):
            self.pos += 1
            try:
                self.parse_identifier()
                is_struct = self.peek("=") and not self.peek("==")
            except ManifestError:
                is_struct = False
        self.pos = save

        if is_struct:
            fields: dict[str, Any] = {}
            while not self.peek("}"):
                self.expect(".")
                name = self.parse_identifier()
                if name in fields:
                    raise self.error(f"重复的字段: {name}")
                self.expect("=")
                fields[name] = self.parse_value()
                if not self.peek(","):
                    break
                self.pos += 1
            self.expect("}")
            return fields

        items: list[Any] = []
        while not self.peek("}"):
            items.append(self.parse_value())
            if not self.peek(","):
                break
            self.pos += 1
        self.expect("}")
        return items

    def parse_identifier(self) -> str:
        if self.text.startswith('@"', self.pos):
            self.pos += 1
            return self.parse_string()
        m = _IDENT_RE.match(self.text, self.pos)
        if not m:
            raise self.error("期望标识符")
        self.pos = m.end()
        return m.group(0)

    def parse_string(self) -> str:
        self.pos += 1  # 开头的 "
        out: list[str] = []
        while True:
            if self.pos >= len(self.text) or self.text[self.pos] == "\n":
                raise self.error("字符串未闭合")
            ch = self.text[self.pos]
            if ch == '"':
                self.pos += 1
                return "".join(out)
            if ch == "\\":
                out.append(self.parse_escape())
            else:
                out.append(ch)
                self.pos += 1

    def parse_escape(self) -> str:
        self.pos += 1  # 反斜杠
        if self.pos >= len(self.text):
            raise self.error("转义序列不完整")
        ch = self.text[self.pos]
        if ch in _SIMPLE_ESCAPES:
            self.pos += 1
            return _SIMPLE_ESCAPES[ch]
        if ch == "x":
            digits = self.text[self.pos + 1:self.pos + 3]
            if not re.fullmatch(r"[0-9a-fA-F]{2}", digits):
                raise self.error("无效的 \\x 转义")
            self.pos += 3
            return chr(int(digits, 16))
        if ch == "u" and self.text.startswith("u{", self.pos):
            end = self.text.find("}", self.pos)
            digits = self.text[self.pos + 2:end] if end != -1 else ""
            if not re.fullmatch(r"[0-9a-fA-F]{1,6}", digits):
                raise self.error("无效的 \\u{} 转义")
            self.pos = end + 1
            return chr(int(digits, 16))
        raise self.error(f"未知的转义序列: \\{ch}")

    def parse_multiline_string(self) -> str:
        lines: list[str] = []
        while self.peek("\\\\"):
            self.pos += 2
            end = self.text.find("\n", self.pos)
            end = len(self.text) if end == -1 else end
            lines.append(self.text[self.pos:end].rstrip("\r"))
            self.pos = end
        return "\n".join(lines)

    def parse_char(self) -> int:
        self.pos += 1
        if self.pos >= len(self.text):
            raise self.error("字符字面量不完整")
        if self.text[self.pos] == "\\":
            value = self.parse_escape()
        else:
            value = self.text[self.pos]
            self.pos += 1
        self.expect("'")
        return ord(value)

    def parse_number(self) -> int | float:
        negative = self.text[self.pos] == "-"
        if negative:
            self.pos += 1
        m = _NUMBER_RE.match(self.text, self.pos)
        if not m:
            raise self.error("无效的数字")
        self.pos = m.end()
        raw = m.group(0).replace("_", "")
        if raw[:2] in ("0x", "0o", "0b"):
            value: int | float = int(raw, 0)
        elif "." in raw or "e" in raw.lower():
            value = float(raw)
        else:
            value = int(raw)
        return -value if negative else value


def loads(text: str, source: str = "<zon>") -> Any:
    """解析 ZON 文本

    Raises:
        ManifestError: 语法错误（含行列号）
    """
    return _Parser(text, source).parse_document()
