"""Reading JavaScript object literals without evaluating them.

Two levels are provided:

* ``object_entries`` splits an object literal into its top-level
  ``key -> raw value text`` pairs. It is tolerant: anything it cannot
  make sense of is skipped, and a missing closing brace just ends the
  literal.
* ``parse_literal`` parses a constant value strictly: JSON extended
  with single and back-quoted strings, unquoted keys, hex numbers and
  ``undefined``. Trailing commas, identifiers and expressions are
  rejected with LiteralError.

Brackets are matched by depth counting that skips over strings and
comments, so nested blocks and braces inside string values are carved
out correctly.
"""

import re
from typing import Any

MAX_DEPTH = 64

_NUMBER_RE = re.compile(r"-?(?:0[xX][0-9a-fA-F]+|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_IDENT_RE = re.compile(r"[A-Za-z_$][\w$]*")
_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "v": "\v", "0": "\0"}
_KEYWORDS = {"true": True, "false": False, "null": None, "undefined": None}
_OPENERS = {"(": ")", "[": "]", "{": "}"}


class LiteralError(ValueError):
    """The text is not a constant literal."""


class _Reader:
    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def fail(self, message: str):
        raise LiteralError(f"{message} at offset {self.pos}")

    def peek(self) -> str:
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def skip_ws(self) -> None:
        text = self.text
        while self.pos < len(text):
            if text[self.pos].isspace():
                self.pos += 1
            elif text.startswith("//", self.pos):
                end = text.find("\n", self.pos)
                self.pos = len(text) if end == -1 else end
            elif text.startswith("/*", self.pos):
                end = text.find("*/", self.pos + 2)
                self.pos = len(text) if end == -1 else end + 2
            else:
                break

    def skip_string(self) -> None:
        quote = self.text[self.pos]
        self.pos += 1
        while self.pos < len(self.text):
            c = self.text[self.pos]
            if c == "\\":
                self.pos += 2
                continue
            self.pos += 1
            if c == quote:
                return

    def scan_to(self, stops: str) -> int:
        """Advance to the next stop character outside brackets and strings."""
        depth = 0
        text = self.text
        while self.pos < len(text):
            c = text[self.pos]
            if c in "'\"`":
                self.skip_string()
                continue
            if text.startswith("//", self.pos) or text.startswith("/*", self.pos):
                self.skip_ws()
                continue
            if c in _OPENERS:
                depth += 1
            elif c in ")]}":
                if depth == 0:
                    return self.pos
                depth -= 1
            elif depth == 0 and c in stops:
                return self.pos
            self.pos += 1
        return self.pos

    # -- strict values -----------------------------------------------------

    def value(self, depth: int) -> Any:
        if depth > MAX_DEPTH:
            self.fail("literal nested too deeply")
        self.skip_ws()
        c = self.peek()
        if not c:
            self.fail("unexpected end of literal")
        if c == "{":
            return self.object(depth)
        if c == "[":
            return self.array(depth)
        if c in "'\"`":
            return self.string()
        m = _NUMBER_RE.match(self.text, self.pos)
        if m:
            self.pos = m.end()
            return _number(m.group())
        m = _IDENT_RE.match(self.text, self.pos)
        if m and m.group() in _KEYWORDS:
            self.pos = m.end()
            return _KEYWORDS[m.group()]
        self.fail("expected a literal value")

    def object(self, depth: int) -> dict:
        result: dict = {}
        self.pos += 1
        self.skip_ws()
        if self.peek() == "}":
            self.pos += 1
            return result
        while True:
            self.skip_ws()
            key = self.key()
            self.skip_ws()
            if self.peek() != ":":
                self.fail("expected ':'")
            self.pos += 1
            result[key] = self.value(depth + 1)
            self.skip_ws()
            c = self.peek()
            self.pos += 1
            if c == "}":
                return result
            if c != ",":
                self.fail("expected ',' or '}'")

    def array(self, depth: int) -> list:
        result = []
        self.pos += 1
        self.skip_ws()
        if self.peek() == "]":
            self.pos += 1
            return result
        while True:
            result.append(self.value(depth + 1))
            self.skip_ws()
            c = self.peek()
            self.pos += 1
            if c == "]":
                return result
            if c != ",":
                self.fail("expected ',' or ']'")

    def key(self) -> str | None:
        c = self.peek()
        if c and c in "'\"":
            return self.string()
        m = _IDENT_RE.match(self.text, self.pos) or _NUMBER_RE.match(self.text, self.pos)
        if not m:
            self.fail("expected a property name")
        self.pos = m.end()
        return m.group()

    def string(self) -> str:
        quote = self.text[self.pos]
        self.pos += 1
        chars = []
        while self.pos < len(self.text):
            c = self.text[self.pos]
            if c == quote:
                self.pos += 1
                return "".join(chars)
            if c == "\\":
                chars.append(self._escape())
                continue
            if quote == "`" and self.text.startswith("${", self.pos):
                self.fail("template literal with substitutions")
            if c == "\n" and quote != "`":
                break
            chars.append(c)
            self.pos += 1
        self.fail("unterminated string")

    def _escape(self) -> str:
        nxt = self.text[self.pos + 1:self.pos + 2]
        if nxt in ("u", "x"):
            width = 4 if nxt == "u" else 2
            digits = self.text[self.pos + 2:self.pos + 2 + width]
            if len(digits) == width and all(d in "0123456789abcdefABCDEF" for d in digits):
                self.pos += 2 + width
                return chr(int(digits, 16))
        self.pos += 2
        return _ESCAPES.get(nxt, nxt)


def _number(text: str) -> int | float:
    body = text.lstrip("-")
    sign = -1 if text.startswith("-") else 1
    if body[:2].lower() == "0x":
        return sign * int(body, 16)
    if any(c in body for c in ".eE"):
        return float(text)
    return int(text)


def parse_literal(text: str) -> Any:
    """Parse a constant literal, raising LiteralError on anything else."""
    reader = _Reader(text)
    result = reader.value(0)
    reader.skip_ws()
    if reader.pos != len(text):
        reader.fail("unexpected trailing text")
    return result


def object_entries(text: str | None) -> dict[str, str] | None:
    """Split an object literal into top-level ``key -> raw value`` pairs.

    Returns None when the text is not an object literal. Shorthand
    properties, spreads and methods are skipped; keys keep their
    first-seen order.
    """
    if text is None:
        return None
    reader = _Reader(text)
    reader.skip_ws()
    if reader.peek() != "{":
        return None
    reader.pos += 1
    entries: dict[str, str] = {}
    while True:
        reader.skip_ws()
        c = reader.peek()
        if c in ("}", ""):
            break
        try:
            key = reader.key()
        except LiteralError:
            key = None
        reader.skip_ws()
        if key is not None and reader.peek() == ":":
            reader.pos += 1
            start = reader.pos
            end = reader.scan_to(",")
            entries[key] = text[start:end].strip()
        else:
            reader.scan_to(",")
        if reader.peek() != ",":
            break
        reader.pos += 1
    return entries


def is_object_literal(text: str | None) -> bool:
    return bool(text) and text.lstrip().startswith("{")


def strip_quotes(text: str) -> str:
    """Remove one layer of matching surrounding quotes."""
    text = text.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "'\"`":
        return text[1:-1]
    return text
