"""Structural reader for TypeScript source files.

Recovers the declarations the extractor needs (imports, classes,
interfaces, their decorators, methods, parameters and properties)
without type-checking or evaluating anything. Decorator arguments and
type annotations are kept as raw source text.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path

from apidoc_extractor.errors import SourceTreeError

_IDENT_RE = re.compile(r"[A-Za-z_$][\w$]*")
_NUMBER_RE = re.compile(r"\d[\w.]*")

_OPENERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = {v: k for k, v in _OPENERS.items()}

# A "/" after one of these starts a regular expression literal, not a division.
_REGEX_PRECEDERS = set("(,=:[!&|?{};+-*%<>~^")
_REGEX_KEYWORDS = {"return", "typeof", "case", "in", "of", "delete", "void", "throw", "new"}

_MEMBER_MODIFIERS = {
    "public", "private", "protected", "static", "readonly", "async",
    "abstract", "override", "declare", "get", "set",
}
_PARAM_MODIFIERS = {"public", "private", "protected", "readonly", "override"}

# A line break ends a property unless the last token continues the expression.
_CONTINUATION = set("|&:<,.=?+-*/([{")


@dataclass
class Token:
    kind: str  # ident / string / number / regex / punct
    text: str
    start: int
    end: int
    line: int


@dataclass
class Decorator:
    """A decorator call site: ``@Name(arg, ...)``."""

    name: str
    arguments: list[str] = field(default_factory=list)
    expression: str = ""

    @property
    def first_argument(self) -> str | None:
        return self.arguments[0] if self.arguments else None


@dataclass
class Parameter:
    name: str
    type_text: str = ""
    optional: bool = False
    decorators: list[Decorator] = field(default_factory=list)


@dataclass
class Property:
    name: str
    type_text: str = ""
    optional: bool = False
    decorators: list[Decorator] = field(default_factory=list)


@dataclass
class Method:
    name: str
    decorators: list[Decorator] = field(default_factory=list)
    parameters: list[Parameter] = field(default_factory=list)
    return_type: str = ""


@dataclass
class Declaration:
    """A class or interface declaration."""

    name: str
    kind: str  # class / interface
    decorators: list[Decorator] = field(default_factory=list)
    methods: list[Method] = field(default_factory=list)
    properties: list[Property] = field(default_factory=list)
    extends: str = ""


@dataclass
class Import:
    """An import (or re-export) statement.

    ``names`` maps the local name to the exported name.
    """

    module: str
    names: dict[str, str] = field(default_factory=dict)
    namespace: str | None = None
    reexport: bool = False
    reexport_all: bool = False


@dataclass
class SourceFile:
    path: Path
    declarations: list[Declaration] = field(default_factory=list)
    imports: list[Import] = field(default_factory=list)

    @property
    def classes(self) -> list[Declaration]:
        return [d for d in self.declarations if d.kind == "class"]

    def get_declaration(self, name: str) -> Declaration | None:
        for decl in self.declarations:
            if decl.name == name:
                return decl
        return None


def tokenize(text: str, path=None) -> list[Token]:
    """Split TypeScript source into tokens, dropping whitespace and comments."""
    tokens: list[Token] = []
    line = 1
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == "\n":
            line += 1
            i += 1
            continue
        if ch.isspace():
            i += 1
            continue
        if text.startswith("//", i):
            j = text.find("\n", i)
            i = n if j == -1 else j
            continue
        if text.startswith("/*", i):
            j = text.find("*/", i + 2)
            if j == -1:
                raise SourceTreeError("unterminated comment", path)
            line += text.count("\n", i, j)
            i = j + 2
            continue
        if ch in "'\"`":
            j = _string_end(text, i, path)
            tokens.append(Token("string", text[i:j], i, j, line))
            line += text.count("\n", i, j)
            i = j
            continue
        if ch == "/" and _regex_allowed(tokens):
            j = _regex_end(text, i, path)
            tokens.append(Token("regex", text[i:j], i, j, line))
            i = j
            continue
        m = _IDENT_RE.match(text, i) or _NUMBER_RE.match(text, i)
        if m:
            kind = "ident" if not ch.isdigit() else "number"
            tokens.append(Token(kind, m.group(), i, m.end(), line))
            i = m.end()
            continue
        tokens.append(Token("punct", ch, i, i + 1, line))
        i += 1
    return tokens


def _string_end(text: str, i: int, path) -> int:
    quote = text[i]
    j = i + 1
    n = len(text)
    while j < n:
        c = text[j]
        if c == "\\":
            j += 2
            continue
        if c == quote:
            return j + 1
        if c == "\n" and quote != "`":
            break
        if quote == "`" and text.startswith("${", j):
            j = _template_expression_end(text, j + 2, path)
            continue
        j += 1
    raise SourceTreeError(f"unterminated string literal at offset {i}", path)


def _template_expression_end(text: str, j: int, path) -> int:
    depth = 1
    n = len(text)
    while j < n:
        c = text[j]
        if c in "'\"`":
            j = _string_end(text, j, path)
            continue
        if c == "{":
            depth += 1
        elif c == "}":
            depth -= 1
            if depth == 0:
                return j + 1
        j += 1
    raise SourceTreeError("unterminated template expression", path)


def _regex_allowed(tokens: list[Token]) -> bool:
    if not tokens:
        return True
    last = tokens[-1]
    if last.kind == "punct":
        return last.text in _REGEX_PRECEDERS
    return last.kind == "ident" and last.text in _REGEX_KEYWORDS


def _regex_end(text: str, i: int, path) -> int:
    j = i + 1
    n = len(text)
    in_class = False
    while j < n:
        c = text[j]
        if c == "\\":
            j += 2
            continue
        if c == "\n":
            break
        if in_class:
            if c == "]":
                in_class = False
        elif c == "[":
            in_class = True
        elif c == "/":
            j += 1
            while j < n and (text[j].isalpha()):
                j += 1
            return j
        j += 1
    raise SourceTreeError(f"unterminated regular expression at offset {i}", path)


class _TreeBuilder:
    """Walks a token list and builds the declarations of one file."""

    def __init__(self, text: str, path: Path):
        self.text = text
        self.path = path
        self.tokens = tokenize(text, path)
        self.match = self._match_brackets()

    def _match_brackets(self) -> dict[int, int]:
        match: dict[int, int] = {}
        stack: list[int] = []
        for idx, tok in enumerate(self.tokens):
            if tok.kind != "punct":
                continue
            if tok.text in _OPENERS:
                stack.append(idx)
            elif tok.text in _CLOSERS:
                if not stack or self.tokens[stack[-1]].text != _CLOSERS[tok.text]:
                    raise SourceTreeError(f"unbalanced '{tok.text}' on line {tok.line}", self.path)
                match[stack.pop()] = idx
        if stack:
            tok = self.tokens[stack[-1]]
            raise SourceTreeError(f"unclosed '{tok.text}' on line {tok.line}", self.path)
        return match

    # -- token helpers -----------------------------------------------------

    def _is(self, i: int, text: str, kind: str | None = None) -> bool:
        if i >= len(self.tokens):
            return False
        tok = self.tokens[i]
        return tok.text == text and (kind is None or tok.kind == kind)

    def _punct(self, i: int, text: str) -> bool:
        return self._is(i, text, "punct")

    def _ident(self, i: int) -> str | None:
        if i < len(self.tokens) and self.tokens[i].kind == "ident":
            return self.tokens[i].text
        return None

    def _slice(self, lo: int, hi: int) -> str:
        """Source text covered by tokens[lo:hi], whitespace collapsed."""
        if lo >= hi:
            return ""
        raw = self.text[self.tokens[lo].start:self.tokens[hi - 1].end]
        return " ".join(raw.split())

    def _raw_slice(self, lo: int, hi: int) -> str:
        if lo >= hi:
            return ""
        return self.text[self.tokens[lo].start:self.tokens[hi - 1].end]

    def _is_arrow(self, i: int) -> bool:
        """True when tokens[i] is the '=' of '=>'."""
        return (
            self._punct(i, "=")
            and self._punct(i + 1, ">")
            and self.tokens[i].end == self.tokens[i + 1].start
        )

    def _split_commas(self, lo: int, hi: int, angles: bool = False) -> list[tuple[int, int]]:
        """Split tokens[lo:hi] on top-level commas."""
        parts = []
        start = lo
        angle = 0
        i = lo
        while i < hi:
            tok = self.tokens[i]
            if tok.kind == "punct":
                if tok.text in _OPENERS:
                    i = self.match[i] + 1
                    continue
                if angles and tok.text == "<":
                    angle += 1
                elif angles and tok.text == ">" and not self._is_arrow(i - 1):
                    angle = max(0, angle - 1)
                elif tok.text == "," and angle == 0:
                    parts.append((start, i))
                    start = i + 1
            i += 1
        if start < hi:
            parts.append((start, hi))
        return parts

    def _collect_type(
        self, i: int, hi: int, stops: str, line_break: bool = False, angles: bool = True
    ) -> tuple[str, int]:
        """Read a type annotation starting at tokens[i] up to a stop token.

        With angles off, `<` and `>` are plain operators, as in an initializer.
        """
        start = i
        angle = 0
        while i < hi:
            tok = self.tokens[i]
            if line_break and i > start and angle == 0:
                prev = self.tokens[i - 1]
                if tok.line > prev.line and prev.text not in _CONTINUATION and tok.text not in "|&.":
                    break
            if tok.kind == "punct":
                if self._is_arrow(i):
                    i += 2
                    continue
                if angle == 0 and tok.text in stops:
                    break
                if tok.text in _OPENERS:
                    i = self.match[i] + 1
                    continue
                if angles and tok.text == "<":
                    angle += 1
                elif angles and tok.text == ">":
                    angle = max(0, angle - 1)
            i += 1
        return self._slice(start, i), i

    # -- declarations ------------------------------------------------------

    def build(self) -> SourceFile:
        source = SourceFile(path=self.path)
        pending: list[Decorator] = []
        i = 0
        n = len(self.tokens)
        while i < n:
            tok = self.tokens[i]
            if tok.kind == "punct" and tok.text == "@":
                dec, i = self._decorator(i)
                pending.append(dec)
                continue
            if tok.kind == "ident" and tok.text == "import" and not (
                self._punct(i + 1, "(") or self._punct(i + 1, ".")
            ):
                imp, i = self._import(i)
                if imp:
                    source.imports.append(imp)
                continue
            if tok.kind == "ident" and tok.text == "export" and (
                self._punct(i + 1, "{") or self._punct(i + 1, "*")
            ):
                imp, i = self._reexport(i)
                if imp:
                    source.imports.append(imp)
                continue
            if tok.kind == "ident" and tok.text in ("class", "interface"):
                decl, i = self._declaration(i, pending)
                if decl:
                    source.declarations.append(decl)
                pending = []
                continue
            if tok.kind == "punct" and tok.text in _OPENERS:
                i = self.match[i] + 1
                pending = []
                continue
            if not (tok.kind == "ident" and tok.text in ("export", "default", "abstract", "declare")):
                pending = []
            i += 1
        return source

    def _decorator(self, i: int) -> tuple[Decorator, int]:
        j = i + 1
        parts = []
        while self._ident(j):
            parts.append(self.tokens[j].text)
            j += 1
            if self._punct(j, ".") and self._ident(j + 1):
                j += 1
                continue
            break
        if not parts:
            return Decorator(name=""), j
        args: list[str] = []
        if self._punct(j, "("):
            close = self.match[j]
            args = [self._raw_slice(a, b) for a, b in self._split_commas(j + 1, close)]
            j = close + 1
        return Decorator(name=parts[-1], arguments=args, expression=".".join(parts)), j

    def _import(self, i: int) -> tuple[Import | None, int]:
        j = i + 1
        n = len(self.tokens)
        if self._is(j, "type", "ident") and not self._is(j + 1, "from", "ident"):
            j += 1
        names: dict[str, str] = {}
        namespace = None
        while j < n and self.tokens[j].kind != "string":
            tok = self.tokens[j]
            if tok.kind == "punct" and tok.text == "{":
                close = self.match[j]
                names.update(self._import_names(j + 1, close))
                j = close + 1
                continue
            if tok.kind == "punct" and tok.text == "*" and self._is(j + 1, "as", "ident"):
                namespace = self._ident(j + 2)
                j += 3
                continue
            if tok.kind == "ident" and tok.text not in ("from", "type") and not names and namespace is None:
                names[tok.text] = "default"
            elif tok.kind == "punct" and tok.text == ";":
                return None, j + 1
            j += 1
        if j >= n:
            return None, j
        module = self.tokens[j].text[1:-1]
        return Import(module=module, names=names, namespace=namespace), j + 1

    def _import_names(self, lo: int, hi: int) -> dict[str, str]:
        names = {}
        for a, b in self._split_commas(lo, hi):
            idents = [t.text for t in self.tokens[a:b] if t.kind == "ident" and t.text != "type"]
            if not idents:
                continue
            if "as" in idents and len(idents) >= 3:
                names[idents[-1]] = idents[0]
            else:
                names[idents[0]] = idents[0]
        return names

    def _reexport(self, i: int) -> tuple[Import | None, int]:
        j = i + 1
        names: dict[str, str] = {}
        reexport_all = False
        if self._punct(j, "*"):
            reexport_all = True
            j += 1
            if self._is(j, "as", "ident"):
                j += 2
        else:
            close = self.match[j]
            names = self._import_names(j + 1, close)
            j = close + 1
        if not (self._is(j, "from", "ident") and j + 1 < len(self.tokens) and self.tokens[j + 1].kind == "string"):
            return None, j
        module = self.tokens[j + 1].text[1:-1]
        return Import(module=module, names=names, reexport=True, reexport_all=reexport_all), j + 2

    def _declaration(self, i: int, decorators: list[Decorator]) -> tuple[Declaration | None, int]:
        kind = self.tokens[i].text
        j = i + 1
        name = self._ident(j) or ""
        if name in ("extends", "implements"):
            name = ""
        elif name:
            j += 1
        header_start = j
        while j < len(self.tokens) and not self._punct(j, "{"):
            if self.tokens[j].kind == "punct" and self.tokens[j].text in _OPENERS:
                j = self.match[j] + 1
                continue
            if self._punct(j, ";"):
                return None, j + 1
            j += 1
        if j >= len(self.tokens):
            return None, j
        extends = ""
        header = [t.text for t in self.tokens[header_start:j]]
        if "extends" in header:
            k = header_start + header.index("extends") + 1
            stop = header_start + header.index("implements") if "implements" in header else j
            extends = self._slice(k, stop)
        close = self.match[j]
        decl = Declaration(name=name, kind=kind, decorators=list(decorators), extends=extends)
        self._members(decl, j + 1, close)
        return decl, close + 1

    def _members(self, decl: Declaration, lo: int, hi: int) -> None:
        decorators: list[Decorator] = []
        i = lo
        while i < hi:
            tok = self.tokens[i]
            if tok.kind == "punct" and tok.text in ";,":
                i += 1
                continue
            if tok.kind == "punct" and tok.text == "@":
                dec, i = self._decorator(i)
                decorators.append(dec)
                continue
            while (
                self._ident(i) in _MEMBER_MODIFIERS
                and i + 1 < hi
                and self.tokens[i + 1].kind in ("ident", "string")
            ):
                i += 1
            tok = self.tokens[i]
            if tok.kind == "punct" and tok.text == "[":
                # index signature or computed member name
                i = self._skip_member(self.match[i] + 1, hi, angles=True)
                decorators = []
                continue
            if tok.kind == "punct" and tok.text == "#":
                i += 1
                tok = self.tokens[i]
            if tok.kind not in ("ident", "string", "number"):
                i += 1
                decorators = []
                continue
            name = tok.text.strip("'\"`")
            i += 1
            optional = False
            if self._punct(i, "?") or self._punct(i, "!"):
                optional = self.tokens[i].text == "?"
                i += 1
            if self._punct(i, "<"):
                i = self._skip_angles(i, hi)
            if self._punct(i, "("):
                close = self.match[i]
                params = self._parameters(i + 1, close)
                i = close + 1
                return_type = ""
                if self._punct(i, ":"):
                    return_type, i = self._collect_type(i + 1, hi, "{;")
                if self._punct(i, "{"):
                    i = self.match[i] + 1
                if name != "constructor":
                    decl.methods.append(Method(name, decorators, params, return_type))
            else:
                type_text = ""
                if self._punct(i, ":"):
                    type_text, i = self._collect_type(i + 1, hi, "=;,@", line_break=True)
                if self._punct(i, "="):
                    i = self._skip_member(i + 1, hi)
                decl.properties.append(Property(name, type_text, optional, decorators))
            decorators = []

    def _skip_member(self, i: int, hi: int, angles: bool = False) -> int:
        """Skip to the end of the current member (initializer or signature)."""
        _, end = self._collect_type(i, hi, ";@", line_break=True, angles=angles)
        return end

    def _skip_angles(self, i: int, hi: int) -> int:
        depth = 0
        while i < hi:
            tok = self.tokens[i]
            if tok.kind == "punct":
                if tok.text == "<":
                    depth += 1
                elif tok.text == ">" and not self._is_arrow(i - 1):
                    depth -= 1
                    if depth == 0:
                        return i + 1
                elif tok.text in _OPENERS:
                    i = self.match[i] + 1
                    continue
            i += 1
        return i

    def _parameters(self, lo: int, hi: int) -> list[Parameter]:
        params = []
        for a, b in self._split_commas(lo, hi, angles=True):
            decorators = []
            i = a
            while i < b and self._punct(i, "@"):
                dec, i = self._decorator(i)
                decorators.append(dec)
            while self._ident(i) in _PARAM_MODIFIERS and i + 1 < b and self._ident(i + 1):
                i += 1
            while self._punct(i, "."):
                i += 1
            if i >= b:
                continue
            tok = self.tokens[i]
            if tok.kind == "punct" and tok.text in _OPENERS:
                name = ""
                i = self.match[i] + 1
            else:
                name = tok.text
                i += 1
            optional = False
            if self._punct(i, "?"):
                optional = True
                i += 1
            type_text = ""
            if self._punct(i, ":"):
                type_text, i = self._collect_type(i + 1, b, "=")
            if i < b and self._punct(i, "="):
                optional = True
            params.append(Parameter(name, type_text, optional, decorators))
        return params


def parse_source(text: str, path: Path | str = "<memory>") -> SourceFile:
    """Read TypeScript source text into a SourceFile.

    Raises SourceTreeError when the text cannot be tokenized or its
    brackets do not balance.
    """
    return _TreeBuilder(text, Path(path)).build()
