"""Project-level access to TypeScript sources.

Finds controller files under a project root, parses them on demand and
resolves type names to class or interface declarations across relative
imports.
"""

import logging
from pathlib import Path

from apidoc_extractor.config import ExtractorConfig
from apidoc_extractor.errors import ProjectError, SourceTreeError
from apidoc_extractor.source.tree import Declaration, SourceFile, parse_source

logger = logging.getLogger(__name__)

_MODULE_SUFFIXES = (".ts", ".tsx", ".d.ts")
_MAX_REEXPORT_DEPTH = 8


class Project:
    """A TypeScript project rooted at a directory with a tsconfig."""

    def __init__(self, root: Path, config: ExtractorConfig):
        self.root = root
        self.config = config
        self._cache: dict[Path, SourceFile] = {}

    @classmethod
    def load(cls, root: Path, config: ExtractorConfig | None = None) -> "Project":
        """Open a project, failing if the root or its tsconfig is missing."""
        config = config or ExtractorConfig()
        root = Path(root).resolve()
        if not root.is_dir():
            raise ProjectError(f"Project root {root} is not a directory")
        tsconfig = root / config.tsconfig
        if not tsconfig.is_file():
            raise ProjectError(f"Cannot find {config.tsconfig} in {root}")
        return cls(root, config)

    def get_source_files(self, pattern: str | None = None) -> list[Path]:
        """Return files matching the glob, sorted, minus excluded directories."""
        pattern = pattern or self.config.pattern
        excluded = set(self.config.exclude)
        files = []
        for path in self.root.glob(pattern):
            if not path.is_file():
                continue
            if excluded.intersection(path.relative_to(self.root).parts[:-1]):
                continue
            files.append(path)
        return sorted(files)

    def parse(self, path: Path) -> SourceFile:
        """Parse a file, reusing the result for the rest of the run."""
        path = Path(path)
        if path not in self._cache:
            text = path.read_text(encoding="utf-8")
            self._cache[path] = parse_source(text, path)
        return self._cache[path]

    def resolve_declaration(self, source: SourceFile, type_text: str) -> Declaration | None:
        """Find the class or interface a type annotation refers to.

        Looks in the file itself, then follows its named and namespace
        imports. Returns None for anything it cannot see (package
        imports, generics, unions, unreadable modules).
        """
        qualifier, _, name = type_text.strip().rpartition(".")
        if not name.isidentifier():
            return None

        if qualifier:
            for imp in source.imports:
                if imp.namespace == qualifier:
                    return self._lookup_in_module(source.path, imp.module, name, 0)
            return None

        local = source.get_declaration(name)
        if local:
            return local
        for imp in source.imports:
            if name in imp.names and not imp.reexport:
                return self._lookup_in_module(source.path, imp.module, imp.names[name], 0)
        return None

    def _lookup_in_module(self, importer: Path, module: str, name: str, depth: int) -> Declaration | None:
        if depth > _MAX_REEXPORT_DEPTH:
            return None
        path = self._module_path(importer, module)
        if path is None:
            return None
        try:
            target = self.parse(path)
        except (SourceTreeError, OSError, UnicodeDecodeError) as e:
            logger.debug("Cannot read %s while resolving %s: %s", path, name, e)
            return None

        decl = target.get_declaration(name)
        if decl:
            return decl
        for imp in target.imports:
            if not imp.reexport:
                continue
            if imp.reexport_all or name in imp.names:
                exported = imp.names.get(name, name)
                found = self._lookup_in_module(path, imp.module, exported, depth + 1)
                if found:
                    return found
        return None

    @staticmethod
    def _module_path(importer: Path, module: str) -> Path | None:
        if not module.startswith("."):
            return None
        base = importer.parent / module
        candidates = [base] if base.suffix in _MODULE_SUFFIXES else []
        candidates += [Path(f"{base}{suffix}") for suffix in _MODULE_SUFFIXES]
        candidates += [base / f"index{suffix}" for suffix in _MODULE_SUFFIXES]
        for candidate in candidates:
            if candidate.is_file():
                return candidate
        return None
