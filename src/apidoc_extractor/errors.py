"""Exceptions raised by the extractor.

Project and configuration errors abort the run. Source tree errors are
scoped to one file and recovered by the aggregator.
"""


class ApiDocError(Exception):
    """Base class for extractor errors."""


class ProjectError(ApiDocError):
    """The project root or its tsconfig cannot be loaded."""


class ConfigError(ApiDocError):
    """The extractor configuration file is invalid."""


class SourceTreeError(ApiDocError):
    """A source file cannot be read into a syntax tree."""

    def __init__(self, message: str, path=None):
        super().__init__(f"{path}: {message}" if path else message)
        self.path = path
