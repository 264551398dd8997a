"""Collect endpoint documents across all controller files of a project."""

import logging
from pathlib import Path

from apidoc_extractor.errors import SourceTreeError
from apidoc_extractor.extractor.endpoint import CONTROLLER_DECORATOR, synthesize_controller
from apidoc_extractor.extractor.decorators import find_decorator
from apidoc_extractor.parser.base import EndpointDocument
from apidoc_extractor.source.project import Project
from apidoc_extractor.source.tree import Declaration, SourceFile

logger = logging.getLogger(__name__)


def find_controller(source: SourceFile) -> Declaration | None:
    """The controller class of a file: the first ``@Controller`` class, else the first class."""
    classes = source.classes
    for cls in classes:
        if find_decorator(cls, CONTROLLER_DECORATOR):
            return cls
    return classes[0] if classes else None


def extract_file(project: Project, path: Path) -> list[EndpointDocument]:
    """Endpoint documents of one controller file."""
    source = project.parse(path)
    controller = find_controller(source)
    if controller is None:
        logger.info("No controller class in %s", path)
        return []
    return synthesize_controller(controller, project, source)


def extract_endpoints(project: Project, pattern: str | None = None) -> list[EndpointDocument]:
    """Endpoint documents for every matching file, in discovery order.

    A file that cannot be read or parsed contributes nothing; the
    remaining files are still processed.
    """
    endpoints: list[EndpointDocument] = []
    for path in project.get_source_files(pattern):
        try:
            found = extract_file(project, path)
        except (SourceTreeError, OSError, UnicodeDecodeError) as e:
            logger.warning("Skipping %s: %s", path, e)
            continue
        except Exception:
            logger.exception("Skipping %s: unexpected error", path)
            continue
        logger.debug("%s: %d endpoints", path, len(found))
        endpoints.extend(found)
    return endpoints
