"""
Reverse dependency index.

Answers "who imports this module?" by scanning every module under the
search roots and inverting the import graph. No policy is applied, and a
module that fails to resolve is logged and skipped rather than aborting the
scan.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Iterable

from depcop.context import ResolutionContext
from depcop.errors import DepcopError

logger = logging.getLogger(__name__)


def compute_incoming_index(
    context: ResolutionContext,
    include_tests: bool = False,
) -> dict[str, set[str]]:
    """
    Build the map imported -> {importers} for modules under the search roots.

    Only modules found under the search roots appear as keys; imports of
    standard library or installed third-party modules are not recorded.
    """
    names = context.discoverer.list_modules()
    index: dict[str, set[str]] = {name: set() for name in names}

    for name in names:
        try:
            module = context.modules.resolve(name)
        except DepcopError as e:
            logger.warning("Skipping %s: %s", name, e.message)
            continue
        for imported in module.all_imports(include_tests=include_tests):
            importers = index.get(imported)
            if importers is not None:
                importers.add(name)

    logger.debug("Indexed %d modules", len(index))
    return index


def list_importers(
    targets: Iterable[str],
    index: dict[str, set[str]],
    transitive: bool = False,
) -> list[str]:
    """
    List modules that import any of targets.

    Args:
        targets: Module names to look up
        index: Result of compute_incoming_index
        transitive: Also include importers of importers

    Returns:
        Sorted importer names (targets themselves only when they import
        another target)
    """
    found: set[str] = set()
    queue = deque(targets)
    while queue:
        name = queue.popleft()
        for importer in sorted(index.get(name, ())):
            if importer in found:
                continue
            found.add(importer)
            if transitive:
                queue.append(importer)
    return sorted(found)
