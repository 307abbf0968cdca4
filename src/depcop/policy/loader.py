"""
Policy document loader.

Reads MODULE.POLICY files, validates them, and caches the parsed documents by
path so that many modules sharing an ancestor never re-parse it.

A missing file raises PolicyNotFoundError, which callers treat as "no rules
here". Anything else that goes wrong raises PolicyParseError.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from depcop.errors import PolicyNotFoundError, PolicyParseError
from depcop.schema import PolicyDocument, parse_policy

logger = logging.getLogger(__name__)


class PolicyLoader:
    """
    Loads and caches policy documents.

    Usage:
        loader = PolicyLoader()
        document = loader.load(Path("src/acme/MODULE.POLICY"))
    """

    def __init__(self, lock: threading.RLock | None = None) -> None:
        self._lock = lock or threading.RLock()
        self._cache: dict[Path, PolicyDocument] = {}

    def load(self, path: Path | str) -> PolicyDocument:
        """
        Load the policy document at path.

        Args:
            path: Path of the MODULE.POLICY file

        Returns:
            The parsed (and cached) PolicyDocument

        Raises:
            PolicyNotFoundError: If no file exists at path
            PolicyParseError: If the file cannot be read or is malformed
        """
        path = Path(path)
        with self._lock:
            document = self._cache.get(path)
            if document is not None:
                return document

            try:
                content = path.read_text(encoding="utf-8")
            except FileNotFoundError as e:
                raise PolicyNotFoundError(path=str(path)) from e
            except (OSError, UnicodeDecodeError) as e:
                raise PolicyParseError(path=str(path), reason=str(e)) from e

            document = parse_policy(content, path)
            logger.debug(
                "Loaded policy %s: %d incoming, %d outgoing rules",
                path,
                len(document.incoming),
                len(document.outgoing),
            )
            self._cache[path] = document
            return document
