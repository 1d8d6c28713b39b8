from __future__ import annotations

import json
import os
from pathlib import Path

from loguru import logger

CACHE_DIR = os.getenv("FAMILY_TREE_CACHE_DIR", str(Path.home() / ".cache" / "family-tree"))
EXPANDED_KEY = "family-tree-expanded"


class ExpansionCache:
    """
    Best-effort local store for the set of expanded member ids.

    Reads fall back to an empty set and writes are dropped when the file is missing,
    unreadable or corrupted; neither ever raises.
    """

    def __init__(self, directory: str | Path = CACHE_DIR, key: str = EXPANDED_KEY) -> None:
        self.path = Path(directory) / f"{key}.json"

    def load(self) -> set[int]:
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            if not isinstance(raw, list):
                logger.debug("Ignoring expansion cache at {path}: not a list", path=self.path)
                return set()
            return {int(item) for item in raw}
        except (OSError, ValueError, TypeError) as exc:
            logger.debug("Ignoring expansion cache at {path}: {error}", path=self.path, error=exc)
            return set()

    def save(self, expanded: set[int] | frozenset[int]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(sorted(expanded)), encoding="utf-8")
        except OSError as exc:
            logger.debug("Could not write expansion cache at {path}: {error}", path=self.path, error=exc)
