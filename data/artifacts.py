from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from pathlib import Path

log = logging.getLogger(__name__)

_UNSAFE_RE = re.compile(r"[^A-Za-z0-9_-]")


def sanitize_name(name: str) -> str:
    return _UNSAFE_RE.sub("_", name) or "source"


class ArtifactStore:
    """Keeps raw pages that broke extraction so the rules can be fixed later."""

    def __init__(self, directory: str | Path) -> None:
        self._dir = Path(directory)

    def save(self, source_name: str, document: str, when: datetime | None = None) -> Path:
        when = when or datetime.now(timezone.utc)
        self._dir.mkdir(parents=True, exist_ok=True)
        stamp = when.strftime("%Y%m%dT%H%M%SZ")
        path = self._dir / f"{sanitize_name(source_name)}-{stamp}.html"
        path.write_text(document, encoding="utf-8")
        log.info("Saved diagnostic artifact for %s to %s", source_name, path)
        return path
