"""JSON file storage with one file per key."""

import hashlib
import re
from dataclasses import dataclass
from pathlib import Path
from tempfile import NamedTemporaryFile

from fitness_sync.services.storage import KeyValueStorage

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


@dataclass
class FileStorage(KeyValueStorage):
    """Stores each key in its own file under a root directory.

    Writes go through a temporary file that replaces the target, so a
    reader sees either the previous value or the new one.
    """

    root: Path

    @classmethod
    def create(cls, root: str | Path) -> "FileStorage":
        """Create file storage rooted at a directory."""
        path = Path(root).expanduser()
        path.mkdir(parents=True, exist_ok=True)
        return cls(root=path)

    def get(self, key: str) -> str | None:
        """Return the file contents for a key, if present."""
        path = self._path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        """Atomically overwrite the file for a key."""
        path = self._path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            "w", dir=path.parent, delete=False, encoding="utf-8", suffix=".tmp"
        ) as tmp:
            tmp.write(value)
            temp_path = Path(tmp.name)
        temp_path.replace(path)

    def _path_for(self, key: str) -> Path:
        slug = _UNSAFE.sub("_", key).strip("_") or "key"
        digest = hashlib.sha1(key.encode("utf-8")).hexdigest()[:8]
        return self.root / f"{slug}-{digest}.json"
