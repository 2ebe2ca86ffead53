import json
import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from app.errors import StorageError
from app.progress import PROGRESS_VERSION, ProgressRecord

log = logging.getLogger(__name__)

DEFAULT_PROGRESS_PATH = Path("data/progress.json")

Migration = Callable[[Dict[str, Any]], Dict[str, Any]]


# -------- migrations (pure: dict in, new dict out) --------
def _v0_to_v1(doc: Dict[str, Any]) -> Dict[str, Any]:
    # unversioned files kept points under "total_points"
    out = dict(doc)
    if "total_points" in out and "total_xp" not in out:
        out["total_xp"] = out.pop("total_points")
    out["version"] = 1
    return out


def _v1_to_v2(doc: Dict[str, Any]) -> Dict[str, Any]:
    # v2 added per-letter history, achievements and the streak record
    out = dict(doc)
    out.setdefault("letter_history", {})
    out.setdefault("achievements", {})
    out.setdefault("longest_streak", out.get("practice_streak", 0))
    out.setdefault("home_key_clicks", 0)
    out.setdefault("levels_key_clicks", 0)
    out["version"] = 2
    return out


MIGRATIONS: Dict[int, Migration] = {
    0: _v0_to_v1,
    1: _v1_to_v2,
}


def migrate(doc: Dict[str, Any]) -> Dict[str, Any]:
    version = doc.get("version", 0)
    if isinstance(version, bool) or not isinstance(version, int) or version < 0:
        raise ValueError(f"bad progress version {version!r}")
    if version > PROGRESS_VERSION:
        raise StorageError(f"Progress file is version {version}, newer than supported {PROGRESS_VERSION}")
    while version < PROGRESS_VERSION:
        doc = MIGRATIONS[version](doc)
        version = doc["version"]
    return doc


class ProgressRepository:
    """One JSON document per learner. Create one per context; nothing is shared."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else DEFAULT_PROGRESS_PATH

    def load(self) -> ProgressRecord:
        if not self.path.exists():
            return ProgressRecord()
        try:
            doc = json.loads(self.path.read_text(encoding="utf-8"))
            if not isinstance(doc, dict):
                raise ValueError("top-level JSON value is not an object")
        except (OSError, ValueError) as e:
            log.warning("Unreadable progress file %s (%s); starting fresh", self.path, e)
            return ProgressRecord()

        try:
            return ProgressRecord.from_dict(migrate(doc))
        except (AttributeError, TypeError, ValueError) as e:
            log.warning("Malformed progress data in %s (%s); starting fresh", self.path, e)
            return ProgressRecord()

    def save(self, record: ProgressRecord) -> None:
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(record.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError as e:
            raise StorageError(f"Could not write {self.path}: {e}") from e
        log.debug("Saved progress to %s", self.path)
