import copy
import json
import os
import tempfile
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from prep_bank.config import PROGRESS_KEY
from prep_bank.models import Progress


class StorageError(RuntimeError):
    """The progress blob could not be read from or written to storage."""


# -------------------------------------------------
# Storage backends: one flat JSON blob per key
# -------------------------------------------------
class JsonFileStorage:
    """Keeps each key in <directory>/<key>.json."""

    def __init__(self, directory: str):
        self.directory = directory

    def path_for(self, key: str) -> str:
        return os.path.join(self.directory, f"{key}.json")

    def read(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        if not os.path.exists(path):
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return f.read()
        except OSError as e:
            raise StorageError(f"could not read {path}: {e}") from e

    def write(self, key: str, blob: str) -> None:
        path = self.path_for(key)
        try:
            os.makedirs(self.directory, exist_ok=True)
            # write to a temp file next to the target, then swap it in
            fd, tmp_path = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(blob)
                os.replace(tmp_path, path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.remove(tmp_path)
                raise
        except OSError as e:
            raise StorageError(f"could not write {path}: {e}") from e


class MemoryStorage:
    def __init__(self, blobs: Optional[Dict[str, str]] = None):
        self.blobs: Dict[str, str] = dict(blobs or {})

    def read(self, key: str) -> Optional[str]:
        return self.blobs.get(key)

    def write(self, key: str, blob: str) -> None:
        self.blobs[key] = blob


# -------------------------------------------------
# Progress store
# -------------------------------------------------
@dataclass
class ProgressStats:
    completed: int
    bookmarked: int
    remaining: int
    percentage: int


class ProgressStore:
    """
    The single persisted Progress record.

    Loaded once on construction. Every change goes through mutate(), which
    writes the whole record back before it becomes current, so storage never
    holds a half-applied update.
    """

    def __init__(self, storage, key: str = PROGRESS_KEY):
        self.storage = storage
        self.key = key
        self._progress = self._load()

    def _load(self) -> Progress:
        blob = self.storage.read(self.key)
        if blob is None:
            return Progress()
        try:
            data = json.loads(blob)
        except ValueError:
            return Progress()
        if not isinstance(data, dict):
            return Progress()
        try:
            return Progress.from_dict(data)
        except (TypeError, ValueError):
            # valid JSON, wrong shape
            return Progress()

    @property
    def progress(self) -> Progress:
        return self._progress

    def mutate(self, fn: Callable[[Progress], Progress]) -> Progress:
        updated = fn(copy.deepcopy(self._progress))
        blob = json.dumps(updated.to_dict(), ensure_ascii=False, indent=2)
        self.storage.write(self.key, blob)
        self._progress = updated
        return updated

    # --- Completion / bookmarks ---

    def toggle_completed(self, question_id: str) -> Progress:
        def fn(p: Progress) -> Progress:
            p.completed_questions ^= {question_id}
            return p
        return self.mutate(fn)

    def toggle_bookmarked(self, question_id: str) -> Progress:
        def fn(p: Progress) -> Progress:
            p.bookmarked_questions ^= {question_id}
            return p
        return self.mutate(fn)

    def set_last_visited(self, question_id: Optional[str]) -> Progress:
        def fn(p: Progress) -> Progress:
            p.last_visited = question_id
            return p
        return self.mutate(fn)

    def is_completed(self, question_id: str) -> bool:
        return question_id in self._progress.completed_questions

    def is_bookmarked(self, question_id: str) -> bool:
        return question_id in self._progress.bookmarked_questions

    def reset_progress(self) -> Progress:
        return self.mutate(lambda _: Progress())

    def stats(self, total_questions: int) -> ProgressStats:
        completed = len(self._progress.completed_questions)
        percentage = round(completed / total_questions * 100) if total_questions > 0 else 0
        return ProgressStats(
            completed=completed,
            bookmarked=len(self._progress.bookmarked_questions),
            remaining=total_questions - completed,
            percentage=percentage,
        )
