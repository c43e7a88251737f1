import json

import pytest

from prep_bank.models import Progress, QuizSession
from prep_bank.progress import (
    JsonFileStorage,
    MemoryStorage,
    ProgressStats,
    ProgressStore,
    StorageError,
)


class FailingStorage(MemoryStorage):
    def write(self, key, blob):
        raise StorageError("disk full")


def test_defaults_on_first_access():
    store = ProgressStore(MemoryStorage())
    p = store.progress

    assert p.completed_questions == set()
    assert p.bookmarked_questions == set()
    assert p.last_visited is None
    assert p.quiz_session is None


def test_toggles_flip_membership():
    store = ProgressStore(MemoryStorage())

    store.toggle_completed("q-1")
    store.toggle_bookmarked("q-2")
    assert store.is_completed("q-1")
    assert store.is_bookmarked("q-2")
    assert not store.is_bookmarked("q-1")

    store.toggle_completed("q-1")
    store.toggle_bookmarked("q-2")
    assert not store.is_completed("q-1")
    assert not store.is_bookmarked("q-2")


def test_every_mutation_writes_full_record():
    storage = MemoryStorage()
    store = ProgressStore(storage, key="k")

    store.toggle_bookmarked("q-3")
    store.set_last_visited("q-3")

    data = json.loads(storage.blobs["k"])
    assert data == {
        "completedQuestions": [],
        "bookmarkedQuestions": ["q-3"],
        "lastVisited": "q-3",
        "quizSession": None,
    }


def test_mutate_works_on_a_copy():
    store = ProgressStore(MemoryStorage())
    before = store.progress

    def fn(p):
        p.completed_questions.add("q-9")
        return p

    after = store.mutate(fn)
    assert "q-9" in after.completed_questions
    assert "q-9" not in before.completed_questions


def test_failed_write_keeps_previous_state():
    store = ProgressStore(FailingStorage())

    with pytest.raises(StorageError):
        store.toggle_completed("q-1")
    assert not store.is_completed("q-1")


def test_reset_progress():
    store = ProgressStore(MemoryStorage())
    store.toggle_completed("q-1")
    store.toggle_bookmarked("q-1")
    store.set_last_visited("q-1")

    store.reset_progress()

    assert store.progress == Progress()


def test_reload_from_file(tmp_path):
    storage = JsonFileStorage(str(tmp_path / "output"))
    store = ProgressStore(storage)
    store.toggle_completed("q-0")
    store.mutate(lambda p: Progress(
        completed_questions=p.completed_questions,
        quiz_session=QuizSession(question_ids=["q-0", "q-1"], known_ids={"q-0"}, filter_key="en|d=all|s=all"),
    ))

    reloaded = ProgressStore(JsonFileStorage(str(tmp_path / "output")))
    assert reloaded.is_completed("q-0")
    assert reloaded.progress.quiz_session.known_ids == {"q-0"}
    assert reloaded.progress.quiz_session.filter_key == "en|d=all|s=all"
    # no temp files left behind
    assert [p.name for p in (tmp_path / "output").iterdir()] == ["interview-progress.json"]


def test_corrupt_blob_falls_back_to_defaults(tmp_path):
    (tmp_path / "interview-progress.json").write_text("{not json", encoding="utf-8")
    store = ProgressStore(JsonFileStorage(str(tmp_path)))
    assert store.progress == Progress()

    store = ProgressStore(MemoryStorage({"interview-progress": "[1, 2]"}))
    assert store.progress == Progress()


def test_partial_blob_fills_missing_fields():
    store = ProgressStore(MemoryStorage({"interview-progress": '{"completedQuestions": ["q-1"]}'}))
    assert store.progress == Progress(completed_questions={"q-1"})


def test_unwritable_directory_raises_storage_error(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")
    store = ProgressStore(JsonFileStorage(str(blocker / "nested")))

    with pytest.raises(StorageError):
        store.toggle_completed("q-1")


def test_stats():
    store = ProgressStore(MemoryStorage())
    store.toggle_completed("q-0")
    store.toggle_completed("q-1")
    store.toggle_bookmarked("q-5")

    assert store.stats(8) == ProgressStats(completed=2, bookmarked=1, remaining=6, percentage=25)
    assert store.stats(0).percentage == 0


def test_wrong_shape_blob_falls_back_to_defaults():
    blobs = [
        '{"completedQuestions": 5}',
        '{"bookmarkedQuestions": "q-1"}',
        '{"quizSession": {"questionIds": ["q-0"], "currentIndex": "first"}}',
        '{"quizSession": {"questionIds": ["q-0"], "knownIds": {"q-0": true}}}',
    ]
    for blob in blobs:
        store = ProgressStore(MemoryStorage({"interview-progress": blob}))
        assert store.progress == Progress()


def test_stored_cursor_is_clamped():
    blob = json.dumps({"quizSession": {"questionIds": ["q-0", "q-1"], "currentIndex": 7}})
    store = ProgressStore(MemoryStorage({"interview-progress": blob}))
    assert store.progress.quiz_session.current_index == 1

    blob = json.dumps({"quizSession": {"questionIds": ["q-0"], "currentIndex": -3}})
    store = ProgressStore(MemoryStorage({"interview-progress": blob}))
    assert store.progress.quiz_session.current_index == 0


def test_stored_session_without_questions_is_dropped():
    blob = json.dumps({"completedQuestions": ["q-1"], "quizSession": {"questionIds": []}})
    store = ProgressStore(MemoryStorage({"interview-progress": blob}))

    assert store.progress.quiz_session is None
    assert store.is_completed("q-1")
