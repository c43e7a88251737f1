"""
Quiz sessions on top of the progress store.

One session at a time is kept inside Progress. It holds a shuffled list of
question ids, a cursor, and which ids the user marked known or unknown. A
session is tied to the filter key that produced its questions; entering quiz
mode again with the same key offers to resume it instead of starting over.
"""

import random
import time
from enum import Enum
from typing import Callable, Iterable, List, Optional

from prep_bank.config import RETRY_SUFFIX
from prep_bank.models import Progress, Question, QuizSession
from prep_bank.progress import ProgressStore


class QuizState(Enum):
    NO_SESSION = "no_session"
    ACTIVE = "active"
    RESUMABLE = "resumable"
    COMPLETE = "complete"


class QuizEngine:
    def __init__(
        self,
        store: ProgressStore,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.rng = rng or random.Random()
        self.clock = clock

    @property
    def session(self) -> Optional[QuizSession]:
        return self.store.progress.quiz_session

    # -------------------------------------------------
    # Lifecycle
    # -------------------------------------------------
    def has_resumable(self, filter_key: str) -> bool:
        return self.session is not None and self.session.filter_key == filter_key

    def enter(self, question_ids: Iterable[str], filter_key: str) -> QuizState:
        """
        Enter quiz mode for the given filter.

        A stored session with the same key is left alone and RESUMABLE (or
        COMPLETE) is returned so the caller can offer resume() or a fresh
        start_session(). With no questions nothing is started and NO_SESSION
        is returned. Anything else starts a new session.
        """
        if self.has_resumable(filter_key):
            return QuizState.COMPLETE if self.is_complete() else QuizState.RESUMABLE

        ids = list(question_ids)
        if not ids:
            return QuizState.NO_SESSION

        self.start_session(ids, filter_key)
        return self.state()

    def start_session(self, question_ids: Iterable[str], filter_key: str) -> QuizSession:
        ids = list(dict.fromkeys(question_ids))
        if not ids:
            raise ValueError("cannot start a quiz session without questions")
        self.rng.shuffle(ids)

        session = QuizSession(
            question_ids=ids,
            started_at=self.clock(),
            filter_key=filter_key,
        )

        def fn(p: Progress) -> Progress:
            p.quiz_session = session
            return p

        self.store.mutate(fn)
        return session

    def resume(self) -> Optional[QuizSession]:
        return self.session

    def restart(self) -> Optional[QuizSession]:
        """Reshuffle the whole current question set under the same key."""
        if self.session is None:
            return None
        return self.start_session(self.session.question_ids, self.session.filter_key)

    def retry_unknown(self) -> Optional[QuizSession]:
        """New session over just the questions marked unknown."""
        session = self.session
        if session is None:
            return None

        unknown = [qid for qid in session.question_ids if qid in session.unknown_ids]
        if not unknown:
            return None
        return self.start_session(unknown, session.filter_key + RETRY_SUFFIX)

    def end_session(self) -> None:
        def fn(p: Progress) -> Progress:
            p.quiz_session = None
            return p

        self.store.mutate(fn)

    # -------------------------------------------------
    # Marking and moving
    # -------------------------------------------------
    def _in_session(self, question_id: str) -> bool:
        return self.session is not None and question_id in self.session.question_ids

    def mark_known(self, question_id: str) -> None:
        if not self._in_session(question_id):
            return

        def fn(p: Progress) -> Progress:
            p.quiz_session.known_ids.add(question_id)
            p.quiz_session.unknown_ids.discard(question_id)
            # knowing it counts as studied; marking unknown later won't undo this
            p.completed_questions.add(question_id)
            return p

        self.store.mutate(fn)

    def mark_unknown(self, question_id: str) -> None:
        if not self._in_session(question_id):
            return

        def fn(p: Progress) -> Progress:
            p.quiz_session.unknown_ids.add(question_id)
            p.quiz_session.known_ids.discard(question_id)
            return p

        self.store.mutate(fn)

    def advance(self, step: int = 1) -> int:
        """Move the cursor by step, clamped to the session bounds (no wraparound)."""
        session = self.session
        if session is None:
            return 0

        last = max(len(session.question_ids) - 1, 0)
        new_index = min(max(session.current_index + step, 0), last)

        def fn(p: Progress) -> Progress:
            p.quiz_session.current_index = new_index
            return p

        self.store.mutate(fn)
        return new_index

    # -------------------------------------------------
    # Queries
    # -------------------------------------------------
    def is_complete(self) -> bool:
        session = self.session
        if session is None:
            return False
        return len(session.known_ids) + len(session.unknown_ids) == len(session.question_ids)

    def state(self, filter_key: Optional[str] = None) -> QuizState:
        if self.session is None:
            return QuizState.NO_SESSION
        if filter_key is not None and self.session.filter_key != filter_key:
            return QuizState.NO_SESSION
        return QuizState.COMPLETE if self.is_complete() else QuizState.ACTIVE

    def current_question_id(self) -> Optional[str]:
        session = self.session
        if session is None or not session.question_ids:
            return None
        return session.question_ids[session.current_index]

    def completion_percentage(self) -> int:
        session = self.session
        if session is None or not session.question_ids:
            return 0
        marked = len(session.known_ids) + len(session.unknown_ids)
        return round(marked / len(session.question_ids) * 100)

    def session_questions(self, questions: Iterable[Question]) -> List[Question]:
        """Resolve session ids to questions, skipping ids no longer in the data."""
        if self.session is None:
            return []
        by_id = {q.id: q for q in questions}
        return [by_id[qid] for qid in self.session.question_ids if qid in by_id]


def format_time_ago(started_at: float, now: float, language: str = "en") -> str:
    seconds = int(now - started_at)
    ru = language == "ru"

    if seconds < 60:
        return "только что" if ru else "just now"

    minutes = seconds // 60
    if minutes < 60:
        return f"{minutes} мин. назад" if ru else f"{minutes}m ago"

    hours = minutes // 60
    if hours < 24:
        return f"{hours} ч. назад" if ru else f"{hours}h ago"

    days = hours // 24
    return f"{days} дн. назад" if ru else f"{days}d ago"
