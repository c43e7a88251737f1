from dataclasses import dataclass, field
from typing import List, Optional, Set

DIFFICULTIES = ("easy", "medium", "hard")


def _id_list(value) -> List[str]:
    """Question ids from a stored blob. Raises TypeError on anything but a list."""
    if value is None:
        return []
    if not isinstance(value, list):
        raise TypeError(f"expected a list of ids, got {type(value).__name__}")
    return [str(v) for v in value]


@dataclass
class Question:
    id: str                   # q-<ordinal>, stable within one parse
    number: int               # number declared in the document, display only
    title: str
    answer: str
    difficulty: str = "easy"
    code: Optional[str] = None
    language: Optional[str] = None


@dataclass
class Subsection:
    id: str
    title: str
    title_en: str = ""
    questions: List[Question] = field(default_factory=list)


@dataclass
class Section:
    id: str
    number: int
    title: str
    title_en: str = ""
    question_count: int = 0   # as declared in the heading, never corrected
    subsections: List[Subsection] = field(default_factory=list)

    @property
    def parsed_count(self) -> int:
        return sum(len(sub.questions) for sub in self.subsections)


@dataclass
class DifficultyCount:
    easy: int = 0
    medium: int = 0
    hard: int = 0


@dataclass
class TopicData:
    title: str
    title_en: str
    sections: List[Section]
    total_questions: int
    difficulty_count: DifficultyCount


@dataclass
class QuizSession:
    question_ids: List[str]
    current_index: int = 0
    known_ids: Set[str] = field(default_factory=set)
    unknown_ids: Set[str] = field(default_factory=set)
    started_at: float = 0.0
    filter_key: str = ""

    def to_dict(self) -> dict:
        return {
            "questionIds": list(self.question_ids),
            "currentIndex": self.current_index,
            "knownIds": sorted(self.known_ids),
            "unknownIds": sorted(self.unknown_ids),
            "startedAt": self.started_at,
            "filterKey": self.filter_key,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "QuizSession":
        question_ids = _id_list(data.get("questionIds"))
        last = max(len(question_ids) - 1, 0)
        known = set(_id_list(data.get("knownIds")))
        return cls(
            question_ids=question_ids,
            current_index=min(max(int(data.get("currentIndex") or 0), 0), last),
            known_ids=known,
            # known wins if a hand-edited blob lists an id in both
            unknown_ids=set(_id_list(data.get("unknownIds"))) - known,
            started_at=float(data.get("startedAt") or 0.0),
            filter_key=str(data.get("filterKey") or ""),
        )


@dataclass
class Progress:
    completed_questions: Set[str] = field(default_factory=set)
    bookmarked_questions: Set[str] = field(default_factory=set)
    last_visited: Optional[str] = None
    quiz_session: Optional[QuizSession] = None

    def to_dict(self) -> dict:
        return {
            "completedQuestions": sorted(self.completed_questions),
            "bookmarkedQuestions": sorted(self.bookmarked_questions),
            "lastVisited": self.last_visited,
            "quizSession": self.quiz_session.to_dict() if self.quiz_session else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Progress":
        session = data.get("quizSession")
        last_visited = data.get("lastVisited")
        quiz_session = QuizSession.from_dict(session) if isinstance(session, dict) else None
        # a session over nothing can never be resumed
        if quiz_session is not None and not quiz_session.question_ids:
            quiz_session = None
        return cls(
            completed_questions=set(_id_list(data.get("completedQuestions"))),
            bookmarked_questions=set(_id_list(data.get("bookmarkedQuestions"))),
            last_visited=str(last_visited) if last_visited is not None else None,
            quiz_session=quiz_session,
        )
