from dataclasses import replace
from typing import Collection, Iterable, Iterator, List, Optional

from prep_bank.models import DifficultyCount, Question, Section


def iter_questions(sections: Iterable[Section]) -> Iterator[Question]:
    for section in sections:
        for sub in section.subsections:
            yield from sub.questions


def difficulty_counts(questions: Iterable[Question]) -> DifficultyCount:
    counts = DifficultyCount()
    for q in questions:
        if q.difficulty == "easy":
            counts.easy += 1
        elif q.difficulty == "medium":
            counts.medium += 1
        elif q.difficulty == "hard":
            counts.hard += 1
    return counts


def question_matches(question: Question, query: str) -> bool:
    """Case-insensitive substring match against title or answer."""
    needle = query.strip().lower()
    if not needle:
        return True
    return needle in question.title.lower() or needle in question.answer.lower()


def _passes(
    q: Question,
    difficulty: str,
    query: str,
    bookmarked_ids: Optional[Collection[str]],
) -> bool:
    # --- Difficulty ---
    if difficulty != "all" and q.difficulty != difficulty:
        return False

    # --- Free text ---
    if not question_matches(q, query):
        return False

    # --- Bookmarks ---
    if bookmarked_ids is not None and q.id not in bookmarked_ids:
        return False

    return True


def _sections_for(sections: Iterable[Section], section_id: str) -> List[Section]:
    if section_id == "all":
        return list(sections)
    return [s for s in sections if s.id == section_id]


def select_questions(
    sections: Iterable[Section],
    difficulty: str = "all",
    query: str = "",
    section_id: str = "all",
    bookmarked_ids: Optional[Collection[str]] = None,
) -> List[Question]:
    """
    Filter questions by difficulty, free text, section and bookmarks.

    - Every active filter must pass (AND). "all" / "" / None switch one off.
    - bookmarked_ids=None means no bookmark restriction; an empty collection
      means "bookmarked only" with nothing bookmarked, so nothing matches.
    - Document order is kept.
    """
    return [
        q
        for q in iter_questions(_sections_for(sections, section_id))
        if _passes(q, difficulty, query, bookmarked_ids)
    ]


def count_questions(
    sections: Iterable[Section],
    difficulty: str = "all",
    query: str = "",
    section_id: str = "all",
    bookmarked_ids: Optional[Collection[str]] = None,
) -> int:
    return len(select_questions(sections, difficulty, query, section_id, bookmarked_ids))


def filter_sections(
    sections: Iterable[Section],
    difficulty: str = "all",
    query: str = "",
    section_id: str = "all",
    bookmarked_ids: Optional[Collection[str]] = None,
) -> List[Section]:
    """
    Same filters as select_questions, but keeps the tree for grouped display.

    Returns copies; subsections and sections left empty are dropped. The input
    sections are not modified.
    """
    result = []
    for section in _sections_for(sections, section_id):
        subs = []
        for sub in section.subsections:
            kept = [q for q in sub.questions if _passes(q, difficulty, query, bookmarked_ids)]
            if kept:
                subs.append(replace(sub, questions=kept))
        if subs:
            result.append(replace(section, subsections=subs))
    return result


def build_filter_key(
    language: str,
    difficulty: str = "all",
    query: str = "",
    section_id: str = "all",
    bookmarked_only: bool = False,
) -> str:
    """Opaque key naming the filter combination that produced a question set."""
    parts = [language, f"d={difficulty}", f"s={section_id}"]

    if bookmarked_only:
        parts.append("bookmarked")

    needle = query.strip().lower()
    if needle:
        parts.append(f"q={needle}")

    return "|".join(parts)
