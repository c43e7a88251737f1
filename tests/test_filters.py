from prep_bank.filters import (
    build_filter_key,
    count_questions,
    difficulty_counts,
    filter_sections,
    iter_questions,
    question_matches,
    select_questions,
)
from prep_bank.models import DifficultyCount, Question
from prep_bank.parsing import parse_document

DOC = """## 1. Async (3 questions)

### Promises

**Q1. 🔴 How does Promise.all fail?**

It rejects as soon as one promise rejects.

**Q2. 🟢 What is a callback?**

A function passed to be called later.

**Q3. 🔴 Explain the event loop.**

Microtasks such as a resolved PROMISE run before the next macrotask.

## 2. Hooks (2 questions)

### State

**Q4. 🟡 When does useState re-render?**

When the setter is called with a new value.

**Q5. 🔴 Why can useEffect loop forever?**

Missing dependencies.
"""

SECTIONS = parse_document(DOC).sections


def ids(questions):
    return [q.id for q in questions]


def test_no_filters_returns_everything_in_order():
    assert ids(select_questions(SECTIONS)) == ["q-0", "q-1", "q-2", "q-3", "q-4"]


def test_difficulty_filter():
    assert ids(select_questions(SECTIONS, difficulty="hard")) == ["q-0", "q-2", "q-4"]
    assert ids(select_questions(SECTIONS, difficulty="medium")) == ["q-3"]


def test_query_matches_title_or_answer_case_insensitive():
    # "promise" is in q-0's title and q-2's answer
    assert ids(select_questions(SECTIONS, query="promise")) == ["q-0", "q-2"]
    assert ids(select_questions(SECTIONS, query="  CALLBACK ")) == ["q-1"]
    assert select_questions(SECTIONS, query="zustand") == []


def test_filters_combine_with_and():
    hard_promise = select_questions(SECTIONS, difficulty="hard", query="promise")
    assert ids(hard_promise) == ["q-0", "q-2"]

    hard = set(ids(select_questions(SECTIONS, difficulty="hard")))
    promise = set(ids(select_questions(SECTIONS, query="promise")))
    assert set(ids(hard_promise)) == hard & promise

    # relaxing either filter gives a superset
    assert set(ids(hard_promise)) <= hard
    assert set(ids(hard_promise)) <= promise

    assert ids(select_questions(SECTIONS, difficulty="easy", query="promise")) == []


def test_section_filter():
    assert ids(select_questions(SECTIONS, section_id="section-2")) == ["q-3", "q-4"]
    assert ids(select_questions(SECTIONS, difficulty="hard", section_id="section-2")) == ["q-4"]
    assert select_questions(SECTIONS, section_id="section-99") == []


def test_bookmark_filter():
    assert ids(select_questions(SECTIONS, bookmarked_ids={"q-4", "q-1"})) == ["q-1", "q-4"]
    assert ids(select_questions(SECTIONS, difficulty="hard", bookmarked_ids={"q-4", "q-1"})) == ["q-4"]
    # bookmarked-only with nothing bookmarked
    assert select_questions(SECTIONS, bookmarked_ids=set()) == []


def test_count_matches_listing():
    combos = [
        {},
        {"difficulty": "hard"},
        {"query": "promise"},
        {"difficulty": "hard", "query": "promise"},
        {"section_id": "section-1", "difficulty": "easy"},
        {"bookmarked_ids": {"q-2"}},
        {"query": "nothing matches this"},
    ]
    for kwargs in combos:
        assert count_questions(SECTIONS, **kwargs) == len(select_questions(SECTIONS, **kwargs))


def test_filter_sections_prunes_tree_without_touching_input():
    pruned = filter_sections(SECTIONS, difficulty="medium")

    assert [s.id for s in pruned] == ["section-2"]
    assert ids(pruned[0].subsections[0].questions) == ["q-3"]
    assert ids(iter_questions(pruned)) == ids(select_questions(SECTIONS, difficulty="medium"))

    # original tree untouched
    assert len(SECTIONS[1].subsections[0].questions) == 2


def test_question_matches_empty_query():
    q = Question(id="q-0", number=1, title="Title", answer="Answer")
    assert question_matches(q, "")
    assert question_matches(q, "   ")
    assert question_matches(q, "answ")


def test_difficulty_counts():
    assert difficulty_counts(iter_questions(SECTIONS)) == DifficultyCount(easy=1, medium=1, hard=3)


def test_build_filter_key():
    key = build_filter_key("en", "hard", " Promise ", "section-1", bookmarked_only=True)
    assert key == "en|d=hard|s=section-1|bookmarked|q=promise"

    assert build_filter_key("en") == "en|d=all|s=all"
    assert build_filter_key("ru") != build_filter_key("en")
    assert build_filter_key("en", query="a") != build_filter_key("en", query="b")
