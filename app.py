import os
import time

import streamlit as st

from prep_bank.config import PRIMARY_DOCUMENT, SECONDARY_DOCUMENT, PROGRESS_DIR
from prep_bank.filters import (
    build_filter_key,
    count_questions,
    filter_sections,
    iter_questions,
    select_questions,
)
from prep_bank.loader import load_study_data
from prep_bank.models import DIFFICULTIES, Question
from prep_bank.progress import JsonFileStorage, ProgressStore, StorageError
from prep_bank.quiz import QuizEngine, QuizState, format_time_ago

# Configure page *before* other st.* calls
st.set_page_config(page_title="Interview Prep", layout="wide")

DIFFICULTY_EMOJI = {"easy": "🟢", "medium": "🟡", "hard": "🔴"}
DIFFICULTY_OPTIONS = ["all", *DIFFICULTIES]


def t(language: str, ru: str, en: str) -> str:
    return ru if language == "ru" else en


# -------------------------------------------------
# Data + progress, loaded once
# -------------------------------------------------
@st.cache_data
def load_data():
    return load_study_data(PRIMARY_DOCUMENT, SECONDARY_DOCUMENT)


def get_store() -> ProgressStore:
    if "progress_store" not in st.session_state:
        st.session_state["progress_store"] = ProgressStore(JsonFileStorage(PROGRESS_DIR))
    return st.session_state["progress_store"]


# -------------------------------------------------
# Question list
# -------------------------------------------------
def render_question(q: Question, store: ProgressStore, language: str):
    done = "✅ " if store.is_completed(q.id) else ""
    star = "⭐ " if store.is_bookmarked(q.id) else ""

    with st.expander(f"{done}{star}{DIFFICULTY_EMOJI[q.difficulty]} {q.number}. {q.title}"):
        st.markdown(q.answer)
        if q.code:
            st.code(q.code, language=q.language)

        c1, c2 = st.columns(2)
        with c1:
            label = t(language, "Отметить изученным", "Mark completed")
            if st.button(label, key=f"done-{q.id}"):
                store.toggle_completed(q.id)
                store.set_last_visited(q.id)
                st.rerun()
        with c2:
            label = t(language, "Закладка", "Bookmark")
            if st.button(label, key=f"bm-{q.id}"):
                store.toggle_bookmarked(q.id)
                st.rerun()


# -------------------------------------------------
# Quiz mode
# -------------------------------------------------
def exit_quiz():
    st.session_state["quiz_mode"] = False
    st.session_state["quiz_prompt"] = False
    st.session_state["show_answer"] = False


def render_quiz(
    engine: QuizEngine,
    questions: list[Question],
    all_questions: list[Question],
    filter_key: str,
    language: str,
):
    session = engine.session

    # Unfinished session for these filters: continue or start over
    if st.session_state.get("quiz_prompt") and session is not None:
        st.subheader(t(language, "Найдена незавершённая сессия", "Unfinished Session Found"))
        ago = format_time_ago(session.started_at, time.time(), language)
        st.caption(
            t(language, "Прогресс", "Progress")
            + f": {engine.completion_percentage()}% • "
            + t(language, "Начата", "Started")
            + f" {ago}"
        )
        c1, c2, c3 = st.columns(3)
        if c1.button(t(language, "Продолжить", "Continue")):
            engine.resume()
            st.session_state["quiz_prompt"] = False
            st.rerun()
        if c2.button(t(language, "Начать заново", "Start Over"), disabled=not questions):
            engine.start_session([q.id for q in questions], filter_key)
            st.session_state["quiz_prompt"] = False
            st.rerun()
        if c3.button(t(language, "Вернуться назад", "Go Back")):
            exit_quiz()
            st.rerun()
        return

    session_questions = engine.session_questions(all_questions)
    if not session_questions:
        st.warning(t(language, "Нет вопросов для quiz", "No questions to quiz on"))
        if st.button(t(language, "Назад", "Back")):
            engine.end_session()
            exit_quiz()
            st.rerun()
        return

    if engine.state() == QuizState.COMPLETE:
        st.subheader(t(language, "Quiz завершён! 🎉", "Quiz Complete! 🎉"))
        c1, c2 = st.columns(2)
        c1.metric(t(language, "Знаю", "Known"), len(session.known_ids))
        c2.metric(t(language, "Учить", "To Learn"), len(session.unknown_ids))

        b1, b2, b3 = st.columns(3)
        if session.unknown_ids and b1.button(
            t(language, f"Повторить {len(session.unknown_ids)} вопросов",
              f"Review {len(session.unknown_ids)} Questions")
        ):
            engine.retry_unknown()
            st.rerun()
        if b2.button(t(language, "Заново все", "Restart All")):
            engine.restart()
            st.rerun()
        if b3.button(t(language, "Завершить", "Finish")):
            engine.end_session()
            exit_quiz()
            st.rerun()
        return

    by_id = {q.id: q for q in session_questions}
    current = by_id.get(engine.current_question_id())

    if st.button("← " + t(language, "Выйти (прогресс сохранён)", "Exit (progress saved)")):
        exit_quiz()
        st.rerun()

    st.progress(engine.completion_percentage())
    st.caption(
        f"{session.current_index + 1} / {len(session.question_ids)} · "
        f"✓ {len(session.known_ids)} · ✗ {len(session.unknown_ids)}"
    )

    if current is None:
        st.warning(t(language, "Вопрос не найден", "Question not found"))
    else:
        st.markdown(f"### {DIFFICULTY_EMOJI[current.difficulty]} {current.title}")
        if st.session_state.get("show_answer"):
            st.markdown(current.answer)
            if current.code:
                st.code(current.code, language=current.language)

    c1, c2, c3, c4, c5 = st.columns(5)
    if c1.button("◀"):
        engine.advance(-1)
        st.session_state["show_answer"] = False
        st.rerun()
    if c2.button("▶"):
        engine.advance(1)
        st.session_state["show_answer"] = False
        st.rerun()
    if c3.button(t(language, "Показать ответ", "Show Answer")):
        st.session_state["show_answer"] = not st.session_state.get("show_answer", False)
        st.rerun()
    if current is not None and c4.button(t(language, "Не знаю", "Don't Know")):
        engine.mark_unknown(current.id)
        engine.advance(1)
        st.session_state["show_answer"] = False
        st.rerun()
    if current is not None and c5.button(t(language, "Знаю", "Know")):
        engine.mark_known(current.id)
        engine.advance(1)
        st.session_state["show_answer"] = False
        st.rerun()


# -------------------------------------------------
# STREAMLIT APPLICATION
# -------------------------------------------------
def main():
    for path in (PRIMARY_DOCUMENT, SECONDARY_DOCUMENT):
        if not os.path.exists(path):
            st.error(f"Missing source document: {path}")
            return

    result = load_data()
    if not result.ok:
        st.error(result.error)
        return

    try:
        store = get_store()
    except StorageError as e:
        st.error(f"Could not read saved progress: {e}")
        return
    engine = QuizEngine(store)

    # any progress write below can fail the same way
    try:
        render_app(result, store, engine)
    except StorageError as e:
        st.error(f"Could not save progress: {e}")


def render_app(result, store: ProgressStore, engine: QuizEngine):
    language = st.sidebar.radio("Language", ["ru", "en"], horizontal=True)
    data = result.primary if language == "ru" else result.secondary

    st.title(data.title)
    if language == "ru" and result.secondary is not None:
        st.caption(result.secondary.title)

    # --------------------------
    # Dashboard
    # --------------------------
    stats = store.stats(data.total_questions)
    c1, c2, c3, c4 = st.columns(4)
    c1.metric(t(language, "Всего вопросов", "Total questions"), data.total_questions)
    c2.metric("🟢", data.difficulty_count.easy)
    c3.metric("🟡", data.difficulty_count.medium)
    c4.metric("🔴", data.difficulty_count.hard)
    st.progress(stats.percentage)
    st.caption(
        t(language, "Изучено", "Completed") + f": {stats.completed} · "
        + t(language, "Закладки", "Bookmarked") + f": {stats.bookmarked} · "
        + t(language, "Осталось", "Remaining") + f": {stats.remaining}"
    )

    # --------------------------
    # Filters
    # --------------------------
    st.sidebar.markdown("### " + t(language, "Фильтры", "Filters"))
    difficulty = st.sidebar.selectbox(
        t(language, "Сложность", "Difficulty"),
        options=DIFFICULTY_OPTIONS,
        format_func=lambda d: d if d == "all" else f"{DIFFICULTY_EMOJI[d]} {d}",
    )
    section_labels = {"all": t(language, "Все разделы", "All sections")}
    for s in data.sections:
        label = f"{s.number}. {s.title}"
        if s.title_en and s.title_en != s.title:
            label += f" ({s.title_en})"
        section_labels[s.id] = label
    section_id = st.sidebar.selectbox(
        t(language, "Раздел", "Section"),
        options=list(section_labels),
        format_func=lambda sid: section_labels[sid],
    )
    query = st.sidebar.text_input(t(language, "Поиск", "Search"), value="")
    bookmarked_only = st.sidebar.checkbox(t(language, "Только закладки", "Bookmarked only"))
    bookmarked_ids = store.progress.bookmarked_questions if bookmarked_only else None

    if st.sidebar.button(t(language, "Сбросить прогресс", "Reset progress")):
        store.reset_progress()
        st.sidebar.success(t(language, "Прогресс сброшен", "Progress reset"))

    filter_key = build_filter_key(language, difficulty, query, section_id, bookmarked_only)
    filtered = select_questions(data.sections, difficulty, query, section_id, bookmarked_ids)

    # --------------------------
    # Quiz mode
    # --------------------------
    if st.session_state.get("quiz_mode"):
        render_quiz(engine, filtered, list(iter_questions(data.sections)), filter_key, language)
        return

    if st.button(t(language, "Начать quiz", "Start quiz"), disabled=not filtered):
        state = engine.enter([q.id for q in filtered], filter_key)
        if state == QuizState.NO_SESSION:
            return
        st.session_state["quiz_mode"] = True
        st.session_state["quiz_prompt"] = state in (QuizState.RESUMABLE, QuizState.COMPLETE)
        st.session_state["show_answer"] = False
        st.rerun()

    # --------------------------
    # Question list
    # --------------------------
    n = count_questions(data.sections, difficulty, query, section_id, bookmarked_ids)
    st.info(t(language, f"Найдено вопросов: **{n}**", f"Questions found: **{n}**"))
    if n == 0:
        st.warning(t(language, "Нет вопросов по этим фильтрам", "No questions found with the current filters"))
        return

    full_sections = {s.id: s for s in data.sections}
    for section in filter_sections(data.sections, difficulty, query, section_id, bookmarked_ids):
        st.header(f"{section.number}. {section.title}")
        # declared count in the heading vs what was actually parsed
        parsed = full_sections[section.id].parsed_count
        if parsed != section.question_count:
            st.caption(f"{parsed} / {section.question_count}")
        for sub in section.subsections:
            st.subheader(sub.title)
            for q in sub.questions:
                render_question(q, store, language)


if __name__ == "__main__":
    main()
