import json
import re
from dataclasses import dataclass, asdict
from typing import List, Optional, Tuple

from prep_bank.config import (
    CODE_PLACEHOLDER,
    DEFAULT_CODE_LANGUAGE,
    DEFAULT_TITLES,
    FALLBACK_SUBSECTION_TITLE,
)
from prep_bank.filters import difficulty_counts
from prep_bank.models import (
    DifficultyCount,
    Question,
    Section,
    Subsection,
    TopicData,
)
from prep_bank.regexes import (
    DIFFICULTY_MARKERS,
    FENCE_MARK_RE,
    FENCE_RE,
    H1_RE,
    H2_RE,
    H3_RE,
    QNUM_STR,
    QUESTION_HEADER_RE,
    QUESTION_PREFIX_RE,
    SECTION_HEADING_RE,
    SECTION_LINE_RE,
    TOC_RE,
)


class AlignmentError(ValueError):
    """Raised by map_titles(strict=True) when the two documents don't line up."""


@dataclass
class ParseResult:
    sections: List[Section]
    questions: List[Question]


# ---------- LINE SCANNING ----------

def _is_blank(line: str) -> bool:
    return not line.strip()


def _split_at(
    lines: List[str],
    heading_re: re.Pattern,
    fence_breaker: Optional[re.Pattern] = None,
) -> List[Tuple[Optional[str], List[str]]]:
    """
    Split lines at headings matched by heading_re, ignoring anything inside
    fenced code blocks.

    A line matching fence_breaker ends an open fence before it is checked as a
    heading, so an unclosed fence can't swallow the rest of the document.

    Returns [(heading_text, body_lines), ...]. The first entry is always the
    preamble before the first heading, with heading_text None.
    """
    chunks: List[Tuple[Optional[str], List[str]]] = [(None, [])]
    in_fence = False

    for line in lines:
        if in_fence and fence_breaker is not None and fence_breaker.match(line):
            in_fence = False

        if FENCE_MARK_RE.match(line):
            in_fence = not in_fence
        elif not in_fence:
            m = heading_re.match(line)
            if m:
                chunks.append((m.group(1), []))
                continue
        chunks[-1][1].append(line)

    return chunks


def _find_title(lines: List[str]) -> Optional[str]:
    in_fence = False
    for line in lines:
        if FENCE_MARK_RE.match(line):
            in_fence = not in_fence
        elif not in_fence:
            m = H1_RE.match(line)
            if m:
                return m.group(1)
    return None


# ---------- QUESTIONS ----------

def parse_difficulty(text: str) -> str:
    for marker, level in DIFFICULTY_MARKERS.items():
        if marker in text:
            return level
    return "easy"


def extract_question_number(text: str) -> int:
    m = re.search(QNUM_STR, text)
    return int(m.group(1)) if m else 0


def extract_code_block(answer: str) -> Tuple[str, Optional[str], Optional[str]]:
    """
    Pull the first fenced code block out of an answer.

    Returns (prose, code, language). The block is replaced in the prose by
    CODE_PLACEHOLDER. Fences with extra text after the tag are skipped over, and
    an unclosed fence yields no code at all.
    """
    lines = answer.split("\n")
    i = 0
    while i < len(lines):
        if not FENCE_MARK_RE.match(lines[i]):
            i += 1
            continue

        opener = FENCE_RE.match(lines[i])
        end = i + 1
        while end < len(lines) and not FENCE_MARK_RE.match(lines[end]):
            end += 1
        if end >= len(lines):
            return answer, None, None

        if opener:
            code = "\n".join(lines[i + 1:end]).strip()
            prose = "\n".join(lines[:i] + [CODE_PLACEHOLDER] + lines[end + 1:]).strip()
            return prose, code, opener.group(1) or DEFAULT_CODE_LANGUAGE

        i = end + 1

    return answer, None, None


def _build_question(qid: str, header: str, body: List[str]) -> Question:
    answer = "\n".join(body).strip()
    prose, code, language = extract_code_block(answer)

    return Question(
        id=qid,
        number=extract_question_number(header),
        title=QUESTION_PREFIX_RE.sub("", header, count=1).strip(),
        answer=prose,
        difficulty=parse_difficulty(header),
        code=code,
        language=language,
    )


def _extract_questions(lines: List[str], all_questions: List[Question]) -> List[Question]:
    """
    Scan a subsection body for bold question headers.

    A header only counts when the next line is blank, and (after the first
    question) when the line before it is blank too. Everything up to the next
    header belongs to the current question's answer. Ids continue from
    all_questions, which is extended in place.
    """
    blocks: List[Tuple[str, List[str]]] = []
    in_fence = False
    prev_blank = True

    for i, line in enumerate(lines):
        if FENCE_MARK_RE.match(line):
            in_fence = not in_fence
        elif not in_fence and (prev_blank or not blocks):
            m = QUESTION_HEADER_RE.match(line)
            next_blank = i + 1 < len(lines) and _is_blank(lines[i + 1])
            if m and next_blank:
                blocks.append((m.group("header"), []))
                prev_blank = False
                continue

        if blocks:
            blocks[-1][1].append(line)
        prev_blank = _is_blank(line)

    found = []
    for header, body in blocks:
        question = _build_question(f"q-{len(all_questions)}", header, body)
        all_questions.append(question)
        found.append(question)
    return found


# ---------- PARSING ----------

def parse_document(text: str) -> ParseResult:
    """
    Parse one document into its section tree and flat question list.

    Malformed parts are dropped, never raised: a level-2 chunk whose heading
    isn't "<n>. <title> (<count> <words>)" is skipped, and subsections without
    any questions are left out.
    """
    sections: List[Section] = []
    questions: List[Question] = []

    chunks = _split_at(text.splitlines(), H2_RE, fence_breaker=SECTION_LINE_RE)

    # chunk 0 is the preamble; indexes of skipped chunks are still consumed
    for section_index, (heading, body) in enumerate(chunks):
        if heading is None or TOC_RE.match(heading):
            continue

        m = SECTION_HEADING_RE.match(heading)
        if not m:
            continue

        number = int(m.group(1))
        section = Section(
            id=f"section-{number}",
            number=number,
            title=m.group(2).strip(),
            question_count=int(m.group(3)),
        )

        parts = _split_at(body, H3_RE)
        if len(parts) > 1:
            for sub_index, (sub_title, sub_body) in enumerate(parts[1:]):
                found = _extract_questions(sub_body, questions)
                if found:
                    section.subsections.append(Subsection(
                        id=f"subsection-{section_index}-{sub_index}",
                        title=sub_title,
                        questions=found,
                    ))
        else:
            found = _extract_questions(body, questions)
            if found:
                section.subsections.append(Subsection(
                    id=f"subsection-{section_index}-0",
                    title=FALLBACK_SUBSECTION_TITLE,
                    questions=found,
                ))

        sections.append(section)

    return ParseResult(sections=sections, questions=questions)


def parse_topic_data(text: str, is_en: bool = False) -> TopicData:
    title = _find_title(text.splitlines()) or DEFAULT_TITLES["en" if is_en else "ru"]
    result = parse_document(text)

    return TopicData(
        title=title,
        title_en=title if is_en else "",
        sections=result.sections,
        total_questions=len(result.questions),
        difficulty_count=difficulty_counts(result.questions),
    )


def parse_markdown_file(path: str, is_en: bool = False) -> TopicData:
    with open(path, "r", encoding="utf-8") as f:
        text = f.read()
    return parse_topic_data(text, is_en=is_en)


# ---------- CROSS-LANGUAGE TITLES ----------

def check_alignment(primary: TopicData, secondary: TopicData) -> List[str]:
    """List every structural mismatch between two parallel documents."""
    issues = []

    if len(primary.sections) != len(secondary.sections):
        issues.append(
            f"section count differs: {len(primary.sections)} vs {len(secondary.sections)}"
        )

    for p_sec, s_sec in zip(primary.sections, secondary.sections):
        if p_sec.number != s_sec.number:
            issues.append(f"{p_sec.id}: paired with {s_sec.id}")
        if len(p_sec.subsections) != len(s_sec.subsections):
            issues.append(
                f"{p_sec.id}: subsection count differs: "
                f"{len(p_sec.subsections)} vs {len(s_sec.subsections)}"
            )

    return issues


def map_titles(primary: TopicData, secondary: TopicData, strict: bool = False) -> None:
    """
    Copy secondary section/subsection titles into primary's title_en, by position.

    Nothing is matched by content. Indexes missing from secondary keep an
    empty title_en. With strict=True a misaligned pair raises AlignmentError
    and primary is left untouched.
    """
    if strict:
        issues = check_alignment(primary, secondary)
        if issues:
            raise AlignmentError("; ".join(issues))

    for i, section in enumerate(primary.sections):
        if i >= len(secondary.sections):
            break
        other = secondary.sections[i]
        section.title_en = other.title

        for j, sub in enumerate(section.subsections):
            if j < len(other.subsections):
                sub.title_en = other.subsections[j].title


# ---------- JSON ----------

def save_topic_json(topic: TopicData, output_path: str):
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(asdict(topic), f, indent=2, ensure_ascii=False)


def topic_from_dict(data: dict) -> TopicData:
    sections = []
    for s in data["sections"]:
        subsections = [
            Subsection(
                id=sub["id"],
                title=sub["title"],
                title_en=sub.get("title_en", ""),
                questions=[Question(**q) for q in sub["questions"]],
            )
            for sub in s["subsections"]
        ]
        sections.append(Section(
            id=s["id"],
            number=s["number"],
            title=s["title"],
            title_en=s.get("title_en", ""),
            question_count=s["question_count"],
            subsections=subsections,
        ))

    return TopicData(
        title=data["title"],
        title_en=data.get("title_en", ""),
        sections=sections,
        total_questions=data["total_questions"],
        difficulty_count=DifficultyCount(**data["difficulty_count"]),
    )


def load_topic_json(path: str) -> TopicData:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return topic_from_dict(data)
