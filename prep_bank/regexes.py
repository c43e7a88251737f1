import re


# ---------- REGEXES ----------
# building blocks

# "Q12." in the English document, "В12." (Вопрос) in the Russian one
QNUM_STR = r"[QВ](\d+)\."                     # group(1): declared question number

DIFFICULTY_MARKERS = {
    "🟢": "easy",
    "🟡": "medium",
    "🔴": "hard",
}
DIFFICULTY_STR = "[" + "".join(DIFFICULTY_MARKERS) + "]"

# "(12 questions)", "(12 вопросов)", "(3 deep-dive questions)"
COUNT_STR = r"\((\d+)\s+[\w-]+[\s\w-]*\)"


# ---------- LINE PATTERNS ----------

H1_RE = re.compile(r"^#\s+(.+?)\s*$")
H2_RE = re.compile(r"^##\s+(.*?)\s*$")
H3_RE = re.compile(r"^###\s+(.*?)\s*$")

# a line opening or closing a fenced block; "```npx expo start```" is inline
FENCE_MARK_RE = re.compile(r"^\s*```[^`]*$")

# a fence we can pull code out of: optional bare language tag, nothing else
FENCE_RE = re.compile(r"^\s*```(\w+)?\s*$")

# Table of contents chunk, either language
TOC_RE = re.compile(r"^(Table of Contents|Содержание)", re.IGNORECASE)

SECTION_HEADING_RE = re.compile(
    rf"""^
        (\d+)\.\s+                # section number        -> group(1)
        (.+?)\s*                  # title, lazy           -> group(2)
        {COUNT_STR}               # declared count        -> group(3)
    """,
    re.VERBOSE,
)

# a full "## 1. Title (12 questions)" line; closes any fence left open above it
SECTION_LINE_RE = re.compile(r"^##\s+\d+\.\s+.+?\s*" + COUNT_STR + r"\s*$")

# **Q1. 🟢 What is a bridge?**  -> group("header") = "Q1. 🟢 What is a bridge?"
QUESTION_HEADER_RE = re.compile(
    r"^\s*\*\*(?P<header>" + QNUM_STR + r"\s*.+?)\*\*\s*$"
)

# number token plus optional marker, stripped off to leave the title
QUESTION_PREFIX_RE = re.compile(
    r"^" + QNUM_STR + r"\s*" + DIFFICULTY_STR + r"?\s*"
)

__all__ = [
    # building blocks
    "QNUM_STR",
    "DIFFICULTY_MARKERS",
    "DIFFICULTY_STR",
    "COUNT_STR",

    # compiled regexes
    "H1_RE",
    "H2_RE",
    "H3_RE",
    "FENCE_MARK_RE",
    "FENCE_RE",
    "TOC_RE",
    "SECTION_HEADING_RE",
    "SECTION_LINE_RE",
    "QUESTION_HEADER_RE",
    "QUESTION_PREFIX_RE",
]
