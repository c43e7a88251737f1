# Paths are relative to the repo root, like the rest of the app's data files.
PRIMARY_DOCUMENT = "data/interview-prep-ru.md"
SECONDARY_DOCUMENT = "data/interview-prep-en.md"

PROGRESS_DIR = "output"
PROGRESS_KEY = "interview-progress"

CODE_PLACEHOLDER = "[CODE]"
DEFAULT_CODE_LANGUAGE = "typescript"
FALLBACK_SUBSECTION_TITLE = "Questions"

RETRY_SUFFIX = "-retry"

# Used when a document has no level-1 heading
DEFAULT_TITLES = {
    "ru": "Подготовка к собеседованию",
    "en": "React Native Interview Prep",
}

LOAD_ERROR_MESSAGE = "Failed to load data"
