from dataclasses import asdict, dataclass
from typing import Optional

from prep_bank.config import LOAD_ERROR_MESSAGE, PRIMARY_DOCUMENT, SECONDARY_DOCUMENT
from prep_bank.models import TopicData
from prep_bank.parsing import map_titles, parse_markdown_file


@dataclass
class LoadResult:
    primary: Optional[TopicData] = None     # ru, with English titles mapped in
    secondary: Optional[TopicData] = None   # en
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        if not self.ok:
            return {"error": self.error}
        return {"ru": asdict(self.primary), "en": asdict(self.secondary)}


def load_study_data(
    primary_path: str = PRIMARY_DOCUMENT,
    secondary_path: str = SECONDARY_DOCUMENT,
) -> LoadResult:
    """Parse both documents and map the English titles onto the Russian tree."""
    try:
        primary = parse_markdown_file(primary_path, is_en=False)
        secondary = parse_markdown_file(secondary_path, is_en=True)
    except (OSError, UnicodeDecodeError):
        return LoadResult(error=LOAD_ERROR_MESSAGE)

    map_titles(primary, secondary)
    return LoadResult(primary=primary, secondary=secondary)
