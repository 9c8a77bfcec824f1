"""Word, character, paragraph and sentence counts."""

import math
import re
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from loguru import logger

from inkwell.config import WORDS_PER_PAGE

if TYPE_CHECKING:
    from inkwell.models.project import Project

_WORD_SEPARATORS = re.compile(r"[ \n\r\t]+")
_PARAGRAPH_SEPARATORS = re.compile(r"\r\n\r\n|\n\n|\r\r")
_SENTENCE_SEPARATORS = re.compile(r"[.!?]")
_WHITESPACE = re.compile(r"[ \n\r\t]")


@dataclass(frozen=True)
class TextStatistics:
    """Counts for one piece of text."""

    word_count: int = 0
    character_count: int = 0
    character_count_no_spaces: int = 0
    paragraph_count: int = 0
    sentence_count: int = 0
    line_count: int = 0


def calculate_statistics(text: str) -> TextStatistics:
    if not text:
        return TextStatistics()

    words = [w for w in _WORD_SEPARATORS.split(text) if w]
    paragraphs = [p for p in _PARAGRAPH_SEPARATORS.split(text) if p]
    sentences = [s for s in _SENTENCE_SEPARATORS.split(text) if s.strip()]

    return TextStatistics(
        word_count=len(words),
        character_count=len(text),
        character_count_no_spaces=len(_WHITESPACE.sub("", text)),
        paragraph_count=len(paragraphs),
        sentence_count=len(sentences),
        line_count=len(text.split("\n")),
    )


def page_count(word_count: int) -> int:
    """Estimated pages, rounding up."""
    return math.ceil(word_count / WORDS_PER_PAGE) if word_count > 0 else 0


def update_project_statistics(project: "Project") -> None:
    """Recompute the totals on project.metadata.statistics.

    Walks every active document, forcing lazy loads. Trashed documents are
    soft-deleted and do not count.
    """
    stats = project.metadata.statistics
    totals = {
        "words": 0,
        "characters": 0,
        "no_spaces": 0,
        "paragraphs": 0,
        "sentences": 0,
    }

    for doc in project.active_documents():
        counts = doc.statistics(project.directory)
        totals["words"] += counts.word_count
        totals["characters"] += counts.character_count
        totals["no_spaces"] += counts.character_count_no_spaces
        totals["paragraphs"] += counts.paragraph_count
        totals["sentences"] += counts.sentence_count

    stats.total_word_count = totals["words"]
    stats.total_character_count = totals["characters"]
    stats.total_character_count_no_spaces = totals["no_spaces"]
    stats.paragraph_count = totals["paragraphs"]
    stats.sentence_count = totals["sentences"]
    stats.total_page_count = page_count(totals["words"])
    stats.last_calculated_at = datetime.now()

    logger.debug(
        "Statistics for {!r}: {} words, {} pages",
        project.name, stats.total_word_count, stats.total_page_count,
    )
