"""
Topic Detector

Maps free-text messages to skill categories by case-insensitive substring
matching against a keyword table. The table is plain data and can be
replaced by a JSON file (TOPIC_KEYWORDS_PATH).
"""

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Mapping, Optional

from mentor.exceptions import ConfigurationError
from mentor.models.skill_graph import (
    COMPLEXITY_ANALYSIS,
    CPP_SYNTAX,
    DP,
    DSA,
    RECURSION,
    SYSTEM_DESIGN,
    SkillCategory,
)

logger = logging.getLogger("mentor.topic_detector")

TopicKeywords = Mapping[str, tuple[SkillCategory, ...]]

DEFAULT_TOPIC_KEYWORDS: TopicKeywords = {
    "recursion": (RECURSION, DSA),
    "recursive": (RECURSION, DSA),
    "dp": (DP, DSA),
    "dynamic": (DP, DSA),
    "design": (SYSTEM_DESIGN,),
    "scaling": (SYSTEM_DESIGN,),
    "cpp": (CPP_SYNTAX,),
    "c++": (CPP_SYNTAX,),
    "vector": (CPP_SYNTAX, DSA),
    "complexity": (COMPLEXITY_ANALYSIS,),
    "big o": (COMPLEXITY_ANALYSIS,),
}


def detect_topics(text: str, keywords: Optional[TopicKeywords] = None) -> set[SkillCategory]:
    """
    Return every category whose keyword occurs in the text.

    An empty result means "no topic signal", not an error.
    """
    table = DEFAULT_TOPIC_KEYWORDS if keywords is None else keywords
    lowered = text.lower()
    topics: set[SkillCategory] = set()
    for keyword, categories in table.items():
        if keyword in lowered:
            topics.update(categories)
    return topics


def load_topic_keywords(path: str | Path) -> dict[str, tuple[SkillCategory, ...]]:
    """
    Load a keyword table from a JSON object of ``{keyword: [category, ...]}``.

    Keywords are lowercased so matching stays case-insensitive.

    Raises:
        ConfigurationError: file missing, not valid JSON, or wrong shape
    """
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigurationError("topic_keywords_path", f"cannot read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError("topic_keywords_path", f"invalid JSON in {path}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigurationError("topic_keywords_path", "expected a JSON object of keyword -> categories")

    table: dict[str, tuple[SkillCategory, ...]] = {}
    for keyword, categories in raw.items():
        if not keyword.strip():
            raise ConfigurationError("topic_keywords_path", "keywords must contain non-whitespace text")
        if (
            not isinstance(categories, list)
            or not categories
            or not all(isinstance(c, str) and c for c in categories)
        ):
            raise ConfigurationError(
                "topic_keywords_path",
                f"keyword {keyword!r} must map to a non-empty list of category names",
            )
        table[keyword.lower()] = tuple(categories)

    logger.info(f"Loaded {len(table)} topic keywords from {path}")
    return table


@lru_cache(maxsize=8)
def get_topic_keywords(path: Optional[str] = None) -> TopicKeywords:
    """Keyword table for the given override path, or the built-in table. Cached per path."""
    if not path:
        return DEFAULT_TOPIC_KEYWORDS
    return load_topic_keywords(path)
