"""
Job-Title Search - tiered fuzzy ranking over the ROME job-title referential

Ranks a static list of job titles against a free-text query. There is no
index: every title is scored on each request, which is fast enough for the
~11k titles in the referential.

Scoring Tiers (first match wins):
    100  label or short label equals the query
     90  label or short label starts with the query
     80  label or short label contains the query
  80/95  every query word appears in label or short label
         (50 + 30 * matched/total, +15 when the words appear in query order)
      0  no match, excluded

All comparisons use normalize_text(): lower-case, accents stripped, and
"/", "-" and whitespace runs collapsed to a single space.

Key Classes:
    - JobTitle: One entry of the referential
    - JobTitleCache: File-backed cache with TTL and mtime invalidation
"""

import json
import logging
import re
import time
import unicodedata
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from jobtrackr.middleware.metrics import record_job_title_cache_reload

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50
MAX_LIMIT = 200

EXACT_SCORE = 100
PREFIX_SCORE = 90
CONTAINS_SCORE = 80
ALL_WORDS_BASE_SCORE = 50
ALL_WORDS_RANGE = 30
WORD_ORDER_BONUS = 15

# Encodings tried when the referential is not valid UTF-8
FALLBACK_ENCODINGS = ("latin-1", "cp1252")
REPLACEMENT_CHAR = "\ufffd"

_COMBINING_MARKS = re.compile("[\u0300-\u036f]")
_SEPARATORS = re.compile(r"[/\-\s]+")


class JobTitlesUnavailableError(Exception):
    """The job-title referential could not be loaded and no cached copy exists."""


@dataclass(frozen=True)
class JobTitle:
    label: str
    short_label: str
    code: int
    code_rome: str


# ==================== Normalization & Scoring ====================

def strip_accents(text: str) -> str:
    return _COMBINING_MARKS.sub("", unicodedata.normalize("NFD", text))


def normalize_text(text: str) -> str:
    """
    Normalize text for comparison.

    Example:
        >>> normalize_text("  Développeur / Développeuse-Web ")
        'developpeur developpeuse web'
    """
    return _SEPARATORS.sub(" ", strip_accents(text.lower())).strip()


def _words_in_order(words: Sequence[str], label: str, short_label: str) -> bool:
    """
    Check that the words appear left to right.

    For each word, take the furthest position found in either field after
    the previous word's position; a missing word breaks the order.
    """
    last_index = -1
    for word in words:
        index = max(
            label.find(word, last_index + 1),
            short_label.find(word, last_index + 1),
        )
        if index == -1:
            return False
        last_index = index
    return True


def score_job_title(label: str, short_label: str, query: str, words: Sequence[str]) -> float:
    """
    Score one title against a query.

    Args:
        label: Normalized label
        short_label: Normalized short label
        query: Normalized query (non-empty)
        words: Query split on whitespace

    Returns:
        Score in [0, 100]; 0 means no match
    """
    fields = (label, short_label)

    if query in fields:
        return EXACT_SCORE

    # A raw prefix also covers "query followed by a space"
    if any(text.startswith(query) for text in fields):
        return PREFIX_SCORE

    # Likewise, a raw substring covers the space-delimited phrase
    if any(query in text for text in fields):
        return CONTAINS_SCORE

    if not words:
        return 0

    matching = sum(1 for word in words if word in label or word in short_label)
    if matching < len(words):
        return 0

    order_bonus = 0
    if len(words) > 1 and _words_in_order(words, label, short_label):
        order_bonus = WORD_ORDER_BONUS

    return ALL_WORDS_BASE_SCORE + (matching / len(words)) * ALL_WORDS_RANGE + order_bonus


def collation_key(label: str) -> Tuple[str, str]:
    """Accent- and case-insensitive sort key, with the raw label as tie-breaker."""
    return strip_accents(label).casefold(), label


def clamp_limit(limit: Optional[int]) -> int:
    if limit is None:
        return DEFAULT_LIMIT
    return max(1, min(limit, MAX_LIMIT))


def score_job_titles(titles: Iterable[JobTitle], query: str) -> List[Tuple[JobTitle, float]]:
    """Return (title, score) for every matching title, best first."""
    normalized_query = normalize_text(query)
    words = normalized_query.split()

    scored = []
    for title in titles:
        score = score_job_title(
            normalize_text(title.label),
            normalize_text(title.short_label),
            normalized_query,
            words,
        )
        if score > 0:
            scored.append((title, score))

    scored.sort(key=lambda item: (-item[1], collation_key(item[0].label)))
    return scored


def rank_job_titles(
    titles: Sequence[JobTitle],
    query: Optional[str],
    limit: Optional[int] = DEFAULT_LIMIT,
) -> List[JobTitle]:
    """
    Rank titles against ``query`` and keep the best ``limit``.

    An empty query (or one with nothing left after normalization) returns
    the first ``limit`` titles in their original order.

    Args:
        titles: Candidate titles
        query: Free-text query
        limit: Maximum results (default 50, capped at 200)

    Returns:
        Titles ordered by score, then label
    """
    limit = clamp_limit(limit)

    if not query or not normalize_text(query):
        return list(titles[:limit])

    return [title for title, _ in score_job_titles(titles, query)[:limit]]


# ==================== Loading ====================

def decode_job_titles(raw: bytes) -> str:
    """
    Decode the referential file.

    UTF-8 first; if that produces replacement characters, keep the first
    fallback encoding that produces fewer of them.
    """
    text = raw.decode("utf-8", errors="replace")
    bad_chars = text.count(REPLACEMENT_CHAR)
    if not bad_chars:
        return text

    for encoding in FALLBACK_ENCODINGS:
        try:
            candidate = raw.decode(encoding)
        except UnicodeDecodeError:
            continue
        if candidate.count(REPLACEMENT_CHAR) < bad_chars:
            logger.info(f"Job titles decoded with fallback encoding {encoding}")
            return candidate

    return text


def parse_job_titles(records: Iterable[Dict[str, Any]]) -> List[JobTitle]:
    """Convert raw ROME records, dropping those flagged as rarely used (peu_usite == "O")."""
    return [
        JobTitle(
            label=record["libelle"],
            short_label=record.get("libelle_court") or record["libelle"],
            code=int(record["code_ogr"]),
            code_rome=record.get("code_rome_parent", ""),
        )
        for record in records
        if record.get("peu_usite") != "O"
    ]


def load_job_titles_file(path: Path) -> List[JobTitle]:
    """
    Read and parse the job-title JSON file.

    Raises:
        OSError: if the file cannot be read
        ValueError: if it is not a JSON array of job-title records
    """
    payload = json.loads(decode_job_titles(Path(path).read_bytes()))
    if not isinstance(payload, list):
        raise ValueError("Job titles file must contain a JSON array")
    return parse_job_titles(payload)


# ==================== Cache ====================

class JobTitleCache:
    """
    In-process cache of the job-title referential.

    Reloads when empty, when older than ``ttl`` seconds, or when the file's
    modification time changes. If a reload fails the previous copy keeps
    being served; with no previous copy the failure is raised as
    JobTitlesUnavailableError.

    Attributes:
        data: Cached titles (None until the first successful load)
        loaded_at: Clock value of the last successful load
        source_modified_at: File mtime seen at the last successful load
    """

    def __init__(
        self,
        path: Path,
        ttl: float = 3600,
        loader: Callable[[Path], List[JobTitle]] = load_job_titles_file,
        clock: Callable[[], float] = time.time,
    ):
        self.path = Path(path)
        self.ttl = ttl
        self.loader = loader
        self.clock = clock
        self.data: Optional[List[JobTitle]] = None
        self.loaded_at: Optional[float] = None
        self.source_modified_at: Optional[float] = None

    def should_reload(
        self, now: float, ttl: float, current_source_modified_at: Optional[float]
    ) -> bool:
        """Pure reload decision from the cache state and the given inputs."""
        if self.data is None or self.loaded_at is None:
            return True
        if now - self.loaded_at >= ttl:
            return True
        return current_source_modified_at != self.source_modified_at

    def get(self) -> List[JobTitle]:
        """
        Return the cached titles, reloading them first when needed.

        Raises:
            JobTitlesUnavailableError: if loading fails and nothing is cached
        """
        now = self.clock()
        try:
            modified_at = self.path.stat().st_mtime
            if not self.should_reload(now, self.ttl, modified_at):
                return self.data
            titles = self.loader(self.path)
        except Exception as e:
            if self.data is not None:
                logger.warning(f"Job titles reload failed, serving stale cache: {e}")
                record_job_title_cache_reload("stale")
                return self.data
            record_job_title_cache_reload("failed")
            raise JobTitlesUnavailableError(f"Could not load job titles from {self.path}") from e

        self.data = titles
        self.loaded_at = now
        self.source_modified_at = modified_at
        record_job_title_cache_reload("loaded")
        logger.info(f"Loaded {len(titles)} job titles from {self.path}")
        return titles

    def invalidate(self) -> None:
        self.loaded_at = None
