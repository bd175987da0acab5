"""Edit-distance matching for typo tolerance.

Callers are expected to lower-case their inputs; ``is_similar`` and the
``find_*`` helpers do that themselves.
"""

from collections.abc import Iterable

DEFAULT_MAX_DISTANCE = 2


def levenshtein(source: str, target: str) -> int:
    """Number of single-character inserts, deletes, or substitutions."""
    if not source:
        return len(target)
    if not target:
        return len(source)

    rows = len(source) + 1
    cols = len(target) + 1
    table = [[0] * cols for _ in range(rows)]
    for i in range(rows):
        table[i][0] = i
    for j in range(cols):
        table[0][j] = j

    for i in range(1, rows):
        for j in range(1, cols):
            cost = 0 if source[i - 1] == target[j - 1] else 1
            table[i][j] = min(
                table[i - 1][j] + 1,
                table[i][j - 1] + 1,
                table[i - 1][j - 1] + cost,
            )

    return table[-1][-1]


def is_similar(
    source: str, target: str, max_distance: int = DEFAULT_MAX_DISTANCE
) -> bool:
    """True when two non-empty strings are within max_distance edits."""
    if not source or not target:
        return False
    return levenshtein(source.lower(), target.lower()) <= max_distance


def find_matches(
    word: str, candidates: Iterable[str], max_distance: int = DEFAULT_MAX_DISTANCE
) -> list[str]:
    """All candidates within max_distance, closest first."""
    word = word.lower()
    scored = [(levenshtein(word, c.lower()), c) for c in candidates]
    return [c for d, c in sorted(scored, key=lambda s: s[0]) if d <= max_distance]


def find_best_match(
    word: str, candidates: Iterable[str], max_distance: int = DEFAULT_MAX_DISTANCE
) -> str | None:
    matches = find_matches(word, candidates, max_distance)
    return matches[0] if matches else None


def is_partial_match(word: str, candidate: str) -> bool:
    """True when candidate starts with word."""
    if not word or not candidate:
        return False
    return candidate.lower().startswith(word.lower())


def find_partial_matches(word: str, candidates: Iterable[str]) -> list[str]:
    """Candidates starting with word, shortest first."""
    return sorted(
        (c for c in candidates if is_partial_match(word, c)),
        key=len,
    )
