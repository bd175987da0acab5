"""Word lookups and synonym normalization.

The same spelling can be a different part of speech ("light" the verb and
"light" the noun), so every lookup is keyed by (word, word_type).
"""

from collections.abc import Iterable

from .world import VocabularyEntry

VERB = "verb"
NOUN = "noun"
ADJECTIVE = "adjective"
PREPOSITION = "preposition"
ARTICLE = "article"
CONJUNCTION = "conjunction"
DIRECTION = "direction"

WORD_TYPES = (VERB, NOUN, ADJECTIVE, PREPOSITION, ARTICLE, CONJUNCTION, DIRECTION)


class Vocabulary:
    """Case-insensitive table of words and their canonical forms."""

    def __init__(self, entries: Iterable[VocabularyEntry] = ()):
        self._entries: dict[tuple[str, str], VocabularyEntry] = {}
        for entry in entries:
            self.add(entry)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: tuple[str, str]) -> bool:
        word, word_type = key
        return (word.lower(), word_type.lower()) in self._entries

    def add(self, entry: VocabularyEntry) -> None:
        key = (entry.word.lower(), entry.word_type.lower())
        self._entries[key] = entry

    def lookup(self, word: str, word_type: str) -> VocabularyEntry | None:
        return self._entries.get((word.lower(), word_type.lower()))

    def canonical_form(self, word: str, word_type: str) -> str | None:
        """The canonical form recorded for word, if any."""
        entry = self.lookup(word, word_type)
        if entry is None or not entry.canonical_form:
            return None
        return entry.canonical_form.lower()

    def normalize(self, word: str, word_type: str) -> str:
        """Single-hop synonym lookup; unknown words normalize to themselves."""
        return self.canonical_form(word, word_type) or word.lower()

    def normalize_verb(self, word: str) -> str:
        return self.normalize(word, VERB)

    def normalize_noun(self, word: str) -> str:
        return self.normalize(word, NOUN)

    def normalize_adjective(self, word: str) -> str:
        return self.normalize(word, ADJECTIVE)

    def words_in_category(self, category: str) -> list[VocabularyEntry]:
        category = category.lower()
        return [
            e
            for e in self._entries.values()
            if e.category and e.category.lower() == category
        ]

    def entries(self, word_type: str | None = None) -> list[VocabularyEntry]:
        if word_type is None:
            return list(self._entries.values())
        word_type = word_type.lower()
        return [e for e in self._entries.values() if e.word_type == word_type]
