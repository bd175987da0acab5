"""Turn a raw input line into a structured command.

parse(raw_input) -> ParsedInput is the entry point. The first word is the
verb. The rest is split at the first preposition into direct objects
(which may be joined by "and"/"then") and a single indirect object.
Nothing is looked up here; matching words to things is the resolver's job.
"""

from dataclasses import dataclass, field

PREPOSITIONS = {
    # location
    "in",
    "into",
    "inside",
    "on",
    "onto",
    "upon",
    "under",
    "underneath",
    "beneath",
    "behind",
    "beside",
    "near",
    # instrument
    "with",
    "using",
    # direction
    "to",
    "toward",
    "towards",
    "from",
    "at",
    # other
    "through",
    "over",
    "across",
    "around",
    "about",
}

# Prepositions spelled with more than one word.
COMPOUND_PREPOSITIONS = {("next", "to"): "next to"}

PREPOSITION_SYNONYMS = {
    "into": "in",
    "inside": "in",
    "onto": "on",
    "upon": "on",
    "underneath": "under",
    "beneath": "under",
    "using": "with",
    "toward": "to",
    "towards": "to",
    "next to": "beside",
}

ARTICLES = {"the", "a", "an", "some"}

CONJUNCTIONS = {"and", "then"}

MULTI_OBJECT_KEYWORDS = {"all", "everything", "each", "every"}

PRONOUNS = {"it", "that", "this", "them", "these", "those"}

# Direct-object phrase standing for "everything in scope".
ALL_MARKER = "all"


@dataclass
class ParsedInput:
    """A parsed command line."""

    verb: str = ""
    direct_objects: list[str] = field(default_factory=list)
    preposition: str | None = None
    indirect_object: str | None = None
    raw_input: str = ""
    is_multi_object: bool = False
    uses_pronoun: bool = False

    @property
    def args(self) -> list[str]:
        """Direct objects followed by preposition and indirect object."""
        args = list(self.direct_objects)
        if self.preposition and self.indirect_object:
            args += [self.preposition, self.indirect_object]
        return args

    @property
    def is_simple(self) -> bool:
        return not self.preposition

    @property
    def has_multiple_objects(self) -> bool:
        return len(self.direct_objects) > 1

    @property
    def is_empty(self) -> bool:
        return not self.verb


def is_preposition(word: str) -> bool:
    return word.lower() in PREPOSITIONS


def is_article(word: str) -> bool:
    return word.lower() in ARTICLES


def is_conjunction(word: str) -> bool:
    return word.lower() in CONJUNCTIONS


def is_multi_object_keyword(word: str) -> bool:
    return word.lower() in MULTI_OBJECT_KEYWORDS


def is_pronoun(word: str) -> bool:
    return word.lower() in PRONOUNS


def normalize_preposition(preposition: str) -> str:
    """Map a preposition to its canonical form ("into" -> "in")."""
    preposition = preposition.lower()
    return PREPOSITION_SYNONYMS.get(preposition, preposition)


def strip_articles(words: list[str]) -> list[str]:
    return [w for w in words if not is_article(w)]


def split_by_conjunction(text: str) -> list[str]:
    """Split "lamp and the sword" into ["lamp", "sword"]."""
    phrases = []
    current: list[str] = []
    for word in text.split():
        if is_conjunction(word):
            if current:
                phrases.append(" ".join(current))
                current = []
        elif not is_article(word):
            current.append(word)
    if current:
        phrases.append(" ".join(current))
    return phrases


def _find_preposition(words: list[str]) -> tuple[int, int, str] | None:
    """Return (index, token count, preposition) of the first preposition."""
    for i, word in enumerate(words):
        pair = tuple(words[i : i + 2])
        if pair in COMPOUND_PREPOSITIONS:
            return i, 2, COMPOUND_PREPOSITIONS[pair]
        if is_preposition(word):
            return i, 1, word
    return None


def parse(raw_input: str) -> ParsedInput:
    """Parse a line like "put the golden lamp in the box"."""
    words = (raw_input or "").strip().lower().split()
    if not words:
        return ParsedInput(raw_input=raw_input or "")

    parsed = ParsedInput(verb=words[0], raw_input=raw_input)
    rest = words[1:]
    if not rest:
        return parsed

    found = _find_preposition(rest)
    if found is None:
        if any(is_multi_object_keyword(w) for w in rest):
            parsed.is_multi_object = True
            parsed.direct_objects = [ALL_MARKER]
        elif any(is_pronoun(w) for w in rest):
            parsed.uses_pronoun = True
            parsed.direct_objects = [next(w for w in rest if is_pronoun(w))]
        else:
            parsed.direct_objects = split_by_conjunction(" ".join(rest))
        return parsed

    index, length, preposition = found
    parsed.direct_objects = split_by_conjunction(" ".join(rest[:index]))
    parsed.preposition = normalize_preposition(preposition)

    after = strip_articles(rest[index + length :])
    if after:
        parsed.indirect_object = " ".join(after)

    return parsed


def needs_enhanced_parsing(raw_input: str) -> bool:
    """True when the line contains a preposition or conjunction."""
    words = (raw_input or "").lower().split()
    return any(is_preposition(w) or is_conjunction(w) for w in words)
