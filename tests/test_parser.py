"""Tests for the command parser."""

from delve.engine.parser import (
    ALL_MARKER,
    needs_enhanced_parsing,
    normalize_preposition,
    parse,
    split_by_conjunction,
)


def test_empty_input():
    """Blank input gives an empty verb and nothing else."""
    parsed = parse("   ")
    assert parsed.is_empty
    assert parsed.direct_objects == []
    assert parsed.preposition is None


def test_verb_only():
    """A single word is just a verb."""
    parsed = parse("LOOK")
    assert parsed.verb == "look"
    assert parsed.direct_objects == []
    assert parsed.is_simple


def test_articles_stripped():
    """Articles never appear in object phrases."""
    parsed = parse("take the brass key")
    assert parsed.verb == "take"
    assert parsed.direct_objects == ["brass key"]


def test_conjunction_splits_objects():
    """"and" separates several direct objects."""
    parsed = parse("take lamp and the sword")
    assert parsed.direct_objects == ["lamp", "sword"]
    assert parsed.has_multiple_objects


def test_preposition_splits_indirect_object():
    """Everything after the preposition is the indirect object."""
    parsed = parse("put the golden lamp into the box")
    assert parsed.direct_objects == ["golden lamp"]
    assert parsed.preposition == "in"
    assert parsed.indirect_object == "box"
    assert parsed.args == ["golden lamp", "in", "box"]


def test_compound_preposition():
    """"next to" is one preposition."""
    parsed = parse("put key next to the lamp")
    assert parsed.direct_objects == ["key"]
    assert parsed.preposition == "beside"
    assert parsed.indirect_object == "lamp"


def test_trailing_preposition_leaves_indirect_unset():
    """A preposition with nothing after it is not an error."""
    parsed = parse("unlock door with")
    assert parsed.direct_objects == ["door"]
    assert parsed.preposition == "with"
    assert parsed.indirect_object is None


def test_multi_object_keyword():
    """"all" and friends short-circuit to the all marker."""
    parsed = parse("take everything")
    assert parsed.is_multi_object
    assert parsed.direct_objects == [ALL_MARKER]


def test_pronoun():
    """Pronouns are flagged for the caller to resolve."""
    parsed = parse("drop it")
    assert parsed.uses_pronoun
    assert parsed.direct_objects == ["it"]


def test_preposition_synonyms():
    """Synonymous prepositions share one form."""
    assert normalize_preposition("using") == "with"
    assert normalize_preposition("towards") == "to"
    assert normalize_preposition("inside") == "in"
    assert normalize_preposition("behind") == "behind"


def test_split_by_conjunction_ignores_empty_phrases():
    """Doubled conjunctions do not produce empty phrases."""
    assert split_by_conjunction("lamp and then key") == ["lamp", "key"]


def test_needs_enhanced_parsing():
    """Only lines with prepositions or conjunctions need the full parser."""
    assert needs_enhanced_parsing("unlock door with key")
    assert needs_enhanced_parsing("take lamp and key")
    assert not needs_enhanced_parsing("take lamp")
