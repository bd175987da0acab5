"""Tests for resolving phrases to items, examinables, and containers."""

from delve.engine.resolver import SemanticResolver, split_phrase
from delve.engine.rules import WorldStateEngine
from delve.engine.state import SaveState

BRASS_KEY = 1
IRON_KEY = 2
LANTERN = 3
PHIAL = 7
DESK = 1
DRAWER = 2
IRON_DOOR = 7
STRONGBOX = 1


def _ids(items):
    return [item.id for item in items]


def test_split_phrase():
    """The last word is the noun, the rest are adjectives."""
    assert split_phrase("small brass key") == ("key", ["small", "brass"])
    assert split_phrase("") == ("", [])


def test_noun_matches_every_item_with_that_name(resolver: SemanticResolver):
    """Plain nouns match by substring, keeping discovery order."""
    assert _ids(resolver.resolve_items("key")) == [BRASS_KEY, IRON_KEY]


def test_adjective_narrows(resolver: SemanticResolver):
    """Adjectives pick items tagged with all of them."""
    assert _ids(resolver.resolve_items("small key")) == [BRASS_KEY]
    assert _ids(resolver.resolve_items("heavy key")) == [IRON_KEY]
    assert _ids(resolver.resolve_items("small brass key")) == [BRASS_KEY]


def test_adjective_synonym(resolver: SemanticResolver):
    """Adjectives are normalized before matching tags."""
    assert _ids(resolver.resolve_items("shiny key")) == [BRASS_KEY]


def test_unknown_adjective_falls_back_to_noun(resolver: SemanticResolver):
    """When no item carries the adjectives, the noun tier answers."""
    assert _ids(resolver.resolve_items("red key")) == [BRASS_KEY, IRON_KEY]


def test_noun_synonym(resolver: SemanticResolver):
    """A synonym of an item name finds the item."""
    assert _ids(resolver.resolve_items("torch")) == [LANTERN]


def test_reverse_synonym(resolver: SemanticResolver, in_library: SaveState):
    """An item whose name is a synonym of the noun is found."""
    assert _ids(resolver.resolve_items("bottle")) == [PHIAL]


def test_typo_tolerance(resolver: SemanticResolver):
    """Names within two edits are found when nothing else matches."""
    assert _ids(resolver.resolve_items("lanturn")) == [LANTERN]
    assert resolver.resolve_items("xylophone") == []


def test_empty_phrase(resolver: SemanticResolver):
    """An empty phrase matches nothing."""
    assert resolver.resolve_items("  ") == []


def test_scope_flags(resolver: SemanticResolver, engine: WorldStateEngine):
    """Inventory and room scopes can be searched separately."""
    engine.pick_up_item(LANTERN)
    assert _ids(resolver.resolve_items("lantern", include_room=False)) == [LANTERN]
    assert resolver.resolve_items("key", include_room=False) == []
    assert _ids(resolver.resolve_items("key", include_inventory=False)) == [
        BRASS_KEY,
        IRON_KEY,
    ]


def test_dropped_item_is_in_scope_where_dropped(
    resolver: SemanticResolver, engine: WorldStateEngine, state: SaveState
):
    """Placed items belong to the room they were dropped in."""
    engine.pick_up_item(BRASS_KEY)
    state.set_current_room(2)
    engine.drop_item(BRASS_KEY)
    assert _ids(resolver.resolve_items("key")) == [BRASS_KEY]


def test_resolve_item_single(resolver: SemanticResolver):
    """resolve_item returns the one match or nothing."""
    assert resolver.resolve_item("small key").id == BRASS_KEY
    assert resolver.resolve_item("key") is None


def test_normalize_verb(resolver: SemanticResolver):
    """Verbs are mapped to their canonical form."""
    assert resolver.normalize_verb("grab") == "take"


def test_resolve_examinable_by_name_and_keyword(
    resolver: SemanticResolver, engine: WorldStateEngine
):
    """Names and keywords both find an object."""
    assert resolver.resolve_examinable("desk", 2, engine).id == DESK
    assert resolver.resolve_examinable("table", 2, engine).id == DESK
    assert resolver.resolve_examinable("door", 2, engine).id == IRON_DOOR


def test_resolve_examinable_typo(resolver: SemanticResolver, engine: WorldStateEngine):
    """Keywords within two edits are accepted."""
    assert resolver.resolve_examinable("dsek", 2, engine).id == DESK


def test_hidden_examinable_not_resolved(
    resolver: SemanticResolver, engine: WorldStateEngine, in_library: SaveState
):
    """Hidden objects are invisible until revealed."""
    assert resolver.resolve_examinable("drawer", 2, engine) is None
    assert resolver.resolve_examinable("drawer", 2).id == DRAWER

    engine.examine(DESK)
    assert resolver.resolve_examinable("drawer", 2, engine).id == DRAWER


def test_resolve_container(
    resolver: SemanticResolver, engine: WorldStateEngine, in_library: SaveState
):
    """Hidden containers resolve only after they are revealed."""
    assert resolver.resolve_container("box", 2) is None
    engine.examine(DESK)
    assert resolver.resolve_container("box", 2).id == STRONGBOX
    assert resolver.resolve_container("strongbox", 2).id == STRONGBOX
