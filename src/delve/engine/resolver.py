"""Turn noun phrases into world entities.

Item phrases go through four tiers, stopping at the first tier that finds
anything:

1. noun plus adjectives, where the item carries every adjective
2. noun (normalized or as typed) contained in the item name
3. the item name is a synonym whose canonical form is the noun
4. edit distance against the name or the name's canonical form

Whatever is left over is handed to ``ambiguity.resolve``.
"""

import structlog

from ..logging import get_logger
from . import ambiguity, fuzzy
from .rules import WorldStateEngine
from .vocabulary import NOUN, Vocabulary
from .world import Container, ExaminableObject, Item, World


def split_phrase(phrase: str) -> tuple[str, list[str]]:
    """Split "small brass key" into ("key", ["small", "brass"])."""
    tokens = phrase.lower().split()
    if not tokens:
        return "", []
    return tokens[-1], tokens[:-1]


def _dedupe(items: list[Item]) -> list[Item]:
    seen = set()
    unique = []
    for item in items:
        if item.id not in seen:
            seen.add(item.id)
            unique.append(item)
    return unique


class SemanticResolver:
    def __init__(
        self,
        world: World,
        engine: WorldStateEngine,
        vocabulary: Vocabulary,
        max_distance: int = fuzzy.DEFAULT_MAX_DISTANCE,
        logger: structlog.BoundLogger | None = None,
    ):
        self.world = world
        self.engine = engine
        self.vocabulary = vocabulary
        self.max_distance = max_distance
        self.log = logger or get_logger(__name__).bind(save_id=engine.state.save_id)

    def normalize_verb(self, verb: str) -> str:
        return self.vocabulary.normalize_verb(verb)

    def scope_items(self, include_inventory: bool = True, include_room: bool = True) -> list[Item]:
        items = []
        if include_inventory:
            items += self.engine.inventory_items()
        if include_room:
            items += self.engine.room_items()
        return _dedupe(items)

    # --- tiers -----------------------------------------------------------

    def _adjective_tags(self, item: Item) -> set[str]:
        tags = set(self.world.adjectives_for(item.id))
        return tags | {self.vocabulary.normalize_adjective(t) for t in tags}

    def _by_adjectives(self, items: list[Item], noun: str, adjectives: list[str]) -> list[Item]:
        wanted = {self.vocabulary.normalize_adjective(a) for a in adjectives}
        return [
            item
            for item in items
            if noun in item.name.lower() and wanted <= self._adjective_tags(item)
        ]

    def _by_name(self, items: list[Item], noun: str, surface: str) -> list[Item]:
        return [
            item
            for item in items
            if noun in item.name.lower() or surface in item.name.lower()
        ]

    def _by_synonym(self, items: list[Item], noun: str) -> list[Item]:
        return [
            item
            for item in items
            if self.vocabulary.canonical_form(item.name, NOUN) == noun
        ]

    def _by_typo(self, items: list[Item], noun: str, surface: str) -> list[Item]:
        matches = []
        for item in items:
            name = item.name.lower()
            targets = [name]
            canonical = self.vocabulary.canonical_form(name, NOUN)
            if canonical:
                targets.append(canonical)
            if any(
                fuzzy.is_similar(word, target, self.max_distance)
                for word in (noun, surface)
                for target in targets
            ):
                matches.append(item)
        return matches

    # --- items -----------------------------------------------------------

    def resolve_items(
        self, phrase: str, include_inventory: bool = True, include_room: bool = True
    ) -> list[Item]:
        """Candidate items for phrase, from the first tier that matches."""
        surface, adjectives = split_phrase(phrase)
        if not surface:
            return []
        noun = self.vocabulary.normalize_noun(surface)
        items = self.scope_items(include_inventory, include_room)

        tiers = []
        if adjectives:
            tiers.append(("adjective", lambda: self._by_adjectives(items, noun, adjectives)))
        tiers += [
            ("name", lambda: self._by_name(items, noun, surface)),
            ("synonym", lambda: self._by_synonym(items, noun)),
            ("fuzzy", lambda: self._by_typo(items, noun, surface)),
        ]
        for tier, match in tiers:
            candidates = _dedupe(match())
            if candidates:
                self.log.debug(
                    "items_resolved",
                    phrase=phrase,
                    tier=tier,
                    candidates=[c.id for c in candidates],
                )
                return candidates

        self.log.debug("items_not_resolved", phrase=phrase)
        return []

    def resolve_item(
        self, phrase: str, include_inventory: bool = True, include_room: bool = True
    ) -> Item | None:
        """The single item phrase refers to, or None if unclear or absent."""
        resolution = ambiguity.resolve(
            self.resolve_items(phrase, include_inventory, include_room), phrase
        )
        return resolution.item

    # --- examinables and containers --------------------------------------

    def resolve_examinable(
        self,
        phrase: str,
        room_id: int,
        visibility: WorldStateEngine | None = None,
    ) -> ExaminableObject | None:
        """Find a visible examinable by name or keyword, then by typo."""
        phrase = phrase.lower().strip()
        if not phrase:
            return None
        if visibility is None:
            objects = self.world.examinables_in(room_id)
        else:
            objects = visibility.visible_examinables(room_id)

        for obj in objects:
            if phrase in obj.name.lower() or phrase in obj.label.lower():
                return obj
            if any(phrase in keyword for keyword in obj.keywords):
                return obj

        for obj in objects:
            for keyword in (obj.name.lower(), *obj.keywords):
                if fuzzy.is_similar(phrase, keyword, self.max_distance):
                    self.log.debug(
                        "examinable_fuzzy_match", phrase=phrase, examinable_id=obj.id
                    )
                    return obj
        return None

    def resolve_container(self, phrase: str, room_id: int) -> Container | None:
        phrase = phrase.lower().strip()
        if not phrase:
            return None
        for container in self.engine.visible_containers(room_id):
            names = {container.name.lower(), container.label.lower()}
            if phrase in names or phrase in container.keywords:
                return container
        return None
