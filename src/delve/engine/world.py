"""Immutable data structures for the game world.

These are loaded once from the content tables at startup and shared across
every save. Nothing in here changes during play; per-save changes live in
the shadow tables behind ``SaveState``.
"""

from dataclasses import dataclass, field

from ..errors import WorldIntegrityError

DIRECTIONS = ("north", "south", "east", "west", "up", "down")

DIRECTION_ALIASES = {
    "n": "north",
    "s": "south",
    "e": "east",
    "w": "west",
    "u": "up",
    "d": "down",
}

# Room description condition kinds
CONDITION_DEFAULT = "default"
CONDITION_ALWAYS = "always"
CONDITION_HAS_ITEM = "has_item"
CONDITION_ITEM_STATE = "item_state"
CONDITION_COMPLETED_ACTION = "completed_action"

# Well-known item states; any string is a valid state.
STATE_DEFAULT = "default"
STATE_LIT = "lit"
STATE_UNLIT = "unlit"


def normalize_direction(word: str) -> str | None:
    """Map a direction word or abbreviation to its full name."""
    word = word.lower()
    word = DIRECTION_ALIASES.get(word, word)
    return word if word in DIRECTIONS else None


def split_keywords(keywords: str | None) -> list[str]:
    """Split a comma-separated keyword list into lower-cased keywords."""
    if not keywords:
        return []
    return [k.strip().lower() for k in keywords.split(",") if k.strip()]


@dataclass(frozen=True)
class Room:
    """A location in the game world."""

    id: int
    name: str
    description: str
    neighbors: dict[str, int] = field(default_factory=dict)
    is_starting_room: bool = False
    is_winning_room: bool = False
    is_deadly_room: bool = False
    is_dark: bool = False
    damage_amount: int = 0
    death_message: str | None = None
    win_message: str | None = None
    protection_item_id: int | None = None
    protection_item_state: str | None = None
    light_source_item_id: int | None = None


@dataclass(frozen=True)
class Item:
    """A thing the player can find, carry, and use."""

    id: int
    name: str
    description: str
    is_collectable: bool = True
    is_quest_item: bool = False
    weight: int = 0
    use_message: str | None = None
    room_id: int | None = None
    healing_amount: int = 0
    max_uses: int = 1  # 0 = unlimited
    empty_description: str | None = None
    disappears_when_empty: bool = False


@dataclass(frozen=True)
class ExaminableObject:
    """A fixed feature of a room that can be examined, used, or activated."""

    id: int
    room_id: int
    name: str
    description: str
    display_name: str | None = None
    look_description: str | None = None
    keywords: tuple[str, ...] = ()
    is_hidden: bool = False
    show_in_look: bool = True
    revealed_by_action_id: int | None = None
    revealed_by_examinable_id: int | None = None
    revealed_by_item_id: int | None = None
    reveal_message: str | None = None
    show_reveal_message: bool = True
    required_item_id: int | None = None
    unlocks_room_id: int | None = None
    unlock_direction: str | None = None
    success_message: str | None = None
    failure_message: str | None = None
    is_activatable: bool = False
    max_uses: int = 0
    is_one_time_use: bool = False
    activation_message: str | None = None
    empty_description: str | None = None
    reveals_examinable_id: int | None = None

    @property
    def label(self) -> str:
        return self.display_name or self.name


@dataclass(frozen=True)
class Container:
    """Something that can be opened, closed, and possibly locked."""

    id: int
    name: str
    description: str
    room_id: int | None = None
    display_name: str | None = None
    keywords: tuple[str, ...] = ()
    open_description: str | None = None
    empty_description: str | None = None
    starts_open: bool = False
    is_lockable: bool = False
    starts_locked: bool = False
    key_item_id: int | None = None
    unlock_message: str | None = None
    locked_message: str | None = None
    show_in_room_description: bool = True
    is_hidden: bool = False
    revealed_by_examinable_id: int | None = None
    reveal_message: str | None = None
    item_ids: tuple[int, ...] = ()

    @property
    def label(self) -> str:
        return self.display_name or self.name


@dataclass(frozen=True)
class RoomAction:
    """A named special action that can be performed in one room."""

    id: int
    room_id: int
    action_name: str
    description: str
    required_item_id: int | None = None
    success_message: str | None = None
    failure_message: str | None = None
    unlocks_room_id: int | None = None
    unlock_direction: str = "up"
    is_repeatable: bool = True


@dataclass(frozen=True)
class RoomDescription:
    """An alternate room description guarded by a condition."""

    id: int
    room_id: int
    description: str
    condition_type: str
    priority: int = 0
    required_item_id: int | None = None
    required_item_state: str | None = None
    item_must_be_owned: bool = True
    required_action_id: int | None = None
    action_must_be_completed: bool = True


@dataclass(frozen=True)
class VocabularyEntry:
    """A vocabulary word."""

    word: str
    word_type: str
    canonical_form: str | None = None
    category: str | None = None


@dataclass
class World:
    """The complete immutable game world, loaded from the content tables."""

    rooms: dict[int, Room] = field(default_factory=dict)
    items: dict[int, Item] = field(default_factory=dict)
    examinables: dict[int, ExaminableObject] = field(default_factory=dict)
    containers: dict[int, Container] = field(default_factory=dict)
    actions: dict[int, RoomAction] = field(default_factory=dict)
    room_descriptions: dict[int, list[RoomDescription]] = field(default_factory=dict)
    vocabulary: list[VocabularyEntry] = field(default_factory=list)
    # item id -> lower-cased adjectives, highest priority first
    item_adjectives: dict[int, tuple[str, ...]] = field(default_factory=dict)

    def room(self, room_id: int) -> Room:
        try:
            return self.rooms[room_id]
        except KeyError:
            raise WorldIntegrityError(f"Room {room_id} not found") from None

    def item(self, item_id: int) -> Item:
        try:
            return self.items[item_id]
        except KeyError:
            raise WorldIntegrityError(f"Item {item_id} not found") from None

    def examinable(self, examinable_id: int) -> ExaminableObject:
        try:
            return self.examinables[examinable_id]
        except KeyError:
            raise WorldIntegrityError(
                f"Examinable object {examinable_id} not found"
            ) from None

    def container(self, container_id: int) -> Container:
        try:
            return self.containers[container_id]
        except KeyError:
            raise WorldIntegrityError(f"Container {container_id} not found") from None

    def starting_room(self) -> Room | None:
        for room in self.rooms.values():
            if room.is_starting_room:
                return room
        return None

    def items_originating_in(self, room_id: int) -> list[Item]:
        return [item for item in self.items.values() if item.room_id == room_id]

    def examinables_in(self, room_id: int) -> list[ExaminableObject]:
        return [obj for obj in self.examinables.values() if obj.room_id == room_id]

    def containers_in(self, room_id: int) -> list[Container]:
        return [c for c in self.containers.values() if c.room_id == room_id]

    def actions_in(self, room_id: int) -> list[RoomAction]:
        return [a for a in self.actions.values() if a.room_id == room_id]

    def adjectives_for(self, item_id: int) -> tuple[str, ...]:
        return self.item_adjectives.get(item_id, ())
