"""Database models for Delve.

Two families of tables live here. Content tables hold the authored world
and are read once at startup by ``engine.loader``. Shadow tables hold
per-save state layered over that content; each is unique per
``(save_id, <entity>_id)`` and is only ever touched through
``engine.state.SaveState``.
"""

import datetime as dt

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


def _now() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


# --- Content tables -------------------------------------------------------


class Room(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    name: str
    description: str
    north_room_id: int | None = Field(default=None, foreign_key="room.id")
    south_room_id: int | None = Field(default=None, foreign_key="room.id")
    east_room_id: int | None = Field(default=None, foreign_key="room.id")
    west_room_id: int | None = Field(default=None, foreign_key="room.id")
    up_room_id: int | None = Field(default=None, foreign_key="room.id")
    down_room_id: int | None = Field(default=None, foreign_key="room.id")
    is_starting_room: bool = False
    is_winning_room: bool = False
    is_deadly_room: bool = False
    is_dark: bool = False
    damage_amount: int = 0
    death_message: str | None = None
    win_message: str | None = None
    # Item references are checked by the loader; the room/item tables
    # reference each other so these carry no foreign key.
    protection_item_id: int | None = Field(default=None, index=True)
    protection_item_state: str | None = None
    light_source_item_id: int | None = Field(default=None, index=True)


class Item(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    name: str
    description: str
    is_collectable: bool = True
    is_quest_item: bool = False
    weight: int = 0
    use_message: str | None = None
    room_id: int | None = Field(default=None, foreign_key="room.id", index=True)
    healing_amount: int = 0
    max_uses: int = 1
    empty_description: str | None = None
    disappears_when_empty: bool = False


class ItemAdjective(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("item_id", "adjective"),)

    id: int | None = Field(default=None, primary_key=True)
    item_id: int = Field(foreign_key="item.id", index=True)
    adjective: str
    priority: int = 1


class Vocabulary(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("word", "word_type"),)

    id: int | None = Field(default=None, primary_key=True)
    word: str = Field(index=True)
    word_type: str
    canonical_form: str | None = None
    category: str | None = None
    description: str | None = None


class RoomAction(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    room_id: int = Field(foreign_key="room.id", index=True)
    action_name: str
    description: str
    required_item_id: int | None = Field(default=None, foreign_key="item.id")
    success_message: str | None = None
    failure_message: str | None = None
    unlocks_room_id: int | None = Field(default=None, foreign_key="room.id")
    unlock_direction: str = "up"
    is_repeatable: bool = True


class ExaminableObject(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    room_id: int = Field(foreign_key="room.id", index=True)
    name: str
    display_name: str | None = None
    description: str
    look_description: str | None = None
    keywords: str | None = None
    is_hidden: bool = False
    show_in_look: bool = True
    revealed_by_action_id: int | None = Field(
        default=None, foreign_key="roomaction.id"
    )
    revealed_by_examinable_id: int | None = Field(
        default=None, foreign_key="examinableobject.id"
    )
    revealed_by_item_id: int | None = Field(default=None, foreign_key="item.id")
    reveal_message: str | None = None
    show_reveal_message: bool = True
    required_item_id: int | None = Field(default=None, foreign_key="item.id")
    unlocks_room_id: int | None = Field(default=None, foreign_key="room.id")
    unlock_direction: str | None = None
    success_message: str | None = None
    failure_message: str | None = None
    is_activatable: bool = False
    max_uses: int = 0
    is_one_time_use: bool = False
    activation_message: str | None = None
    empty_description: str | None = None
    reveals_examinable_id: int | None = Field(
        default=None, foreign_key="examinableobject.id"
    )


class Container(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    room_id: int | None = Field(default=None, foreign_key="room.id", index=True)
    name: str
    display_name: str | None = None
    description: str
    keywords: str | None = None
    open_description: str | None = None
    empty_description: str | None = None
    starts_open: bool = False
    is_lockable: bool = False
    starts_locked: bool = False
    key_item_id: int | None = Field(default=None, foreign_key="item.id")
    unlock_message: str | None = None
    locked_message: str | None = None
    show_in_room_description: bool = True
    is_hidden: bool = False
    revealed_by_examinable_id: int | None = Field(
        default=None, foreign_key="examinableobject.id"
    )
    reveal_message: str | None = None


class ContainerItem(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("container_id", "item_id"),)

    id: int | None = Field(default=None, primary_key=True)
    container_id: int = Field(foreign_key="container.id", index=True)
    item_id: int = Field(foreign_key="item.id")


class RoomDescription(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    room_id: int = Field(foreign_key="room.id", index=True)
    description: str
    priority: int = 0
    condition_type: str
    required_item_id: int | None = Field(default=None, foreign_key="item.id")
    required_item_state: str | None = None
    item_must_be_owned: bool = True
    required_action_id: int | None = Field(default=None, foreign_key="roomaction.id")
    action_must_be_completed: bool = True


# --- Per-save tables ------------------------------------------------------


class GameSave(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    slot_name: str = Field(unique=True, index=True)
    current_room_id: int = Field(foreign_key="room.id")
    turn_count: int = 0
    score: int = 0
    health: int = 100
    is_completed: bool = False
    is_player_dead: bool = False
    saved_at: dt.datetime = Field(default_factory=_now)


class InventoryItem(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("save_id", "item_id"),)

    id: int | None = Field(default=None, primary_key=True)
    save_id: int = Field(foreign_key="gamesave.id", index=True)
    item_id: int = Field(foreign_key="item.id")
    picked_up_at: dt.datetime = Field(default_factory=_now)


class PlacedItem(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("save_id", "item_id"),)

    id: int | None = Field(default=None, primary_key=True)
    save_id: int = Field(foreign_key="gamesave.id", index=True)
    item_id: int = Field(foreign_key="item.id")
    room_id: int = Field(foreign_key="room.id")
    placed_at: dt.datetime = Field(default_factory=_now)


class PickedUpItem(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("save_id", "item_id"),)

    id: int | None = Field(default=None, primary_key=True)
    save_id: int = Field(foreign_key="gamesave.id", index=True)
    item_id: int = Field(foreign_key="item.id")
    first_picked_up_at: dt.datetime = Field(default_factory=_now)


class RemovedItem(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("save_id", "item_id"),)

    id: int | None = Field(default=None, primary_key=True)
    save_id: int = Field(foreign_key="gamesave.id", index=True)
    item_id: int = Field(foreign_key="item.id")
    removed_at: dt.datetime = Field(default_factory=_now)


class ItemState(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("save_id", "item_id"),)

    id: int | None = Field(default=None, primary_key=True)
    save_id: int = Field(foreign_key="gamesave.id", index=True)
    item_id: int = Field(foreign_key="item.id")
    state: str = "default"
    updated_at: dt.datetime = Field(default_factory=_now)


class ItemUsage(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("save_id", "item_id"),)

    id: int | None = Field(default=None, primary_key=True)
    save_id: int = Field(foreign_key="gamesave.id", index=True)
    item_id: int = Field(foreign_key="item.id")
    uses: int = 0
    last_used_at: dt.datetime = Field(default_factory=_now)


class ExaminableObjectUsage(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("save_id", "examinable_id"),)

    id: int | None = Field(default=None, primary_key=True)
    save_id: int = Field(foreign_key="gamesave.id", index=True)
    examinable_id: int = Field(foreign_key="examinableobject.id")
    uses: int = 0
    last_used_at: dt.datetime = Field(default_factory=_now)


class RevealedExaminableObject(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("save_id", "examinable_id"),)

    id: int | None = Field(default=None, primary_key=True)
    save_id: int = Field(foreign_key="gamesave.id", index=True)
    examinable_id: int = Field(foreign_key="examinableobject.id")
    revealed_at: dt.datetime = Field(default_factory=_now)


class ActivatedExaminableObject(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("save_id", "examinable_id"),)

    id: int | None = Field(default=None, primary_key=True)
    save_id: int = Field(foreign_key="gamesave.id", index=True)
    examinable_id: int = Field(foreign_key="examinableobject.id")
    activated_at: dt.datetime = Field(default_factory=_now)


class ContainerRevealed(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("save_id", "container_id"),)

    id: int | None = Field(default=None, primary_key=True)
    save_id: int = Field(foreign_key="gamesave.id", index=True)
    container_id: int = Field(foreign_key="container.id")
    revealed_at: dt.datetime = Field(default_factory=_now)


class ContainerState(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("save_id", "container_id"),)

    id: int | None = Field(default=None, primary_key=True)
    save_id: int = Field(foreign_key="gamesave.id", index=True)
    container_id: int = Field(foreign_key="container.id")
    is_open: bool = False
    is_locked: bool = False
    last_modified: dt.datetime = Field(default_factory=_now)


class CompletedAction(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("save_id", "action_id"),)

    id: int | None = Field(default=None, primary_key=True)
    save_id: int = Field(foreign_key="gamesave.id", index=True)
    action_id: int = Field(foreign_key="roomaction.id")
    times_completed: int = 1
    completed_at: dt.datetime = Field(default_factory=_now)


class CompletedExaminableInteraction(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("save_id", "examinable_id"),)

    id: int | None = Field(default=None, primary_key=True)
    save_id: int = Field(foreign_key="gamesave.id", index=True)
    examinable_id: int = Field(foreign_key="examinableobject.id")
    completed_at: dt.datetime = Field(default_factory=_now)


class VisitedRoom(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("save_id", "room_id"),)

    id: int | None = Field(default=None, primary_key=True)
    save_id: int = Field(foreign_key="gamesave.id", index=True)
    room_id: int = Field(foreign_key="room.id")
    visit_count: int = 1
    first_visited_at: dt.datetime = Field(default_factory=_now)
    last_visited_at: dt.datetime = Field(default_factory=_now)


class PlayerContext(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    save_id: int = Field(foreign_key="gamesave.id", unique=True, index=True)
    last_mentioned_item_id: int | None = Field(default=None, foreign_key="item.id")
    last_examined_object_id: int | None = Field(
        default=None, foreign_key="examinableobject.id"
    )
    last_room_id: int | None = Field(default=None, foreign_key="room.id")
    updated_at: dt.datetime = Field(default_factory=_now)


# Every table keyed by save; deleting a save removes its rows from each.
SHADOW_TABLES: tuple[type[SQLModel], ...] = (
    InventoryItem,
    PlacedItem,
    PickedUpItem,
    RemovedItem,
    ItemState,
    ItemUsage,
    ExaminableObjectUsage,
    RevealedExaminableObject,
    ActivatedExaminableObject,
    ContainerRevealed,
    ContainerState,
    CompletedAction,
    CompletedExaminableInteraction,
    VisitedRoom,
    PlayerContext,
)
