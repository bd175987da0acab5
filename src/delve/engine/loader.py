"""Load the content tables into an immutable World object.

Each content table is read once and converted into the frozen dataclasses
of ``engine.world``. References between content rows are checked after
loading; a dangling reference means the content is broken and loading
fails with ``WorldIntegrityError``.
"""

from collections import defaultdict

from sqlmodel import Session, select

from .. import models
from ..errors import WorldIntegrityError
from .world import (
    DIRECTIONS,
    Container,
    ExaminableObject,
    Item,
    Room,
    RoomAction,
    RoomDescription,
    VocabularyEntry,
    World,
    normalize_direction,
    split_keywords,
)


def _load_rooms(session: Session, world: World) -> None:
    for row in session.exec(select(models.Room)).all():
        neighbors = {}
        for direction in DIRECTIONS:
            target = getattr(row, f"{direction}_room_id")
            if target is not None:
                neighbors[direction] = target
        world.rooms[row.id] = Room(
            id=row.id,
            name=row.name,
            description=row.description,
            neighbors=neighbors,
            is_starting_room=row.is_starting_room,
            is_winning_room=row.is_winning_room,
            is_deadly_room=row.is_deadly_room,
            is_dark=row.is_dark,
            damage_amount=row.damage_amount,
            death_message=row.death_message,
            win_message=row.win_message,
            protection_item_id=row.protection_item_id,
            protection_item_state=row.protection_item_state,
            light_source_item_id=row.light_source_item_id,
        )


def _load_items(session: Session, world: World) -> None:
    for row in session.exec(select(models.Item)).all():
        world.items[row.id] = Item(
            id=row.id,
            name=row.name,
            description=row.description,
            is_collectable=row.is_collectable,
            is_quest_item=row.is_quest_item,
            weight=row.weight,
            use_message=row.use_message,
            room_id=row.room_id,
            healing_amount=row.healing_amount,
            max_uses=row.max_uses,
            empty_description=row.empty_description,
            disappears_when_empty=row.disappears_when_empty,
        )

    adjectives: dict[int, list[models.ItemAdjective]] = defaultdict(list)
    for row in session.exec(select(models.ItemAdjective)).all():
        adjectives[row.item_id].append(row)
    for item_id, rows in adjectives.items():
        rows.sort(key=lambda r: r.priority, reverse=True)
        world.item_adjectives[item_id] = tuple(r.adjective.lower() for r in rows)


def _load_examinables(session: Session, world: World) -> None:
    for row in session.exec(select(models.ExaminableObject)).all():
        direction = None
        if row.unlock_direction:
            direction = normalize_direction(row.unlock_direction)
        world.examinables[row.id] = ExaminableObject(
            id=row.id,
            room_id=row.room_id,
            name=row.name,
            description=row.description,
            display_name=row.display_name,
            look_description=row.look_description,
            keywords=tuple(split_keywords(row.keywords)),
            is_hidden=row.is_hidden,
            show_in_look=row.show_in_look,
            revealed_by_action_id=row.revealed_by_action_id,
            revealed_by_examinable_id=row.revealed_by_examinable_id,
            revealed_by_item_id=row.revealed_by_item_id,
            reveal_message=row.reveal_message,
            show_reveal_message=row.show_reveal_message,
            required_item_id=row.required_item_id,
            unlocks_room_id=row.unlocks_room_id,
            unlock_direction=direction,
            success_message=row.success_message,
            failure_message=row.failure_message,
            is_activatable=row.is_activatable,
            max_uses=row.max_uses,
            is_one_time_use=row.is_one_time_use,
            activation_message=row.activation_message,
            empty_description=row.empty_description,
            reveals_examinable_id=row.reveals_examinable_id,
        )


def _load_containers(session: Session, world: World) -> None:
    contents: dict[int, list[int]] = defaultdict(list)
    for row in session.exec(select(models.ContainerItem)).all():
        contents[row.container_id].append(row.item_id)

    for row in session.exec(select(models.Container)).all():
        world.containers[row.id] = Container(
            id=row.id,
            name=row.name,
            description=row.description,
            room_id=row.room_id,
            display_name=row.display_name,
            keywords=tuple(split_keywords(row.keywords)),
            open_description=row.open_description,
            empty_description=row.empty_description,
            starts_open=row.starts_open,
            is_lockable=row.is_lockable,
            starts_locked=row.starts_locked,
            key_item_id=row.key_item_id,
            unlock_message=row.unlock_message,
            locked_message=row.locked_message,
            show_in_room_description=row.show_in_room_description,
            is_hidden=row.is_hidden,
            revealed_by_examinable_id=row.revealed_by_examinable_id,
            reveal_message=row.reveal_message,
            item_ids=tuple(contents.get(row.id, ())),
        )


def _load_actions(session: Session, world: World) -> None:
    for row in session.exec(select(models.RoomAction)).all():
        world.actions[row.id] = RoomAction(
            id=row.id,
            room_id=row.room_id,
            action_name=row.action_name,
            description=row.description,
            required_item_id=row.required_item_id,
            success_message=row.success_message,
            failure_message=row.failure_message,
            unlocks_room_id=row.unlocks_room_id,
            unlock_direction=normalize_direction(row.unlock_direction) or "up",
            is_repeatable=row.is_repeatable,
        )


def _load_room_descriptions(session: Session, world: World) -> None:
    for row in session.exec(select(models.RoomDescription)).all():
        world.room_descriptions.setdefault(row.room_id, []).append(
            RoomDescription(
                id=row.id,
                room_id=row.room_id,
                description=row.description,
                condition_type=row.condition_type.lower(),
                priority=row.priority,
                required_item_id=row.required_item_id,
                required_item_state=row.required_item_state,
                item_must_be_owned=row.item_must_be_owned,
                required_action_id=row.required_action_id,
                action_must_be_completed=row.action_must_be_completed,
            )
        )
    for descriptions in world.room_descriptions.values():
        descriptions.sort(key=lambda d: d.priority, reverse=True)


def _load_vocabulary(session: Session, world: World) -> None:
    for row in session.exec(select(models.Vocabulary)).all():
        world.vocabulary.append(
            VocabularyEntry(
                word=row.word.lower(),
                word_type=row.word_type.lower(),
                canonical_form=row.canonical_form.lower() if row.canonical_form else None,
                category=row.category,
            )
        )


def _require(ids: dict, ref: int | None, what: str, owner: str) -> None:
    if ref is not None and ref not in ids:
        raise WorldIntegrityError(f"{owner} references missing {what} {ref}")


def _check_references(world: World) -> None:
    """Fail on any content reference to an id that does not exist."""
    for room in world.rooms.values():
        owner = f"Room {room.id}"
        for target in room.neighbors.values():
            _require(world.rooms, target, "room", owner)
        _require(world.items, room.protection_item_id, "item", owner)
        _require(world.items, room.light_source_item_id, "item", owner)

    for item in world.items.values():
        _require(world.rooms, item.room_id, "room", f"Item {item.id}")

    for obj in world.examinables.values():
        owner = f"Examinable object {obj.id}"
        triggers = [
            obj.revealed_by_action_id,
            obj.revealed_by_examinable_id,
            obj.revealed_by_item_id,
        ]
        if sum(t is not None for t in triggers) > 1:
            raise WorldIntegrityError(f"{owner} declares more than one reveal trigger")
        _require(world.rooms, obj.room_id, "room", owner)
        _require(world.actions, obj.revealed_by_action_id, "action", owner)
        _require(world.examinables, obj.revealed_by_examinable_id, "examinable", owner)
        _require(world.items, obj.revealed_by_item_id, "item", owner)
        _require(world.items, obj.required_item_id, "item", owner)
        _require(world.rooms, obj.unlocks_room_id, "room", owner)
        _require(world.examinables, obj.reveals_examinable_id, "examinable", owner)

    for container in world.containers.values():
        owner = f"Container {container.id}"
        _require(world.rooms, container.room_id, "room", owner)
        _require(world.items, container.key_item_id, "item", owner)
        _require(
            world.examinables, container.revealed_by_examinable_id, "examinable", owner
        )
        for item_id in container.item_ids:
            _require(world.items, item_id, "item", owner)
        if container.starts_open and container.starts_locked:
            raise WorldIntegrityError(f"{owner} cannot start both open and locked")

    for action in world.actions.values():
        owner = f"Room action {action.id}"
        _require(world.rooms, action.room_id, "room", owner)
        _require(world.items, action.required_item_id, "item", owner)
        _require(world.rooms, action.unlocks_room_id, "room", owner)

    for descriptions in world.room_descriptions.values():
        for desc in descriptions:
            owner = f"Room description {desc.id}"
            _require(world.rooms, desc.room_id, "room", owner)
            _require(world.items, desc.required_item_id, "item", owner)
            _require(world.actions, desc.required_action_id, "action", owner)


def _check_vocabulary(world: World) -> None:
    """Canonical forms must be final: normalizing twice gives the same word."""
    canonical = {(e.word, e.word_type): e.canonical_form for e in world.vocabulary}
    for entry in world.vocabulary:
        target = entry.canonical_form
        if not target or target == entry.word:
            continue
        onward = canonical.get((target, entry.word_type))
        if onward and onward != target:
            raise WorldIntegrityError(
                f"Vocabulary {entry.word_type} '{entry.word}' maps to '{target}',"
                f" which maps on to '{onward}'"
            )


def load_world(session: Session) -> World:
    """Read every content table and return the assembled World."""
    world = World()
    _load_rooms(session, world)
    _load_items(session, world)
    _load_actions(session, world)
    _load_examinables(session, world)
    _load_containers(session, world)
    _load_room_descriptions(session, world)
    _load_vocabulary(session, world)
    _check_references(world)
    _check_vocabulary(world)
    return world
