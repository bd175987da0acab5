"""World state engine: per-save rules layered over the immutable World.

WorldStateEngine answers "what is true for this save right now" (item
states, what is visible, which exits are open, how a room reads) and applies
the changes a command causes (picking things up, revealing hidden objects,
activating switches, opening containers, moving between rooms).

Every player-facing rule failure comes back as an Outcome. Broken content
or save references raise WorldIntegrityError from the World/SaveState
lookups and abort the turn.
"""

from dataclasses import dataclass

import structlog

from ..logging import get_logger
from .outcomes import (
    ALREADY_COMPLETED,
    EXHAUSTED,
    INVALID_STATE,
    OK,
    NOT_FOUND,
    MoveOutcome,
    Outcome,
)
from .state import SaveState
from .world import (
    CONDITION_ALWAYS,
    CONDITION_COMPLETED_ACTION,
    CONDITION_DEFAULT,
    CONDITION_HAS_ITEM,
    CONDITION_ITEM_STATE,
    STATE_LIT,
    Container,
    ExaminableObject,
    Item,
    Room,
    RoomAction,
    RoomDescription,
    World,
    normalize_direction,
)

ACTION_POINTS = 10
WIN_BONUS = 100

DARK_MESSAGE = "It's too dark to see anything. You need a light source."
FALLBACK_ROOM_DESCRIPTION = "You are in a room."


@dataclass(frozen=True)
class ContainerStatus:
    is_open: bool
    is_locked: bool


class WorldStateEngine:
    """Rules for one save."""

    def __init__(
        self,
        world: World,
        state: SaveState,
        logger: structlog.BoundLogger | None = None,
        max_health: int = 100,
    ):
        self.world = world
        self.state = state
        self.max_health = max_health
        self.log = logger or get_logger(__name__).bind(save_id=state.save_id)

    # --- item state ------------------------------------------------------

    def get_item_state(self, item_id: int) -> str:
        self.world.item(item_id)
        return self.state.get_item_state(item_id)

    def set_item_state(self, item_id: int, new_state: str) -> None:
        self.world.item(item_id)
        self.state.set_item_state(item_id, new_state)
        self.log.info("item_state_changed", item_id=item_id, state=new_state)

    def is_item_in_state(self, item_id: int, expected: str) -> bool:
        return self.get_item_state(item_id) == expected

    # --- where items are -------------------------------------------------

    def has_item(self, item_id: int) -> bool:
        return self.state.has_item(item_id)

    def inventory_items(self) -> list[Item]:
        return [self.world.item(i) for i in self.state.inventory_item_ids()]

    def room_items(self, room_id: int | None = None) -> list[Item]:
        """Items lying in a room for this save: untouched ones plus drops."""
        if room_id is None:
            room_id = self.state.current_room_id
        removed = self.state.removed_item_ids()
        gone = self.state.picked_up_item_ids() | removed
        carried = set(self.state.inventory_item_ids())

        items = [
            item
            for item in self.world.items_originating_in(room_id)
            if item.id not in gone and item.id not in carried
        ]
        for item_id in self.state.placed_item_ids(room_id):
            item = self.world.item(item_id)
            if item not in items and item_id not in removed:
                items.append(item)
        return items

    def pick_up_item(self, item_id: int) -> Outcome:
        item = self.world.item(item_id)
        if self.has_item(item_id):
            return Outcome.failure(INVALID_STATE, f"You already have the {item.name}.")
        if item not in self.room_items():
            return Outcome.failure(NOT_FOUND, f"There is no '{item.name}' here.")
        if not item.is_collectable:
            return Outcome.failure(INVALID_STATE, f"You can't take the {item.name}.")

        self.state.remove_placed_item(item_id)
        self.state.mark_picked_up(item_id)
        self.state.add_to_inventory(item_id)
        self.log.info("item_picked_up", item_id=item_id)

        reveals = self.check_and_reveal_examinables(item_id=item_id)
        return Outcome.success(f"Taken: {item.name}", reveals)

    def drop_item(self, item_id: int) -> Outcome:
        item = self.world.item(item_id)
        if not self.state.remove_from_inventory(item_id):
            return Outcome.failure(
                NOT_FOUND, f"You don't have '{item.name}' in your inventory."
            )
        self.state.place_item(item_id, self.state.current_room_id)
        self.log.info("item_dropped", item_id=item_id)
        return Outcome.success(f"You drop the {item.name}.")

    def is_item_empty(self, item: Item) -> bool:
        return item.max_uses > 0 and self.state.item_uses(item.id) >= item.max_uses

    def item_description(self, item: Item) -> str:
        if item.empty_description and self.is_item_empty(item):
            return item.empty_description
        return item.description

    def consume_item(self, item_id: int) -> Outcome:
        """Use a carried item once: count the use, heal, maybe use it up."""
        item = self.world.item(item_id)
        if not self.has_item(item_id):
            return Outcome.failure(
                NOT_FOUND, f"You don't have '{item.name}' in your inventory."
            )
        if self.is_item_empty(item):
            return Outcome.failure(
                EXHAUSTED, item.empty_description or f"The {item.name} is empty."
            )

        uses = self.state.increment_item_uses(item_id)
        lines = [item.use_message or f"You use the {item.name}."]

        if item.healing_amount > 0:
            before = self.state.health
            after = self.state.set_health(min(self.max_health, before + item.healing_amount))
            lines.append(f"You recover {after - before} health. Health: {after}")

        if item.max_uses > 0 and uses >= item.max_uses and item.disappears_when_empty:
            self.state.remove_from_inventory(item_id)
            self.state.mark_removed(item_id)
            lines.append(f"The {item.name} is gone.")
            self.log.info("item_used_up", item_id=item_id)

        return Outcome.success("\n".join(lines))

    # --- reveal graph ----------------------------------------------------

    def is_examinable_visible(self, obj: ExaminableObject) -> bool:
        return not obj.is_hidden or obj.id in self.state.revealed_examinable_ids()

    def visible_examinables(self, room_id: int | None = None) -> list[ExaminableObject]:
        if room_id is None:
            room_id = self.state.current_room_id
        revealed = self.state.revealed_examinable_ids()
        return [
            obj
            for obj in self.world.examinables_in(room_id)
            if not obj.is_hidden or obj.id in revealed
        ]

    def _reveal_examinable(self, obj: ExaminableObject, trigger: str) -> str | None:
        """Record a reveal and return the message the player should see."""
        if not self.state.mark_examinable_revealed(obj.id):
            return None
        self.log.info("examinable_revealed", examinable_id=obj.id, trigger=trigger)
        if (
            obj.reveal_message
            and obj.show_reveal_message
            and obj.room_id == self.state.current_room_id
        ):
            return obj.reveal_message
        return None

    def check_and_reveal_examinables(
        self,
        action_id: int | None = None,
        examinable_id: int | None = None,
        item_id: int | None = None,
    ) -> list[str]:
        """Reveal every hidden examinable whose trigger matches the event.

        The scan covers the whole world, not just the current room; reveals
        elsewhere are recorded silently.
        """
        if sum(t is not None for t in (action_id, examinable_id, item_id)) != 1:
            raise ValueError("exactly one trigger must be given")

        revealed = self.state.revealed_examinable_ids()
        messages = []
        for obj in self.world.examinables.values():
            if not obj.is_hidden or obj.id in revealed:
                continue
            if action_id is not None and obj.revealed_by_action_id == action_id:
                trigger = "action"
            elif (
                examinable_id is not None
                and obj.revealed_by_examinable_id == examinable_id
            ):
                trigger = "examine"
            elif item_id is not None and obj.revealed_by_item_id == item_id:
                trigger = "pickup"
            else:
                continue
            message = self._reveal_examinable(obj, trigger)
            if message:
                messages.append(message)
        return messages

    def is_container_visible(self, container: Container) -> bool:
        return (
            not container.is_hidden
            or container.id in self.state.revealed_container_ids()
        )

    def visible_containers(self, room_id: int | None = None) -> list[Container]:
        if room_id is None:
            room_id = self.state.current_room_id
        revealed = self.state.revealed_container_ids()
        return [
            c
            for c in self.world.containers_in(room_id)
            if not c.is_hidden or c.id in revealed
        ]

    def check_and_reveal_containers(self, examinable_id: int) -> list[str]:
        """Reveal hidden containers unlocked by examining an object."""
        revealed = self.state.revealed_container_ids()
        messages = []
        for container in self.world.containers.values():
            if not container.is_hidden or container.id in revealed:
                continue
            if container.revealed_by_examinable_id != examinable_id:
                continue
            if not self.state.mark_container_revealed(container.id):
                continue
            self.log.info("container_revealed", container_id=container.id)
            if (
                container.reveal_message
                and container.room_id == self.state.current_room_id
            ):
                messages.append(container.reveal_message)
        return messages

    # --- examining and activating ----------------------------------------

    def _is_spent(self, obj: ExaminableObject) -> bool:
        if obj.is_one_time_use and self.state.is_activated(obj.id):
            return True
        return obj.max_uses > 0 and self.state.examinable_uses(obj.id) >= obj.max_uses

    def examinable_description(
        self, obj: ExaminableObject, use_look_description: bool = False
    ) -> str:
        if obj.is_activatable and obj.empty_description and self._is_spent(obj):
            return obj.empty_description
        if use_look_description and obj.look_description:
            return obj.look_description
        return obj.description

    def examine(self, examinable_id: int) -> Outcome:
        """Describe an object and fire anything examining it reveals."""
        obj = self.world.examinable(examinable_id)
        if not self.is_examinable_visible(obj):
            return Outcome.failure(
                NOT_FOUND, f"You don't see anything special about '{obj.name}'."
            )
        reveals = self.check_and_reveal_examinables(examinable_id=obj.id)
        reveals += self.check_and_reveal_containers(obj.id)
        return Outcome.success(self.examinable_description(obj), reveals)

    def activate(self, examinable_id: int) -> Outcome:
        obj = self.world.examinable(examinable_id)
        if not self.is_examinable_visible(obj):
            return Outcome.failure(
                NOT_FOUND, f"You don't see any '{obj.name}' here that you can activate."
            )
        if not obj.is_activatable:
            return Outcome.failure(INVALID_STATE, f"You can't activate the {obj.name}.")

        used_up = obj.empty_description or f"The {obj.name} has already been used."
        if obj.is_one_time_use and self.state.is_activated(obj.id):
            return Outcome.failure(INVALID_STATE, used_up)
        if obj.max_uses > 0 and self.state.examinable_uses(obj.id) >= obj.max_uses:
            return Outcome.failure(EXHAUSTED, used_up)

        uses = self.state.increment_examinable_uses(obj.id)
        self.state.mark_activated(obj.id)
        self.log.info("examinable_activated", examinable_id=obj.id, uses=uses)

        reveals = []
        # One edge only: the revealed object's own edges are not followed.
        if obj.reveals_examinable_id is not None:
            target = self.world.examinable(obj.reveals_examinable_id)
            if target.is_hidden:
                message = self._reveal_examinable(target, "activation")
                if message:
                    reveals.append(message)

        return Outcome.success(
            obj.activation_message or f"You activate the {obj.name}.", reveals
        )

    # --- interactions and room actions -----------------------------------

    def use_item_on_examinable(self, item_id: int, examinable_id: int) -> Outcome:
        item = self.world.item(item_id)
        obj = self.world.examinable(examinable_id)
        if not self.has_item(item_id):
            return Outcome.failure(
                NOT_FOUND, f"You don't have '{item.name}' in your inventory."
            )
        if not self.is_examinable_visible(obj):
            return Outcome.failure(NOT_FOUND, f"There is no '{obj.name}' here.")
        if obj.required_item_id != item_id:
            return Outcome.failure(
                INVALID_STATE,
                obj.failure_message or f"You can't use the {item.name} on the {obj.name}.",
            )
        if not self.state.record_interaction_completed(obj.id):
            return Outcome.failure(ALREADY_COMPLETED, "You've already done that.")

        self.log.info("interaction_completed", examinable_id=obj.id, item_id=item_id)
        return Outcome.success(
            obj.success_message or f"You use the {item.name} on the {obj.name}."
        )

    def available_actions(self, room_id: int | None = None) -> list[RoomAction]:
        if room_id is None:
            room_id = self.state.current_room_id
        return self.world.actions_in(room_id)

    def find_action(self, action_name: str, room_id: int | None = None) -> RoomAction | None:
        name = action_name.strip().lower()
        for action in self.available_actions(room_id):
            if action.action_name.lower() == name:
                return action
        return None

    def perform_action(self, action_name: str) -> Outcome:
        action = self.find_action(action_name)
        if action is None:
            return Outcome.failure(NOT_FOUND, f"You can't '{action_name}' here.")
        if not action.is_repeatable and self.state.is_action_completed(action.id):
            return Outcome.failure(ALREADY_COMPLETED, "You've already done that.")
        if action.required_item_id is not None and not self.has_item(
            action.required_item_id
        ):
            return Outcome.failure(
                INVALID_STATE,
                action.failure_message or "You don't have what you need to do that.",
            )

        times = self.state.record_action_completed(action.id)
        self.state.add_score(ACTION_POINTS)
        self.log.info("action_completed", action_id=action.id, times=times)

        reveals = self.check_and_reveal_examinables(action_id=action.id)
        return Outcome.success(action.success_message or "Done!", reveals)

    # --- rooms -----------------------------------------------------------

    def current_room(self) -> Room:
        return self.world.room(self.state.current_room_id)

    def exits(self, room_id: int | None = None) -> dict[str, int]:
        """Open exits for this save: static links plus unlocks, minus gates."""
        room = self.world.room(room_id if room_id is not None else self.state.current_room_id)
        exits = dict(room.neighbors)

        completed = self.state.completed_action_ids()
        for action in self.world.actions_in(room.id):
            if action.unlocks_room_id is not None and action.id in completed:
                exits[action.unlock_direction] = action.unlocks_room_id

        for obj in self.world.examinables_in(room.id):
            if obj.unlocks_room_id is None:
                continue
            done = self.state.is_interaction_completed(obj.id)
            if done and obj.unlock_direction:
                exits[obj.unlock_direction] = obj.unlocks_room_id
            elif not done:
                for direction, target in list(exits.items()):
                    if target != obj.unlocks_room_id:
                        continue
                    if obj.unlock_direction in (None, direction):
                        del exits[direction]
        return exits

    def is_dark(self, room_id: int | None = None) -> bool:
        """Dark rooms need their light source carried and lit.

        A dark room that names no light source is described normally.
        """
        room = self.world.room(room_id if room_id is not None else self.state.current_room_id)
        source = room.light_source_item_id
        if not room.is_dark or source is None:
            return False
        if not self.has_item(source):
            return True
        return self.state.get_item_state(source) != STATE_LIT

    def can_survive_deadly_room(self, room_id: int) -> bool:
        room = self.world.room(room_id)
        if not room.is_deadly_room:
            return True
        if room.protection_item_id is None or not self.has_item(room.protection_item_id):
            return False
        if room.protection_item_state:
            return (
                self.state.get_item_state(room.protection_item_id)
                == room.protection_item_state
            )
        return True

    def _condition_met(self, desc: RoomDescription) -> bool:
        kind = desc.condition_type
        if kind in (CONDITION_DEFAULT, CONDITION_ALWAYS):
            return True

        if kind == CONDITION_HAS_ITEM:
            if desc.required_item_id is None:
                return False
            owned = self.has_item(desc.required_item_id)
            return owned if desc.item_must_be_owned else not owned

        if kind == CONDITION_ITEM_STATE:
            if desc.required_item_id is None or not desc.required_item_state:
                return False
            if self.has_item(desc.required_item_id) != desc.item_must_be_owned:
                return False
            return (
                self.state.get_item_state(desc.required_item_id)
                == desc.required_item_state
            )

        if kind == CONDITION_COMPLETED_ACTION:
            if desc.required_action_id is None:
                return False
            done = self.state.is_action_completed(desc.required_action_id)
            return done if desc.action_must_be_completed else not done

        return False

    def get_room_description(self, room_id: int | None = None) -> str:
        """First satisfied conditional description, else the static one."""
        room = self.world.room(room_id if room_id is not None else self.state.current_room_id)
        for desc in self.world.room_descriptions.get(room.id, []):
            if self._condition_met(desc):
                return desc.description
        return room.description or FALLBACK_ROOM_DESCRIPTION

    def record_visit(self, room_id: int) -> int:
        """Count a visit and return the visit count."""
        self.world.room(room_id)
        return self.state.record_visit(room_id).visit_count

    def has_visited(self, room_id: int) -> bool:
        return self.state.get_visit(room_id) is not None

    def visited_room_ids(self) -> set[int]:
        return self.state.visited_room_ids()

    def mark_game_completed(self, won: bool) -> None:
        if won:
            self.state.add_score(WIN_BONUS)
        self.state.mark_completed(won)
        self.log.info("game_completed", won=won, score=self.state.save.score)

    def _apply_room_hazard(self, room: Room, outcome: MoveOutcome) -> None:
        if not room.is_deadly_room or room.damage_amount <= 0:
            return
        if self.can_survive_deadly_room(room.id):
            self.log.debug("deadly_room_survived", room_id=room.id)
            return

        health = self.state.set_health(self.state.health - room.damage_amount)
        self.log.debug(
            "deadly_room_damage", room_id=room.id, damage=room.damage_amount, health=health
        )
        outcome.damage = room.damage_amount
        outcome.health = health
        outcome.message += (
            f"\n\n{room.death_message or 'This room is dangerous!'} "
            f"You take {room.damage_amount} damage!\nHealth: {health}"
        )
        if health <= 0:
            outcome.died = True
            outcome.message += "\n\nYour health has reached zero. Game Over!"
            self.mark_game_completed(won=False)

    def move(self, direction: str) -> MoveOutcome:
        """Go through an exit, then apply whatever the new room does."""
        name = normalize_direction(direction)
        if name is None:
            return MoveOutcome(INVALID_STATE, f"'{direction}' is not a direction.")
        if self.state.save.is_completed:
            return MoveOutcome(INVALID_STATE, "The game is over.")

        target = self.exits().get(name)
        if target is None:
            return MoveOutcome(INVALID_STATE, f"You can't go {name} from here.")

        room = self.world.room(target)
        self.state.set_current_room(room.id)
        self.record_visit(room.id)
        self.log.info("room_entered", room_id=room.id, direction=name)

        if self.is_dark(room.id):
            text = DARK_MESSAGE
        else:
            text = self.get_room_description(room.id)
        outcome = MoveOutcome(
            OK,
            f"You move {name} to the {room.name}.\n\n{text}",
            room_id=room.id,
            health=self.state.health,
        )

        self._apply_room_hazard(room, outcome)
        if not outcome.died and room.is_winning_room:
            outcome.won = True
            outcome.message += f"\n\n{room.win_message or 'You won the game!'}"
            self.mark_game_completed(won=True)
        return outcome

    # --- containers ------------------------------------------------------

    def container_state(self, container_id: int) -> ContainerStatus:
        container = self.world.container(container_id)
        row = self.state.get_container_state(container_id)
        if row is None:
            return ContainerStatus(container.starts_open, container.starts_locked)
        return ContainerStatus(row.is_open, row.is_locked)

    def container_items(self, container_id: int) -> list[Item]:
        container = self.world.container(container_id)
        gone = self.state.picked_up_item_ids() | self.state.removed_item_ids()
        return [self.world.item(i) for i in container.item_ids if i not in gone]

    def _contents_text(self, container: Container) -> str:
        items = self.container_items(container.id)
        if items:
            return "Inside you see: " + ", ".join(i.name for i in items)
        return container.empty_description or "It's empty."

    def describe_container(self, container_id: int) -> str:
        container = self.world.container(container_id)
        status = self.container_state(container_id)
        if status.is_open:
            text = container.open_description or container.description
            return f"{text}\n\n{self._contents_text(container)}"
        if status.is_locked:
            return f"{container.description}\n\nThe {container.name} is locked."
        return f"{container.description}\n\nThe {container.name} is closed."

    def _container_in_reach(self, container: Container) -> Outcome | None:
        if not self.is_container_visible(container):
            return Outcome.failure(NOT_FOUND, f"There is no '{container.name}' here.")
        return None

    def open_container(self, container_id: int) -> Outcome:
        container = self.world.container(container_id)
        if failure := self._container_in_reach(container):
            return failure
        status = self.container_state(container_id)
        if status.is_open:
            return Outcome.failure(INVALID_STATE, f"The {container.name} is already open.")
        if status.is_locked:
            return Outcome.failure(
                INVALID_STATE, container.locked_message or f"The {container.name} is locked."
            )
        self.state.save_container_state(container_id, is_open=True, is_locked=False)
        self.log.info("container_opened", container_id=container_id)
        return Outcome.success(
            f"You open the {container.name}.\n\n{self._contents_text(container)}"
        )

    def close_container(self, container_id: int) -> Outcome:
        container = self.world.container(container_id)
        if failure := self._container_in_reach(container):
            return failure
        status = self.container_state(container_id)
        if not status.is_open:
            return Outcome.failure(INVALID_STATE, f"The {container.name} is already closed.")
        self.state.save_container_state(container_id, is_open=False, is_locked=status.is_locked)
        return Outcome.success(f"You close the {container.name}.")

    def _key_check(self, container: Container, verb: str) -> Outcome | None:
        if container.key_item_id is not None and not self.has_item(container.key_item_id):
            return Outcome.failure(
                INVALID_STATE,
                f"You don't have the right key to {verb} the {container.name}.",
            )
        return None

    def lock_container(self, container_id: int) -> Outcome:
        container = self.world.container(container_id)
        if failure := self._container_in_reach(container):
            return failure
        if not container.is_lockable:
            return Outcome.failure(
                INVALID_STATE, f"The {container.name} cannot be locked or unlocked."
            )
        status = self.container_state(container_id)
        if status.is_locked:
            return Outcome.failure(INVALID_STATE, f"The {container.name} is already locked.")
        if status.is_open:
            return Outcome.failure(
                INVALID_STATE, f"You must close the {container.name} before locking it."
            )
        if failure := self._key_check(container, "lock"):
            return failure
        self.state.save_container_state(container_id, is_open=False, is_locked=True)
        self.log.info("container_locked", container_id=container_id)
        return Outcome.success(f"You lock the {container.name}.")

    def unlock_container(self, container_id: int) -> Outcome:
        container = self.world.container(container_id)
        if failure := self._container_in_reach(container):
            return failure
        if not container.is_lockable:
            return Outcome.failure(
                INVALID_STATE, f"The {container.name} cannot be locked or unlocked."
            )
        status = self.container_state(container_id)
        if not status.is_locked:
            return Outcome.failure(
                INVALID_STATE, f"The {container.name} is already unlocked."
            )
        if failure := self._key_check(container, "unlock"):
            return failure
        self.state.save_container_state(container_id, is_open=status.is_open, is_locked=False)
        self.log.info("container_unlocked", container_id=container_id)
        return Outcome.success(container.unlock_message or f"You unlock the {container.name}.")
