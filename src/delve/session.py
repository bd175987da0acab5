"""Session layer bridging the command pipeline, the rules, and the database."""

import dataclasses
import datetime as dt
from collections.abc import Callable

from sqlmodel import Session

from . import saves
from .config import Config
from .engine import ambiguity, parser
from .engine.ambiguity import Resolution
from .engine.context import ContextManager
from .engine.outcomes import INVALID_STATE, MoveOutcome
from .engine.resolver import SemanticResolver
from .engine.rules import DARK_MESSAGE, WorldStateEngine
from .engine.state import SaveState
from .engine.vocabulary import Vocabulary
from .engine.world import ExaminableObject, World
from .errors import SaveSlotError
from .logging import get_logger
from .models import GameSave


class GameSession:
    """Wraps one GameSave with the parser, resolver, context, and rules."""

    def __init__(
        self,
        db: Session,
        world: World,
        save: GameSave,
        config: Config,
        clock: Callable[[], dt.datetime] | None = None,
    ):
        self.db = db
        self.world = world
        self.config = config
        self.clock = clock
        self.vocabulary = Vocabulary(world.vocabulary)
        self._bind(save)

    def _bind(self, save: GameSave) -> None:
        self.save_record = save
        self.log = get_logger(__name__).bind(save_id=save.id)
        self.state = SaveState.load(self.db, save.id)
        self.engine = WorldStateEngine(
            self.world, self.state, logger=self.log, max_health=self.config.max_health
        )
        self.resolver = SemanticResolver(
            self.world,
            self.engine,
            self.vocabulary,
            max_distance=self.config.fuzzy_max_distance,
            logger=self.log,
        )
        if self.clock is None:
            self.context = ContextManager(self.state, logger=self.log)
        else:
            self.context = ContextManager(self.state, clock=self.clock, logger=self.log)

    @classmethod
    def start(
        cls, db: Session, world: World, config: Config, slot_name: str, **kwargs
    ) -> "GameSession":
        """Create a fresh save in slot_name."""
        save = saves.create_new_game(db, world, slot_name, config.starting_health)
        return cls(db, world, save, config, **kwargs)

    @classmethod
    def load(
        cls, db: Session, world: World, config: Config, slot_name: str, **kwargs
    ) -> "GameSession":
        save = saves.get_save_by_slot(db, slot_name)
        if save is None:
            raise SaveSlotError(f"No save in slot '{slot_name}'")
        saves.touch_save(db, save)
        return cls(db, world, save, config, **kwargs)

    # --- input -----------------------------------------------------------

    def parse(self, raw_input: str) -> parser.ParsedInput:
        """Parse a line and put its verb in canonical form."""
        parsed = parser.parse(raw_input)
        self.log.debug("input_parsed", raw_input=raw_input, verb=parsed.verb)
        if parsed.is_empty:
            return parsed
        return dataclasses.replace(parsed, verb=self.resolver.normalize_verb(parsed.verb))

    def resolve_item(
        self, phrase: str, include_inventory: bool = True, include_room: bool = True
    ) -> Resolution:
        """Resolve phrase to one item, following pronouns to the last mention."""
        if parser.is_pronoun(phrase.strip()):
            item = self.context.last_mentioned_item(self.world)
            if item is None:
                return Resolution(
                    ambiguity.NOT_FOUND,
                    message="I'm not sure what you're referring to.",
                )
            in_scope = self.resolver.scope_items(include_inventory, include_room)
            if item not in in_scope:
                return Resolution(
                    ambiguity.NOT_FOUND, message=f"You don't see the {item.name} here."
                )
            resolution = Resolution(ambiguity.RESOLVED, item=item, candidates=[item])
        else:
            candidates = self.resolver.resolve_items(
                phrase, include_inventory, include_room
            )
            resolution = ambiguity.resolve(candidates, phrase)

        if resolution.resolved:
            self.context.set_last_mentioned_item(resolution.item.id)
        return resolution

    def resolve_examinable(self, phrase: str) -> ExaminableObject | None:
        room_id = self.state.current_room_id
        if parser.is_pronoun(phrase.strip()):
            last = self.context.last_examined_object_id()
            if last is None:
                return None
            obj = self.world.examinable(last)
            if obj.room_id != room_id or not self.engine.is_examinable_visible(obj):
                return None
            return obj

        obj = self.resolver.resolve_examinable(phrase, room_id, visibility=self.engine)
        if obj is not None:
            self.context.set_last_examined_object(obj.id)
        return obj

    # --- movement --------------------------------------------------------

    def move(self, direction: str) -> MoveOutcome:
        previous = self.state.current_room_id
        outcome = self.engine.move(direction)
        if outcome.ok:
            self.context.set_last_room(previous)
        return outcome

    def go_back(self) -> MoveOutcome:
        """Return to the room the player just came from, if an exit leads there."""
        last = self.context.last_room_id()
        if last is None:
            return MoveOutcome(INVALID_STATE, "You don't remember where you came from.")
        for direction, target in self.engine.exits().items():
            if target == last:
                return self.move(direction)
        return MoveOutcome(INVALID_STATE, "You can't go back that way from here.")

    def look(self) -> str:
        """Room text with the visible objects, items, and exits."""
        if self.engine.is_dark():
            return DARK_MESSAGE

        room = self.engine.current_room()
        parts = [f"{room.name}\n\n{self.engine.get_room_description()}"]

        objects = [o.label for o in self.engine.visible_examinables() if o.show_in_look]
        objects += [
            c.label
            for c in self.engine.visible_containers()
            if c.show_in_room_description
        ]
        if objects:
            parts.append("You notice: " + ", ".join(objects))
        items = [i.name for i in self.engine.room_items()]
        if items:
            parts.append("You see: " + ", ".join(items))
        exits = list(self.engine.exits())
        parts.append("Exits: " + (", ".join(exits) if exits else "none"))
        return "\n\n".join(parts)

    # --- saving ----------------------------------------------------------

    def save(self) -> None:
        saves.touch_save(self.db, self.state.save)

    def reset(self) -> None:
        """Throw away this save's progress and start over in the same slot."""
        slot_name = self.save_record.slot_name
        saves.delete_save(self.db, self.save_record.id)
        save = saves.create_new_game(
            self.db, self.world, slot_name, self.config.starting_health
        )
        self._bind(save)
        self.log.info("game_reset", slot_name=slot_name)
