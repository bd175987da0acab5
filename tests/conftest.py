"""Shared test fixtures for Delve.

The seeded world:

    [5 Tower]
        | up (after "pull lever")
    [4 Vault] -west- [2 Library]            [6 Pit]  (deadly, needs glowing amulet)
     (win)    (iron     |                      | down
              door)   north                    |
                        |                      |
                    [1 Entrance Hall] -east- [3 Cellar] (dark, needs lit lantern)

Items: 1 brass key, 2 iron key, 3 lantern (hall); 4 healing potion,
5 amulet, 7 phial (library); 6 gold coin (in the strongbox).
"""

import datetime as dt
from pathlib import Path

import pytest
from sqlmodel import Session

from delve import models
from delve.config import Config
from delve.db import build_engine, init_db
from delve.engine.context import ContextManager
from delve.engine.loader import load_world
from delve.engine.resolver import SemanticResolver
from delve.engine.rules import WorldStateEngine
from delve.engine.state import SaveState
from delve.engine.vocabulary import Vocabulary
from delve.engine.world import World
from delve.models import GameSave
from delve.saves import create_new_game
from delve.session import GameSession


def seed_world(db: Session) -> None:
    """Insert the miniature test world."""
    db.add_all(
        [
            models.Room(
                id=1,
                name="Entrance Hall",
                description="A draughty entrance hall.",
                north_room_id=2,
                east_room_id=3,
                is_starting_room=True,
            ),
            models.Room(
                id=2,
                name="Library",
                description="A dusty library.",
                south_room_id=1,
                west_room_id=4,
            ),
            models.Room(
                id=3,
                name="Cellar",
                description="Barrels line the walls.",
                west_room_id=1,
                down_room_id=6,
                is_dark=True,
                light_source_item_id=3,
            ),
            models.Room(
                id=4,
                name="Vault",
                description="Gold everywhere.",
                east_room_id=2,
                is_winning_room=True,
                win_message="You found the treasure!",
            ),
            models.Room(
                id=5,
                name="Tower",
                description="Wind howls through the tower.",
                down_room_id=2,
            ),
            models.Room(
                id=6,
                name="Pit",
                description="A foul-smelling pit.",
                up_room_id=3,
                is_deadly_room=True,
                damage_amount=40,
                death_message="Poison gas burns your lungs.",
                protection_item_id=5,
                protection_item_state="glowing",
            ),
        ]
    )
    db.add_all(
        [
            models.Item(id=1, name="brass key", description="A small brass key.", room_id=1),
            models.Item(id=2, name="iron key", description="A heavy iron key.", room_id=1),
            models.Item(
                id=3,
                name="lantern",
                description="An old oil lantern.",
                room_id=1,
                max_uses=0,
            ),
            models.Item(
                id=4,
                name="healing potion",
                description="A red potion.",
                room_id=2,
                healing_amount=25,
                use_message="You drink the potion.",
                disappears_when_empty=True,
            ),
            models.Item(id=5, name="amulet", description="A silver amulet.", room_id=2),
            models.Item(id=6, name="gold coin", description="A gold coin."),
            models.Item(id=7, name="phial", description="A glass phial.", room_id=2),
            models.ItemAdjective(item_id=1, adjective="brass", priority=2),
            models.ItemAdjective(item_id=1, adjective="small", priority=1),
            models.ItemAdjective(item_id=2, adjective="iron", priority=2),
            models.ItemAdjective(item_id=2, adjective="heavy", priority=1),
        ]
    )
    db.add_all(
        [
            models.RoomAction(
                id=1,
                room_id=2,
                action_name="pull lever",
                description="A lever juts from the wall.",
                success_message="Gears grind overhead.",
                unlocks_room_id=5,
                unlock_direction="up",
                is_repeatable=False,
            ),
            models.RoomAction(
                id=2,
                room_id=1,
                action_name="pray",
                description="A small shrine.",
                required_item_id=5,
                failure_message="You feel nothing.",
            ),
        ]
    )
    db.add_all(
        [
            models.ExaminableObject(
                id=1,
                room_id=2,
                name="desk",
                description="A writing desk covered in papers.",
                keywords="table,writing desk",
            ),
            models.ExaminableObject(
                id=2,
                room_id=2,
                name="drawer",
                description="A shallow drawer.",
                is_hidden=True,
                revealed_by_examinable_id=1,
                reveal_message="You notice a drawer in the desk.",
            ),
            models.ExaminableObject(
                id=3,
                room_id=2,
                name="switch",
                description="A brass switch.",
                is_activatable=True,
                is_one_time_use=True,
                activation_message="Click.",
                empty_description="The switch is stuck down.",
                reveals_examinable_id=4,
            ),
            models.ExaminableObject(
                id=4,
                room_id=2,
                name="panel",
                description="A sliding panel.",
                is_hidden=True,
                reveal_message="A panel slides aside.",
                reveals_examinable_id=5,
                is_activatable=True,
            ),
            models.ExaminableObject(
                id=5,
                room_id=2,
                name="niche",
                description="A small niche.",
                is_hidden=True,
                reveal_message="A niche opens.",
            ),
            models.ExaminableObject(
                id=6,
                room_id=2,
                name="alcove",
                description="A shadowy alcove.",
                is_hidden=True,
                revealed_by_item_id=5,
                reveal_message="Behind the amulet's stand you notice an alcove.",
            ),
            models.ExaminableObject(
                id=7,
                room_id=2,
                name="iron door",
                description="A heavy iron door to the west.",
                keywords="door",
                required_item_id=2,
                unlocks_room_id=4,
                unlock_direction="west",
                success_message="The door swings open.",
                failure_message="That doesn't fit the lock.",
            ),
            models.ExaminableObject(
                id=8,
                room_id=2,
                name="mural",
                description="A faded mural.",
                is_hidden=True,
                revealed_by_action_id=1,
                reveal_message="A mural appears.",
                show_reveal_message=False,
            ),
            models.ExaminableObject(
                id=9,
                room_id=1,
                name="fountain",
                description="A stone fountain.",
                look_description="A fountain burbles.",
                is_activatable=True,
                max_uses=2,
                activation_message="You drink from the fountain.",
                empty_description="The fountain is dry.",
            ),
            models.ExaminableObject(
                id=10,
                room_id=3,
                name="trapdoor",
                description="A trapdoor in the floor.",
                is_hidden=True,
                revealed_by_action_id=1,
                reveal_message="A trapdoor creaks open somewhere below.",
            ),
        ]
    )
    db.add_all(
        [
            models.Container(
                id=1,
                room_id=2,
                name="strongbox",
                description="A steel strongbox.",
                keywords="box",
                is_lockable=True,
                starts_locked=True,
                key_item_id=1,
                unlock_message="The strongbox clicks open.",
                is_hidden=True,
                revealed_by_examinable_id=1,
                reveal_message="A strongbox sits under the desk.",
            ),
            models.Container(
                id=2,
                room_id=1,
                name="crate",
                description="A wooden crate.",
                empty_description="Nothing but straw.",
            ),
            models.ContainerItem(container_id=1, item_id=6),
        ]
    )
    db.add_all(
        [
            models.RoomDescription(
                room_id=1,
                description="The hall glows in lantern light.",
                priority=10,
                condition_type="item_state",
                required_item_id=3,
                required_item_state="lit",
            ),
            models.RoomDescription(
                room_id=1,
                description="The hall feels smaller with a key in your pocket.",
                priority=5,
                condition_type="has_item",
                required_item_id=1,
            ),
            models.RoomDescription(
                room_id=2,
                description="A dusty library. The lever is pulled down.",
                priority=10,
                condition_type="completed_action",
                required_action_id=1,
            ),
            models.RoomDescription(
                room_id=2,
                description="A dusty library. An amulet rests on a stand.",
                priority=1,
                condition_type="has_item",
                required_item_id=5,
                item_must_be_owned=False,
            ),
        ]
    )
    db.add_all(
        [
            models.Vocabulary(word="lamp", word_type="noun", canonical_form="lantern"),
            models.Vocabulary(word="torch", word_type="noun", canonical_form="lantern"),
            models.Vocabulary(word="phial", word_type="noun", canonical_form="bottle"),
            models.Vocabulary(word="shiny", word_type="adjective", canonical_form="brass"),
            models.Vocabulary(word="grab", word_type="verb", canonical_form="take"),
            models.Vocabulary(word="get", word_type="verb", canonical_form="take"),
            models.Vocabulary(word="take", word_type="verb"),
            models.Vocabulary(word="light", word_type="verb", category="manipulation"),
            models.Vocabulary(word="light", word_type="noun", canonical_form="lantern"),
        ]
    )
    db.commit()


class FakeClock:
    """Hand-advanced clock for expiry tests."""

    def __init__(self):
        self.now = dt.datetime(2024, 1, 1, 12, 0, tzinfo=dt.UTC)

    def __call__(self) -> dt.datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        self.now += dt.timedelta(**delta)


@pytest.fixture
def test_config(tmp_path: Path) -> Config:
    return Config(database_url=f"sqlite:///{tmp_path}/test.db")


@pytest.fixture
def db_engine(test_config: Config):
    engine = build_engine(test_config.database_url)
    init_db(engine)
    return engine


@pytest.fixture
def db_session(db_engine):
    with Session(db_engine) as session:
        seed_world(session)
        yield session


@pytest.fixture
def world(db_session: Session) -> World:
    return load_world(db_session)


@pytest.fixture
def save(db_session: Session, world: World) -> GameSave:
    return create_new_game(db_session, world, "test")


@pytest.fixture
def state(db_session: Session, save: GameSave) -> SaveState:
    return SaveState.load(db_session, save.id)


@pytest.fixture
def engine(world: World, state: SaveState) -> WorldStateEngine:
    return WorldStateEngine(world, state)


@pytest.fixture
def vocabulary(world: World) -> Vocabulary:
    return Vocabulary(world.vocabulary)


@pytest.fixture
def resolver(world: World, engine: WorldStateEngine, vocabulary: Vocabulary):
    return SemanticResolver(world, engine, vocabulary)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def context(state: SaveState, clock: FakeClock) -> ContextManager:
    return ContextManager(state, clock=clock)


@pytest.fixture
def session(db_session, world, save, test_config, clock) -> GameSession:
    return GameSession(db_session, world, save, test_config, clock=clock)


@pytest.fixture
def in_library(state: SaveState) -> SaveState:
    state.set_current_room(2)
    return state
