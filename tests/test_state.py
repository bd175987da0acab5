"""Tests for per-save shadow state."""

import pytest
from sqlmodel import Session, select

from delve import models
from delve.engine.state import SaveState
from delve.errors import WorldIntegrityError


def test_load_missing_save(db_session: Session):
    """Binding to a save that does not exist fails."""
    with pytest.raises(WorldIntegrityError):
        SaveState.load(db_session, 12345)


def test_rows_created_lazily(state: SaveState, db_session: Session):
    """Reading state never writes shadow rows."""
    assert state.get_item_state(3) == "default"
    assert state.item_uses(3) == 0
    assert state.get_container_state(1) is None
    assert db_session.exec(select(models.ItemState)).all() == []


def test_one_row_per_entity(state: SaveState, db_session: Session):
    """Repeated writes update the same row."""
    state.set_item_state(3, "lit")
    state.set_item_state(3, "unlit")
    state.increment_item_uses(3)
    state.increment_item_uses(3)
    assert len(db_session.exec(select(models.ItemState)).all()) == 1
    assert state.get_item_state(3) == "unlit"
    assert state.item_uses(3) == 2


def test_reveal_recorded_once(state: SaveState):
    """A reveal is only new the first time."""
    assert state.mark_examinable_revealed(2)
    assert not state.mark_examinable_revealed(2)
    assert state.revealed_examinable_ids() == {2}
    assert state.mark_container_revealed(1)
    assert not state.mark_container_revealed(1)


def test_action_completion_counts(state: SaveState):
    """Completed actions count repeats."""
    assert not state.is_action_completed(1)
    assert state.record_action_completed(1) == 1
    assert state.record_action_completed(1) == 2
    assert state.completed_action_ids() == {1}


def test_health_never_negative(state: SaveState):
    """Health is clamped at zero."""
    assert state.set_health(-15) == 0


def test_current_room_counts_turns(state: SaveState):
    """Changing room is a turn."""
    state.set_current_room(2)
    state.set_current_room(1)
    assert state.current_room_id == 1
    assert state.save.turn_count == 2


def test_place_item_moves_existing_row(state: SaveState):
    """An item is only ever placed in one room."""
    state.place_item(1, 2)
    state.place_item(1, 3)
    assert state.placed_item_ids(2) == []
    assert state.placed_item_ids(3) == [1]
    assert state.remove_placed_item(1)
    assert not state.remove_placed_item(1)
