"""Tests for pronoun and "go back" memory."""

from delve.engine.context import ContextManager
from delve.engine.world import World


def test_empty_context(context: ContextManager):
    """A new save remembers nothing."""
    assert context.last_mentioned_item_id() is None
    assert context.last_examined_object_id() is None
    assert context.last_room_id() is None


def test_remembers_values(context: ContextManager, world: World):
    """Stored values come back while fresh."""
    context.set_last_mentioned_item(3)
    context.set_last_examined_object(9)
    context.set_last_room(2)
    assert context.last_mentioned_item_id() == 3
    assert context.last_mentioned_item(world).name == "lantern"
    assert context.last_examined_object_id() == 9
    assert context.last_room_id() == 2


def test_mention_expires_after_five_minutes(context: ContextManager, clock):
    """Item mentions go stale after five minutes."""
    context.set_last_mentioned_item(3)
    clock.advance(minutes=4, seconds=59)
    assert context.last_mentioned_item_id() == 3
    clock.advance(seconds=2)
    assert context.last_mentioned_item_id() is None


def test_room_outlives_mentions(context: ContextManager, clock):
    """The last room is kept for ten minutes."""
    context.set_last_mentioned_item(3)
    context.set_last_room(2)
    clock.advance(minutes=7)
    assert context.last_mentioned_item_id() is None
    assert context.last_room_id() == 2
    clock.advance(minutes=4)
    assert context.last_room_id() is None


def test_expired_values_are_not_deleted(context: ContextManager, clock, state):
    """Expiry is only checked on read."""
    context.set_last_mentioned_item(3)
    clock.advance(minutes=30)
    assert context.last_mentioned_item_id() is None
    assert state.get_player_context().last_mentioned_item_id == 3


def test_clear(context: ContextManager):
    """Clearing forgets everything."""
    context.set_last_mentioned_item(3)
    context.set_last_room(2)
    context.clear()
    assert context.last_mentioned_item_id() is None
    assert context.last_room_id() is None
