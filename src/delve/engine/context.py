"""Short-lived conversational memory for pronouns and "go back".

Values are never deleted when they go stale. Reads compare the record's
last update time against an expiry window and report "no context" once the
window has passed.
"""

import datetime as dt
from collections.abc import Callable

import structlog

from ..logging import get_logger
from .state import SaveState
from .world import Item, World

MENTION_EXPIRY = dt.timedelta(minutes=5)
ROOM_EXPIRY = dt.timedelta(minutes=10)


def _utc_now() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


def _as_utc(value: dt.datetime) -> dt.datetime:
    # sqlite hands datetimes back without tzinfo
    return value if value.tzinfo else value.replace(tzinfo=dt.UTC)


class ContextManager:
    """Last mentioned item, last examined object, and last room for a save."""

    def __init__(
        self,
        state: SaveState,
        clock: Callable[[], dt.datetime] = _utc_now,
        logger: structlog.BoundLogger | None = None,
    ):
        self.state = state
        self.clock = clock
        self.log = logger or get_logger(__name__).bind(save_id=state.save_id)

    def _is_fresh(self, window: dt.timedelta) -> bool:
        record = self.state.get_player_context()
        return _as_utc(record.updated_at) >= self.clock() - window

    def set_last_mentioned_item(self, item_id: int) -> None:
        self.state.update_player_context(self.clock(), last_mentioned_item_id=item_id)
        self.log.debug("context_item_mentioned", item_id=item_id)

    def set_last_examined_object(self, examinable_id: int) -> None:
        self.state.update_player_context(
            self.clock(), last_examined_object_id=examinable_id
        )

    def set_last_room(self, room_id: int) -> None:
        self.state.update_player_context(self.clock(), last_room_id=room_id)

    def last_mentioned_item_id(self) -> int | None:
        if not self._is_fresh(MENTION_EXPIRY):
            return None
        return self.state.get_player_context().last_mentioned_item_id

    def last_mentioned_item(self, world: World) -> Item | None:
        item_id = self.last_mentioned_item_id()
        return world.item(item_id) if item_id is not None else None

    def last_examined_object_id(self) -> int | None:
        if not self._is_fresh(MENTION_EXPIRY):
            return None
        return self.state.get_player_context().last_examined_object_id

    def last_room_id(self) -> int | None:
        if not self._is_fresh(ROOM_EXPIRY):
            return None
        return self.state.get_player_context().last_room_id

    def clear(self) -> None:
        self.state.update_player_context(
            self.clock(),
            last_mentioned_item_id=None,
            last_examined_object_id=None,
            last_room_id=None,
        )
        self.log.debug("context_cleared")
