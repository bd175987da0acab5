"""Mutable per-save game state.

SaveState is the single persistence boundary for one save: every read and
write of shadow state goes through it, and each mutation commits before
returning. Shadow rows are created lazily on first use and are unique per
(save, entity).
"""

import datetime as dt
from typing import Any, TypeVar

from sqlmodel import Session, SQLModel, select

from .. import models
from ..errors import WorldIntegrityError
from .world import STATE_DEFAULT

T = TypeVar("T", bound=SQLModel)


def _now() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


class SaveState:
    """Shadow state for one save, read and written through a db session."""

    def __init__(self, db: Session, save_id: int):
        self.db = db
        self.save_id = save_id

    @classmethod
    def load(cls, db: Session, save_id: int) -> "SaveState":
        """Bind to an existing save, failing if the save does not exist."""
        if db.get(models.GameSave, save_id) is None:
            raise WorldIntegrityError(f"Save game {save_id} not found")
        return cls(db, save_id)

    # --- helpers ---------------------------------------------------------

    def _first(self, model: type[T], **filters: Any) -> T | None:
        statement = select(model).where(model.save_id == self.save_id)
        for column, value in filters.items():
            statement = statement.where(getattr(model, column) == value)
        return self.db.exec(statement).first()

    def _all(self, model: type[T], **filters: Any) -> list[T]:
        statement = select(model).where(model.save_id == self.save_id)
        for column, value in filters.items():
            statement = statement.where(getattr(model, column) == value)
        return list(self.db.exec(statement.order_by(model.id)).all())

    def _commit(self, *rows: SQLModel) -> None:
        for row in rows:
            self.db.add(row)
        self.db.commit()

    # --- the save itself -------------------------------------------------

    @property
    def save(self) -> models.GameSave:
        save = self.db.get(models.GameSave, self.save_id)
        if save is None:
            raise WorldIntegrityError(f"Save game {self.save_id} not found")
        return save

    @property
    def current_room_id(self) -> int:
        return self.save.current_room_id

    def set_current_room(self, room_id: int) -> None:
        save = self.save
        save.current_room_id = room_id
        save.turn_count += 1
        self._commit(save)

    def add_score(self, points: int) -> int:
        save = self.save
        save.score += points
        self._commit(save)
        return save.score

    @property
    def health(self) -> int:
        return self.save.health

    def set_health(self, health: int) -> int:
        save = self.save
        save.health = max(0, health)
        self._commit(save)
        return save.health

    def mark_completed(self, won: bool) -> None:
        save = self.save
        save.is_completed = True
        save.is_player_dead = not won
        self._commit(save)

    # --- item location and lifecycle ------------------------------------

    def inventory_item_ids(self) -> list[int]:
        return [row.item_id for row in self._all(models.InventoryItem)]

    def has_item(self, item_id: int) -> bool:
        return self._first(models.InventoryItem, item_id=item_id) is not None

    def add_to_inventory(self, item_id: int) -> None:
        self._commit(models.InventoryItem(save_id=self.save_id, item_id=item_id))

    def remove_from_inventory(self, item_id: int) -> bool:
        row = self._first(models.InventoryItem, item_id=item_id)
        if row is None:
            return False
        self.db.delete(row)
        self.db.commit()
        return True

    def placed_item_ids(self, room_id: int) -> list[int]:
        return [row.item_id for row in self._all(models.PlacedItem, room_id=room_id)]

    def place_item(self, item_id: int, room_id: int) -> None:
        row = self._first(models.PlacedItem, item_id=item_id)
        if row is None:
            row = models.PlacedItem(save_id=self.save_id, item_id=item_id, room_id=room_id)
        else:
            row.room_id = room_id
            row.placed_at = _now()
        self._commit(row)

    def remove_placed_item(self, item_id: int) -> bool:
        row = self._first(models.PlacedItem, item_id=item_id)
        if row is None:
            return False
        self.db.delete(row)
        self.db.commit()
        return True

    def picked_up_item_ids(self) -> set[int]:
        return {row.item_id for row in self._all(models.PickedUpItem)}

    def mark_picked_up(self, item_id: int) -> None:
        if self._first(models.PickedUpItem, item_id=item_id) is None:
            self._commit(models.PickedUpItem(save_id=self.save_id, item_id=item_id))

    def removed_item_ids(self) -> set[int]:
        return {row.item_id for row in self._all(models.RemovedItem)}

    def mark_removed(self, item_id: int) -> None:
        if self._first(models.RemovedItem, item_id=item_id) is None:
            self._commit(models.RemovedItem(save_id=self.save_id, item_id=item_id))

    # --- item state and usage -------------------------------------------

    def get_item_state(self, item_id: int) -> str:
        row = self._first(models.ItemState, item_id=item_id)
        return row.state if row is not None else STATE_DEFAULT

    def set_item_state(self, item_id: int, state: str) -> None:
        row = self._first(models.ItemState, item_id=item_id)
        if row is None:
            row = models.ItemState(save_id=self.save_id, item_id=item_id, state=state)
        else:
            row.state = state
            row.updated_at = _now()
        self._commit(row)

    def item_uses(self, item_id: int) -> int:
        row = self._first(models.ItemUsage, item_id=item_id)
        return row.uses if row is not None else 0

    def increment_item_uses(self, item_id: int) -> int:
        row = self._first(models.ItemUsage, item_id=item_id)
        if row is None:
            row = models.ItemUsage(save_id=self.save_id, item_id=item_id)
        row.uses += 1
        row.last_used_at = _now()
        self._commit(row)
        return row.uses

    def examinable_uses(self, examinable_id: int) -> int:
        row = self._first(models.ExaminableObjectUsage, examinable_id=examinable_id)
        return row.uses if row is not None else 0

    def increment_examinable_uses(self, examinable_id: int) -> int:
        row = self._first(models.ExaminableObjectUsage, examinable_id=examinable_id)
        if row is None:
            row = models.ExaminableObjectUsage(
                save_id=self.save_id, examinable_id=examinable_id
            )
        row.uses += 1
        row.last_used_at = _now()
        self._commit(row)
        return row.uses

    # --- reveal and activation records ----------------------------------

    def revealed_examinable_ids(self) -> set[int]:
        return {row.examinable_id for row in self._all(models.RevealedExaminableObject)}

    def mark_examinable_revealed(self, examinable_id: int) -> bool:
        """Record a reveal; returns False when it was already recorded."""
        if self._first(models.RevealedExaminableObject, examinable_id=examinable_id):
            return False
        self._commit(
            models.RevealedExaminableObject(
                save_id=self.save_id, examinable_id=examinable_id
            )
        )
        return True

    def is_activated(self, examinable_id: int) -> bool:
        row = self._first(models.ActivatedExaminableObject, examinable_id=examinable_id)
        return row is not None

    def mark_activated(self, examinable_id: int) -> None:
        if not self.is_activated(examinable_id):
            self._commit(
                models.ActivatedExaminableObject(
                    save_id=self.save_id, examinable_id=examinable_id
                )
            )

    def revealed_container_ids(self) -> set[int]:
        return {row.container_id for row in self._all(models.ContainerRevealed)}

    def mark_container_revealed(self, container_id: int) -> bool:
        """Record a reveal; returns False when it was already recorded."""
        if self._first(models.ContainerRevealed, container_id=container_id):
            return False
        self._commit(
            models.ContainerRevealed(save_id=self.save_id, container_id=container_id)
        )
        return True

    # --- containers ------------------------------------------------------

    def get_container_state(self, container_id: int) -> models.ContainerState | None:
        return self._first(models.ContainerState, container_id=container_id)

    def save_container_state(
        self, container_id: int, is_open: bool, is_locked: bool
    ) -> models.ContainerState:
        row = self.get_container_state(container_id)
        if row is None:
            row = models.ContainerState(save_id=self.save_id, container_id=container_id)
        row.is_open = is_open
        row.is_locked = is_locked
        row.last_modified = _now()
        self._commit(row)
        return row

    # --- completed actions and interactions -----------------------------

    def completed_action_ids(self) -> set[int]:
        return {row.action_id for row in self._all(models.CompletedAction)}

    def is_action_completed(self, action_id: int) -> bool:
        return self._first(models.CompletedAction, action_id=action_id) is not None

    def record_action_completed(self, action_id: int) -> int:
        """Record a completion and return how many times it has happened."""
        row = self._first(models.CompletedAction, action_id=action_id)
        if row is None:
            row = models.CompletedAction(save_id=self.save_id, action_id=action_id)
        else:
            row.times_completed += 1
            row.completed_at = _now()
        self._commit(row)
        return row.times_completed

    def is_interaction_completed(self, examinable_id: int) -> bool:
        row = self._first(
            models.CompletedExaminableInteraction, examinable_id=examinable_id
        )
        return row is not None

    def record_interaction_completed(self, examinable_id: int) -> bool:
        if self.is_interaction_completed(examinable_id):
            return False
        self._commit(
            models.CompletedExaminableInteraction(
                save_id=self.save_id, examinable_id=examinable_id
            )
        )
        return True

    # --- visited rooms ---------------------------------------------------

    def get_visit(self, room_id: int) -> models.VisitedRoom | None:
        return self._first(models.VisitedRoom, room_id=room_id)

    def record_visit(self, room_id: int) -> models.VisitedRoom:
        row = self.get_visit(room_id)
        if row is None:
            row = models.VisitedRoom(save_id=self.save_id, room_id=room_id)
        else:
            row.visit_count += 1
            row.last_visited_at = _now()
        self._commit(row)
        return row

    def visited_room_ids(self) -> set[int]:
        return {row.room_id for row in self._all(models.VisitedRoom)}

    # --- player context --------------------------------------------------

    def get_player_context(self) -> models.PlayerContext:
        row = self._first(models.PlayerContext)
        if row is None:
            row = models.PlayerContext(save_id=self.save_id, updated_at=_now())
            self._commit(row)
        return row

    def update_player_context(self, now: dt.datetime, **fields: int | None) -> None:
        row = self.get_player_context()
        for name, value in fields.items():
            setattr(row, name, value)
        row.updated_at = now
        self._commit(row)
