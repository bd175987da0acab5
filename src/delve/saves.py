"""Save slot management."""

import datetime as dt

from sqlmodel import Session, select

from .errors import SaveSlotError
from .logging import get_logger
from .models import SHADOW_TABLES, GameSave, VisitedRoom
from .engine.world import World

logger = get_logger(__name__)


def get_save(db: Session, save_id: int) -> GameSave | None:
    return db.get(GameSave, save_id)


def get_save_by_slot(db: Session, slot_name: str) -> GameSave | None:
    statement = select(GameSave).where(GameSave.slot_name == slot_name)
    return db.exec(statement).first()


def list_saves(db: Session) -> list[GameSave]:
    """All saves, most recently played first."""
    statement = select(GameSave).order_by(GameSave.saved_at.desc())
    return list(db.exec(statement).all())


def has_saves(db: Session) -> bool:
    return db.exec(select(GameSave.id)).first() is not None


def create_new_game(
    db: Session, world: World, slot_name: str, starting_health: int = 100
) -> GameSave:
    """Start a save in the starting room, with the room already visited."""
    if get_save_by_slot(db, slot_name) is not None:
        raise SaveSlotError(f"Save slot '{slot_name}' is already in use")
    start = world.starting_room()
    if start is None:
        raise SaveSlotError("The world has no starting room")

    save = GameSave(
        slot_name=slot_name,
        current_room_id=start.id,
        health=starting_health,
    )
    db.add(save)
    db.commit()
    db.refresh(save)

    db.add(VisitedRoom(save_id=save.id, room_id=start.id))
    db.commit()

    logger.info("new_game_started", save_id=save.id, slot_name=slot_name)
    return save


def touch_save(db: Session, save: GameSave) -> None:
    save.saved_at = dt.datetime.now(dt.UTC)
    db.add(save)
    db.commit()
    logger.debug("game_saved", save_id=save.id, turns=save.turn_count, score=save.score)


def delete_save(db: Session, save_id: int) -> bool:
    """Delete a save and every shadow row that belongs to it."""
    save = db.get(GameSave, save_id)
    if save is None:
        return False

    for table in SHADOW_TABLES:
        for row in db.exec(select(table).where(table.save_id == save_id)).all():
            db.delete(row)
    db.delete(save)
    db.commit()

    logger.info("save_deleted", save_id=save_id)
    return True
