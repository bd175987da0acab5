"""Delve: command interpretation and world state for a room-exploration text adventure."""

from sqlmodel import Session

from .config import Config
from .db import build_engine, init_db
from .engine.loader import load_world
from .logging import configure_logging, get_logger
from .session import GameSession

__all__ = ["main", "Config", "GameSession"]


def main() -> None:
    """Entry point: prepare the database and check that the world loads."""
    config = Config.from_env()

    configure_logging(
        log_level=config.log_level,
        log_file=config.log_file,
        json_logs=config.json_logs,
    )

    logger = get_logger(__name__)
    logger.info(
        "application_starting",
        database_url=config.database_url,
        log_level=config.log_level,
    )

    engine = build_engine(config.database_url)
    init_db(engine)

    with Session(engine) as db:
        world = load_world(db)

    logger.info(
        "world_loaded",
        rooms=len(world.rooms),
        items=len(world.items),
        examinables=len(world.examinables),
        containers=len(world.containers),
        vocabulary=len(world.vocabulary),
    )
