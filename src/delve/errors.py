"""Exceptions for conditions that abort a turn."""


class DelveError(Exception):
    """Base class for Delve errors."""


class WorldIntegrityError(DelveError):
    """A save or content reference points at something that does not exist.

    This means the static content and the per-save shadow state disagree,
    so the current turn cannot continue safely.
    """


class SaveSlotError(DelveError):
    """A save slot cannot be created or used as requested."""
