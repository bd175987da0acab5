"""Typed results returned to command handlers.

Recoverable conditions (nothing matched, wrong state, already done, used
up) come back as an Outcome with a status and a player-facing message.
They never raise; see ``delve.errors`` for the conditions that do.
"""

from dataclasses import dataclass, field

OK = "ok"
NOT_FOUND = "not_found"
AMBIGUOUS = "ambiguous"
INVALID_STATE = "invalid_state"
ALREADY_COMPLETED = "already_completed"
EXHAUSTED = "exhausted"


@dataclass
class Outcome:
    status: str
    message: str = ""
    reveal_messages: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == OK

    @property
    def text(self) -> str:
        """Message followed by any reveal messages."""
        if not self.reveal_messages:
            return self.message
        return self.message + "\n\n" + "\n".join(self.reveal_messages)

    @classmethod
    def success(cls, message: str, reveal_messages: list[str] | None = None) -> "Outcome":
        return cls(OK, message, reveal_messages or [])

    @classmethod
    def failure(cls, status: str, message: str) -> "Outcome":
        return cls(status, message)


@dataclass
class MoveOutcome(Outcome):
    """Result of moving between rooms."""

    room_id: int | None = None
    damage: int = 0
    health: int | None = None
    died: bool = False
    won: bool = False
