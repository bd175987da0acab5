"""Collapse a list of candidate items to one, or ask which one was meant."""

from dataclasses import dataclass, field

from .world import Item

RESOLVED = "resolved"
AMBIGUOUS = "ambiguous"
NOT_FOUND = "not_found"


@dataclass
class Resolution:
    status: str
    item: Item | None = None
    candidates: list[Item] = field(default_factory=list)
    message: str | None = None

    @property
    def resolved(self) -> bool:
        return self.status == RESOLVED


def auto_disambiguate(candidates: list[Item]) -> Item | None:
    """Pick one candidate without asking, or None if no rule applies.

    The order is fixed: a lone quest item wins, then a lone collectable.
    """
    if not candidates:
        return None
    if len(candidates) == 1:
        return candidates[0]

    quest_items = [c for c in candidates if c.is_quest_item]
    if len(quest_items) == 1:
        return quest_items[0]

    collectable = [c for c in candidates if c.is_collectable]
    if len(collectable) == 1:
        return collectable[0]

    return None


def ambiguity_message(candidates: list[Item]) -> str:
    lines = ["Which do you mean:"]
    lines += [f"  {n}. {item.name}" for n, item in enumerate(candidates, start=1)]
    lines.append("(Please be more specific, e.g., use an adjective)")
    return "\n".join(lines)


def resolve(candidates: list[Item], original_phrase: str) -> Resolution:
    """Resolve candidates in discovery order."""
    if not candidates:
        return Resolution(
            NOT_FOUND, message=f"There is no '{original_phrase}' here."
        )
    if len(candidates) == 1:
        return Resolution(RESOLVED, item=candidates[0], candidates=list(candidates))

    chosen = auto_disambiguate(candidates)
    if chosen is not None:
        return Resolution(RESOLVED, item=chosen, candidates=list(candidates))

    return Resolution(
        AMBIGUOUS,
        candidates=list(candidates),
        message=ambiguity_message(candidates),
    )
