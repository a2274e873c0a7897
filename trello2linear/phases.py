"""Classify cards into time-bounded phases from their list-move history.

A card's phase is decided by the most recent time it was moved into the marker
list (``"In Progress"`` by default). Phases are ordered, non-overlapping
windows: the first one is open-started, each later one starts at a cutoff.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

LIST_MOVE_ACTION = "updateCard"


@dataclass(frozen=True)
class Phase:
    """A named phase window. ``start`` is ``None`` only for the earliest phase."""

    name: str
    start: datetime | None = None


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse a Trello ISO 8601 timestamp into an aware UTC datetime.

    Trello writes ``2024-02-16T09:30:00.000Z``; plain dates are accepted too and
    read as midnight UTC. Anything unparseable yields ``None``.
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (ValueError, AttributeError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def validate_phases(phases: Sequence[Phase]) -> None:
    """Check phases are strictly ordered with only the first one open-started.

    Raises:
        ValueError: If the phase list is empty or out of order
    """
    if not phases:
        raise ValueError("At least one phase must be configured")
    if phases[0].start is not None:
        raise ValueError(f"Earliest phase '{phases[0].name}' must not have a start time")

    previous: datetime | None = None
    for phase in phases[1:]:
        if phase.start is None:
            raise ValueError(f"Phase '{phase.name}' needs a start time")
        if previous is not None and phase.start <= previous:
            raise ValueError(f"Phase '{phase.name}' must start after the phase before it")
        previous = phase.start


def is_list_move_into(action: dict, card_id: str, list_name: str) -> bool:
    """True if ``action`` moved ``card_id`` into a list called ``list_name``."""
    if action.get("type") != LIST_MOVE_ACTION:
        return False
    data = action.get("data") or {}
    list_after = data.get("listAfter")
    if not list_after:
        # Plain card edits carry no listAfter
        return False
    card = data.get("card") or {}
    return card.get("id") == card_id and list_after.get("name") == list_name


def group_list_moves(actions: Iterable[dict]) -> dict[str, list[dict]]:
    """Group list-move actions by the id of the card they moved.

    Saves rescanning the whole activity log once per card.
    """
    moves: dict[str, list[dict]] = {}
    for action in actions:
        if action.get("type") != LIST_MOVE_ACTION:
            continue
        data = action.get("data") or {}
        card_id = (data.get("card") or {}).get("id")
        if card_id and data.get("listAfter"):
            moves.setdefault(card_id, []).append(action)
    return moves


def last_transition_at(
    card_id: str, actions: Iterable[dict], marker_list_name: str
) -> datetime | None:
    """Timestamp of the latest move of ``card_id`` into the marker list.

    The activity log is not assumed to be sorted.
    """
    latest: datetime | None = None
    for action in actions:
        if not is_list_move_into(action, card_id, marker_list_name):
            continue
        moved_at = parse_timestamp(action.get("date"))
        if moved_at is None:
            logger.debug("Ignoring list move %s with unreadable date", action.get("id"))
            continue
        if latest is None or moved_at > latest:
            latest = moved_at
    return latest


def phase_for(moved_at: datetime | None, phases: Sequence[Phase]) -> Phase:
    """Pick the phase containing ``moved_at``, evaluated from latest to earliest.

    Cards that never entered the marker list belong to the earliest phase.
    """
    if moved_at is None:
        return phases[0]
    for phase in reversed(phases):
        if phase.start is None or phase.start <= moved_at:
            return phase
    return phases[0]


def classify_phase(
    card_id: str,
    actions: Iterable[dict],
    phases: Sequence[Phase],
    marker_list_name: str = "In Progress",
) -> str:
    """Return the name of the phase ``card_id`` belongs to."""
    moved_at = last_transition_at(card_id, actions, marker_list_name)
    return phase_for(moved_at, phases).name
