"""
Unit tests for phase classification from list-move history
"""

from datetime import datetime, timezone

import pytest

from trello2linear.config import DEFAULT_PHASES
from trello2linear.phases import (
    Phase,
    classify_phase,
    group_list_moves,
    last_transition_at,
    parse_timestamp,
    validate_phases,
)


def move(card_id, list_name, date, action_id="a"):
    """Build an updateCard action moving a card into a list"""
    return {
        "id": action_id,
        "type": "updateCard",
        "date": date,
        "data": {
            "card": {"id": card_id},
            "listBefore": {"id": "l0", "name": "To Do"},
            "listAfter": {"id": "l1", "name": list_name},
        },
    }


class TestParseTimestamp:
    """Test Trello timestamp parsing"""

    def test_zulu_timestamp(self):
        parsed = parse_timestamp("2024-02-16T09:30:00.000Z")
        assert parsed == datetime(2024, 2, 16, 9, 30, tzinfo=timezone.utc)

    def test_plain_date_is_midnight_utc(self):
        assert parse_timestamp("2024-02-16") == datetime(2024, 2, 16, tzinfo=timezone.utc)

    def test_invalid_values(self):
        assert parse_timestamp("not a date") is None
        assert parse_timestamp(None) is None
        assert parse_timestamp("") is None


class TestLastTransition:
    """Test finding the latest qualifying list move"""

    def test_latest_move_wins_regardless_of_log_order(self):
        actions = [
            move("c1", "In Progress", "2024-03-05T00:00:00Z"),
            move("c1", "In Progress", "2024-01-10T00:00:00Z"),
            move("c1", "In Progress", "2024-02-01T00:00:00Z"),
        ]
        assert last_transition_at("c1", actions, "In Progress") == datetime(
            2024, 3, 5, tzinfo=timezone.utc
        )

    def test_moves_into_other_lists_ignored(self):
        actions = [move("c1", "Done", "2024-05-01T00:00:00Z")]
        assert last_transition_at("c1", actions, "In Progress") is None

    def test_moves_of_other_cards_ignored(self):
        actions = [move("c2", "In Progress", "2024-05-01T00:00:00Z")]
        assert last_transition_at("c1", actions, "In Progress") is None

    def test_card_edits_without_list_after_ignored(self):
        edit = {"type": "updateCard", "date": "2024-05-01T00:00:00Z", "data": {"card": {"id": "c1"}}}
        assert last_transition_at("c1", [edit], "In Progress") is None

    def test_comments_ignored(self):
        comment = move("c1", "In Progress", "2024-05-01T00:00:00Z")
        comment["type"] = "commentCard"
        assert last_transition_at("c1", [comment], "In Progress") is None


class TestClassifyPhase:
    """Test phase selection against the cutoff"""

    def test_no_transition_defaults_to_earliest_phase(self):
        assert classify_phase("c1", [], DEFAULT_PHASES) == "Phase 1"

    def test_before_cutoff_is_earlier_phase(self):
        actions = [move("c1", "In Progress", "2024-02-15T23:59:59Z")]
        assert classify_phase("c1", actions, DEFAULT_PHASES) == "Phase 1"

    def test_at_cutoff_is_later_phase(self):
        actions = [move("c1", "In Progress", "2024-02-16T00:00:00Z")]
        assert classify_phase("c1", actions, DEFAULT_PHASES) == "Phase 2"

    def test_most_recent_event_decides(self):
        """An old move listed last does not pull the card back"""
        actions = [
            move("c1", "In Progress", "2024-03-05T00:00:00Z"),
            move("c1", "In Progress", "2023-06-01T00:00:00Z"),
        ]
        assert classify_phase("c1", actions, DEFAULT_PHASES) == "Phase 2"

    def test_custom_marker_list(self):
        actions = [move("c1", "Doing", "2024-03-05T00:00:00Z")]
        assert classify_phase("c1", actions, DEFAULT_PHASES, marker_list_name="Doing") == "Phase 2"
        assert classify_phase("c1", actions, DEFAULT_PHASES) == "Phase 1"

    def test_three_phases(self):
        phases = [
            Phase("Legacy"),
            Phase("Rebuild", datetime(2023, 1, 1, tzinfo=timezone.utc)),
            Phase("Launch", datetime(2024, 1, 1, tzinfo=timezone.utc)),
        ]
        assert classify_phase("c1", [move("c1", "In Progress", "2022-05-01")], phases) == "Legacy"
        assert classify_phase("c1", [move("c1", "In Progress", "2023-05-01")], phases) == "Rebuild"
        assert classify_phase("c1", [move("c1", "In Progress", "2024-05-01")], phases) == "Launch"


class TestGroupListMoves:
    """Test grouping list moves per card"""

    def test_groups_by_card(self):
        actions = [
            move("c1", "In Progress", "2024-01-01", "a1"),
            move("c2", "Done", "2024-01-02", "a2"),
            {"id": "a3", "type": "commentCard", "data": {"card": {"id": "c1"}}},
            move("c1", "Done", "2024-01-03", "a4"),
        ]
        grouped = group_list_moves(actions)

        assert [a["id"] for a in grouped["c1"]] == ["a1", "a4"]
        assert [a["id"] for a in grouped["c2"]] == ["a2"]


class TestValidatePhases:
    """Test phase ordering validation"""

    def test_default_phases_valid(self):
        validate_phases(DEFAULT_PHASES)

    def test_empty_phases_rejected(self):
        with pytest.raises(ValueError):
            validate_phases([])

    def test_first_phase_must_be_open_started(self):
        with pytest.raises(ValueError, match="must not have a start"):
            validate_phases([Phase("A", datetime(2024, 1, 1, tzinfo=timezone.utc))])

    def test_later_phase_needs_start(self):
        with pytest.raises(ValueError, match="needs a start"):
            validate_phases([Phase("A"), Phase("B")])

    def test_out_of_order_rejected(self):
        with pytest.raises(ValueError, match="must start after"):
            validate_phases(
                [
                    Phase("A"),
                    Phase("B", datetime(2024, 1, 1, tzinfo=timezone.utc)),
                    Phase("C", datetime(2023, 1, 1, tzinfo=timezone.utc)),
                ]
            )
