"""
Shared pytest fixtures for trello2linear tests
"""
import copy
import json
from pathlib import Path

import pytest


@pytest.fixture
def fixtures_dir():
    """Return path to test fixtures directory"""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def sample_export_path(fixtures_dir):
    """Path to the sample board export"""
    return fixtures_dir / "sample_export.json"


@pytest.fixture
def sample_export(sample_export_path):
    """Load sample board export (fresh copy per test)"""
    with open(sample_export_path) as f:
        return json.load(f)


@pytest.fixture
def empty_export(fixtures_dir):
    """Load export with every required array present but empty"""
    with open(fixtures_dir / "empty_export.json") as f:
        return json.load(f)


@pytest.fixture
def make_export():
    """Build a minimal export document from keyword overrides"""

    def _make(**overrides):
        export = {
            "cards": [],
            "lists": [],
            "checklists": [],
            "customFields": [],
            "members": [],
            "actions": [],
        }
        export.update(copy.deepcopy(overrides))
        return export

    return _make


@pytest.fixture
def make_card():
    """Build a card with every field the normalizer reads"""

    def _make(card_id="card1", **overrides):
        card = {
            "id": card_id,
            "name": f"Card {card_id}",
            "desc": "",
            "url": f"https://trello.com/c/{card_id}XX/1-{card_id}",
            "shortUrl": f"https://trello.com/c/{card_id}XX",
            "closed": False,
            "idList": "list1",
            "idMembers": [],
            "customFieldItems": [],
            "attachments": [],
            "labels": [],
        }
        card.update(overrides)
        return card

    return _make
