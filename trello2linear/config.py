"""Mapping tables and configuration for the export normalizer.

Every classification table lives on a ``NormalizerConfig`` instance so that
several normalizers with different target mappings can coexist. The module
level ``DEFAULT_*`` tables are only the starting values.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from trello2linear.exceptions import MappingConfigError
from trello2linear.models import Estimate
from trello2linear.phases import Phase, parse_timestamp, validate_phases

# Target project ids
KOMBI_PROJECT = "f5758aef-d1bc-4833-b225-ea071ab25834"
MODDEX_PROJECT = "756b0ced-9e63-4da4-8b4e-9cc0cbe00c96"
LEVELED_PLATFORMS_PROJECT = "694b8053-be7f-466a-aee0-a902b219ab9f"

# Target statuses
BACKLOG = "Backlog"
TODO = "Todo"
IN_PROGRESS = "In Progress"
IN_REVIEW = "In Review"
CUSTOMER_REVIEW = "Customer Review"
DONE = "Done"

DEFAULT_STATUSES: dict[str, str] = {
    # Backlog
    "Icebox": BACKLOG,
    "Reference": BACKLOG,
    "Product Backlog": BACKLOG,
    "Release Backlog": BACKLOG,
    "Leveled Platform Backlog": BACKLOG,
    # Todo
    "Awaiting Feedback": TODO,
    "Moddex": TODO,
    "Bugs, Issues, Discussion": TODO,
    "Moddex Platforms Phase 2": TODO,
    "Leveled Platforms Workshop Drawing": TODO,
    "This Iteration": TODO,
    # In progress
    "In Progress": IN_PROGRESS,
    # Review
    "Code Review": IN_REVIEW,
    # Customer review
    "Deploy to Staging": CUSTOMER_REVIEW,
    "Customer Review/Approve": CUSTOMER_REVIEW,
    "Deploy to Production": CUSTOMER_REVIEW,
    # Done
    "Iteration Meeting": DONE,
    "Q1 2024": DONE,
    "Q4 2023": DONE,
    "Q3 2023": DONE,
    "Q2 2023": DONE,
    "Q1 2023": DONE,
    "Q4 2022": DONE,
    "Done Not Deployable": DONE,
}

DEFAULT_ESTIMATES: dict[str, Estimate] = {
    "X-Small (< 2hrs)": Estimate.XS,
    "Small (< day)": Estimate.S,
    "Medium (~day)": Estimate.M,
    "Large (~2 days)": Estimate.L,
    "X-Large (~1 wk)": Estimate.XL,
    "Too large! (> 1 wk)": Estimate.EMPTY,
}

DEFAULT_PHASES: list[Phase] = [
    Phase("Phase 1"),
    Phase("Phase 2", datetime(2024, 2, 16, tzinfo=timezone.utc)),
]

# phase -> category -> project id
DEFAULT_PROJECTS: dict[str, dict[str, str]] = {
    "Phase 1": {
        "Kombi": KOMBI_PROJECT,
        "Moddex Ezibilt": MODDEX_PROJECT,
        "Leveled Platforms": LEVELED_PLATFORMS_PROJECT,
    },
    # Phase 2 Moddex and workshop projects are per deployment (see --mapping)
    "Phase 2": {
        "Kombi": KOMBI_PROJECT,
    },
}

_KOMBI_MILESTONES = {
    "Q4 2022": "67635d43-4499-4db8-86b7-9e30aaeb8db4",
    "Q1 2023": "514a664c-a2b7-48ed-996d-95effb839913",
    "Q2 2023": "b37af847-53c5-46e0-ac73-8f9ea5dde3b7",
    "Q3 2023": "cf1233d2-2193-4369-9f2a-db29d22e28fd",
    "Q4 2023": "5e0313c0-18d1-4e37-a8e6-daa57377f1dc",
    "Q1 2024": "e633eb0b-48d1-4b0e-9d23-e44128edb4ca",
}

# phase -> category -> list name -> milestone id
DEFAULT_MILESTONES: dict[str, dict[str, dict[str, str]]] = {
    "Phase 1": {"Kombi": dict(_KOMBI_MILESTONES), "Moddex Ezibilt": {}, "Leveled Platforms": {}},
    "Phase 2": {"Kombi": dict(_KOMBI_MILESTONES), "Moddex Ezibilt": {}, "Leveled Platforms": {}},
}

# Trello label colors -> target branded colors
DEFAULT_LABEL_COLORS: dict[str, str] = {
    "green": "#0F783C",
    "yellow": "#F2C94C",
    "orange": "#DB6E1F",
    "red": "#C52828",
    "purple": "#5E6AD2",
    "blue": "#0F7488",
    "sky": "#26B5CE",
    "lime": "#4CB782",
    "pink": "#EB5757",
    "black": "#ffffff",
}


@dataclass
class NormalizerConfig:
    """Everything the normalizer needs to classify cards for one target.

    Attributes:
        discard_archived_cards: Skip cards that are archived
        discard_archived_lists: Skip cards whose list is archived
        statuses: list name -> target status
        estimates: estimate option text -> Estimate
        projects: phase -> category -> project id
        milestones: phase -> category -> list name -> milestone id
        label_colors: Trello color name -> target color
        phases: ordered phase windows, earliest first
        marker_list: list whose entry marks the start of active work
        estimate_field: custom field holding the effort estimate
        category_field: custom field holding the work category
        label_source: prefix for names synthesized for color-only labels
        default_project_id: project for cards without a category field
    """

    discard_archived_cards: bool = False
    discard_archived_lists: bool = False
    statuses: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_STATUSES))
    estimates: dict[str, Estimate] = field(default_factory=lambda: dict(DEFAULT_ESTIMATES))
    projects: dict[str, dict[str, str]] = field(
        default_factory=lambda: {phase: dict(t) for phase, t in DEFAULT_PROJECTS.items()}
    )
    milestones: dict[str, dict[str, dict[str, str]]] = field(
        default_factory=lambda: {
            phase: {category: dict(t) for category, t in by_category.items()}
            for phase, by_category in DEFAULT_MILESTONES.items()
        }
    )
    label_colors: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_LABEL_COLORS))
    phases: list[Phase] = field(default_factory=lambda: list(DEFAULT_PHASES))
    marker_list: str = IN_PROGRESS
    estimate_field: str = "Estimate"
    category_field: str = "App"
    label_source: str = "Trello"
    default_project_id: str | None = KOMBI_PROJECT

    def __post_init__(self) -> None:
        validate_phases(self.phases)


def _require_mapping(name: str, value: Any, depth: int) -> None:
    """Validate a ``depth``-level nested object of strings."""
    if not isinstance(value, dict):
        raise MappingConfigError(f"'{name}' must be a JSON object")
    for key, inner in value.items():
        if depth > 1:
            _require_mapping(f"{name}.{key}", inner, depth - 1)
        elif not isinstance(inner, str):
            raise MappingConfigError(f"'{name}.{key}' must be a string")


def _parse_estimates(raw: Any) -> dict[str, Estimate]:
    _require_mapping("estimates", raw, 1)
    estimates = {}
    for text, level in raw.items():
        try:
            estimates[text] = Estimate[level.upper()]
        except KeyError as e:
            valid = ", ".join(member.name for member in Estimate)
            raise MappingConfigError(
                f"Invalid estimate '{level}' for '{text}'. Must be one of: {valid}"
            ) from e
    return estimates


def _parse_phases(raw: Any) -> list[Phase]:
    if not isinstance(raw, list) or not raw:
        raise MappingConfigError("'phases' must be a non-empty list")
    phases = []
    for entry in raw:
        if not isinstance(entry, dict) or not isinstance(entry.get("name"), str):
            raise MappingConfigError("Each phase needs a string 'name'")
        start = None
        if entry.get("start") is not None:
            start = parse_timestamp(entry["start"])
            if start is None:
                raise MappingConfigError(
                    f"Invalid start '{entry['start']}' for phase '{entry['name']}'"
                )
        phases.append(Phase(entry["name"], start))
    try:
        validate_phases(phases)
    except ValueError as e:
        raise MappingConfigError(str(e)) from e
    return phases


def load_mapping_config(json_path: str, base: NormalizerConfig | None = None) -> NormalizerConfig:
    """Load mapping tables from a JSON file on top of ``base`` (or the defaults)

    Keys present in the file replace the corresponding table entirely; absent
    keys keep the base value. Discard flags are never read from the file.

    Args:
        json_path: Path to the JSON mapping file

    Returns:
        A new NormalizerConfig

    Raises:
        FileNotFoundError: If file doesn't exist
        MappingConfigError: If JSON is invalid or contains bad data
    """
    if not Path(json_path).exists():
        raise FileNotFoundError(f"Mapping file not found: {json_path}")

    try:
        with open(json_path) as f:
            raw = json.load(f)
    except json.JSONDecodeError as e:
        raise MappingConfigError(f"Invalid JSON in mapping file: {e}") from e

    if not isinstance(raw, dict):
        raise MappingConfigError("Mapping file must contain a JSON object")

    changes: dict[str, Any] = {}
    if "statuses" in raw:
        _require_mapping("statuses", raw["statuses"], 1)
        changes["statuses"] = raw["statuses"]
    if "estimates" in raw:
        changes["estimates"] = _parse_estimates(raw["estimates"])
    if "projects" in raw:
        _require_mapping("projects", raw["projects"], 2)
        changes["projects"] = raw["projects"]
    if "milestones" in raw:
        _require_mapping("milestones", raw["milestones"], 3)
        changes["milestones"] = raw["milestones"]
    if "labelColors" in raw:
        _require_mapping("labelColors", raw["labelColors"], 1)
        changes["label_colors"] = raw["labelColors"]
    if "phases" in raw:
        changes["phases"] = _parse_phases(raw["phases"])

    for key, attr in (
        ("markerList", "marker_list"),
        ("estimateField", "estimate_field"),
        ("categoryField", "category_field"),
        ("labelSource", "label_source"),
    ):
        if key in raw:
            if not isinstance(raw[key], str) or not raw[key]:
                raise MappingConfigError(f"'{key}' must be a non-empty string")
            changes[attr] = raw[key]

    if "defaultProjectId" in raw:
        if raw["defaultProjectId"] is not None and not isinstance(raw["defaultProjectId"], str):
            raise MappingConfigError("'defaultProjectId' must be a string or null")
        changes["default_project_id"] = raw["defaultProjectId"]

    unknown = set(raw) - {
        "statuses",
        "estimates",
        "projects",
        "milestones",
        "labelColors",
        "phases",
        "markerList",
        "estimateField",
        "categoryField",
        "labelSource",
        "defaultProjectId",
    }
    if unknown:
        raise MappingConfigError(f"Unknown mapping keys: {', '.join(sorted(unknown))}")

    return replace(base or NormalizerConfig(), **changes)
