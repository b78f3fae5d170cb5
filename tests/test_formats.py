"""Tests for the debate format registry and built-in formats."""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path

import pytest

from debate_engine.types import DebatePhase, Position
from formats import DEFAULT_FORMAT, format_registry


def test_registry_lists_built_in_formats() -> None:
    assert set(format_registry.list_formats()) == {"oxford", "lincoln_douglas", "policy", "socratic"}
    assert format_registry.get_format().name == DEFAULT_FORMAT == "oxford"

    descriptions = format_registry.get_format_descriptions()
    assert descriptions["socratic"]["display_name"] == "Socratic"


def test_unknown_format_raises() -> None:
    with pytest.raises(ValueError, match="Unknown format"):
        format_registry.get_format("fishbowl")


@pytest.mark.parametrize("name", ["oxford", "lincoln_douglas", "socratic"])
def test_phase_progression(name: str) -> None:
    debate_format = format_registry.get_format(name)

    phases = [debate_format.get_phase_for_round(r, 5) for r in range(1, 6)]

    assert phases == [
        DebatePhase.OPENING,
        DebatePhase.REBUTTAL,
        DebatePhase.REBUTTAL,
        DebatePhase.REBUTTAL,
        DebatePhase.CLOSING,
    ]


def test_policy_adds_crossfire_before_closing() -> None:
    policy = format_registry.get_format("policy")

    assert policy.get_phase_for_round(4, 5) == DebatePhase.CROSSFIRE
    assert policy.get_phase_for_round(2, 3) == DebatePhase.REBUTTAL
    assert policy.get_phase_guidance(DebatePhase.CROSSFIRE)


def test_turn_plan_covers_every_speaker_each_round() -> None:
    plan = format_registry.get_format("oxford").get_turn_plan(3, 3)

    assert len(plan) == 9
    assert [t.speaker_index for t in plan[:3]] == [0, 1, 2]
    assert {t.round for t in plan} == {1, 2, 3}
    assert plan[-1].phase == DebatePhase.CLOSING


def test_positions_alternate_and_side_labels() -> None:
    ids = ["a", "b", "c"]
    oxford = format_registry.get_format("oxford")
    lincoln = format_registry.get_format("lincoln_douglas")

    assert oxford.get_position_assignments(ids) == {
        "a": Position.PRO,
        "b": Position.CON,
        "c": Position.PRO,
    }
    assert oxford.get_side_labels(ids)["b"] == "Opposition"
    assert lincoln.get_side_labels(ids)["a"] == "Affirmative"


def test_socratic_overrides_labels_and_hints() -> None:
    socratic = format_registry.get_format("socratic")

    assert socratic.default_rounds == 4
    assert socratic.get_phase_label(DebatePhase.OPENING) == "Opening Questions"
    assert socratic.get_phase_label(DebatePhase.CROSSFIRE) == "Cross-examination"
    assert socratic.get_exchange_labels(3) == ("Opening Questions", "Follow-up", "Synthesis")


def test_format_ids_are_normalized() -> None:
    assert format_registry.get_format("Lincoln-Douglas").name == "lincoln_douglas"
    assert format_registry.get_format(" OXFORD ").name == "oxford"
    assert "policy" in format_registry
    assert "parliamentary" not in format_registry
    assert format_registry.get_format_descriptions()["socratic"]["default_rounds"] == 4


PROJECT_ROOT = Path(__file__).resolve().parent.parent


@pytest.mark.parametrize(
    "statement",
    [
        "import formats",
        "from formats.registry import format_registry",
        "import formats.socratic",
        "import config.settings",
        "import models.manager",
        "from debate_engine.orchestrator import DebateOrchestrator",
    ],
)
def test_packages_import_cleanly_as_first_import(statement: str) -> None:
    result = subprocess.run(
        [sys.executable, "-c", statement],
        cwd=PROJECT_ROOT,
        capture_output=True,
        text=True,
        timeout=60,
    )

    assert result.returncode == 0, result.stderr
