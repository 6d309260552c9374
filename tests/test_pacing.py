"""Tests for the reference-pace model."""

from __future__ import annotations

import pytest

from halftrack.services.pacing import (
    DEFAULT_REFERENCE_PACE,
    calc_paces,
    implied_reference,
    paces_from_reference,
    reference_pace,
    ten_k_equivalent_pace,
)
from halftrack.services.workouts import WorkoutType


def test_default_paces_without_personal_bests():
    paces = calc_paces(None, None)
    assert paces.easy == 630
    assert paces.tempo == 558
    assert paces.long == 630
    assert paces.recovery == 660
    assert paces.race == pytest.approx(583.2)


def test_five_k_only_reference():
    assert reference_pace(1200, None) == pytest.approx(1200 / 3.1)


def test_ten_k_only_uses_riegel_equivalent():
    expected = (2500 * (3.1 / 6.2) ** 1.06) / 3.1
    assert reference_pace(None, 2500) == pytest.approx(expected)
    assert ten_k_equivalent_pace(2500) == pytest.approx(expected)


def test_blend_weights_five_k_45_ten_k_55():
    expected = (1200 / 3.1) * 0.45 + ten_k_equivalent_pace(2500) * 0.55
    assert reference_pace(1200, 2500) == pytest.approx(expected)


def test_zero_times_treated_as_missing():
    assert reference_pace(0, 0) == DEFAULT_REFERENCE_PACE


@pytest.mark.parametrize("five_k,ten_k", [(900, 1900), (1200, 2500), (1500, 3200), (2100, 4500)])
def test_pace_ordering_holds(five_k, ten_k):
    paces = calc_paces(five_k, ten_k)
    assert paces.easy > paces.tempo
    assert paces.recovery >= paces.easy
    assert paces.recovery >= paces.long


def test_paces_from_reference_offsets():
    paces = paces_from_reference(400)
    assert paces.as_dict() == {
        "easy": 490,
        "tempo": 418,
        "long": 490,
        "recovery": 520,
        "race": pytest.approx(432),
    }


def test_implied_reference_inverts_offsets():
    assert implied_reference(WorkoutType.EASY, 600) == 510
    assert implied_reference(WorkoutType.TEMPO, 500) == 482
    assert implied_reference(WorkoutType.RECOVERY, 660) == 540
    assert implied_reference(WorkoutType.RACE, 500) is None


def test_for_type_covers_every_workout_type():
    paces = calc_paces(None, None)
    assert {t: paces.for_type(t) for t in WorkoutType}[WorkoutType.RACE] == paces.race
