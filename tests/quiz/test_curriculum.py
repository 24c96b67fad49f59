"""Tests for the curriculum-week catalog."""

import pytest

from chm_assistant.models.knowledge import Phase
from chm_assistant.quiz.curriculum import CurriculumCatalog
from tests.conftest import make_week


@pytest.fixture
def small_catalog():
    return CurriculumCatalog(
        [
            make_week(phase="M1", week=3, title="Respiratory"),
            make_week(phase="M1", week=1, title="Intro"),
            make_week(phase="MCE", week=2, title="Medicine"),
        ]
    )


def test_phases(small_catalog):
    assert small_catalog.phases() == [Phase.M1, Phase.MCE, Phase.LCE]


def test_weeks_sorted(small_catalog):
    assert [w.week for w in small_catalog.weeks("M1")] == [1, 3]


def test_weeks_empty_phase(small_catalog):
    assert small_catalog.weeks(Phase.LCE) == []


def test_weeks_rejects_general_phase(small_catalog):
    with pytest.raises(ValueError):
        small_catalog.weeks(Phase.GENERAL)


def test_weeks_rejects_unknown_code(small_catalog):
    with pytest.raises(ValueError):
        small_catalog.weeks("M4")


def test_get_week(small_catalog):
    assert small_catalog.get_week("M1", 3).title == "Respiratory"
    assert small_catalog.get_week(Phase.M1, 2) is None


def test_duplicate_week_rejected():
    with pytest.raises(ValueError):
        CurriculumCatalog([make_week(week=1), make_week(week=1)])


def test_default_catalog_has_m1_week_3(catalog):
    assert catalog.get_week("M1", 3) is not None
    assert len(catalog) >= 9
