"""Tests for the gate model."""

import pytest
from pydantic import ValidationError

from fact_gate.domain.models.gate import Gate, GateName


def test_evaluate_sets_passed_from_threshold():
    assert Gate.evaluate(GateName.SEO, 70, 70).passed is True
    assert Gate.evaluate(GateName.SEO, 69, 70).passed is False


@pytest.mark.parametrize("score, passed", [(85, False), (40, True)])
def test_contradictory_passed_flag_is_rejected(score, passed):
    with pytest.raises(ValidationError, match="contradicts"):
        Gate.model_validate({"name": "seo", "score": score, "passed": passed, "threshold": 70})


def test_factcheck_gate_may_fail_above_threshold():
    gate = Gate(name=GateName.FACTCHECK, score=90, passed=False, threshold=80, block_on_failure=True)

    assert gate.is_blocking_failure is True
