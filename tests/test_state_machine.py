"""Unit tests for payment status vocabulary and forward-transition checks."""

import pytest

from topup.common.state_machine import is_forward_transition, validate_status


def test_forward_transition():
    """Operator delivery of a verified payment is the normal path."""

    assert is_forward_transition("verified", "completed")
    assert is_forward_transition("verified", "failed")


def test_backward_transition_is_flagged_not_rejected():
    assert not is_forward_transition("completed", "failed")
    assert not is_forward_transition("failed", "completed")


def test_unknown_status():
    with pytest.raises(ValueError):
        validate_status("shipped")
    with pytest.raises(ValueError):
        is_forward_transition("verified", "shipped")
