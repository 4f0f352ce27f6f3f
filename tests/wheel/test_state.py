"""Tests for wheel cycle and reinvest signal state machines."""

import pytest

from wheeltracker.wheel.state import (
    CYCLE_TRANSITIONS,
    CycleStatus,
    ReinvestAction,
    ReinvestStatus,
    can_transition,
    get_next_state,
    get_signal_outcome,
    get_valid_actions,
)


class TestCycleStatus:
    """Tests for CycleStatus enum."""

    def test_cycle_statuses_exist(self) -> None:
        """Only OPEN and FINALIZED exist."""
        assert [s.value for s in CycleStatus] == ["OPEN", "FINALIZED"]

    def test_every_status_has_transition_entry(self) -> None:
        """Every status appears in the transition table."""
        assert set(CYCLE_TRANSITIONS) == set(CycleStatus)


class TestCycleTransitions:
    """Tests for cycle transition logic."""

    def test_valid_actions_from_open(self) -> None:
        """OPEN allows attaching legs, put assignment and finalization."""
        actions = get_valid_actions(CycleStatus.OPEN)
        assert set(actions) == {"attach_leg", "assign_put", "finalize"}

    def test_finalized_is_terminal(self) -> None:
        """FINALIZED has no outgoing transitions."""
        assert get_valid_actions(CycleStatus.FINALIZED) == []
        assert can_transition(CycleStatus.FINALIZED, "finalize") is False

    def test_attach_leg_keeps_cycle_open(self) -> None:
        assert get_next_state(CycleStatus.OPEN, "attach_leg") == CycleStatus.OPEN

    def test_assign_put_keeps_cycle_open(self) -> None:
        assert get_next_state(CycleStatus.OPEN, "assign_put") == CycleStatus.OPEN

    def test_finalize_from_open(self) -> None:
        assert get_next_state(CycleStatus.OPEN, "finalize") == CycleStatus.FINALIZED

    def test_finalize_twice_raises(self) -> None:
        """A finalized cycle cannot finalize again."""
        with pytest.raises(ValueError, match="Invalid action 'finalize'"):
            get_next_state(CycleStatus.FINALIZED, "finalize")

    def test_unknown_action_raises(self) -> None:
        with pytest.raises(ValueError):
            get_next_state(CycleStatus.OPEN, "sell_put")


class TestSignalOutcomes:
    """Tests for reinvest signal resolution."""

    @pytest.mark.parametrize(
        "action,expected",
        [
            (ReinvestAction.APPROVE, ReinvestStatus.APPROVED),
            (ReinvestAction.REJECT, ReinvestStatus.REJECTED),
            (ReinvestAction.PARTIAL, ReinvestStatus.PARTIAL),
        ],
    )
    def test_pending_resolves(
        self, action: ReinvestAction, expected: ReinvestStatus
    ) -> None:
        """Each action maps a PENDING signal to its terminal status."""
        assert get_signal_outcome(ReinvestStatus.PENDING, action) == expected

    @pytest.mark.parametrize(
        "status",
        [ReinvestStatus.APPROVED, ReinvestStatus.REJECTED, ReinvestStatus.PARTIAL],
    )
    def test_resolved_signals_are_terminal(self, status: ReinvestStatus) -> None:
        """Resolved signals accept no further action."""
        for action in ReinvestAction:
            assert get_signal_outcome(status, action) is None
