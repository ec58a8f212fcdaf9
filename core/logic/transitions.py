"""
State Transition Logic for Bootstrap Runs.

Contains the rules for valid run state transitions.
Separated from data models for clean architecture.

Exports:
    can_run_transition: Check if a run state transition is valid
    get_run_terminal_states: Get terminal states for runs
    is_run_terminal: Check if a run is in a terminal state

Dependencies:
    core.models.enums: RunState
"""

from typing import List

from ..models.enums import RunState


def can_run_transition(current: RunState, target: RunState) -> bool:
    """
    Check if a run can transition from current to target state.

    Any non-terminal state may move to CLOSED (error-absorbing
    transition). CLOSED is final and never left.

    Args:
        current: Current run state
        target: Target run state

    Returns:
        True if transition is valid, False otherwise
    """
    # Same state is always allowed (no-op)
    if current == target:
        return True

    transitions = {
        RunState.IDLE: [RunState.CONNECTING, RunState.CLOSED],
        RunState.CONNECTING: [RunState.INITIALIZING, RunState.CLOSED],
        RunState.INITIALIZING: [RunState.LOADING, RunState.CLOSED],
        # Load failures still go to REPORTING
        RunState.LOADING: [RunState.REPORTING, RunState.CLOSED],
        RunState.REPORTING: [RunState.CLOSED],
        RunState.CLOSED: []  # Terminal state
    }

    return target in transitions.get(current, [])


def get_run_terminal_states() -> List[RunState]:
    """
    Get list of terminal states for runs.

    Returns:
        List of terminal run states
    """
    return [RunState.CLOSED]


def is_run_terminal(state: RunState) -> bool:
    """
    Check if a run state is terminal.

    Args:
        state: Run state to check

    Returns:
        True if state is terminal, False otherwise
    """
    return state in get_run_terminal_states()
