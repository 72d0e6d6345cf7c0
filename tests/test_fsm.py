import pytest

from mazeduel.app.fsm import RunState, RunStateMachine


def test_starts_idle():
    fsm = RunStateMachine()

    assert fsm.current_state == RunState.IDLE
    assert not fsm.is_active()
    assert not fsm.is_finished()
    assert fsm.get_state_description() == "Ready"


def test_astar_lifecycle():
    fsm = RunStateMachine()

    assert fsm.transition_to(RunState.RUNNING)
    assert fsm.is_active()
    assert fsm.transition_to(RunState.FOUND)
    assert fsm.is_finished()
    assert fsm.reset_to_idle()
    assert fsm.current_state == RunState.IDLE


def test_qlearning_lifecycle():
    fsm = RunStateMachine()

    assert fsm.transition_to(RunState.TRAINING)
    assert not fsm.can_transition_to(RunState.FOUND)
    assert fsm.transition_to(RunState.EXTRACTING)
    assert fsm.is_active()
    assert fsm.transition_to(RunState.NOT_FOUND)
    assert not fsm.is_active()


@pytest.mark.parametrize("source, target", [
    (RunState.IDLE, RunState.FOUND),
    (RunState.IDLE, RunState.EXTRACTING),
    (RunState.RUNNING, RunState.TRAINING),
    (RunState.TRAINING, RunState.NOT_FOUND),
    (RunState.FOUND, RunState.RUNNING),
])
def test_invalid_transitions_are_refused(source, target):
    fsm = RunStateMachine()
    fsm._current_state = source

    assert not fsm.transition_to(target)
    assert fsm.current_state == source


@pytest.mark.parametrize("state", [RunState.RUNNING, RunState.TRAINING, RunState.EXTRACTING])
def test_active_runs_can_be_cancelled(state):
    fsm = RunStateMachine()
    fsm._current_state = state

    assert fsm.reset_to_idle({"cancelled": True})
    assert fsm.current_state == RunState.IDLE


def test_reset_when_idle_is_a_no_op():
    assert RunStateMachine().reset_to_idle()


def test_state_enter_callback_receives_context():
    fsm = RunStateMachine()
    seen = []
    fsm.on_state_enter(RunState.RUNNING, seen.append)

    fsm.transition_to(RunState.RUNNING, {"algorithm": "astar"})

    assert seen == [{"algorithm": "astar"}]
