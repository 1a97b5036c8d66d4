import pytest

from perp_orders.core.errors import UserRejectedError
from perp_orders.core.oms.state_machine import (
    IllegalTransition,
    SubmissionAttempt,
    SubmissionState as S,
    should_apply,
)


def test_happy_path():
    a = SubmissionAttempt(attempt_id=1)
    a.advance(S.SIGNING)
    a.advance(S.SUBMITTING)
    a.advance(S.SUCCEEDED)
    assert a.history == [S.IDLE, S.SIGNING, S.SUBMITTING, S.SUCCEEDED]
    assert a.is_final


def test_submitting_requires_signing():
    d = should_apply(S.IDLE, S.SUBMITTING)
    assert not d.allow
    with pytest.raises(IllegalTransition):
        SubmissionAttempt(attempt_id=1).advance(S.SUBMITTING)


@pytest.mark.parametrize("terminal", [S.SUCCEEDED, S.FAILED])
def test_terminal_states_do_not_move(terminal):
    for nxt in S:
        assert not should_apply(terminal, nxt).allow


def test_fail_from_signing_records_error():
    a = SubmissionAttempt(attempt_id=7)
    a.advance(S.SIGNING)
    err = UserRejectedError()
    a.fail(err)
    assert a.state is S.FAILED
    assert a.error is err
    with pytest.raises(IllegalTransition):
        a.advance(S.SUBMITTING)
