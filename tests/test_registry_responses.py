from __future__ import annotations

import itertools

import pytest

from formledger.core.codec import ResponseType, encode
from formledger.core.errors import (
    FormNotFound,
    InvalidQuestionIndex,
    InvalidValueKind,
    NotAllowedResponder,
)
from formledger.core.registry import FormRegistry


OWNER = "0xOwner"
R1 = "0xResponder1"
R2 = "0xResponder2"


def _form_with_questions(reg: FormRegistry, *types: int) -> int:
    form_id = reg.create_form("Test Form", "desc", caller=OWNER)
    for i, t in enumerate(types):
        reg.add_question_to_form(form_id, f"Q{i + 1}", f"D{i + 1}", True, t, caller=OWNER)
    return form_id


def test_numeric_submission_scenario() -> None:
    reg = FormRegistry(OWNER)
    form_id = reg.create_form("Test Form", "desc", caller=OWNER)
    assert form_id == 1
    q = reg.add_question_to_form(form_id, "Q1", "D1", True, ResponseType.NUMERIC, caller=OWNER)
    assert q == 0
    reg.add_responder(form_id, R1, caller=OWNER)
    assert reg.is_allowed_responder(1, R1) is True

    reg.submit_response(1, 0, encode(46, ResponseType.NUMERIC), caller=R1)

    assert reg.get_response_history(1, 0).responses == (46,)


def test_history_accumulates_in_submission_order() -> None:
    reg = FormRegistry(OWNER)
    form_id = _form_with_questions(reg, ResponseType.NUMERIC)
    reg.add_responder(form_id, R1, caller=OWNER)

    reg.submit_response(form_id, 0, encode(24, ResponseType.NUMERIC), caller=R1)
    reg.submit_response(form_id, 0, encode(36, ResponseType.NUMERIC), caller=R1)

    history = reg.get_response_history(form_id, 0)
    assert list(history.responses) == [24, 36]
    assert len(history.timestamps) == len(history.responses) == len(history)
    assert history.timestamps[0] <= history.timestamps[1]


def test_text_history_and_logical_values() -> None:
    reg = FormRegistry(OWNER)
    form_id = _form_with_questions(reg, ResponseType.TEXT, ResponseType.NUMERIC)
    reg.add_responders(form_id, [R1, R2], caller=OWNER)

    reg.submit_response(form_id, 0, b"Answer 1", caller=R1)
    reg.submit_response(form_id, 0, "Answer 2", caller=R2)
    reg.submit_response(form_id, 0, "Answer 3", caller=R1)
    entry = reg.submit_response(form_id, 1, "46", caller=R1)

    assert entry.value == 46
    assert entry.payload == encode(46, ResponseType.NUMERIC)
    assert entry.responder == R1
    assert reg.get_response_history(form_id, 0).responses == ("Answer 1", "Answer 2", "Answer 3")
    assert reg.get_response_history(form_id, 1).responses == (46,)


def test_responder_history_filters_shared_question_history() -> None:
    reg = FormRegistry(OWNER)
    form_id = _form_with_questions(reg, ResponseType.TEXT)
    reg.add_responders(form_id, [R1, R2], caller=OWNER)

    reg.submit_response(form_id, 0, "a", caller=R1)
    reg.submit_response(form_id, 0, "b", caller=R2)
    reg.submit_response(form_id, 0, "c", caller=R1)

    assert reg.get_responder_history(form_id, 0, R1).responses == ("a", "c")
    assert reg.get_responder_history(form_id, 0, R2).responses == ("b",)
    assert reg.get_responder_history(form_id, 0, "0xNobody").responses == ()
    assert [e.responder for e in reg.get_response_entries(form_id, 0)] == [R1, R2, R1]


def test_opaque_question_stores_payload_unchanged() -> None:
    reg = FormRegistry(OWNER)
    form_id = _form_with_questions(reg, 9)
    reg.add_responder(form_id, R1, caller=OWNER)

    reg.submit_response(form_id, 0, b"\xde\xad\xbe\xef", caller=R1)
    reg.submit_response(form_id, 0, "plain", caller=R1)

    assert reg.get_response_history(form_id, 0).responses == (b"\xde\xad\xbe\xef", b"plain")


def test_unauthorized_responder_is_rejected_regardless_of_index() -> None:
    reg = FormRegistry(OWNER)
    form_id = _form_with_questions(reg, ResponseType.TEXT, ResponseType.TEXT)

    with pytest.raises(NotAllowedResponder, match="Not an allowed responder"):
        reg.submit_response(form_id, 0, "Answer 1", caller=R1)
    # Index is out of range too, but authorization is checked first.
    with pytest.raises(NotAllowedResponder):
        reg.submit_response(form_id, 7, "Answer 1", caller=R1)
    # The owner is not implicitly a responder.
    with pytest.raises(NotAllowedResponder):
        reg.submit_response(form_id, 0, "Answer 1", caller=OWNER)


def test_invalid_question_index_for_allowed_responder() -> None:
    reg = FormRegistry(OWNER)
    form_id = _form_with_questions(reg, ResponseType.TEXT, ResponseType.TEXT)
    reg.add_responders(form_id, [R1, R2], caller=OWNER)

    with pytest.raises(InvalidQuestionIndex):
        reg.submit_response(form_id, 2, "Answer 1", caller=R1)
    with pytest.raises(InvalidQuestionIndex):
        reg.submit_response(form_id, -1, "Answer 1", caller=R1)


def test_submission_validation_order() -> None:
    reg = FormRegistry(OWNER)

    with pytest.raises(FormNotFound):
        reg.submit_response(3, 99, "not even valid", caller=R1)

    form_id = _form_with_questions(reg, ResponseType.NUMERIC)
    reg.add_responder(form_id, R1, caller=OWNER)
    with pytest.raises(InvalidQuestionIndex):
        reg.submit_response(form_id, 1, "abc", caller=R1)
    with pytest.raises(InvalidValueKind):
        reg.submit_response(form_id, 0, "abc", caller=R1)


def test_failed_submissions_do_not_mutate() -> None:
    reg = FormRegistry(OWNER)
    form_id = _form_with_questions(reg, ResponseType.NUMERIC, ResponseType.TEXT)
    reg.add_responder(form_id, R1, caller=OWNER)
    revision = reg.revision()
    seq = reg.events.latest_seq()

    with pytest.raises(InvalidValueKind):
        reg.submit_response(form_id, 0, b"\x01", caller=R1)
    with pytest.raises(InvalidValueKind):
        reg.submit_response(form_id, 1, b"\xff\xfe", caller=R1)
    with pytest.raises(InvalidValueKind):
        reg.submit_response(form_id, 0, -5, caller=R1)
    with pytest.raises(InvalidValueKind):
        reg.submit_response(form_id, 1, "\ud800", caller=R1)

    assert len(reg.get_response_history(form_id, 0)) == 0
    assert len(reg.get_response_history(form_id, 1)) == 0
    assert reg.revision() == revision
    assert reg.events.latest_seq() == seq


def test_timestamps_never_decrease_when_clock_goes_backwards(monkeypatch: pytest.MonkeyPatch) -> None:
    reg = FormRegistry(OWNER)
    form_id = _form_with_questions(reg, ResponseType.NUMERIC)
    reg.add_responder(form_id, R1, caller=OWNER)

    clock = itertools.count(start=0)
    monkeypatch.setattr("formledger.core.registry.time.time", lambda: 1_000_000.0 - next(clock))

    for v in range(5):
        reg.submit_response(form_id, 0, v, caller=R1)

    ts = reg.get_response_history(form_id, 0).timestamps
    assert len(ts) == 5
    assert all(a <= b for a, b in zip(ts, ts[1:]))


def test_history_snapshots_are_immutable() -> None:
    reg = FormRegistry(OWNER)
    form_id = _form_with_questions(reg, ResponseType.TEXT)
    reg.add_responder(form_id, R1, caller=OWNER)
    reg.submit_response(form_id, 0, "first", caller=R1)

    snapshot = reg.get_response_history(form_id, 0)
    reg.submit_response(form_id, 0, "second", caller=R1)

    assert snapshot.responses == ("first",)
    assert reg.get_response_history(form_id, 0).responses == ("first", "second")
