from __future__ import annotations

from formledger.core.codec import ResponseType
from formledger.core.events import EventLog
from formledger.core.registry import FormRegistry


OWNER = "0xOwner"
R1 = "0xResponder1"
R2 = "0xResponder2"


def test_event_log_sequence_and_filters() -> None:
    log = EventLog()
    assert log.latest_seq() == 0
    assert log.find("FormCreated") is None

    a = log.append("FormCreated", formId=1)
    b = log.append("QuestionCreated", formId=1, questionIndex=0)
    c = log.append("FormCreated", formId=2)

    assert [e.seq for e in (a, b, c)] == [1, 2, 3]
    assert log.latest_seq() == 3
    assert len(log) == 3
    assert [e.args["formId"] for e in log.all("FormCreated")] == [1, 2]
    assert [e.seq for e in log.since(1)] == [2, 3]
    assert log.since(3) == []
    assert log.find("FormCreated", since=1) == c


def test_registry_emits_one_event_per_mutation() -> None:
    reg = FormRegistry(OWNER)

    form_id = reg.create_form("F", caller=OWNER)
    q = reg.add_question_to_form(form_id, "Q", response_type=ResponseType.NUMERIC, caller=OWNER)
    reg.add_responders(form_id, [R1, R2], caller=OWNER)
    reg.submit_response(form_id, q, 46, caller=R1)

    names = [e.name for e in reg.events.all()]
    assert names == ["FormCreated", "QuestionCreated", "ResponderAdded", "ResponderAdded", "ResponseSubmitted"]

    created = reg.events.find("FormCreated")
    assert created is not None and created.args == {"formId": form_id}

    question = reg.events.find("QuestionCreated")
    assert question is not None and question.args == {"formId": form_id, "questionIndex": q}

    responders = [e.args["responder"] for e in reg.events.all("ResponderAdded")]
    assert responders == [R1, R2]

    submitted = reg.events.find("ResponseSubmitted")
    assert submitted is not None
    assert submitted.args == {"formId": form_id, "questionIndex": q, "responder": R1}


def test_re_adding_a_responder_still_emits_an_event() -> None:
    reg = FormRegistry(OWNER)
    form_id = reg.create_form("F", caller=OWNER)
    reg.add_responder(form_id, R1, caller=OWNER)
    cursor = reg.events.latest_seq()

    assert reg.add_responder(form_id, R1, caller=OWNER) is False

    emitted = reg.events.since(cursor)
    assert [(e.name, e.args["responder"]) for e in emitted] == [("ResponderAdded", R1)]
    assert reg.get_responders(form_id) == [R1]


def test_generated_ids_are_recoverable_from_the_log_after_a_cursor() -> None:
    reg = FormRegistry(OWNER)
    reg.create_form("Earlier", caller=OWNER)

    cursor = reg.events.latest_seq()
    reg.create_form("Later", caller=OWNER)

    ev = reg.events.find("FormCreated", since=cursor)
    assert ev is not None
    assert reg.get_form_details(ev.args["formId"]).title == "Later"


def test_registry_can_share_an_injected_log() -> None:
    log = EventLog()
    a = FormRegistry(OWNER, events=log)
    b = FormRegistry(OWNER, events=log)

    a.create_form("A", caller=OWNER)
    b.create_form("B", caller=OWNER)

    assert a.events is b.events
    assert [e.args["formId"] for e in log.all("FormCreated")] == [1, 1]
