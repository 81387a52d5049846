from __future__ import annotations

import logging
import threading
import time
from typing import Any, Iterable

from . import auth
from .codec import ResponseType, decode, encode
from .errors import FormNotFound, InvalidQuestionIndex, NotAllowedResponder, NotOwner
from .events import EventLog
from .forms import FormDetails, FormRecord, Question, ResponseEntry, ResponseHistory


logger = logging.getLogger(__name__)

FIRST_FORM_ID = 1


class FormRegistry:
    """In-memory forms-and-responses registry.

    A single re-entrant lock guards all state: every public method runs to
    completion under it, so mutations are serialized and either commit fully
    or raise before touching anything. Reads return immutable snapshots.

    The owner identity is fixed at construction. Only the owner may create
    forms, add questions or grant responders; allowed responders append
    answers to per-question histories that are never edited.
    """

    def __init__(self, owner: str, *, events: EventLog | None = None) -> None:
        self._owner = auth.normalize_identity(owner, field="owner")
        self._lock = threading.RLock()
        self._forms: dict[int, FormRecord] = {}
        self._next_form_id = FIRST_FORM_ID
        self._global_revision = 0
        self.events = events if events is not None else EventLog()

    @property
    def owner(self) -> str:
        return self._owner

    def revision(self) -> int:
        with self._lock:
            return self._global_revision

    # -- guards ---------------------------------------------------------------

    def is_owner(self, caller: Any) -> bool:
        return auth.is_owner(self._owner, caller)

    def is_allowed_responder(self, form_id: int, address: Any) -> bool:
        with self._lock:
            return auth.is_allowed_responder(self._forms.get(self._coerce_id(form_id)), address)

    @staticmethod
    def _coerce_id(value: Any, *, name: str = "form_id") -> int:
        if isinstance(value, bool):
            raise TypeError(f"{name} must be an integer")
        try:
            return int(value)
        except (TypeError, ValueError) as ex:
            raise TypeError(f"{name} must be an integer, got {value!r}") from ex

    def _require_owner(self, caller: Any) -> None:
        if not self.is_owner(caller):
            raise NotOwner("caller is not the owner")

    def _require_form_locked(self, form_id: Any) -> FormRecord:
        fid = self._coerce_id(form_id)
        form = self._forms.get(fid)
        if form is None:
            raise FormNotFound(f"Form {fid} does not exist")
        return form

    def _require_question_locked(self, form: FormRecord, question_index: Any) -> int:
        idx = self._coerce_id(question_index, name="question_index")
        if not form.has_question(idx):
            raise InvalidQuestionIndex(
                f"Invalid question index {idx} for form {form.id} ({form.questions_count} questions)"
            )
        return idx

    def _commit_locked(self) -> None:
        self._global_revision += 1

    # -- mutations ------------------------------------------------------------

    def create_form(self, title: str, description: str = "", *, caller: Any) -> int:
        self._require_owner(caller)
        with self._lock:
            form_id = self._next_form_id
            self._forms[form_id] = FormRecord(
                id=form_id,
                title=str(title),
                description=str(description),
                created_at=time.time(),
            )
            self._next_form_id += 1
            self._commit_locked()
            self.events.append("FormCreated", formId=form_id)
        logger.debug("form %d created: %r", form_id, title)
        return form_id

    def add_question_to_form(
        self,
        form_id: int,
        title: str,
        description: str = "",
        required: bool = False,
        response_type: ResponseType | int | str = ResponseType.TEXT,
        *,
        caller: Any,
    ) -> int:
        with self._lock:
            form = self._require_form_locked(form_id)
            self._require_owner(caller)
            rtype = ResponseType.from_any(response_type)

            index = form.questions_count
            form.questions.append(
                Question(
                    index=index,
                    title=str(title),
                    description=str(description),
                    required=bool(required),
                    response_type=int(rtype),
                    created_at=time.time(),
                )
            )
            form.histories.append([])
            self._commit_locked()
            self.events.append("QuestionCreated", formId=form.id, questionIndex=index)
        logger.debug("question %d added to form %d (type=%d)", index, form.id, int(rtype))
        return index

    def add_responder(self, form_id: int, address: Any, *, caller: Any) -> bool:
        """Grant `address` permission to answer the form. Returns True if it was newly added."""
        return bool(self.add_responders(form_id, [address], caller=caller))

    def add_responders(self, form_id: int, addresses: Iterable[Any], *, caller: Any) -> list[str]:
        """Grant several responders at once.

        Re-adding an existing responder is a no-op for the set but still emits
        `ResponderAdded`, so callers can always recover the address from the log.
        Returns the addresses that were not present before.
        """

        if isinstance(addresses, (str, bytes)):
            raise TypeError("addresses must be an iterable of identities, not a single string")
        with self._lock:
            form = self._require_form_locked(form_id)
            self._require_owner(caller)

            # Validate everything before inserting anything.
            normalized: list[str] = []
            for a in addresses:
                ident = auth.normalize_identity(a, field="address")
                if ident not in normalized:
                    normalized.append(ident)

            added: list[str] = []
            for ident in normalized:
                if ident not in form.responders:
                    form.responders[ident] = None
                    added.append(ident)
            if normalized:
                self._commit_locked()
            for ident in normalized:
                self.events.append("ResponderAdded", formId=form.id, responder=ident)
        if added:
            logger.debug("form %d: %d responder(s) added", form.id, len(added))
        return added

    def submit_response(self, form_id: int, question_index: int, raw_value: Any, *, caller: Any) -> ResponseEntry:
        """Append an answer to a question's history.

        `raw_value` is the stored payload (bytes). A logical value (int or str)
        is accepted as well and encoded with the question's response type first.
        """

        with self._lock:
            form = self._require_form_locked(form_id)
            if not auth.is_allowed_responder(form, caller):
                raise NotAllowedResponder("Not an allowed responder")
            idx = self._require_question_locked(form, question_index)
            question = form.questions[idx]

            if isinstance(raw_value, (bytes, bytearray, memoryview)):
                payload = bytes(raw_value)
            else:
                payload = encode(raw_value, question.response_type)
            value = decode(payload, question.response_type)

            history = form.histories[idx]
            now = time.time()
            if history and history[-1].timestamp > now:
                # Wall clock went backwards; keep the history non-decreasing.
                now = history[-1].timestamp
            responder = str(caller).strip()
            entry = ResponseEntry(value=value, payload=payload, timestamp=now, responder=responder)
            history.append(entry)
            self._commit_locked()
            self.events.append("ResponseSubmitted", formId=form.id, questionIndex=idx, responder=responder)
        logger.debug("response submitted to form %d question %d", form.id, idx)
        return entry

    # -- reads ----------------------------------------------------------------

    def get_form_details(self, form_id: int) -> FormDetails:
        with self._lock:
            return self._require_form_locked(form_id).snapshot()

    def get_question_details(self, form_id: int, question_index: int) -> Question:
        with self._lock:
            form = self._require_form_locked(form_id)
            return form.questions[self._require_question_locked(form, question_index)]

    def get_response_history(self, form_id: int, question_index: int) -> ResponseHistory:
        with self._lock:
            form = self._require_form_locked(form_id)
            idx = self._require_question_locked(form, question_index)
            return ResponseHistory.from_entries(form.histories[idx])

    def get_response_entries(self, form_id: int, question_index: int) -> tuple[ResponseEntry, ...]:
        with self._lock:
            form = self._require_form_locked(form_id)
            idx = self._require_question_locked(form, question_index)
            return tuple(form.histories[idx])

    def get_responder_history(self, form_id: int, question_index: int, responder: Any) -> ResponseHistory:
        who = auth.normalize_identity(responder, field="responder")
        with self._lock:
            form = self._require_form_locked(form_id)
            idx = self._require_question_locked(form, question_index)
            return ResponseHistory.from_entries([e for e in form.histories[idx] if e.responder == who])

    def get_responders(self, form_id: int) -> list[str]:
        with self._lock:
            return list(self._require_form_locked(form_id).responders)

    def get_all_forms(self) -> list[FormDetails]:
        with self._lock:
            # Ids are allocated in increasing order and dicts keep insertion order.
            return [form.snapshot() for form in self._forms.values()]

    def forms_count(self) -> int:
        with self._lock:
            return len(self._forms)
