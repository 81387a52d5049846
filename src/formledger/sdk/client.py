from __future__ import annotations

import contextlib
from typing import Any, Iterable, Iterator
from urllib.parse import quote

from ..core.codec import ResponseType, to_hex


class FormsClient:
    """HTTP client for driving a running formledger server.

    Method names mirror `FormRegistry`, so the task runner (and user code) can
    target either a local registry or a remote server.

    The caller identity is sent in the `X-Caller` header. It defaults to the
    identity given at construction and can be overridden per call.
    """

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:8000",
        *,
        caller: str | None = None,
        http: Any = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.caller = caller
        # Optional pre-built httpx.Client (e.g. a FastAPI TestClient).
        self._http_client = http

    @contextlib.contextmanager
    def _http(self, timeout_s: float) -> Iterator[Any]:
        if self._http_client is not None:
            yield self._http_client
            return

        import httpx

        with httpx.Client(base_url=self.base_url, timeout=timeout_s) as client:
            yield client

    def _headers(self, caller: str | None) -> dict[str, str]:
        who = caller if caller is not None else self.caller
        if who is None or not str(who).strip():
            raise ValueError("A caller identity is required for this operation")
        return {"X-Caller": str(who).strip()}

    @staticmethod
    def _check(res: Any, action: str) -> Any:
        if res.status_code >= 400:
            raise RuntimeError(f"Failed to {action}: {res.status_code} {res.text}")
        return res.json()

    def healthz(self, *, timeout_s: float = 10.0) -> bool:
        with self._http(timeout_s) as client:
            data = self._check(client.get("/healthz"), "check health")
            return bool(data.get("ok"))

    def get_owner(self, *, timeout_s: float = 10.0) -> str:
        with self._http(timeout_s) as client:
            return str(self._check(client.get("/api/owner"), "get owner")["owner"])

    # -- mutations ------------------------------------------------------------

    def create_form(
        self,
        title: str,
        description: str = "",
        *,
        caller: str | None = None,
        timeout_s: float = 10.0,
    ) -> int:
        with self._http(timeout_s) as client:
            res = client.post(
                "/api/forms",
                json={"title": title, "description": description},
                headers=self._headers(caller),
            )
            return int(self._check(res, "create form")["formId"])

    def add_question_to_form(
        self,
        form_id: int,
        title: str,
        description: str = "",
        required: bool = False,
        response_type: ResponseType | int | str = ResponseType.TEXT,
        *,
        caller: str | None = None,
        timeout_s: float = 10.0,
    ) -> int:
        rtype = ResponseType.from_any(response_type)
        body = {
            "title": title,
            "description": description,
            "required": bool(required),
            "responseType": int(rtype),
        }
        with self._http(timeout_s) as client:
            res = client.post(f"/api/forms/{int(form_id)}/questions", json=body, headers=self._headers(caller))
            return int(self._check(res, "add question")["questionIndex"])

    def add_responder(
        self,
        form_id: int,
        address: str,
        *,
        caller: str | None = None,
        timeout_s: float = 10.0,
    ) -> bool:
        return bool(self.add_responders(form_id, [address], caller=caller, timeout_s=timeout_s))

    def add_responders(
        self,
        form_id: int,
        addresses: Iterable[str],
        *,
        caller: str | None = None,
        timeout_s: float = 10.0,
    ) -> list[str]:
        if isinstance(addresses, str):
            raise TypeError("addresses must be an iterable of identities, not a single string")
        with self._http(timeout_s) as client:
            res = client.post(
                f"/api/forms/{int(form_id)}/responders",
                json={"addresses": [str(a) for a in addresses]},
                headers=self._headers(caller),
            )
            return [str(a) for a in self._check(res, "add responders")["added"]]

    def submit_response(
        self,
        form_id: int,
        question_index: int,
        raw_value: Any,
        *,
        caller: str | None = None,
        timeout_s: float = 10.0,
    ) -> dict[str, Any]:
        """Submit an answer. Bytes are sent as the raw payload, anything else as a logical value."""

        if isinstance(raw_value, (bytes, bytearray, memoryview)):
            body: dict[str, Any] = {"payload": to_hex(bytes(raw_value))}
        else:
            body = {"value": raw_value}
        with self._http(timeout_s) as client:
            res = client.post(
                f"/api/forms/{int(form_id)}/questions/{int(question_index)}/responses",
                json=body,
                headers=self._headers(caller),
            )
            return dict(self._check(res, "submit response"))

    # -- reads ----------------------------------------------------------------

    def get_form_details(self, form_id: int, *, timeout_s: float = 10.0) -> dict[str, Any]:
        with self._http(timeout_s) as client:
            return dict(self._check(client.get(f"/api/forms/{int(form_id)}"), "get form details"))

    def get_all_forms(self, *, timeout_s: float = 10.0) -> list[dict[str, Any]]:
        with self._http(timeout_s) as client:
            return list(self._check(client.get("/api/forms"), "list forms"))

    def get_question_details(self, form_id: int, question_index: int, *, timeout_s: float = 10.0) -> dict[str, Any]:
        with self._http(timeout_s) as client:
            res = client.get(f"/api/forms/{int(form_id)}/questions/{int(question_index)}")
            data = dict(self._check(res, "get question details"))
            return data

    def is_allowed_responder(self, form_id: int, address: str, *, timeout_s: float = 10.0) -> bool:
        with self._http(timeout_s) as client:
            # Addresses may contain "/", "?" or "#": send them as one escaped segment.
            res = client.get(f"/api/forms/{int(form_id)}/responders/{quote(str(address), safe='')}")
            return bool(self._check(res, "check responder")["allowed"])

    def get_responders(self, form_id: int, *, timeout_s: float = 10.0) -> list[str]:
        with self._http(timeout_s) as client:
            return list(self._check(client.get(f"/api/forms/{int(form_id)}/responders"), "list responders"))

    def get_response_history(self, form_id: int, question_index: int, *, timeout_s: float = 10.0) -> dict[str, Any]:
        with self._http(timeout_s) as client:
            res = client.get(f"/api/forms/{int(form_id)}/questions/{int(question_index)}/responses")
            data = self._check(res, "get response history")
            return {"responses": list(data["responses"]), "timestamps": list(data["timestamps"])}

    def get_responder_history(
        self,
        form_id: int,
        question_index: int,
        responder: str,
        *,
        timeout_s: float = 10.0,
    ) -> dict[str, Any]:
        with self._http(timeout_s) as client:
            res = client.get(
                f"/api/forms/{int(form_id)}/questions/{int(question_index)}/responses",
                params={"responder": responder},
            )
            data = self._check(res, "get responder history")
            return {"responses": list(data["responses"]), "timestamps": list(data["timestamps"])}

    # -- notifications --------------------------------------------------------

    def events(self, *, since: int = 0, name: str | None = None, timeout_s: float = 10.0) -> list[dict[str, Any]]:
        params: dict[str, str] = {"since": str(int(since))}
        if name:
            params["name"] = name
        with self._http(timeout_s) as client:
            return list(self._check(client.get("/api/events", params=params), "read events")["events"])

    def event_cursor(self, *, timeout_s: float = 10.0) -> int:
        with self._http(timeout_s) as client:
            return int(self._check(client.get("/api/events/cursor"), "read event cursor")["latestSeq"])

    def revision(self, *, timeout_s: float = 10.0) -> int:
        with self._http(timeout_s) as client:
            return int(self._check(client.get("/api/events/cursor"), "read revision")["revision"])
