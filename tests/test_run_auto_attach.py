from __future__ import annotations

import pytest


OWNER = "0xOwner"


def test_run_starts_a_server_and_attaches_to_it(monkeypatch: pytest.MonkeyPatch) -> None:
    """If a server is reachable at host/port, formledger.run() attaches by default.

    Scripts can call `formledger.run(...)` unconditionally: it connects when a
    server is up, otherwise it starts one.
    """

    import formledger
    from formledger.runtime.server import FormsServer
    from formledger.sdk.client import FormsClient

    monkeypatch.delenv("FORMLEDGER_URL", raising=False)
    server = formledger.run(host="127.0.0.1", port=0, owner=OWNER, new_server=True, log_level="warning")
    assert isinstance(server, FormsServer)
    try:
        attached = formledger.run(host=server.host, port=server.port, caller=OWNER)

        # Attached instance should be a client (not a second server).
        assert isinstance(attached, FormsClient)
        assert attached.base_url == f"http://{server.host}:{server.port}"

        form_id = attached.create_form("Over HTTP")
        assert server.registry.get_form_details(form_id).title == "Over HTTP"
        assert server.as_client().get_owner() == OWNER
    finally:
        server.stop()


def test_run_new_server_forces_start_even_if_env_url_is_set(monkeypatch: pytest.MonkeyPatch) -> None:
    import formledger
    from formledger.runtime.server import FormsServer

    s1 = formledger.run(host="127.0.0.1", port=0, owner=OWNER, new_server=True, log_level="warning")
    monkeypatch.setenv("FORMLEDGER_URL", f"http://{s1.host}:{s1.port}")
    try:
        # new_server=True ignores FORMLEDGER_URL and starts a fresh server.
        s2 = formledger.run(host="127.0.0.1", port=0, owner=OWNER, new_server=True, log_level="warning")
        try:
            assert isinstance(s2, FormsServer)
            assert (s2.host, s2.port) != (s1.host, s1.port)
            assert s2.registry is not s1.registry
        finally:
            s2.stop()
    finally:
        s1.stop()
