from __future__ import annotations


def test_top_level_exports() -> None:
    import formledger

    assert formledger.run is not None
    assert formledger.FormsServer is not None
    assert formledger.FormsClient is not None
    assert formledger.FormRegistry is not None
    assert formledger.EventLog is not None
    assert issubclass(formledger.NotOwner, formledger.RegistryError)
    assert issubclass(formledger.FormNotFound, KeyError)
    assert issubclass(formledger.InvalidQuestionIndex, IndexError)
    assert issubclass(formledger.InvalidValueKind, ValueError)
    assert issubclass(formledger.NotAllowedResponder, PermissionError)


def test_package_paths_work() -> None:
    from formledger.api import create_api_app, status_for_error
    from formledger.api.routes import mount_forms_api
    from formledger.config import Settings, load_settings
    from formledger.core import FormRegistry
    from formledger.core.codec import ResponseType
    from formledger.runtime.server import FormsServer, run
    from formledger.sdk.client import FormsClient
    from formledger.tasks import run_task

    assert create_api_app is not None
    assert status_for_error is not None
    assert mount_forms_api is not None
    assert Settings is not None
    assert load_settings is not None
    assert FormRegistry is not None
    assert ResponseType.NUMERIC == 0
    assert FormsServer is not None
    assert FormsClient is not None
    assert run is not None
    assert run_task is not None


def test_settings_from_environment(monkeypatch) -> None:
    from formledger.config import DEFAULT_OWNER, load_settings

    monkeypatch.delenv("FORMLEDGER_OWNER", raising=False)
    monkeypatch.setenv("FORMLEDGER_PORT", "9123")
    settings = load_settings(dotenv=False)
    assert settings.owner == DEFAULT_OWNER
    assert settings.port == 9123

    monkeypatch.setenv("FORMLEDGER_OWNER", " 0xAbc ")
    assert load_settings(dotenv=False).owner == "0xAbc"

    monkeypatch.setenv("FORMLEDGER_PORT", "nope")
    try:
        load_settings(dotenv=False)
    except ValueError as e:
        assert "FORMLEDGER_PORT" in str(e)
    else:  # pragma: no cover
        raise AssertionError("expected ValueError")
