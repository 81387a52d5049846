from __future__ import annotations


class RegistryError(Exception):
    """Base class for every failure raised by the form registry.

    `code` is the stable error kind name. Callers (HTTP layer, task runner)
    should branch on the class or on `code`, never on the message text.
    """

    code = "RegistryError"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class NotOwner(RegistryError, PermissionError):
    code = "NotOwner"


class NotAllowedResponder(RegistryError, PermissionError):
    code = "NotAllowedResponder"


class FormNotFound(RegistryError, KeyError):
    code = "FormNotFound"


class InvalidQuestionIndex(RegistryError, IndexError):
    code = "InvalidQuestionIndex"


class InvalidValueKind(RegistryError, ValueError):
    code = "InvalidValueKind"
