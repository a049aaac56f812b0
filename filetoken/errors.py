# filetoken/errors.py
"""
Errors raised by the file registry.

Every error is a caller-input or not-found condition. None of them leave
the registry in a changed state, and the registry stays usable afterwards.
"""


class RegistryError(Exception):
    """Base class for registry errors."""

    code = "RegistryError"
    message = "Registry error"

    def __init__(self, detail: str = None):
        self.detail = detail
        super().__init__(self.message)

    def to_dict(self):
        data = {"error": self.message, "code": self.code}
        if self.detail:
            data["detail"] = self.detail
        return data


class InvalidSignatureLength(RegistryError, ValueError):
    code = "InvalidSignatureLength"
    message = "The signature must be 64 characters long"


class DuplicateSignature(RegistryError, ValueError):
    code = "DuplicateSignature"
    message = "The signature already exists"


class InvalidId(RegistryError, ValueError):
    code = "InvalidId"
    message = "Invalid file id"


class IdNotFound(RegistryError, LookupError):
    code = "IdNotFound"
    message = "There is no file with that id"


class SignatureNotFound(RegistryError, LookupError):
    code = "SignatureNotFound"
    message = "There is no file with that signature"


class Unauthorized(RegistryError):
    code = "Unauthorized"
    message = "Request signature verification failed"


class RegistryStateError(RegistryError):
    """Persisted registry state violates the id/index invariants."""

    code = "RegistryStateError"
    message = "Persisted registry state is inconsistent"


ERRORS_BY_CODE = {
    cls.code: cls
    for cls in (
        InvalidSignatureLength,
        DuplicateSignature,
        InvalidId,
        IdNotFound,
        SignatureNotFound,
        Unauthorized,
        RegistryStateError,
    )
}
