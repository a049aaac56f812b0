# filetoken - Content signature registry
#
# Binds an immutable content signature (a 64-character hex digest of a
# file's bytes) to a display name and an owning identity, issuing each
# registration a dense, monotonically increasing id.
#
# Core concepts:
# - FileRecord: One registration (id, name, signature, owner)
# - FileRegistry: Owns the records and the by-id, by-signature, by-owner indices
# - NewFileEvent: Notification emitted once per successful registration
# - Account: A caller identity with a signing key, used over HTTP

from .errors import (
    RegistryError,
    InvalidSignatureLength,
    DuplicateSignature,
    InvalidId,
    IdNotFound,
    SignatureNotFound,
    Unauthorized,
    RegistryStateError,
)
from .events import NewFileEvent, EventLog
from .hashing import file_signature, bytes_signature, SIGNATURE_LENGTH
from .registry import FileRegistry, FileRecord
from .identity import Account, AccountStore, sign_request, verify_request
from .config import Settings, load_settings

__all__ = [
    # Core
    "FileRegistry",
    "FileRecord",
    "NewFileEvent",
    "EventLog",
    "file_signature",
    "bytes_signature",
    "SIGNATURE_LENGTH",
    # Errors
    "RegistryError",
    "InvalidSignatureLength",
    "DuplicateSignature",
    "InvalidId",
    "IdNotFound",
    "SignatureNotFound",
    "Unauthorized",
    "RegistryStateError",
    # Identity
    "Account",
    "AccountStore",
    "sign_request",
    "verify_request",
    # Config
    "Settings",
    "load_settings",
]

__version__ = "0.1.0"
