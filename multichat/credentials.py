"""Encrypted storage of the API credential."""
from __future__ import annotations

import base64
import hashlib
import logging
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken

from .config import config
from .storage import KeyValueStore

_LOGGER = logging.getLogger(__name__)

CREDENTIAL_KEY = "OPENAI_API_KEY"


def _fernet(passphrase: str) -> Fernet:
    digest = hashlib.sha256(passphrase.encode("utf-8")).digest()
    return Fernet(base64.urlsafe_b64encode(digest))


def encrypt_credential(credential: str, passphrase: str) -> str:
    return _fernet(passphrase).encrypt(credential.encode("utf-8")).decode("ascii")


def decrypt_credential(token: str, passphrase: str) -> str:
    """Decrypt ``token``; raises :class:`cryptography.fernet.InvalidToken` on failure."""

    return _fernet(passphrase).decrypt(token.encode("ascii")).decode("utf-8")


class CredentialVault:
    """Keeps the API key encrypted at rest in a :class:`KeyValueStore`."""

    def __init__(self, store: KeyValueStore, passphrase: str | None = None) -> None:
        self.store = store
        self.passphrase = passphrase if passphrase is not None else config.storage.secret

    def save(self, credential: str) -> None:
        self.store.set(CREDENTIAL_KEY, encrypt_credential(credential, self.passphrase))

    def load(self) -> Optional[str]:
        """Return the stored credential, or ``None`` when there is no usable one."""

        token = self.store.get(CREDENTIAL_KEY)
        if not token:
            return None
        try:
            credential = decrypt_credential(token, self.passphrase)
        except (InvalidToken, ValueError, UnicodeError):
            _LOGGER.warning("Stored credential could not be decrypted")
            return None
        return credential or None

    def clear(self) -> None:
        self.store.delete(CREDENTIAL_KEY)
