"""
Stored-credential helpers.

Analysis server passwords are kept reversibly encrypted (AES-128-CBC,
PKCS#7 padding, base64 text) and turned into HTTP basic-auth headers when a
client is built.
"""

from __future__ import annotations

import base64
from typing import Optional

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from flowgate.config import get_config
from flowgate.logging_utils import get_logger

logger = get_logger(__name__)


def _cipher() -> Cipher:
    cfg = get_config().credentials
    key = cfg.key.encode("utf-8")
    iv = cfg.iv.encode("utf-8")
    return Cipher(algorithms.AES(key), modes.CBC(iv))


def encrypt_password(value: str) -> str:
    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    padded = padder.update(value.encode("utf-8")) + padder.finalize()
    encryptor = _cipher().encryptor()
    encrypted = encryptor.update(padded) + encryptor.finalize()
    return base64.b64encode(encrypted).decode("ascii")


def decrypt_password(token: Optional[str]) -> Optional[str]:
    """
    Decrypt a stored password.

    Returns None (and logs) when the token is not valid ciphertext.
    """
    if token is None:
        return None
    try:
        decryptor = _cipher().decryptor()
        padded = decryptor.update(base64.b64decode(token)) + decryptor.finalize()
        unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
        return (unpadder.update(padded) + unpadder.finalize()).decode("utf-8")
    except ValueError as e:
        logger.error("Could not decrypt stored credential: %s", e)
        return None


def basic_auth_token(user_name: str, password: Optional[str]) -> str:
    raw = f"{user_name}:{password or ''}".encode("utf-8")
    return base64.b64encode(raw).decode("utf-8")


def basic_auth_header(user_name: str, password: Optional[str]) -> str:
    return "Basic " + basic_auth_token(user_name, password)
