# Secure Message Encryption - passphrase-based envelope core
# ----------------------------------------------------------
# Envelope format (OpenSSL / CryptoJS "Salted__" compatible):
#   Base64(
#     [8 bytes]  magic: b'Salted__'
#     [8]        salt (fresh per message)
#     [N]        AES-CBC ciphertext, PKCS#7 padded, N % 16 == 0
#   )
#
# Key and IV come from EVP_BytesToKey (MD5, one iteration) over
# passphrase + salt. There is no authentication tag: a wrong passphrase is
# detected only through inconsistent padding.

import base64
import logging
import secrets
from dataclasses import dataclass
from typing import Callable, Optional, Tuple, Union

from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives import hashes, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

logger = logging.getLogger(__name__)

# -------------------- Constants --------------------
MAGIC = b"Salted__"
SALT_LEN = 8
BLOCK_SIZE = 16  # AES block, bytes
KEY_LEN = 16  # AES-128
IV_LEN = 16
HEADER_LEN = len(MAGIC) + SALT_LEN

DECRYPT_FAILED_MESSAGE = "Invalid key or data"

backend = default_backend()


# -------------------- Errors --------------------
class EnvelopeError(Exception):
    """Internal failure while unpacking or deciphering an envelope."""


class FormatError(EnvelopeError):
    """Envelope text did not decode, is too short, or lacks the marker."""


class PaddingError(EnvelopeError):
    """Trailing PKCS#7 bytes are inconsistent (usually a wrong passphrase)."""


class DecryptError(Exception):
    """The single failure reported to callers of decrypt_message.

    The message is always the same; the internal reason, if any, is chained
    on ``__cause__``.
    """

    def __init__(self, message: str = DECRYPT_FAILED_MESSAGE):
        super().__init__(message)


# -------------------- Result type --------------------
@dataclass(frozen=True)
class Ok:
    plaintext: str
    ok = True

    def unwrap(self) -> str:
        return self.plaintext


@dataclass(frozen=True)
class Err:
    error: DecryptError
    ok = False

    def unwrap(self) -> str:
        raise self.error


DecryptResult = Union[Ok, Err]


# -------------------- Key derivation --------------------
def _to_bytes(value: Union[str, bytes]) -> bytes:
    if isinstance(value, bytes):
        return value
    return value.encode("utf-8")


def _md5(data: bytes) -> bytes:
    digest = hashes.Hash(hashes.MD5(), backend=backend)
    digest.update(data)
    return digest.finalize()


def derive_key_iv(passphrase: bytes, salt: bytes, key_size: int = KEY_LEN,
                  iv_size: int = IV_LEN) -> Tuple[bytes, bytes]:
    """OpenSSL EVP_BytesToKey with MD5 and a single iteration.

    D1 = MD5(passphrase + salt), Dn = MD5(Dn-1 + passphrase + salt); digests
    are concatenated until key_size + iv_size bytes are available.
    """
    if len(salt) != SALT_LEN:
        raise ValueError(f"Salt must be exactly {SALT_LEN} bytes")
    if key_size not in (16, 24, 32):
        raise ValueError("Key size must be 16, 24 or 32 bytes")

    data = _to_bytes(passphrase) + salt
    block = _md5(data)
    material = block
    while len(material) < key_size + iv_size:
        block = _md5(block + data)
        material += block
    return material[:key_size], material[key_size:key_size + iv_size]


# -------------------- Block cipher --------------------
def encrypt_block_chain(plaintext: bytes, key: bytes, iv: bytes) -> bytes:
    padder = padding.PKCS7(BLOCK_SIZE * 8).padder()
    padded = padder.update(plaintext) + padder.finalize()

    cipher = Cipher(algorithms.AES(key), modes.CBC(iv), backend=backend)
    encryptor = cipher.encryptor()
    return encryptor.update(padded) + encryptor.finalize()


def decrypt_block_chain(ciphertext: bytes, key: bytes, iv: bytes) -> bytes:
    if not ciphertext or len(ciphertext) % BLOCK_SIZE:
        raise FormatError(f"Ciphertext length {len(ciphertext)} is not a positive multiple of {BLOCK_SIZE}")

    cipher = Cipher(algorithms.AES(key), modes.CBC(iv), backend=backend)
    decryptor = cipher.decryptor()
    padded = decryptor.update(ciphertext) + decryptor.finalize()

    unpadder = padding.PKCS7(BLOCK_SIZE * 8).unpadder()
    try:
        return unpadder.update(padded) + unpadder.finalize()
    except ValueError as e:
        raise PaddingError("Inconsistent padding bytes") from e


# -------------------- Envelope --------------------
def pack(salt: bytes, ciphertext: bytes) -> str:
    if len(salt) != SALT_LEN:
        raise ValueError(f"Salt must be exactly {SALT_LEN} bytes")
    return base64.b64encode(MAGIC + salt + ciphertext).decode("ascii")


def unpack(text: Union[str, bytes]) -> Tuple[bytes, bytes]:
    # Line breaks added for display are not part of the encoding.
    compact = "".join(_to_text(text).split())
    try:
        raw = base64.b64decode(compact, validate=True)
    except ValueError as e:
        raise FormatError("Envelope is not valid Base64") from e

    if len(raw) < HEADER_LEN:
        raise FormatError("Envelope too short")
    if raw[:len(MAGIC)] != MAGIC:
        raise FormatError("Invalid envelope (bad magic)")
    return raw[len(MAGIC):HEADER_LEN], raw[HEADER_LEN:]


def _to_text(value: Union[str, bytes]) -> str:
    if isinstance(value, str):
        return value
    try:
        return value.decode("ascii")
    except UnicodeDecodeError as e:
        raise FormatError("Envelope is not ASCII text") from e


# -------------------- Public API --------------------
def encrypt_message(plaintext: Union[str, bytes], passphrase: Union[str, bytes], *,
                    salt_factory: Optional[Callable[[int], bytes]] = None,
                    key_size: int = KEY_LEN) -> str:
    """Encrypt plaintext under passphrase and return the Base64 envelope.

    A fresh salt is drawn from ``salt_factory`` (``secrets.token_bytes`` by
    default) on every call, so equal inputs give different envelopes.
    """
    if not passphrase:
        raise ValueError("Passphrase must be a non-empty string.")

    salt = (salt_factory or secrets.token_bytes)(SALT_LEN)
    key, iv = derive_key_iv(_to_bytes(passphrase), salt, key_size=key_size)
    ciphertext = encrypt_block_chain(_to_bytes(plaintext), key, iv)
    return pack(salt, ciphertext)


def decrypt_message(envelope_text: Union[str, bytes], passphrase: Union[str, bytes], *,
                    key_size: int = KEY_LEN) -> DecryptResult:
    """Decrypt an envelope; returns Ok(plaintext) or Err(DecryptError).

    Every failure (bad encoding, missing marker, bad length, bad padding,
    non UTF-8 plaintext) yields the same Err.
    """
    if not passphrase:
        logger.warning("decrypt_message called with an empty passphrase")

    try:
        salt, ciphertext = unpack(envelope_text)
        key, iv = derive_key_iv(_to_bytes(passphrase), salt, key_size=key_size)
        plaintext = decrypt_block_chain(ciphertext, key, iv).decode("utf-8")
    except (EnvelopeError, UnicodeDecodeError) as e:
        logger.debug("Decryption failed: %s", type(e).__name__)
        error = DecryptError()
        error.__cause__ = e
        return Err(error)
    return Ok(plaintext)
