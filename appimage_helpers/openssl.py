"""AES-256-CBC encryption compatible with `openssl enc -aes-256-cbc -md md5`."""

from __future__ import annotations

import base64
import binascii
import hashlib
import os

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

# OpenSSL output always starts with this header followed by 8 bytes of salt.
SALT_HEADER = b"Salted__"
BLOCK_SIZE = 16
SALT_SIZE = 8
KEY_SIZE = 32


class DecryptionError(ValueError):
    """Data cannot be decrypted as OpenSSL AES-256-CBC output."""


def _to_bytes(value: str | bytes) -> bytes:
    return value.encode() if isinstance(value, str) else bytes(value)


def evp_bytes_to_key(password: str | bytes, salt: bytes) -> tuple[bytes, bytes]:
    """Derive a 32-byte key and a 16-byte IV the way OpenSSL's EVP_BytesToKey does with MD5."""
    secret = _to_bytes(password)
    material = b""
    previous = b""
    while len(material) < KEY_SIZE + BLOCK_SIZE:
        previous = hashlib.md5(previous + secret + salt).digest()
        material += previous
    return material[:KEY_SIZE], material[KEY_SIZE : KEY_SIZE + BLOCK_SIZE]


def _pad(data: bytes) -> bytes:
    # Data that is already block-aligned is left unpadded.
    remainder = len(data) % BLOCK_SIZE
    if remainder == 0:
        return data
    padlen = BLOCK_SIZE - remainder
    return data + bytes([padlen]) * padlen


def _unpad(data: bytes) -> bytes:
    if not data or len(data) % BLOCK_SIZE != 0:
        raise DecryptionError(f"invalid data len {len(data)}")
    padlen = data[-1]
    if padlen == 0 or padlen > BLOCK_SIZE:
        raise DecryptionError("invalid padding")
    if data[-padlen:] != bytes([padlen]) * padlen:
        raise DecryptionError("invalid padding")
    return data[:-padlen]


def _cipher(key: bytes, iv: bytes) -> Cipher:
    return Cipher(algorithms.AES(key), modes.CBC(iv))


def encrypt(passphrase: str | bytes, plaintext: str | bytes) -> bytes:
    """Encrypt plaintext with a fresh random salt; the result starts with 'Salted__'."""
    salt = os.urandom(SALT_SIZE)
    key, iv = evp_bytes_to_key(passphrase, salt)
    data = _pad(SALT_HEADER + salt + _to_bytes(plaintext))
    encryptor = _cipher(key, iv).encryptor()
    body = encryptor.update(data[BLOCK_SIZE:]) + encryptor.finalize()
    return data[:BLOCK_SIZE] + body


def decrypt(passphrase: str | bytes, encrypted: bytes) -> bytes:
    """Decrypt OpenSSL AES-256-CBC output that carries a salt header."""
    if len(encrypted) < BLOCK_SIZE:
        raise DecryptionError("Cipher data length less than aes block size")
    header = encrypted[:BLOCK_SIZE]
    if header[: len(SALT_HEADER)] != SALT_HEADER:
        raise DecryptionError(
            "Does not appear to have been encrypted with OpenSSL, salt header missing."
        )
    key, iv = evp_bytes_to_key(passphrase, header[len(SALT_HEADER) :])
    if len(encrypted) % BLOCK_SIZE != 0:
        raise DecryptionError(f"bad blocksize({len(encrypted)}), aes.BlockSize = {BLOCK_SIZE}")
    decryptor = _cipher(key, iv).decryptor()
    body = decryptor.update(encrypted[BLOCK_SIZE:]) + decryptor.finalize()
    return _unpad(body)


def encrypt_base64(passphrase: str | bytes, plaintext: str | bytes) -> bytes:
    """Encrypt plaintext and return the result base64-encoded."""
    return base64.b64encode(encrypt(passphrase, plaintext))


def decrypt_base64(passphrase: str | bytes, encrypted_base64: str | bytes) -> bytes:
    """Decrypt base64-encoded OpenSSL AES-256-CBC output."""
    try:
        encrypted = base64.b64decode(_to_bytes(encrypted_base64), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecryptionError(f"invalid base64 data: {exc}") from exc
    return decrypt(passphrase, encrypted)


def encrypt_string(passphrase: str, plaintext: str) -> str:
    """Encrypt a string and return the base64 text."""
    return encrypt_base64(passphrase, plaintext).decode("ascii")


def decrypt_string(passphrase: str, encrypted_base64: str) -> str:
    """Decrypt base64 text produced by encrypt_string or `openssl enc -a`."""
    return decrypt_base64(passphrase, encrypted_base64).decode("utf-8", errors="replace")