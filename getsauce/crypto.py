"""AES-128 decryption of encrypted stream segments."""

from __future__ import annotations

from pathlib import Path

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

_BLOCK_SIZE = 16


def default_iv(seq_id: int) -> bytes:
    """Return the 16-byte IV with ``seq_id`` big-endian in the last 8 bytes."""
    return bytes(8) + seq_id.to_bytes(8, "big")


def pkcs5_unpad(data: bytes) -> bytes:
    """Strip PKCS#5 padding."""
    if not data:
        raise ValueError("cannot unpad empty data")
    pad = data[-1]
    if pad > len(data):
        raise ValueError("invalid padding")
    return data[: len(data) - pad]


def decrypt_aes128(data: bytes, key: bytes, iv: bytes) -> bytes:
    """Decrypt AES-128-CBC data and remove its padding."""
    if len(data) % _BLOCK_SIZE:
        raise ValueError("encrypted data is not a multiple of the block size")
    decryptor = Cipher(algorithms.AES(key), modes.CBC(iv[:_BLOCK_SIZE])).decryptor()
    return pkcs5_unpad(decryptor.update(data) + decryptor.finalize())


def decrypt_file(key: bytes, path: str | Path) -> bytes:
    """Decrypt a downloaded segment file with the default IV."""
    return decrypt_aes128(Path(path).read_bytes(), key, default_iv(0))