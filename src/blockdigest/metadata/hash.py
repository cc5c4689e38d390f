"""Content hashes of objects stored in a block (meta.json ``hash`` entries)."""

from __future__ import annotations

import hashlib
import logging
import os
import re
import stat
from collections.abc import Callable
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, model_validator

from blockdigest.metadata.errors import OpenError, ReadError, UnsupportedHashFuncError
from blockdigest.util.closing import close_with_log_on_err

DEFAULT_CHUNK_SIZE = 32 * 1024

_LOWER_HEX = re.compile(r"[0-9a-f]*")

# Opening a FIFO without it blocks until a writer appears.
_O_NONBLOCK = getattr(os, "O_NONBLOCK", 0)


class HashFunc(str, Enum):
    """Hash function used to produce an ``ObjectHash``.

    The values are persisted in block metadata and must never change.
    """

    SHA256 = "SHA256"
    # No hash requested or stored. Valid in metadata, never computable.
    NONE = ""


_HASH_FACTORIES: dict[HashFunc, Callable[[], "hashlib._Hash"]] = {
    HashFunc.SHA256: hashlib.sha256,
}


def _open_nonblocking(path: str, flags: int) -> int:
    return os.open(path, flags | _O_NONBLOCK)


def is_computable(hash_func: HashFunc) -> bool:
    """Return True when `hash_func` has a concrete implementation."""
    return hash_func in _HASH_FACTORIES


def digest_size(hash_func: HashFunc) -> int:
    """Return the native digest length in bytes, 0 for ``HashFunc.NONE``."""
    factory = _HASH_FACTORIES.get(hash_func)
    if factory is None:
        return 0
    return factory().digest_size


class ObjectHash(BaseModel):
    """Hash of an object in the object storage.

    Serialized as ``{"hashFunc": "SHA256", "value": "<hex>"}``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    func: HashFunc = Field(alias="hashFunc")
    value: str = ""

    @model_validator(mode="after")
    def _validate_value(self) -> "ObjectHash":
        expected = 2 * digest_size(self.func)
        if len(self.value) != expected:
            raise ValueError(
                f"{self.func.value or 'NONE'} hash value must have {expected} hex characters, got {len(self.value)}."
            )
        if not _LOWER_HEX.fullmatch(self.value):
            raise ValueError("hash value must be lowercase hexadecimal.")
        return self

    def equal(self, other: "ObjectHash") -> bool:
        """Return True if both hashes carry the same value.

        The hash function is not compared.
        """
        return self.value == other.value


def equal(a: ObjectHash, b: ObjectHash) -> bool:
    """Return True if two hashes are equal, see ``ObjectHash.equal``."""
    return a.equal(b)


def calculate_hash(
    path: str | Path,
    hash_func: HashFunc | str,
    logger: logging.Logger,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> ObjectHash:
    """Stream the file at `path` through `hash_func` and return its ``ObjectHash``.

    Raises ``UnsupportedHashFuncError`` (before touching the file) for unknown
    functions and for ``HashFunc.NONE``, ``OpenError`` when the file cannot be
    opened, and ``ReadError`` when reading fails part way. A failure to close
    the file is logged on `logger` and does not affect the result.
    """

    if chunk_size < 1:
        raise ValueError("chunk_size must be >= 1")

    try:
        func = HashFunc(hash_func)
        factory = _HASH_FACTORIES[func]
    except (KeyError, ValueError) as exc:
        raise UnsupportedHashFuncError(hash_func) from exc

    clean = os.path.normpath(os.fspath(path))
    try:
        handle = open(clean, "rb", opener=_open_nonblocking)
    except OSError as exc:
        raise OpenError(clean) from exc

    digest = factory()
    with close_with_log_on_err(logger, handle, "closing %s", clean):
        try:
            mode = os.fstat(handle.fileno()).st_mode
        except OSError as exc:
            raise OpenError(clean, "inspecting file") from exc
        if not stat.S_ISREG(mode):
            raise OpenError(clean, "not a regular file")

        try:
            for chunk in iter(lambda: handle.read(chunk_size), b""):
                digest.update(chunk)
        except OSError as exc:
            raise ReadError(clean) from exc

    return ObjectHash(func=func, value=digest.hexdigest())


__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "HashFunc",
    "ObjectHash",
    "calculate_hash",
    "digest_size",
    "equal",
    "is_computable",
]
