"""Failures raised while computing object hashes."""

from __future__ import annotations

from pathlib import Path


class HashError(RuntimeError):
    """Base class for digest computation failures."""


class OpenError(HashError):
    """Raised when the object cannot be opened for reading."""

    def __init__(self, path: str | Path, reason: str = "opening file") -> None:
        super().__init__(f"{reason}: {path}")
        self.path = str(path)


class ReadError(HashError):
    """Raised when streaming the object through the hash fails mid-way."""

    def __init__(self, path: str | Path, reason: str = "copying") -> None:
        super().__init__(f"{reason}: {path}")
        self.path = str(path)


class UnsupportedHashFuncError(HashError):
    """Raised when a hash function has no computation, including the none sentinel."""

    def __init__(self, hash_func: object) -> None:
        super().__init__(f"hash function {hash_func!r} is not supported")
        self.hash_func = hash_func


__all__ = ["HashError", "OpenError", "ReadError", "UnsupportedHashFuncError"]
