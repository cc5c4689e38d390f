"""Per-file statistics of a block directory and their verification."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from blockdigest.metadata.errors import HashError, OpenError
from blockdigest.metadata.hash import HashFunc, ObjectHash, calculate_hash, equal, is_computable

CHUNKS_DIRNAME = "chunks"
INDEX_FILENAME = "index"
META_FILENAME = "meta.json"


class File(BaseModel):
    """One file of a block as recorded in its metadata."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    rel_path: str = Field(alias="relPath")
    size_bytes: Optional[int] = Field(default=None, alias="sizeBytes", ge=0)
    hash: Optional[ObjectHash] = None

    def to_dict(self) -> dict[str, object]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class FileMismatch(BaseModel):
    """A recorded file whose current content no longer matches its metadata."""

    rel_path: str
    reason: str
    expected: Optional[str] = None
    actual: Optional[str] = None


def gather_file_stats(
    block_dir: Path,
    hash_func: HashFunc,
    logger: logging.Logger,
    *,
    chunk_size: Optional[int] = None,
) -> list[File]:
    """Collect size and (optionally) hash of every chunk file, the index and meta.json.

    meta.json is listed without size or hash since it is rewritten afterwards.
    """

    block_dir = Path(block_dir)
    chunks_dir = block_dir / CHUNKS_DIRNAME
    if not chunks_dir.is_dir():
        raise OpenError(chunks_dir, "reading chunks directory")

    candidates = sorted(p for p in chunks_dir.iterdir() if p.is_file())
    index_path = block_dir / INDEX_FILENAME
    if not index_path.is_file():
        raise OpenError(index_path, "reading index")
    candidates.append(index_path)

    result: list[File] = []
    for path in candidates:
        rel_path = path.relative_to(block_dir).as_posix()
        try:
            size = path.stat().st_size
        except OSError as exc:
            raise OpenError(path, "stat") from exc

        object_hash: ObjectHash | None = None
        if hash_func != HashFunc.NONE:
            object_hash = _calculate(path, hash_func, logger, chunk_size)
        result.append(File(rel_path=rel_path, size_bytes=size, hash=object_hash))
        logger.debug("Gathered %s size=%s", rel_path, size)

    result.append(File(rel_path=META_FILENAME))
    result.sort(key=lambda f: f.rel_path)
    return result


def verify_files(
    block_dir: Path,
    files: Iterable[File],
    logger: logging.Logger,
    *,
    fail_fast: bool = False,
    chunk_size: Optional[int] = None,
) -> list[FileMismatch]:
    """Recompute the hashes recorded in `files` and report every mismatch.

    Files without a hash, or with a ``HashFunc.NONE`` hash, are skipped. A
    recorded file that can no longer be opened or read counts as a mismatch.
    """

    block_dir = Path(block_dir)
    root = block_dir.resolve()
    mismatches: list[FileMismatch] = []
    for entry in files:
        if entry.hash is None or not is_computable(entry.hash.func):
            logger.debug("Skipping %s, no hash recorded", entry.rel_path)
            continue

        path = (block_dir / entry.rel_path).resolve()
        if path.is_relative_to(root):
            mismatch = _verify_one(path, entry, entry.hash, logger, chunk_size)
        else:
            mismatch = FileMismatch(rel_path=entry.rel_path, reason="path outside block", expected=entry.hash.value)
        if mismatch is None:
            logger.info("Verified %s", entry.rel_path)
            continue

        logger.warning("Mismatch for %s: %s", entry.rel_path, mismatch.reason)
        mismatches.append(mismatch)
        if fail_fast:
            break
    return mismatches


def _verify_one(
    path: Path,
    entry: File,
    expected: ObjectHash,
    logger: logging.Logger,
    chunk_size: Optional[int],
) -> FileMismatch | None:
    try:
        actual = _calculate(path, expected.func, logger, chunk_size)
    except HashError as exc:
        return FileMismatch(rel_path=entry.rel_path, reason=f"digest unavailable: {exc}", expected=expected.value)

    if not equal(expected, actual):
        return FileMismatch(
            rel_path=entry.rel_path,
            reason="hash mismatch",
            expected=expected.value,
            actual=actual.value,
        )

    if entry.size_bytes is not None:
        try:
            size = path.stat().st_size
        except OSError as exc:
            return FileMismatch(rel_path=entry.rel_path, reason=f"digest unavailable: {exc}")
        if size != entry.size_bytes:
            return FileMismatch(
                rel_path=entry.rel_path,
                reason="size mismatch",
                expected=str(entry.size_bytes),
                actual=str(size),
            )
    return None


def _calculate(
    path: Path, hash_func: HashFunc, logger: logging.Logger, chunk_size: Optional[int]
) -> ObjectHash:
    if chunk_size is None:
        return calculate_hash(path, hash_func, logger)
    return calculate_hash(path, hash_func, logger, chunk_size=chunk_size)


def read_files_document(path: Path) -> list[File]:
    """Load the ``files`` list of a metadata JSON document."""

    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(payload, dict) or not isinstance(payload.get("files"), list):
        raise ValueError(f"Expected a 'files' list in {path}.")
    return [File.model_validate(item) for item in payload["files"]]


def write_files_document(path: Path, files: Sequence[File]) -> Path:
    """Write `files` as a ``{"files": [...]}`` JSON document."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {"files": [f.to_dict() for f in files]}
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return path


__all__ = [
    "CHUNKS_DIRNAME",
    "File",
    "FileMismatch",
    "INDEX_FILENAME",
    "META_FILENAME",
    "gather_file_stats",
    "read_files_document",
    "verify_files",
    "write_files_document",
]
