"""Block metadata: object hashes and per-file statistics."""

from .errors import HashError, OpenError, ReadError, UnsupportedHashFuncError
from .files import File, FileMismatch, gather_file_stats, read_files_document, verify_files, write_files_document
from .hash import DEFAULT_CHUNK_SIZE, HashFunc, ObjectHash, calculate_hash, digest_size, equal, is_computable

__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "File",
    "FileMismatch",
    "HashError",
    "HashFunc",
    "ObjectHash",
    "OpenError",
    "ReadError",
    "UnsupportedHashFuncError",
    "calculate_hash",
    "digest_size",
    "equal",
    "gather_file_stats",
    "is_computable",
    "read_files_document",
    "verify_files",
    "write_files_document",
]
