"""Content-integrity hashes for files of block-based storage."""
