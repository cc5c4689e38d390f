from __future__ import annotations

import io
from pathlib import Path
from typing import Callable, Iterable

EMPTY_SHA256 = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
ABC_SHA256 = "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"


def make_block(root: Path, *, chunks: Iterable[bytes] = (b"chunk-one", b"chunk-two"), index: bytes = b"index") -> Path:
    """Create a block directory with numbered chunk files, an index and a meta.json."""

    block_dir = root / "01HBLOCKULID"
    chunks_dir = block_dir / "chunks"
    chunks_dir.mkdir(parents=True, exist_ok=True)
    for number, payload in enumerate(chunks, 1):
        (chunks_dir / f"{number:06d}").write_bytes(payload)
    (block_dir / "index").write_bytes(index)
    (block_dir / "meta.json").write_text("{}", encoding="utf-8")
    return block_dir


class HandleProxy:
    """File proxy that can fail on read or close, delegating everything else."""

    def __init__(self, inner: io.BufferedReader, *, fail_read_after: int | None = None, fail_close: bool = False) -> None:
        self._inner = inner
        self._reads = 0
        self._fail_read_after = fail_read_after
        self._fail_close = fail_close

    def fileno(self) -> int:
        return self._inner.fileno()

    def read(self, size: int = -1) -> bytes:
        if self._fail_read_after is not None and self._reads >= self._fail_read_after:
            raise OSError(5, "Input/output error")
        self._reads += 1
        return self._inner.read(size)

    def close(self) -> None:
        self._inner.close()
        if self._fail_close:
            raise OSError(9, "Bad file descriptor")

    @property
    def closed(self) -> bool:
        return self._inner.closed


class TrackingOpen:
    """Replacement for ``open`` recording every handle it hands out."""

    def __init__(self, wrap: Callable[[io.BufferedReader], object] | None = None) -> None:
        self.handles: list[object] = []
        self._wrap = wrap

    def __call__(self, file, mode: str = "r", *args, **kwargs):
        handle = io.open(file, mode, *args, **kwargs)
        if self._wrap is not None:
            handle = self._wrap(handle)
        self.handles.append(handle)
        return handle

    def all_closed(self) -> bool:
        return all(h.closed for h in self.handles)
