"""Scoped release of resources whose close errors are logged, not raised."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Protocol, TypeVar


class SupportsClose(Protocol):
    def close(self) -> None: ...


T = TypeVar("T", bound=SupportsClose)


@contextmanager
def close_with_log_on_err(logger: logging.Logger, resource: T, msg: str, *args: object) -> Iterator[T]:
    """Yield `resource` and close it on exit, logging a close failure as a warning.

    The close error never replaces the result or exception of the wrapped block.
    """

    try:
        yield resource
    finally:
        try:
            resource.close()
        except Exception as err:  # noqa: BLE001 - close errors are reported, never raised
            logger.warning("detected close error: " + msg + ": %s", *args, err, exc_info=err)


__all__ = ["close_with_log_on_err", "SupportsClose"]
