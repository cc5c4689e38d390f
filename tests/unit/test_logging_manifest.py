from __future__ import annotations

import json
import logging
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory

from blockdigest.util.closing import close_with_log_on_err
from blockdigest.util.logging import LOGGER_NAME, configure_logging
from blockdigest.util.manifest import write_manifest


class _Resource:
    def __init__(self, fail: bool, error: Exception | None = None) -> None:
        self.fail = fail
        self.error = error or OSError("disk went away")
        self.closed = False

    def close(self) -> None:
        self.closed = True
        if self.fail:
            raise self.error


class LoggingManifestTests(unittest.TestCase):
    def tearDown(self) -> None:
        logger = logging.getLogger(LOGGER_NAME)
        for handler in list(logger.handlers):
            if isinstance(handler, logging.FileHandler):
                logger.removeHandler(handler)
                handler.close()

    def test_configure_logging_creates_handlers(self) -> None:
        with TemporaryDirectory() as tmpdir:
            log_path = Path(tmpdir) / "logs" / "blockdigest.log"
            logger = configure_logging(log_path=log_path)
            configure_logging(log_path=log_path)
            logging.getLogger(f"{LOGGER_NAME}.verify").info("hello")

            file_handlers = [h for h in logger.handlers if isinstance(h, logging.FileHandler)]
            for handler in file_handlers:
                handler.flush()
            contents = log_path.read_text(encoding="utf-8")

        self.assertEqual(len(file_handlers), 1)
        self.assertIn("hello", contents)
        self.assertIn("blockdigest.verify", contents)

    def test_write_manifest(self) -> None:
        with TemporaryDirectory() as tmpdir:
            dest = write_manifest("verify", {"status": "ok", "count": 1}, root=Path(tmpdir))

            self.assertTrue(dest.exists())
            payload = json.loads(dest.read_text(encoding="utf-8"))

        self.assertEqual(payload["step"], "verify")
        self.assertEqual(payload["status"], "ok")
        self.assertEqual(payload["count"], 1)
        self.assertIn("finished_at", payload)
        self.assertTrue(dest.name.startswith("verify_"))
        self.assertEqual(dest.parent.name, "run_manifests")


class CloseWithLogOnErrTests(unittest.TestCase):
    def test_closes_quietly(self) -> None:
        logger = logging.getLogger("blockdigest.tests.closing")
        resource = _Resource(fail=False)
        with self.assertNoLogs(logger, level="WARNING"):
            with close_with_log_on_err(logger, resource, "closing %s", "thing") as res:
                self.assertIs(res, resource)
        self.assertTrue(resource.closed)

    def test_logs_close_error_once(self) -> None:
        logger = logging.getLogger("blockdigest.tests.closing")
        resource = _Resource(fail=True)
        with self.assertLogs(logger, level="WARNING") as logs:
            with close_with_log_on_err(logger, resource, "closing %s", "thing"):
                pass

        self.assertEqual(len(logs.records), 1)
        self.assertIn("closing thing: disk went away", logs.output[0])

    def test_primary_exception_survives(self) -> None:
        logger = logging.getLogger("blockdigest.tests.closing")
        resource = _Resource(fail=True)
        with self.assertLogs(logger, level="WARNING"):
            with self.assertRaises(KeyError):
                with close_with_log_on_err(logger, resource, "closing %s", "thing"):
                    raise KeyError("primary")
        self.assertTrue(resource.closed)

    def test_non_os_close_error_is_logged(self) -> None:
        logger = logging.getLogger("blockdigest.tests.closing")
        resource = _Resource(fail=True, error=ValueError("already detached"))
        with self.assertLogs(logger, level="WARNING") as logs:
            with self.assertRaises(KeyError):
                with close_with_log_on_err(logger, resource, "closing %s", "thing"):
                    raise KeyError("primary")

        self.assertIn("closing thing: already detached", logs.output[0])

        with self.assertLogs(logger, level="WARNING"):
            with close_with_log_on_err(logger, _Resource(fail=True, error=ValueError("x")), "closing %s", "other") as res:
                pass
        self.assertTrue(res.closed)


if __name__ == "__main__":
    unittest.main()
