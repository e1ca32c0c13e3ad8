"""
tests/test_main.py
------------------
Smoke tests for the command-line entry point.
"""

import io
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path

import main


class TestMain(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.store = str(Path(self._tmp.name) / "last_allocation.json")

    def tearDown(self):
        self._tmp.cleanup()

    def _run(self, *argv):
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = main.main(["--store", self.store, *argv])
        return code, out.getvalue(), err.getvalue()

    def test_compute_then_last(self):
        code, out, _ = self._run(
            "compute", "--risk", "High", "--horizon", "30", "--age", "18",
            "--goal", "wealth-growth", "--target", "100000000",
        )
        self.assertEqual(code, 0)
        self.assertIn("equities", out)
        self.assertIn("composite score", out)

        code, out, _ = self._run("last")
        self.assertEqual(code, 0)
        self.assertIn("Largest allocation: equities", out)

    def test_last_on_empty_store(self):
        code, _, err = self._run("last")
        self.assertEqual(code, 1)
        self.assertIn("Nothing stored yet", err)

    def test_invalid_profile_exit_code(self):
        code, _, err = self._run(
            "compute", "--risk", "High", "--horizon", "2", "--age", "30",
            "--goal", "wealth-growth", "--target", "50000",
        )
        self.assertEqual(code, 2)
        self.assertIn("InconsistentCombination", err)


if __name__ == "__main__":
    unittest.main()
