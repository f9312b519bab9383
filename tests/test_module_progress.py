"""
tests/test_module_progress.py

Unit tests for execution/progress/module_progress.py.

Covers progress seeding, host-over-local precedence, the 25-point entry
step with its 100% cap, locked-module no-ops and the all-completed gate.
"""

import sys
import unittest
from pathlib import Path

# ---------------------------------------------------------------------------
# PYTHONPATH bootstrap
# ---------------------------------------------------------------------------
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from execution.course.course_payload import CoursePayload, ModuleInfo  # noqa: E402
from execution.payload.decode_boundary import decode_boundary          # noqa: E402
from execution.progress.module_progress import (                       # noqa: E402
    all_modules_completed,
    displayed_progress,
    enter_module,
    initial_progress,
    seed_progress,
)

NOW = 1_700_000_000


class TestSeedProgress(unittest.TestCase):

    def test_initial_progress_all_zero(self):
        self.assertEqual(initial_progress(), {str(i): 0 for i in range(1, 9)})

    def test_seed_overwrites_only_host_values(self):
        payload = decode_boundary({"m1e": "1", "m1p": "80", "m2e": "1"}).payload
        progress = seed_progress(payload)
        self.assertEqual(progress["1"], 80)
        self.assertEqual(progress["2"], 0)
        self.assertEqual(len(progress), 8)


class TestEnterModule(unittest.TestCase):

    def test_host_progress_never_changes(self):
        """Host m3p=40: repeated entries keep the displayed progress at 40."""
        outcome = decode_boundary({"m3e": "1", "m3o": "1", "m3p": "40"})
        payload, progress = outcome.payload, outcome.progress
        for _ in range(5):
            progress = enter_module(3, payload, progress, NOW)
            self.assertEqual(displayed_progress(3, payload, progress), 40)

    def test_local_progress_steps_by_25_and_caps(self):
        """No host value: entries yield 25, 50, 75, 100 and never exceed 100."""
        outcome = decode_boundary({"m4e": "1"})
        payload, progress = outcome.payload, outcome.progress
        seen = []
        for _ in range(6):
            progress = enter_module(4, payload, progress, NOW)
            seen.append(displayed_progress(4, payload, progress))
        self.assertEqual(seen, [25, 50, 75, 100, 100, 100])

    def test_locked_module_is_ignored(self):
        outcome = decode_boundary({"m4e": "1", "m4ts": str(NOW + 60)})
        progress = enter_module(4, outcome.payload, outcome.progress, NOW)
        self.assertEqual(progress, outcome.progress)

    def test_absent_module_is_ignored(self):
        payload = CoursePayload()
        progress = enter_module(2, payload, initial_progress(), NOW)
        self.assertEqual(progress, initial_progress())

    def test_input_map_is_not_mutated(self):
        outcome = decode_boundary({"m1e": "1"})
        before = dict(outcome.progress)
        enter_module(1, outcome.payload, outcome.progress, NOW)
        self.assertEqual(outcome.progress, before)

    def test_invalid_index_raises(self):
        with self.assertRaises(ValueError):
            enter_module(0, CoursePayload(), initial_progress(), NOW)


class TestAllModulesCompleted(unittest.TestCase):

    def test_all_at_100_completes(self):
        progress = {str(i): 100 for i in range(1, 9)}
        self.assertTrue(all_modules_completed(None, progress))

    def test_any_below_100_blocks(self):
        for key in (str(i) for i in range(1, 9)):
            with self.subTest(module=key):
                progress = {str(i): 100 for i in range(1, 9)}
                progress[key] = 75
                self.assertFalse(all_modules_completed(None, progress))

    def test_host_progress_counts(self):
        """Host-supplied values take part in the gate."""
        slots = tuple(ModuleInfo(progress=100) for _ in range(8))
        payload = CoursePayload(modules=slots)
        self.assertTrue(all_modules_completed(payload, initial_progress()))

        slots = slots[:7] + (ModuleInfo(progress=99),)
        self.assertFalse(all_modules_completed(CoursePayload(modules=slots), seed_progress(payload)))


if __name__ == "__main__":
    unittest.main()
