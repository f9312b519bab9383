"""
tests/test_decode_boundary.py

Unit tests for execution/payload/decode_boundary.py.

Four test groups:
  1. Flat-field decoding: slots, numeric fallbacks, clamps.
  2. Whole-payload decoding: direct and percent-decoded JSON.
  3. Strategy fallthrough: malformed "course" values fall back to flat keys.
  4. User hydration: userid / uname identity hints.

No database access. No file I/O. No network calls.
"""

import json
import sys
import unittest
from pathlib import Path
from urllib.parse import quote

# ---------------------------------------------------------------------------
# PYTHONPATH bootstrap
# ---------------------------------------------------------------------------
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from execution.course.course_payload import CoursePayload, User  # noqa: E402
from execution.payload.decode_boundary import (  # noqa: E402
    FLAT_FIELDS,
    PERCENT_DECODED_PAYLOAD,
    WHOLE_PAYLOAD,
    decode_boundary,
    decode_user,
)
from execution.policy.unlock_policy import is_module_unlocked  # noqa: E402

LOGGER_NAME = "execution.payload.decode_boundary"
NOW = 1_700_000_000


# ---------------------------------------------------------------------------
# 1. Flat-field decoding
# ---------------------------------------------------------------------------

class TestFlatFieldDecoding(unittest.TestCase):

    def test_missing_exists_flag_yields_empty_slot_for_every_module(self):
        """Every slot without m{i}e="1" is None and locked."""
        outcome = decode_boundary({"cid": "12", "cn": "Curso", "m1e": "0", "m2e": "yes"})
        self.assertEqual(outcome.source, FLAT_FIELDS)
        self.assertEqual(len(outcome.payload.modules), 8)
        for index in range(1, 9):
            with self.subTest(index=index):
                self.assertIsNone(outcome.payload.modules[index - 1])
                self.assertFalse(is_module_unlocked(index, outcome.payload, NOW))

    def test_course_level_fields(self):
        """cid, cn, csn and fo map onto the course record."""
        outcome = decode_boundary({"cid": "42", "cn": "IA", "csn": "IA-01", "fo": "3"})
        payload = outcome.payload
        self.assertEqual(payload.id, 42)
        self.assertEqual(payload.name, "IA")
        self.assertEqual(payload.shortname, "IA-01")
        self.assertEqual(payload.first_open, 3)

    def test_empty_input_yields_default_payload(self):
        """No keys at all still produces a usable, all-empty payload."""
        outcome = decode_boundary({})
        self.assertEqual(outcome.payload, CoursePayload())
        self.assertEqual(outcome.progress, {str(i): 0 for i in range(1, 9)})

    def test_first_open_out_of_range_is_none(self):
        for raw in ("0", "9", "abc", ""):
            with self.subTest(fo=raw):
                self.assertIsNone(decode_boundary({"fo": raw}).payload.first_open)

    def test_non_numeric_course_id_is_zero(self):
        self.assertEqual(decode_boundary({"cid": "abc"}).payload.id, 0)

    def test_all_module_fields(self):
        """An existing slot reads every per-module key."""
        outcome = decode_boundary({
            "m2e": "1", "m2o": "1", "m2n": "Governança", "m2s": "4", "m2i": "91",
            "m2u": "https://moodle.example/course/view.php?id=7#section-4",
            "m2ts": "1000", "m2te": "2000", "m2p": "30",
        })
        module = outcome.payload.module(2)
        self.assertTrue(module.exists)
        self.assertIs(module.open, True)
        self.assertEqual(module.name, "Governança")
        self.assertEqual(module.section_number, 4)
        self.assertEqual(module.section_id, 91)
        self.assertEqual(module.url, "https://moodle.example/course/view.php?id=7#section-4")
        self.assertEqual(module.tstart, 1000)
        self.assertEqual(module.tend, 2000)
        self.assertEqual(module.progress, 30)
        self.assertIsNone(module.available)
        self.assertIsNone(module.available_info)

    def test_open_flag_tri_state(self):
        """m{i}o absent -> None, "1" -> True, anything else -> False."""
        outcome = decode_boundary({
            "m1e": "1",
            "m2e": "1", "m2o": "1",
            "m3e": "1", "m3o": "0",
            "m4e": "1", "m4o": "true",
        })
        self.assertIsNone(outcome.payload.module(1).open)
        self.assertIs(outcome.payload.module(2).open, True)
        self.assertIs(outcome.payload.module(3).open, False)
        self.assertIs(outcome.payload.module(4).open, False)

    def test_malformed_window_start_is_absent(self):
        """m2ts="not-a-number" decodes to tstart=None without failing."""
        outcome = decode_boundary({"m2e": "1", "m2ts": "not-a-number", "m2te": "2000"})
        module = outcome.payload.module(2)
        self.assertIsNone(module.tstart)
        self.assertEqual(module.tend, 2000)

    def test_malformed_fields_do_not_affect_siblings(self):
        outcome = decode_boundary({
            "m1e": "1", "m1s": "x", "m1i": "1.5", "m1p": "lots", "m1n": "Ok",
        })
        module = outcome.payload.module(1)
        self.assertIsNone(module.section_number)
        self.assertIsNone(module.section_id)
        self.assertIsNone(module.progress)
        self.assertEqual(module.name, "Ok")

    def test_blank_name_and_url_are_absent(self):
        outcome = decode_boundary({"m5e": "1", "m5n": "   ", "m5u": ""})
        module = outcome.payload.module(5)
        self.assertIsNone(module.name)
        self.assertIsNone(module.url)

    def test_progress_is_clamped_and_seeded(self):
        """Host progress is clamped to 0..100 and seeds the progress map."""
        outcome = decode_boundary({
            "m1e": "1", "m1p": "150",
            "m2e": "1", "m2p": "-5",
            "m3e": "1", "m3p": "42.6",
            "m4e": "1",
        })
        self.assertEqual(outcome.payload.module(1).progress, 100)
        self.assertEqual(outcome.payload.module(2).progress, 0)
        self.assertEqual(outcome.payload.module(3).progress, 43)
        self.assertIsNone(outcome.payload.module(4).progress)
        self.assertEqual(
            outcome.progress,
            {"1": 100, "2": 0, "3": 43, "4": 0, "5": 0, "6": 0, "7": 0, "8": 0},
        )

    def test_slot_without_exists_ignores_other_keys(self):
        outcome = decode_boundary({"m6o": "1", "m6p": "80", "m6u": "https://x"})
        self.assertIsNone(outcome.payload.module(6))
        self.assertEqual(outcome.progress["6"], 0)


# ---------------------------------------------------------------------------
# 2. Whole-payload decoding
# ---------------------------------------------------------------------------

def _course_json() -> dict:
    return {
        "id": 7,
        "name": "Cultura de IA",
        "shortname": "CIA",
        "modules": {
            "modulo1": {
                "exists": True, "sectionnum": 1, "sectionid": 11, "name": "Fundamentos",
                "open": True, "available": None, "availableinfo": None,
                "url": "https://moodle.example/m1", "tstart": None, "tend": None,
                "progress": 60,
            },
            "modulo2": {
                "exists": True, "sectionnum": 2, "sectionid": 12, "name": None,
                "open": False, "available": True, "availableinfo": "scheduled",
                "url": None, "tstart": 1000, "tend": 2000,
            },
            "modulo3": {"exists": False},
            "modulo4": None,
        },
        "firstopen": "modulo1",
    }


class TestWholePayloadDecoding(unittest.TestCase):

    def test_direct_json(self):
        outcome = decode_boundary({"course": json.dumps(_course_json())})
        self.assertEqual(outcome.source, WHOLE_PAYLOAD)
        payload = outcome.payload
        self.assertEqual(payload.id, 7)
        self.assertEqual(payload.name, "Cultura de IA")
        self.assertEqual(payload.shortname, "CIA")
        self.assertEqual(payload.first_open, 1)
        self.assertEqual(payload.module(1).name, "Fundamentos")
        self.assertEqual(payload.module(2).available_info, "scheduled")
        self.assertEqual(payload.module(2).tstart, 1000)
        self.assertIsNone(payload.module(3))
        self.assertIsNone(payload.module(4))
        self.assertIsNone(payload.modules[7])

    def test_json_progress_seeds_map(self):
        outcome = decode_boundary({"course": json.dumps(_course_json())})
        self.assertEqual(outcome.progress["1"], 60)
        self.assertEqual(outcome.progress["2"], 0)

    def test_percent_encoded_json(self):
        """A doubly-encoded legacy value is decoded by the second strategy."""
        encoded = quote(json.dumps(_course_json()), safe="")
        outcome = decode_boundary({"course": encoded})
        self.assertEqual(outcome.source, PERCENT_DECODED_PAYLOAD)
        self.assertEqual(outcome.payload.id, 7)

    def test_first_success_wins_without_merging(self):
        """Flat keys are ignored once the JSON payload decodes."""
        outcome = decode_boundary({
            "course": json.dumps(_course_json()),
            "cid": "99", "m5e": "1",
        })
        self.assertEqual(outcome.payload.id, 7)
        self.assertIsNone(outcome.payload.module(5))

    def test_legacy_shape_without_window_fields(self):
        """Modules without url/window/availability keys decode with those absent."""
        raw = {"id": 1, "name": "C", "shortname": "c", "modules": {
            "modulo1": {"exists": True, "sectionnum": 1, "sectionid": 2,
                        "name": "M", "open": True},
        }}
        module = decode_boundary({"course": json.dumps(raw)}).payload.module(1)
        self.assertIsNone(module.url)
        self.assertIsNone(module.tstart)
        self.assertIsNone(module.tend)
        self.assertIsNone(module.available)

    def test_lenient_json_scalars(self):
        """Numeric strings are accepted; junk becomes absent."""
        raw = {"id": "5", "modules": {
            "modulo1": {"exists": 1, "tstart": "1000", "tend": "soon", "progress": 250},
        }}
        payload = decode_boundary({"course": json.dumps(raw)}).payload
        self.assertEqual(payload.id, 5)
        self.assertEqual(payload.name, "")
        module = payload.module(1)
        self.assertEqual(module.tstart, 1000)
        self.assertIsNone(module.tend)
        self.assertEqual(module.progress, 100)


# ---------------------------------------------------------------------------
# 3. Strategy fallthrough
# ---------------------------------------------------------------------------

class TestStrategyFallthrough(unittest.TestCase):

    def test_malformed_course_falls_back_to_flat_with_warning(self):
        with self.assertLogs(LOGGER_NAME, level="WARNING") as logs:
            outcome = decode_boundary({"course": "{not json", "cid": "8", "m1e": "1"})
        self.assertEqual(outcome.source, FLAT_FIELDS)
        self.assertEqual(outcome.payload.id, 8)
        self.assertIsNotNone(outcome.payload.module(1))
        self.assertIn("course", logs.output[0])

    def test_non_object_json_falls_back_to_flat(self):
        with self.assertLogs(LOGGER_NAME, level="WARNING"):
            outcome = decode_boundary({"course": "[1, 2, 3]"})
        self.assertEqual(outcome.source, FLAT_FIELDS)

    def test_no_warning_without_course_key(self):
        with self.assertNoLogs(LOGGER_NAME, level="WARNING"):
            outcome = decode_boundary({"cid": "1"})
        self.assertEqual(outcome.source, FLAT_FIELDS)

    def test_empty_course_value_is_ignored(self):
        with self.assertNoLogs(LOGGER_NAME, level="WARNING"):
            outcome = decode_boundary({"course": "", "cid": "3"})
        self.assertEqual(outcome.payload.id, 3)

    def test_deeply_nested_course_falls_back_to_flat(self):
        """JSON nested past the parser's recursion limit is a failed decode, not a crash."""
        with self.assertLogs(LOGGER_NAME, level="WARNING"):
            outcome = decode_boundary({"course": "[" * 5000, "cid": "8"})
        self.assertEqual(outcome.source, FLAT_FIELDS)
        self.assertEqual(outcome.payload.id, 8)

    def test_deeply_nested_module_value_falls_back_to_flat(self):
        course = '{"id": 1, "modules": {"modulo1": ' + "[" * 5000
        with self.assertLogs(LOGGER_NAME, level="WARNING"):
            outcome = decode_boundary({"course": course, "cid": "4"})
        self.assertEqual(outcome.source, FLAT_FIELDS)
        self.assertEqual(outcome.payload.id, 4)


# ---------------------------------------------------------------------------
# 4. User hydration
# ---------------------------------------------------------------------------

class TestDecodeUser(unittest.TestCase):

    def test_no_hints_keeps_anonymous_user(self):
        self.assertEqual(decode_user({}), User())
        self.assertFalse(decode_user({}).is_logged_in)

    def test_userid_only(self):
        user = decode_user({"userid": "u-1"})
        self.assertTrue(user.is_logged_in)
        self.assertEqual(user.id, "u-1")
        self.assertEqual(user.name, User().name)

    def test_hints_override_current(self):
        current = User(name="Ana", is_logged_in=True, id="a")
        user = decode_user({"uname": "Bia"}, current)
        self.assertEqual(user.name, "Bia")
        self.assertEqual(user.id, "a")


if __name__ == "__main__":
    unittest.main()
