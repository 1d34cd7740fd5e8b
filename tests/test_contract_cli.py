from __future__ import annotations

import io
import json
import os
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path
from unittest.mock import patch

from daygrid import cli


def _events_file(td: str) -> str:
    doc = {
        "cfg": {"tz": "UTC"},
        "events": [
            {"id": "a", "title": "Standup", "start": "2024-01-10T09:00:00Z", "end": "2024-01-10T10:30:00Z"},
            {"id": "late", "title": "Late", "start": "2024-01-10T23:30:00Z", "end": "2024-01-11T00:15:00Z"},
            {"id": "r", "title": "Backwards", "start": "2024-01-10T10:00:00Z", "end": "2024-01-10T09:00:00Z"},
        ],
    }
    p = Path(td) / "events.json"
    p.write_text(json.dumps(doc), encoding="utf-8")
    return str(p)


def _run(argv: list[str]) -> tuple[str, str]:
    out, err = io.StringIO(), io.StringIO()
    with patch.dict(os.environ, {"DAYGRID_TZ": "UTC"}), redirect_stdout(out), redirect_stderr(err):
        cli.main(argv)
    return out.getvalue(), err.getvalue()


class TestCliContract(unittest.TestCase):
    def test_layout_to_stdout(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            out, err = _run(["--events", _events_file(td), "--start", "2024-01-10", "--days", "2", "--tz", "UTC"])

        doc = json.loads(out)
        self.assertEqual(doc["cfg"]["hour_height"], 64)
        self.assertEqual(doc["column_height"], 24 * 64)
        self.assertEqual([d["day"] for d in doc["days"]], ["2024-01-10", "2024-01-11"])

        blocks = {b["id"]: b for b in doc["days"][0]["blocks"]}
        self.assertEqual((blocks["a"]["top"], blocks["a"]["height"]), (576, 96))
        self.assertEqual((blocks["late"]["top"], blocks["late"]["height"]), (1504, 32))
        self.assertNotIn("r", blocks)

        next_day = {b["id"]: b for b in doc["days"][1]["blocks"]}
        self.assertEqual((next_day["late"]["top"], next_day["late"]["height"]), (0, 16))

        self.assertIn("[daygrid] WARN: skipping event 'r'", err)

    def test_hour_height_flag_scales_output(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            out, _err = _run(
                ["--events", _events_file(td), "--start", "2024-01-10", "--tz", "UTC", "--hour-height", "128"]
            )
        blocks = {b["id"]: b for b in json.loads(out)["days"][0]["blocks"]}
        self.assertEqual((blocks["a"]["top"], blocks["a"]["height"]), (1152, 192))

    def test_flags_win_over_events_file_cfg(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            p = Path(td) / "events.json"
            doc = json.loads(Path(_events_file(td)).read_text(encoding="utf-8"))
            doc["cfg"] = {"tz": "+02:00", "hour_height": 64}
            p.write_text(json.dumps(doc), encoding="utf-8")
            out, _err = _run(["--events", str(p), "--start", "2024-01-10", "--hour-height", "128", "--tz", "UTC"])
        doc = json.loads(out)
        self.assertEqual(doc["cfg"]["hour_height"], 128)
        self.assertEqual(doc["cfg"]["tz"], "UTC")
        blocks = {b["id"]: b for b in doc["days"][0]["blocks"]}
        self.assertEqual((blocks["a"]["top"], blocks["a"]["height"]), (1152, 192))

    def test_events_file_cfg_applies_without_flags(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            p = Path(td) / "events.json"
            doc = json.loads(Path(_events_file(td)).read_text(encoding="utf-8"))
            doc["cfg"] = {"tz": "+02:00", "hour_height": 32}
            p.write_text(json.dumps(doc), encoding="utf-8")
            out, _err = _run(["--events", str(p), "--start", "2024-01-10"])
        doc = json.loads(out)
        self.assertEqual(doc["cfg"]["tz"], "+02:00")
        blocks = {b["id"]: b for b in doc["days"][0]["blocks"]}
        # 09:00Z is 11:00 at +02:00.
        self.assertEqual((blocks["a"]["top"], blocks["a"]["height"]), (11 * 32, 48))

    def test_layout_carries_scroll_and_now_line(self) -> None:
        out, _err = _run(["--start", "2000-01-03", "--days", "7", "--tz", "UTC"])
        doc = json.loads(out)
        self.assertEqual(doc["scroll_top"], 7 * 64)
        self.assertEqual(doc["now_line"]["left"], "72px")
        self.assertGreaterEqual(doc["now_line"]["top"], 0)

    def test_pointer_conversion(self) -> None:
        out, _err = _run(["--start", "2024-01-10", "--tz", "UTC", "--pointer-y", "600"])
        doc = json.loads(out)
        self.assertEqual(doc["minutes"], 9 * 60 + 30)
        self.assertEqual(doc["time"], "2024-01-10T09:30:00+00:00")

    def test_writes_out_file(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            target = Path(td) / "nested" / "layout.json"
            out, _err = _run(["--start", "2024-01-10", "--tz", "UTC", "--out", str(target)])
            self.assertTrue(target.exists())
            self.assertEqual(out.strip(), str(target.resolve()))
            self.assertEqual(json.loads(target.read_text(encoding="utf-8"))["days"][0]["blocks"], [])

    def test_invalid_tz_reports_user_error(self) -> None:
        with self.assertRaises(SystemExit) as ctx:
            cli.main(["--tz", "No/Such_Zone"])
        self.assertIn("Invalid --tz value", str(ctx.exception))

    def test_invalid_hour_height_reports_user_error(self) -> None:
        with self.assertRaises(SystemExit) as ctx:
            cli.main(["--tz", "UTC", "--hour-height", "0"])
        self.assertIn("Invalid grid configuration", str(ctx.exception))

    def test_bad_events_file_reports_user_error(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            p = Path(td) / "bad.json"
            p.write_text(json.dumps({"events": [{"id": ""}]}), encoding="utf-8")
            with self.assertRaises(SystemExit) as ctx:
                cli.main(["--tz", "UTC", "--start", "2024-01-10", "--events", str(p)])
        self.assertIn("Failed to load events", str(ctx.exception))


if __name__ == "__main__":
    unittest.main(verbosity=2)
