"""Tests for loading, fixing and writing save files."""

from __future__ import annotations

import asyncio
import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from save_fixer.common.constants import RAIL_DRONE_CONFIG_PATH
from save_fixer.common.types import SaveFile
from save_fixer.core.container import pack, unpack
from save_fixer.save_file import (
    load_save_file,
    load_save_file_async,
    process_save_file,
    read_save_bytes,
    write_save_file,
    write_save_file_async,
)
from save_fixer.utils import SaveFileError, TooSmallError

SAMPLE_JSON = '{"itemData":{"Mass":{"entities":{"(ID=1)":{"name":"entity"}}}}}'

DRONE_SAVE_JSON = json.dumps(
    {
        "itemData": {
            "Mass": {
                "entities": {
                    "(ID=200)": {"spawnData": {"entityConfigDataPath": "/Game/Chimera/Other/Entity.Entity"}},
                    "(ID=100)": {
                        "spawnData": {"entityConfigDataPath": RAIL_DRONE_CONFIG_PATH},
                        "fragmentValues": [
                            "/Script/Chimera.CrLogisticsAgentFragment "
                            "CurrentMovementStart=(ID=1) CurrentMovementTarget=(ID=999999)"
                        ],
                    },
                }
            }
        }
    },
    separators=(",", ":"),
)


class TestSaveFileIO(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.base = Path(self.temp_dir.name)

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def test_save_and_load_round_trip(self) -> None:
        path = self.base / "sample.sav"
        written = write_save_file(SaveFile(SAMPLE_JSON, path), compresslevel=9)
        loaded = load_save_file(path)

        self.assertEqual(written, path)
        self.assertEqual(loaded.json_content, SAMPLE_JSON)
        self.assertEqual(loaded.file_path, path)
        self.assertFalse(path.with_suffix(".sav.tmp").exists())

    def test_load_missing_file(self) -> None:
        with self.assertRaises(SaveFileError):
            load_save_file(self.base / "missing.sav")

    def test_unreadable_file_raises_save_file_error(self) -> None:
        path = self.base / "locked.sav"
        path.write_bytes(pack(SAMPLE_JSON))
        with patch("pathlib.Path.read_bytes", side_effect=PermissionError("denied")):
            with self.assertRaises(SaveFileError):
                load_save_file(path)
            with self.assertRaises(SaveFileError):
                read_save_bytes(path)

    def test_load_too_small(self) -> None:
        path = self.base / "bad.sav"
        path.write_bytes(bytes([1, 2, 3]))
        with self.assertRaises(TooSmallError):
            load_save_file(path)

    def test_write_without_path(self) -> None:
        with self.assertRaises(SaveFileError):
            write_save_file(SaveFile(SAMPLE_JSON), compresslevel=9)

    def test_unwritable_destination(self) -> None:
        blocker = self.base / "blocker"
        blocker.write_bytes(b"")
        target = blocker / "out.sav"

        with self.assertRaises(SaveFileError):
            write_save_file(SaveFile(SAMPLE_JSON), target, compresslevel=9)
        with self.assertRaises(SaveFileError):
            asyncio.run(write_save_file_async(SaveFile(SAMPLE_JSON), target, compresslevel=9))
        self.assertEqual(list(self.base.iterdir()), [blocker])

    def test_async_round_trip(self) -> None:
        path = self.base / "nested" / "async.sav"
        asyncio.run(write_save_file_async(SaveFile(SAMPLE_JSON), path, compresslevel=6))
        loaded = asyncio.run(load_save_file_async(path))

        self.assertEqual(loaded.json_content, SAMPLE_JSON)
        self.assertEqual(unpack(path.read_bytes()), SAMPLE_JSON)
        self.assertEqual(list(path.parent.iterdir()), [path])


class TestProcessSaveFile(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.base = Path(self.temp_dir.name)
        self.source = self.base / "drones.sav"
        self.source.write_bytes(pack(DRONE_SAVE_JSON))

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def test_fix_to_output_path(self) -> None:
        output = self.base / "fixed.sav"
        report = asyncio.run(
            process_save_file(self.source, policy="selective", output_path=output)
        )

        self.assertTrue(report.changed)
        self.assertEqual(report.removed_keys, ["(ID=100)"])
        entities = json.loads(unpack(output.read_bytes()))["itemData"]["Mass"]["entities"]
        self.assertEqual(list(entities), ["(ID=200)"])
        self.assertEqual(unpack(self.source.read_bytes()), DRONE_SAVE_JSON)

    def test_dry_run_writes_nothing(self) -> None:
        original = self.source.read_bytes()
        output = self.base / "fixed.sav"

        report = asyncio.run(
            process_save_file(
                self.source, policy="remove-all", output_path=output, dry_run=True
            )
        )

        self.assertTrue(report.changed)
        self.assertFalse(output.exists())
        self.assertEqual(self.source.read_bytes(), original)

    def test_unchanged_save_is_not_rewritten(self) -> None:
        clean = self.base / "clean.sav"
        clean.write_bytes(pack(SAMPLE_JSON))
        output = self.base / "fixed.sav"

        report = asyncio.run(process_save_file(clean, policy="selective", output_path=output))

        self.assertFalse(report.changed)
        self.assertFalse(output.exists())


if __name__ == "__main__":
    unittest.main()
