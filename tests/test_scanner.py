"""Traversal and metadata collection behavior.

Covers which entries are counted and recorded, how failures are skipped,
and the ordering applied before export.
"""

from __future__ import annotations

import os
import tempfile
import unittest
from datetime import timezone
from pathlib import Path
from types import SimpleNamespace
from unittest import mock

from filemeta import scanner
from filemeta.models import FileRecord, KIND_DIR, KIND_FILE, KIND_OTHER


def _touch(path: Path, size: int = 0, mtime: float | None = None) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"x" * size)
    if mtime is not None:
        os.utime(path, (mtime, mtime))
    return path


def _can_symlink(tmp: str) -> bool:
    try:
        os.symlink(tmp, os.path.join(tmp, ".symlink-check"))
    except (OSError, NotImplementedError):
        return False
    os.unlink(os.path.join(tmp, ".symlink-check"))
    return True


class IterEntriesTests(unittest.TestCase):
    def test_walks_nested_directories_and_classifies_entries(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            _touch(root / "a.txt")
            _touch(root / "sub" / "b.txt")
            _touch(root / "sub" / "deeper" / "c.txt")

            entries = list(scanner.iter_entries(tmp))

            kinds = {os.path.relpath(e.path, tmp): e.kind for e in entries}
            self.assertEqual(kinds["a.txt"], KIND_FILE)
            self.assertEqual(kinds["sub"], KIND_DIR)
            self.assertEqual(kinds[os.path.join("sub", "b.txt")], KIND_FILE)
            self.assertEqual(kinds[os.path.join("sub", "deeper")], KIND_DIR)
            self.assertEqual(kinds[os.path.join("sub", "deeper", "c.txt")], KIND_FILE)
            self.assertEqual(len(entries), 5)

    def test_paths_are_root_joined_with_entry_names(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            _touch(Path(tmp) / "sub" / "f.bin")

            paths = {e.path for e in scanner.iter_entries(tmp)}

            self.assertIn(os.path.join(tmp, "sub", "f.bin"), paths)

    def test_symlinks_are_other_and_not_followed(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            if not _can_symlink(tmp):
                self.skipTest("symlinks not supported here")
            root = Path(tmp)
            target = _touch(root / "real" / "file.txt")
            os.symlink(target, root / "link.txt")
            os.symlink(root / "real", root / "linkdir")

            entries = {os.path.relpath(e.path, tmp): e.kind for e in scanner.iter_entries(tmp)}

            self.assertEqual(entries["link.txt"], KIND_OTHER)
            self.assertEqual(entries["linkdir"], KIND_OTHER)
            self.assertNotIn(os.path.join("linkdir", "file.txt"), entries)

    def test_missing_root_yields_nothing(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            self.assertEqual(list(scanner.iter_entries(os.path.join(tmp, "nope"))), [])

    def test_regular_file_root_is_yielded_alone(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            f = _touch(Path(tmp) / "only.txt")

            entries = list(scanner.iter_entries(str(f)))

            self.assertEqual([(e.path, e.kind) for e in entries], [(str(f), KIND_FILE)])

    def test_unlistable_directory_is_skipped_without_aborting(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            _touch(root / "ok" / "a.txt")
            _touch(root / "locked" / "hidden.txt")
            real_scandir = os.scandir

            def fake_scandir(path):
                if os.path.basename(path) == "locked":
                    raise PermissionError(13, "Permission denied", path)
                return real_scandir(path)

            with mock.patch("filemeta.scanner.os.scandir", side_effect=fake_scandir):
                paths = {os.path.relpath(e.path, tmp) for e in scanner.iter_entries(tmp)}

            self.assertIn(os.path.join("ok", "a.txt"), paths)
            self.assertIn("locked", paths)
            self.assertNotIn(os.path.join("locked", "hidden.txt"), paths)


class ReadMetadataTests(unittest.TestCase):
    def test_reads_size_and_mtime(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            f = _touch(Path(tmp) / "a.bin", size=2048, mtime=1_600_000_000)

            rec = scanner.read_metadata(str(f))

            self.assertEqual(rec, FileRecord(path=str(f), mtime=1_600_000_000.0, size_bytes=2048))

    def test_size_is_omitted_when_not_tracked(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            f = _touch(Path(tmp) / "a.bin", size=10)

            rec = scanner.read_metadata(str(f), track_size=False)

            self.assertIsNotNone(rec)
            self.assertIsNone(rec.size_bytes)
            self.assertIsNone(rec.size_mb)

    def test_vanished_file_returns_none(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            self.assertIsNone(scanner.read_metadata(os.path.join(tmp, "gone.txt")))

    def test_unresolvable_mtime_returns_none(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            f = _touch(Path(tmp) / "a.txt")
            with mock.patch("filemeta.scanner.format_timestamp", side_effect=OverflowError("timestamp out of range")):
                self.assertIsNone(scanner.read_metadata(str(f)))

    def test_mtime_must_render_in_the_report_zone(self) -> None:
        # 9999-12-31 in zones west of UTC, year 10000 in UTC
        far = 253_402_318_000.0
        with tempfile.TemporaryDirectory() as tmp:
            f = _touch(Path(tmp) / "far.txt", size=4)
            real = os.stat(f)
            fake = SimpleNamespace(st_mode=real.st_mode, st_size=4, st_mtime=far)
            with mock.patch("filemeta.scanner.os.stat", return_value=fake):
                self.assertIsNone(scanner.read_metadata(str(f), tz=timezone.utc))

    def test_collect_counts_but_excludes_unrenderable_mtime(self) -> None:
        far = 253_402_318_000.0
        with tempfile.TemporaryDirectory() as tmp:
            good = _touch(Path(tmp) / "good.txt")
            bad = _touch(Path(tmp) / "far.txt")
            real_stat = os.stat

            def fake_stat(path, *args, **kwargs):
                st = real_stat(path, *args, **kwargs)
                if os.fspath(path) != str(bad):
                    return st
                return SimpleNamespace(st_mode=st.st_mode, st_size=st.st_size, st_mtime=far)

            with mock.patch("filemeta.scanner.os.stat", side_effect=fake_stat):
                result = scanner.collect_records(tmp, tz=timezone.utc)

            self.assertEqual(result.files, 2)
            self.assertEqual([r.path for r in result.records], [str(good)])


class CollectRecordsTests(unittest.TestCase):
    def test_counter_matches_regular_files_and_records_match_filesystem(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            a = _touch(root / "a.txt", size=3, mtime=1_500_000_000)
            b = _touch(root / "sub" / "b.txt", size=5, mtime=1_400_000_000)
            (root / "empty_dir").mkdir()

            result = scanner.collect_records(tmp)

            self.assertEqual(result.files, 2)
            by_path = {r.path: r for r in result.records}
            self.assertEqual(set(by_path), {str(a), str(b)})
            self.assertEqual(by_path[str(a)].mtime, 1_500_000_000.0)
            self.assertEqual(by_path[str(b)].size_bytes, 5)
            self.assertEqual(result.bytes_scanned, 8)

    def test_metadata_failure_counts_but_does_not_record(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            _touch(root / "good.txt")
            bad = _touch(root / "bad.txt")
            real_read = scanner.read_metadata

            def flaky(path, track_size=True, tz=None):
                if path == str(bad):
                    return None
                return real_read(path, track_size=track_size, tz=tz)

            with mock.patch("filemeta.scanner.read_metadata", side_effect=flaky):
                result = scanner.collect_records(tmp)

            self.assertEqual(result.files, 2)
            self.assertEqual([os.path.basename(r.path) for r in result.records], ["good.txt"])

    def test_symlinks_and_directories_are_not_counted(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            if not _can_symlink(tmp):
                self.skipTest("symlinks not supported here")
            root = Path(tmp)
            target = _touch(root / "d" / "f.txt")
            os.symlink(target, root / "link.txt")

            result = scanner.collect_records(tmp)

            self.assertEqual(result.files, 1)
            self.assertEqual([r.path for r in result.records], [str(target)])

    def test_progress_receives_running_count(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            for name in ("a", "b", "c"):
                _touch(Path(tmp) / name)
            seen = []

            scanner.collect_records(tmp, progress=seen.append)

            self.assertEqual(seen, [1, 2, 3])

    def test_empty_directory_is_a_valid_result(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            seen = []

            result = scanner.collect_records(tmp, progress=seen.append)

            self.assertEqual(result.files, 0)
            self.assertEqual(result.records, [])
            self.assertEqual(seen, [])

    def test_empty_root_defaults_to_current_directory(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            _touch(Path(tmp) / "here.txt")
            previous = os.getcwd()
            try:
                os.chdir(tmp)
                result = scanner.collect_records("")
            finally:
                os.chdir(previous)

            self.assertEqual(result.root, scanner.DEFAULT_ROOT)
            self.assertEqual([r.path for r in result.records], [os.path.join(".", "here.txt")])


class SortRecordsTests(unittest.TestCase):
    def test_sorts_by_mtime_and_keeps_ties_in_walk_order(self) -> None:
        records = [
            FileRecord("c", 30.0, 1),
            FileRecord("tie1", 20.0, 1),
            FileRecord("a", 10.0, 1),
            FileRecord("tie2", 20.0, 1),
        ]

        scanner.sort_records(records)

        self.assertEqual([r.path for r in records], ["a", "tie1", "tie2", "c"])

    def test_scan_returns_sorted_records(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            _touch(root / "new.txt", mtime=1_700_000_000)
            _touch(root / "old.txt", mtime=1_000_000_000)
            _touch(root / "mid" / "mid.txt", mtime=1_300_000_000)

            result = scanner.scan(tmp)

            self.assertEqual([os.path.basename(r.path) for r in result.records], ["old.txt", "mid.txt", "new.txt"])


if __name__ == "__main__":
    unittest.main()
