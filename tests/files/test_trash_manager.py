"""
Tests for soft delete into the trash folder and permanent removal.

Covers:
1. Conflict names inside the trash (report.txt -> report_1.txt -> report_2.txt)
2. Purging entries already in the trash, one by one or all at once
3. Losing the race for a trash name between probe and move
4. Bulk removal with per-path failures
5. Two threads soft-deleting the same path on disk
"""

import io
import tempfile
import threading
import unittest
from pathlib import Path, PurePosixPath

from src.backend.files import FileStorageEngine, TrashManager, UploadItem
from src.backend.fs import MemoryStorageMedium, TenantPathResolver
from src.backend.fs.errors import (
    InternalStorageError,
    InvalidPathError,
    NoFilesProvidedError,
    NotFoundError,
    TenantRequiredError,
)


K = PurePosixPath


def _upload(engine: FileStorageEngine, target: str, name: str, data: bytes = b"x") -> None:
    engine.ingest("acme", target, [UploadItem(name, io.BytesIO(data))])


class TestSoftDelete(unittest.TestCase):
    def setUp(self) -> None:
        self.medium = MemoryStorageMedium()
        self.engine = FileStorageEngine(self.medium)

    def test_moves_into_trash(self) -> None:
        _upload(self.engine, "/docs", "report.txt", b"v1")

        result = self.engine.remove("acme", "/docs/report.txt")

        self.assertFalse(result.permanent)
        self.assertEqual(result.path, "/docs/report.txt")
        self.assertEqual(result.trash_path, "/.trash/report.txt")
        self.assertFalse(self.medium.exists(K("acme/docs/report.txt")))
        self.assertEqual(self.medium.read_bytes(K("acme/.trash/report.txt")), b"v1")

    def test_same_name_from_different_folders_gets_suffixes(self) -> None:
        sources = {"/report.txt": b"root", "/docs/report.txt": b"docs", "/archive/2023/report.txt": b"old"}
        for path, data in sources.items():
            folder, _, name = path.rpartition("/")
            _upload(self.engine, folder or "/", name, data)

        trash_paths = [self.engine.remove("acme", path).trash_path for path in sources]

        self.assertEqual(
            trash_paths,
            ["/.trash/report.txt", "/.trash/report_1.txt", "/.trash/report_2.txt"],
        )
        self.assertEqual(self.medium.read_bytes(K("acme/.trash/report_1.txt")), b"docs")
        self.assertEqual(self.medium.read_bytes(K("acme/.trash/report_2.txt")), b"old")

        remaining = list(trash_paths)
        for trash_path in trash_paths:
            self.assertTrue(self.engine.remove("acme", trash_path).permanent)
            remaining.remove(trash_path)
            self.assertEqual([e.path for e in self.engine.list("acme", "/.trash")], remaining)

    def test_folder_moves_with_contents(self) -> None:
        _upload(self.engine, "/gallery/2024", "a.png", b"img")

        self.engine.remove("acme", "/gallery")

        self.assertEqual(self.medium.read_bytes(K("acme/.trash/gallery/2024/a.png")), b"img")
        self.assertEqual(self.engine.list("acme", "/"), [])

    def test_remove_twice_is_not_found(self) -> None:
        _upload(self.engine, "/", "a.txt")
        self.engine.remove("acme", "/a.txt")

        with self.assertRaises(NotFoundError):
            self.engine.remove("acme", "/a.txt")

    def test_root_cannot_be_removed(self) -> None:
        for path in ("/", ""):
            with self.subTest(path=path):
                with self.assertRaises(InvalidPathError):
                    self.engine.remove("acme", path)

    def test_traversal_rejected(self) -> None:
        with self.assertRaises(InvalidPathError):
            self.engine.remove("acme", "/../globex/a.txt")


class TestPurge(unittest.TestCase):
    def setUp(self) -> None:
        self.medium = MemoryStorageMedium()
        self.engine = FileStorageEngine(self.medium)

    def test_trashed_entry_removed_for_good(self) -> None:
        _upload(self.engine, "/", "report.txt")
        _upload(self.engine, "/", "other.txt")
        self.engine.remove("acme", "/report.txt")
        self.engine.remove("acme", "/other.txt")

        result = self.engine.remove("acme", "/.trash/report.txt")

        self.assertTrue(result.permanent)
        self.assertIsNone(result.trash_path)
        self.assertEqual([e.name for e in self.engine.list("acme", "/.trash")], ["other.txt"])

    def test_removing_trash_folder_empties_it(self) -> None:
        _upload(self.engine, "/", "a.txt")
        self.engine.remove("acme", "/a.txt")

        result = self.engine.remove("acme", "/.trash")

        self.assertTrue(result.permanent)
        self.assertEqual(self.engine.list("acme", "/.trash"), [])

    def test_missing_trash_entry(self) -> None:
        with self.assertRaises(NotFoundError):
            self.engine.remove("acme", "/.trash/ghost.txt")


class TestTrashNameRaces(unittest.TestCase):
    def test_injected_probe_simulates_collisions(self) -> None:
        medium = MemoryStorageMedium()
        taken = {K("acme/.trash/a.txt")} | {K(f"acme/.trash/a_{n}.txt") for n in range(1, 50)}
        trash = TrashManager(medium, TenantPathResolver(medium), exists_probe=taken.__contains__)
        engine = FileStorageEngine(medium, trash=trash)
        _upload(engine, "/", "a.txt")

        result = engine.remove("acme", "/a.txt")

        self.assertEqual(result.trash_path, "/.trash/a_50.txt")

    def test_name_taken_between_probe_and_move(self) -> None:
        class RacingMedium(MemoryStorageMedium):
            raced = False

            def move(self, src, dst):
                if not self.raced:
                    self.raced = True
                    with self.open_write(dst) as f:
                        f.write(b"racer")
                super().move(src, dst)

        medium = RacingMedium()
        engine = FileStorageEngine(medium)
        _upload(engine, "/", "a.txt", b"mine")

        result = engine.remove("acme", "/a.txt")

        self.assertEqual(result.trash_path, "/.trash/a_1.txt")
        self.assertEqual(medium.read_bytes(K("acme/.trash/a.txt")), b"racer")
        self.assertEqual(medium.read_bytes(K("acme/.trash/a_1.txt")), b"mine")

    def test_gives_up_after_bounded_retries(self) -> None:
        class AlwaysTakenMedium(MemoryStorageMedium):
            def move(self, src, dst):
                self._record("move", src)
                raise FileExistsError(str(dst))

        medium = AlwaysTakenMedium()
        trash = TrashManager(medium, TenantPathResolver(medium), max_move_attempts=3)
        engine = FileStorageEngine(medium, trash=trash)
        _upload(engine, "/", "a.txt")

        with self.assertRaises(InternalStorageError):
            engine.remove("acme", "/a.txt")

        self.assertEqual(len([c for c in medium.calls if c[0] == "move"]), 3)
        self.assertTrue(medium.exists(K("acme/a.txt")))

    def test_name_search_exhausted(self) -> None:
        medium = MemoryStorageMedium()
        trash = TrashManager(
            medium,
            TenantPathResolver(medium),
            exists_probe=lambda key: True,
            max_name_attempts=5,
        )
        engine = FileStorageEngine(medium, trash=trash)
        _upload(engine, "/", "a.txt")

        with self.assertRaises(InternalStorageError):
            engine.remove("acme", "/a.txt")


class TestConcurrentSoftDelete(unittest.TestCase):
    def test_racing_deletes_of_one_path(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            engine = FileStorageEngine.local(Path(tmpdir))
            barrier = threading.Barrier(2)
            outcomes: list[object] = []
            lock = threading.Lock()

            def worker(path: str) -> None:
                barrier.wait()
                try:
                    outcome: object = engine.remove("acme", path)
                except NotFoundError as exc:
                    outcome = exc
                with lock:
                    outcomes.append(outcome)

            for n in range(20):
                name = f"doc-{n}.txt"
                _upload(engine, "/", name, b"body")
                outcomes.clear()
                threads = [threading.Thread(target=worker, args=(f"/{name}",)) for _ in range(2)]
                for t in threads:
                    t.start()
                for t in threads:
                    t.join()

                self.assertEqual(len(outcomes), 2)
                self.assertEqual(len([o for o in outcomes if isinstance(o, NotFoundError)]), 1)

            trashed = [e.name for e in engine.list("acme", "/.trash")]
            self.assertEqual(len(trashed), 20)
            self.assertEqual(engine.list("acme", "/"), [])


class TestRemoveMany(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = FileStorageEngine(MemoryStorageMedium())

    def test_collects_failures(self) -> None:
        _upload(self.engine, "/", "a.txt")
        _upload(self.engine, "/", "b.txt")

        result = self.engine.remove_many("acme", ["/a.txt", "/missing.txt", "/../x", "/b.txt"])

        self.assertEqual([r.path for r in result.removed], ["/a.txt", "/b.txt"])
        self.assertEqual(
            [(f.name, f.error) for f in result.failed],
            [("/missing.txt", "File not found"), ("/../x", "Invalid file path")],
        )

    def test_empty_request(self) -> None:
        with self.assertRaises(NoFilesProvidedError):
            self.engine.remove_many("acme", [])

    def test_tenant_checked_first(self) -> None:
        with self.assertRaises(TenantRequiredError):
            self.engine.remove_many(None, [])


if __name__ == "__main__":
    unittest.main()
