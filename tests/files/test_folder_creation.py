import io
import tempfile
import threading
import unittest
from pathlib import Path

from src.backend.files import EntryKind, FileStorageEngine, UploadItem
from src.backend.fs import MemoryStorageMedium
from src.backend.fs.errors import AlreadyExistsError, InvalidNameError, InvalidPathError


class TestCreateFolder(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = FileStorageEngine(MemoryStorageMedium())

    def test_creates_in_root(self) -> None:
        entry = self.engine.create_folder("acme", "/", "  Holidays ")

        self.assertEqual(entry.name, "Holidays")
        self.assertEqual(entry.kind, EntryKind.FOLDER)
        self.assertEqual(entry.path, "/Holidays")
        self.assertEqual([e.path for e in self.engine.list("acme", "/")], ["/Holidays"])

    def test_missing_parent_is_created(self) -> None:
        entry = self.engine.create_folder("acme", "/a/b", "c")

        self.assertEqual(entry.path, "/a/b/c")
        self.assertEqual([e.name for e in self.engine.list("acme", "/a")], ["b"])

    def test_existing_name_conflicts(self) -> None:
        self.engine.create_folder("acme", "/", "gallery")
        with self.assertRaises(AlreadyExistsError):
            self.engine.create_folder("acme", "/", "gallery")

    def test_existing_file_conflicts(self) -> None:
        self.engine.ingest("acme", "/", [UploadItem("notes", io.BytesIO(b"n"))])
        with self.assertRaises(AlreadyExistsError):
            self.engine.create_folder("acme", "/", "notes")

    def test_parent_is_a_file(self) -> None:
        self.engine.ingest("acme", "/", [UploadItem("notes", io.BytesIO(b"n"))])
        with self.assertRaises(InvalidPathError):
            self.engine.create_folder("acme", "/notes", "inner")

    def test_invalid_names(self) -> None:
        for name in ("", "  ", "a/b", "..", "a\\b"):
            with self.subTest(name=name):
                with self.assertRaises(InvalidNameError):
                    self.engine.create_folder("acme", "/", name)

    def test_invalid_parent(self) -> None:
        with self.assertRaises(InvalidPathError):
            self.engine.create_folder("acme", "/../globex", "x")


class TestConcurrentCreateFolder(unittest.TestCase):
    def test_racing_creates_yield_one_conflict(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            engine = FileStorageEngine.local(Path(tmpdir))
            barrier = threading.Barrier(2)
            outcomes: list[object] = []
            lock = threading.Lock()

            def worker(name: str) -> None:
                barrier.wait()
                try:
                    outcome: object = engine.create_folder("acme", "/media", name)
                except AlreadyExistsError as exc:
                    outcome = exc
                with lock:
                    outcomes.append(outcome)

            for n in range(20):
                outcomes.clear()
                threads = [threading.Thread(target=worker, args=(f"round-{n}",)) for _ in range(2)]
                for t in threads:
                    t.start()
                for t in threads:
                    t.join()

                errors = [o for o in outcomes if isinstance(o, AlreadyExistsError)]
                self.assertEqual(len(outcomes), 2)
                self.assertEqual(len(errors), 1)


if __name__ == "__main__":
    unittest.main()
