"""
Both storage media must behave the same for the operations components rely on.
"""

import tempfile
import unittest
from pathlib import Path, PurePosixPath

from src.backend.fs import LocalStorageMedium, MemoryStorageMedium, StorageMedium


K = PurePosixPath


class _MediumContract:
    medium: StorageMedium

    def _write(self, key: str, data: bytes) -> None:
        with self.medium.open_write(K(key)) as f:
            f.write(data)

    def test_exclusive_make_dir_reports_existing(self) -> None:
        self.medium.make_dir(K("acme"))
        with self.assertRaises(FileExistsError):
            self.medium.make_dir(K("acme"))

    def test_make_dir_without_parents_needs_parent(self) -> None:
        with self.assertRaises(FileNotFoundError):
            self.medium.make_dir(K("acme/a/b"))

        self.medium.make_dir(K("acme/a/b"), parents=True)
        self.assertTrue(self.medium.stat(K("acme/a")).is_dir)
        self.medium.make_dir(K("acme/a/b"), parents=True, exist_ok=True)

    def test_write_read_and_stat(self) -> None:
        self.medium.make_dir(K("acme"))
        self._write("acme/a.txt", b"hello")

        self.assertEqual(self.medium.read_bytes(K("acme/a.txt")), b"hello")
        st = self.medium.stat(K("acme/a.txt"))
        self.assertFalse(st.is_dir)
        self.assertEqual(st.size, 5)
        self.assertIsNotNone(st.modified_at.tzinfo)

    def test_write_truncates_existing(self) -> None:
        self.medium.make_dir(K("acme"))
        self._write("acme/a.txt", b"long content")
        self._write("acme/a.txt", b"short")
        self.assertEqual(self.medium.read_bytes(K("acme/a.txt")), b"short")

    def test_write_needs_parent(self) -> None:
        with self.assertRaises(FileNotFoundError):
            self._write("acme/missing/a.txt", b"x")

    def test_list_dir(self) -> None:
        self.medium.make_dir(K("acme/sub"), parents=True)
        self._write("acme/a.txt", b"a")

        self.assertEqual(sorted(self.medium.list_dir(K("acme"))), ["a.txt", "sub"])
        with self.assertRaises(FileNotFoundError):
            self.medium.list_dir(K("nobody"))
        with self.assertRaises(NotADirectoryError):
            self.medium.list_dir(K("acme/a.txt"))

    def test_stat_missing(self) -> None:
        with self.assertRaises(FileNotFoundError):
            self.medium.stat(K("acme/none.txt"))
        self.assertFalse(self.medium.exists(K("acme/none.txt")))

    def test_move_refuses_existing_destination(self) -> None:
        self.medium.make_dir(K("acme"))
        self._write("acme/a.txt", b"a")
        self._write("acme/b.txt", b"b")

        with self.assertRaises(FileExistsError):
            self.medium.move(K("acme/a.txt"), K("acme/b.txt"))
        self.assertEqual(self.medium.read_bytes(K("acme/b.txt")), b"b")

    def test_move_missing_source(self) -> None:
        self.medium.make_dir(K("acme"))
        with self.assertRaises(FileNotFoundError):
            self.medium.move(K("acme/none.txt"), K("acme/b.txt"))

    def test_move_directory_carries_children(self) -> None:
        self.medium.make_dir(K("acme/src/inner"), parents=True)
        self._write("acme/src/inner/f.txt", b"f")
        self.medium.make_dir(K("acme/dst"))

        self.medium.move(K("acme/src"), K("acme/dst/src"))

        self.assertFalse(self.medium.exists(K("acme/src")))
        self.assertEqual(self.medium.read_bytes(K("acme/dst/src/inner/f.txt")), b"f")

    def test_remove_file_and_tree(self) -> None:
        self.medium.make_dir(K("acme/tree/deep"), parents=True)
        self._write("acme/tree/deep/f.txt", b"f")
        self._write("acme/single.txt", b"s")

        self.medium.remove(K("acme/single.txt"))
        self.medium.remove(K("acme/tree"))

        self.assertEqual(self.medium.list_dir(K("acme")), [])


class TestLocalStorageMedium(_MediumContract, unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.medium = LocalStorageMedium(Path(self._tmp.name))

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_os_path_maps_under_root(self) -> None:
        self.assertEqual(
            self.medium.os_path(K("acme/a.txt")),
            Path(self._tmp.name).resolve() / "acme" / "a.txt",
        )


class TestMemoryStorageMedium(_MediumContract, unittest.TestCase):
    def setUp(self) -> None:
        self.medium = MemoryStorageMedium()

    def test_records_calls(self) -> None:
        self.medium.exists(K("acme"))
        self.assertEqual(self.medium.calls, [("stat", K("acme"))])


if __name__ == "__main__":
    unittest.main()
