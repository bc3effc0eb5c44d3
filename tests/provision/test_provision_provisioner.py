import threading
import unittest
from typing import Optional

from obedrive.errors import InvalidArgumentError, ProvisioningError
from obedrive.models import DestinationKind, FolderRef
from obedrive.provision import FolderProvisioner


class FakeDestination:
    """In-memory folder tree recording every find/create call."""

    def __init__(self, kind: DestinationKind = DestinationKind.PERSONAL) -> None:
        self.kind = kind
        self.root_id = "ROOT"
        self.folders: dict[tuple[str, str], FolderRef] = {}
        self.find_calls: list[tuple[str, str]] = []
        self.create_calls: list[tuple[str, str]] = []
        self.fail_create_on: Optional[str] = None
        self._lock = threading.Lock()
        self._next = 0

    def is_usable(self) -> bool:
        return True

    def find(self, name: str, parent_id: str) -> Optional[FolderRef]:
        self.find_calls.append((name, parent_id))
        return self.folders.get((parent_id, name))

    def create(self, name: str, parent_id: str) -> FolderRef:
        self.create_calls.append((name, parent_id))
        if name == self.fail_create_on:
            raise RuntimeError("create failed")
        with self._lock:
            self._next += 1
            ref = FolderRef(id=f"F{self._next}", name=name)
        self.folders[(parent_id, name)] = ref
        return ref

    def upload(self, *args, **kwargs):
        raise NotImplementedError


class TestFolderProvisioner(unittest.TestCase):
    def test_ensure_creates_missing_segments(self) -> None:
        dest = FakeDestination()
        prov = FolderProvisioner(dest)

        ref = prov.ensure(["2024", "Spring", "CSE321_S", "Theory"])

        self.assertEqual(ref.name, "Theory")
        self.assertEqual([c[0] for c in dest.create_calls], ["2024", "Spring", "CSE321_S", "Theory"])
        # Each segment is created under the previous one.
        self.assertEqual(dest.create_calls[0][1], "ROOT")
        self.assertEqual(dest.create_calls[1][1], "F1")

    def test_ensure_twice_returns_same_id_without_create(self) -> None:
        dest = FakeDestination()
        prov = FolderProvisioner(dest)
        path = ["a", "b", "c"]

        first = prov.ensure(path)
        finds, creates = len(dest.find_calls), len(dest.create_calls)
        second = prov.ensure(path)

        self.assertEqual(first.id, second.id)
        self.assertEqual(len(dest.find_calls), finds)
        self.assertEqual(len(dest.create_calls), creates)

    def test_existing_folders_are_adopted(self) -> None:
        dest = FakeDestination()
        dest.folders[("ROOT", "a")] = FolderRef(id="EXISTING", name="a")
        prov = FolderProvisioner(dest)

        ref = prov.ensure(["a", "b"])

        self.assertEqual([c[0] for c in dest.create_calls], ["b"])
        self.assertEqual(dest.create_calls[0][1], "EXISTING")
        self.assertEqual(ref.name, "b")

    def test_fresh_provisioner_finds_previous_folders(self) -> None:
        dest = FakeDestination()
        first = FolderProvisioner(dest).ensure(["a", "b"])
        dest.create_calls.clear()

        second = FolderProvisioner(dest).ensure(["a", "b"])

        self.assertEqual(first.id, second.id)
        self.assertEqual(dest.create_calls, [])

    def test_shared_prefix_is_walked_once(self) -> None:
        dest = FakeDestination()
        prov = FolderProvisioner(dest)

        prov.ensure(["a", "b", "Theory"])
        dest.find_calls.clear()
        prov.ensure(["a", "b", "Lab"])

        self.assertEqual([c[0] for c in dest.find_calls], ["Lab"])

    def test_failure_reports_segment_and_keeps_ancestors(self) -> None:
        dest = FakeDestination(DestinationKind.SHARED)
        dest.fail_create_on = "c"
        prov = FolderProvisioner(dest)

        with self.assertRaises(ProvisioningError) as ctx:
            prov.ensure(["a", "b", "c"])

        err = ctx.exception
        self.assertEqual(err.segment, "c")
        self.assertEqual(err.destination, "shared")
        self.assertEqual(err.details["depth"], 3)
        self.assertIsInstance(err.cause, RuntimeError)
        self.assertIsNotNone(prov.cached(["a", "b"]))
        self.assertIsNone(prov.cached(["a", "b", "c"]))

        dest.fail_create_on = None
        dest.create_calls.clear()
        prov.ensure(["a", "b", "c"])
        self.assertEqual([c[0] for c in dest.create_calls], ["c"])

    def test_empty_path_rejected(self) -> None:
        with self.assertRaises(InvalidArgumentError):
            FolderProvisioner(FakeDestination()).ensure([])

    def test_clear_drops_cache(self) -> None:
        dest = FakeDestination()
        prov = FolderProvisioner(dest)
        prov.ensure(["a"])
        prov.clear()
        self.assertIsNone(prov.cached(["a"]))


if __name__ == "__main__":
    unittest.main()
