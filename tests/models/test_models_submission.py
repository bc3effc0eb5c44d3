import os
import tempfile
import unittest
from datetime import datetime, timezone

from obedrive.models import (
    ArtifactMetadata,
    Category,
    CategoryFolders,
    ChecklistItem,
    CompletionSummary,
    CourseInfo,
    ItemStatus,
    LocalFile,
    OverallStatus,
    SubmissionRecord,
    SubmissionStatus,
)


def _item(item_id: str, status: ItemStatus = ItemStatus.PENDING, keys=("a", "b")) -> ChecklistItem:
    return ChecklistItem(
        id=item_id,
        name=item_id.title(),
        category=Category.THEORY,
        required_keys=list(keys),
        status=status,
    )


class TestChecklistItem(unittest.TestCase):
    def test_missing_keys_counts_local_and_uploaded(self) -> None:
        item = _item("x", keys=("a", "b", "c"))
        item.local_files["a"] = LocalFile(name="a.pdf", data=b"1")
        item.uploaded_files["b"] = ArtifactMetadata(
            name="b.pdf", size=1, mime_type="application/pdf", last_modified=0
        )
        self.assertEqual(item.missing_keys(), ["c"])
        self.assertFalse(item.all_artifacts_present())

    def test_clear_artifacts(self) -> None:
        item = _item("x", keys=("a",))
        item.local_files["a"] = LocalFile(name="a.pdf", data=b"1")
        item.clear_artifacts()
        self.assertEqual(item.missing_keys(), ["a"])

    def test_to_dict_wire_shape(self) -> None:
        item = _item("class-test", ItemStatus.YES, keys=("marginal",))
        item.uploaded_files["marginal"] = ArtifactMetadata(
            name="m.pdf",
            size=10,
            mime_type="application/pdf",
            last_modified=1700000000000,
            storage_id="G1",
            url="https://drive.google.com/file/d/G1/view",
        )
        item.submitted_at = datetime(2025, 1, 1, tzinfo=timezone.utc)

        data = item.to_dict()

        self.assertEqual(data["fileTypes"], ["marginal"])
        self.assertEqual(data["status"], "yes")
        self.assertEqual(data["submittedAt"], "2025-01-01T00:00:00.000Z")
        self.assertEqual(
            data["uploadedFiles"]["marginal"],
            {
                "name": "m.pdf",
                "size": 10,
                "type": "application/pdf",
                "lastModified": 1700000000000,
                "googleDriveId": "G1",
                "url": "https://drive.google.com/file/d/G1/view",
            },
        )
        self.assertNotIn("localFiles", data)

        restored = ChecklistItem.from_dict(data)
        self.assertEqual(restored.uploaded_files["marginal"].storage_id, "G1")
        self.assertEqual(restored.local_files, {})

    def test_clone_is_deep(self) -> None:
        item = _item("x")
        copy = item.clone()
        copy.required_keys.append("z")
        self.assertEqual(item.required_keys, ["a", "b"])


class TestLocalFile(unittest.TestCase):
    def test_from_path_reads_bytes_and_guesses_type(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "outline.pdf")
            with open(path, "wb") as f:
                f.write(b"%PDF-1.4")
            os.utime(path, (1_700_000_000, 1_700_000_000))

            local = LocalFile.from_path(path)

        self.assertEqual(local.name, "outline.pdf")
        self.assertEqual(local.data, b"%PDF-1.4")
        self.assertEqual(local.size, 8)
        self.assertEqual(local.mime_type, "application/pdf")
        self.assertEqual(local.last_modified, 1_700_000_000_000)

    def test_from_path_explicit_mime_type_wins(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "notes")
            with open(path, "wb") as f:
                f.write(b"x")
            local = LocalFile.from_path(path, mime_type="text/plain")
        self.assertEqual(local.mime_type, "text/plain")


class TestCompletionSummary(unittest.TestCase):
    def test_from_items(self) -> None:
        items = [
            _item("a", ItemStatus.YES),
            _item("b", ItemStatus.NO),
            _item("c", ItemStatus.PENDING),
        ]
        summary = CompletionSummary.from_items(items)
        self.assertEqual(summary.total, 3)
        self.assertEqual(summary.completed, 1)
        self.assertEqual(summary.pending, 1)
        self.assertEqual(summary.percentage, 33)

    def test_percentage_rounds_halves_up(self) -> None:
        items = [_item(str(n)) for n in range(8)]
        items[0].status = ItemStatus.YES
        self.assertEqual(CompletionSummary.from_items(items).percentage, 13)
        for item in items[1:5]:
            item.status = ItemStatus.YES
        self.assertEqual(CompletionSummary.from_items(items).percentage, 63)

    def test_empty(self) -> None:
        self.assertEqual(CompletionSummary.from_items([]).percentage, 0)


class TestSubmissionRecord(unittest.TestCase):
    def test_from_dict_reads_server_payload(self) -> None:
        payload = {
            "_id": "65a0c0ffee0000000000abcd",
            "courseInfo": {
                "semester": "Spring-2024",
                "courseCode": "CSE321",
                "courseSection": "S",
                "batch": "57",
            },
            "documents": {
                "theory": [
                    {"id": "course-outline", "name": "Course Outline", "category": "theory",
                     "fileTypes": ["doc"], "status": "yes"},
                ],
                "lab": [
                    {"id": "lab-report", "name": "Lab Report", "category": "lab",
                     "fileTypes": ["lab-report"], "status": "pending"},
                ],
            },
            "submissionStatus": "partial",
            "overallStatus": "in-review",
            "completionPercentage": 50,
            "googleDriveFolders": {"theoryFolderId": "T", "labFolderId": "L"},
            "reviewComments": "ok",
        }

        record = SubmissionRecord.from_dict(payload)

        self.assertEqual(record.submission_id, "65a0c0ffee0000000000abcd")
        self.assertEqual(record.course_info.course_code, "CSE321")
        self.assertIs(record.submission_status, SubmissionStatus.PARTIAL)
        self.assertIs(record.overall_status, OverallStatus.IN_REVIEW)
        self.assertEqual(record.folders.get(Category.LAB), "L")
        self.assertEqual(record.find_item("lab-report", Category.LAB).required_keys, ["lab-report"])
        self.assertIsNone(record.find_item("lab-report", Category.THEORY))
        self.assertEqual(record.summary().completed, 1)

        again = SubmissionRecord.from_dict(record.to_dict())
        self.assertEqual(again.to_dict(), record.to_dict())

    def test_defaults(self) -> None:
        record = SubmissionRecord(
            submission_id="s1",
            course_info=CourseInfo(semester="Spring-2024", course_code="C", course_section="1"),
        )
        self.assertFalse(record.is_submitted)
        self.assertEqual(record.folders, CategoryFolders())
        self.assertEqual(record.all_items(), [])


if __name__ == "__main__":
    unittest.main()
