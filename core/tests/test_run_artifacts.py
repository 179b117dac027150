"""Tests for run artifact writer."""

import json
import tempfile
import unittest
from pathlib import Path

from apimodel.api import Api, Class, Method
from apimodel.assembly import AssemblyStats
from apimodel.types import Direct, Prim
from core.run_artifacts import build_run_report, write_run_report
from extraction.models import DroppedItem


class TestRunArtifacts(unittest.TestCase):
    def test_write_run_report(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_run_report(
                report={"status": "ok", "value": 1},
                run_id="run-123",
                output_dir=tmpdir,
            )
            self.assertTrue(Path(path).is_file())
            self.assertEqual(Path(path).name, "run-123.json")
            payload = json.loads(Path(path).read_text(encoding="utf-8"))
            self.assertEqual(payload["run_id"], "run-123")
            self.assertEqual(payload["status"], "ok")
            self.assertEqual(payload["value"], 1)
            self.assertIn("timestamp_utc", payload)

    def test_build_run_report_includes_counts_and_drops(self) -> None:
        stats = AssemblyStats()
        stats.classes_extracted = 2
        stats.methods_assembled = 5
        stats.record_drop(
            DroppedItem(
                class_name="Object",
                method="Foo(int)",
                kind="METHOD",
                reason="argument 0 has no retrievable name",
            )
        )
        report = build_run_report(
            header_path="include/v8.h",
            namespace="v8",
            stats=stats,
            artifacts={"declarations": "out/glue-decl-generated.h"},
        )
        self.assertEqual(report["status"], "ok")
        self.assertEqual(report["counts"]["classes_extracted"], 2)
        self.assertEqual(report["counts"]["methods_assembled"], 5)
        self.assertEqual(report["counts"]["methods_dropped"], 1)
        self.assertEqual(report["dropped"][0]["class_name"], "Object")
        self.assertEqual(report["dropped"][0]["stage"], "extract")
        self.assertNotIn("error", report)
        self.assertNotIn("api", report)

    def test_build_run_report_includes_api_totals(self) -> None:
        is_object = Method(False, "IsObject", "IsObject", (), Direct(Prim.BOOL))
        api = Api(classes=(Class("Value", (is_object,)), Class("Object")))
        report = build_run_report(
            header_path="include/v8.h",
            namespace="v8",
            stats=AssemblyStats(),
            artifacts={},
            api=api,
        )
        self.assertEqual(report["api"], {"classes": 2, "methods": 1})

    def test_build_failed_report_without_stats(self) -> None:
        report = build_run_report(
            header_path="missing.h",
            namespace="v8",
            stats=None,
            artifacts={},
            status="failed",
            error="Cannot read header missing.h",
        )
        self.assertEqual(report["status"], "failed")
        self.assertEqual(report["error"], "Cannot read header missing.h")
        self.assertNotIn("counts", report)


if __name__ == "__main__":
    unittest.main()
