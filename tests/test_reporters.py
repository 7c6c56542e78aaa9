from __future__ import annotations

import unittest

from rtlmirror.models import Issue, ScanResult
from rtlmirror.reporters import render_report, to_json_report, to_pretty_report, to_sarif_report


def sample_result() -> ScanResult:
    return ScanResult(
        files_scanned=3,
        issues=[
            Issue("RTL001", "error", "ml-4", "ms-4", "a.tsx", 1, 17),
            Issue("RTL005", "warning", "text-left", "text-start", "a.tsx", 4, 3),
            Issue("RTL001", "error", "ml-2", "ms-2", "b.html", 2, 12),
        ],
        read_errors=[("c.vue", "Unable to read file during scan: denied")],
    )


class ReporterTests(unittest.TestCase):
    def test_json_report_contains_counts(self) -> None:
        payload = to_json_report(sample_result())

        self.assertEqual(payload["files_scanned"], 3)
        self.assertEqual(payload["files_with_issues"], 2)
        self.assertEqual(payload["issues_total"], 3)
        self.assertEqual(payload["severity_counts"], {"error": 2, "warning": 1})
        self.assertEqual(payload["rule_counts"], {"RTL001": 2, "RTL005": 1})
        self.assertEqual(payload["issues"][0]["suggestion"], "ms-4")
        self.assertEqual(payload["read_errors"][0]["file_path"], "c.vue")

    def test_sarif_report_carries_fix_replacements(self) -> None:
        payload = to_sarif_report(sample_result())
        run = payload["runs"][0]
        first = run["results"][0]

        self.assertEqual(payload["version"], "2.1.0")
        self.assertEqual(len(run["tool"]["driver"]["rules"]), 16)
        self.assertEqual(first["level"], "error")
        region = first["locations"][0]["physicalLocation"]["region"]
        self.assertEqual((region["startColumn"], region["endColumn"]), (17, 21))
        replacement = first["fixes"][0]["artifactChanges"][0]["replacements"][0]
        self.assertEqual(replacement["insertedContent"]["text"], "ms-4")

    def test_pretty_report_groups_issues_by_file(self) -> None:
        rendered = to_pretty_report(sample_result())

        self.assertIn("Summary:", rendered)
        self.assertIn("findings: 3 (errors=2, warnings=1)", rendered)
        self.assertIn("FILE a.tsx", rendered)
        self.assertIn("FILE b.html", rendered)
        self.assertIn("4:3 [WARNING] RTL005 text-left -> text-start", rendered)
        self.assertIn("c.vue: Unable to read file", rendered)
        self.assertEqual(rendered.count("FILE "), 2)

    def test_render_report_rejects_unknown_format(self) -> None:
        with self.assertRaises(ValueError):
            render_report(sample_result(), "xml")


if __name__ == "__main__":
    unittest.main()
