from __future__ import annotations

from pathlib import Path
import tempfile
import unittest

from rtlmirror.scanner import fix_path, scan_path


class ScannerTests(unittest.TestCase):
    def _scan(
        self,
        root: str,
        excludes: list[str] | None = None,
        skip_generated: bool = True,
        enabled_rules: list[str] | None = None,
        disabled_rules: list[str] | None = None,
        inline_ignore: bool = True,
    ):
        return scan_path(
            root,
            excludes=excludes or [],
            include_extensions=[".tsx", ".jsx", ".html", ".vue"],
            include_filenames=[],
            max_file_size_kb=1024,
            skip_generated=skip_generated,
            enabled_rules=enabled_rules,
            disabled_rules=disabled_rules,
            inline_ignore=inline_ignore,
        )

    def test_detects_physical_margin(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "Card.tsx").write_text('export const Card = () => <div className="ml-4" />;\n', encoding="utf-8")

            result = self._scan(str(root))

            self.assertEqual(result.files_scanned, 1)
            self.assertEqual([issue.rule_id for issue in result.issues], ["RTL001"])
            issue = result.issues[0]
            self.assertEqual(issue.file_path, "Card.tsx")
            self.assertEqual(issue.line, 1)
            self.assertEqual(issue.suggestion, "ms-4")

    def test_reports_relative_posix_paths(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            nested = root / "src" / "components"
            nested.mkdir(parents=True)
            (nested / "Nav.jsx").write_text('<nav className="pr-2">\n', encoding="utf-8")

            result = self._scan(str(root))

            self.assertEqual([issue.file_path for issue in result.issues], ["src/components/Nav.jsx"])

    def test_excludes_directory(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "src").mkdir()
            (root / "legacy").mkdir()
            (root / "src" / "ok.tsx").write_text('<div className="ms-4" />\n', encoding="utf-8")
            (root / "legacy" / "bad.tsx").write_text('<div className="ml-4" />\n', encoding="utf-8")

            result = self._scan(str(root), excludes=["legacy"])

            self.assertEqual(result.issues, [])
            self.assertEqual(result.files_scanned, 1)

    def test_excludes_nested_relative_path(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "src" / "legacy").mkdir(parents=True)
            (root / "lib" / "legacy").mkdir(parents=True)
            (root / "src" / "legacy" / "old.tsx").write_text('<div className="ml-4" />\n', encoding="utf-8")
            (root / "lib" / "legacy" / "kept.tsx").write_text('<div className="ml-4" />\n', encoding="utf-8")

            result = self._scan(str(root), excludes=["src/legacy/"])

            self.assertEqual([issue.file_path for issue in result.issues], ["lib/legacy/kept.tsx"])
            self.assertEqual(result.files_scanned, 1)

    def test_skips_unlisted_extensions(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "notes.txt").write_text("ml-4\n", encoding="utf-8")

            result = self._scan(str(root))

            self.assertEqual(result.files_scanned, 0)

    def test_skips_generated_output_by_default(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "node_modules" / "lib").mkdir(parents=True)
            (root / "node_modules" / "lib" / "Button.jsx").write_text('<b className="ml-4" />\n', encoding="utf-8")

            result = self._scan(str(root))
            self.assertEqual(result.files_scanned, 0)

            result = self._scan(str(root), skip_generated=False)
            self.assertEqual(result.files_scanned, 1)
            self.assertEqual(len(result.issues), 1)

    def test_scans_single_file_path(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            sample = Path(tmp) / "page.html"
            sample.write_text('<p class="text-left">\n', encoding="utf-8")

            result = self._scan(str(sample))

            self.assertEqual(result.files_scanned, 1)
            self.assertEqual([issue.file_path for issue in result.issues], ["page.html"])

    def test_inline_ignore_suppresses_whole_line(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "a.html").write_text(
                '<div class="ml-4 text-left"> <!-- rtlmirror:ignore -->\n<div class="pr-2">\n',
                encoding="utf-8",
            )

            result = self._scan(str(root))

            self.assertEqual([(issue.line, issue.original) for issue in result.issues], [(2, "pr-2")])

    def test_inline_ignore_for_specific_rule(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "a.tsx").write_text(
                '<div className="ml-4 text-left" /> {/* rtlmirror:ignore RTL005 */}\n',
                encoding="utf-8",
            )

            result = self._scan(str(root))
            self.assertEqual([issue.rule_id for issue in result.issues], ["RTL001"])

            result = self._scan(str(root), inline_ignore=False)
            self.assertEqual([issue.rule_id for issue in result.issues], ["RTL001", "RTL005"])

    def test_disable_and_enable_rules(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "a.vue").write_text('<div class="ml-4 text-right">\n', encoding="utf-8")

            disabled = self._scan(str(root), disabled_rules=["RTL001"])
            enabled = self._scan(str(root), enabled_rules=["RTL001"])

            self.assertEqual([issue.rule_id for issue in disabled.issues], ["RTL006"])
            self.assertEqual([issue.rule_id for issue in enabled.issues], ["RTL001"])


class FixPathTests(unittest.TestCase):
    def _fix(self, root: str, **kwargs):
        return fix_path(
            root,
            excludes=[],
            include_extensions=[".tsx", ".html"],
            include_filenames=[],
            max_file_size_kb=1024,
            **kwargs,
        )

    def test_rewrites_files_in_place(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            target = root / "a.tsx"
            target.write_text('<div className="ml-4 ml-4 text-left" />\n', encoding="utf-8")
            (root / "clean.tsx").write_text('<div className="ms-4" />\n', encoding="utf-8")

            outcome = self._fix(str(root))

            self.assertEqual(target.read_text(encoding="utf-8"), '<div className="ms-4 ms-4 text-start" />\n')
            self.assertEqual(outcome.files_changed, ["a.tsx"])
            self.assertEqual(outcome.fixes_applied, 3)
            self.assertEqual(outcome.remaining.issues, [])
            self.assertEqual(outcome.remaining.files_scanned, 2)

    def test_counts_nested_fixes_once_each(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "a.html"
            target.write_text('<p class="ml-[left-4]">\n', encoding="utf-8")

            outcome = self._fix(tmp)

            self.assertEqual(target.read_text(encoding="utf-8"), '<p class="ms-[start-4]">\n')
            self.assertEqual(outcome.fixes_applied, 2)
            self.assertEqual(outcome.remaining.issues, [])

    def test_dry_run_leaves_files_alone(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "a.html"
            target.write_text('<p class="pl-2">\n', encoding="utf-8")

            outcome = self._fix(tmp, dry_run=True)

            self.assertEqual(target.read_text(encoding="utf-8"), '<p class="pl-2">\n')
            self.assertEqual(outcome.files_changed, ["a.html"])
            self.assertEqual(outcome.fixes_applied, 1)

    def test_keeps_suppressed_lines_and_line_endings(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "a.html"
            target.write_bytes(b'<p class="pl-2">\r\n<p class="pr-2"> <!-- rtlmirror:ignore -->\r\n')

            self._fix(tmp)

            self.assertEqual(
                target.read_bytes(),
                b'<p class="ps-2">\r\n<p class="pr-2"> <!-- rtlmirror:ignore -->\r\n',
            )

    def test_max_passes_limits_repeated_tokens(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "a.html"
            target.write_text('<p class="pl-2 pl-2">\n', encoding="utf-8")

            outcome = self._fix(tmp, max_passes=1)

            self.assertEqual(target.read_text(encoding="utf-8"), '<p class="ps-2 pl-2">\n')
            self.assertEqual(len(outcome.remaining.issues), 1)


if __name__ == "__main__":
    unittest.main()
