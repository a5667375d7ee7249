"""Tests for the orphan usage diagnostic."""

from check_orphan_usages import main


class TestCheckOrphanUsages:
    def test_reports_orphans(self, project, capsys) -> None:
        project.write_strings('"greeting" = "Hello";\n"farewell" = "Bye";\n')
        project.write_source(
            "View.swift",
            'let a = "greeting".loc()\nlet b = "missing".loc()\n',
        )

        assert main([str(project.root)]) == 1
        out = capsys.readouterr().out
        assert "Found 2 unique localization keys used in code" in out
        assert "en.lproj/Localizable.strings has 2 keys" in out
        assert "  - missing (View.swift:2)" in out
        assert "=== POTENTIALLY UNUSED KEYS ===\n  - farewell" in out

    def test_no_orphans(self, project, capsys) -> None:
        project.write_strings('"greeting" = "Hello";\n')
        project.write_source("View.swift", 'let a = "greeting".loc()\n')

        assert main([str(project.root)]) == 0
        out = capsys.readouterr().out
        assert "Localizable.strings ===\n  None" in out
        assert "POTENTIALLY UNUSED KEYS ===\n  None" in out

    def test_unused_preview_is_truncated(self, project, capsys) -> None:
        project.write_strings("".join(f'"key{i}" = "v";\n' for i in range(25)))

        assert main([str(project.root)]) == 0
        out = capsys.readouterr().out
        assert "  25 keys (showing first 20)" in out
        assert "  - key19" in out
        assert "  - key20" not in out

    def test_missing_strings_file(self, project, capsys) -> None:
        assert main([str(project.root)]) == 1
        assert capsys.readouterr().out == ""
