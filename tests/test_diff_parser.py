"""
Tests for DiffParser

Covers parsing of git unified diffs and the LLM-oriented rendering.
"""

import pytest
from unidiff import PatchSet

from gitai.diff_parser import DiffParser, parse_diff, format_diff_for_llm, transform_diff_for_llm
from gitai.models import DiffChange, DiffHunk, ParsedFileDiff


def _changes_of(diff_text: str):
    return parse_diff(diff_text)[0].hunks[0].changes


class TestParseDiff:

    def test_simple_modification(self, simple_modification):
        result = parse_diff(simple_modification)

        assert len(result) == 1
        file_diff = result[0]
        assert file_diff.file_path == "src/helper.ts"
        assert file_diff.status == "modified"
        assert file_diff.old_path is None
        assert len(file_diff.hunks) == 1

        hunk = file_diff.hunks[0]
        assert (hunk.old_start, hunk.old_lines, hunk.new_start, hunk.new_lines) == (10, 7, 10, 7)
        assert hunk.changes == [
            DiffChange("context", "export function helper() {", 10),
            DiffChange("remove", '  return "old";', 11),
            DiffChange("add", '  return "new";', 11),
            DiffChange("context", "}", 12),
        ]

    def test_counters_advance_independently(self):
        diff = "\n".join([
            "diff --git a/f.txt b/f.txt",
            "--- a/f.txt",
            "+++ b/f.txt",
            "@@ -5,4 +7,5 @@ section",
            " a",
            "-b",
            "+c",
            "+d",
            " e",
        ])

        changes = _changes_of(diff)

        assert [(c.type, c.line_number) for c in changes] == [
            ("context", 7),
            ("remove", 6),
            ("add", 8),
            ("add", 9),
            ("context", 10),
        ]

    def test_line_numbers_are_monotonic_per_counter(self, multi_file_diff, simple_modification):
        for diff_text in (multi_file_diff, simple_modification):
            for file_diff in parse_diff(diff_text):
                for hunk in file_diff.hunks:
                    old = [c.line_number for c in hunk.changes if c.type == "remove"]
                    new = [c.line_number for c in hunk.changes if c.type != "remove"]
                    assert old == sorted(old)
                    assert new == sorted(new)

    def test_omitted_counts_default_to_one(self):
        diff = "\n".join([
            "diff --git a/one.txt b/one.txt",
            "--- a/one.txt",
            "+++ b/one.txt",
            "@@ -3 +3 @@",
            "-x",
            "+y",
        ])

        hunk = parse_diff(diff)[0].hunks[0]

        assert (hunk.old_start, hunk.old_lines, hunk.new_start, hunk.new_lines) == (3, 1, 3, 1)

    def test_multiple_hunks(self):
        diff = """diff --git a/src/utils.ts b/src/utils.ts
index abc123..def456 100644
--- a/src/utils.ts
+++ b/src/utils.ts
@@ -5,3 +5,3 @@ const a = 1;
 const b = 2;
-const c = 3;
+const c = 30;
 const d = 4;
@@ -20,3 +20,3 @@ const x = 10;
 const y = 20;
-const z = 30;
+const z = 300;
 const w = 40;"""

        hunks = parse_diff(diff)[0].hunks

        assert [h.old_start for h in hunks] == [5, 20]
        assert hunks[1].changes[0] == DiffChange("context", "const y = 20;", 20)
        assert len(hunks[0].changes) == 4

    def test_added_file(self):
        diff = """diff --git a/src/newFile.ts b/src/newFile.ts
new file mode 100644
index 0000000..abc1234
--- /dev/null
+++ b/src/newFile.ts
@@ -0,0 +1,3 @@
+export const newThing = () => {
+  return "hello";
+};"""

        result = parse_diff(diff)

        assert result[0].file_path == "src/newFile.ts"
        assert result[0].status == "added"
        assert result[0].old_path is None
        adds = [c for c in result[0].hunks[0].changes if c.type == "add"]
        assert [c.line_number for c in adds] == [1, 2, 3]

    def test_deleted_file(self):
        diff = """diff --git a/src/oldFile.ts b/src/oldFile.ts
deleted file mode 100644
index abc1234..0000000
--- a/src/oldFile.ts
+++ /dev/null
@@ -1,3 +0,0 @@
-export const oldThing = () => {
-  return "goodbye";
-};"""

        result = parse_diff(diff)

        assert result[0].file_path == "src/oldFile.ts"
        assert result[0].status == "deleted"
        assert result[0].old_path is None
        removes = [c for c in result[0].hunks[0].changes if c.type == "remove"]
        assert [c.line_number for c in removes] == [1, 2, 3]

    def test_renamed_file(self):
        diff = """diff --git a/src/oldName.ts b/src/newName.ts
similarity index 95%
rename from src/oldName.ts
rename to src/newName.ts
index abc123..def456 100644
--- a/src/oldName.ts
+++ b/src/newName.ts
@@ -1,3 +1,3 @@
 export const thing = () => {
-  return "old";
+  return "new";
 };"""

        result = parse_diff(diff)

        assert result[0].file_path == "src/newName.ts"
        assert result[0].status == "renamed"
        assert result[0].old_path == "src/oldName.ts"

    def test_binary_file_is_skipped(self):
        diff = """diff --git a/image.png b/image.png
new file mode 100644
index 0000000..abc1234
Binary files /dev/null and b/image.png differ
"""

        assert parse_diff(diff) == []

    def test_binary_file_does_not_hide_its_neighbours(self):
        diff = """diff --git a/image.png b/image.png
index 1111111..2222222 100644
Binary files a/image.png and b/image.png differ
diff --git a/README.md b/README.md
--- a/README.md
+++ b/README.md
@@ -1 +1 @@
-Old
+New"""

        result = parse_diff(diff)

        assert [f.file_path for f in result] == ["README.md"]

    def test_chunk_without_paths_is_dropped(self):
        diff = """diff --git a/run.sh b/run.sh
old mode 100644
new mode 100755
"""

        assert parse_diff(diff) == []

    @pytest.mark.parametrize("raw", ["", "   ", "\n\n"])
    def test_empty_input(self, raw):
        assert parse_diff(raw) == []

    def test_multiple_files_keep_order(self, multi_file_diff):
        result = parse_diff(multi_file_diff)

        assert [f.file_path for f in result] == ["src/a.ts", "src/b.ts"]

    def test_separator_inside_content_does_not_split(self):
        diff = "\n".join([
            "diff --git a/notes.md b/notes.md",
            "--- a/notes.md",
            "+++ b/notes.md",
            "@@ -1,2 +1,2 @@",
            " see diff --git a/x b/x",
            "-old",
            "+new",
        ])

        result = parse_diff(diff)

        assert len(result) == 1
        assert result[0].hunks[0].changes[0].content == "see diff --git a/x b/x"

    def test_lines_before_first_hunk_are_ignored(self, simple_modification):
        changes = parse_diff(simple_modification)[0].hunks[0].changes

        assert all("index" not in c.content and "src/helper.ts" not in c.content for c in changes)

    def test_unknown_lines_are_ignored(self):
        diff = "\n".join([
            "diff --git a/f.c b/f.c",
            "--- a/f.c",
            "+++ b/f.c",
            "@@ -1,1 +1,2 @@",
            "-int x;",
            "\\ No newline at end of file",
            "+int x = 1;",
            "+int y;",
        ])

        changes = _changes_of(diff)

        assert changes == [
            DiffChange("remove", "int x;", 1),
            DiffChange("add", "int x = 1;", 1),
            DiffChange("add", "int y;", 2),
        ]

    def test_empty_line_counts_as_context(self):
        diff = "\n".join([
            "diff --git a/f.py b/f.py",
            "--- a/f.py",
            "+++ b/f.py",
            "@@ -1,3 +1,3 @@",
            "-a = 1",
            "+a = 2",
            "",
            " b = 3",
        ])

        changes = _changes_of(diff)

        assert changes[2] == DiffChange("context", "", 2)
        assert changes[3] == DiffChange("context", "b = 3", 3)

    def test_trailing_newline_becomes_blank_context_line(self, simple_modification):
        changes = _changes_of(simple_modification + "\n")

        assert changes[-1] == DiffChange("context", "", 13)

    def test_line_numbers_match_unidiff(self):
        diff = "\n".join([
            "diff --git a/app.py b/app.py",
            "index 1111111..2222222 100644",
            "--- a/app.py",
            "+++ b/app.py",
            "@@ -1,5 +1,6 @@",
            " import os",
            "-import sys",
            "+import json",
            "+import logging",
            " ",
            " def run():",
            "-    return sys.argv",
            "+    return json.dumps(dict(os.environ))",
            "@@ -20,2 +21,4 @@ def helper():",
            "     pass",
            "+",
            "+# end",
            " x = 1",
        ]) + "\n"
        type_names = {"+": "add", "-": "remove", " ": "context"}

        expected = []
        for hunk in PatchSet(diff)[0]:
            for line in hunk:
                number = line.source_line_no if line.line_type == "-" else line.target_line_no
                expected.append((type_names[line.line_type], line.value.rstrip("\n"), number))

        actual = [
            (c.type, c.content, c.line_number)
            for hunk in parse_diff(diff.rstrip("\n"))[0].hunks
            for c in hunk.changes
        ]

        assert actual == expected


class TestFormatDiffForLLM:

    def test_simple_modification_exact_output(self, simple_modification):
        expected = "\n".join([
            "=== FILE: src/helper.ts (modified) ===",
            "",
            "~~~ CONTEXT (line 10) ~~~",
            "export function helper() {",
            "",
            "--- REMOVED (line 11) ---",
            '  return "old";',
            "",
            "+++ ADDED (line 11) +++",
            '  return "new";',
            "",
            "~~~ CONTEXT (line 12) ~~~",
            "}",
            "",
            "=== END FILE ===",
        ])

        assert transform_diff_for_llm(simple_modification) == expected

    def test_single_file_has_one_header_and_footer(self, simple_modification):
        result = transform_diff_for_llm(simple_modification)

        assert result.count("=== FILE:") == 1
        assert result.count("=== END FILE ===") == 1

    def test_renamed_file_label(self):
        parsed = [ParsedFileDiff("src/newName.ts", "src/oldName.ts", "renamed", [])]

        result = format_diff_for_llm(parsed)

        assert result == (
            "=== FILE: src/newName.ts (renamed from src/oldName.ts) ===\n\n\n\n=== END FILE ==="
        )

    def test_added_file_range(self):
        parsed = [
            ParsedFileDiff("src/newFile.ts", None, "added", [
                DiffHunk(0, 0, 1, 2, [
                    DiffChange("add", "export const x = 1;", 1),
                    DiffChange("add", "export const y = 2;", 2),
                ]),
            ]),
        ]

        result = format_diff_for_llm(parsed)

        assert "=== FILE: src/newFile.ts (added) ===" in result
        assert "+++ ADDED (lines 1-2) +++\nexport const x = 1;\nexport const y = 2;" in result

    def test_consecutive_changes_are_grouped(self):
        parsed = [
            ParsedFileDiff("test.ts", None, "modified", [
                DiffHunk(1, 5, 1, 5, [
                    DiffChange("remove", "line 1", 1),
                    DiffChange("remove", "line 2", 2),
                    DiffChange("add", "new line 1", 1),
                    DiffChange("add", "new line 2", 2),
                    DiffChange("context", "unchanged", 3),
                ]),
            ]),
        ]

        result = format_diff_for_llm(parsed)

        assert result.count("--- REMOVED") == 1
        assert result.count("+++ ADDED") == 1
        assert "--- REMOVED (lines 1-2) ---\nline 1\nline 2" in result
        assert "+++ ADDED (lines 1-2) +++\nnew line 1\nnew line 2" in result
        assert "~~~ CONTEXT (line 3) ~~~\nunchanged" in result

    def test_groups_ignore_line_gaps(self):
        hunk = DiffHunk(1, 10, 1, 8, [
            DiffChange("remove", "a", 3),
            DiffChange("remove", "b", 10),
        ])

        assert DiffParser._format_hunk(hunk) == "--- REMOVED (lines 3-10) ---\na\nb"

    def test_same_first_and_last_line_uses_singular_label(self):
        hunk = DiffHunk(1, 1, 5, 2, [
            DiffChange("add", "a", 5),
            DiffChange("add", "b", 5),
        ])

        assert DiffParser._format_hunk(hunk) == "+++ ADDED (line 5) +++\na\nb"

    def test_hunks_are_separated_by_blank_line(self):
        parsed = [
            ParsedFileDiff("x.py", None, "modified", [
                DiffHunk(1, 1, 1, 1, [DiffChange("add", "one", 1)]),
                DiffHunk(9, 1, 9, 1, [DiffChange("add", "two", 9)]),
            ]),
        ]

        result = format_diff_for_llm(parsed)

        assert "+++ ADDED (line 1) +++\none\n\n+++ ADDED (line 9) +++\ntwo" in result

    def test_files_keep_order(self, multi_file_diff):
        result = transform_diff_for_llm(multi_file_diff)

        assert result.index("=== FILE: src/a.ts") < result.index("=== FILE: src/b.ts")
        assert "=== END FILE ===\n\n=== FILE: src/b.ts (modified) ===" in result

    def test_empty_input(self):
        assert format_diff_for_llm([]) == ""
        assert transform_diff_for_llm("") == ""

    def test_unparseable_diff_gives_empty_string(self):
        assert transform_diff_for_llm("diff --git a/x b/x\nBinary files a/x and b/x differ\n") == ""
