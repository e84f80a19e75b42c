"""Tests for unified diff parsing. Comments get anchored to the line numbers checked here."""

from hunkwise_core.diff import parse_diff

ADDED_FILE = """\
diff --git a/a.ts b/a.ts
new file mode 100644
index 0000000..e69de29
--- /dev/null
+++ b/a.ts
@@ -0,0 +1,3 @@
+const a = 1;
+let b = 2;
+b++;
"""

MODIFIED_FILE = "\n".join(
    [
        "diff --git a/src/app.py b/src/app.py",
        "index 83db48f..bf269f4 100644",
        "--- a/src/app.py",
        "+++ b/src/app.py",
        "@@ -1,4 +1,4 @@ def main():",
        " import os",
        "-import sys",
        "+import json",
        " ",
        ' print("hi")',
        "@@ -10,3 +10,4 @@",
        " a = 1",
        " b = 2",
        "+c = 3",
        " d = 4",
        "",
    ]
)

DELETED_FILE = """\
diff --git a/old.py b/old.py
deleted file mode 100644
index 1234567..0000000
--- a/old.py
+++ /dev/null
@@ -1,2 +0,0 @@
-x = 1
-y = 2
"""

BINARY_FILE = """\
diff --git a/logo.png b/logo.png
index 1234567..89abcde 100644
Binary files a/logo.png and b/logo.png differ
"""


def test_empty_diff_yields_no_files():
    assert parse_diff("") == []
    assert parse_diff("   \n") == []
    assert parse_diff(None) == []


def test_files_and_chunk_counts_in_source_order():
    files = parse_diff(ADDED_FILE + MODIFIED_FILE + DELETED_FILE)
    assert [f.target_path for f in files] == ["a.ts", "src/app.py", None]
    assert [len(f.chunks) for f in files] == [1, 2, 1]


def test_added_lines_carry_new_line_numbers_only():
    (file,) = parse_diff(ADDED_FILE)
    changes = file.chunks[0].changes
    assert [c.content for c in changes] == ["+const a = 1;", "+let b = 2;", "+b++;"]
    assert [c.new_line_number for c in changes] == [1, 2, 3]
    assert all(c.old_line_number is None for c in changes)


def test_hunk_header_keeps_ranges_and_section():
    (file,) = parse_diff(MODIFIED_FILE)
    assert file.chunks[0].header == "@@ -1,4 +1,4 @@ def main():"
    assert file.chunks[1].header == "@@ -10,3 +10,4 @@"


def test_raw_content_starts_with_header():
    (file,) = parse_diff(MODIFIED_FILE)
    assert file.chunks[1].raw_content.startswith("@@ -10,3 +10,4 @@\n")
    assert "+c = 3" in file.chunks[1].raw_content


def test_resolved_line_numbers_prefer_new_file():
    (file,) = parse_diff(MODIFIED_FILE)
    first = file.chunks[0].changes
    # " import os" → 1, "-import sys" → old 2, "+import json" → new 2
    assert [(c.content, c.line_number) for c in first[:3]] == [
        (" import os", 1),
        ("-import sys", 2),
        ("+import json", 2),
    ]
    removed = first[1]
    assert removed.new_line_number is None
    assert removed.old_line_number == 2

    second = file.chunks[1].changes
    assert [c.line_number for c in second] == [10, 11, 12, 13]
    # context line after the insertion: old 12, new 13
    assert second[3].old_line_number == 12
    assert second[3].new_line_number == 13


def test_deleted_file_has_no_target_path():
    (file,) = parse_diff(DELETED_FILE)
    assert file.target_path is None
    assert file.is_deleted
    assert [c.line_number for c in file.chunks[0].changes] == [1, 2]


def test_binary_file_has_zero_chunks():
    (file,) = parse_diff(BINARY_FILE)
    assert file.target_path == "logo.png"
    assert file.chunks == ()


def test_no_newline_marker_is_not_a_change():
    diff = ADDED_FILE + "\\ No newline at end of file\n"
    (file,) = parse_diff(diff)
    assert len(file.chunks[0].changes) == 3


def test_orphan_hunk_section_is_skipped():
    """A hunk with no file header before it is dropped; later files still parse."""
    diff = "@@ -1 +1 @@\n-a\n+b\n" + ADDED_FILE
    files = parse_diff(diff)
    assert [f.target_path for f in files] == ["a.ts"]


def test_truncated_hunk_does_not_raise():
    truncated = """\
diff --git a/bad.py b/bad.py
--- a/bad.py
+++ b/bad.py
@@ -1,5 +1,5 @@
 only one line
"""
    files = parse_diff(ADDED_FILE + truncated + DELETED_FILE)
    assert [f.target_path for f in files] == ["a.ts", None]


def test_parsed_entities_are_immutable():
    (file,) = parse_diff(ADDED_FILE)
    try:
        file.chunks[0].changes[0].content = "x"
        assert False, "Expected FrozenInstanceError"
    except AttributeError:
        pass
