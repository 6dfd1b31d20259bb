"""Tests for parsing fix records and extracting updated code."""

import pytest

from fixloop.agents.fix_parser import extract_fixed_code, normalize_fix_path, parse_fix_records


class TestParseFixRecords:
    def test_two_records_with_joined_end_and_path_tags(self):
        analysis = (
            "<<<FILE_PATH>>>tests/test1.rs\n<<<FIX_START>>>\nlet code1 = \"test\";\n"
            "<<<FIX_END>>><<<FILE_PATH>>>tests/test2.rs\n<<<FIX_START>>>\n"
            "let code2 = \"test\";\n<<<FIX_END>>>"
        )
        records = parse_fix_records(analysis)

        assert [(r.file_path, r.patch_body, r.is_complete) for r in records] == [
            ("tests/test1.rs", 'let code1 = "test";', True),
            ("tests/test2.rs", 'let code2 = "test";', True),
        ]

    def test_joined_tags_parse_like_separate_lines(self):
        joined = "<<<FILE_PATH>>>a.py\n<<<FIX_START>>>\nx\n<<<FIX_END>>><<<FILE_PATH>>>b.py\n<<<FIX_START>>>\ny\n<<<FIX_END>>>"
        separate = joined.replace("<<<FIX_END>>><<<FILE_PATH>>>", "<<<FIX_END>>>\n<<<FILE_PATH>>>")
        assert parse_fix_records(joined) == parse_fix_records(separate)

    def test_records_are_returned_in_source_order(self):
        analysis = "\n".join(
            f"<<<FILE_PATH>>>src/mod{i}.py\n<<<FIX_START>>>\nline{i}\n<<<FIX_END>>>" for i in range(5)
        )
        records = parse_fix_records(analysis)
        assert [r.file_path for r in records] == [f"src/mod{i}.py" for i in range(5)]
        assert [r.patch_body for r in records] == [f"line{i}" for i in range(5)]

    def test_body_lines_are_trimmed_and_concatenated(self):
        analysis = "<<<FILE_PATH>>>a.py\n<<<FIX_START>>>\n  def f():\n      return 1\n<<<FIX_END>>>"
        (record,) = parse_fix_records(analysis)
        assert record.patch_body == "def f():return 1"

    def test_missing_end_tag_drops_the_record(self):
        analysis = "<<<FILE_PATH>>>a.py\n<<<FIX_START>>>\nx = 1\n"
        assert parse_fix_records(analysis) == []

    def test_new_path_abandons_open_record(self):
        analysis = (
            "<<<FILE_PATH>>>a.py\n<<<FIX_START>>>\nunfinished\n"
            "<<<FILE_PATH>>>b.py\n<<<FIX_START>>>\nfinished\n<<<FIX_END>>>"
        )
        records = parse_fix_records(analysis)
        assert [(r.file_path, r.patch_body) for r in records] == [("b.py", "finished")]

    def test_commentary_outside_records_is_ignored(self):
        analysis = (
            "The test fails because of an off-by-one.\n"
            "<<<FILE_PATH>>>a.py\n<<<FIX_START>>>\nfixed\n<<<FIX_END>>>\n"
            "That should do it.\n"
        )
        (record,) = parse_fix_records(analysis)
        assert record.patch_body == "fixed"

    def test_start_tag_discards_text_before_it(self):
        analysis = "<<<FILE_PATH>>>a.py\npreamble\n<<<FIX_START>>>\nbody\n<<<FIX_END>>>"
        (record,) = parse_fix_records(analysis)
        assert record.patch_body == "body"

    def test_empty_body_is_kept(self):
        (record,) = parse_fix_records("<<<FILE_PATH>>>a.py\n<<<FIX_START>>>\n<<<FIX_END>>>")
        assert record.patch_body == ""
        assert record.is_complete

    def test_duplicate_paths_are_all_kept(self):
        analysis = (
            "<<<FILE_PATH>>>a.py\n<<<FIX_START>>>\none\n<<<FIX_END>>>\n"
            "<<<FILE_PATH>>>a.py\n<<<FIX_START>>>\ntwo\n<<<FIX_END>>>"
        )
        assert [r.patch_body for r in parse_fix_records(analysis)] == ["one", "two"]

    def test_empty_path_is_dropped(self):
        analysis = "<<<FILE_PATH>>>\n<<<FIX_START>>>\nx\n<<<FIX_END>>>"
        assert parse_fix_records(analysis) == []

    def test_leading_separator_is_stripped(self):
        analysis = "<<<FILE_PATH>>>/tests/test1.rs\n<<<FIX_START>>>\nx\n<<<FIX_END>>>"
        (record,) = parse_fix_records(analysis)
        assert record.file_path == "tests/test1.rs"

    def test_windows_line_endings(self):
        analysis = "<<<FILE_PATH>>>a.py\r\n<<<FIX_START>>>\r\nx = 1\r\n<<<FIX_END>>>\r\n"
        (record,) = parse_fix_records(analysis)
        assert (record.file_path, record.patch_body) == ("a.py", "x = 1")

    def test_no_tags_yields_nothing(self):
        assert parse_fix_records("Just an explanation, no fixes.") == []


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("/tests/test1.rs", "tests/test1.rs"),
        ("\\src\\app.py", "src\\app.py"),
        ("  src/app.py  ", "src/app.py"),
        ("//etc/passwd", "etc/passwd"),
        ("src/app.py", "src/app.py"),
    ],
)
def test_normalize_fix_path(raw, expected):
    assert normalize_fix_path(raw) == expected


class TestExtractFixedCode:
    def test_extracts_trimmed_content(self):
        text = "prefix\n<updated-code>\nconst a = 1;\n</updated-code>\nsuffix"
        assert extract_fixed_code(text) == "const a = 1;"

    def test_missing_start_tag(self):
        assert extract_fixed_code("const a = 1;\n</updated-code>") is None

    def test_missing_end_tag(self):
        assert extract_fixed_code("<updated-code>\nconst a = 1;") is None

    def test_end_before_start(self):
        assert extract_fixed_code("</updated-code> x <updated-code>") is None

    def test_plain_text_has_no_match(self):
        assert extract_fixed_code("I would not change anything here.") is None

    def test_interior_whitespace_is_preserved(self):
        body = "def f():\n    return 1\n\n\ndef g():\n    return 2"
        text = f"Sure!<updated-code>\n\n{body}\n  </updated-code>Done."
        assert extract_fixed_code(text) == body
