from datetime import datetime, timezone
from pathlib import Path
from xml.etree import ElementTree as ET
from xml.sax.saxutils import unescape

import pytest

from junit_testkit.config import ReporterOptions
from junit_testkit.reporters.formatting import (
    NO_NEWLINE,
    cdata_text,
    class_name,
    create_patch,
    escape,
    seconds,
    strip_invalid_xml_chars,
    unified_diff,
    utc_timestamp,
    xml_text,
)
from junit_testkit.runners.runner import FailureDetail, Test


def test_escape_replaces_markup_characters() -> None:
    assert escape('<a href="x">Tom & Jerry\'s</a>') == (
        "&lt;a href=&quot;x&quot;&gt;Tom &amp; Jerry&#39;s&lt;/a&gt;"
    )


def test_escape_leaves_safe_text_alone() -> None:
    assert escape("plain ascii 123") == "plain ascii 123"
    assert escape(escape("plain ascii 123")) == "plain ascii 123"


def test_escape_coerces_non_strings() -> None:
    assert escape(42) == "42"


@pytest.mark.parametrize("text", ["&", "<>", "\"'", "a & b < c > d \" e ' f", "&amp;", "&quot;"])
def test_escape_round_trips(text: str) -> None:
    assert unescape(escape(text), {"&quot;": '"', "&#39;": "'"}) == text


def test_strip_invalid_xml_chars() -> None:
    dirty = "a\x00b\x1fc\ufeffd\ud800e\x85f\tg\nh\ri"
    assert strip_invalid_xml_chars(dirty) == "abcdef\tg\nh\ri"


def test_cdata_text_splits_terminator() -> None:
    assert cdata_text("a]]>b") == "a]]]]><![CDATA[>b\n"


def test_cdata_text_stays_well_formed() -> None:
    xml = "<system-out><![CDATA[" + cdata_text("x ]]> y\x01") + "]]></system-out>"
    assert ET.fromstring(xml).text == "x ]]> y\n"


def test_create_patch_has_four_line_header() -> None:
    lines = create_patch("string", "foo", "bar").split("\n")
    assert lines[0] == "Index: string"
    assert set(lines[1]) == {"="}
    assert lines[2] == "--- string"
    assert lines[3] == "+++ string"
    assert lines[4].startswith("@@")
    assert NO_NEWLINE in lines


def test_create_patch_for_identical_input_is_header_only() -> None:
    assert create_patch("string", "same", "same").rstrip("\n").split("\n")[2:] == [
        "--- string",
        "+++ string",
    ]


def test_unified_diff_drops_markers() -> None:
    body = unified_diff(FailureDetail(actual="foo", expected="bar"))
    assert body == "-foo\n+bar"
    assert "@@" not in body
    assert "No newline" not in body


def test_unified_diff_serializes_non_strings() -> None:
    assert unified_diff(FailureDetail(actual=3, expected=2)) == "-3\n+2"
    assert unified_diff(FailureDetail(actual=0, expected=1)) == "-0\n+1"
    body = unified_diff(FailureDetail(actual={"a": 1}, expected={"a": 2}))
    assert '-  "a": 1' in body
    assert '+  "a": 2' in body


def test_unified_diff_makes_whitespace_visible() -> None:
    body = unified_diff(FailureDetail(actual="a\nb\tc\n", expected="a\nb c\n"))
    assert body == " a\n-b<tab>c\n+b c"
    assert unified_diff(FailureDetail(actual="x\r", expected="x")) == "-x<CR>\n+x"


def test_unified_diff_without_values_is_empty() -> None:
    assert unified_diff(FailureDetail(message="boom")) == ""
    assert unified_diff(FailureDetail(actual="x")) == ""
    assert unified_diff(None) == ""


def test_unified_diff_appends_stack_when_enabled() -> None:
    err = FailureDetail(message="boom", stack="Error: boom\n  at one\n  at two\n")
    assert unified_diff(err) == ""
    assert unified_diff(err, include_stack=True) == "  at one\n  at two"

    err.actual, err.expected = "foo", "bar"
    assert unified_diff(err, include_stack=True) == "-foo\n+bar\n  at one\n  at two"


def _test_in(tmp_path: Path, relative: str) -> Test:
    return Test("adds", file=str(tmp_path / relative))


def test_class_name_defaults_to_suite_title(tmp_path: Path) -> None:
    test = _test_in(tmp_path, "unit/math/add.test")
    assert class_name(test, "Math", ReporterOptions(), cwd=str(tmp_path)) == "Math"


def test_class_name_package_mode(tmp_path: Path) -> None:
    options = ReporterOptions(package_naming=True, test_root_dir="unit")
    test = _test_in(tmp_path, "unit/math/add.test")
    assert class_name(test, "Math", options, cwd=str(tmp_path)) == "math.Math"

    nested = _test_in(tmp_path, "unit/math/ops/add.test")
    assert class_name(nested, "Math", options, cwd=str(tmp_path)) == "math.ops.Math"

    top_level = _test_in(tmp_path, "unit/add.test")
    assert class_name(top_level, "Math", options, cwd=str(tmp_path)) == "Math"


def test_class_name_path_mode_wins(tmp_path: Path) -> None:
    options = ReporterOptions(sonar_naming=True, package_naming=True, test_root_dir="unit")
    test = _test_in(tmp_path, "unit/math/add.test.py")
    assert class_name(test, "Math", options, cwd=str(tmp_path)) == "math/add.test"


def test_class_name_without_file_uses_suite_title() -> None:
    options = ReporterOptions(sonar_naming=True)
    assert class_name(Test("adds"), "Math", options) == "Math"


def test_seconds() -> None:
    assert seconds(5) == "0.005"
    assert seconds(1234) == "1.234"
    assert seconds(0) == "0.000"


def test_utc_timestamp() -> None:
    aware = datetime(2026, 10, 19, 6, 3, 0, tzinfo=timezone.utc)
    assert utc_timestamp(aware) == "Mon, 19 Oct 2026 06:03:00 GMT"
    assert utc_timestamp(aware.replace(tzinfo=None)) == "Mon, 19 Oct 2026 06:03:00 GMT"


def test_unified_diff_handles_unsortable_keys() -> None:
    body = unified_diff(FailureDetail(actual={1: "a", "b": 2}, expected={1: "a", "b": 3}))
    assert '-  "b": 2' in body
    assert '+  "b": 3' in body


def test_unified_diff_handles_circular_values() -> None:
    looped = [1]
    looped.append(looped)
    body = unified_diff(FailureDetail(actual=looped, expected=[1, 2]))
    assert "-[1, [...]]" in body
    assert "+" in body


def test_xml_text_strips_then_escapes() -> None:
    assert xml_text("\x1b[31mred & <bold>\x1b[0m") == "[31mred &amp; &lt;bold&gt;[0m"
