"""
Text helpers shared by the XML report writer.

Everything here is a pure function: escaping for attributes and element
bodies, sanitizing captured output for CDATA, rendering failure diffs and
deriving the ``classname`` attribute of a test case.
"""

import difflib
import json
import os
import posixpath
import re
from datetime import datetime, timezone
from email.utils import format_datetime
from pathlib import Path, PurePath
from typing import Any, Iterable, List, Optional
from xml.sax.saxutils import escape as _sax_escape

from ..config import ReporterOptions
from ..runners.runner import FailureDetail, Runnable

_ENTITIES = {'"': "&quot;", "'": "&#39;"}

# Control characters, C1 range, BOM-like code points and surrogates.
# A well-formed pair never reaches us as two code points in a str, so any
# surrogate left is a lone half.
_INVALID_XML = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f\ufeff\ufffe\uffff\ud800-\udfff]")

NO_NEWLINE = "\\ No newline at end of file"


def escape(text: Any) -> str:
    """Escape ``& < > " '`` so the value is safe in attributes and bodies."""
    return _sax_escape(str(text), _ENTITIES)


def strip_invalid_xml_chars(text: str) -> str:
    return _INVALID_XML.sub("", text)


def xml_text(value: Any) -> str:
    """Strip characters XML cannot carry, then escape."""
    return escape(strip_invalid_xml_chars(str(value)))


def cdata_text(entry: str) -> str:
    """Render one captured log line for a ``<![CDATA[`` section."""
    text = strip_invalid_xml_chars(entry + "\n")
    return text.replace("]]>", "]]]]><![CDATA[>")


def _split_lines(text: str) -> List[str]:
    parts = text.split("\n")
    lines = [p + "\n" for p in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def create_patch(name: str, old: str, new: str) -> str:
    """Build a unified patch with an ``Index:`` preamble.

    The first four lines are always the ``Index``, separator, ``---`` and
    ``+++`` header. A line that lacks a trailing newline is followed by a
    ``\\ No newline at end of file`` marker.
    """
    lines = [f"Index: {name}", "=" * 67]
    diff = list(difflib.unified_diff(_split_lines(old), _split_lines(new), name, name))
    if not diff:
        # difflib emits no header at all for identical inputs
        diff = [f"--- {name}\n", f"+++ {name}\n"]
    for line in diff:
        if line.endswith("\n"):
            lines.append(line[:-1])
        else:
            lines.extend([line, NO_NEWLINE])
    return "\n".join(lines) + "\n"


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    # Mixed-type keys cannot be sorted; circular data cannot be serialized at all.
    for sort_keys in (True, False):
        try:
            return json.dumps(value, indent=2, sort_keys=sort_keys, default=repr)
        except (TypeError, ValueError):
            continue
    return repr(value)


def _escape_invisibles(line: str) -> str:
    return line.replace("\t", "<tab>").replace("\r", "<CR>").replace("\n", "<LF>\n")


def _clean_up(lines: Iterable[str]) -> List[str]:
    out = []
    for line in lines:
        if "@@" in line or line.startswith("\\ No newline"):
            continue
        out.append(_escape_invisibles(line))
    return out


def unified_diff(err: Optional[FailureDetail], include_stack: bool = False) -> str:
    """Failure body: actual/expected diff, then the stack when enabled."""
    if err is None:
        return ""
    msg = ""
    if err.actual is not None and err.expected is not None:
        patch = create_patch("string", _stringify(err.actual), _stringify(err.expected))
        msg += "\n".join(_clean_up(patch.rstrip("\n").split("\n")[4:]))
    if include_stack and err.stack:
        if msg:
            msg += "\n"
        msg += "\n".join(_clean_up(err.stack.rstrip("\n").split("\n")[1:]))
    return msg


def _relative_path(test: Runnable, options: ReporterOptions, cwd: Optional[str]) -> str:
    root = Path(cwd or os.getcwd()) / options.test_root_dir
    return PurePath(os.path.relpath(test.file, root)).as_posix()


def class_name(test: Runnable, suite_title: str, options: ReporterOptions,
               cwd: Optional[str] = None) -> str:
    """Derive the ``classname`` attribute; sonar naming wins over packages."""
    if not test.file:
        return suite_title
    if options.sonar_naming:
        return posixpath.splitext(_relative_path(test, options, cwd))[0]
    if options.package_naming:
        package = posixpath.dirname(_relative_path(test, options, cwd)).replace("/", ".")
        return f"{package}.{suite_title}" if package else suite_title
    return suite_title


def seconds(ms: int) -> str:
    return f"{ms / 1000:.3f}"


def utc_timestamp(dt: datetime) -> str:
    """RFC 1123 style, e.g. ``Mon, 19 Oct 2026 06:03:00 GMT``."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return format_datetime(dt.astimezone(timezone.utc), usegmt=True)
