"""
Reader and writer for flat ``key=value`` properties files.

Follows the conventional properties syntax: ``#``/``!`` comment lines,
``=``, ``:`` or whitespace as separator, backslash line continuation and
``\\t \\n \\r \\f \\\\ \\uXXXX`` escapes. Files are UTF-8.
"""
import re
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Union

_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
_SEPARATORS = "=:"
_WHITESPACE = " \t\f"
# Only CRLF, CR and LF end a line. str.splitlines would also split on U+2028 or \x85.
_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def _logical_lines(text: str) -> Iterator[str]:
    pending: List[str] = []
    for raw in _LINE_BREAK.split(text):
        line = raw.lstrip(_WHITESPACE)
        if not pending and (not line or line[0] in "#!"):
            continue
        trailing = len(line) - len(line.rstrip("\\"))
        if trailing % 2 == 1:
            pending.append(line[:-1])
            continue
        pending.append(line)
        yield "".join(pending)
        pending = []
    if pending:
        yield "".join(pending)


def _unescape(chunk: str) -> str:
    out: List[str] = []
    i = 0
    while i < len(chunk):
        ch = chunk[i]
        if ch != "\\" or i + 1 >= len(chunk):
            out.append(ch)
            i += 1
            continue
        nxt = chunk[i + 1]
        if nxt == "u" and i + 6 <= len(chunk):
            try:
                out.append(chr(int(chunk[i + 2:i + 6], 16)))
                i += 6
                continue
            except ValueError:
                pass
        out.append(_ESCAPES.get(nxt, nxt))
        i += 2
    return "".join(out)


def _split(line: str):
    i = 0
    while i < len(line):
        ch = line[i]
        if ch == "\\":
            i += 2
            continue
        if ch in _SEPARATORS or ch in _WHITESPACE:
            break
        i += 1
    key = line[:i]
    rest = line[i:].lstrip(_WHITESPACE)
    if rest and rest[0] in _SEPARATORS:
        rest = rest[1:].lstrip(_WHITESPACE)
    return _unescape(key), _unescape(rest)


def loads(text: str) -> Dict[str, str]:
    """Parse properties text into a dict; later duplicates win."""
    properties: Dict[str, str] = {}
    for line in _logical_lines(text):
        key, value = _split(line)
        properties[key] = value
    return properties


def load(path: Union[str, Path]) -> Dict[str, str]:
    with open(path, "r", encoding="utf-8") as f:
        return loads(f.read())


def _escape(chunk: str, is_key: bool) -> str:
    out: List[str] = []
    for index, ch in enumerate(chunk):
        if ch == "\\":
            out.append("\\\\")
        elif ch == "\t":
            out.append("\\t")
        elif ch == "\n":
            out.append("\\n")
        elif ch == "\r":
            out.append("\\r")
        elif ch == "\f":
            out.append("\\f")
        elif ch in "=:#!" and is_key:
            out.append("\\" + ch)
        elif ch == " " and (is_key or index == 0):
            out.append("\\ ")
        else:
            out.append(ch)
    return "".join(out)


def dumps(properties: Mapping[str, str]) -> str:
    lines = [f"{_escape(key, True)}={_escape(str(value), False)}" for key, value in sorted(properties.items())]
    return "\n".join(lines) + ("\n" if lines else "")


def dump(properties: Mapping[str, str], path: Union[str, Path]) -> None:
    with open(path, "w", encoding="utf-8") as f:
        f.write(dumps(properties))
