"""Read and write .env files."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

_LINE_RE = re.compile(r"^(?:export\s+)?([A-Za-z_][A-Za-z0-9_]*)\s*=\s*(.*)$")


class ParseError(ValueError):
    """A single line could not be parsed."""


@dataclass
class ParseResult:
    """Values read from an env file plus any problems found.

    Attributes:
        values: Parsed variables in file order (last duplicate wins).
        issues: Structural errors; a non-empty list means the file is invalid.
        warnings: Suspicious but usable entries.
    """

    values: Dict[str, str] = field(default_factory=dict)
    issues: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.issues


_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", '"': '"', "\\": "\\"}


def _closing_quote(value: str) -> int:
    """Index of the quote that closes ``value[0]``, or -1."""
    if value[0] == "'":
        return value.find("'", 1)
    i = 1
    while i < len(value):
        if value[i] == "\\":
            i += 2
        elif value[i] == '"':
            return i
        else:
            i += 1
    return -1


def _unescape(text: str) -> str:
    out = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\" and i + 1 < len(text):
            # unknown escapes are kept as written
            out.append(_ESCAPES.get(text[i + 1], text[i : i + 2]))
            i += 2
        else:
            out.append(ch)
            i += 1
    return "".join(out)


def _unquote(value: str) -> str:
    kind = "double" if value[0] == '"' else "single"
    if _closing_quote(value) != len(value) - 1:
        raise ParseError(f"unterminated {kind}-quoted value")
    inner = value[1:-1]
    return _unescape(inner) if kind == "double" else inner


def parse_line(line: str) -> Optional[Tuple[str, str]]:
    """Parse a single line from an env file.

    Args:
        line: Line to parse.

    Returns:
        Tuple of (key, value) or None for blank lines and comments.

    Raises:
        ParseError: If the line is not a KEY=VALUE assignment.
    """
    line = line.strip()

    if not line or line.startswith("#"):
        return None

    match = _LINE_RE.match(line)
    if not match:
        raise ParseError("expected KEY=VALUE")

    key, value = match.groups()
    if value[:1] in ('"', "'"):
        # drop a trailing comment after the closing quote
        closing = _closing_quote(value)
        if closing > 0:
            rest = value[closing + 1 :].strip()
            if rest and not rest.startswith("#"):
                raise ParseError("unexpected text after quoted value")
            value = value[: closing + 1]
        return key, _unquote(value)

    # unquoted values may carry an inline comment
    comment = value.find(" #")
    if comment >= 0:
        value = value[:comment]
    return key, value.strip()


def parse_stream(lines: Iterable[str]) -> ParseResult:
    """Parse env file lines, collecting every issue instead of stopping."""
    result = ParseResult()
    seen: Dict[str, int] = {}
    for line_num, line in enumerate(lines, 1):
        try:
            parsed = parse_line(line)
        except ParseError as e:
            result.issues.append(f"line {line_num}: {e}")
            continue
        if parsed is None:
            continue
        key, value = parsed
        if key in seen:
            result.warnings.append(
                f"line {line_num}: {key} overrides the value from line {seen[key]}"
            )
            # keep the first position, take the last value
        elif value == "":
            result.warnings.append(f"line {line_num}: {key} has an empty value")
        seen[key] = line_num
        result.values[key] = value
    return result


def read_env_file(path: Union[str, Path]) -> ParseResult:
    with open(path, "r", encoding="utf-8") as f:
        return parse_stream(f)


def format_value(value: str) -> str:
    """Quote a value when writing it would otherwise be ambiguous."""
    needs_quotes = value != value.strip() or any(
        ch in value for ch in (" ", "\n", "\r", "\t", "#", '"', "'")
    )
    if not needs_quotes:
        return value
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )
    return f'"{escaped}"'


def write_env_file(
    path: Union[str, Path],
    values: Mapping[str, str],
    header: Optional[str] = None,
    sort_keys: bool = False,
) -> Path:
    """Write variables to an env file, replacing its contents.

    Args:
        path: Destination file.
        values: Variables to write.
        header: Optional comment placed at the top of the file.
        sort_keys: Write keys in alphabetical order instead of given order.

    Returns:
        Path that was written.
    """
    path = Path(path)
    keys = sorted(values) if sort_keys else list(values)
    lines = []
    if header:
        lines.extend(f"# {h}".rstrip() for h in header.splitlines())
        lines.append("")
    lines.extend(f"{k}={format_value(values[k])}" for k in keys)
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path
