"""BCS code grammar and markdown helpers for rule documents."""

import re

import frontmatter
import yaml

from ..models import CODE_PREFIX, CodeAddress, MalformedCode

# Code digits grouped as section / rule / subrule
VALID_CODE_LENGTHS = (2, 4, 6)

# A code-looking token: BCS followed by at least one digit, then anything word-like
CODE_TOKEN_PATTERN = re.compile(r"\bBCS[0-9][0-9A-Za-z]*\b")

# Bracketed rulet marker: [BCS0102]
RULET_MARKER_PATTERN = re.compile(r"\[(BCS[^\]\s]*)\]")

HEADING_PATTERN = re.compile(r"^(#{1,6})\s+(.+?)\s*#*\s*$")


def parse_code(token: str) -> CodeAddress:
    """Parse a BCS code into an address.

    Accepts `BCS0102`, `0102`, `BCS010201`, `BCS01`. The prefix is optional and
    case-sensitive; digit groups must be zero-padded. A rule of `00` without a
    subrule addresses the section itself (`BCS0100` == `BCS01`).

    Raises:
        MalformedCode: if the token does not follow the grammar
    """
    digits = token[len(CODE_PREFIX):] if token.startswith(CODE_PREFIX) else token

    if not digits:
        raise MalformedCode(token, "no digits")
    if not (digits.isascii() and digits.isdigit()):
        raise MalformedCode(token, "only decimal digits are allowed")
    if len(digits) not in VALID_CODE_LENGTHS:
        raise MalformedCode(token, "expected 2, 4 or 6 zero-padded digits")

    section = int(digits[0:2])
    rule = int(digits[2:4]) if len(digits) >= 4 else None
    subrule = int(digits[4:6]) if len(digits) == 6 else None

    if rule == 0 and subrule is None:
        rule = None
    if rule == 0 and subrule is not None:
        raise MalformedCode(token, "subrule of rule 00")

    return CodeAddress(section, rule, subrule)


def format_code(address: CodeAddress, prefix: bool = True) -> str:
    """Inverse of parse_code."""
    return address.code if prefix else address.digits


def read_body(text: str) -> str:
    """Strip YAML front matter, if any.

    Malformed front matter is treated as plain content.
    """
    try:
        return frontmatter.loads(text).content
    except yaml.YAMLError:
        return text


def extract_title(content: str) -> str | None:
    """Return the text of the first markdown heading, or None."""
    line = title_line(content)
    if line is None:
        return None
    match = HEADING_PATTERN.match(line)
    return match.group(2).strip() if match else None


def title_line(content: str) -> str | None:
    """Return the first heading line (raw), skipping front matter and fenced code."""
    in_fence = False
    for line in read_body(content).splitlines():
        stripped = line.strip()
        if stripped.startswith("```") or stripped.startswith("~~~"):
            in_fence = not in_fence
            continue
        if not in_fence and HEADING_PATTERN.match(stripped):
            return stripped
    return None


def extract_self_code(content: str) -> str | None:
    """Return the code token carried on a document's title line, if any."""
    line = title_line(content)
    if line is None:
        return None
    match = CODE_TOKEN_PATTERN.search(line)
    return match.group(0) if match else None


def extract_rulet_markers(content: str) -> list[tuple[int, str]]:
    """Extract `[BCS....]` markers with their 1-based line numbers."""
    result = []
    for lineno, line in enumerate(content.splitlines(), start=1):
        for match in RULET_MARKER_PATTERN.finditer(line):
            result.append((lineno, match.group(1)))
    return result
