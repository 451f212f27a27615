"""Read-only queries over a built corpus index.

Every function here takes a CorpusIndex and never touches the filesystem
except to read rule content. Per-token lookup failures are returned as
values so one bad code does not hide the answers for the others.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from ..models import (
    TIER_ORDER,
    BcsError,
    CodeAddress,
    InvalidPattern,
    RuleFile,
    Section,
    Tier,
)
from .loader import CorpusIndex
from .parser import CODE_TOKEN_PATTERN, extract_title, format_code, parse_code
from .resolver import ALL, BEST, TierRequest, resolve_files

CONTENT_SEPARATOR = "\n---\n\n"

_LEADING_NUMBER = re.compile(r"^\d+(?:\.\d+)*[.)]?\s+")
_CODE_DECORATION = re.compile(r"\s*[\[(]?" + CODE_TOKEN_PATTERN.pattern + r"[\])]?:?\s*")


@dataclass(frozen=True)
class Decoded:
    """Outcome of decoding one token."""

    token: str
    address: CodeAddress | None = None
    files: tuple[RuleFile, ...] = ()
    error: BcsError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def paths(self) -> list[Path]:
        return [f.path for f in self.files]


@dataclass(frozen=True)
class DecodedContent:
    token: str
    address: CodeAddress | None = None
    file: RuleFile | None = None
    content: str | None = None
    error: BcsError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class CodeListing:
    address: CodeAddress
    tiers: tuple[Tier, ...]
    file: RuleFile  # best available tier, used for names and titles


@dataclass(frozen=True)
class SearchHit:
    path: Path
    line_number: int
    line: str
    before: tuple[tuple[int, str], ...] = ()
    after: tuple[tuple[int, str], ...] = ()


@dataclass(frozen=True)
class FileInfo:
    tier: Tier
    path: Path
    basename: str
    size_bytes: int
    lines: int
    modified: datetime
    title: str | None

    def to_dict(self) -> dict:
        return {
            "tier": self.tier.value,
            "file": str(self.path),
            "basename": self.basename,
            "size_bytes": self.size_bytes,
            "lines": self.lines,
            "modified": self.modified.isoformat(timespec="seconds"),
            "title": self.title,
        }


def _decode_one(
    index: CorpusIndex,
    token: str,
    tier: TierRequest,
    order: Sequence[Tier],
) -> Decoded:
    try:
        address = parse_code(token)
    except BcsError as e:
        return Decoded(token=token, error=e)
    try:
        files = resolve_files(index, address, tier, order)
    except BcsError as e:
        return Decoded(token=token, address=address, error=e)
    return Decoded(token=token, address=address, files=tuple(files))


def decode_to_path(
    index: CorpusIndex,
    tokens: Iterable[str],
    tier: TierRequest = BEST,
    all_tiers: bool = False,
    order: Sequence[Tier] = TIER_ORDER,
) -> list[Decoded]:
    """Decode codes to file paths, one result per token, input order preserved."""
    request = ALL if all_tiers else tier
    return [_decode_one(index, token, request, order) for token in tokens]


def decode_to_content(
    index: CorpusIndex,
    tokens: Iterable[str],
    tier: TierRequest = BEST,
    all_tiers: bool = False,
    order: Sequence[Tier] = TIER_ORDER,
) -> list[DecodedContent]:
    """Decode codes and read the resolved file content.

    With `all_tiers` a token yields one record per available tier file,
    otherwise only the first resolved file is read.
    """
    results = []
    for decoded in decode_to_path(index, tokens, tier, all_tiers=all_tiers, order=order):
        if not decoded.ok:
            results.append(
                DecodedContent(token=decoded.token, address=decoded.address, error=decoded.error)
            )
            continue
        files = decoded.files if all_tiers else decoded.files[:1]
        for rule_file in files:
            results.append(
                DecodedContent(
                    token=decoded.token,
                    address=decoded.address,
                    file=rule_file,
                    content=rule_file.read_text(errors="replace"),
                )
            )
    return results


def content_heading(result: DecodedContent) -> str:
    """`Complete tier (BCS0102)` style heading for one content record."""
    return f"{result.file.tier.label} tier ({format_code(result.address)})"


def join_contents(results: Sequence[DecodedContent], headings: bool = False) -> str:
    """Join successful contents, separated visibly when there is more than one."""
    contents = []
    for r in results:
        if not r.ok or r.content is None:
            continue
        body = r.content.rstrip("\n") + "\n"
        contents.append(f"{content_heading(r)}\n\n{body}" if headings else body)
    if len(results) <= 1:
        return "".join(contents)
    return CONTENT_SEPARATOR.join(contents)


def list_codes(index: CorpusIndex, order: Sequence[Tier] = TIER_ORDER) -> Iterator[CodeListing]:
    """Yield every known address in ascending order with its tier availability.

    Recomputed from the index on each call.
    """
    for address in index.addresses():
        tiers = index.tiers(address)
        present = tuple(t for t in TIER_ORDER if t in tiers)
        best = next(t for t in (*order, *TIER_ORDER) if t in tiers)
        yield CodeListing(address=address, tiers=present, file=tiers[best])


def clean_title(title: str) -> str:
    """Drop leading numbering and embedded code markers from a heading."""
    title = _CODE_DECORATION.sub(" ", title).strip()
    title = _LEADING_NUMBER.sub("", title)
    return title.strip(" -:")


def rule_title(rule_file: RuleFile) -> str:
    """Human title of a rule file; falls back to its file name."""
    try:
        title = extract_title(rule_file.read_text())
    except (OSError, UnicodeDecodeError):
        title = None
    if title:
        cleaned = clean_title(title)
        if cleaned:
            return cleaned
    return rule_file.short_name.replace("-", " ").title()


def list_sections(index: CorpusIndex, order: Sequence[Tier] = TIER_ORDER) -> list[Section]:
    """List numbered sections, derived from section-level tier files.

    The header (BCS00) is not a section.
    """
    sections = []
    for listing in list_codes(index, order):
        address = listing.address
        if address.level != "section" or address.section == 0:
            continue
        sections.append(
            Section(
                number=address.section,
                title=rule_title(listing.file),
                path=listing.file.path,
                directory=listing.file.section_name,
            )
        )
    return sections


def decode_path(index: CorpusIndex, path: Path) -> CodeAddress | None:
    """Reverse lookup: file path to address."""
    address = index.by_path.get(path)
    if address is not None:
        return address

    resolved = {p.resolve(): a for p, a in index.by_path.items()}
    for candidate in (path, index.root / path):
        address = resolved.get(candidate.resolve())
        if address is not None:
            return address
    return None


def search(
    index: CorpusIndex,
    pattern: str,
    ignore_case: bool = False,
    context: int = 0,
    tier: Tier | None = None,
    fixed: bool = False,
) -> Iterator[SearchHit]:
    """Scan tier file contents for a regex (or fixed string).

    Files are visited in address order, tiers in display order.

    Raises:
        InvalidPattern: if the pattern is not a valid regular expression
    """
    flags = re.IGNORECASE if ignore_case else 0
    try:
        regex = re.compile(re.escape(pattern) if fixed else pattern, flags)
    except re.error as e:
        raise InvalidPattern(f"Invalid search pattern '{pattern}': {e}") from e

    context = max(context, 0)
    for address in index.addresses():
        tiers = index.tiers(address)
        for t in TIER_ORDER:
            if t not in tiers or (tier is not None and t is not tier):
                continue
            rule_file = tiers[t]
            lines = rule_file.read_text(errors="replace").splitlines()
            for i, line in enumerate(lines):
                if not regex.search(line):
                    continue
                start = max(0, i - context)
                stop = min(len(lines), i + context + 1)
                yield SearchHit(
                    path=rule_file.path,
                    line_number=i + 1,
                    line=line,
                    before=tuple((n + 1, lines[n]) for n in range(start, i)),
                    after=tuple((n + 1, lines[n]) for n in range(i + 1, stop)),
                )


def file_info(rule_file: RuleFile) -> FileInfo:
    """Metadata for one tier file."""
    stat = rule_file.path.stat()
    text = rule_file.read_text(errors="replace")
    return FileInfo(
        tier=rule_file.tier,
        path=rule_file.path,
        basename=rule_file.path.name,
        size_bytes=stat.st_size,
        lines=text.count("\n"),
        modified=datetime.fromtimestamp(stat.st_mtime),
        title=extract_title(text),
    )
