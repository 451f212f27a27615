"""Search command implementation - grep across tier files."""

from pathlib import Path

from rich.console import Console
from rich.markup import escape

from ..config import BcsConfig
from ..corpus.loader import build_index
from ..corpus.query import SearchHit, search
from ..models import InvalidPattern, InvalidTier, Tier
from .decode import EXIT_NOT_FOUND, EXIT_OK, EXIT_USAGE, display_path

GROUP_SEPARATOR = "--"


def run_search(
    data_dir: Path,
    config: BcsConfig,
    pattern: str,
    ignore_case: bool = False,
    context: int = 0,
    tier: str | None = None,
    fixed: bool = False,
    relative: bool = False,
) -> int:
    """Search rule files for a pattern.

    Output is `path:line:text` per hit. With context, surrounding lines use
    `path-line-text`; overlapping or adjacent windows form one block and
    blocks are separated by `--`.

    Returns:
        Exit code (0 = matches, 1 = no matches, 2 = bad pattern or tier)
    """
    console = Console(stderr=True)

    try:
        tier_filter = Tier.parse(tier) if tier else None
    except InvalidTier as e:
        console.print(f"Error: {escape(str(e))}", style="bold red")
        return EXIT_USAGE

    index = build_index(data_dir, config)

    try:
        hits = list(search(index, pattern, ignore_case=ignore_case, context=context, tier=tier_filter, fixed=fixed))
    except InvalidPattern as e:
        console.print(f"Error: {escape(str(e))}", style="bold red")
        return EXIT_USAGE

    if not hits:
        console.print("No matches", style="yellow")
        return EXIT_NOT_FOUND

    for i, (path, lines) in enumerate(_merge_blocks(hits)):
        if context > 0 and i > 0:
            print(GROUP_SEPARATOR)
        shown = display_path(path, data_dir, relative=relative)
        for lineno, (sep, text) in lines.items():
            print(f"{shown}{sep}{lineno}{sep}{text}")

    return EXIT_OK


def _merge_blocks(hits: list[SearchHit]) -> list[tuple[Path, dict[int, tuple[str, str]]]]:
    """Group hits into grep-style blocks, joining windows that overlap or touch.

    Each block maps line number to (separator, text); matched lines use `:`
    and context lines `-`.
    """
    blocks: list[tuple[Path, dict[int, tuple[str, str]]]] = []
    last_end = 0
    for hit in hits:
        start = hit.before[0][0] if hit.before else hit.line_number
        end = hit.after[-1][0] if hit.after else hit.line_number
        if blocks and blocks[-1][0] == hit.path and start <= last_end + 1:
            lines = blocks[-1][1]
        else:
            lines = {}
            blocks.append((hit.path, lines))
        for lineno, text in hit.before:
            lines.setdefault(lineno, ("-", text))
        lines[hit.line_number] = (":", hit.line)
        for lineno, text in hit.after:
            lines.setdefault(lineno, ("-", text))
        last_end = end
    return blocks
