"""Decode command implementation - BCS codes to files or content."""

from pathlib import Path

from rich.console import Console
from rich.markup import escape

from ..config import BcsConfig
from ..corpus.loader import build_index
from ..corpus.query import decode_to_content, decode_to_path, join_contents
from ..corpus.resolver import BEST, best_order, parse_request
from ..corpus.tiers import preferred_order
from ..models import BcsError, InvalidTier, MalformedCode, Tier

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_USAGE = 2


def error_exit_code(error: BcsError) -> int:
    """Malformed input is a usage error; a well-formed miss is not found."""
    if isinstance(error, (MalformedCode, InvalidTier)):
        return EXIT_USAGE
    return EXIT_NOT_FOUND


def display_path(path: Path, root: Path, relative: bool = False, basename: bool = False) -> str:
    if basename:
        return path.name
    if relative:
        try:
            return str(path.relative_to(root))
        except ValueError:
            return str(path)
    return str(path)


def run_decode(
    data_dir: Path,
    config: BcsConfig,
    codes: tuple[str, ...],
    tier: str | None = None,
    all_tiers: bool = False,
    print_content: bool = False,
    exists: bool = False,
    relative: bool = False,
    basename: bool = False,
) -> int:
    """Resolve BCS codes to tier files.

    Args:
        data_dir: Corpus root
        config: Effective configuration
        codes: Codes to decode, in output order
        tier: Exact tier name, or None for the best available tier
        all_tiers: List every available tier as `Tier: path`, or with
            print_content show each tier under a `Complete tier (BCS0102)` heading
        print_content: Print file content instead of paths
        exists: Print nothing; only report through the exit code
        relative: Print paths relative to the corpus root
        basename: Print file names only

    Returns:
        Exit code (0 = all found, 1 = some not found, 2 = malformed input)
    """
    console = Console(stderr=True)

    try:
        request = parse_request(tier) if tier else BEST
    except InvalidTier as e:
        console.print(f"Error: {escape(str(e))}", style="bold red")
        return EXIT_USAGE

    index = build_index(data_dir, config)
    order = preferred_order(data_dir, config)

    if print_content and not exists:
        return _print_contents(console, index, codes, request, order, all_tiers=all_tiers)

    results = decode_to_path(index, codes, request, all_tiers=all_tiers, order=order)
    exit_code = EXIT_OK

    for result in results:
        if not result.ok:
            exit_code = max(exit_code, error_exit_code(result.error))
            if not exists:
                console.print(f"Error: {escape(str(result.error))}", style="bold red")
            continue
        if exists:
            continue

        if all_tiers:
            if len(results) > 1:
                print(f"{result.address.code}:")
            for rule_file in result.files:
                print(f"{rule_file.tier.label}: {display_path(rule_file.path, data_dir, relative, basename)}")
        else:
            print(display_path(result.files[0].path, data_dir, relative, basename))

    return exit_code


def _print_contents(console: Console, index, codes, request, order, all_tiers: bool = False) -> int:
    exit_code = EXIT_OK
    results = decode_to_content(index, codes, request, all_tiers=all_tiers, order=order)

    for result in results:
        if not result.ok:
            exit_code = max(exit_code, error_exit_code(result.error))
            console.print(f"Error: {escape(str(result.error))}", style="bold red")

    output = join_contents(results, headings=all_tiers)
    if output:
        print(output, end="")
    return exit_code


def run_explain(
    data_dir: Path,
    config: BcsConfig,
    codes: tuple[str, ...],
    tier: str | None = None,
) -> int:
    """Print rule content, preferring the complete tier unless one is given."""
    console = Console(stderr=True)

    try:
        request = parse_request(tier) if tier else BEST
    except InvalidTier as e:
        console.print(f"Error: {escape(str(e))}", style="bold red")
        return EXIT_USAGE

    index = build_index(data_dir, config)
    order = best_order(Tier.COMPLETE, config.best_order)
    return _print_contents(console, index, codes, request, order)
