"""Listing commands - every code, or the numbered sections."""

from pathlib import Path

from rich.console import Console

from ..config import BcsConfig
from ..corpus.loader import build_index
from ..corpus.query import CodeListing, list_codes, list_sections, rule_title
from ..corpus.tiers import preferred_order
from ..models import strip_number_prefix


def listing_short_name(listing: CodeListing) -> str:
    """Short name for a code: section directory for sections, file name otherwise."""
    rule_file = listing.file
    if listing.address.level == "section" and rule_file.section_name:
        return strip_number_prefix(rule_file.section_name)
    return rule_file.short_name


def run_codes(data_dir: Path, config: BcsConfig) -> int:
    """Print `BCS{code}:{shortname}:{title}` for every code, ascending.

    Returns:
        Exit code (0 = success, 1 = corpus has no codes)
    """
    console = Console(stderr=True)

    index = build_index(data_dir, config)
    count = 0
    for listing in list_codes(index, preferred_order(data_dir, config)):
        print(f"{listing.address.code}:{listing_short_name(listing)}:{rule_title(listing.file)}")
        count += 1

    if count == 0:
        console.print(f"No BCS codes found under {data_dir}", style="yellow")
        return 1
    return 0


def run_sections(data_dir: Path, config: BcsConfig) -> int:
    """Print `N. Title` for each numbered section."""
    console = Console(stderr=True)

    index = build_index(data_dir, config)
    sections = list_sections(index, preferred_order(data_dir, config))
    if not sections:
        console.print(f"No sections found under {data_dir}", style="yellow")
        return 1

    for section in sections:
        print(f"{section.number}. {section.title}")
    return 0
