"""Default command implementation - show, list or set the default tier."""

from pathlib import Path

from rich.console import Console
from rich.markup import escape

from ..config import BcsConfig
from ..corpus.tiers import (
    DefaultTierError,
    available_tiers,
    default_link,
    get_default_tier,
    set_default_tier,
)
from ..models import TIER_ORDER, InvalidTier, Tier
from .decode import EXIT_NOT_FOUND, EXIT_OK, EXIT_USAGE


def run_default(
    data_dir: Path,
    config: BcsConfig,
    tier: str | None = None,
    list_tiers: bool = False,
    show_file: bool = False,
) -> int:
    """Show or change the default tier.

    Args:
        data_dir: Corpus root
        config: Effective configuration (BCS_DEFAULT_TIER already applied)
        tier: New default tier; None shows the current one
        list_tiers: List tiers, marking the current default with `*`
        show_file: Print the path of the default consolidated document

    Returns:
        Exit code (0 = success, 1 = target document missing, 2 = invalid tier)
    """
    console = Console(stderr=True)

    if tier is not None:
        try:
            new_tier = Tier.parse(tier)
        except InvalidTier as e:
            console.print(f"Error: {escape(str(e))}", style="bold red")
            return EXIT_USAGE
        try:
            link = set_default_tier(data_dir, new_tier)
        except DefaultTierError as e:
            console.print(f"Error: {escape(str(e))}", style="bold red")
            return EXIT_NOT_FOUND
        console.print(f"Default tier set to {new_tier.value}", style="green")
        if config.default_tier is not None and config.default_tier is not new_tier:
            console.print(
                f"[yellow]Note:[/] config/env still selects {config.default_tier.value}; "
                f"{link.name} was updated anyway.",
                style="dim",
            )
        return EXIT_OK

    current = get_default_tier(data_dir, config)

    if list_tiers:
        present = set(available_tiers(data_dir))
        for t in TIER_ORDER:
            marker = "*" if t is current else " "
            suffix = "" if t in present else " (missing)"
            print(f"{marker} {t.value}{suffix}")
        return EXIT_OK

    if show_file:
        link = default_link(data_dir)
        if not link.exists():
            console.print(f"Error: {link} does not exist", style="bold red")
            return EXIT_NOT_FOUND
        print(link.resolve())
        return EXIT_OK

    print(current.value)
    return EXIT_OK
