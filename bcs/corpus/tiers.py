"""Default tier selection via the BASH-CODING-STANDARD.md symlink."""

import logging
import os
import re
from pathlib import Path

from ..config import BcsConfig
from ..models import TIER_ORDER, BcsError, Tier
from .loader import CONSOLIDATED_STEM
from .resolver import best_order

logger = logging.getLogger(__name__)

DEFAULT_LINK_NAME = f"{CONSOLIDATED_STEM}.md"

# Used when neither config nor symlink name a tier
FALLBACK_TIER = Tier.ABSTRACT

CONSOLIDATED_PATTERN = re.compile(
    rf"^{re.escape(CONSOLIDATED_STEM)}\.(complete|summary|abstract|rulet)\.md$"
)


class DefaultTierError(BcsError):
    """The default tier cannot be changed."""


def consolidated_path(root: Path, tier: Tier) -> Path:
    return root / f"{CONSOLIDATED_STEM}.{tier.value}.md"


def default_link(root: Path) -> Path:
    return root / DEFAULT_LINK_NAME


def tier_from_name(name: str) -> Tier | None:
    match = CONSOLIDATED_PATTERN.match(Path(name).name)
    return Tier(match.group(1)) if match else None


def linked_tier(root: Path) -> Tier | None:
    """Tier the default symlink currently points at, if it is a symlink."""
    link = default_link(root)
    if not link.is_symlink():
        return None
    return tier_from_name(os.readlink(link))


def get_default_tier(root: Path, config: BcsConfig | None = None) -> Tier:
    """Effective default tier: config/env override, then symlink, then abstract."""
    if config is not None and config.default_tier is not None:
        return config.default_tier
    return linked_tier(root) or FALLBACK_TIER


def available_tiers(root: Path) -> list[Tier]:
    """Tiers that have a consolidated document at the corpus root."""
    return [t for t in TIER_ORDER if consolidated_path(root, t).is_file()]


def set_default_tier(root: Path, tier: Tier) -> Path:
    """Repoint BASH-CODING-STANDARD.md at the consolidated document for `tier`.

    Raises:
        DefaultTierError: if the target document is missing or the link is a
            regular file
    """
    target = consolidated_path(root, tier)
    if not target.is_file():
        raise DefaultTierError(f"Cannot set default tier: {target.name} does not exist")

    link = default_link(root)
    if link.exists() and not link.is_symlink():
        raise DefaultTierError(f"{link} is a regular file, not a symlink; refusing to replace it")

    tmp = link.with_name(f".{link.name}.tmp")
    if tmp.is_symlink() or tmp.exists():
        tmp.unlink()
    tmp.symlink_to(target.name)
    os.replace(tmp, link)

    logger.info("Default tier set to %s (%s -> %s)", tier.value, link.name, target.name)
    return link


def preferred_order(root: Path, config: BcsConfig) -> tuple[Tier, ...]:
    """Best-tier precedence for CLI lookups: the default tier first."""
    return best_order(get_default_tier(root, config), config.best_order)
