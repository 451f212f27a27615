"""Tier resolution: address + requested tier -> file path(s)."""

from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Literal, Union

from ..models import TIER_ORDER, CodeAddress, CodeNotFound, RuleFile, Tier, TierNotFound

if TYPE_CHECKING:
    from .loader import CorpusIndex

ALL = "all"
BEST = "best"

TierRequest = Union[Tier, Literal["all", "best"]]


def parse_request(value: "str | Tier") -> TierRequest:
    """Parse `all`, `best` or a tier name."""
    if isinstance(value, Tier):
        return value
    lowered = value.strip().lower()
    if lowered in (ALL, BEST):
        return lowered  # type: ignore[return-value]
    return Tier.parse(lowered)


def best_order(preferred: Tier | None = None, base: Sequence[Tier] = TIER_ORDER) -> tuple[Tier, ...]:
    """Precedence for `best`, with `preferred` moved to the front."""
    if preferred is None:
        return tuple(base)
    return (preferred, *(t for t in base if t is not preferred))


def resolve_files(
    index: "CorpusIndex",
    address: CodeAddress,
    tier: TierRequest,
    order: Sequence[Tier] = TIER_ORDER,
) -> list[RuleFile]:
    """Resolve to RuleFile records.

    Exact tier and `best` return one file; `all` returns every present tier
    in display order.

    Raises:
        CodeNotFound: the address has no files at all
        TierNotFound: the address exists but not in the requested tier
    """
    tiers = index.tiers(address)
    if not tiers:
        raise CodeNotFound(address)

    if tier == ALL:
        return [tiers[t] for t in TIER_ORDER if t in tiers]

    if tier == BEST:
        for candidate in order:
            if candidate in tiers:
                return [tiers[candidate]]
        # order may be partial; fall back to display order
        return [tiers[t] for t in TIER_ORDER if t in tiers][:1]

    found = tiers.get(tier)
    if found is None:
        raise TierNotFound(address, tier)
    return [found]


def resolve(
    index: "CorpusIndex",
    address: CodeAddress,
    tier: TierRequest,
    order: Sequence[Tier] = TIER_ORDER,
) -> Path | list[Path]:
    """Resolve an address to a path (exact tier, `best`) or paths (`all`)."""
    files = resolve_files(index, address, tier, order)
    if tier == ALL:
        return [f.path for f in files]
    return files[0].path
