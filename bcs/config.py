from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Mapping

from .models import TIER_ORDER, Tier

CONFIG_FILENAME = "bcs.toml"

DEFAULT_TIER_ENV = "BCS_DEFAULT_TIER"
DATA_DIR_ENV = "BCS_DATA_DIR"


@dataclass(frozen=True)
class BcsConfig:
    """Settings for one invocation; passed explicitly, never global."""

    default_tier: Tier | None = None  # None: follow the BASH-CODING-STANDARD.md symlink
    best_order: tuple[Tier, ...] = TIER_ORDER
    summary_limit: int = 10000
    abstract_limit: int = 1500
    require_header: bool = True
    exclude_dirs: frozenset[str] = field(default_factory=lambda: frozenset({"templates"}))

    def size_limit(self, tier: Tier) -> int | None:
        if tier is Tier.SUMMARY:
            return self.summary_limit
        if tier is Tier.ABSTRACT:
            return self.abstract_limit
        return None


def _coerce_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _positive_int(data: Mapping[str, Any], key: str, default: int) -> int:
    value = int(data.get(key, default))
    if value <= 0:
        raise ValueError(f"{key} must be a positive integer")
    return value


def parse_config(data: Mapping[str, Any]) -> BcsConfig:
    """
    Build a BcsConfig from a parsed TOML mapping.

    Unknown keys are ignored; known keys are validated.
    """
    base = BcsConfig()

    raw_tier = data.get("default_tier")
    default_tier = Tier.parse(raw_tier) if raw_tier else base.default_tier

    order_raw = data.get("best_order")
    if isinstance(order_raw, list) and order_raw:
        best_order = tuple(Tier.parse(t) for t in order_raw)
        if len(set(best_order)) != len(best_order):
            raise ValueError("best_order must not repeat a tier")
        # Tiers left out still resolve, just last
        best_order += tuple(t for t in TIER_ORDER if t not in best_order)
    else:
        best_order = base.best_order

    limits = _coerce_dict(data.get("limits"))
    summary_limit = _positive_int(limits, "summary", base.summary_limit)
    abstract_limit = _positive_int(limits, "abstract", base.abstract_limit)

    exclude = data.get("exclude_dirs")
    exclude_dirs = (
        frozenset(str(d).strip() for d in exclude if str(d).strip())
        if isinstance(exclude, list)
        else base.exclude_dirs
    )

    return BcsConfig(
        default_tier=default_tier,
        best_order=best_order,
        summary_limit=summary_limit,
        abstract_limit=abstract_limit,
        require_header=bool(data.get("require_header", base.require_header)),
        exclude_dirs=exclude_dirs,
    )


def load_config(data_dir: Path, environ: Mapping[str, str] | None = None) -> BcsConfig:
    """Load `bcs.toml` from the corpus root (if present), then apply env overrides."""
    import tomllib

    config_path = data_dir / CONFIG_FILENAME
    if config_path.is_file():
        config = parse_config(tomllib.loads(config_path.read_text(encoding="utf-8")))
    else:
        config = BcsConfig()

    env = os.environ if environ is None else environ
    env_tier = env.get(DEFAULT_TIER_ENV, "").strip()
    if env_tier:
        config = replace(config, default_tier=Tier.parse(env_tier))

    return config
