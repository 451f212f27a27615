from __future__ import annotations

from pathlib import Path

import pytest

from bcs.config import BcsConfig, load_config, parse_config
from bcs.corpus.tiers import (
    DefaultTierError,
    available_tiers,
    default_link,
    get_default_tier,
    preferred_order,
    set_default_tier,
)
from bcs.models import TIER_ORDER, InvalidTier, Tier
from conftest import write_file


def test_defaults_without_config_file(tmp_path: Path) -> None:
    config = load_config(tmp_path, environ={})
    assert config == BcsConfig()
    assert config.size_limit(Tier.SUMMARY) == 10000
    assert config.size_limit(Tier.ABSTRACT) == 1500
    assert config.size_limit(Tier.COMPLETE) is None


def test_config_file(tmp_path: Path) -> None:
    write_file(
        tmp_path / "bcs.toml",
        """
default_tier = "summary"
best_order = ["abstract", "complete"]
require_header = false
exclude_dirs = ["templates", "drafts"]

[limits]
summary = 8000
abstract = 1200
""",
    )

    config = load_config(tmp_path, environ={})

    assert config.default_tier is Tier.SUMMARY
    assert config.best_order == (Tier.ABSTRACT, Tier.COMPLETE, Tier.SUMMARY, Tier.RULET)
    assert config.summary_limit == 8000
    assert config.abstract_limit == 1200
    assert config.require_header is False
    assert config.exclude_dirs == frozenset({"templates", "drafts"})


def test_env_overrides_config_file(tmp_path: Path) -> None:
    write_file(tmp_path / "bcs.toml", 'default_tier = "summary"\n')
    config = load_config(tmp_path, environ={"BCS_DEFAULT_TIER": "complete"})
    assert config.default_tier is Tier.COMPLETE


def test_invalid_values_are_rejected() -> None:
    with pytest.raises(InvalidTier):
        parse_config({"default_tier": "huge"})
    with pytest.raises(ValueError):
        parse_config({"best_order": ["complete", "complete"]})
    with pytest.raises(ValueError):
        parse_config({"limits": {"summary": 0}})


def test_default_tier_from_symlink(corpus_root: Path) -> None:
    assert get_default_tier(corpus_root) is Tier.ABSTRACT
    assert get_default_tier(corpus_root, BcsConfig(default_tier=Tier.SUMMARY)) is Tier.SUMMARY


def test_default_tier_fallback(tmp_path: Path) -> None:
    assert get_default_tier(tmp_path) is Tier.ABSTRACT


def test_set_default_tier(corpus_root: Path) -> None:
    link = set_default_tier(corpus_root, Tier.COMPLETE)

    assert link == default_link(corpus_root)
    assert link.is_symlink()
    assert link.resolve().name == "BASH-CODING-STANDARD.complete.md"
    assert get_default_tier(corpus_root) is Tier.COMPLETE
    assert not list(corpus_root.glob(".*.tmp"))


def test_set_default_tier_needs_document(corpus_root: Path) -> None:
    with pytest.raises(DefaultTierError):
        set_default_tier(corpus_root, Tier.RULET)
    assert get_default_tier(corpus_root) is Tier.ABSTRACT


def test_set_default_tier_refuses_regular_file(corpus_root: Path) -> None:
    link = default_link(corpus_root)
    link.unlink()
    write_file(link, "# not a link\n")
    with pytest.raises(DefaultTierError):
        set_default_tier(corpus_root, Tier.SUMMARY)


def test_available_tiers(corpus_root: Path) -> None:
    assert available_tiers(corpus_root) == [t for t in TIER_ORDER if t is not Tier.RULET]


def test_preferred_order_puts_default_first(corpus_root: Path) -> None:
    assert preferred_order(corpus_root, BcsConfig())[0] is Tier.ABSTRACT
