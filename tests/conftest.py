"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest

from bcs.config import BcsConfig
from bcs.corpus.loader import CorpusIndex, build_index
from bcs.models import CORE_TIERS, Tier

RULET_BODY = """# Script Structure - Rulets

- [BCS0101] Scripts follow the fixed layout order.
- [BCS0102] The shebang is the first line.
"""


def write_file(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def write_tiers(
    directory: Path,
    stem: str,
    title: str,
    tiers: tuple[Tier, ...] = CORE_TIERS,
) -> list[Path]:
    """Write `<stem>.<tier>.md` for each tier with `title` as the heading."""
    return [
        write_file(directory / f"{stem}.{tier.value}.md", f"{title}\n\nThe {tier.value} text.\n")
        for tier in tiers
    ]


def build_sample_corpus(root: Path) -> Path:
    """Create a small, fully valid corpus under `root`.

    BCS00      00-header
    BCS01      01-script-structure (plus a rulet)
    BCS0101    01-layout
    BCS0102    02-shebang
    BCS010201  02-shebang/01-env
    BCS02      02-variables
    BCS0201    01-declarations
    """
    write_tiers(root, "00-header", "# Bash Coding Standard")

    s1 = root / "01-script-structure"
    write_tiers(s1, "00-section", "## Script Structure")
    write_file(s1 / "00-script-structure.rulet.md", RULET_BODY)
    write_tiers(s1, "01-layout", "### Layout (BCS0101)")
    write_tiers(s1, "02-shebang", "### Shebang")
    write_tiers(s1 / "02-shebang", "01-env", "#### Shebang via env")

    s2 = root / "02-variables"
    write_tiers(s2, "00-section", "## Variables")
    write_tiers(s2, "01-declarations", "### Declarations")

    for tier in CORE_TIERS:
        write_file(root / f"BASH-CODING-STANDARD.{tier.value}.md", f"# Bash Coding Standard ({tier.value})\n")
    (root / "BASH-CODING-STANDARD.md").symlink_to("BASH-CODING-STANDARD.abstract.md")

    return root


@pytest.fixture
def corpus_root(tmp_path: Path) -> Path:
    """Path to a freshly built, valid sample corpus."""
    return build_sample_corpus(tmp_path / "data")


@pytest.fixture
def corpus_index(corpus_root: Path) -> CorpusIndex:
    """Index of the sample corpus."""
    return build_index(corpus_root, BcsConfig())
