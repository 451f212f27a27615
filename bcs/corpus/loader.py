"""Corpus scanning and index construction."""

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path

from ..config import BcsConfig
from ..models import (
    CodeAddress,
    CorpusRootNotFound,
    RuleFile,
    Tier,
    ValidationViolation,
    ViolationKind,
)

logger = logging.getLogger(__name__)

# Consolidated documents (BASH-CODING-STANDARD.<tier>.md) sit at the root
CONSOLIDATED_STEM = "BASH-CODING-STANDARD"

HEADER_SLUG = "header"

STRICT_FILE_PATTERN = re.compile(r"^[0-9]{2}-[a-z0-9-]+\.(complete|summary|abstract|rulet)\.md$")
STRICT_DIR_PATTERN = re.compile(r"^[0-9]{2}-[a-z0-9-]+$")

# Tolerant forms: unpadded numbers, underscores, any case. Indexed, but flagged later.
TOLERANT_FILE_PATTERN = re.compile(
    r"^(?P<num>[0-9]{1,2})[-_](?P<slug>[A-Za-z0-9][A-Za-z0-9_-]*)"
    r"\.(?P<tier>complete|summary|abstract|rulet)\.md$",
    re.IGNORECASE,
)
TOLERANT_DIR_PATTERN = re.compile(r"^(?P<num>[0-9]{1,2})[-_](?P<slug>[A-Za-z0-9][A-Za-z0-9_-]*)$")


@dataclass
class CorpusIndex:
    """Everything known about one corpus, built by a single walk."""

    root: Path
    by_address: dict[CodeAddress, dict[Tier, RuleFile]] = field(default_factory=dict)
    by_path: dict[Path, CodeAddress] = field(default_factory=dict)
    all_addresses: set[CodeAddress] = field(default_factory=set)

    # Every indexed file, duplicates included, in scan order
    files: list[RuleFile] = field(default_factory=list)
    # Top-level numbered directories
    section_dirs: list[Path] = field(default_factory=list)
    # Every numbered directory at any depth
    directories: list[Path] = field(default_factory=list)
    # BadNaming / DuplicateCode found while scanning
    scan_violations: list[ValidationViolation] = field(default_factory=list)

    _files_by_path: dict[Path, RuleFile] = field(default_factory=dict, repr=False)

    def add(self, rule_file: RuleFile) -> bool:
        """Index a file. Returns False if its (address, tier) was already taken."""
        self.files.append(rule_file)
        self.by_path[rule_file.path] = rule_file.address
        self._files_by_path[rule_file.path] = rule_file
        self.all_addresses.add(rule_file.address)

        tiers = self.by_address.setdefault(rule_file.address, {})
        if rule_file.tier in tiers:
            return False
        tiers[rule_file.tier] = rule_file
        return True

    def get(self, address: CodeAddress, tier: Tier) -> RuleFile | None:
        return self.by_address.get(address, {}).get(tier)

    def tiers(self, address: CodeAddress) -> dict[Tier, RuleFile]:
        """Tier files present for an address (empty if unknown)."""
        return dict(self.by_address.get(address, {}))

    def file_for_path(self, path: Path) -> RuleFile | None:
        return self._files_by_path.get(path)

    def addresses(self) -> list[CodeAddress]:
        """All addresses in ascending (section, rule, subrule) order."""
        return sorted(self.all_addresses, key=lambda a: a.sort_key)

    def relative(self, path: Path) -> Path:
        try:
            return path.relative_to(self.root)
        except ValueError:
            return path

    def __contains__(self, address: object) -> bool:
        return address in self.all_addresses

    def __len__(self) -> int:
        return len(self.files)


def is_consolidated(name: str) -> bool:
    return name.startswith(CONSOLIDATED_STEM) and name.endswith(".md")


def derive_address(rel: Path) -> tuple[CodeAddress, Tier]:
    """Derive the address and tier of a file from its path below the corpus root.

    Layout:
        00-header.<tier>.md                       -> BCS00
        NN-section/00-*.<tier>.md                 -> BCSNN
        NN-section/MM-rule.<tier>.md              -> BCSNNMM
        NN-section/MM-rule/KK-subrule.<tier>.md   -> BCSNNMMKK

    Raises:
        ValueError: if no address can be derived
    """
    *dirs, name = rel.parts

    match = TOLERANT_FILE_PATTERN.match(name)
    if not match:
        raise ValueError("filename does not match NN-name.<tier>.md")
    number = int(match.group("num"))
    tier = Tier(match.group("tier").lower())

    dir_numbers = []
    for part in dirs:
        dir_match = TOLERANT_DIR_PATTERN.match(part)
        if not dir_match:
            raise ValueError(f"directory '{part}' does not match NN-name")
        dir_numbers.append(int(dir_match.group("num")))

    if not dirs:
        if number == 0 and match.group("slug").lower() == HEADER_SLUG:
            return CodeAddress(0), tier
        raise ValueError("only 00-header files may sit at the corpus root")

    if len(dirs) == 1:
        section = dir_numbers[0]
        if number == 0:
            return CodeAddress(section), tier
        return CodeAddress(section, number), tier

    if len(dirs) == 2:
        section, rule = dir_numbers
        if rule == 0:
            raise ValueError("subrule directory cannot use rule number 00")
        if number == 0:
            raise ValueError("subrule files cannot use number 00")
        return CodeAddress(section, rule, number), tier

    raise ValueError("rule files nest at most two directories below a section")


def _is_skipped(rel: Path, config: BcsConfig) -> bool:
    return any(part.startswith(".") or part in config.exclude_dirs for part in rel.parts)


def build_index(root: Path, config: BcsConfig | None = None) -> CorpusIndex:
    """Walk the corpus and build its index.

    Bad files never abort the build; they become scan violations for the
    validator to report.

    Args:
        root: Corpus data directory
        config: Scan settings (excluded directories)

    Returns:
        CorpusIndex with forward/reverse lookups and scan violations

    Raises:
        CorpusRootNotFound: if root is missing or unreadable
    """
    config = config or BcsConfig()

    if not root.is_dir() or not os.access(root, os.R_OK | os.X_OK):
        raise CorpusRootNotFound(root)

    index = CorpusIndex(root=root)
    claimants: dict[tuple[CodeAddress, Tier], list[Path]] = {}

    for path in sorted(root.rglob("*")):
        rel = path.relative_to(root)
        if _is_skipped(rel, config):
            continue

        if path.is_dir():
            if rel.name[:1].isdigit():
                index.directories.append(path)
                if len(rel.parts) == 1:
                    index.section_dirs.append(path)
            continue

        if path.suffix != ".md" or path.name == "README.md":
            continue
        if len(rel.parts) == 1 and is_consolidated(path.name):
            continue

        try:
            address, tier = derive_address(rel)
        except ValueError as e:
            logger.debug("Not indexing %s: %s", rel, e)
            index.scan_violations.append(
                ValidationViolation(
                    kind=ViolationKind.BAD_NAMING,
                    detail=f"{rel}: {e}",
                    path=path,
                )
            )
            continue

        rule_file = RuleFile(
            path=path,
            address=address,
            tier=tier,
            section_name=rel.parts[0] if len(rel.parts) > 1 else "",
            rule_name=path.name.rsplit(".", 2)[0],
        )
        claimants.setdefault((address, tier), []).append(path)
        if index.add(rule_file):
            logger.debug("Indexed %s as %s (%s)", rel, address.code, tier.value)

    for (address, tier), paths in claimants.items():
        if len(paths) < 2:
            continue
        names = ", ".join(str(index.relative(p)) for p in paths)
        index.scan_violations.append(
            ValidationViolation(
                kind=ViolationKind.DUPLICATE_CODE,
                detail=f"{address.code} ({tier.value}) is claimed by {len(paths)} files: {names}",
                path=paths[0],
                related=tuple(paths),
            )
        )

    logger.debug(
        "Indexed %d files, %d addresses, %d sections under %s",
        len(index.files),
        len(index.all_addresses),
        len(index.section_dirs),
        root,
    )
    return index
