"""Structural validation rules for the rule corpus."""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..config import BcsConfig
from ..models import (
    CORE_TIERS,
    CodeAddress,
    MalformedCode,
    Tier,
    ValidationViolation,
    ViolationKind,
)
from .loader import STRICT_DIR_PATTERN, STRICT_FILE_PATTERN
from .parser import extract_rulet_markers, extract_self_code, parse_code
from .query import list_sections

if TYPE_CHECKING:
    from .loader import CorpusIndex

logger = logging.getLogger(__name__)

# Kinds that never fail a run
WARNING_KINDS = frozenset({ViolationKind.OVERSIZED_FILE})

HEADER_ADDRESS = CodeAddress(0)


@dataclass
class ValidationReport:
    """Result of one validation run."""

    violations: list[ValidationViolation] = field(default_factory=list)
    warnings: list[ValidationViolation] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.violations

    def by_kind(self) -> dict[ViolationKind, list[ValidationViolation]]:
        grouped: dict[ViolationKind, list[ValidationViolation]] = {}
        for v in self.violations + self.warnings:
            grouped.setdefault(v.kind, []).append(v)
        return grouped


class ValidationRules:
    """Collection of structural checks over a corpus index.

    Each check is independent and returns a (possibly empty) list; nothing
    short-circuits, so one run reports every problem.
    """

    def __init__(self, index: "CorpusIndex", config: BcsConfig | None = None):
        self.index = index
        self.config = config or BcsConfig()

    def run_all(self) -> list[ValidationViolation]:
        """Run all checks and return findings (errors and warnings)."""
        results = []
        results.extend(self.check_tier_completeness())
        results.extend(self.check_code_uniqueness())
        results.extend(self.check_naming())
        results.extend(self.check_section_count())
        results.extend(self.check_code_markers())
        results.extend(self.check_header_files())
        results.extend(self.check_file_sizes())
        return results

    def check_tier_completeness(self) -> list[ValidationViolation]:
        """Every address with any tier file must have complete, summary and abstract.

        Rulet is exempt.
        """
        results = []

        for address in self.index.addresses():
            tiers = self.index.tiers(address)
            present = next(iter(tiers.values()))
            for tier in CORE_TIERS:
                if tier not in tiers:
                    results.append(
                        ValidationViolation(
                            kind=ViolationKind.MISSING_TIER,
                            detail=f"{address.code} is missing its {tier.value} tier",
                            path=present.path,
                        )
                    )

        return results

    def check_code_uniqueness(self) -> list[ValidationViolation]:
        """No two files may claim the same code and tier (detected during the scan)."""
        return [v for v in self.index.scan_violations if v.kind is ViolationKind.DUPLICATE_CODE]

    def check_naming(self) -> list[ValidationViolation]:
        """Check file and directory names against NN-kebab-name[.tier.md].

        Covers unindexable files, tolerated files (unpadded numbers, case,
        underscores) and numbered directories (padding, alphabetic suffixes).
        """
        results = [v for v in self.index.scan_violations if v.kind is ViolationKind.BAD_NAMING]

        for rule_file in self.index.files:
            if not STRICT_FILE_PATTERN.match(rule_file.path.name):
                results.append(
                    ValidationViolation(
                        kind=ViolationKind.BAD_NAMING,
                        detail=(
                            f"{self.index.relative(rule_file.path)}: expected a zero-padded, "
                            "lower-case kebab name (NN-name.<tier>.md)"
                        ),
                        path=rule_file.path,
                    )
                )

        for directory in self.index.directories:
            if not STRICT_DIR_PATTERN.match(directory.name):
                results.append(
                    ValidationViolation(
                        kind=ViolationKind.BAD_NAMING,
                        detail=(
                            f"{self.index.relative(directory)}/: expected a zero-padded, "
                            "lower-case kebab directory name (NN-name), no alphabetic suffix"
                        ),
                        path=directory,
                    )
                )

        return results

    def check_section_count(self) -> list[ValidationViolation]:
        """Section directories on disk must match the sections `bcs sections` lists."""
        sections = list_sections(self.index, self.config.best_order)
        if len(sections) == len(self.index.section_dirs):
            return []

        listed = {s.directory for s in sections}
        unlisted = [d.name for d in self.index.section_dirs if d.name not in listed]
        detail = (
            f"{len(self.index.section_dirs)} section directories but "
            f"{len(sections)} listed sections"
        )
        if unlisted:
            detail += f"; no section-level tier file in: {', '.join(unlisted)}"

        return [
            ValidationViolation(
                kind=ViolationKind.SECTION_COUNT_MISMATCH,
                detail=detail,
                path=self.index.root,
            )
        ]

    def check_code_markers(self) -> list[ValidationViolation]:
        """Embedded code markers must parse and point back at the file itself.

        Core tiers: a BCS code on the title line must equal the file's address.
        Rulet: every [BCS....] marker must parse and belong to the file's section.
        """
        results = []

        for rule_file in self.index.files:
            try:
                content = rule_file.read_text()
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("Skipping marker check for %s: %s", rule_file.path, e)
                continue

            if rule_file.tier is Tier.RULET:
                results.extend(self._check_rulet_markers(rule_file, content))
                continue

            token = extract_self_code(content)
            if token is None:
                continue
            try:
                marked = parse_code(token)
            except MalformedCode as e:
                results.append(
                    ValidationViolation(
                        kind=ViolationKind.MALFORMED_CODE,
                        detail=str(e),
                        path=rule_file.path,
                    )
                )
                continue
            if marked != rule_file.address:
                results.append(
                    ValidationViolation(
                        kind=ViolationKind.MALFORMED_CODE,
                        detail=f"title carries {token} but the file is {rule_file.address.code}",
                        path=rule_file.path,
                    )
                )

        return results

    def _check_rulet_markers(self, rule_file, content: str) -> list[ValidationViolation]:
        results = []
        section = rule_file.address.section
        for lineno, token in extract_rulet_markers(content):
            try:
                marked = parse_code(token)
            except MalformedCode as e:
                results.append(
                    ValidationViolation(
                        kind=ViolationKind.MALFORMED_CODE,
                        detail=str(e),
                        path=rule_file.path,
                        line=lineno,
                    )
                )
                continue
            if marked.section != section:
                results.append(
                    ValidationViolation(
                        kind=ViolationKind.MALFORMED_CODE,
                        detail=f"marker {token} is outside section {section:02d}",
                        path=rule_file.path,
                        line=lineno,
                    )
                )
        return results

    def check_header_files(self) -> list[ValidationViolation]:
        """The corpus root must carry 00-header.<tier>.md.

        Only fires when no header exists at all; partial headers are already
        reported by tier completeness.
        """
        if not self.config.require_header or HEADER_ADDRESS in self.index:
            return []

        return [
            ValidationViolation(
                kind=ViolationKind.MISSING_TIER,
                detail=f"{HEADER_ADDRESS.code} is missing its {tier.value} tier (00-header.{tier.value}.md)",
                path=self.index.root,
            )
            for tier in CORE_TIERS
        ]

    def check_file_sizes(self) -> list[ValidationViolation]:
        """Summary and abstract files should stay under their byte limits (warning)."""
        results = []

        for rule_file in self.index.files:
            if rule_file.address == HEADER_ADDRESS:
                continue
            limit = self.config.size_limit(rule_file.tier)
            if limit is None:
                continue
            try:
                size = rule_file.path.stat().st_size
            except OSError as e:
                logger.warning("Cannot stat %s: %s", rule_file.path, e)
                continue
            if size > limit:
                results.append(
                    ValidationViolation(
                        kind=ViolationKind.OVERSIZED_FILE,
                        detail=f"{rule_file.tier.value} file is {size} bytes (limit {limit})",
                        path=rule_file.path,
                    )
                )

        return results


def validate(index: "CorpusIndex", config: BcsConfig | None = None) -> ValidationReport:
    """Run every check and split findings into violations and warnings."""
    report = ValidationReport()
    for finding in ValidationRules(index, config).run_all():
        if finding.kind in WARNING_KINDS:
            report.warnings.append(finding)
        else:
            report.violations.append(finding)
    return report


VIOLATION_EXPLANATIONS: dict[str, str] = {
    ViolationKind.MISSING_TIER.value: """
Every section, rule and subrule must exist in the complete, summary and abstract tiers.

**Why**: the tiers are compressions of the same content; a missing tier means
`bcs decode -s CODE` fails for a rule that otherwise exists.

**Fix**: add the missing `NN-name.<tier>.md` next to its siblings (rulet is exempt).
The corpus root also needs `00-header.<tier>.md` for each core tier.
""",
    ViolationKind.DUPLICATE_CODE.value: """
Two or more files resolve to the same BCS code and tier.

**Why**: lookups pick the first file found and silently ignore the others.

**Fix**: renumber one of the files so every code is unique within its tier.
""",
    ViolationKind.BAD_NAMING.value: """
File or directory name deviates from `NN-kebab-name.<tier>.md` / `NN-kebab-name/`.

**Examples**: `1-shebang.complete.md` (not zero-padded), `02a-extra/` (alphabetic
suffix), `02-My_Rule.complete.md` (case and separator), files nested too deep.

**Fix**: rename to a two-digit prefix and lower-case kebab name.
""",
    ViolationKind.SECTION_COUNT_MISMATCH.value: """
The number of section directories differs from the number of listed sections.

**Why**: `bcs sections` lists sections from their `00-section.<tier>.md` files;
a directory without one is invisible to it.

**Fix**: add the section-level tier files, or remove the stray directory.
""",
    ViolationKind.MALFORMED_CODE.value: """
A code marker inside a rule file is malformed or points at a different rule.

**Core tiers**: a BCS code on the title line must equal the file's own code.
**Rulet**: every `[BCS....]` marker must parse and belong to the file's section.

**Fix**: correct the marker (usually a copy-paste from a neighbouring rule).
""",
    ViolationKind.OVERSIZED_FILE.value: """
A summary or abstract file exceeds its size limit (warning only).

**Fix**: recompress the file, or raise `[limits]` in `bcs.toml`.
""",
}


def get_kind_ids() -> list[str]:
    return [kind.value for kind in ViolationKind]
