"""Data models for the BCS rule corpus."""

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class Tier(str, Enum):
    """Compression level of a rule document."""

    COMPLETE = "complete"
    SUMMARY = "summary"
    ABSTRACT = "abstract"
    RULET = "rulet"  # section-level only, bracketed-code format

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @classmethod
    def parse(cls, value: "str | Tier") -> "Tier":
        """Parse a tier name, raising InvalidTier for anything unknown."""
        if isinstance(value, Tier):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidTier(str(value)) from None


# Fixed display order (most detailed first)
TIER_ORDER: tuple[Tier, ...] = (Tier.COMPLETE, Tier.SUMMARY, Tier.ABSTRACT, Tier.RULET)

# Tiers every rule must carry; rulet is exempt
CORE_TIERS: tuple[Tier, ...] = (Tier.COMPLETE, Tier.SUMMARY, Tier.ABSTRACT)

CODE_PREFIX = "BCS"

_NUMBER_PREFIX = re.compile(r"^[0-9]+[-_]")


def strip_number_prefix(name: str) -> str:
    """`02-shebang` -> `shebang`; names without a prefix are returned as is."""
    return _NUMBER_PREFIX.sub("", name) or name


@dataclass(frozen=True)
class CodeAddress:
    """Address of a section, rule or subrule in the standard."""

    section: int
    rule: int | None = None
    subrule: int | None = None

    def __post_init__(self):
        if self.subrule is not None and self.rule is None:
            raise ValueError("subrule requires a rule")
        for part in (self.section, self.rule, self.subrule):
            if part is not None and not 0 <= part <= 99:
                raise ValueError(f"address component out of range: {part}")

    @property
    def level(self) -> str:
        if self.subrule is not None:
            return "subrule"
        if self.rule is not None:
            return "rule"
        return "section"

    @property
    def digits(self) -> str:
        parts = [self.section, self.rule, self.subrule]
        return "".join(f"{p:02d}" for p in parts if p is not None)

    @property
    def code(self) -> str:
        return f"{CODE_PREFIX}{self.digits}"

    @property
    def sort_key(self) -> tuple[int, int, int]:
        # -1 puts a section before its rules and a rule before its subrules
        return (
            self.section,
            -1 if self.rule is None else self.rule,
            -1 if self.subrule is None else self.subrule,
        )

    @property
    def parent(self) -> "CodeAddress | None":
        if self.subrule is not None:
            return CodeAddress(self.section, self.rule)
        if self.rule is not None:
            return CodeAddress(self.section)
        return None

    def __str__(self) -> str:
        return self.code


@dataclass(frozen=True)
class RuleFile:
    """A single tier document on disk."""

    path: Path
    address: CodeAddress
    tier: Tier
    section_name: str  # e.g. 01-script-structure
    rule_name: str  # filename stem without tier, e.g. 02-shebang

    @property
    def short_name(self) -> str:
        """Rule name without its numeric prefix."""
        return strip_number_prefix(self.rule_name)

    def read_text(self, errors: str = "strict") -> str:
        return self.path.read_text(encoding="utf-8", errors=errors)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class BcsError(Exception):
    """Base class for all bcs errors."""


class MalformedCode(BcsError, ValueError):
    """Input does not follow the BCS code grammar."""

    def __init__(self, token: str, reason: str = ""):
        self.token = token
        self.reason = reason
        message = f"Malformed BCS code '{token}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class InvalidTier(BcsError, ValueError):
    """Unknown tier name."""

    def __init__(self, name: str):
        self.name = name
        valid = ", ".join(t.value for t in TIER_ORDER)
        super().__init__(f"Invalid tier '{name}' (expected one of: {valid})")


class InvalidPattern(BcsError, ValueError):
    """Search pattern is not a valid regular expression."""


class CorpusRootNotFound(BcsError):
    """The corpus data directory is missing or unreadable."""

    def __init__(self, root: Path):
        self.root = root
        super().__init__(f"Corpus directory not found: {root}")


class ResolveError(BcsError, LookupError):
    """A code could not be resolved to a file."""

    def __init__(self, address: CodeAddress, message: str):
        self.address = address
        super().__init__(message)


class CodeNotFound(ResolveError):
    def __init__(self, address: CodeAddress):
        super().__init__(address, f"{address.code} not found")


class TierNotFound(ResolveError):
    def __init__(self, address: CodeAddress, tier: Tier):
        self.tier = tier
        super().__init__(address, f"{address.code} exists but has no {tier.value} tier")


@dataclass(frozen=True)
class Section:
    """A numbered section as listed by `bcs sections`."""

    number: int
    title: str
    path: Path
    directory: str = ""


# ---------------------------------------------------------------------------
# Validation records
# ---------------------------------------------------------------------------


class ViolationKind(str, Enum):
    """Structural invariant a violation breaks."""

    MISSING_TIER = "missing-tier"
    DUPLICATE_CODE = "duplicate-code"
    BAD_NAMING = "bad-naming"
    SECTION_COUNT_MISMATCH = "section-count-mismatch"
    MALFORMED_CODE = "malformed-code"
    OVERSIZED_FILE = "oversized-file"  # warning only


@dataclass(frozen=True)
class ValidationViolation:
    """A single structural finding. Never mutated after creation."""

    kind: ViolationKind
    detail: str
    path: Path | None = None
    related: tuple[Path, ...] = ()  # other files involved (duplicates)
    line: int | None = None

    def __str__(self) -> str:
        loc = ""
        if self.path is not None:
            loc = self.path.name
            if self.line:
                loc += f":{self.line}"
            loc += " - "
        return f"[{self.kind.value}] {loc}{self.detail}"
