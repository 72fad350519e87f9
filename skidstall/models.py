from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class SourceKind(Enum):
    """Package sources the resolver can query"""
    PRIMARY = "pacman"
    COMMUNITY = "aur"


class OutcomeKind(Enum):
    """Terminal disposition of a requested package"""
    ALREADY_INSTALLED = "already_installed"
    INSTALLED_DIRECT = "installed_direct"
    INSTALLED_VIA_ALTERNATIVE = "installed_via_alternative"
    DEFERRED = "deferred"
    FAILED = "failed"
    SKIPPED = "skipped"  # optional package left out, not a failure


INSTALLED_KINDS = (
    OutcomeKind.ALREADY_INSTALLED,
    OutcomeKind.INSTALLED_DIRECT,
    OutcomeKind.INSTALLED_VIA_ALTERNATIVE,
)


@dataclass
class CommandResult:
    """Result of one external command or network call"""
    ok: bool
    returncode: Optional[int] = None
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False

    @property
    def output(self) -> str:
        """Combined output, stderr last"""
        return "\n".join(part for part in (self.stdout, self.stderr) if part)


@dataclass(frozen=True)
class ExistenceResult:
    """Answer to "does this name exist in that source" at a point in time"""
    name: str
    source: SourceKind
    exists: bool
    checked_at: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True)
class CandidateAlternative:
    """A search hit offered as a substitute for a requested name"""
    name: str
    source: SourceKind


@dataclass(frozen=True)
class ResolutionOutcome:
    """Terminal record for one requested package"""
    kind: OutcomeKind
    selected: Optional[CandidateAlternative] = None
    detail: str = ""

    @classmethod
    def already_installed(cls) -> "ResolutionOutcome":
        return cls(OutcomeKind.ALREADY_INSTALLED)

    @classmethod
    def installed_direct(cls) -> "ResolutionOutcome":
        return cls(OutcomeKind.INSTALLED_DIRECT)

    @classmethod
    def via_alternative(cls, selected: CandidateAlternative) -> "ResolutionOutcome":
        return cls(OutcomeKind.INSTALLED_VIA_ALTERNATIVE, selected=selected)

    @classmethod
    def deferred(cls, detail: str = "") -> "ResolutionOutcome":
        return cls(OutcomeKind.DEFERRED, detail=detail)

    @classmethod
    def failed(cls, detail: str = "") -> "ResolutionOutcome":
        return cls(OutcomeKind.FAILED, detail=detail)

    @classmethod
    def skipped(cls, detail: str = "") -> "ResolutionOutcome":
        return cls(OutcomeKind.SKIPPED, detail=detail)

    @property
    def is_installed(self) -> bool:
        return self.kind in INSTALLED_KINDS

    @property
    def is_terminal(self) -> bool:
        """True once the name must not be reprocessed in this run"""
        return self.kind != OutcomeKind.DEFERRED


@dataclass
class ResolutionSummary:
    """Aggregate end-of-run report"""
    installed_count: int
    deferred: List[str]
    failed: List[str]
    skipped: List[str] = field(default_factory=list)
