"""
Outcome ledger for skidstall
Keeps one disposition per requested package name for the lifetime of a run
"""

from collections import OrderedDict
from typing import List, Optional
from skidstall.models import OutcomeKind, ResolutionOutcome, ResolutionSummary


class LedgerError(Exception):
    """Raised when a recorded outcome would move backwards"""
    pass


class OutcomeLedger:
    """Append/update-only map of requested name -> ResolutionOutcome

    A name may move from Deferred to any other outcome. Every other
    outcome is final for the run.
    """

    def __init__(self):
        self._outcomes: "OrderedDict[str, ResolutionOutcome]" = OrderedDict()
        self._deferred_order: List[str] = []

    def record(self, name: str, outcome: ResolutionOutcome):
        current = self._outcomes.get(name)
        if current is not None and current.is_terminal:
            if current == outcome:
                return
            raise LedgerError(
                f"{name} already recorded as {current.kind.value}; "
                f"cannot change to {outcome.kind.value}"
            )

        self._outcomes[name] = outcome
        if outcome.kind == OutcomeKind.DEFERRED:
            if name not in self._deferred_order:
                self._deferred_order.append(name)
        elif name in self._deferred_order:
            self._deferred_order.remove(name)

    def get(self, name: str) -> Optional[ResolutionOutcome]:
        return self._outcomes.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._outcomes

    def __len__(self) -> int:
        return len(self._outcomes)

    def items(self):
        return list(self._outcomes.items())

    def pending(self) -> List[str]:
        """Names still deferred, in the order they were deferred"""
        return list(self._deferred_order)

    def names_with(self, kind: OutcomeKind) -> List[str]:
        return [name for name, outcome in self._outcomes.items() if outcome.kind == kind]

    def summarize(self) -> ResolutionSummary:
        installed = sum(1 for outcome in self._outcomes.values() if outcome.is_installed)
        return ResolutionSummary(
            installed_count=installed,
            deferred=self.pending(),
            failed=self.names_with(OutcomeKind.FAILED),
            skipped=self.names_with(OutcomeKind.SKIPPED),
        )

    def clear(self):
        self._outcomes.clear()
        self._deferred_order.clear()
