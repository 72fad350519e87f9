import pytest
from skidstall.ledger import LedgerError, OutcomeLedger
from skidstall.models import CandidateAlternative, OutcomeKind, ResolutionOutcome, SourceKind


def test_record_and_summarize():
    """Test counting installed outcomes and listing the rest"""
    ledger = OutcomeLedger()
    ledger.record("git", ResolutionOutcome.already_installed())
    ledger.record("vim", ResolutionOutcome.installed_direct())
    ledger.record("burp", ResolutionOutcome.via_alternative(
        CandidateAlternative("burpsuite", SourceKind.COMMUNITY)))
    ledger.record("xyz", ResolutionOutcome.deferred("no alternatives found"))
    ledger.record("ghost", ResolutionOutcome.failed())

    summary = ledger.summarize()

    assert summary.installed_count == 3
    assert summary.deferred == ["xyz"]
    assert summary.failed == ["ghost"]
    assert len(ledger) == 5


def test_deferred_can_be_settled():
    """Test that a deferred name can move to a final outcome"""
    ledger = OutcomeLedger()
    ledger.record("xyz", ResolutionOutcome.deferred())
    ledger.record("xyz", ResolutionOutcome.failed())

    assert ledger.get("xyz").kind == OutcomeKind.FAILED
    assert ledger.pending() == []


def test_skipped_is_final_and_reported_apart():
    ledger = OutcomeLedger()
    ledger.record("eww", ResolutionOutcome.deferred())
    ledger.record("eww", ResolutionOutcome.skipped("optional"))

    summary = ledger.summarize()

    assert summary.skipped == ["eww"]
    assert summary.deferred == []
    assert summary.failed == []
    with pytest.raises(LedgerError):
        ledger.record("eww", ResolutionOutcome.installed_direct())


def test_final_outcomes_are_not_reopened():
    """Test that a final outcome cannot be replaced"""
    ledger = OutcomeLedger()
    ledger.record("ghost", ResolutionOutcome.failed("gone"))

    with pytest.raises(LedgerError):
        ledger.record("ghost", ResolutionOutcome.installed_direct())

    with pytest.raises(LedgerError):
        ledger.record("ghost", ResolutionOutcome.deferred())

    # Recording the same outcome again is harmless
    ledger.record("ghost", ResolutionOutcome.failed("gone"))
    assert ledger.get("ghost").kind == OutcomeKind.FAILED


def test_pending_keeps_deferral_order():
    """Test that pending() lists names in the order they were deferred"""
    ledger = OutcomeLedger()
    for name in ["c", "a", "b"]:
        ledger.record(name, ResolutionOutcome.deferred())
    ledger.record("c", ResolutionOutcome.deferred("again"))

    assert ledger.pending() == ["c", "a", "b"]

    ledger.record("a", ResolutionOutcome.installed_direct())
    assert ledger.pending() == ["c", "b"]


def test_clear():
    ledger = OutcomeLedger()
    ledger.record("vim", ResolutionOutcome.installed_direct())
    ledger.record("xyz", ResolutionOutcome.deferred())

    ledger.clear()

    assert len(ledger) == 0
    assert ledger.pending() == []
    assert "vim" not in ledger
