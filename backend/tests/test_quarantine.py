from datetime import datetime, timedelta, timezone

from prism_ingest.services.quarantine import QuarantineLedger

NOW = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def test_backoff_grows_and_caps():
    ledger = QuarantineLedger(base_delay=60, max_delay=200)
    assert ledger.calculate_retry_delay(1) == 60
    assert ledger.calculate_retry_delay(2) == 120
    assert ledger.calculate_retry_delay(3) == 200


def test_entry_becomes_due_after_backoff():
    ledger = QuarantineLedger(base_delay=60)
    ledger.record_failure("/watch/bad.pdf", "broken xref", now=NOW)
    
    assert ledger.due(now=NOW) == []
    assert ledger.due(now=NOW + timedelta(seconds=61)) == ["/watch/bad.pdf"]
    assert ledger.get("/watch/bad.pdf")["attempts"] == 1


def test_exhausted_entries_are_permanent():
    ledger = QuarantineLedger(max_attempts=2, base_delay=1)
    ledger.record_failure("/watch/bad.pdf", "e1", now=NOW)
    entry = ledger.record_failure("/watch/bad.pdf", "e2", now=NOW)
    
    assert entry["permanent"] is True
    assert entry["error"] == "e2"
    assert ledger.due(now=NOW + timedelta(days=1)) == []


def test_clear_removes_entry():
    ledger = QuarantineLedger()
    ledger.record_failure("/watch/bad.pdf", "e", now=NOW)
    assert ledger.clear("/watch/bad.pdf") is True
    assert ledger.clear("/watch/bad.pdf") is False
    assert len(ledger) == 0


def test_ledger_persists_across_instances(tmp_path):
    path = tmp_path / "quarantine.json"
    QuarantineLedger(path).record_failure("/watch/bad.pdf", "e", now=NOW)
    
    reloaded = QuarantineLedger(path)
    assert len(reloaded) == 1
    assert reloaded.entries()[0]["filepath"] == "/watch/bad.pdf"
