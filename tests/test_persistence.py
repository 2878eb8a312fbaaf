"""Tests for the snapshot file, the debounced writer and the report store."""

import json
import tempfile
import time
from pathlib import Path

from mediator.persistence.snapshot import SnapshotStore
from mediator.persistence.writer import SnapshotWriter
from mediator.reports.store import ReportStore
from mediator.sanctions.store import SanctionStore

T = 1_700_000_000_000


def _stores(path):
    sanctions = SanctionStore(clock=lambda: T)
    reports = ReportStore(clock=lambda: T)
    return SnapshotStore(path, sanctions, reports)


def test_missing_file_loads_empty():
    with tempfile.TemporaryDirectory() as tmpdir:
        snap = _stores(Path(tmpdir) / "data.json")
        snap.load()
        assert snap.sanctions.list_sanctions() == []
        assert snap.reports.list_reports() == []


def test_empty_and_malformed_files_load_empty():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "data.json"
        for content in ["", "   ", "{not json", "[1, 2]", '{"reports": 5, "sanctions": "x"}']:
            path.write_text(content)
            snap = _stores(path)
            snap.load()
            assert snap.sanctions.list_sanctions() == []
            assert snap.reports.list_reports() == []


def test_round_trip():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "data.json"
        snap = _stores(path)
        snap.sanctions.apply_sanction("1.2.3.4", "3d")
        snap.reports.create_report("9.9.9.9", {"reason": "spam", "comment": "bot"})
        snap.save()

        fresh = _stores(path)
        fresh.load()
        assert fresh.snapshot() == snap.snapshot()

        s = fresh.sanctions.get_sanction("1.2.3.4")
        assert s.status.value == "ban"
        assert s.ban_type.value == "3d"
        assert s.expires_at == T + 3 * 24 * 60 * 60 * 1000
        assert fresh.reports.list_reports()[0].fields == {"reason": "spam", "comment": "bot"}


def test_file_layout():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "nested" / "data.json"
        snap = _stores(path)
        snap.sanctions.apply_sanction("1.2.3.4", "forever")
        snap.save()

        data = json.loads(path.read_text())
        assert set(data) == {"reports", "sanctions"}
        assert data["sanctions"] == [{
            "ip": "1.2.3.4",
            "status": "ban",
            "banType": "forever",
            "expiresAt": None,
            "history": [{"at": T, "type": "forever", "until": None}],
        }]
        # Temporary files are not left behind.
        assert [p.name for p in path.parent.iterdir()] == ["data.json"]


def test_writer_synchronous_mode():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "data.json"
        snap = _stores(path)
        writer = SnapshotWriter(snap, delay=0)
        snap.sanctions.set_on_change(writer.schedule)

        snap.sanctions.apply_sanction("1.2.3.4", "15m")
        assert json.loads(path.read_text())["sanctions"][0]["ip"] == "1.2.3.4"


def test_writer_debounces_and_flushes_on_close():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "data.json"
        snap = _stores(path)
        writer = SnapshotWriter(snap, delay=60)
        snap.reports.set_on_change(writer.schedule)

        snap.reports.create_report("1.1.1.1", {"reason": "a"})
        snap.reports.create_report("1.1.1.1", {"reason": "b"})
        assert writer.pending
        assert not path.exists()

        writer.close()
        assert not writer.pending
        assert len(json.loads(path.read_text())["reports"]) == 2


def test_writer_fires_after_delay():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "data.json"
        snap = _stores(path)
        writer = SnapshotWriter(snap, delay=0.05)
        writer.schedule()

        deadline = time.time() + 5
        while not path.exists() and time.time() < deadline:
            time.sleep(0.01)
        assert path.exists()


def test_writer_failure_is_not_raised():
    with tempfile.TemporaryDirectory() as tmpdir:
        blocker = Path(tmpdir) / "file"
        blocker.write_text("x")
        # Parent of the snapshot is a regular file, so every write fails.
        snap = _stores(blocker / "data.json")
        writer = SnapshotWriter(snap, delay=0)
        snap.sanctions.set_on_change(writer.schedule)

        snap.sanctions.apply_sanction("1.2.3.4", "15m")
        assert writer.failures == 1
        assert snap.sanctions.is_active("1.2.3.4")


def test_failed_write_keeps_previous_file():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "data.json"
        snap = _stores(path)
        snap.reports.create_report("1.1.1.1", {"reason": "first"})
        snap.save()
        before = path.read_text()

        snap.reports.create_report("1.1.1.1", {"reason": object()})  # not JSON-serializable
        writer = SnapshotWriter(snap, delay=0)
        writer.flush()

        assert writer.failures == 1
        assert path.read_text() == before


def test_report_server_fields_win():
    reports = ReportStore(clock=lambda: T)
    r = reports.create_report("1.1.1.1", {"id": "forged", "ip": "8.8.8.8", "reason": "abuse"})
    d = r.to_dict()
    assert d["id"] == r.id != "forged"
    assert d["ip"] == "1.1.1.1"
    assert d["createdAt"] == T
    assert d["reason"] == "abuse"


def test_report_lookup_and_order():
    reports = ReportStore()
    first = reports.create_report("1.1.1.1", {"reason": "a"})
    second = reports.create_report("2.2.2.2", {"reason": "b"})
    assert [r.id for r in reports.list_reports()] == [first.id, second.id]
    assert reports.get_report(second.id) == second
    assert reports.get_report("missing") is None
