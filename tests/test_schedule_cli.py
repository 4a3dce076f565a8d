import json

import pytest

import schedule_cli


def test_set_then_show_month(tmp_path, capsys):
    store = tmp_path / "statuses.json"
    schedule_cli.main(["--store", str(store), "set", "2025-11-14", "paid"])
    assert json.loads(json.loads(store.read_text())["payment-statuses"]) == {"2025-11-14": "paid"}

    schedule_cli.main(["--store", str(store), "--today", "2025-11-01", "show", "--month", "2025-11"])
    out = capsys.readouterr().out
    assert "November 2025" in out
    assert "2025-11-14" in out
    assert "Paid" in out
    assert "Friday, November 28, 2025" in out  # next payment


def test_set_rejects_invalid_status(tmp_path):
    store = tmp_path / "statuses.json"
    with pytest.raises(SystemExit):
        schedule_cli.main(["--store", str(store), "set", "2025-11-14", "late"])
    assert not store.exists()


def test_set_warns_for_unscheduled_date(tmp_path, capsys):
    store = tmp_path / "statuses.json"
    schedule_cli.main(["--store", str(store), "set", "2025-11-15", "due"])
    assert "not a scheduled payment date" in capsys.readouterr().out


def test_show_empty_month(tmp_path, capsys):
    schedule_cli.main(["--store", str(tmp_path / "s.json"), "--today", "2025-11-01", "show", "--month", "2024-01"])
    assert "No payments scheduled" in capsys.readouterr().out


def test_show_with_corrupt_store_falls_back(tmp_path, capsys):
    store = tmp_path / "statuses.json"
    store.write_text(json.dumps({"payment-statuses": "{broken"}))
    schedule_cli.main(["--store", str(store), "--today", "2025-11-01", "show", "--month", "2025-11"])
    out = capsys.readouterr().out
    assert "Nothing" in out


def test_export_writes_workbook_and_csv(tmp_path):
    out_dir = tmp_path / "dist"
    schedule_cli.main(["--store", str(tmp_path / "s.json"), "--today", "2025-11-01", "export", "--out", str(out_dir)])
    assert (out_dir / "payment_schedule.xlsx").exists()
    csv_lines = (out_dir / "payment_schedule.csv").read_text().splitlines()
    assert csv_lines[0] == "Date,Amount,Status"
    assert csv_lines[1].startswith("2025-10-31")
