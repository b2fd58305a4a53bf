import json

from timebill_reports import cli


def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'timebill.db'}"


def test_seed_then_client_summary(capsys, tmp_path):
    url = database_url(tmp_path)
    cli.main(["seed", "--database-url", url])
    cli.main(["seed", "--database-url", url])
    output = capsys.readouterr().out
    assert "Demo data loaded" in output
    assert "nothing loaded" in output

    cli.main(["run-report", "--report", "client-summary", "--database-url", url])

    rows = json.loads(capsys.readouterr().out)
    assert rows[0]["label"] == "SkyStone Brasil"
    assert rows[0]["hours"] == "24.00"
    assert rows[0]["value"] == "3408.00"
    assert rows[-1]["label"] == "Total"


def test_run_report_exports_csv(capsys, tmp_path):
    url = database_url(tmp_path)
    cli.main(["seed", "--database-url", url])
    output_path = tmp_path / "entries.csv"

    cli.main(
        [
            "run-report",
            "--report",
            "entry-detail",
            "--start-date",
            "2024-12-02",
            "--output",
            str(output_path),
            "--database-url",
            url,
        ]
    )

    assert f"Report exported to {output_path}" in capsys.readouterr().out
    lines = output_path.read_bytes().decode("utf-8-sig").splitlines()
    assert lines[0].startswith("date;client;consultant")
    assert len(lines) == 3


def test_recalculate_reports_counts(capsys, tmp_path):
    url = database_url(tmp_path)
    cli.main(["seed", "--database-url", url])

    cli.main(["recalculate", "--database-url", url])

    assert "Updated 0, unchanged 3, failed 0" in capsys.readouterr().out
