import pytest

from log_stats import cli
from log_stats.core import reporting

from conftest import APACHE_LINE, SIMPLE_LINE


def test_reports_existing_files_and_skips_missing(write_log, tmp_path, capsys):
    a = write_log("a.log", [SIMPLE_LINE, "garbage"])
    b = write_log("b.log", [APACHE_LINE])

    cli.main([str(a), str(b), str(tmp_path / "missing.log")])
    out = capsys.readouterr().out

    assert f"✓ {a}" in out
    assert "missing.log (file not found)" in out
    assert f"Processed: {a} (1 valid lines)" in out
    assert "TOTAL REQUESTS: 2" in out


def test_unreadable_file_is_logged(tmp_path, write_log, capsys):
    a = write_log("a.log", [SIMPLE_LINE])

    # a directory exists but cannot be read as a log file
    cli.main([str(a), str(tmp_path)])
    out = capsys.readouterr().out

    assert "ERROR: Cannot open log file" in out
    assert "1 file(s) could not be read" in out
    assert "TOTAL REQUESTS: 1" in out


def test_exits_when_no_file_exists(tmp_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli.main([str(tmp_path / "nope.log")])
    assert excinfo.value.code == 1
    assert "No log file found" in capsys.readouterr().out


def test_export_writes_reports(write_log, tmp_path, monkeypatch):
    monkeypatch.setattr(reporting, "DEFAULT_OUTPUT_DIR", tmp_path / "reports")
    a = write_log("a.log", [SIMPLE_LINE])

    cli.main([str(a), "--export", "-o", "run1", "--strip-query", "-j", "2"])

    assert (tmp_path / "reports" / "run1.csv").exists()
    assert (tmp_path / "reports" / "run1.html").exists()


@pytest.mark.parametrize("flag", ["--workers", "--channel-capacity"])
def test_rejects_non_positive_limits(write_log, flag):
    a = write_log("a.log", [SIMPLE_LINE])
    with pytest.raises(SystemExit) as excinfo:
        cli.main([str(a), flag, "0"])
    assert excinfo.value.code == 2


def test_parser_defaults():
    args = cli.create_parser().parse_args(["x.log"])
    assert args.workers is None
    assert args.channel_capacity == 2
    assert args.strip_query is False
    assert args.watch is False


def test_watch_resumes_where_first_pass_stopped(write_log, monkeypatch, capsys):
    a = write_log("a.log", [SIMPLE_LINE])
    calls = []
    monkeypatch.setattr(cli, "watch_log_files", lambda *args: calls.append(args))

    cli.main([str(a), "--watch"])

    (config, stats, positions), = calls
    assert positions == {str(a): len(SIMPLE_LINE) + 1}
    assert stats.total_requests == 1
    capsys.readouterr()
