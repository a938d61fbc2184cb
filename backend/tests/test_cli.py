import json

from prism_ingest import cli
from prism_ingest.routers import dependencies


def test_parser_commands():
    parser = cli.build_parser()
    assert parser.parse_args(["import", "/tmp/calls"]).folder == "/tmp/calls"
    assert parser.parse_args(["watch", "/tmp/mail", "--email"]).email is True
    assert parser.parse_args(["serve", "--port", "9000"]).port == 9000


def test_import_command(tmp_path, monkeypatch, capsys):
    monkeypatch.setattr(dependencies, "DATABASE_TYPE", "memory")
    monkeypatch.setattr(dependencies, "ANALYZER_TYPE", "none")
    monkeypatch.setattr(dependencies, "DEAD_LETTER_PATH", str(tmp_path / "dead.jsonl"))
    monkeypatch.setattr(dependencies, "QUARANTINE_PATH", str(tmp_path / "quarantine.json"))
    monkeypatch.setattr(cli, "setup_logging", lambda *args, **kwargs: None)
    folder = tmp_path / "calls"
    folder.mkdir()
    (folder / "a.txt").write_text("alpha")
    
    exit_code = cli.main(["import", str(folder)])
    
    summary = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert summary["created"] == 1


def test_import_command_rejects_missing_folder(tmp_path, monkeypatch):
    monkeypatch.setattr(cli, "setup_logging", lambda *args, **kwargs: None)
    assert cli.main(["import", str(tmp_path / "nope")]) == 2
