"""Tests for pentasync/main.py -- the command-line entry point."""

import errno
import json
from unittest.mock import patch

import pytest

from pentasync.artifact_sync import SyncAction, SyncEntry, SyncReport
from pentasync.main import EXIT_DATA_ERROR, EXIT_IO_ERROR, EXIT_OK, format_report, main


@pytest.fixture
def tmp_path(tmp_path_factory):
    # The default tmp_path embeds the test name, which leaks into the printed
    # output directory and collides with substring checks on the output.
    return tmp_path_factory.mktemp("run")


@pytest.fixture
def argv(tmp_path, cache_dir, templates_dir):
    return [
        "--cache", str(cache_dir),
        "--outdir", str(tmp_path / "out"),
        "--templates", str(templates_dir),
    ]


class TestFormatReport:
    def test_lines(self):
        report = SyncReport(entries=[
            SyncEntry("room/hall_a.html", SyncAction.CREATED, duration=0.25),
            SyncEntry("old", SyncAction.DELETED, is_dir=True),
        ])
        assert format_report(report) == [
            "      create  [0.25s]  room/hall_a.html",
            "      delete  [0.00s]  old/",
        ]


class TestMain:
    def test_publishes(self, argv, tmp_path, capsys):
        assert main(argv) == EXIT_OK
        out = capsys.readouterr().out
        assert out.startswith("Compiling schedule pages...")
        assert "create  [" in out
        assert "event/talk.html" in out
        assert "Schedule compiled in" in out
        assert out.rstrip().endswith(f"to {tmp_path / 'out'}.")
        assert (tmp_path / "out" / "room" / "hall_a.html").is_file()

    def test_identical_pages_only_shown_when_verbose(self, argv, capsys):
        main(argv)
        capsys.readouterr()

        main(argv)
        assert "identical" not in capsys.readouterr().out

        main(argv + ["--verbose"])
        assert capsys.readouterr().out.count("identical") == 4

    def test_stats(self, argv, capsys):
        assert main(argv + ["--stats"]) == EXIT_OK
        out = capsys.readouterr().out
        assert "node_count: 4" in out
        assert "speaker_count: 1" in out

    def test_config_file(self, tmp_path, cache_dir, templates_dir, capsys):
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"pentabarf": {
            "cache": str(cache_dir), "outdir": "site", "templates": str(templates_dir), "workers": 2,
        }}), encoding="utf-8")
        assert main(["--config", str(config)]) == EXIT_OK
        assert (tmp_path / "site" / "event" / "talk.html").is_file()

    def test_command_line_overrides_config(self, tmp_path, cache_dir, templates_dir):
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"outdir": "from_config", "templates": str(templates_dir)}), encoding="utf-8")
        assert main(["--config", str(config), "--cache", str(cache_dir), "--outdir", str(tmp_path / "cli")]) == EXIT_OK
        assert (tmp_path / "cli" / "event" / "talk.html").is_file()
        assert not (tmp_path / "from_config").exists()


class TestExitCodes:
    def test_integrity_error(self, tmp_path, write_cache, sample_records, templates_dir, capsys):
        sample_records["role_assignments"][0]["person_id"] = "P404"
        cache = write_cache(tmp_path / "broken", sample_records)
        code = main(["--cache", str(cache), "--outdir", str(tmp_path / "out"), "--templates", str(templates_dir)])
        assert code == EXIT_DATA_ERROR
        assert "P404" in capsys.readouterr().err
        assert not (tmp_path / "out").exists()

    def test_corrupt_cache(self, argv, cache_dir, capsys):
        (cache_dir / "rooms" / "0000.json").write_text("{", encoding="utf-8")
        assert main(argv) == EXIT_DATA_ERROR
        assert "0000.json" in capsys.readouterr().err

    def test_unreadable_cache_directory(self, argv, tmp_path, capsys):
        with patch("pentasync.entity_store.Path.iterdir", side_effect=PermissionError(errno.EACCES, "Permission denied")):
            assert main(argv) == EXIT_DATA_ERROR
        assert "Permission denied" in capsys.readouterr().err
        assert not (tmp_path / "out").exists()

    def test_bad_config(self, tmp_path, capsys):
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"workers": 0}), encoding="utf-8")
        assert main(["--config", str(config)]) == EXIT_DATA_ERROR
        assert "invalid settings" in capsys.readouterr().err

    def test_io_error(self, argv, capsys):
        with patch("pentasync.main.publish", side_effect=OSError(errno.EACCES, "Permission denied")):
            assert main(argv) == EXIT_IO_ERROR
        assert "Permission denied" in capsys.readouterr().err

    def test_workers_below_one(self, argv):
        with pytest.raises(SystemExit) as excinfo:
            main(argv + ["--workers", "0"])
        assert excinfo.value.code == 2

    def test_verbose_and_quiet_conflict(self, argv):
        with pytest.raises(SystemExit) as excinfo:
            main(argv + ["-v", "-q"])
        assert excinfo.value.code == 2
