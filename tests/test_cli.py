"""Tests for the command line entry point."""

import json
import logging

import pytest
from conftest import FakeHostingClient

from hubsync import BatchResult, ConfigError, cli
from hubsync.config import create_argument_parser, load_config_file, missing_options

REQUIRED = [
    "--ghes-source-url=https://ghe.a.example",
    "--ghes-source-token=T1",
    "--source-org=eng",
    "--ghes-target-url=https://ghe.b.example",
    "--ghes-target-token=T2",
    "--target-org=mirror",
]


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))


@pytest.fixture
def hosts(tmp_path, monkeypatch):
    """Replace GithubHostingClient with in-memory clients keyed by URL."""
    clients = {
        "https://ghe.a.example": FakeHostingClient("https://ghe.a.example", "T1"),
        "https://ghe.b.example": FakeHostingClient("https://ghe.b.example", "T2",
                                                   repo_root=tmp_path / "target"),
    }
    built = []

    def _factory(config):
        built.append(config)
        return clients[config.url]

    monkeypatch.setattr(cli, "GithubHostingClient", _factory)
    clients["built"] = built
    return clients


class TestArguments:
    def test_missing_required_flag_exits_2(self, hosts, capsys):
        with pytest.raises(SystemExit) as excinfo:
            cli.main(REQUIRED)

        assert excinfo.value.code == 2
        assert "--cache-path" in capsys.readouterr().err
        assert hosts["built"] == []

    def test_defaults(self):
        args = create_argument_parser().parse_args([])
        assert args.timeout == 900
        assert args.interval == 1.0
        assert not args.once
        assert args.repo_name is None

    def test_missing_options_lists_flags(self):
        assert missing_options({"source_url": "u", "source_token": ""}) == [
            "--ghes-source-token", "--source-org", "--ghes-target-url",
            "--ghes-target-token", "--target-org", "--cache-path",
        ]

    def test_explicit_dests_accept_both_forms(self):
        parser = create_argument_parser()
        dests = cli._explicit_dests(parser, ["--source-org", "eng", "--timeout=5", "--once"])
        assert dests == {"source_org", "timeout", "once"}

    def test_abbreviated_flags_rejected(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            create_argument_parser().parse_args(["--cache=/x"])
        assert excinfo.value.code == 2

    @pytest.mark.parametrize("flag", ["--timeout=0", "--interval=-1", "--max-workers=0"])
    def test_invalid_numbers_exit_with_config_error(self, hosts, tmp_path, capsys, flag):
        with pytest.raises(SystemExit) as excinfo:
            cli.main(REQUIRED + [f"--cache-path={tmp_path / 'cache'}", flag])

        assert excinfo.value.code == ConfigError.exit_code
        assert "must be" in capsys.readouterr().err
        assert hosts["built"] == []

    def test_wrong_type_in_config_file(self, hosts, tmp_path, capsys):
        (tmp_path / ".hubsync.toml").write_text('timeout = "soon"\n')

        with pytest.raises(SystemExit) as excinfo:
            cli.main(REQUIRED + [f"--cache-path={tmp_path / 'cache'}"])

        assert excinfo.value.code == 2
        assert "timeout must be" in capsys.readouterr().err

    def test_relative_cache_path_is_resolved(self, hosts, tmp_path, monkeypatch):
        seen = []
        monkeypatch.setattr(cli, "SyncOrchestrator",
                            lambda config, *rest: seen.append(config) or _EmptyOrchestrator())

        with pytest.raises(SystemExit):
            cli.main(REQUIRED + ["--cache-path=cache", "--once"])

        assert seen[0].cache_path == tmp_path / "cache"


class _EmptyOrchestrator:
    def run_batch(self):
        return BatchResult()


class TestConfigFile:
    def test_loaded_from_working_directory(self, tmp_path):
        (tmp_path / ".hubsync.toml").write_text('source_org = "eng"\ntimeout = 60\n')
        assert load_config_file(tmp_path) == {"source_org": "eng", "timeout": 60}

    def test_explicit_path_missing(self, tmp_path, capsys):
        assert load_config_file(tmp_path, str(tmp_path / "nope.toml")) == {}
        assert "not found" in capsys.readouterr().out

    def test_invalid_file_ignored(self, tmp_path, capsys):
        (tmp_path / ".hubsync.toml").write_text("source_org = \n")
        assert load_config_file(tmp_path) == {}
        assert "Failed to parse" in capsys.readouterr().out

    def test_file_supplies_missing_values(self, hosts, tmp_path):
        (tmp_path / ".hubsync.toml").write_text(f'cache_path = "{tmp_path / "cache"}"\n')

        with pytest.raises(SystemExit) as excinfo:
            cli.main(REQUIRED + ["--once"])

        assert excinfo.value.code == 0
        assert [c.url for c in hosts["built"]] == ["https://ghe.a.example", "https://ghe.b.example"]

    def test_command_line_wins_over_file(self, hosts, tmp_path):
        (tmp_path / ".hubsync.toml").write_text(
            f'cache_path = "{tmp_path / "cache"}"\nsource_org = "other"\n')
        hosts["https://ghe.a.example"].add("eng", "api", "/nonexistent/api.git")

        with pytest.raises(SystemExit) as excinfo:
            cli.main(REQUIRED + ["--once"])

        # org "eng" from the command line was listed, so api was attempted
        assert excinfo.value.code == 1


class TestOnce:
    def _argv(self, tmp_path, *extra):
        return REQUIRED + [f"--cache-path={tmp_path / 'cache'}", "--once", *extra]

    def test_empty_organization_exits_0(self, hosts, tmp_path, capsys):
        with pytest.raises(SystemExit) as excinfo:
            cli.main(self._argv(tmp_path))

        assert excinfo.value.code == 0
        assert "SYNC SUMMARY" in capsys.readouterr().out

    def test_failed_repository_exits_1(self, hosts, tmp_path):
        hosts["https://ghe.a.example"].add("eng", "api", "/nonexistent/api.git")

        with pytest.raises(SystemExit) as excinfo:
            cli.main(self._argv(tmp_path))

        assert excinfo.value.code == 1

    def test_json_output(self, hosts, tmp_path, capsys):
        hosts["https://ghe.a.example"].add("eng", "api", "/nonexistent/api.git")
        hosts["https://ghe.a.example"].add("eng", "web", "/nonexistent/web.git")

        with pytest.raises(SystemExit):
            cli.main(self._argv(tmp_path, "--json", "--repo-name=web"))

        payload = json.loads(capsys.readouterr().out)
        assert payload["repos_listed"] == 2
        assert payload["repos_skipped"] == 1
        assert [o["repository"] for o in payload["outcomes"]] == ["web"]
        assert payload["outcomes"][0]["status"] == "FAILED"

    def test_enumeration_error_exits_1(self, hosts, tmp_path, capsys):
        def _boom(org):
            raise ConnectionError("source unreachable")

        hosts["https://ghe.a.example"].list_repositories = _boom

        with pytest.raises(SystemExit) as excinfo:
            cli.main(self._argv(tmp_path))

        assert excinfo.value.code == 1
        assert "source unreachable" in capsys.readouterr().out

    def test_log_output_goes_through_logging(self, hosts, tmp_path, capsys, caplog):
        caplog.set_level(logging.INFO, logger="hubsync")

        with pytest.raises(SystemExit) as excinfo:
            cli.main(self._argv(tmp_path, "--log"))

        assert excinfo.value.code == 0
        assert any("SYNC SUMMARY" in r.getMessage() for r in caplog.records if r.name == "hubsync")
        assert "SYNC SUMMARY" not in capsys.readouterr().out
