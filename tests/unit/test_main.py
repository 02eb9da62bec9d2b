"""
Unit tests for the CLI entry point.

Runs commands offline against a temp tag store.
"""

import json

import pytest

from channel_tags.config import Config, StoreConfig
from channel_tags.main import main, run_command


@pytest.fixture
def offline_config(tmp_path) -> Config:
    return Config(store=StoreConfig(path=str(tmp_path / "tags.json")))


def stored_tags(config: Config) -> list:
    with open(config.store.path) as f:
        return json.load(f)["tags"]


class TestRunCommand:
    """Test run_command in offline mode."""

    def test_add_then_list(self, offline_config):
        run_command("add", ["vip"], offline=True, config=offline_config)
        stats = run_command("list", offline=True, config=offline_config)

        assert stats["tag_list"] == ["vip"]
        assert stats["offline"] is True

    def test_add_many_and_remove(self, offline_config):
        run_command("add", ["a", "b", "c"], offline=True, config=offline_config)
        stats = run_command("remove", ["b"], offline=True, config=offline_config)

        assert stats["tag_list"] == ["a", "c"]
        assert stored_tags(offline_config) == ["a", "c"]

    def test_remove_at(self, offline_config):
        run_command("set", ["x", "y"], offline=True, config=offline_config)
        stats = run_command("remove-at", ["0"], offline=True, config=offline_config)

        assert stats["tag_list"] == ["y"]

    def test_offline_edits_leave_store_unsynced(self, offline_config):
        stats = run_command("add", ["vip"], offline=True, config=offline_config)

        assert stats["state"] == "dirty"
        with open(offline_config.store.path) as f:
            assert json.load(f)["last_synced"] == []

    def test_remove_at_requires_one_index(self, offline_config):
        with pytest.raises(ValueError):
            run_command("remove-at", [], offline=True, config=offline_config)


class TestMain:
    """Test argument parsing and exit codes."""

    def write_config(self, tmp_path, **sections) -> str:
        path = tmp_path / "config.json"
        data = {"store": {"path": str(tmp_path / "tags.json")}}
        data.update(sections)
        path.write_text(json.dumps(data))
        return str(path)

    def test_add_and_print(self, tmp_path, capsys):
        config_path = self.write_config(tmp_path)

        main(["add", "vip", "--offline", "--config", config_path])

        out = capsys.readouterr().out
        assert "[0] vip" in out

    def test_duplicate_tag_exits_1(self, tmp_path, capsys):
        config_path = self.write_config(tmp_path)
        main(["add", "vip", "--offline", "--config", config_path])

        with pytest.raises(SystemExit) as exc_info:
            main(["add", "vip", "--offline", "--config", config_path])

        assert exc_info.value.code == 1
        assert "Invalid tag" in capsys.readouterr().out

    def test_missing_credentials_exit_1(self, tmp_path, capsys):
        config_path = self.write_config(tmp_path)

        with pytest.raises(SystemExit) as exc_info:
            main(["list", "--config", config_path])

        assert exc_info.value.code == 1
        assert "channel.channel_id" in capsys.readouterr().out

    def test_status(self, tmp_path, capsys):
        config_path = self.write_config(tmp_path)
        main(["add", "a", "b", "--offline", "--config", config_path])

        main(["status", "--config", config_path])

        out = capsys.readouterr().out
        assert "Tags (2):" in out
        assert "In Sync: False" in out

    def test_unknown_action_rejected(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["explode"])
        assert exc_info.value.code == 2
