"""Tests for environment-driven configuration."""

import pytest
from pydantic import ValidationError

from privpool.config import PoolConfig
from privpool.utils.hash import ZERO_HASH


class TestPoolConfig:
    """Tests for PoolConfig defaults and overrides."""

    def test_defaults(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        config = PoolConfig()
        assert config.tree_height == 20
        assert config.capacity == 1_048_576
        assert config.zero_hash == ZERO_HASH
        assert config.strict_root_check is True
        assert config.root_history_size == 30

    def test_environment_overrides(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("PRIVPOOL_TREE_HEIGHT", "8")
        monkeypatch.setenv("PRIVPOOL_OWNER", "treasury")
        monkeypatch.setenv("PRIVPOOL_STRICT_ROOT_CHECK", "false")

        config = PoolConfig()
        assert config.tree_height == 8
        assert config.capacity == 256
        assert config.owner == "treasury"
        assert config.strict_root_check is False

    def test_dotenv_file(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".env").write_text("PRIVPOOL_MAX_AMOUNT=500\n")
        assert PoolConfig().max_amount == 500

    @pytest.mark.parametrize("height", [0, 33])
    def test_height_bounds(self, height):
        with pytest.raises(ValidationError):
            PoolConfig(tree_height=height)

    def test_max_amount_positive(self):
        with pytest.raises(ValidationError):
            PoolConfig(max_amount=0)

    def test_frozen(self):
        config = PoolConfig(tree_height=4)
        with pytest.raises(ValidationError):
            config.tree_height = 5
