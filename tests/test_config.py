import pytest

from kategg import RunnerConfig, load_config


class TestConfig:
    def test_requires_a_finite_limit(self):
        with pytest.raises(ValueError):
            RunnerConfig(iter_limit=None, node_limit=None, time_limit=None)

    def test_rejects_negative_limits(self):
        with pytest.raises(ValueError):
            RunnerConfig(iter_limit=-1)

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("KATEGG_ITER_LIMIT", "7")
        monkeypatch.setenv("KATEGG_TIME_LIMIT", "1.5")
        config = RunnerConfig()
        assert config.iter_limit == 7
        assert config.time_limit == 1.5
        assert config.node_limit == 10_000

    def test_load_config_from_yaml(self, tmp_path):
        path = tmp_path / "limits.yaml"
        path.write_text("iter_limit: 3\nnode_limit: 500\nexplanations_enabled: true\n")
        config = load_config(path, node_limit=None, time_limit=2.0)
        assert config.iter_limit == 3
        assert config.node_limit == 500
        assert config.time_limit == 2.0
        assert config.explanations_enabled is True

    def test_unknown_option(self, tmp_path):
        path = tmp_path / "limits.yaml"
        path.write_text("iteration_limit: 3\n")
        with pytest.raises(ValueError):
            load_config(path)

    def test_yaml_must_be_a_mapping(self, tmp_path):
        path = tmp_path / "limits.yaml"
        path.write_text("- 3\n- 4\n")
        with pytest.raises(ValueError):
            load_config(path)

    def test_missing_file_uses_defaults(self, tmp_path):
        config = load_config(tmp_path / "absent.yaml", iter_limit=4)
        assert config.iter_limit == 4
        assert config.node_limit == 10_000
