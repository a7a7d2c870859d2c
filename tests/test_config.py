"""
Tests for .vibeshield.yml loading and saving
"""
import yaml

from vibeshield.config import MANDATORY_EXCLUDES, ConfigManager, VibeShieldConfig


class TestVibeShieldConfig:

    def test_defaults(self):
        config = VibeShieldConfig()
        assert config.fail_on == "low"
        assert config.workers == 1
        assert config.max_file_size == 1024 * 1024
        assert ".js" in config.include_extensions
        assert ".env" in config.include_files
        assert "node_modules/" in config.exclude_paths

    def test_from_dict(self):
        config = VibeShieldConfig.from_dict({
            "fail_on": "HIGH",
            "workers": 4,
            "max_file_size": 2048,
            "include": {"extensions": ["js", ".PY"]},
            "rules": {"extra_files": ["team-rules.yaml"]},
        })
        assert config.fail_on == "high"
        assert config.workers == 4
        assert config.max_file_size == 2048
        assert config.include_extensions == [".js", ".py"]
        assert config.extra_rule_files == ["team-rules.yaml"]

    def test_user_excludes_merged_with_mandatory(self):
        config = VibeShieldConfig.from_dict({"exclude": {"paths": ["generated/"]}})
        assert config.exclude_paths[0] == "generated/"
        assert MANDATORY_EXCLUDES <= set(config.exclude_paths)

    def test_bad_max_file_size_keeps_default(self):
        config = VibeShieldConfig.from_dict({"max_file_size": "huge"})
        assert config.max_file_size == 1024 * 1024

    def test_workers_coerced_to_int(self):
        assert VibeShieldConfig.from_dict({"workers": "4"}).workers == 4

    def test_bad_workers_keeps_default(self):
        assert VibeShieldConfig.from_dict({"workers": "many"}).workers == 1
        assert VibeShieldConfig.from_dict({"workers": [2]}).workers == 1

    def test_null_workers_means_auto(self):
        assert VibeShieldConfig.from_dict({"workers": None}).workers is None

    def test_non_mapping_sections_ignored(self):
        config = VibeShieldConfig.from_dict({
            "include": [".js"],
            "exclude": "dist/",
            "rules": ["extra.yaml"],
        })
        defaults = VibeShieldConfig()
        assert config.include_extensions == defaults.include_extensions
        assert config.exclude_paths == defaults.exclude_paths
        assert config.extra_rule_files == []

    def test_non_list_values_ignored(self):
        config = VibeShieldConfig.from_dict({
            "include": {"files": ".env"},
            "exclude": {"paths": "generated/"},
            "rules": {"extra_files": "team.yaml"},
        })
        defaults = VibeShieldConfig()
        assert config.include_files == defaults.include_files
        assert config.exclude_paths == defaults.exclude_paths
        assert config.extra_rule_files == []

    def test_to_dict_round_trip(self):
        config = VibeShieldConfig(fail_on="medium", workers=2)
        assert VibeShieldConfig.from_dict(config.to_dict()).to_dict() == config.to_dict()


class TestConfigManager:

    def test_find_config_walks_upward(self, tmp_path):
        (tmp_path / ".vibeshield.yml").write_text("fail_on: high\n", encoding='utf-8')
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert ConfigManager.find_config(nested) == (tmp_path / ".vibeshield.yml").resolve()

    def test_load_defaults_when_missing(self, tmp_path):
        config = ConfigManager.load_config(config_path=tmp_path / "missing.yml")
        assert config.to_dict() == VibeShieldConfig().to_dict()

    def test_load_from_start_path(self, tmp_path):
        (tmp_path / ".vibeshield.yml").write_text("fail_on: critical\nworkers: 3\n", encoding='utf-8')
        config = ConfigManager.load_config(start_path=tmp_path)
        assert config.fail_on == "critical"
        assert config.workers == 3

    def test_malformed_yaml_falls_back(self, tmp_path, capsys):
        path = tmp_path / ".vibeshield.yml"
        path.write_text("fail_on: [unclosed\n", encoding='utf-8')
        config = ConfigManager.load_config(config_path=path)
        assert config.fail_on == "low"
        assert "Failed to load config" in capsys.readouterr().err

    def test_extra_rule_files_resolved_relative_to_config(self, tmp_path):
        path = tmp_path / ".vibeshield.yml"
        path.write_text("rules:\n  extra_files:\n    - rules/team.yaml\n", encoding='utf-8')
        config = ConfigManager.load_config(config_path=path)
        assert config.extra_rule_files == [str(tmp_path.resolve() / "rules" / "team.yaml")]

    def test_create_default_config(self, tmp_path):
        path = ConfigManager.create_default_config(tmp_path)
        assert path == tmp_path / ".vibeshield.yml"
        data = yaml.safe_load(path.read_text(encoding='utf-8'))
        assert data["fail_on"] == "low"
        assert "node_modules/" in data["exclude"]["paths"]

    def test_save_and_reload(self, tmp_path):
        path = tmp_path / "conf" / ".vibeshield.yml"
        assert ConfigManager.save_config(VibeShieldConfig(fail_on="medium"), path)
        assert ConfigManager.load_config(config_path=path).fail_on == "medium"
