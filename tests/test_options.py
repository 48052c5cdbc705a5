import pytest
from pydantic import ValidationError

from api_help.options import ENV_LOADING_POLICY, ApiHelpOptions, LoadingPolicy


class TestLoadingPolicy:
    def test_case_insensitive(self):
        assert LoadingPolicy("lazy") is LoadingPolicy.LAZY
        assert LoadingPolicy(" EAGER ") is LoadingPolicy.EAGER

    def test_unknown_policy(self):
        with pytest.raises(ValueError):
            LoadingPolicy("sometimes")


class TestApiHelpOptions:
    def test_default_is_eager(self):
        assert ApiHelpOptions().loading_policy is LoadingPolicy.EAGER

    def test_accepts_option_name(self):
        assert ApiHelpOptions.model_validate({"LoadingPolicy": "Lazy"}).loading_policy is LoadingPolicy.LAZY

    def test_invalid_value(self):
        with pytest.raises(ValidationError):
            ApiHelpOptions.model_validate({"LoadingPolicy": "sometimes"})

    def test_from_file_top_level(self, tmp_path):
        f = tmp_path / "help.yaml"
        f.write_text("LoadingPolicy: Lazy\n")
        assert ApiHelpOptions.from_file(f).loading_policy is LoadingPolicy.LAZY

    def test_from_file_section(self, tmp_path):
        f = tmp_path / "settings.yaml"
        f.write_text("Logging:\n  level: info\nApiHelp:\n  LoadingPolicy: lazy\n")
        assert ApiHelpOptions.from_file(f).loading_policy is LoadingPolicy.LAZY

    def test_from_empty_file(self, tmp_path):
        f = tmp_path / "empty.yaml"
        f.write_text("")
        assert ApiHelpOptions.from_file(f).loading_policy is LoadingPolicy.EAGER

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        f = tmp_path / "help.yaml"
        f.write_text("LoadingPolicy: Eager\n")
        monkeypatch.setenv(ENV_LOADING_POLICY, "Lazy")
        assert ApiHelpOptions.load(f).loading_policy is LoadingPolicy.LAZY

    def test_env_unset(self, monkeypatch):
        monkeypatch.delenv(ENV_LOADING_POLICY, raising=False)
        assert ApiHelpOptions.load().loading_policy is LoadingPolicy.EAGER
