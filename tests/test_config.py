"""
Tests for configuration resolution and loading.
"""
import json
import logging

import pytest

from sarsa_rl import create
from sarsa_rl.config import (
    ConfigPresets,
    ConfigurationError,
    ConfigurationWarning,
    DEFAULTS,
    ResolvedConfig,
    load_config,
    resolve_config,
    resolve_policy,
)
from sarsa_rl.policies import (
    epsilon_greedy_policy,
    greedy_policy,
    random_policy,
    softmax_policy,
)
from sarsa_rl.types import BuiltInPolicy


def custom_policy(action_values, epsilon):
    return list(action_values)[-1]


class TestResolveConfig:
    """Tests for resolve_config."""

    def test_defaults(self):
        """Should fall back to the library defaults."""
        config = resolve_config()

        assert config.alpha == 0.2
        assert config.gamma == 0.8
        assert config.default_reward == 0
        assert config.epsilon == 0.001
        assert config.policy is greedy_policy
        assert config.policy_name == "greedy"
        assert config.prng_seed is None

    def test_overrides(self):
        config = resolve_config(overrides={"alpha": 0.9, "gamma": 0.1})
        assert config.alpha == 0.9
        assert config.gamma == 0.1
        assert config.default_reward == 0

    def test_merge_keeps_other_fields(self):
        """Overriding alpha leaves every other resolved field alone."""
        base = resolve_config(overrides={
            "gamma": 0.5, "default_reward": -3, "epsilon": 0.2, "policy": "softmax",
        })
        merged = resolve_config(base, {"alpha": 0.3})

        assert merged.alpha == 0.3
        assert merged.gamma == 0.5
        assert merged.default_reward == -3
        assert merged.epsilon == 0.2
        assert merged.policy is softmax_policy

    def test_inputs_not_modified(self):
        base = resolve_config()
        overrides = {"alpha": 0.5}
        resolve_config(base, overrides)
        assert base.alpha == 0.2
        assert overrides == {"alpha": 0.5}

    def test_camel_case_alias(self):
        config = resolve_config(overrides={"defaultReward": -100})
        assert config.default_reward == -100

    def test_mapping_as_current(self):
        config = resolve_config({"epsilon": 0.3}, {"policy": "random"})
        assert config.epsilon == 0.3
        assert config.policy is random_policy


class TestResolvePolicy:
    """Tests for policy resolution."""

    @pytest.mark.parametrize("name", [p.value for p in BuiltInPolicy])
    def test_every_builtin_name(self, name):
        func, resolved_name = resolve_policy(name)
        assert callable(func)
        assert resolved_name == name

    def test_enum_member(self):
        assert resolve_policy(BuiltInPolicy.EPSILON_GREEDY) == (epsilon_greedy_policy, "epsilonGreedy")

    def test_snake_case_alias(self):
        assert resolve_policy("epsilon_greedy") == (epsilon_greedy_policy, "epsilonGreedy")

    def test_custom_callable_kept(self):
        func, name = resolve_policy(custom_policy)
        assert func is custom_policy
        assert name is None

    def test_builtin_callable_named(self):
        assert resolve_policy(random_policy) == (random_policy, "random")

    def test_unknown_name_degrades_to_greedy(self, caplog):
        """Unknown names warn and fall back instead of raising."""
        with caplog.at_level(logging.WARNING, logger="sarsa_rl.config"):
            with pytest.warns(ConfigurationWarning, match="not found"):
                config = resolve_config(overrides={"policy": "bogus"})

        assert config.policy is greedy_policy
        assert config.policy_name == "greedy"
        assert any("bogus" in r.getMessage() for r in caplog.records)

    def test_invalid_type_degrades_to_greedy(self):
        with pytest.warns(ConfigurationWarning, match="must be a function"):
            config = resolve_config(overrides={"policy": 42})
        assert config.policy is greedy_policy

    def test_strict_unknown_name_raises(self):
        with pytest.raises(ConfigurationError, match="bogus"):
            resolve_config(overrides={"policy": "bogus"}, strict=True)

    def test_strict_invalid_type_raises(self):
        with pytest.raises(ConfigurationError):
            resolve_config(overrides={"policy": None}, strict=True)


class TestWarningLocation:
    """Fallback warnings point at the calling code."""

    def test_resolve_config(self):
        with pytest.warns(ConfigurationWarning) as record:
            resolve_config(overrides={"policy": "bogus"})
        assert record[0].filename == __file__

    def test_unknown_option(self):
        with pytest.warns(ConfigurationWarning) as record:
            resolve_config(overrides={"lambda_": 0.9})
        assert record[0].filename == __file__

    def test_agent_construction_and_set_config(self):
        with pytest.warns(ConfigurationWarning) as record:
            agent = create(policy="bogus")
            agent.set_config({"policy": 42})
        assert [w.filename for w in record] == [__file__, __file__]


class TestUnknownOptions:
    """Tests for option names the resolver does not know."""

    def test_lenient_ignores(self):
        with pytest.warns(ConfigurationWarning, match="lambda_"):
            config = resolve_config(overrides={"lambda_": 0.9, "alpha": 0.4})
        assert config.alpha == 0.4
        assert not hasattr(config, "lambda_")

    def test_strict_raises(self):
        with pytest.raises(ConfigurationError):
            resolve_config(overrides={"lambda_": 0.9}, strict=True)


class TestResolvedConfig:
    """Tests for the ResolvedConfig dataclass."""

    def test_to_dict_names_policy(self):
        data = resolve_config(overrides={"policy": "softmax"}).to_dict()
        assert data["policy"] == "softmax"
        assert set(data) == set(DEFAULTS)

    def test_to_dict_custom_policy(self):
        data = resolve_config(overrides={"policy": custom_policy}).to_dict()
        assert data["policy"] == "custom"

    def test_to_dict_roundtrip(self):
        original = resolve_config(overrides={"alpha": 0.7, "policy": "epsilonSoft", "prng_seed": 3})
        restored = resolve_config(original.to_dict())
        assert restored == original

    def test_copy_is_independent(self):
        original = resolve_config()
        copied = original.copy()
        copied.alpha = 0.99
        assert original.alpha == 0.2
        assert copied.policy is original.policy


class TestLoadConfig:
    """Tests for reading options from files."""

    def test_json(self, tmp_path):
        path = tmp_path / "agent.json"
        path.write_text(json.dumps({"alpha": 0.5, "policy": "softmax"}))
        assert load_config(path) == {"alpha": 0.5, "policy": "softmax"}

    def test_yaml(self, tmp_path):
        path = tmp_path / "agent.yaml"
        path.write_text("alpha: 0.5\ndefaultReward: -1\npolicy: epsilonGreedy\n")
        options = load_config(str(path))
        config = resolve_config(overrides=options)
        assert config.alpha == 0.5
        assert config.default_reward == -1
        assert config.policy is epsilon_greedy_policy

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "empty.yml"
        path.write_text("")
        assert load_config(path) == {}

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.json")

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[1, 2]")
        with pytest.raises(ConfigurationError):
            load_config(path)

    def test_malformed(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        with pytest.raises(ConfigurationError):
            load_config(path)


class TestPresets:
    """Tests for ConfigPresets."""

    def test_default(self):
        assert ConfigPresets.default() == resolve_config()

    def test_exploratory(self):
        config = ConfigPresets.exploratory()
        assert config.policy is epsilon_greedy_policy
        assert config.epsilon == 0.1

    def test_soft(self):
        assert ConfigPresets.soft().policy is softmax_policy

    def test_deterministic(self):
        config = ConfigPresets.deterministic_test(seed=7)
        assert isinstance(config, ResolvedConfig)
        assert config.prng_seed == 7
