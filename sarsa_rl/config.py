"""
Agent configuration.

Merges user options over the current (or default) configuration and
resolves the policy option, given as a built-in name or a callable, into
a policy function.

Bad policy options degrade to the greedy policy with a warning unless the
resolver runs in strict mode, in which case they raise ConfigurationError.
Options can also be read from JSON or YAML files.
"""
from __future__ import annotations

import json
import logging
import sys
import warnings
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import yaml

from .policies import get_policy, greedy_policy, list_policies, policy_name
from .types import BuiltInPolicy, PolicyFunction

logger = logging.getLogger(__name__)


DEFAULTS: Dict[str, Any] = {
    "alpha": 0.2,            # Learning rate
    "gamma": 0.8,            # Discount factor
    "default_reward": 0,     # Value of never-written state-action pairs
    "epsilon": 0.001,        # Exploration parameter handed to the policy
    "policy": BuiltInPolicy.GREEDY.value,
    "prng_seed": None,       # None = unseeded, int = reproducible choices
}

# camelCase spellings of option names
OPTION_ALIASES: Dict[str, str] = {
    "defaultReward": "default_reward",
    "prngSeed": "prng_seed",
}


class ConfigurationWarning(UserWarning):
    """Emitted when an option is invalid and a fallback is used instead."""
    pass


class ConfigurationError(ValueError):
    """Raised for invalid options in strict mode and for unreadable config files."""
    pass


@dataclass
class ResolvedConfig:
    """
    Fully resolved agent configuration.

    Attributes:
        alpha: Learning rate, weight of new information in an update
        gamma: Discount factor applied to the next state's value
        default_reward: Value reported for pairs that were never written
        epsilon: Exploration parameter passed to the policy
        policy: Policy function ``(action_values, epsilon) -> label``
        policy_name: Built-in name of ``policy``, None for custom functions
        prng_seed: Seed for the agent's random generator
    """
    alpha: float
    gamma: float
    default_reward: float
    epsilon: float
    policy: PolicyFunction
    policy_name: Optional[str] = None
    prng_seed: Optional[int] = None

    def options(self) -> Dict[str, Any]:
        """Options that resolve back to this configuration."""
        return {
            "alpha": self.alpha,
            "gamma": self.gamma,
            "default_reward": self.default_reward,
            "epsilon": self.epsilon,
            "policy": self.policy,
            "prng_seed": self.prng_seed,
        }

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a plain dictionary, naming the policy."""
        data = self.options()
        data["policy"] = self.policy_name or "custom"
        return data

    def copy(self) -> "ResolvedConfig":
        """Independent copy; the policy callable itself is shared."""
        return replace(self)


def _caller_stacklevel() -> int:
    """stacklevel, seen from _report, of the first frame outside this package."""
    frame = sys._getframe(2)
    level = 2
    while frame is not None and frame.f_globals.get("__name__", "").startswith(f"{__package__}."):
        frame = frame.f_back
        level += 1
    return level


def _report(message: str, strict: bool) -> None:
    if strict:
        raise ConfigurationError(message)
    logger.warning(message, extra={"subsystem": "config", "event_type": "config_fallback"})
    warnings.warn(message, ConfigurationWarning, stacklevel=_caller_stacklevel())


def _normalize_options(options: Mapping, strict: bool) -> Dict[str, Any]:
    result: Dict[str, Any] = {}
    for key, value in options.items():
        key = OPTION_ALIASES.get(key, key)
        if key not in DEFAULTS:
            _report(f"Unknown configuration option '{key}' ignored", strict)
            continue
        result[key] = value
    return result


def resolve_policy(
    policy: Union[str, PolicyFunction, Any],
    strict: bool = False,
) -> Tuple[PolicyFunction, Optional[str]]:
    """
    Resolve a policy option into ``(function, built-in name or None)``.

    Args:
        policy: Built-in policy name, BuiltInPolicy member, or callable
        strict: Raise ConfigurationError instead of falling back to greedy

    Returns:
        The policy function and its registered name
    """
    if isinstance(policy, str):
        func = get_policy(policy)
        if func is None:
            _report(
                f"Policy '{policy}' not found. Available policies: "
                f"{', '.join(list_policies())}. Using 'greedy'.",
                strict,
            )
            return greedy_policy, BuiltInPolicy.GREEDY.value
        return func, policy_name(func)

    if callable(policy):
        return policy, policy_name(policy)

    _report(
        f"Policy must be a function or valid policy name, got "
        f"{type(policy).__name__}. Using greedy policy.",
        strict,
    )
    return greedy_policy, BuiltInPolicy.GREEDY.value


def resolve_config(
    current: Optional[Union[ResolvedConfig, Mapping]] = None,
    overrides: Optional[Mapping] = None,
    strict: bool = False,
) -> ResolvedConfig:
    """
    Merge ``overrides`` onto ``current`` and resolve the result.

    Args:
        current: Configuration to start from (defaults when None)
        overrides: Options replacing those in ``current``
        strict: Raise ConfigurationError on invalid options instead of
            warning and falling back

    Returns:
        New ResolvedConfig; neither input is modified
    """
    merged = dict(DEFAULTS)
    if isinstance(current, ResolvedConfig):
        merged.update(current.options())
    elif current is not None:
        merged.update(_normalize_options(current, strict))

    if overrides:
        merged.update(_normalize_options(overrides, strict))

    policy, name = resolve_policy(merged["policy"], strict)

    return ResolvedConfig(
        alpha=merged["alpha"],
        gamma=merged["gamma"],
        default_reward=merged["default_reward"],
        epsilon=merged["epsilon"],
        policy=policy,
        policy_name=name,
        prng_seed=merged["prng_seed"],
    )


def load_config(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Read configuration options from a JSON or YAML file.

    Args:
        path: File ending in .json, .yaml or .yml

    Returns:
        Dictionary of options, suitable as ``overrides``

    Raises:
        FileNotFoundError: If the file does not exist
        ConfigurationError: If the file cannot be parsed or does not
            contain a mapping
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        content = f.read()

    try:
        if path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(content)
        else:
            data = json.loads(content)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to parse config {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Config {path} must contain a mapping, got {type(data).__name__}"
        )

    logger.debug(f"Loaded config options from {path}: {sorted(data)}")
    return data


class ConfigPresets:
    """Ready-made configurations."""

    @staticmethod
    def default() -> ResolvedConfig:
        """Library defaults: greedy, alpha 0.2, gamma 0.8."""
        return resolve_config()

    @staticmethod
    def exploratory(epsilon: float = 0.1) -> ResolvedConfig:
        """Epsilon-greedy with a noticeable exploration rate."""
        return resolve_config(overrides={
            "policy": BuiltInPolicy.EPSILON_GREEDY.value,
            "epsilon": epsilon,
        })

    @staticmethod
    def soft() -> ResolvedConfig:
        """Softmax action selection."""
        return resolve_config(overrides={"policy": BuiltInPolicy.SOFTMAX.value})

    @staticmethod
    def deterministic_test(seed: int = 42) -> ResolvedConfig:
        """Seeded epsilon-greedy configuration for reproducible runs."""
        return resolve_config(overrides={
            "policy": BuiltInPolicy.EPSILON_GREEDY.value,
            "epsilon": 0.1,
            "prng_seed": seed,
        })

