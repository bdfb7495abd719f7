"""
Tabular SARSA reinforcement learning.

Provides:
- A value table keyed by canonically encoded states
- The SARSA update rule
- Six built-in action selection policies, plus custom ones
- A configurable, cloneable agent

Quick start:
    >>> from sarsa_rl import create
    >>> agent = create(policy="epsilonGreedy", epsilon=0.1)
    >>> action = agent.choose_action(state, ["up", "down"])
    >>> agent.update(state, action, reward, next_state, next_action)
"""

from .agent import SARSA, create, create_sarsa
from .config import (
    ConfigPresets,
    ConfigurationError,
    ConfigurationWarning,
    DEFAULTS,
    ResolvedConfig,
    load_config,
    resolve_config,
    resolve_policy,
)
from .encoding import digest_state, encode_action, encode_state
from .policies import (
    NoActionsError,
    POLICIES,
    epsilon_greedy_policy,
    epsilon_greedy_softmax_policy,
    epsilon_soft_policy,
    get_policy,
    greedy_policy,
    list_policies,
    random_policy,
    softmax_policy,
    softmax_probabilities,
)
from .types import Action, ActionValues, BuiltInPolicy, PolicyFunction, Reward, State, Weights
from .util import deep_copy
from .value_table import ValueTable, get_rewards, sarsa_equation, set_reward

__version__ = "1.0.0"

__all__ = [
    # Agent
    "SARSA",
    "create",
    "create_sarsa",

    # Configuration
    "ConfigPresets",
    "ConfigurationError",
    "ConfigurationWarning",
    "DEFAULTS",
    "ResolvedConfig",
    "load_config",
    "resolve_config",
    "resolve_policy",

    # Policies
    "BuiltInPolicy",
    "NoActionsError",
    "POLICIES",
    "greedy_policy",
    "random_policy",
    "epsilon_greedy_policy",
    "epsilon_soft_policy",
    "softmax_policy",
    "epsilon_greedy_softmax_policy",
    "softmax_probabilities",
    "get_policy",
    "list_policies",

    # Value table
    "ValueTable",
    "set_reward",
    "get_rewards",
    "sarsa_equation",
    "encode_state",
    "encode_action",
    "digest_state",
    "deep_copy",

    # Types
    "State",
    "Action",
    "Reward",
    "ActionValues",
    "PolicyFunction",
    "Weights",
]
