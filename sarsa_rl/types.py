from __future__ import annotations
from enum import Enum
from typing import Any, Callable, Dict, Union

# Anything encodable by sarsa_rl.encoding
State = Any
Action = Union[str, int, float]
Reward = float

# label -> estimated value, in the caller's action order
ActionValues = Dict[str, float]

# encoded state -> (action label -> value)
Weights = Dict[Any, Dict[str, float]]

PolicyFunction = Callable[..., Any]


class BuiltInPolicy(str, Enum):
    """Names of the built-in action selection policies."""
    GREEDY = "greedy"
    EPSILON_GREEDY = "epsilonGreedy"
    EPSILON_SOFT = "epsilonSoft"
    SOFTMAX = "softmax"
    EPSILON_GREEDY_SOFTMAX = "epsilonGreedySoftmax"
    RANDOM = "random"
