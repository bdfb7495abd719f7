"""
Action selection policies.

Every policy has the signature ``policy(action_values, epsilon, rng=None)``
and returns one label from ``action_values``. Custom policies only need to
accept ``(action_values, epsilon)``.

``rng`` is any object with a ``random()`` method returning a float in
[0, 1), such as ``random.Random(seed)``. It defaults to the ``random``
module so unseeded callers get the usual global generator.
"""
from __future__ import annotations

import random
from typing import Any, Dict, List, Optional

import numpy as np

from .types import ActionValues, BuiltInPolicy, PolicyFunction


class NoActionsError(ValueError):
    """Raised when a policy is asked to choose from an empty action set."""
    pass


def _labels(action_values: ActionValues) -> List[str]:
    labels = list(action_values.keys())
    if not labels:
        raise NoActionsError("No actions available")
    return labels


def greedy_policy(action_values: ActionValues, epsilon: float = 0.0, rng: Optional[Any] = None) -> str:
    """
    Always choose the highest valued action.

    Ties go to the action listed first.
    """
    labels = _labels(action_values)

    best_score = float("-inf")
    best_action = labels[0]
    for label in labels:
        score = action_values[label]
        if score > best_score:
            best_score = score
            best_action = label

    return best_action


def random_policy(action_values: ActionValues, epsilon: float = 0.0, rng: Optional[Any] = None) -> str:
    """Choose uniformly among the available actions."""
    labels = _labels(action_values)
    rng = rng or random
    return labels[int(rng.random() * len(labels))]


def epsilon_greedy_policy(action_values: ActionValues, epsilon: float, rng: Optional[Any] = None) -> str:
    """Random with probability epsilon, greedy otherwise."""
    _labels(action_values)
    rng = rng or random
    if rng.random() <= epsilon:
        return random_policy(action_values, epsilon, rng)
    return greedy_policy(action_values, epsilon, rng)


def epsilon_soft_policy(action_values: ActionValues, epsilon: float, rng: Optional[Any] = None) -> str:
    """
    Greedy with probability 1 - epsilon + epsilon / |A|, random otherwise.
    """
    labels = _labels(action_values)
    rng = rng or random

    greedy_prob = 1 - epsilon + epsilon / len(labels)
    if rng.random() <= greedy_prob:
        return greedy_policy(action_values, epsilon, rng)
    return random_policy(action_values, epsilon, rng)


def softmax_probabilities(action_values: ActionValues) -> Dict[str, float]:
    """
    Boltzmann distribution over the actions at temperature 1.

    Values are shifted by their maximum before exponentiating, which leaves
    the distribution unchanged but keeps large rewards from overflowing.
    """
    labels = _labels(action_values)
    values = np.array([action_values[label] for label in labels], dtype=float)
    weights = np.exp(values - values.max())
    probabilities = weights / weights.sum()
    return dict(zip(labels, probabilities.tolist()))


def softmax_policy(action_values: ActionValues, epsilon: float = 0.0, rng: Optional[Any] = None) -> str:
    """Sample an action in proportion to exp(value)."""
    probabilities = softmax_probabilities(action_values)
    rng = rng or random

    draw = rng.random()
    cumulative = 0.0
    for label, prob in probabilities.items():
        cumulative += prob
        if draw <= cumulative:
            return label

    # Rounding left the cumulative sum just short of the draw
    return random_policy(action_values, epsilon, rng)


def epsilon_greedy_softmax_policy(action_values: ActionValues, epsilon: float, rng: Optional[Any] = None) -> str:
    """Greedy with probability 1 - epsilon, softmax otherwise."""
    _labels(action_values)
    rng = rng or random
    if rng.random() >= epsilon:
        return greedy_policy(action_values, epsilon, rng)
    return softmax_policy(action_values, epsilon, rng)


POLICIES: Dict[str, PolicyFunction] = {
    BuiltInPolicy.GREEDY.value: greedy_policy,
    BuiltInPolicy.EPSILON_GREEDY.value: epsilon_greedy_policy,
    BuiltInPolicy.EPSILON_SOFT.value: epsilon_soft_policy,
    BuiltInPolicy.SOFTMAX.value: softmax_policy,
    BuiltInPolicy.EPSILON_GREEDY_SOFTMAX.value: epsilon_greedy_softmax_policy,
    BuiltInPolicy.RANDOM.value: random_policy,
}

# snake_case spellings accepted from config files and the command line
POLICY_ALIASES: Dict[str, str] = {
    "epsilon_greedy": BuiltInPolicy.EPSILON_GREEDY.value,
    "epsilon_soft": BuiltInPolicy.EPSILON_SOFT.value,
    "epsilon_greedy_softmax": BuiltInPolicy.EPSILON_GREEDY_SOFTMAX.value,
}


def get_policy(name: str) -> Optional[PolicyFunction]:
    """Look up a built-in policy by name or alias."""
    if isinstance(name, BuiltInPolicy):
        name = name.value
    return POLICIES.get(POLICY_ALIASES.get(name, name))


def policy_name(policy: PolicyFunction) -> Optional[str]:
    """Registered name of a built-in policy function, None for custom ones."""
    for name, func in POLICIES.items():
        if func is policy:
            return name
    return None


def list_policies() -> List[str]:
    """List built-in policy names."""
    return list(POLICIES.keys())
