"""
State-action value storage and the SARSA update rule.

Values live in a two-level mapping: encoded state -> action label -> value.
Entries only exist after an explicit write; reads of unknown pairs fall
back to a default value without creating anything.
"""
from __future__ import annotations

from typing import Iterable, Iterator, Optional, Tuple

from .encoding import KeyEncoder, encode_action, encode_state
from .types import Action, ActionValues, Reward, State, Weights
from .util import deep_copy


def set_reward(
    weights: Weights,
    state: State,
    action: Action,
    reward: Reward,
    encoder: KeyEncoder = encode_state,
) -> None:
    """
    Store a value for a state-action pair.

    Args:
        weights: Table to modify
        state: State the action was taken in
        action: Action taken
        reward: Value to store
        encoder: State key encoder
    """
    state_key = encoder(state)
    weights.setdefault(state_key, {})[encode_action(action)] = reward


def get_rewards(
    weights: Weights,
    state: State,
    actions: Iterable[Action],
    default_reward: Reward,
    encoder: KeyEncoder = encode_state,
) -> ActionValues:
    """
    Look up values for several actions in one state.

    Args:
        weights: Table to read
        state: State to look up
        actions: Actions to look up, in the order the result should keep
        default_reward: Value for pairs that were never written
        encoder: State key encoder

    Returns:
        Dictionary of action label -> value
    """
    stored = weights.get(encoder(state), {})
    result: ActionValues = {}
    for action in actions:
        label = encode_action(action)
        if label not in result:
            result[label] = stored.get(label, default_reward)
    return result


def sarsa_equation(
    state0: State,
    action0: Action,
    reward1: Reward,
    state1: State,
    action1: Action,
    alpha: float,
    gamma: float,
    weights: Weights,
    default_reward: Reward,
    encoder: KeyEncoder = encode_state,
) -> float:
    """
    Apply one SARSA update and return the new value.

    Q(s, a) <- (1 - alpha) * Q(s, a) + alpha * (r + gamma * Q(s', a'))

    Args:
        state0: State at time t
        action0: Action at time t
        reward1: Reward observed at time t+1
        state1: State at time t+1
        action1: Action chosen at time t+1
        alpha: Learning rate
        gamma: Discount factor
        weights: Table to update
        default_reward: Value for pairs that were never written
        encoder: State key encoder

    Returns:
        Updated Q(state0, action0)
    """
    q_t0 = get_rewards(weights, state0, [action0], default_reward, encoder)[encode_action(action0)]
    q_t1 = get_rewards(weights, state1, [action1], default_reward, encoder)[encode_action(action1)]

    result = (1 - alpha) * q_t0 + alpha * (reward1 + gamma * q_t1)

    set_reward(weights, state0, action0, result, encoder)
    return result


class ValueTable:
    """
    Tabular Q-value store.

    Thin object wrapper over the module functions so an agent can own
    its table together with the state encoder it was built with.
    """

    def __init__(
        self,
        encoder: KeyEncoder = encode_state,
        weights: Optional[Weights] = None,
    ):
        self.encoder = encoder
        self.weights: Weights = weights if weights is not None else {}

    def set(self, state: State, action: Action, reward: Reward) -> None:
        set_reward(self.weights, state, action, reward, self.encoder)

    def get(
        self,
        state: State,
        actions: Iterable[Action],
        default_reward: Reward,
    ) -> ActionValues:
        return get_rewards(self.weights, state, actions, default_reward, self.encoder)

    def update(
        self,
        state0: State,
        action0: Action,
        reward1: Reward,
        state1: State,
        action1: Action,
        alpha: float,
        gamma: float,
        default_reward: Reward,
    ) -> float:
        """Apply the SARSA update to this table."""
        return sarsa_equation(
            state0, action0, reward1, state1, action1,
            alpha, gamma, self.weights, default_reward, self.encoder,
        )

    def entries(self) -> Iterator[Tuple[object, str, float]]:
        """Iterate over (state key, action label, value) triples."""
        for state_key, actions in self.weights.items():
            for label, value in actions.items():
                yield state_key, label, value

    def states(self) -> int:
        """Number of states with at least one stored value."""
        return len(self.weights)

    def __len__(self) -> int:
        return sum(len(actions) for actions in self.weights.values())

    def __contains__(self, pair: object) -> bool:
        if not isinstance(pair, tuple) or len(pair) != 2:
            return False
        state, action = pair
        try:
            state_key = self.encoder(state)
        except TypeError:
            return False
        return encode_action(action) in self.weights.get(state_key, {})

    def clear(self) -> None:
        """Drop every stored value."""
        self.weights = {}

    def copy(self) -> "ValueTable":
        """Independent copy sharing no mutable state."""
        return ValueTable(encoder=self.encoder, weights=deep_copy(self.weights))

    def to_dict(self) -> Weights:
        """Copy of the raw mapping, for inspection."""
        return deep_copy(self.weights)
