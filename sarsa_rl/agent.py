"""
SARSA agent.

Owns one value table and one resolved configuration, and exposes the
operations a training loop needs: read and write values, apply the SARSA
update for an observed transition, choose the next action, and clone.

Agents are not thread-safe. To run experiments in parallel, clone one
agent per worker; clones share no mutable state.
"""
from __future__ import annotations

import logging
import random
from collections.abc import Mapping
from typing import Any, Dict, Iterable, Optional, Union

from .config import ResolvedConfig, resolve_config
from .encoding import KeyEncoder, encode_action, encode_state
from .types import Action, ActionValues, Reward, State, Weights
from .util import deep_copy
from .value_table import ValueTable

logger = logging.getLogger(__name__)

ConfigLike = Union[ResolvedConfig, Mapping]


class SARSA:
    """
    Tabular SARSA learner.

    SARSA is an on-policy temporal difference algorithm: each update
    bootstraps from the value of the action actually chosen in the next
    state.

    Example:
        >>> agent = SARSA({"alpha": 0.9, "gamma": 0.1, "default_reward": -1})
        >>> round(agent.update(5, "up", 10, 6, "down"), 2)
        8.81
        >>> agent.choose_action(5, ["up", "down"])
        'up'
    """

    def __init__(
        self,
        config: Optional[ConfigLike] = None,
        *,
        strict: bool = False,
        encoder: KeyEncoder = encode_state,
    ):
        """
        Create an agent with an empty value table.

        Args:
            config: Options (alpha, gamma, default_reward, epsilon, policy,
                prng_seed) or a ResolvedConfig; missing options use defaults
            strict: Raise ConfigurationError for invalid options instead
                of warning and falling back
            encoder: Turns states into table keys
        """
        self.strict = strict
        self._config = resolve_config(config, strict=strict)
        self._table = ValueTable(encoder=encoder)
        self._rng = random.Random(self._config.prng_seed)
        self.update_count = 0

    def get_config(self) -> ResolvedConfig:
        """Copy of the current configuration."""
        return self._config.copy()

    def set_config(self, config: ConfigLike) -> "SARSA":
        """
        Merge options over the current configuration.

        Args:
            config: Options to change; others keep their current values

        Returns:
            This agent, for chaining
        """
        previous_seed = self._config.prng_seed
        if isinstance(config, ResolvedConfig):
            config = config.options()
        self._config = resolve_config(self._config, config, strict=self.strict)

        if self._config.prng_seed != previous_seed:
            self._rng = random.Random(self._config.prng_seed)
        return self

    def set_reward(self, state: State, action: Action, reward: Reward) -> "SARSA":
        """
        Set the value of a state-action pair directly.

        Returns:
            This agent, for chaining
        """
        self._table.set(state, action, reward)
        return self

    def get_rewards(self, state: State, actions: Iterable[Action]) -> ActionValues:
        """
        Current values of ``actions`` in ``state``.

        Pairs that were never written report the configured default_reward.

        Returns:
            Dictionary of action label -> value, in the order given
        """
        return deep_copy(self._table.get(state, actions, self._config.default_reward))

    def update(
        self,
        state0: State,
        action0: Action,
        reward1: Reward,
        state1: State,
        action1: Action,
    ) -> float:
        """
        SARSA update: Q(s,a) <- (1-alpha) Q(s,a) + alpha (r + gamma Q(s',a')).

        Args:
            state0: State at time t
            action0: Action taken at time t
            reward1: Reward received at time t+1
            state1: State at time t+1
            action1: Action chosen at time t+1

        Returns:
            Updated value of (state0, action0)
        """
        cfg = self._config
        value = self._table.update(
            state0, action0, reward1, state1, action1,
            cfg.alpha, cfg.gamma, cfg.default_reward,
        )
        self.update_count += 1
        logger.debug(
            f"Q({state0!r}, {action0!r}) <- {value:.6g} "
            f"(r={reward1}, next={state1!r}/{action1!r})",
            extra={"subsystem": "agent"},
        )
        return value

    def choose_action(self, state: State, actions: Iterable[Action]) -> Any:
        """
        Choose an action for ``state`` using the configured policy.

        Args:
            state: Current state
            actions: Actions available in ``state``

        Returns:
            The element of ``actions`` whose label the policy picked

        Raises:
            NoActionsError: If ``actions`` is empty
        """
        actions = list(actions)
        cfg = self._config
        values = self._table.get(state, actions, cfg.default_reward)

        if cfg.policy_name is not None:
            label = cfg.policy(values, cfg.epsilon, rng=self._rng)
        else:
            label = cfg.policy(values, cfg.epsilon)

        for action in actions:
            if encode_action(action) == label:
                return action
        return label

    def clone(self) -> "SARSA":
        """
        Independent copy of this agent.

        The clone starts with the same configuration, values, random
        generator state and update count; afterwards nothing is shared.
        """
        cloned = SARSA(self._config.copy(), strict=self.strict, encoder=self._table.encoder)
        cloned._table = self._table.copy()
        cloned._rng.setstate(self._rng.getstate())
        cloned.update_count = self.update_count
        return cloned

    @property
    def weights(self) -> Weights:
        """Copy of the raw value table, keyed by encoded state."""
        return self._table.to_dict()

    def get_statistics(self) -> Dict[str, Any]:
        """Table size, update count and configuration summary."""
        return {
            "entries": len(self._table),
            "states": self._table.states(),
            "updates": self.update_count,
            "config": self._config.to_dict(),
        }

    def reset(self) -> None:
        """Forget every learned value."""
        self._table.clear()
        self.update_count = 0


def create(config: Optional[ConfigLike] = None, **options: Any) -> SARSA:
    """
    Create a SARSA agent.

    Args:
        config: Options mapping or ResolvedConfig
        **options: Further options, applied over ``config``;
            ``strict`` and ``encoder`` are passed to the agent

    Returns:
        New SARSA instance
    """
    strict = options.pop("strict", False)
    encoder = options.pop("encoder", encode_state)
    agent = SARSA(config, strict=strict, encoder=encoder)
    if options:
        agent.set_config(options)
    return agent


create_sarsa = create
