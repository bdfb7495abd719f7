"""
Cliff walking simulation.

The world is a 7x3 grid:

    +-------+
    |ScccccR|
    |       |
    |       |
    +-------+

The agent starts at S and tries to reach R. Touching a 'c' means falling
off the cliff (-10000), reaching R pays 1000, every other move costs 1.
After falling or reaching R the agent starts over. A small share of moves
go in a random direction, which makes the path along the cliff edge risky.
Taking the long way round takes 12 moves, so an average near 80 per move
is close to perfect.
"""
from __future__ import annotations

import math
import random
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Tuple

from .agent import SARSA, create
from .util import clamp

Position = Tuple[int, int]

GROUND = -1
CLIFF = -10000
GOAL = 1000

# Indexed as REWARDS[x][y]
REWARDS: List[List[int]] = [
    [GROUND, GROUND, GROUND],
    [CLIFF, GROUND, GROUND],
    [CLIFF, GROUND, GROUND],
    [CLIFF, GROUND, GROUND],
    [CLIFF, GROUND, GROUND],
    [CLIFF, GROUND, GROUND],
    [GOAL, GROUND, GROUND],
]

WIDTH = len(REWARDS)
HEIGHT = len(REWARDS[0])
START: Position = (0, 0)

ACTIONS = ["up", "down", "right", "left", "hold"]
# Slips only pick among the moving actions
SLIP_ACTIONS = ACTIONS[:4]

HISTORY_SIZE = 800


def move(location: Position, action: str) -> Position:
    """Position reached by taking ``action``; walls stop movement."""
    x, y = location
    if action == "up":
        return x, int(clamp(y + 1, 0, HEIGHT - 1))
    if action == "down":
        return x, int(clamp(y - 1, 0, HEIGHT - 1))
    if action == "left":
        return int(clamp(x + 1, 0, WIDTH - 1)), y
    if action == "right":
        return int(clamp(x - 1, 0, WIDTH - 1)), y
    return x, y


def reward_at(location: Position) -> int:
    x, y = location
    return REWARDS[x][y]


def _js_round(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass
class CliffResult:
    """
    Outcome of a cliff walking run.

    Attributes:
        trials: Number of moves simulated
        average_reward: Rounded mean reward over the recent history
        history_size: Number of moves the average covers
        last_run: Positions visited in the last complete episode
        checkpoints: (move, average reward) pairs at powers of two
    """
    trials: int
    average_reward: int
    history_size: int
    last_run: List[Position] = field(default_factory=list)
    checkpoints: List[Tuple[int, int]] = field(default_factory=list)

    @property
    def verdict(self) -> str:
        if self.average_reward >= 70:
            return "good"
        if self.average_reward >= 50:
            return "fair"
        return "poor"


def run_cliff(
    agent: Optional[SARSA] = None,
    trials: int = 8192,
    slip: float = 0.05,
    rng: Optional[random.Random] = None,
    on_checkpoint: Optional[Callable[[int, int, int], Any]] = None,
) -> CliffResult:
    """
    Train ``agent`` on the cliff world for ``trials`` moves.

    Args:
        agent: Agent to train (a default agent when None)
        trials: Number of moves, not episodes
        slip: Probability that a move goes in a random direction; no
            slips happen during the last HISTORY_SIZE moves
        rng: Random source for slips
        on_checkpoint: Called as ``(move, average, history_size)`` at
            every power-of-two move from 64 on

    Returns:
        CliffResult summarizing the run
    """
    agent = agent or create()
    rng = rng or random.Random()

    location: Position = START
    action = "hold"
    reward = 0

    history: deque = deque(maxlen=HISTORY_SIZE)
    last_run: List[Position] = []
    current_run: List[Position] = []
    checkpoints: List[Tuple[int, int]] = []

    for trial in range(1, trials + 1):
        # Anything other than plain ground ends the episode
        if reward != GROUND:
            location = START
            action = "hold"
            last_run = current_run
            current_run = [location]

        next_location = move(location, action)
        next_action = agent.choose_action(next_location, ACTIONS)

        if rng.random() <= slip and trial < trials - HISTORY_SIZE:
            next_action = SLIP_ACTIONS[int(rng.random() * len(SLIP_ACTIONS))]

        reward = reward_at(next_location)
        agent.update(location, action, reward, next_location, next_action)

        location = next_location
        action = next_action
        current_run.append(location)
        history.append(reward)

        if trial >= 64 and trial & (trial - 1) == 0:
            average = _js_round(sum(history) / len(history))
            checkpoints.append((trial, average))
            if on_checkpoint is not None:
                on_checkpoint(trial, average, len(history))

    average = _js_round(sum(history) / len(history)) if history else 0
    return CliffResult(
        trials=trials,
        average_reward=average,
        history_size=len(history),
        last_run=last_run,
        checkpoints=checkpoints,
    )


def render_map(path: Optional[List[Position]] = None) -> List[str]:
    """Draw the world, marking visited positions with 'x'."""
    cells = [[" "] * HEIGHT for _ in range(WIDTH)]
    for x in range(WIDTH):
        if REWARDS[x][0] == CLIFF:
            cells[x][0] = "c"
    cells[START[0]][START[1]] = "S"
    cells[WIDTH - 1][0] = "R"

    for x, y in path or []:
        cells[x][y] = "x"

    border = "+" + "-" * WIDTH + "+"
    lines = [border]
    for y in range(HEIGHT):
        lines.append("|" + "".join(cells[x][y] for x in range(WIDTH)) + "|")
    lines.append(border)
    return lines
