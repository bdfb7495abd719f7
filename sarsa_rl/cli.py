from __future__ import annotations

import argparse
import random
import sys
from typing import Any, Dict, List, Optional

from .agent import SARSA
from .cliff import HISTORY_SIZE, render_map, run_cliff
from .config import ConfigurationError, load_config
from .logging_config import configure_logging, get_logger
from .policies import POLICY_ALIASES, list_policies

logger = get_logger(__name__)


VERDICTS = {
    "good": "These results are good and expected.",
    "fair": "These results are fair. Try running the simulation again.",
    "poor": "These results are very poor. Try running the simulation again.",
}


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="sarsa_rl",
        description="Tabular SARSA reinforcement learning",
    )
    ap.add_argument("--log-level", default="WARNING", help="Log level (DEBUG/INFO/WARNING)")
    ap.add_argument("--json-log", default=None, help="Also write JSON logs to this file")

    sub = ap.add_subparsers(dest="command", required=True)

    cliff = sub.add_parser("cliff", help="Train an agent on the cliff walking world")
    cliff.add_argument("--trials", type=int, default=8192, help="Number of moves to simulate")
    cliff.add_argument("--slip", type=float, default=0.05, help="Probability of a random move")
    cliff.add_argument("--seed", type=int, default=None, help="Seed for the world and the agent")
    cliff.add_argument("--config", default=None, help="JSON/YAML file with agent options")
    cliff.add_argument("--policy", default=None, choices=list_policies() + list(POLICY_ALIASES),
                       help="Action selection policy")
    cliff.add_argument("--alpha", type=float, default=None, help="Learning rate")
    cliff.add_argument("--gamma", type=float, default=None, help="Discount factor")
    cliff.add_argument("--epsilon", type=float, default=None, help="Exploration parameter")
    cliff.add_argument("--default-reward", type=float, default=None, help="Value of unseen pairs")
    cliff.add_argument("--strict", action="store_true", help="Reject invalid agent options")

    sub.add_parser("policies", help="List built-in policies")
    return ap


def _agent_options(args: argparse.Namespace) -> Dict[str, Any]:
    options: Dict[str, Any] = {}
    if args.config:
        options.update(load_config(args.config))

    flags = {
        "policy": args.policy,
        "alpha": args.alpha,
        "gamma": args.gamma,
        "epsilon": args.epsilon,
        "default_reward": args.default_reward,
        "prng_seed": args.seed,
    }
    options.update({k: v for k, v in flags.items() if v is not None})
    return options


def _run_cliff(args: argparse.Namespace) -> int:
    try:
        options = _agent_options(args)
        agent = SARSA(options, strict=args.strict)
    except (FileNotFoundError, ConfigurationError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    logger.event(
        "cliff_start",
        f"Training on cliff world for {args.trials} moves",
        subsystem="cli",
        config=agent.get_config().to_dict(),
    )

    def report(trial: int, average: int, size: int) -> None:
        print(f"Move {trial}, average reward per move {average} for the last {size} moves")

    result = run_cliff(
        agent,
        trials=args.trials,
        slip=args.slip,
        rng=random.Random(args.seed),
        on_checkpoint=report,
    )

    logger.event(
        "cliff_done",
        f"Finished with average reward {result.average_reward}",
        subsystem="cli",
        verdict=result.verdict,
        **agent.get_statistics(),
    )

    print()
    if result.verdict == "good":
        print(f"After {result.trials} moves the agent found a way around the cliff "
              f"and averaged {result.average_reward} points per move.")
    print(VERDICTS[result.verdict])
    print()

    print("Here is the last run.")
    print(" ".join(f"[{x},{y}]" for x, y in result.last_run))
    print("An empty map")
    print("\n".join(render_map()))
    print("The last path taken marked by 'x'")
    print("\n".join(render_map(result.last_run)))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    configure_logging(level=args.log_level, json_file=args.json_log)

    if args.command == "policies":
        for name in list_policies():
            print(name)
        return 0

    if args.trials <= 0:
        print("error: --trials must be positive", file=sys.stderr)
        return 2
    if args.trials < HISTORY_SIZE:
        logger.warning(f"Fewer than {HISTORY_SIZE} moves; the average covers the whole run")

    return _run_cliff(args)
