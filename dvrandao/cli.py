"""dvrandao.cli

Command line interface entry point for dvrandao.

Design constraints:
- argparse-based.
- Lazy imports: the eth stack is only loaded by commands that hash.
- Big integers are printed as 0x hex.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from dvrandao.core.config import Config, LoggingConfig

_STANDARD_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


@dataclass(frozen=True)
class CliContext:
    repo_root: Path
    config: Config


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        doc: dict[str, Any] = {
            "ts": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }
        for k, v in vars(record).items():
            if k not in _STANDARD_RECORD_ATTRS:
                doc[k] = v
        if record.exc_info:
            doc["exc"] = self.formatException(record.exc_info)
        return json.dumps(doc, default=str)


def configure_logging(cfg: LoggingConfig, *, level: str | None = None) -> None:
    root = logging.getLogger("dvrandao")
    root.setLevel((level or cfg.level).upper())
    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stderr)
    if cfg.json_output:
        handler.setFormatter(_JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    root.addHandler(handler)
    root.propagate = False


def _parse_seed(value: str) -> int:
    try:
        seed = int(value.strip().replace("_", ""), 0)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"seed must be decimal or 0x-prefixed hex, got {value!r}") from e
    if not 0 <= seed < (1 << 256):
        raise argparse.ArgumentTypeError("seed must fit in 256 bits")
    return seed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dvrandao",
        description="Deterministic hash-chained RNG and proof-circle generator.",
    )
    parser.add_argument("--version", action="store_true", help="Print version and exit.")
    parser.add_argument("--config", type=Path, default=None, help="YAML config file (default: config/default.yaml).")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Override the configured log level.",
    )

    sub = parser.add_subparsers(dest="command")

    p_chain = sub.add_parser("chain", help="Print successive hash chain draws")
    p_chain.add_argument("--seed", type=_parse_seed, required=True, help="256-bit seed (decimal or 0x hex)")
    p_chain.add_argument("--steps", type=int, default=1, help="Number of draws")
    p_chain.add_argument("--json", action="store_true")

    p_problem = sub.add_parser("problem", help="Generate or solve a circle problem")
    problem_sub = p_problem.add_subparsers(dest="problem_action")

    p_gen = problem_sub.add_parser("generate", help="Populate the static circle field from a seed")
    p_gen.add_argument("--seed", type=_parse_seed, required=True)
    p_gen.add_argument("--circles", type=int, default=None, help="Target static circle count")
    p_gen.add_argument("--iterations", type=int, default=None, help="Draw budget")
    p_gen.add_argument("--out", type=Path, default=None, help="Write the snapshot JSON here")
    p_gen.add_argument("--encoding", choices=["hex", "dec"], default="hex")
    p_gen.add_argument("--json", action="store_true")

    p_solve = problem_sub.add_parser("solve", help="Search proof circles against a snapshot")
    p_solve.add_argument("--snapshot", type=Path, required=True)
    p_solve.add_argument("--seed", type=_parse_seed, required=True)
    p_solve.add_argument("--count", type=int, default=1, help="Solutions to draw on one seed chain")
    p_solve.add_argument("--iterations", type=int, default=None, help="Draw budget per solution")
    p_solve.add_argument("--json", action="store_true")

    return parser


def _print_version() -> None:
    from dvrandao import __version__

    print(f"dvrandao v{__version__}")


def _load_config(repo_root: Path, path: Path | None) -> Config:
    from dvrandao.core.config import Config

    if path is not None:
        return Config.from_yaml(path)
    default = repo_root / "config" / "default.yaml"
    if default.exists():
        return Config.from_yaml(default)
    return Config()


def _circle_doc(circle: Any) -> dict[str, str]:
    return {"x": hex(circle.x), "y": hex(circle.y), "radius": hex(circle.radius)}


def _cmd_chain(ctx: CliContext, args: argparse.Namespace) -> int:
    from dvrandao.core.hashchain import iter_chain

    if args.steps <= 0:
        print("error: --steps must be >= 1", file=sys.stderr)
        return 2

    steps = []
    for i, step in enumerate(iter_chain(args.seed)):
        if i >= args.steps:
            break
        steps.append({"random_value": hex(step.random_value), "next_seed": hex(step.next_seed)})

    if args.json:
        print(json.dumps(steps, indent=2))
    else:
        for i, s in enumerate(steps):
            print(f"{i}: random={s['random_value']} next_seed={s['next_seed']}")
    return 0


def _cmd_problem_generate(ctx: CliContext, args: argparse.Namespace) -> int:
    from dvrandao.simulation.problem import VRFCircleProblem, circles_pairwise_disjoint, dumps_snapshot

    gen = ctx.config.generation
    target = args.circles if args.circles is not None else gen.static_circles
    budget = args.iterations if args.iterations is not None else gen.max_iterations

    problem = VRFCircleProblem.from_config(ctx.config.problem)
    work = problem.generate_static_circles(target, budget, args.seed)

    if args.out is not None:
        out: Path = args.out
        if not out.is_absolute():
            out = (ctx.repo_root / out).resolve()
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(dumps_snapshot(problem, encoding=args.encoding, indent=2))

    if args.json:
        print(
            json.dumps(
                {
                    "seed": hex(work.seed),
                    "iterations": work.iterations,
                    "target": target,
                    "circle_count": problem.circle_count(),
                    "disjoint": circles_pairwise_disjoint(problem.static_circles),
                    "circles": [_circle_doc(c) for c in problem.static_circles],
                },
                indent=2,
            )
        )
    else:
        print(f"Problem generated in {work.iterations} iterations ({problem.circle_count()}/{target} circles).")
        print(problem.describe())
        print(f"next_seed={hex(work.seed)}")

    return 0 if problem.circle_count() == target else 1


def _cmd_problem_solve(ctx: CliContext, args: argparse.Namespace) -> int:
    from dvrandao.simulation.problem import loads_snapshot

    if args.count <= 0:
        print("error: --count must be >= 1", file=sys.stderr)
        return 2

    if not args.snapshot.exists():
        print(f"error: snapshot not found: {args.snapshot}", file=sys.stderr)
        return 2

    budget = args.iterations if args.iterations is not None else ctx.config.generation.solution_iterations
    problem = loads_snapshot(args.snapshot.read_text(), enforce_bounds=ctx.config.problem.enforce_bounds)
    batch = problem.generate_solutions(args.seed, args.count, budget)

    results = [
        {
            "circle": _circle_doc(c.circle),
            "valid": problem.is_valid_solution(c.circle),
            "iterations": c.iterations,
            "seed": hex(c.seed),
        }
        for c in batch.candidates
    ]

    if args.json:
        print(json.dumps({"solutions": results, "seed": hex(batch.seed)}, indent=2))
    else:
        for i, (r, c) in enumerate(zip(results, batch.candidates)):
            status = "ok" if r["valid"] else "NO SOLUTION"
            print(f"{i}: {c.circle} [{status}] iterations={r['iterations']}")
        print(f"next_seed={hex(batch.seed)}")

    return 0 if all(r["valid"] for r in results) else 1


def _cmd_problem(ctx: CliContext, args: argparse.Namespace) -> int:
    dispatch: dict[str, Callable[[CliContext, argparse.Namespace], int]] = {
        "generate": _cmd_problem_generate,
        "solve": _cmd_problem_solve,
    }
    fn = dispatch.get(str(args.problem_action))
    if fn is None:
        print("error: problem requires an action (generate|solve)", file=sys.stderr)
        return 2
    return int(fn(ctx, args))


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        _print_version()
        return 0

    if not args.command:
        parser.print_help()
        return 2

    from dvrandao.core.exceptions import DvrandaoError

    repo_root = Path.cwd()
    try:
        config = _load_config(repo_root, args.config)
    except DvrandaoError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    configure_logging(config.logging, level=args.log_level)
    ctx = CliContext(repo_root=repo_root, config=config)

    dispatch: dict[str, Callable[[CliContext, argparse.Namespace], int]] = {
        "chain": _cmd_chain,
        "problem": _cmd_problem,
    }

    fn = dispatch.get(str(args.command))
    if fn is None:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 2

    try:
        return int(fn(ctx, args))
    except DvrandaoError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
