# main.py

"""Command line entry point for running the topology engine headless."""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from dataclasses import dataclass
from typing import Any

from ILP_Topology.config import Config, load_config

# Config attributes that are not exposed as generated CLI flags
_PRIVATE_KEYS = {
    "base_dir",
    "config_file",
    "output_dir",
    "run_seed",
    "ooda_interval_ms",
    "lens_defaults",
    "log_files",
}

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool = False) -> None:
    """Configure application logging and capture uncaught exceptions."""

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )

    def _log_excepthook(exc_type, exc, tb) -> None:
        logging.getLogger(__name__).exception(
            "Uncaught exception", exc_info=(exc_type, exc, tb)
        )

    sys.excepthook = _log_excepthook


def _config_defaults() -> dict[str, Any]:
    """Return the scalar and nested-dict attributes defined on :class:`Config`."""
    defaults: dict[str, Any] = {}
    for key, value in Config.__dict__.items():
        if key.startswith("_") or key in _PRIVATE_KEYS:
            continue
        if callable(value) or isinstance(value, (staticmethod, classmethod, list)):
            continue
        defaults[key] = value
    return defaults


def _add_config_args(
    parser: argparse.ArgumentParser, data: dict[str, Any], prefix: str = ""
) -> None:
    """Recursively add CLI flags based on ``data`` keys."""
    for key, value in data.items():
        arg_name = f"--{prefix}{key}"
        dest = f"{prefix}{key}".replace(".", "_")
        if isinstance(value, dict):
            _add_config_args(parser, value, prefix=f"{prefix}{key}.")
            continue
        if isinstance(value, bool):
            parser.add_argument(arg_name, type=lambda x: x.lower() == "true", dest=dest)
        elif value is None:
            continue
        else:
            parser.add_argument(arg_name, type=type(value), dest=dest)


def _apply_overrides(
    args: argparse.Namespace, data: dict[str, Any], prefix: str = ""
) -> None:
    """Apply CLI overrides back onto :class:`Config`."""
    for key, value in data.items():
        full = f"{prefix}{key}"
        if isinstance(value, dict):
            _apply_overrides(args, value, prefix=f"{full}.")
            continue
        override = getattr(args, full.replace(".", "_"), None)
        if override is None:
            continue
        parts = full.split(".")
        if len(parts) == 1:
            setattr(Config, key, override)
        else:
            target = getattr(Config, parts[0])
            for part in parts[1:-1]:
                target = target[part]
            target[parts[-1]] = override


@dataclass
class MainService:
    """Parse CLI arguments, drive an engine and print a JSON summary."""

    argv: list[str] | None = None

    def run(self) -> dict[str, Any]:
        args = self._parse_args()
        _configure_logging(args.verbose)
        _apply_overrides(args, _config_defaults())
        if args.seed is not None:
            Config.run_seed = args.seed
        for category in filter(None, (c.strip() for c in args.enable_log.split(","))):
            Config.log_files[category] = True

        from ILP_Topology.engine.topology import TopologyEngine

        engine = TopologyEngine(interval_ms=args.interval_ms)
        for _ in range(args.ticks):
            engine.tick()
        if args.loop:
            self._run_loop(engine, args.loop, args.interval_ms)

        result = engine.summary()
        result["corridors"] = {
            status: sum(1 for c in engine.get_corridors() if c.status.value == status)
            for status in sorted({c.status.value for c in engine.get_corridors()})
        }
        result["events"] = len(engine.events())
        result["invariant_pass_rates"] = engine.telemetry.pass_rates()
        if args.route:
            src, dst, amount = args.route
            route = engine.calculate_route(src, dst, float(amount))
            result["route"] = route.to_dict() if route else None
        print(json.dumps(result, indent=2, default=str))
        return result

    # ------------------------------------------------------------------
    @staticmethod
    def _run_loop(engine, seconds: float, interval_ms: float | None) -> None:
        """Run the timer-driven loop for ``seconds`` then stop it."""

        engine.start_loop(interval_ms)
        try:
            time.sleep(seconds)
        except KeyboardInterrupt:
            logger.info("Interrupted")
        finally:
            engine.stop_loop()

    # ------------------------------------------------------------------
    def _parse_args(self) -> argparse.Namespace:
        initial = argparse.ArgumentParser(add_help=False)
        initial.add_argument(
            "--config", default=None, help="Path to JSON or YAML configuration file"
        )
        known, _ = initial.parse_known_args(self.argv)
        if known.config:
            load_config(known.config)

        parser = argparse.ArgumentParser(
            parents=[initial], description="Run the ILP topology engine"
        )
        _add_config_args(parser, _config_defaults())
        parser.add_argument(
            "--ticks", type=int, default=1, help="Number of OODA cycles to run"
        )
        parser.add_argument("--seed", type=int, default=None, help="Random seed")
        parser.add_argument(
            "--route",
            nargs=3,
            metavar=("FROM", "TO", "AMOUNT"),
            default=None,
            help="Calculate a route after the ticks complete",
        )
        parser.add_argument(
            "--loop",
            type=float,
            default=0.0,
            metavar="SECONDS",
            help="Run the timer-driven loop for the given number of seconds",
        )
        parser.add_argument(
            "--interval-ms",
            type=float,
            default=None,
            help="Loop interval override in milliseconds",
        )
        parser.add_argument(
            "--enable-log",
            default="",
            help="Comma-separated log categories to enable (tick, event, metrics)",
        )
        parser.add_argument("--verbose", action="store_true", help="Debug logging")
        return parser.parse_args(self.argv)


def main(argv: list[str] | None = None) -> None:
    MainService(argv).run()


if __name__ == "__main__":
    main()
