# T2DPharmSim Scripted Session
# Runs one level headlessly with a scripted prescribing regimen and
# reports the outcome, optionally requesting the AI debrief.

import argparse
import logging
from typing import List, Optional

from T2DPharmSim.core.simulation_engine import ScriptedToggle, SimulationEngine
from T2DPharmSim.physiology.drug_catalog import DRUG_CATALOG
from T2DPharmSim.sdk.debrief import DebriefClient, build_debrief_prompt
from T2DPharmSim.utils.config import ConfigManager
from T2DPharmSim.utils.metrics import summarize_session

logger = logging.getLogger(__name__)


def parse_toggle(text: str) -> ScriptedToggle:
    """Parses `TIME:DRUG[:on|off]` into a scripted toggle.

    Raises:
        argparse.ArgumentTypeError: If the text is malformed or names an
            unknown drug.
    """
    parts = text.split(":")
    if len(parts) not in (2, 3):
        raise argparse.ArgumentTypeError(f"Expected TIME:DRUG[:on|off], got '{text}'")
    try:
        time_s = float(parts[0])
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid toggle time '{parts[0]}'")
    drug_id = parts[1].strip().lower()
    if drug_id not in DRUG_CATALOG:
        raise argparse.ArgumentTypeError(
            f"Unknown drug '{parts[1]}'. Known: {', '.join(DRUG_CATALOG)}"
        )
    action = parts[2].strip().lower() if len(parts) == 3 else "on"
    if action not in ("on", "off"):
        raise argparse.ArgumentTypeError(f"Toggle action must be on or off, got '{parts[2]}'")
    return time_s, drug_id, action == "on"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Run a T2DPharmSim level headlessly with a scripted regimen"
    )
    parser.add_argument("--level", "-l", type=int, default=1, choices=[1, 2, 3, 4],
                        help="Level to play")
    parser.add_argument("--seed", "-s", type=int, default=None,
                        help="Random seed (overrides simulation.seed in the config)")
    parser.add_argument("--duration", type=float, default=120.0,
                        help="Maximum simulated seconds")
    parser.add_argument("--dt", type=float, default=0.1, help="Update interval in seconds")
    parser.add_argument("--toggle", "-t", type=parse_toggle, action="append", default=[],
                        metavar="TIME:DRUG[:on|off]",
                        help="Scripted drug toggle, repeatable (e.g. 0:metformin)")
    parser.add_argument("--config", type=str, default=None, help="YAML or JSON config file")
    parser.add_argument("--csv", type=str, default=None, help="Write the vitals trace to CSV")
    parser.add_argument("--plot", type=str, default=None, help="Save a vitals plot (PNG)")
    parser.add_argument("--show-prompt", action="store_true",
                        help="Print the preceptor prompt built from the session")
    parser.add_argument("--debrief-url", type=str, default=None,
                        help="Request the AI debrief from this endpoint (overrides debrief.url)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = ConfigManager(args.config)
    engine = SimulationEngine(level=args.level, config=config.config_data, seed=args.seed)
    engine.run(args.duration, dt=args.dt, toggles=args.toggle)

    result = engine.result
    if result is None:
        print(f"Level {args.level}: no outcome after {engine.elapsed_seconds:.1f}s")
    else:
        print(f"Level {result.level}: {result.outcome.value} at {result.elapsed_seconds:.1f}s")
        for entry in result.decision_log:
            d = entry.to_payload()
            print(f"  t={d['time']:>6}s  {d['drug']:<16} {d['action'].upper():<3}"
                  f"{' (forced)' if d['forced'] else ''}")

    for key, value in summarize_session(engine.simulation_data).items():
        print(f"  {key}: {value:.2f}")

    if args.csv:
        engine.to_dataframe().to_csv(args.csv, index=False)
        logger.info(f"Trace written to '{args.csv}'")
    if args.plot:
        engine.plot_vitals_trace(save_path=args.plot)

    debrief_url = args.debrief_url or config.debrief_url
    if result is not None and (args.show_prompt or debrief_url):
        payload = engine.build_debrief_payload()
        if args.show_prompt:
            print()
            print(build_debrief_prompt(payload))
        if debrief_url:
            client = DebriefClient(
                url=debrief_url,
                timeout=config.debrief_timeout,
            )
            print()
            print(client.request(payload))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
