import argparse
import sys
import time
import json
import os
from dataclasses import fields

# Adjust path to find modules if running locally without install
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from hemoflow.core.engine import SimulationEngine, SimulationConfig
from hemoflow.core.metrics import summarize_history
from hemoflow.core.state import SimulationParameters

_PARAM_KEYS = {f.name for f in fields(SimulationParameters)}


def build_parameters(config_data: dict) -> SimulationParameters:
    """Pick SimulationParameters fields out of a config mapping."""
    return SimulationParameters(**{k: v for k, v in config_data.items() if k in _PARAM_KEYS})


def build_config(config_data: dict, args) -> SimulationConfig:
    mode = "steady_state" if args.steady_state else config_data.get('mode', 'rest')
    seed = args.seed if args.seed is not None else config_data.get('rng_seed')
    return SimulationConfig(
        substeps=config_data.get('substeps', SimulationConfig.substeps),
        mode=mode,
        rng_seed=seed,
    )


def run_headless(args):
    """Run simulation in headless mode."""
    print(f"Starting Headless Simulation ({args.ticks} ticks)...")

    config_data = {}
    if args.config:
        try:
            with open(args.config, 'r') as f:
                config_data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            print(f"Error loading config: {e}")
            sys.exit(1)

    sim_config = build_config(config_data, args)

    if args.resume:
        engine = SimulationEngine.load_checkpoint(args.resume, sim_config)
        print(f"Resumed from {args.resume} at t={engine.time:.3f}s")
    else:
        engine = SimulationEngine(build_parameters(config_data), sim_config)

    if args.record:
        engine.start_recording(output_dir=args.record_dir, sample_interval_sec=args.record_interval)
    engine.start()

    start_real = time.time()
    for i in range(args.ticks):
        result = engine.tick()
        if result and args.print_every > 0 and i % args.print_every == 0:
            print(
                f"Time: {result.time:.3f}s | G: {result.pressure_gradient:.1f} | "
                f"Vmax: {result.max_velocity:.4f} | Flow: {result.flow_rate:.3f} L/min | "
                f"Risk: {result.risk_index:.2f}"
            )
    end_real = time.time()

    engine.stop()
    engine.stop_recording()
    if args.checkpoint:
        engine.save_checkpoint(args.checkpoint)
        print(f"Checkpoint written to {args.checkpoint}")

    summary = summarize_history(engine.get_history())
    for key, stats in summary.items():
        print(f"{key:>10}: mean {stats['mean']:.4f}  min {stats['min']:.4f}  max {stats['max']:.4f}")
    print(f"Simulation completed in {end_real - start_real:.2f}s real time.")
    return engine


def main(argv=None):
    parser = argparse.ArgumentParser(description="hemoflow - Pulsatile Blood Flow Simulator")
    parser.add_argument("--ticks", type=int, default=600, help="Number of ticks to run (8 sub-steps each)")
    parser.add_argument("--config", type=str, help="Path to JSON parameter file")
    parser.add_argument("--seed", type=int, default=None, help="Seed for tracer spawning")
    parser.add_argument("--steady-state", action="store_true", help="Start from the steady Poiseuille profile")
    parser.add_argument("--print-every", type=int, default=60, help="Print a status line every N ticks (0 disables)")
    parser.add_argument("--record", action="store_true", help="Enable CSV recording")
    parser.add_argument("--record-dir", type=str, default="recordings", help="Output directory for recordings")
    parser.add_argument("--record-interval", type=float, default=0.0, help="Minimum simulated seconds between CSV rows")
    parser.add_argument("--checkpoint", type=str, help="Write a JSON checkpoint here when done")
    parser.add_argument("--resume", type=str, help="Resume from a JSON checkpoint")

    args = parser.parse_args(argv)
    return run_headless(args)

if __name__ == "__main__":
    main()
