"""
Unified entry point for the hand telemetry sender.

Usage examples:
    python hand_telemetry.py --mode webcam      # default, MediaPipe webcam tracking
    python hand_telemetry.py --mode synthetic   # scripted open/close hand, no camera
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent
PY_DIR = ROOT / "python"
if str(PY_DIR) not in sys.path:
    sys.path.insert(0, str(PY_DIR))


def run_synthetic_mode(config_path: str, side: str) -> None:
    """Replay a hand that opens and closes, for testing a receiver without a camera."""
    import time

    from HandProcessor import HandProcessor
    from LogSink import LogSink
    from SyntheticHand import SyntheticHandSource
    from helpers import load_config, merge_config, with_defaults

    cfg = with_defaults(load_config(config_path))
    # the replayed side is the one whose open/closed state goes on the wire
    cfg = merge_config(cfg, {"classifier": {"pose_side": side}})
    log = LogSink(history=cfg["log"]["history"], echo=False)
    net = cfg["network"]

    print(f"[PY] Synthetic {side} hand -> {net['address']}:{net['port']}. Ctrl+C to stop.")

    with HandProcessor(side, cfg, log=log) as proc:
        last_state = proc.state
        try:
            for hand, dt in SyntheticHandSource(side=side):
                proc.process(hand, dt)
                if proc.state != last_state:
                    last_state = proc.state
                    print(f"[{side}] state: {last_state.value}")
                time.sleep(dt)
        except KeyboardInterrupt:
            pass


def run_webcam_mode(config_path: str) -> None:
    """Delegate to the threaded MediaPipe capture + UDP telemetry loop (python/main_loop)."""
    from main_loop import main as run_main_loop

    prev_cwd = os.getcwd()
    config_path = os.path.abspath(config_path)
    os.chdir(str(PY_DIR))
    try:
        run_main_loop(config_path)
    finally:
        os.chdir(prev_cwd)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Hand telemetry launcher")
    parser.add_argument(
        "--mode",
        choices=("webcam", "synthetic"),
        default="webcam",
        help="Select source: 'webcam' runs python/main_loop.py, 'synthetic' replays a scripted hand.",
    )
    parser.add_argument(
        "--config",
        default=str(PY_DIR / "config.json"),
        help="Path to the JSON config file.",
    )
    parser.add_argument(
        "--side",
        choices=("Left", "Right"),
        default="Left",
        help="Hand side reported in synthetic mode.",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    if args.mode == "synthetic":
        run_synthetic_mode(args.config, args.side)
    else:
        run_webcam_mode(args.config)


if __name__ == "__main__":
    main()
