# -*- coding: utf-8 -*-
"""
wheel_phase.replay

CLI: speel een sessie af door een detector en print telling / kwaliteit / afstand.

Gebruik:
    python -m wheel_phase.replay synth --duration 10 --freq 1.0 [--plot]
    python -m wheel_phase.replay synth --gyro-burst 5 7 3.0 --save-csv run.csv
    python -m wheel_phase.replay from-csv run.csv --method magnetic_pca --profile bench
"""

from __future__ import annotations

import argparse
import logging
from typing import List, Optional

import matplotlib.pyplot as plt

from .detector_selector import DetectionMethod, DetectorSelector
from .profiles import DetectorConfig, PROFILES, get_profile, load_config_from_json
from .session_io import frame_events, load_session_csv, save_session_csv
from .settings_store import InMemorySettingsStore
from .synthetic import generate_session, iter_events


def _build_config(args: argparse.Namespace) -> DetectorConfig:
    if args.config_json:
        return load_config_from_json(args.config_json, args.profile)
    return get_profile(args.profile)


def run_replay(events, selector: DetectorSelector, quiet: bool = True) -> dict:
    """Voer events door de selector; return een trace voor plots/summary."""
    trace = {"t": [], "phase": [], "quality": [], "count": []}
    last_count = selector.revolution_count()

    for sensor, t, x, y, z in events:
        if sensor == "mag":
            selector.feed_field_sample(x, y, z, t)
            count = selector.revolution_count()
            trace["t"].append(t)
            trace["phase"].append(selector.current_phase_angle())
            trace["quality"].append(selector.signal_quality())
            trace["count"].append(count)
            if not quiet and count != last_count:
                print(f"{t:8.3f}s  count={count:5d}  quality={selector.signal_quality():5.3f}")
            last_count = count
        elif sensor == "gyro":
            selector.feed_gyro_sample(x, y, z, t)
        elif sensor == "accel":
            selector.feed_accel_sample(x, y, z, t)

    return trace


def _plot_trace(trace: dict, title: str) -> None:
    fig, (ax1, ax2, ax3) = plt.subplots(3, 1, sharex=True)

    ax1.set_title(title)
    ax1.set_ylabel("phase [rad]")
    ax1.plot(trace["t"], trace["phase"], linewidth=0.8)
    ax1.grid(True, which="both", linestyle=":", linewidth=0.5)

    ax2.set_ylabel("planarity")
    ax2.plot(trace["t"], trace["quality"])
    ax2.set_ylim(-0.05, 1.05)
    ax2.grid(True, which="both", linestyle=":", linewidth=0.5)

    ax3.set_xlabel("t [s]")
    ax3.set_ylabel("revolutions")
    ax3.step(trace["t"], trace["count"], where="post")
    ax3.grid(True, which="both", linestyle=":", linewidth=0.5)

    plt.tight_layout()
    try:
        plt.show()
    except KeyboardInterrupt:
        print("\n[i] Plot afgebroken met Ctrl+C (KeyboardInterrupt genegeerd).")


def _replay_and_report(args: argparse.Namespace, events, label: str) -> int:
    config = _build_config(args)
    selector = DetectorSelector(InMemorySettingsStore(), config=config)
    selector.switch_method(args.method)
    selector.start()

    print(
        f"[i] Replay {label}\n"
        f"    method = {selector.method.value}, profile = {config.name}, "
        f"window = {config.window_capacity} samples"
    )

    trace = run_replay(events, selector, quiet=args.quiet)
    selector.stop()

    count = selector.revolution_count()
    print(f"[i] revolutions = {count}")
    print(f"[i] signal_quality = {selector.signal_quality():.3f}")
    print(f"[i] distance = {selector.rounded_distance_m():.2f} m "
          f"(circumference {selector.wheel_circumference_cm} cm)")

    if args.plot and trace["t"]:
        _plot_trace(trace, f"{selector.method.value} – {label}")
    return count


def cmd_synth(args: argparse.Namespace) -> int:
    bursts = [tuple(b) for b in (args.gyro_burst or [])]
    session = generate_session(
        duration_s=args.duration,
        sample_rate_hz=args.rate,
        freq_hz=args.freq,
        amplitude=args.amplitude,
        normal=tuple(args.normal),
        direction=-1 if args.reverse else 1,
        noise_std=args.noise,
        seed=args.seed,
        aux_rate_hz=args.aux_rate,
        gyro_bursts=bursts,
    )
    if args.save_csv:
        path = save_session_csv(session, args.save_csv)
        print(f"[i] Sessie opgeslagen: {path}")

    label = f"synth {args.duration:.1f}s @ {args.freq:.2f} Hz"
    return _replay_and_report(args, iter_events(session), label)


def cmd_from_csv(args: argparse.Namespace) -> int:
    df = load_session_csv(args.csv)
    print(f"[i] {len(df)} samples geladen uit {args.csv}")
    return _replay_and_report(args, frame_events(df), args.csv)


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--method",
        default=DetectionMethod.MAGNETIC_PCA.name.lower(),
        choices=[m.name.lower() for m in DetectionMethod],
        help="Detectiemethode (default: magnetic_pca).",
    )
    p.add_argument(
        "--profile",
        default="default",
        help=f"Profielnaam (presets: {', '.join(PROFILES)}).",
    )
    p.add_argument(
        "--config-json",
        default=None,
        help="JSON met profielen; --profile kiest daaruit.",
    )
    p.add_argument("--plot", action="store_true", help="Toon fase, planarity en telling.")
    p.add_argument("--quiet", action="store_true", help="Geen regel per omwenteling.")
    p.add_argument("--verbose", "-v", action="store_true", help="Logging op DEBUG niveau.")


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Replay van magnetometer-sessies door de wheel_phase detectors"
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_synth = sub.add_parser("synth", help="Genereer een synthetische sessie en speel die af.")
    p_synth.add_argument("--duration", type=float, default=10.0, help="Duur in s (default 10).")
    p_synth.add_argument("--rate", type=float, default=50.0, help="Sample rate in Hz (default 50).")
    p_synth.add_argument("--freq", type=float, default=1.0, help="Omwentelingen per s (default 1).")
    p_synth.add_argument("--amplitude", type=float, default=100.0, help="Magneet-amplitude in µT.")
    p_synth.add_argument("--normal", type=float, nargs=3, default=[0.0, 0.0, 1.0],
                         metavar=("NX", "NY", "NZ"), help="Normaal van het rotatievlak.")
    p_synth.add_argument("--reverse", action="store_true", help="Draai de andere kant op.")
    p_synth.add_argument("--noise", type=float, default=0.0, help="Gaussische ruis (std, µT).")
    p_synth.add_argument("--seed", type=int, default=0)
    p_synth.add_argument("--aux-rate", type=float, default=0.0,
                         help="Gyro/accel rate in Hz (0 = uit, default 10 bij --gyro-burst).")
    p_synth.add_argument("--gyro-burst", type=float, nargs=3, action="append",
                         metavar=("T0", "T1", "OMEGA"), help="Gyro burst in [T0, T1) met |ω|.")
    p_synth.add_argument("--save-csv", default=None, help="Schrijf de sessie ook naar CSV.")
    _add_common(p_synth)
    p_synth.set_defaults(func=cmd_synth)

    p_csv = sub.add_parser("from-csv", help="Speel een opgenomen sessie CSV af.")
    p_csv.add_argument("csv", help="Pad naar sessie CSV (sensor,t_s,x,y,z).")
    _add_common(p_csv)
    p_csv.set_defaults(func=cmd_from_csv)

    args = parser.parse_args(argv)
    if getattr(args, "gyro_burst", None) and args.aux_rate <= 0:
        args.aux_rate = 10.0

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    args.func(args)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
