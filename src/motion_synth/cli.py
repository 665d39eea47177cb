"""motion-synth CLI.

Usage:
    motion-synth replay     Run a recorded session through the engine
    motion-synth simulate   Write a synthetic session
    motion-synth validate   Check a mapping file
    motion-synth benchmark  Time recognition passes
    motion-synth serve      Start the WebSocket bridge
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional

import typer

from motion_synth.config import EngineConfig, load_config
from motion_synth.errors import ConfigurationError, EngineUnavailable
from motion_synth.gestures import describe
from motion_synth.haptics import describe_effect

app = typer.Typer(
    name="motion-synth",
    help="Motion gestures to haptic effects.",
    add_completion=False,
)


@app.callback()
def main_options(
    log_level: str = typer.Option("warning", help="Log level"),
):
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load(config: Optional[str]) -> EngineConfig:
    if config is None:
        return EngineConfig.with_defaults()
    try:
        return load_config(config)
    except (ConfigurationError, OSError) as e:
        typer.secho(f"Invalid config {config}: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)


def _start(engine):
    try:
        engine.start()
    except EngineUnavailable as e:
        typer.secho(f"Haptics unavailable: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)


@app.command()
def replay(
    recording: str = typer.Argument(..., help="Path to a .json or .npz recording"),
    config: Optional[str] = typer.Option(None, help="Mapping file (defaults to the demo set)"),
    realtime: bool = typer.Option(False, help="Play at original timing"),
    speed: float = typer.Option(1.0, help="Playback speed multiplier"),
):
    """Replay a recorded session through the recognition engine."""
    from motion_synth.engine import RecognitionEngine
    from motion_synth.haptics import LoggingHapticPlayer
    from motion_synth.recorder import MotionPlayer

    if speed <= 0:
        typer.secho("speed must be positive", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)

    path = Path(recording)
    if not path.exists():
        typer.secho(f"Recording not found: {recording}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)

    player = MotionPlayer.load(path)
    cfg = _load(config)
    typer.echo(f"Replaying {path.name} ({player.sample_count} samples, {player.duration:.1f}s)")

    # Recorded timestamps drive the debounce clock so results match the
    # original session regardless of playback speed.
    clock_time = [0.0]
    haptics = LoggingHapticPlayer()
    engine = RecognitionEngine.from_config(cfg, haptics, clock=lambda: clock_time[0])

    fired = 0

    def on_gesture(event):
        nonlocal fired
        fired += 1
        status = "" if event.played else f" (failed: {event.error})"
        typer.echo(
            f"  {event.timestamp:7.2f}s  {describe(event.gesture):28s} → "
            f"{describe_effect(event.effect)}{status}"
        )

    engine.on_gesture(on_gesture)

    samples = player.play_realtime(speed=speed) if realtime else player.play()
    with engine:
        _start(engine)
        for i, sample in enumerate(samples):
            clock_time[0] = sample.timestamp if sample.timestamp is not None else i * cfg.sample_interval
            engine.on_sample(sample)

    typer.echo(f"\nReplay complete. {fired} gestures, {len(haptics.played)} effects played.")


@app.command()
def simulate(
    output: str = typer.Option("session.json", "-o", help="Output file path"),
    duration: float = typer.Option(10.0, help="Session length in seconds"),
    interval: float = typer.Option(0.05, help="Sample interval in seconds"),
    seed: int = typer.Option(0, help="Random seed"),
    compact: bool = typer.Option(False, help="Save in compact .npz format"),
):
    """Write a synthetic session containing one of each gesture."""
    from motion_synth.recorder import save_session, save_session_compact, synthesize_session

    if duration <= 0 or interval <= 0:
        typer.secho("duration and interval must be positive", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)

    samples = synthesize_session(duration=duration, interval=interval, seed=seed)
    if compact:
        path = save_session_compact(samples, output)
    else:
        path = Path(output)
        save_session(samples, path)

    typer.echo(f"Wrote {len(samples)} samples to {path}")


@app.command()
def validate(
    config: str = typer.Argument(..., help="Mapping file to check"),
):
    """Load a mapping file and list its mappings."""
    cfg = _load(config)
    typer.echo(
        f"OK: {len(cfg.mappings)} mappings "
        f"(cooldowns: default={cfg.default_cooldown}s, device_tap={cfg.tap_cooldown}s, "
        f"flip_over={cfg.flip_cooldown}s)"
    )
    for i, m in enumerate(cfg.mappings):
        typer.echo(f"  {i}: {describe(m.gesture):28s} → {describe_effect(m.effect)}")


@app.command()
def benchmark(
    iterations: int = typer.Option(10000, help="Number of recognition passes"),
    mappings: int = typer.Option(4, help="Number of mappings to register"),
):
    """Time recognition passes over synthetic samples."""
    import numpy as np

    from motion_synth.engine import RecognitionEngine
    from motion_synth.gestures import Axis, Shake, Twist
    from motion_synth.haptics import LoggingHapticPlayer, Tap
    from motion_synth.metrics import MetricsCollector
    from motion_synth.recorder import synthesize_session

    typer.echo(f"Running benchmark: {iterations} passes, {mappings} mappings")

    metrics = MetricsCollector()
    engine = RecognitionEngine(LoggingHapticPlayer(), metrics=metrics)
    axes = list(Axis)
    for i in range(mappings):
        if i % 2 == 0:
            engine.register_mapping(Shake(threshold=1.5 + 0.1 * i), Tap())
        else:
            engine.register_mapping(Twist(axis=axes[i % 3], rate_threshold=2.0 + 0.1 * i), Tap())

    samples = synthesize_session(duration=iterations * 0.05, seed=42)
    logging.getLogger("motion_synth.haptics").setLevel(logging.WARNING)

    times = []
    with engine:
        _start(engine)
        for sample in samples[:iterations]:
            t0 = time.perf_counter()
            engine.on_sample(sample)
            times.append(time.perf_counter() - t0)

    arr = np.array(times) * 1e6
    typer.echo("\nResults:")
    typer.echo(f"   Average latency: {arr.mean():.1f} µs")
    typer.echo(f"   P95 latency:     {np.percentile(arr, 95):.1f} µs")
    typer.echo(f"   Gestures fired:  {sum(metrics.gesture_counts.values())}")


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Bind address"),
    port: int = typer.Option(8766, help="Port"),
    config: Optional[str] = typer.Option(None, help="Mapping file (defaults to the demo set)"),
    log_level: str = typer.Option("info", help="Server log level"),
):
    """Start the WebSocket bridge for remote sensors."""
    import uvicorn

    from motion_synth.server import app as fastapi_app, state

    state.config = _load(config)
    typer.echo(f"Loaded {len(state.config.mappings)} mappings")
    typer.echo(f"Starting motion-synth server on ws://{host}:{port}/ws")
    uvicorn.run(fastapi_app, host=host, port=port, log_level=log_level)


def main():
    app()


if __name__ == "__main__":
    main()
