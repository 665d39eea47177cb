"""Prometheus-compatible metrics for the recognition engine.

Generates the text exposition format directly, no client library.

Tracked metrics:
- motion_synth_samples_total (counter)
- motion_synth_gestures_total (counter, by gesture kind)
- motion_synth_debounced_total (counter, by gesture kind)
- motion_synth_playback_failures_total (counter)
- motion_synth_recognition_latency_seconds (histogram)
- motion_synth_running (gauge, running engines)
- motion_synth_active_connections (gauge)
"""

from __future__ import annotations

import threading
import time
from collections import Counter


class _Histogram:
    """Simple histogram with configurable buckets."""

    def __init__(self, buckets: list[float]):
        self.buckets = sorted(buckets)
        self.bucket_counts = [0] * len(self.buckets)
        self.count = 0
        self.sum = 0.0
        self._lock = threading.Lock()

    def observe(self, value: float):
        with self._lock:
            self.count += 1
            self.sum += value
            for i, b in enumerate(self.buckets):
                if value <= b:
                    self.bucket_counts[i] += 1
                    break

    def render(self, name: str, help_text: str) -> str:
        lines = [
            f"# HELP {name} {help_text}",
            f"# TYPE {name} histogram",
        ]
        with self._lock:
            cumulative = 0
            for i, b in enumerate(self.buckets):
                cumulative += self.bucket_counts[i]
                lines.append(f'{name}_bucket{{le="{b}"}} {cumulative}')
            lines.append(f'{name}_bucket{{le="+Inf"}} {self.count}')
            lines.append(f"{name}_sum {self.sum:.6f}")
            lines.append(f"{name}_count {self.count}")
        return "\n".join(lines)


class MetricsCollector:
    """Collects and renders recognition metrics."""

    def __init__(self):
        self._gesture_counts: Counter = Counter()
        self._debounced_counts: Counter = Counter()
        self._samples_total = 0
        self._playback_failures = 0
        self._running_engines = 0
        self._active_connections = 0
        self._lock = threading.Lock()

        # Recognition passes are sub-millisecond; buckets from 10µs to 10ms
        self._latency = _Histogram(
            [0.00001, 0.00005, 0.0001, 0.0005, 0.001, 0.005, 0.010]
        )

        self._start_time = time.time()

    def record_sample(self, latency_seconds: float):
        with self._lock:
            self._samples_total += 1
        self._latency.observe(latency_seconds)

    def record_gesture(self, kind: str):
        with self._lock:
            self._gesture_counts[kind] += 1

    def record_debounced(self, kind: str):
        with self._lock:
            self._debounced_counts[kind] += 1

    def record_playback_failure(self):
        with self._lock:
            self._playback_failures += 1

    def engine_started(self):
        with self._lock:
            self._running_engines += 1

    def engine_stopped(self):
        with self._lock:
            self._running_engines = max(0, self._running_engines - 1)

    def set_connections(self, count: int):
        self._active_connections = count

    def render(self) -> str:
        """Render all metrics in Prometheus text exposition format."""
        lines: list[str] = []

        uptime = time.time() - self._start_time
        lines.append("# HELP motion_synth_uptime_seconds Time since collector creation")
        lines.append("# TYPE motion_synth_uptime_seconds gauge")
        lines.append(f"motion_synth_uptime_seconds {uptime:.1f}")
        lines.append("")

        with self._lock:
            samples = self._samples_total
            failures = self._playback_failures
            gestures = sorted(self._gesture_counts.items())
            debounced = sorted(self._debounced_counts.items())
            running = self._running_engines

        lines.append("# HELP motion_synth_samples_total Motion samples processed while running")
        lines.append("# TYPE motion_synth_samples_total counter")
        lines.append(f"motion_synth_samples_total {samples}")
        lines.append("")

        lines.append("# HELP motion_synth_gestures_total Gestures dispatched by kind")
        lines.append("# TYPE motion_synth_gestures_total counter")
        for name, count in gestures:
            lines.append(f'motion_synth_gestures_total{{gesture="{name}"}} {count}')
        lines.append("")

        lines.append("# HELP motion_synth_debounced_total Mapping checks skipped by cooldown")
        lines.append("# TYPE motion_synth_debounced_total counter")
        for name, count in debounced:
            lines.append(f'motion_synth_debounced_total{{gesture="{name}"}} {count}')
        lines.append("")

        lines.append("# HELP motion_synth_playback_failures_total Failed haptic play requests")
        lines.append("# TYPE motion_synth_playback_failures_total counter")
        lines.append(f"motion_synth_playback_failures_total {failures}")
        lines.append("")

        lines.append(self._latency.render(
            "motion_synth_recognition_latency_seconds",
            "Recognition pass latency in seconds",
        ))
        lines.append("")

        lines.append("# HELP motion_synth_running Engines currently running")
        lines.append("# TYPE motion_synth_running gauge")
        lines.append(f"motion_synth_running {running}")
        lines.append("")

        lines.append("# HELP motion_synth_active_connections Current WebSocket connections")
        lines.append("# TYPE motion_synth_active_connections gauge")
        lines.append(f"motion_synth_active_connections {self._active_connections}")
        lines.append("")

        return "\n".join(lines) + "\n"

    @property
    def gesture_counts(self) -> dict[str, int]:
        with self._lock:
            return dict(self._gesture_counts)

    @property
    def samples_total(self) -> int:
        return self._samples_total

    @property
    def playback_failures(self) -> int:
        return self._playback_failures

    @property
    def running_engines(self) -> int:
        return self._running_engines
