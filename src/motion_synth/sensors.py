"""Sensor sources that feed motion samples to the engine.

A source delivers samples from a single worker thread, in order, at a
fixed nominal rate. Acquisition errors stay inside the source; they are
logged and never reach the engine.
"""

from __future__ import annotations

import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, Iterable, Optional

from motion_synth.motion import MotionSample

logger = logging.getLogger("motion_synth.sensors")

DEFAULT_INTERVAL = 0.05  # 20 Hz

SampleCallback = Callable[[MotionSample], None]


class MotionSource(ABC):
    """Port for the sensor collaborator."""

    def __init__(self):
        self._callbacks: list[SampleCallback] = []

    def subscribe(self, callback: SampleCallback):
        """Register a callback invoked once per sample."""
        self._callbacks.append(callback)

    def _emit(self, sample: MotionSample):
        for cb in self._callbacks:
            cb(sample)

    @abstractmethod
    def start(self):
        ...

    @abstractmethod
    def stop(self):
        ...

    @property
    @abstractmethod
    def is_running(self) -> bool:
        ...


class ReplaySource(MotionSource):
    """Plays a fixed sequence of samples on a worker thread.

    Usage:
        source = ReplaySource(player.samples(), interval=0.05)
        engine = RecognitionEngine(haptics, source=source)
        engine.start()
        source.join()
    """

    def __init__(
        self,
        samples: Iterable[MotionSample],
        interval: float = DEFAULT_INTERVAL,
        loop: bool = False,
    ):
        super().__init__()
        if interval < 0:
            raise ValueError(f"interval must be non-negative, got {interval}")
        self._samples = list(samples)
        self.interval = interval
        self.loop = loop
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self.delivered = 0

    def start(self):
        if self.is_running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run, name="motion-synth-replay", daemon=True
        )
        self._thread.start()
        logger.info(
            "Replay started: %d samples at %.1f Hz",
            len(self._samples), 1.0 / self.interval if self.interval else float("inf"),
        )

    def _run(self):
        next_tick = time.monotonic()
        while not self._stop_event.is_set():
            for sample in self._samples:
                if self._stop_event.is_set():
                    return
                try:
                    self._emit(sample)
                except Exception:
                    logger.exception("Sample callback failed")
                self.delivered += 1

                if self.interval:
                    next_tick += self.interval
                    delay = next_tick - time.monotonic()
                    if delay > 0 and self._stop_event.wait(delay):
                        return
            if not self.loop:
                logger.info("Replay finished after %d samples", self.delivered)
                return

    def stop(self):
        self._stop_event.set()
        thread = self._thread
        if thread and thread is not threading.current_thread():
            thread.join(timeout=max(1.0, self.interval * 4))
        self._thread = None

    def join(self, timeout: Optional[float] = None):
        """Wait for the replay to finish."""
        thread = self._thread
        if thread:
            thread.join(timeout)

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
