"""Recognition engine: sample → debounce → classify → first match → haptics."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Optional

from motion_synth.classifier import GestureClassifier
from motion_synth.debounce import DebounceScheduler
from motion_synth.errors import EngineUnavailable, PlaybackFailure
from motion_synth.flip import FlipStateTracker
from motion_synth.gestures import FlipOver, GestureSpec, describe, validate_gesture
from motion_synth.haptics import HapticPlayer, HapticSpec, describe_effect, validate_effect
from motion_synth.metrics import MetricsCollector
from motion_synth.motion import MotionSample
from motion_synth.sensors import MotionSource

if TYPE_CHECKING:
    from motion_synth.config import EngineConfig

logger = logging.getLogger("motion_synth.engine")


class EngineState(Enum):
    STOPPED = "stopped"
    RUNNING = "running"


@dataclass(frozen=True)
class Mapping:
    """A gesture and the effect it triggers."""
    gesture: GestureSpec
    effect: HapticSpec

    def validate(self) -> Mapping:
        validate_gesture(self.gesture)
        validate_effect(self.effect)
        return self

    def to_dict(self) -> dict:
        return {"gesture": self.gesture.to_dict(), "effect": self.effect.to_dict()}


@dataclass
class GestureEvent:
    """A recognized gesture and the outcome of its haptic request."""
    gesture: GestureSpec
    effect: HapticSpec
    timestamp: float
    mapping_index: int
    played: bool = True
    error: Optional[PlaybackFailure] = None

    def to_dict(self) -> dict:
        return {
            "gesture": self.gesture.to_dict(),
            "effect": self.effect.to_dict(),
            "timestamp": self.timestamp,
            "played": self.played,
        }


class RecognitionEngine:
    """Turns motion samples into haptic requests.

    Mappings are scanned in registration order and the first one whose
    gesture matches wins; later matches for the same sample are ignored.
    Each gesture has its own cooldown (see DebounceScheduler).

    The engine owns all mutable recognition state (mappings, cooldowns,
    flip state) and serializes access to it, so samples delivered from
    several threads never interleave their passes.

    Usage:
        engine = RecognitionEngine(LoggingHapticPlayer())
        engine.register_mapping(Shake(1.8), Tap(0.8, 0.5))
        engine.start()
        engine.on_sample(sample)
    """

    def __init__(
        self,
        haptics: HapticPlayer,
        source: Optional[MotionSource] = None,
        debounce: Optional[DebounceScheduler] = None,
        metrics: Optional[MetricsCollector] = None,
        clock: Callable[[], float] = time.monotonic,
        classifier: Optional[GestureClassifier] = None,
    ):
        self._haptics = haptics
        self._classifier = classifier or GestureClassifier()
        self._source = source
        self._debounce = debounce or DebounceScheduler()
        self._flip = FlipStateTracker()
        self.metrics = metrics
        self._clock = clock

        self._mappings: list[Mapping] = []
        self._state = EngineState.STOPPED
        self._lock = threading.RLock()
        self._gesture_callbacks: list[Callable[[GestureEvent], None]] = []
        self._error_callbacks: list[Callable[[PlaybackFailure], None]] = []

        if source is not None:
            source.subscribe(self.on_sample)

    # --- configuration ---

    def register_mapping(self, gesture: GestureSpec, effect: HapticSpec) -> Mapping:
        """Append a gesture → effect mapping. Raises ConfigurationError if malformed."""
        mapping = Mapping(gesture, effect).validate()
        with self._lock:
            self._mappings.append(mapping)
        logger.debug("Mapped %s → %s", describe(gesture), describe_effect(effect))
        return mapping

    def clear_mappings(self):
        with self._lock:
            self._mappings.clear()

    def on_gesture(self, callback: Callable[[GestureEvent], None]):
        """Register a callback for dispatched gestures."""
        self._gesture_callbacks.append(callback)

    def on_error(self, callback: Callable[[PlaybackFailure], None]):
        """Register a callback for failed haptic requests."""
        self._error_callbacks.append(callback)

    @classmethod
    def from_config(
        cls,
        config: EngineConfig,
        haptics: HapticPlayer,
        source: Optional[MotionSource] = None,
        **kwargs,
    ) -> RecognitionEngine:
        """Build an engine with the cooldowns and mappings of `config`."""
        engine = cls(haptics, source=source, debounce=config.make_debounce(), **kwargs)
        for mapping in config.mappings:
            engine.register_mapping(mapping.gesture, mapping.effect)
        return engine

    # --- lifecycle ---

    def start(self):
        """Prepare haptics and begin accepting samples.

        Raises EngineUnavailable if the haptic player cannot be prepared;
        the engine then stays stopped. Calling start while running is a no-op.
        """
        with self._lock:
            if self._state is EngineState.RUNNING:
                return

            try:
                self._haptics.prepare()
            except EngineUnavailable:
                raise
            except Exception as e:
                raise EngineUnavailable(f"Haptic engine failed to prepare: {e}", cause=e) from e

            self._flip.reset()
            self._debounce.reset()
            self._state = EngineState.RUNNING
            if self.metrics:
                self.metrics.engine_started()

        if self._source is not None:
            try:
                self._source.start()
            except Exception:
                self.stop()
                raise

        logger.info("Engine started with %d mappings", len(self._mappings))

    def stop(self):
        """Stop accepting samples and release haptics. Idempotent."""
        with self._lock:
            if self._state is EngineState.STOPPED:
                return
            self._state = EngineState.STOPPED
            self._flip.reset()
            if self.metrics:
                self.metrics.engine_stopped()

        try:
            # Outside the lock: the source worker may be waiting on it.
            if self._source is not None:
                self._source.stop()
        finally:
            with self._lock:
                try:
                    self._haptics.shutdown()
                except Exception:
                    logger.exception("Haptic shutdown failed")
                    raise

        logger.info("Engine stopped")

    # --- recognition ---

    def on_sample(self, sample: MotionSample) -> Optional[GestureEvent]:
        """Run one recognition pass. Returns the dispatched event, if any."""
        with self._lock:
            if self._state is not EngineState.RUNNING:
                return None

            t0 = time.perf_counter()
            now = self._clock()

            flip_seeded = False
            if not self._flip.initialized and self._has_flip_mapping():
                flip_seeded = self._flip.initialize(sample)

            event = None
            flip_result: Optional[bool] = None

            for index, mapping in enumerate(self._mappings):
                gesture = mapping.gesture

                if not self._debounce.allow(gesture, now):
                    if self.metrics:
                        self.metrics.record_debounced(gesture.kind)
                    continue

                if isinstance(gesture, FlipOver):
                    if flip_seeded:
                        continue
                    if flip_result is None:
                        flip_result = self._flip.update(sample)
                    matched = flip_result
                else:
                    matched = self._classifier.matches(gesture, sample)

                if matched:
                    event = self._dispatch(index, mapping, now)
                    break

            if self.metrics:
                self.metrics.record_sample(time.perf_counter() - t0)

            if event is not None:
                self._notify(event)

            return event

    def _has_flip_mapping(self) -> bool:
        return any(isinstance(m.gesture, FlipOver) for m in self._mappings)

    def _dispatch(self, index: int, mapping: Mapping, now: float) -> GestureEvent:
        event = GestureEvent(
            gesture=mapping.gesture,
            effect=mapping.effect,
            timestamp=now,
            mapping_index=index,
        )

        try:
            self._haptics.play(mapping.effect)
        except PlaybackFailure as e:
            event.played, event.error = False, e
        except Exception as e:
            event.played = False
            event.error = PlaybackFailure(
                f"Haptic playback failed: {e}", effect=mapping.effect, cause=e
            )

        # Recorded even when playback failed.
        self._debounce.record(mapping.gesture, now)

        if self.metrics:
            self.metrics.record_gesture(mapping.gesture.kind)

        if event.error is not None:
            if event.error.effect is None:
                event.error.effect = mapping.effect
            if self.metrics:
                self.metrics.record_playback_failure()
            logger.warning(
                "Playing %s for %s failed: %s",
                describe_effect(mapping.effect), describe(mapping.gesture), event.error,
            )
        else:
            logger.debug("%s → %s", describe(mapping.gesture), describe_effect(mapping.effect))

        return event

    def _notify(self, event: GestureEvent):
        for cb in self._gesture_callbacks:
            try:
                cb(event)
            except Exception:
                logger.exception("Gesture callback failed")

        if event.error is not None:
            for cb in self._error_callbacks:
                try:
                    cb(event.error)
                except Exception:
                    logger.exception("Error callback failed")

    # --- introspection ---

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is EngineState.RUNNING

    @property
    def mappings(self) -> tuple[Mapping, ...]:
        with self._lock:
            return tuple(self._mappings)

    @property
    def flip_state(self) -> Optional[bool]:
        return self._flip.state

    @property
    def debounce(self) -> DebounceScheduler:
        return self._debounce

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.stop()
