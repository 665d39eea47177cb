"""Face-up / face-down flip detection across successive samples."""

from __future__ import annotations

import logging
import math
from typing import Optional

from motion_synth.motion import MotionSample

logger = logging.getLogger("motion_synth.flip")

PITCH_THRESHOLD = math.pi / 4
FACE_DOWN_PITCH = math.pi / 2 + PITCH_THRESHOLD


def is_face_up(pitch: float) -> bool:
    """Pitch within ±45° of flat."""
    return -PITCH_THRESHOLD < pitch < PITCH_THRESHOLD


class FlipStateTracker:
    """Tracks whether the device is face up and reports flips.

    Leaving the face-up band only counts as a flip once the device has
    pitched past vertical plus the 45° margin; small wobbles near the band
    edge update the state silently. Re-entering the band always counts.

    State is ``None`` until the first sample is observed.
    """

    def __init__(self):
        self._face_up: Optional[bool] = None

    @property
    def state(self) -> Optional[bool]:
        return self._face_up

    @property
    def initialized(self) -> bool:
        return self._face_up is not None

    def initialize(self, sample: MotionSample) -> bool:
        """Seed the state from `sample` if unset. Returns True if it was seeded."""
        if self._face_up is not None or not math.isfinite(sample.pitch):
            return False
        self._face_up = is_face_up(sample.pitch)
        logger.debug("Flip state initialized (face_up=%s, pitch=%.3f)", self._face_up, sample.pitch)
        return True

    def update(self, sample: MotionSample) -> bool:
        """Feed a sample. Returns True if it completes a flip."""
        if self._face_up is None:
            self.initialize(sample)
            return False

        pitch = sample.pitch
        if not math.isfinite(pitch):
            return False
        was_face_up = self._face_up
        now_face_up = is_face_up(pitch)

        flipped = (
            (was_face_up and not now_face_up and abs(pitch) > FACE_DOWN_PITCH)
            or (not was_face_up and now_face_up)
        )

        if flipped:
            self._face_up = now_face_up
            logger.debug("Flip detected (face_up=%s, pitch=%.3f)", now_face_up, pitch)
            return True

        if was_face_up != now_face_up:
            self._face_up = now_face_up
        return False

    def reset(self):
        self._face_up = None
