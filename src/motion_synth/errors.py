"""Error taxonomy for motion-synth."""

from __future__ import annotations

from typing import Any, Optional


class MotionSynthError(Exception):
    """Base class for all motion-synth errors."""


class ConfigurationError(MotionSynthError, ValueError):
    """A gesture, effect or config file carries invalid parameters."""


class EngineUnavailable(MotionSynthError):
    """The haptic collaborator could not be prepared."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class PlaybackFailure(MotionSynthError):
    """A single haptic play request failed.

    Never stops the engine. Delivered to error listeners and logged.
    """

    def __init__(
        self,
        message: str,
        effect: Any = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.effect = effect
        self.cause = cause
