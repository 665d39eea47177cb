"""motion-synth - Motion gesture recognition with haptic feedback."""

__version__ = "0.1.0"

from motion_synth.motion import Attitude, MotionSample
from motion_synth.gestures import Axis, DeviceTap, FlipOver, GestureSpec, Shake, Twist
from motion_synth.haptics import (
    Buzz,
    HapticHandle,
    HapticPlayer,
    HapticSpec,
    LoggingHapticPlayer,
    QueuedHapticPlayer,
    Tap,
)
from motion_synth.errors import (
    ConfigurationError,
    EngineUnavailable,
    MotionSynthError,
    PlaybackFailure,
)
from motion_synth.classifier import GestureClassifier, matches
from motion_synth.flip import FlipStateTracker
from motion_synth.debounce import DebounceScheduler
from motion_synth.engine import EngineState, GestureEvent, Mapping, RecognitionEngine
from motion_synth.sensors import MotionSource, ReplaySource
from motion_synth.recorder import MotionPlayer, MotionRecorder, synthesize_session
from motion_synth.config import EngineConfig, load_config, save_config
from motion_synth.metrics import MetricsCollector
