"""
Live game session: camera -> MediaPipe blend shapes -> task engine -> UI sinks.

GameSession is the frame-producing driver around ExpressionTaskEngine. It
owns the camera and the blend-shape extractor, timestamps each frame,
forwards the engine output to the registered sinks and keeps latency
statistics. It performs no network or storage I/O.
"""

import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np

from .classifier import EmotionLabel, detect_emotion
from .config import GameConfig
from .counter import SmileCounter
from .engine import EngineOutput, ExpressionTaskEngine
from .scoring import calculate_smile_score, smooth_score
from .tasks import TaskId

logger = logging.getLogger(__name__)

# Smile score (0-100) at which the free-play counter registers a smile
SMILE_COUNT_THRESHOLD = 50

# Frames kept for latency statistics
LATENCY_WINDOW = 1000


@dataclass
class FrameResult:
    """Engine output plus session-level extras for one frame."""
    output: EngineOutput
    face_detected: bool
    smile_score: int
    display_score: int
    emotion: EmotionLabel
    smile_count: int
    is_smiling: bool
    latency_ms: float


Sink = Callable[[FrameResult], None]


class GameSession:
    """Full game pipeline for one player in front of one camera.

    Components are created lazily in initialize(); tests can inject an
    extractor (anything with ``extract(frame)``) and skip the camera.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        sinks: Sequence[Sink] = (),
        extractor=None,
        engine: Optional[ExpressionTaskEngine] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            config: Session configuration
            sinks: Callables receiving a FrameResult after every frame
            extractor: Blend-shape extractor; a MediaPipe one is built if None
            engine: Task engine; built from config.engine if None
            clock: Monotonic clock in seconds used to timestamp frames
        """
        self.config = config or GameConfig()
        self.sinks: List[Sink] = list(sinks)

        self._camera = None
        self._extractor = extractor
        self.engine = engine or ExpressionTaskEngine(self.config.engine)
        self.counter = SmileCounter(cooldown_ms=self.config.smile_cooldown_ms)
        self._clock = clock
        self._display_score = 0

        self._is_initialized = False

        # Performance tracking
        self._latencies: deque = deque(maxlen=LATENCY_WINDOW)
        self._frame_count: int = 0

    def initialize(
        self, open_camera: bool = True, initial_task: Optional[TaskId] = None
    ) -> bool:
        """
        Initialize extractor, camera and engine.

        Args:
            open_camera: Open the configured camera for step()
            initial_task: Task to play first instead of drawing one

        Returns:
            True if initialization successful
        """
        start_time = time.time()

        try:
            if self._extractor is None:
                from .extractor import BlendShapeExtractor
                self._extractor = BlendShapeExtractor(model_path=self.config.model_path)
                logger.info("MediaPipe Face Landmarker initialized")

            if open_camera:
                try:
                    import cv2
                except ImportError:
                    raise ImportError(
                        "OpenCV not installed. Install with: pip install opencv-python"
                    )
                self._camera = cv2.VideoCapture(self.config.camera_id)
                if not self._camera.isOpened():
                    raise RuntimeError(f"Failed to open camera {self.config.camera_id}")
                logger.info(f"Camera {self.config.camera_id} initialized")

            self.counter.reset()
            self._display_score = 0
            self.engine.start(initial_task=initial_task)
            self._is_initialized = True

            elapsed = time.time() - start_time
            logger.info(f"Initialization complete in {elapsed:.2f}s")
            return True

        except (ImportError, RuntimeError, OSError, ValueError) as e:
            logger.error(f"Initialization failed: {e}")
            self.cleanup()
            return False

    def process_frame(
        self, frame: np.ndarray, timestamp_ms: Optional[float] = None
    ) -> FrameResult:
        """
        Run one frame through extractor and engine, then notify sinks.

        Args:
            frame: BGR video frame
            timestamp_ms: Frame timestamp; taken from the session clock if None

        Returns:
            FrameResult for the frame
        """
        start_time = time.perf_counter()
        if timestamp_ms is None:
            timestamp_ms = self._clock() * 1000.0

        blendshapes: Optional[Dict[str, float]] = None
        if self._extractor is not None:
            blendshapes = self._extractor.extract(frame)

        face_detected = blendshapes is not None
        if not face_detected:
            # no face: every channel reads 0
            blendshapes = {}

        output = self.engine.advance(timestamp_ms, blendshapes)

        smile_score = calculate_smile_score(blendshapes)
        self.counter.update(timestamp_ms, smile_score >= SMILE_COUNT_THRESHOLD)
        self._display_score = smooth_score(self._display_score, smile_score)

        latency_ms = (time.perf_counter() - start_time) * 1000
        if self.config.log_performance:
            self._latencies.append(latency_ms)
            self._frame_count += 1

        result = FrameResult(
            output=output,
            face_detected=face_detected,
            smile_score=smile_score,
            display_score=self._display_score,
            emotion=detect_emotion(blendshapes),
            smile_count=self.counter.count,
            is_smiling=self.counter.is_smiling,
            latency_ms=latency_ms,
        )

        for sink in self.sinks:
            sink(result)

        return result

    def step(self) -> Tuple[Optional[np.ndarray], Optional[FrameResult]]:
        """
        Capture one frame from the camera and process it.

        Returns:
            Tuple of (frame, result), or (None, None) if no frame was available
        """
        if self._camera is None:
            return None, None

        ret, frame = self._camera.read()
        if not ret:
            logger.warning("Failed to capture frame")
            return None, None

        return frame, self.process_frame(frame)

    def get_performance_stats(self) -> Dict[str, float]:
        """
        Get per-frame processing statistics.

        Returns:
            Dictionary with latency statistics
        """
        if not self._latencies:
            return {'mean_ms': 0, 'p95_ms': 0, 'max_ms': 0, 'fps': 0, 'frame_count': 0}

        latencies = np.array(self._latencies)
        mean = float(np.mean(latencies))
        return {
            'mean_ms': mean,
            'p95_ms': float(np.percentile(latencies, 95)),
            'max_ms': float(np.max(latencies)),
            'fps': 1000.0 / mean if mean > 0 else 0,
            'frame_count': self._frame_count,
        }

    def cleanup(self) -> None:
        """Stop the engine and release camera and extractor."""
        self.engine.stop()

        if self._camera is not None:
            self._camera.release()
            self._camera = None

        if self._extractor is not None and hasattr(self._extractor, "close"):
            self._extractor.close()
            self._extractor = None

        self._is_initialized = False
        logger.info("Game session cleanup complete")

    def __enter__(self) -> 'GameSession':
        self.initialize()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.cleanup()

    @property
    def is_initialized(self) -> bool:
        return self._is_initialized
