"""
BlendShapeExtractor for reading facial blend shapes with MediaPipe Face Landmarker.

The task engine only needs per-frame blend-shape scores; this module is the
thin adapter that produces them from camera frames using the MediaPipe
Tasks API (mediapipe >= 0.10).
"""

import logging
import os
import urllib.request
from typing import Dict, Optional

import cv2
import numpy as np

try:
    import mediapipe as mp
    from mediapipe.tasks import python
    from mediapipe.tasks.python import vision

    MEDIAPIPE_AVAILABLE = True
except ImportError:
    MEDIAPIPE_AVAILABLE = False

from .blendshapes import blendshapes_from_categories

logger = logging.getLogger(__name__)

# Model download URL
MODEL_URL = "https://storage.googleapis.com/mediapipe-models/face_landmarker/face_landmarker/float16/1/face_landmarker.task"
DEFAULT_MODEL_PATH = "face_landmarker.task"


class BlendShapeExtractor:
    """Extracts the blend-shape vector of the first face in a frame.

    Scores are the 52 ARKit-style categories MediaPipe reports
    (mouthSmileLeft, browDownRight, eyeBlinkLeft, ...), each in [0, 1].
    """

    def __init__(
        self,
        min_detection_confidence: float = 0.5,
        min_tracking_confidence: float = 0.5,
        model_path: Optional[str] = None,
    ):
        """
        Initialize MediaPipe Face Landmarker.

        Args:
            min_detection_confidence: Minimum confidence for face detection [0, 1]
            min_tracking_confidence: Minimum confidence for landmark tracking [0, 1]
            model_path: Path to the face_landmarker.task model file. If None, will download.
        """
        if not MEDIAPIPE_AVAILABLE:
            raise ImportError(
                "MediaPipe is not installed. Install with: pip install mediapipe"
            )

        self._model_path = model_path or self._get_model_path()

        base_options = python.BaseOptions(model_asset_path=self._model_path)
        options = vision.FaceLandmarkerOptions(
            base_options=base_options,
            output_face_blendshapes=True,
            num_faces=1,
            min_face_detection_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence,
        )
        self._detector = vision.FaceLandmarker.create_from_options(options)
        logger.info(f"Face Landmarker loaded from {self._model_path}")

    def _get_model_path(self) -> str:
        """Get or download the face landmarker model."""
        if os.path.exists(DEFAULT_MODEL_PATH):
            return DEFAULT_MODEL_PATH

        # Check in package directory
        package_dir = os.path.dirname(__file__)
        package_model_path = os.path.join(package_dir, DEFAULT_MODEL_PATH)
        if os.path.exists(package_model_path):
            return package_model_path

        logger.info(f"Downloading face landmarker model to {DEFAULT_MODEL_PATH}...")
        urllib.request.urlretrieve(MODEL_URL, DEFAULT_MODEL_PATH)
        logger.info("Model downloaded successfully.")
        return DEFAULT_MODEL_PATH

    def extract(self, frame: np.ndarray) -> Optional[Dict[str, float]]:
        """
        Extract blend shapes from a video frame.

        Args:
            frame: BGR format video frame (H, W, 3)

        Returns:
            Mapping of blend-shape name to score, or None if no face is detected
        """
        if frame is None or frame.size == 0:
            return None

        # Convert BGR to RGB for MediaPipe
        rgb_frame = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb_frame)

        result = self._detector.detect(mp_image)

        if not result.face_blendshapes:
            return None

        return blendshapes_from_categories(result.face_blendshapes[0])

    def close(self):
        """Release MediaPipe resources."""
        if hasattr(self, "_detector") and self._detector:
            self._detector.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
