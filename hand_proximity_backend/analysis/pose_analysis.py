from __future__ import annotations

import logging
import threading
from typing import List, Optional, Sequence, Tuple

import cv2
import numpy as np
from PIL import Image, ImageOps

from .errors import EstimatorFailure
from .keypoints import Keypoint
from .model_assets import ensure_pose_landmarker_task

logger = logging.getLogger(__name__)

# MediaPipe Pose landmark index -> PoseNet part name
LANDMARK_PARTS = {
    0: "nose",
    2: "leftEye",
    5: "rightEye",
    7: "leftEar",
    8: "rightEar",
    11: "leftShoulder",
    12: "rightShoulder",
    13: "leftElbow",
    14: "rightElbow",
    15: "leftWrist",
    16: "rightWrist",
    23: "leftHip",
    24: "rightHip",
    25: "leftKnee",
    26: "rightKnee",
    27: "leftAnkle",
    28: "rightAnkle",
}


def load_image(image_path: str, max_side: Optional[int] = None) -> Tuple[np.ndarray, int, int]:
    """
    Decode an image file into an RGB array.

    Returns the (possibly downscaled) array and the *original* width and height,
    which is the pixel space keypoints are reported in.
    """
    with Image.open(image_path) as img:
        image = ImageOps.exif_transpose(img).convert("RGB")
    width, height = image.size
    image_np = np.array(image)

    if max_side and max(width, height) > max_side:
        scale = max_side / float(max(width, height))
        size = (max(1, int(round(width * scale))), max(1, int(round(height * scale))))
        image_np = cv2.resize(image_np, size, interpolation=cv2.INTER_AREA)

    return np.ascontiguousarray(image_np), width, height


def keypoints_from_landmarks(landmarks: Sequence[object], width: int, height: int) -> List[Keypoint]:
    """Convert normalized MediaPipe landmarks to named pixel-space keypoints."""
    keypoints = []
    for idx, landmark in enumerate(landmarks):
        name = LANDMARK_PARTS.get(idx)
        if name is None:
            continue
        visibility = getattr(landmark, "visibility", None)
        keypoints.append(
            Keypoint(
                name=name,
                x=float(landmark.x) * width,
                y=float(landmark.y) * height,
                score=1.0 if visibility is None else float(visibility),
            )
        )
    return keypoints


class PoseEstimator:
    """
    Single-person pose estimator backed by MediaPipe Pose.

    Build one per process and share it; calls are serialized internally.
    """

    def __init__(
        self,
        model_complexity: int = 1,
        min_detection_confidence: float = 0.5,
        max_image_side: Optional[int] = 1280,
        tasks_model_path: str = "models/pose_landmarker_full.task",
    ) -> None:
        import mediapipe as mp  # type: ignore

        self.max_image_side = max_image_side
        self._lock = threading.Lock()
        self._mp = mp
        self._pose = None
        self._landmarker = None

        if hasattr(mp, "solutions"):
            self._pose = mp.solutions.pose.Pose(
                static_image_mode=True,
                model_complexity=model_complexity,
                min_detection_confidence=min_detection_confidence,
            )
            logger.info("Loaded MediaPipe Pose (complexity=%d)", model_complexity)
        else:
            self._landmarker = self._create_landmarker(tasks_model_path, min_detection_confidence)
            logger.info("Loaded MediaPipe PoseLandmarker from %s", tasks_model_path)

    @staticmethod
    def _create_landmarker(model_path: str, min_detection_confidence: float):
        # Used on MediaPipe builds that only ship the Tasks API.
        from mediapipe.tasks.python import BaseOptions  # type: ignore
        from mediapipe.tasks.python.vision import PoseLandmarker, PoseLandmarkerOptions, RunningMode  # type: ignore

        options = PoseLandmarkerOptions(
            base_options=BaseOptions(model_asset_path=ensure_pose_landmarker_task(model_path)),
            running_mode=RunningMode.IMAGE,
            num_poses=1,
            min_pose_detection_confidence=min_detection_confidence,
        )
        return PoseLandmarker.create_from_options(options)

    def _landmarks(self, image_np: np.ndarray):
        if self._pose is not None:
            results = self._pose.process(image_np)
            if not results.pose_landmarks:
                return []
            return results.pose_landmarks.landmark

        mp_image = self._mp.Image(image_format=self._mp.ImageFormat.SRGB, data=image_np)
        result = self._landmarker.detect(mp_image)
        if not result.pose_landmarks:
            return []
        return result.pose_landmarks[0]

    def estimate(self, image_path: str) -> List[Keypoint]:
        """Detect keypoints in the image at `image_path`. Empty when nobody is found."""
        try:
            image_np, width, height = load_image(image_path, self.max_image_side)
            with self._lock:
                landmarks = self._landmarks(image_np)
            keypoints = keypoints_from_landmarks(landmarks, width, height)
        except Exception as e:
            raise EstimatorFailure(str(e) or type(e).__name__) from e

        logger.debug("Detected %d keypoints in %dx%d image", len(keypoints), width, height)
        return keypoints

    def close(self) -> None:
        with self._lock:
            if self._pose is not None:
                self._pose.close()
                self._pose = None
            if self._landmarker is not None:
                self._landmarker.close()
                self._landmarker = None
