from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional


NOSE = "nose"
LEFT_WRIST = "leftWrist"
RIGHT_WRIST = "rightWrist"

# PoseNet part names, in PoseNet order.
PART_NAMES = (
    NOSE,
    "leftEye",
    "rightEye",
    "leftEar",
    "rightEar",
    "leftShoulder",
    "rightShoulder",
    "leftElbow",
    "rightElbow",
    LEFT_WRIST,
    RIGHT_WRIST,
    "leftHip",
    "rightHip",
    "leftKnee",
    "rightKnee",
    "leftAnkle",
    "rightAnkle",
)

KeypointSet = Mapping[str, "Keypoint"]


@dataclass(frozen=True)
class Keypoint:
    """A named body part in image-pixel coordinates."""

    name: str
    x: float
    y: float
    score: float  # detection confidence, [0, 1]


@dataclass(frozen=True)
class Judgment:
    hand: Optional[str]
    distance: float
    confidence: float
    accepted: bool

    def to_dict(self) -> Dict[str, object]:
        return {
            "closestHand": self.hand,
            "distance": self.distance,
            "confidence": self.confidence,
            "accepted": self.accepted,
        }


class ScoreFilter:
    """
    Drop keypoints whose detection score is below `min_score`.

    `min_score=None` keeps everything.
    """

    def __init__(self, min_score: Optional[float] = 0.5) -> None:
        if min_score is not None and not 0.0 <= min_score <= 1.0:
            raise ValueError(f"min_score must be within [0, 1], got {min_score}")
        self.min_score = min_score

    def __call__(self, keypoints: Iterable[Keypoint]) -> List[Keypoint]:
        if self.min_score is None:
            return list(keypoints)
        return [kp for kp in keypoints if kp.score >= self.min_score]

    def __repr__(self) -> str:
        return f"ScoreFilter(min_score={self.min_score!r})"


def build_keypoint_set(keypoints: Iterable[Keypoint]) -> KeypointSet:
    """Index keypoints by part name, keeping the best-scored duplicate."""
    by_name: Dict[str, Keypoint] = {}
    for kp in keypoints:
        if kp.name not in PART_NAMES:
            continue
        current = by_name.get(kp.name)
        if current is None or kp.score > current.score:
            by_name[kp.name] = kp
    return MappingProxyType(by_name)
