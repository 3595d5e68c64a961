from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Dict, Tuple

from .errors import NoseNotDetected, NoWristDetected
from .keypoints import LEFT_WRIST, NOSE, RIGHT_WRIST, Judgment, Keypoint, KeypointSet

logger = logging.getLogger(__name__)

DISTANCE_DECIMALS = 2
CONFIDENCE_DECIMALS = 3

# (left distance, right distance) -> selected wrist name
HandPolicy = Callable[[float, float], str]


@dataclass(frozen=True)
class Thresholds:
    threshold_distance: float = 550.0  # pixels; at or beyond this confidence is 0
    acceptance_threshold: float = 0.1

    def __post_init__(self) -> None:
        if not self.threshold_distance > 0:
            raise ValueError(f"threshold_distance must be > 0, got {self.threshold_distance}")
        if not 0.0 <= self.acceptance_threshold <= 1.0:
            raise ValueError(
                f"acceptance_threshold must be within [0, 1], got {self.acceptance_threshold}"
            )


def nearest_hand(dist_left: float, dist_right: float) -> str:
    """Pick the wrist closest to the nose. Ties go to the left wrist."""
    return LEFT_WRIST if dist_left <= dist_right else RIGHT_WRIST


def right_priority_hand(dist_left: float, dist_right: float) -> str:
    """Pick the right wrist whenever it was detected, without comparing distances."""
    return RIGHT_WRIST if math.isfinite(dist_right) else LEFT_WRIST


HAND_POLICIES: Dict[str, HandPolicy] = {
    "nearest": nearest_hand,
    "right_priority": right_priority_hand,
}


def get_hand_policy(name: str) -> HandPolicy:
    try:
        return HAND_POLICIES[name]
    except KeyError:
        raise ValueError(
            f"Unknown hand policy {name!r}; expected one of {sorted(HAND_POLICIES)}"
        ) from None


def distance(a: Keypoint, b: Keypoint) -> float:
    return math.hypot(a.x - b.x, a.y - b.y)


def confidence_for(dist: float, threshold_distance: float) -> float:
    """Linear decay from 1 at distance 0 to 0 at `threshold_distance`, clamped at 0."""
    return max(0.0, 1.0 - dist / threshold_distance)


def _wrist_distances(keypoints: KeypointSet) -> Tuple[float, float]:
    nose = keypoints.get(NOSE)
    if nose is None:
        raise NoseNotDetected()

    left = keypoints.get(LEFT_WRIST)
    right = keypoints.get(RIGHT_WRIST)
    if left is None and right is None:
        raise NoWristDetected()

    dist_left = distance(left, nose) if left is not None else math.inf
    dist_right = distance(right, nose) if right is not None else math.inf
    return dist_left, dist_right


def decide(
    keypoints: KeypointSet,
    thresholds: Thresholds = Thresholds(),
    policy: HandPolicy = nearest_hand,
) -> Judgment:
    """
    Judge whether a hand is raised near the face.

    Raises `NoseNotDetected` when there is no nose to measure from and
    `NoWristDetected` when neither wrist is present.
    """
    dist_left, dist_right = _wrist_distances(keypoints)
    hand = policy(dist_left, dist_right)
    dist = dist_left if hand == LEFT_WRIST else dist_right

    confidence = confidence_for(dist, thresholds.threshold_distance)
    # Rounding is for presentation only; acceptance uses the exact value.
    judgment = Judgment(
        hand=hand,
        distance=round(dist, DISTANCE_DECIMALS),
        confidence=round(confidence, CONFIDENCE_DECIMALS),
        accepted=confidence >= thresholds.acceptance_threshold,
    )
    logger.debug(
        "left=%.2f right=%.2f -> %s (%s)", dist_left, dist_right, hand, judgment
    )
    return judgment
