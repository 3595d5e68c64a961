from .decision import HAND_POLICIES, Thresholds, decide, get_hand_policy
from .errors import DecisionError, EstimatorFailure, HandProximityError, NoseNotDetected, NoWristDetected
from .keypoints import Judgment, Keypoint, KeypointSet, ScoreFilter, build_keypoint_set

__all__ = [
    "HAND_POLICIES",
    "Thresholds",
    "decide",
    "get_hand_policy",
    "DecisionError",
    "EstimatorFailure",
    "HandProximityError",
    "NoseNotDetected",
    "NoWristDetected",
    "Judgment",
    "Keypoint",
    "KeypointSet",
    "ScoreFilter",
    "build_keypoint_set",
]
