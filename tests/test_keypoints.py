import pytest

from hand_proximity_backend.analysis.keypoints import (
    PART_NAMES,
    Judgment,
    Keypoint,
    ScoreFilter,
    build_keypoint_set,
)

from conftest import make_keypoints


class TestScoreFilter:

    def test_default_threshold_is_inclusive(self):
        keypoints = [
            Keypoint("nose", 1, 1, 0.5),
            Keypoint("leftWrist", 2, 2, 0.49),
            Keypoint("rightWrist", 3, 3, 0.95),
        ]
        kept = ScoreFilter()(keypoints)

        assert [kp.name for kp in kept] == ["nose", "rightWrist"]

    def test_disabled(self):
        keypoints = make_keypoints(score=0.01, nose=(0, 0), leftWrist=(3, 4))
        assert ScoreFilter(None)(keypoints) == keypoints

    def test_invalid_threshold(self):
        with pytest.raises(ValueError):
            ScoreFilter(1.5)


class TestBuildKeypointSet:

    def test_indexes_by_name(self):
        keypoint_set = build_keypoint_set(make_keypoints(nose=(1, 2), leftWrist=(3, 4)))

        assert set(keypoint_set) == {"nose", "leftWrist"}
        assert keypoint_set["nose"].x == 1.0

    def test_drops_unknown_parts(self):
        keypoint_set = build_keypoint_set([Keypoint("leftPinky", 0, 0, 1.0)])
        assert len(keypoint_set) == 0

    def test_duplicate_keeps_best_score(self):
        keypoint_set = build_keypoint_set([
            Keypoint("nose", 0, 0, 0.6),
            Keypoint("nose", 10, 10, 0.9),
            Keypoint("nose", 20, 20, 0.7),
        ])
        assert keypoint_set["nose"].x == 10

    def test_read_only(self):
        keypoint_set = build_keypoint_set(make_keypoints(nose=(0, 0)))
        with pytest.raises(TypeError):
            keypoint_set["leftWrist"] = Keypoint("leftWrist", 0, 0, 1.0)

    def test_vocabulary(self):
        assert len(PART_NAMES) == 17
        assert {"nose", "leftWrist", "rightWrist"} <= set(PART_NAMES)


def test_judgment_to_dict():
    judgment = Judgment(hand="leftWrist", distance=5.0, confidence=0.991, accepted=True)

    assert judgment.to_dict() == {
        "closestHand": "leftWrist",
        "distance": 5.0,
        "confidence": 0.991,
        "accepted": True,
    }
