class HandProximityError(Exception):
    """Base class for every error raised while judging an image."""


class DecisionError(HandProximityError):
    """A keypoint set that cannot produce a judgment."""

    kind = "decision_error"
    message = "No judgment could be made"

    def __init__(self, message=None):
        super().__init__(message or self.message)


class NoseNotDetected(DecisionError):
    kind = "nose_not_detected"
    message = "Nose not detected"


class NoWristDetected(DecisionError):
    kind = "no_wrist_detected"
    message = "No wrist detected"


class EstimatorFailure(HandProximityError):
    """The pose estimator could not process the image."""

    kind = "estimator_failure"
