"""
Configuration settings for the hand proximity API.

Values are read once from `HAND_PROXIMITY_*` environment variables (and an
optional `.env` file) when the process starts.
"""
from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from dotenv import load_dotenv

from .analysis.decision import HAND_POLICIES, Thresholds

ENV_PREFIX = "HAND_PROXIMITY_"


@dataclass(frozen=True)
class Settings:
    """Service settings."""

    host: str = "0.0.0.0"
    port: int = 8000
    threshold_distance: float = 550.0
    acceptance_threshold: float = 0.1
    min_keypoint_score: Optional[float] = 0.5  # None disables the pre-filter
    hand_policy: str = "nearest"
    max_image_side: int = 1280
    model_complexity: int = 1
    pose_task_path: str = "models/pose_landmarker_full.task"
    upload_dir: str = field(default_factory=lambda: os.path.join(tempfile.gettempdir(), "uploads"))
    allowed_image_types: Tuple[str, ...] = ("image/jpeg", "image/jpg", "image/png", "image/webp", "image/bmp")
    log_level: str = "INFO"
    log_file: Optional[str] = None

    def __post_init__(self) -> None:
        if self.hand_policy not in HAND_POLICIES:
            raise ValueError(
                f"hand_policy must be one of {sorted(HAND_POLICIES)}, got {self.hand_policy!r}"
            )
        if self.min_keypoint_score is not None and not 0.0 <= self.min_keypoint_score <= 1.0:
            raise ValueError(f"min_keypoint_score must be within [0, 1], got {self.min_keypoint_score}")
        if self.max_image_side <= 0:
            raise ValueError(f"max_image_side must be positive, got {self.max_image_side}")
        if self.model_complexity not in (0, 1, 2):
            raise ValueError(f"model_complexity must be 0, 1 or 2, got {self.model_complexity}")
        # Fails fast on bad thresholds.
        self.thresholds()

    def thresholds(self) -> Thresholds:
        return Thresholds(
            threshold_distance=self.threshold_distance,
            acceptance_threshold=self.acceptance_threshold,
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, dotenv: bool = True) -> "Settings":
        """Build settings from the environment, falling back to defaults."""
        if environ is None:
            if dotenv:
                load_dotenv()
            environ = os.environ

        def get(name: str) -> Optional[str]:
            value = environ.get(ENV_PREFIX + name)
            return value.strip() if value is not None else None

        kwargs = {}
        for name, convert in (
            ("HOST", str),
            ("PORT", int),
            ("THRESHOLD_DISTANCE", float),
            ("ACCEPTANCE_THRESHOLD", float),
            ("HAND_POLICY", str),
            ("MAX_IMAGE_SIDE", int),
            ("MODEL_COMPLEXITY", int),
            ("POSE_TASK_PATH", str),
            ("UPLOAD_DIR", str),
            ("LOG_LEVEL", str),
            ("LOG_FILE", str),
        ):
            raw = get(name)
            if raw:
                try:
                    kwargs[name.lower()] = convert(raw)
                except ValueError:
                    raise ValueError(f"Invalid value for {ENV_PREFIX}{name}: {raw!r}") from None

        raw = get("MIN_KEYPOINT_SCORE")
        if raw is not None:
            if raw == "" or raw.lower() == "none":
                kwargs["min_keypoint_score"] = None
            else:
                try:
                    kwargs["min_keypoint_score"] = float(raw)
                except ValueError:
                    raise ValueError(f"Invalid value for {ENV_PREFIX}MIN_KEYPOINT_SCORE: {raw!r}") from None

        raw = get("ALLOWED_IMAGE_TYPES")
        if raw:
            kwargs["allowed_image_types"] = tuple(t.strip().lower() for t in raw.split(",") if t.strip())

        return cls(**kwargs)
