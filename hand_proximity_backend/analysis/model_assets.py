from __future__ import annotations

import logging
import os
import ssl
import urllib.request

logger = logging.getLogger(__name__)

POSE_LANDMARKER_TASK_URL = (
    "https://storage.googleapis.com/mediapipe-models/pose_landmarker/pose_landmarker_full/float16/latest/pose_landmarker_full.task"
)


def _ssl_context() -> ssl.SSLContext:
    # python.org macOS builds can ship without root certificates; certifi fixes that when installed.
    try:
        import certifi  # type: ignore
    except ImportError:
        return ssl.create_default_context()
    return ssl.create_default_context(cafile=certifi.where())


def ensure_pose_landmarker_task(model_path: str, *, url: str = POSE_LANDMARKER_TASK_URL, timeout_s: int = 30) -> str:
    """
    Ensure the MediaPipe Tasks pose model exists at `model_path`.

    Downloads it from the MediaPipe model bucket when missing. A partial
    download is removed before the error is re-raised.
    """

    if os.path.exists(model_path):
        return model_path

    os.makedirs(os.path.dirname(model_path) or ".", exist_ok=True)
    logger.info("Downloading pose model %s -> %s", url, model_path)

    try:
        with urllib.request.urlopen(url, context=_ssl_context(), timeout=timeout_s) as r, open(model_path, "wb") as f:
            f.write(r.read())
    except Exception as e:
        if os.path.exists(model_path):
            os.remove(model_path)
        raise RuntimeError(
            "Missing MediaPipe Tasks pose model and auto-download failed.\n"
            f"Expected model at: {model_path}\n"
            "Download it manually with:\n"
            f'  curl -L -o "{model_path}" "{url}"'
        ) from e

    return model_path
