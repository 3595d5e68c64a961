import logging
import os
from contextlib import asynccontextmanager
from typing import BinaryIO, Optional

from fastapi import Depends, FastAPI, File, HTTPException, Request, UploadFile
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from .analysis.decision import decide, get_hand_policy
from .analysis.errors import DecisionError, EstimatorFailure
from .analysis.keypoints import Judgment, ScoreFilter, build_keypoint_set
from .analysis.pose_analysis import PoseEstimator
from .config import Settings
from .logger import setup_logging
from .uploads import stored_upload

logger = logging.getLogger(__name__)

ROOT_MESSAGE = (
    "This is an API for pose estimation that identifies the closest hand to the nose "
    "in an image to help patients that suffer from tuberculosis."
)


def judge_image(image_path: str, estimator: PoseEstimator, settings: Settings) -> Judgment:
    keypoints = estimator.estimate(image_path)
    keypoint_set = build_keypoint_set(ScoreFilter(settings.min_keypoint_score)(keypoints))
    return decide(keypoint_set, settings.thresholds(), get_hand_policy(settings.hand_policy))


def judge_upload(upload: BinaryIO, suffix: str, estimator: PoseEstimator, settings: Settings) -> Judgment:
    with stored_upload(upload, settings.upload_dir, suffix) as path:
        return judge_image(path, estimator, settings)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_estimator(request: Request) -> PoseEstimator:
    estimator = request.app.state.estimator
    if estimator is None:
        raise HTTPException(status_code=503, detail="Pose model not loaded")
    return estimator


def create_app(settings: Optional[Settings] = None, estimator: Optional[PoseEstimator] = None) -> FastAPI:
    """Build the API. Pass `estimator` to skip loading MediaPipe at startup."""
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = None
        if app.state.estimator is None:
            logger.info("Loading pose model...")
            owned = await run_in_threadpool(
                PoseEstimator,
                model_complexity=settings.model_complexity,
                max_image_side=settings.max_image_side,
                tasks_model_path=settings.pose_task_path,
            )
            app.state.estimator = owned
            logger.info("Pose model loaded")
        yield
        if owned is not None:
            owned.close()
            app.state.estimator = None
            logger.info("Pose model released")

    app = FastAPI(title="Hand Proximity API", lifespan=lifespan)
    app.state.settings = settings
    app.state.estimator = estimator

    @app.exception_handler(DecisionError)
    async def decision_error_handler(request: Request, exc: DecisionError):
        logger.info("Rejected %s: %s", request.url.path, exc)
        return JSONResponse(status_code=400, content={"error": str(exc), "kind": exc.kind})

    @app.exception_handler(EstimatorFailure)
    async def estimator_failure_handler(request: Request, exc: EstimatorFailure):
        logger.error("Pose estimation error: %s", exc, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"error": "Pose estimation failed", "details": str(exc), "kind": exc.kind},
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.error("Unexpected error on %s: %s", request.url.path, exc, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"error": "Pose estimation failed", "details": str(exc) or type(exc).__name__, "kind": "internal_error"},
        )

    @app.get("/")
    async def root():
        return {"message": ROOT_MESSAGE}

    @app.get("/health")
    async def health(request: Request):
        return {"status": "ok", "model_loaded": request.app.state.estimator is not None}

    @app.post("/pose")
    async def analyze_image(
        image: Optional[UploadFile] = File(None),
        settings: Settings = Depends(get_settings),
        estimator: PoseEstimator = Depends(get_estimator),
    ):
        if image is None:
            return JSONResponse(status_code=400, content={"error": "No image uploaded"})

        content_type = (image.content_type or "").lower()
        if content_type and content_type not in settings.allowed_image_types:
            return JSONResponse(
                status_code=400,
                content={"error": "Unsupported image type", "details": content_type},
            )

        suffix = os.path.splitext(image.filename or "")[1]
        judgment = await run_in_threadpool(judge_upload, image.file, suffix, estimator, settings)

        return judgment.to_dict()

    return app


# Served by `run()`, or directly with `uvicorn hand_proximity_backend.main:app`.
app = create_app()


def run() -> None:
    import uvicorn

    settings = app.state.settings
    setup_logging(settings.log_level, settings.log_file)
    logger.info("Starting server on http://%s:%d", settings.host, settings.port)
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
