"""Session API endpoints."""

from functools import lru_cache

from fastapi import APIRouter, Depends

from proprio.config import Settings, get_settings
from proprio.feedback import evaluate_feedback
from proprio.motion.analyzer import MotionAnalyzer
from proprio.schemas.session import (
    FeedbackResponse,
    FrameAdmission,
    FrameIn,
    FrameResult,
    MetricsResponse,
    ModeUpdate,
)
from proprio.worker import FrameWorker

router = APIRouter()


@lru_cache
def get_analyzer() -> MotionAnalyzer:
    """Process-wide analyzer instance."""
    return MotionAnalyzer.from_settings(get_settings())


@lru_cache
def get_worker() -> FrameWorker:
    """Process-wide frame worker feeding the shared analyzer."""
    return FrameWorker.from_settings(get_analyzer(), get_settings())


@router.get("/metrics", response_model=MetricsResponse)
async def get_metrics(analyzer: MotionAnalyzer = Depends(get_analyzer)):
    """Current published metrics."""
    return MetricsResponse.from_snapshot(analyzer.snapshot)


@router.post("/start", response_model=MetricsResponse)
async def start_session(analyzer: MotionAnalyzer = Depends(get_analyzer)):
    analyzer.start()
    return MetricsResponse.from_snapshot(analyzer.snapshot)


@router.post("/stop", response_model=MetricsResponse)
async def stop_session(analyzer: MotionAnalyzer = Depends(get_analyzer)):
    analyzer.stop()
    return MetricsResponse.from_snapshot(analyzer.snapshot)


@router.post("/reset", response_model=MetricsResponse)
async def reset_session(analyzer: MotionAnalyzer = Depends(get_analyzer)):
    """Clear history and restore default metrics. Active state is kept."""
    analyzer.reset()
    return MetricsResponse.from_snapshot(analyzer.snapshot)


@router.put("/mode", response_model=MetricsResponse)
async def set_mode(
    update: ModeUpdate,
    analyzer: MotionAnalyzer = Depends(get_analyzer)
):
    analyzer.set_mode(update.mode)
    return MetricsResponse.from_snapshot(analyzer.snapshot)


@router.post("/frames", response_model=FrameResult)
def submit_frame(
    frame: FrameIn,
    analyzer: MotionAnalyzer = Depends(get_analyzer)
):
    """
    Process one frame of keypoints synchronously.

    Frames sent while the session is inactive are discarded and reported
    with processed=false.
    """
    processed = analyzer.process_frame(frame.to_pose_frame())
    return FrameResult(
        processed=processed,
        metrics=MetricsResponse.from_snapshot(analyzer.snapshot)
    )


@router.get("/feedback", response_model=FeedbackResponse)
async def get_feedback(
    analyzer: MotionAnalyzer = Depends(get_analyzer),
    settings: Settings = Depends(get_settings)
):
    """Feedback actions for the current metrics."""
    return FeedbackResponse.from_decision(evaluate_feedback(analyzer.snapshot, settings))


@router.post("/frames/stream", response_model=FrameAdmission)
async def stream_frame(
    frame: FrameIn,
    worker: FrameWorker = Depends(get_worker)
):
    """
    Queue a frame for the background worker.

    Frames are throttled by capture timestamp and only the newest waiting
    frame is kept; the caller polls /metrics for results.
    """
    return FrameAdmission(admitted=worker.submit(frame.to_pose_frame()))
