"""HTTP route definitions for the service."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from app.schemas import Classification, MonitorSnapshot, SensorReadingPayload, ThresholdReport
from services.monitor import MonitorService, build_default_monitor

router = APIRouter()


def get_monitor() -> MonitorService:
    return build_default_monitor()


@router.get(
    "/status",
    response_model=MonitorSnapshot,
    summary="Latest sensor reading with its flood-risk classification.",
)
async def get_status(monitor: MonitorService = Depends(get_monitor)) -> MonitorSnapshot:
    return monitor.latest()


@router.post(
    "/readings",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=MonitorSnapshot,
    summary="Publish a sensor reading on the monitored feed path.",
)
async def publish_reading(
    payload: SensorReadingPayload,
    monitor: MonitorService = Depends(get_monitor),
) -> MonitorSnapshot:
    try:
        return monitor.publish(payload.to_reading())
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc


@router.post(
    "/classify",
    response_model=Classification,
    summary="Classify a reading without publishing it.",
)
async def classify_reading(
    payload: SensorReadingPayload,
    monitor: MonitorService = Depends(get_monitor),
) -> Classification:
    return Classification.from_domain(monitor.classify(payload.to_reading()))


@router.get(
    "/thresholds",
    response_model=ThresholdReport,
    summary="Active warning/danger thresholds and any inconsistent fields.",
)
async def get_thresholds(monitor: MonitorService = Depends(get_monitor)) -> ThresholdReport:
    return monitor.threshold_report()


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck(monitor: MonitorService = Depends(get_monitor)) -> dict[str, str]:
    return {"status": "ok", "feed": "subscribed" if monitor.running else "idle"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
