from __future__ import annotations

from fastapi import APIRouter, Depends

from ..deps import get_collector
from ..schemas import HealthResponse, MetricSnapshot
from ..services.collector import Collector

router = APIRouter(tags=['metrics'])


@router.get('/metrics', response_model=MetricSnapshot)
def get_metrics(collector: Collector = Depends(get_collector)) -> MetricSnapshot:
    return collector.get_metrics()


@router.get('/healthz', response_model=HealthResponse)
def healthz(collector: Collector = Depends(get_collector)) -> HealthResponse:
    return HealthResponse(ok=True, collector=collector.state.value)
