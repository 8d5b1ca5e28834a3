from __future__ import annotations

from fastapi import HTTPException, Request, status

from .services.collector import Collector


def get_collector(request: Request) -> Collector:
    collector = getattr(request.app.state, 'collector', None)
    if collector is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail='Collector not initialised')
    return collector
