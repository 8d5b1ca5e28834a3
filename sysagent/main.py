from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse

from .config import settings
from .routers import metrics
from .services.collector import new_collector

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    collector = new_collector(settings)
    collector.start(settings.sample_interval_sec)
    app.state.collector = collector
    try:
        yield
    finally:
        collector.stop()


app = FastAPI(title=settings.app_name, lifespan=lifespan)


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception('Unhandled error on %s %s', request.method, request.url.path, exc_info=exc)
    return JSONResponse({'detail': 'Internal Server Error'}, status_code=500)


app.add_exception_handler(Exception, unhandled_exception_handler)


@app.get('/', response_class=HTMLResponse)
def dashboard():
    try:
        content = Path(settings.dashboard_file).read_text(encoding='utf-8')
    except FileNotFoundError:
        raise HTTPException(status_code=404, detail='Dashboard not found')
    return HTMLResponse(content)


app.include_router(metrics.router)
