from __future__ import annotations

import asyncio

import pytest
from fastapi.testclient import TestClient
from starlette.requests import Request

from sysagent import main
from sysagent.deps import get_collector
from sysagent.schemas import MetricSnapshot
from sysagent.services.collector import CollectorState

_WIRE_FIELDS = {
    'cpu_usage_percent',
    'mem_usage_percent',
    'swap_usage_percent',
    'disk_free_gb',
    'load_1',
    'load_5',
    'load_15',
    'uptime_hours',
    'fd_open',
    'fd_max',
    'cpu_temp_c',
    'battery_percent',
    'battery_status',
    'net_rx_kb',
    'net_tx_kb',
}


class _Collector:
    state = CollectorState.RUNNING

    def __init__(self, snapshot: MetricSnapshot | None = None, error: Exception | None = None):
        self.snapshot = snapshot or MetricSnapshot()
        self.error = error

    def get_metrics(self) -> MetricSnapshot:
        if self.error is not None:
            raise self.error
        return self.snapshot


@pytest.fixture
def client_for():
    def _make(collector: _Collector, raise_server_exceptions: bool = True) -> TestClient:
        main.app.dependency_overrides[get_collector] = lambda: collector
        return TestClient(main.app, raise_server_exceptions=raise_server_exceptions)

    yield _make
    main.app.dependency_overrides.clear()


def _request(path: str) -> Request:
    scope = {
        'type': 'http',
        'http_version': '1.1',
        'method': 'GET',
        'scheme': 'http',
        'path': path,
        'raw_path': path.encode(),
        'query_string': b'',
        'headers': [],
        'client': ('127.0.0.1', 12345),
        'server': ('testserver', 80),
    }
    return Request(scope)


def test_metrics_returns_snapshot_with_exact_field_names(client_for):
    snapshot = MetricSnapshot(cpu_usage_percent=90.0, net_rx_kb=10.0, battery_percent=100, battery_status='AC_Power')
    client = client_for(_Collector(snapshot))

    response = client.get('/metrics')

    assert response.status_code == 200
    assert response.headers['content-type'].startswith('application/json')
    body = response.json()
    assert set(body) == _WIRE_FIELDS
    assert body['cpu_usage_percent'] == 90.0
    assert body['net_rx_kb'] == 10.0
    assert body['battery_status'] == 'AC_Power'


def test_metrics_rejects_other_methods(client_for):
    client = client_for(_Collector())

    assert client.post('/metrics').status_code == 405
    assert client.delete('/metrics').status_code == 405


def test_metrics_unexpected_error_is_500(client_for):
    client = client_for(_Collector(error=RuntimeError('boom at /proc/private')), raise_server_exceptions=False)

    response = client.get('/metrics')

    assert response.status_code == 500
    assert response.json() == {'detail': 'Internal Server Error'}


def test_unhandled_exception_handler_hides_details():
    response = asyncio.run(main.unhandled_exception_handler(_request('/metrics'), RuntimeError('/secret/path')))

    assert response.status_code == 500
    assert b'/secret/path' not in response.body


def test_healthz_reports_collector_state(client_for):
    client = client_for(_Collector())

    response = client.get('/healthz')

    assert response.json() == {'ok': True, 'collector': 'running'}


def test_dashboard_served_as_html(client_for):
    client = client_for(_Collector())

    response = client.get('/')

    assert response.status_code == 200
    assert response.headers['content-type'].startswith('text/html')
    assert '/metrics' in response.text


def test_dashboard_missing_is_404(client_for, monkeypatch, tmp_path):
    monkeypatch.setattr(main.settings, 'dashboard_file', str(tmp_path / 'missing.html'))
    client = client_for(_Collector())

    response = client.get('/')

    assert response.status_code == 404
    assert response.json() == {'detail': 'Dashboard not found'}


def test_metrics_without_collector_is_503(monkeypatch):
    main.app.dependency_overrides.clear()
    monkeypatch.delattr(main.app.state, 'collector', raising=False)
    client = TestClient(main.app)

    assert client.get('/metrics').status_code == 503


@pytest.mark.asyncio
async def test_lifespan_starts_and_stops_collector(monkeypatch):
    events = []

    class _LifecycleCollector(_Collector):
        def start(self, interval: float) -> None:
            events.append(('start', interval))

        def stop(self) -> None:
            events.append(('stop',))

    fake = _LifecycleCollector()
    monkeypatch.setattr(main, 'new_collector', lambda _settings: fake)
    monkeypatch.setattr(main.settings, 'sample_interval_sec', 0.5)

    async with main.lifespan(main.app):
        assert main.app.state.collector is fake
        assert events == [('start', 0.5)]

    assert events == [('start', 0.5), ('stop',)]
