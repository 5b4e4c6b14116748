"""
Smoke tests for critical endpoints before deployment.

These tests verify that the most important functionality works:
- Health check endpoint
- Dasha calculation (core business logic)
- Configuration is validated at startup

Run these before every deployment to catch breaking changes early.
"""
import pytest
from jyotish_dasha import create_app


@pytest.fixture
def app():
    """Create test app instance"""
    return create_app({"TESTING": True})


@pytest.fixture
def client(app):
    """Create test client"""
    return app.test_client()


def test_healthz_endpoint(client):
    """Health check must pass - critical for monitoring"""
    response = client.get('/healthz')
    assert response.status_code == 200
    assert response.json['ok'] == True


def test_dasha_endpoint_basic(client):
    """Dasha calculation must work - core business logic"""
    data = {
        "datetime": "1991-03-25T09:46:00",
        "tz": "Asia/Kolkata",
        "moonLongitude": 231.5,
        "atDate": "2024-01-01T00:00:00Z",
        "depth": 6,
    }

    response = client.post('/dasha', json=data)
    assert response.status_code == 200
    assert len(response.json['chain']) == 6
    assert response.json['nakshatra']['name'] == 'Jyeshtha'


def test_unknown_route_is_404(client):
    response = client.get('/chart')
    assert response.status_code == 404


@pytest.mark.parametrize("overrides", [
    {"AYANAMSHA": "UNKNOWN"},
    {"DEFAULT_DEPTH": 9},
    {"SANDHI_LOOKAHEAD_DAYS": -5},
    {"SANDHI_LOOKAHEAD_DAYS": 1e12},
    {"YOGINI_MAPPING": "RANDOM"},
    {"EPHE_PATH": "/definitely/not/a/dir"},
])
def test_invalid_configuration_fails_fast(overrides):
    with pytest.raises(RuntimeError):
        create_app(dict(overrides, TESTING=True))
