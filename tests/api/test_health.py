"""
Tests for the health check endpoint.
"""

from sqlalchemy.exc import OperationalError

from finance_tracker.main import app
from finance_tracker.models.base import get_db


def test_health_check_ok(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {
        "status": "healthy",
        "service": "finance-tracker",
        "database": "healthy",
    }


def test_health_check_reports_degraded_database(client):
    """The endpoint still answers 200 when the database is down."""
    class BrokenSession:
        def execute(self, *args, **kwargs):
            raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    app.dependency_overrides[get_db] = lambda: BrokenSession()

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "degraded"
    assert response.json()["database"] == "unhealthy"
