def test_health_endpoints(client):
    assert client.get("/api/health").json() == {"status": "ok"}

    live = client.get("/api/health/live")
    assert live.status_code == 200
    assert live.json()["status"] == "ok"

    ready = client.get("/api/health/ready")
    assert ready.status_code in {200, 503}
    payload = ready.json()
    assert "database" in payload
    assert set(payload["database"]) >= {"ok", "schema_ok", "missing_tables", "missing_columns"}


def test_responses_carry_process_time_header(client):
    response = client.get("/api/health")

    assert "x-process-time-ms" in response.headers


def test_readiness_reports_default_day_shape(client):
    payload = client.get("/api/health/ready").json()

    assert payload["default_day"] == {"ok": True, "slots": 5, "error": None}
    assert payload["conflict_lookup"] == "index"
