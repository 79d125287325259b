from __future__ import annotations

from sqlalchemy.exc import OperationalError

from templehub.services import ledger


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["ok"] is True


def test_version(client):
    assert client.get("/version").json() == {"version": "0.1.0"}


def test_unknown_route_uses_error_envelope(client):
    r = client.get("/nope")
    assert r.status_code == 404
    assert r.json() == {"detail": "Not Found"}


def test_store_failure_is_a_500(client, make, headers_for, monkeypatch):
    admin = make.admin()
    program = make.program(admin)

    def boom(*args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("disk I/O error"))

    monkeypatch.setattr(ledger, "list_program_followups", boom)
    r = client.get(
        "/followups",
        params={"program": program.id, "date": "2025-03-02"},
        headers=headers_for(admin),
    )

    assert r.status_code == 500
    assert r.json() == {"detail": "Database error"}


def test_missing_query_parameter_is_a_400(client, make, headers_for):
    admin = make.admin()
    r = client.get("/followups", params={"date": "2025-03-02"}, headers=headers_for(admin))
    assert r.status_code == 400
    assert "program" in r.json()["detail"]
