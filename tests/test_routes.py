"""Tests for the HTTP endpoints of the booking form."""

from datetime import date

import pytest
from fastapi.testclient import TestClient

from turnero.application.services.tools.booking_flow import BookingFlowController
from turnero.application.services.tools.catalog_tools import spanish_sort_key
from turnero.domain.entities.models import WebhookStatusError
from turnero.main import app
from turnero.presentation.booking.routes import get_session_service
from turnero.services.session_service import BookingSessionService

from tests.conftest import FIXED_NOW, FakeWebhookClient


@pytest.fixture
def fake_n8n() -> FakeWebhookClient:
    return FakeWebhookClient()


@pytest.fixture
def client(fake_n8n):
    service = BookingSessionService(
        controller_factory=lambda: BookingFlowController(fake_n8n, debounce=0.01, now=FIXED_NOW)
    )
    app.dependency_overrides[get_session_service] = lambda: service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def edit(client: TestClient, session_id: str, field: str, value: str):
    return client.patch(f"/turnos/sesiones/{session_id}", params={"esperar": "true"},
                        json={"field": field, "value": value})


def test_root(client) -> None:
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "online"


def test_health(client) -> None:
    response = client.get("/turnos/health")
    assert response.json()["status"] == "healthy"


def test_appointment_types(client) -> None:
    types = client.get("/turnos/tipos").json()

    assert len(types) == 11
    assert {"id": "carillas", "name": "Carillas anteriores", "duration": 90} in types


def test_obras_sociales_sorted(client) -> None:
    names = client.get("/turnos/obras-sociales").json()

    assert "OSDE" in names
    assert names == sorted(names, key=spanish_sort_key)


def test_dates_are_work_days(client) -> None:
    dates = client.get("/turnos/fechas").json()

    assert dates
    assert all(date.fromisoformat(d["value"]).weekday() in (0, 1, 2, 3) for d in dates)


def test_full_booking(client, fake_n8n) -> None:
    fake_n8n.check_patient.return_value = {
        "found": True,
        "patient": {"nombre": "Ana Gomez", "telefono": "3811234567", "alergias": "Penicilina"},
    }

    response = client.post("/turnos/sesiones")
    assert response.status_code == 201
    body = response.json()
    session_id = body["sessionId"]
    assert body["state"]["phase"] == "idle"
    assert body["canSubmit"] is False
    assert body["availableDates"][0] == {"value": "2025-03-03", "label": "lunes, 03 de marzo"}

    body = edit(client, session_id, "dni", "30.111.222").json()
    assert body["state"]["patientFound"] is True
    assert body["state"]["form"]["nombre"] == "Ana Gomez"

    edit(client, session_id, "tipoTurno", "limpieza")
    body = edit(client, session_id, "fecha", "2025-03-04").json()
    assert body["state"]["availableSlots"] == ["15:00", "15:30", "16:15"]
    fake_n8n.get_availability.assert_awaited_once_with("2025-03-04", 45)

    body = edit(client, session_id, "hora", "15:30").json()
    assert body["canSubmit"] is True

    response = client.post(f"/turnos/sesiones/{session_id}/confirmar")
    assert response.status_code == 200
    state = response.json()["state"]
    assert state["phase"] == "confirmed"
    assert state["confirmation"]["fechaLabel"] == "martes, 04 de marzo"
    assert state["confirmation"]["tipoTurnoNombre"] == "Limpieza"

    payload = fake_n8n.create_appointment.await_args.args[0]
    assert payload.fecha_hora == "2025-03-04T15:30:00-03:00"
    assert payload.is_new_patient is False


def test_rejected_booking_reports_error(client, fake_n8n) -> None:
    fake_n8n.create_appointment.side_effect = WebhookStatusError(409, {"message": "Horario ocupado"})
    session_id = client.post("/turnos/sesiones").json()["sessionId"]

    edit(client, session_id, "dni", "30111222")
    for field, value in [("nombre", "Ana"), ("telefono", "3811234567"),
                         ("tipoTurno", "consulta"), ("fecha", "2025-03-04"), ("hora", "15:00")]:
        edit(client, session_id, field, value)

    response = client.post(f"/turnos/sesiones/{session_id}/confirmar")

    assert response.status_code == 200
    state = response.json()["state"]
    assert state["error"] == "Horario ocupado"
    assert state["phase"] == "editing"
    assert state["form"]["nombre"] == "Ana"


def test_incomplete_form_cannot_be_confirmed(client, fake_n8n) -> None:
    session_id = client.post("/turnos/sesiones").json()["sessionId"]
    edit(client, session_id, "nombre", "Ana")

    response = client.post(f"/turnos/sesiones/{session_id}/confirmar")

    assert response.status_code == 400
    fake_n8n.create_appointment.assert_not_awaited()


def test_unknown_field(client) -> None:
    session_id = client.post("/turnos/sesiones").json()["sessionId"]
    response = edit(client, session_id, "apellido", "Gomez")
    assert response.status_code == 400


def test_unknown_session(client) -> None:
    assert client.get("/turnos/sesiones/missing").status_code == 404
    assert edit(client, "missing", "dni", "1").status_code == 404
    assert client.post("/turnos/sesiones/missing/confirmar").status_code == 404
    assert client.delete("/turnos/sesiones/missing").status_code == 404


def test_close_session(client) -> None:
    session_id = client.post("/turnos/sesiones").json()["sessionId"]

    assert client.delete(f"/turnos/sesiones/{session_id}").status_code == 204
    assert client.get(f"/turnos/sesiones/{session_id}").status_code == 404


def test_edit_without_waiting(client, fake_n8n) -> None:
    session_id = client.post("/turnos/sesiones").json()["sessionId"]

    body = client.patch(f"/turnos/sesiones/{session_id}", json={"field": "dni", "value": "30111222"}).json()

    assert body["state"]["form"]["dni"] == "30111222"
    assert body["state"]["patientSearched"] is False
