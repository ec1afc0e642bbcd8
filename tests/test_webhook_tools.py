"""Tests for the webhook client against a local aiohttp server."""

import asyncio

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from turnero.application.services.tools.form_rules import build_appointment_payload
from turnero.application.services.tools.webhook_tools import WebhookClient, api_request
from turnero.domain.entities.models import (
    BookingForm,
    WebhookConnectionError,
    WebhookResponseError,
    WebhookStatusError,
    WebhookTimeoutError,
)


class FakeN8n:
    """Configurable responses for the three webhooks."""

    def __init__(self) -> None:
        self.requests = []
        self.patient_response = web.json_response({"found": False})
        self.availability_response = web.json_response({"availableSlots": ["15:00", "15:30"]})
        self.create_response = web.json_response({"ok": True})
        self.delay = 0

    async def check_patient(self, request: web.Request) -> web.Response:
        self.requests.append(("check", dict(request.query), dict(request.headers), None))
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.patient_response

    async def get_availability(self, request: web.Request) -> web.Response:
        self.requests.append(("availability", dict(request.query), dict(request.headers), None))
        return self.availability_response

    async def create_appointment(self, request: web.Request) -> web.Response:
        body = await request.json()
        self.requests.append(("create", dict(request.query), dict(request.headers), body))
        return self.create_response


@pytest.fixture
def n8n() -> FakeN8n:
    return FakeN8n()


@pytest_asyncio.fixture
async def server(n8n):
    app = web.Application()
    app.router.add_get("/check-patient", n8n.check_patient)
    app.router.add_get("/get-availability", n8n.get_availability)
    app.router.add_post("/create-appointment", n8n.create_appointment)

    test_server = TestServer(app)
    await test_server.start_server()
    yield test_server
    await test_server.close()


@pytest.fixture
def client(server) -> WebhookClient:
    return WebhookClient(
        check_patient_url=str(server.make_url("/check-patient")),
        availability_url=str(server.make_url("/get-availability")),
        create_appointment_url=str(server.make_url("/create-appointment")),
        api_key="secret",
        lookup_timeout=2,
        submit_timeout=2,
    )


class TestCheckPatient:
    """Patient lookup webhook."""

    @pytest.mark.asyncio
    async def test_sends_dni_and_api_key(self, client, n8n) -> None:
        await client.check_patient("30111222")

        kind, query, headers, _ = n8n.requests[0]
        assert kind == "check"
        assert query == {"dni": "30111222"}
        assert headers["X-API-KEY"] == "secret"

    @pytest.mark.asyncio
    async def test_found(self, client, n8n) -> None:
        n8n.patient_response = web.json_response({"found": True, "patient": {"nombre": "Ana Gomez"}})

        result = await client.check_patient("30111222")

        assert result == {"found": True, "patient": {"nombre": "Ana Gomez"}}

    @pytest.mark.asyncio
    async def test_found_without_record_is_not_found(self, client, n8n) -> None:
        n8n.patient_response = web.json_response({"found": True, "patient": None})
        assert await client.check_patient("30111222") == {"found": False, "patient": None}

    @pytest.mark.asyncio
    async def test_error_status(self, client, n8n) -> None:
        n8n.patient_response = web.json_response({"message": "caído"}, status=502)

        with pytest.raises(WebhookStatusError) as exc_info:
            await client.check_patient("30111222")

        assert exc_info.value.status == 502
        assert exc_info.value.message == "caído"

    @pytest.mark.asyncio
    async def test_non_object_body(self, client, n8n) -> None:
        n8n.patient_response = web.json_response(["unexpected"])

        with pytest.raises(WebhookResponseError):
            await client.check_patient("30111222")

    @pytest.mark.asyncio
    async def test_timeout(self, client, n8n) -> None:
        client.lookup_timeout = 0.1
        n8n.delay = 1

        with pytest.raises(WebhookTimeoutError):
            await client.check_patient("30111222")

    @pytest.mark.asyncio
    async def test_undecodable_body(self, client, n8n) -> None:
        n8n.patient_response = web.Response(body=b'{"found": true, "patient": "\xff\xfe"}',
                                            content_type="application/json", charset="utf-8")

        with pytest.raises(WebhookResponseError):
            await client.check_patient("30111222")


class TestGetAvailability:
    """Availability webhook."""

    @pytest.mark.asyncio
    async def test_sends_date_and_duration(self, client, n8n) -> None:
        slots = await client.get_availability("2025-03-04", 90)

        assert slots == ["15:00", "15:30"]
        _, query, _, _ = n8n.requests[0]
        assert query == {"fecha": "2025-03-04", "duration": "90"}

    @pytest.mark.asyncio
    async def test_missing_slots_is_empty(self, client, n8n) -> None:
        n8n.availability_response = web.json_response({})
        assert await client.get_availability("2025-03-04", 30) == []

    @pytest.mark.asyncio
    async def test_malformed_slots(self, client, n8n) -> None:
        n8n.availability_response = web.json_response({"availableSlots": "15:00"})

        with pytest.raises(WebhookResponseError):
            await client.get_availability("2025-03-04", 30)


class TestCreateAppointment:
    """Appointment creation webhook."""

    @staticmethod
    def payload():
        form = BookingForm(dni="30111222", nombre="Ana Gomez", telefono="3811234567",
                           tipo_turno="limpieza", fecha="2025-03-04", hora="15:30")
        return build_appointment_payload(form, patient_found=False)

    @pytest.mark.asyncio
    async def test_posts_json_body(self, client, n8n) -> None:
        await client.create_appointment(self.payload())

        kind, _, headers, body = n8n.requests[0]
        assert kind == "create"
        assert headers["X-API-KEY"] == "secret"
        assert body["fechaHora"] == "2025-03-04T15:30:00-03:00"
        assert body["tipoTurnoNombre"] == "Limpieza"
        assert body["isNewPatient"] is True

    @pytest.mark.asyncio
    async def test_rejection_carries_message(self, client, n8n) -> None:
        n8n.create_response = web.json_response({"message": "Horario ocupado"}, status=409)

        with pytest.raises(WebhookStatusError) as exc_info:
            await client.create_appointment(self.payload())

        assert exc_info.value.message == "Horario ocupado"

    @pytest.mark.asyncio
    async def test_plain_text_error(self, client, n8n) -> None:
        n8n.create_response = web.Response(text="Internal error", status=500)

        with pytest.raises(WebhookStatusError) as exc_info:
            await client.create_appointment(self.payload())

        assert exc_info.value.body == {"text": "Internal error"}
        assert exc_info.value.message is None

    @pytest.mark.asyncio
    async def test_undecodable_error_body(self, client, n8n) -> None:
        n8n.create_response = web.Response(body=b"\xff\xfe error", status=502,
                                           content_type="application/json", charset="utf-8")

        with pytest.raises(WebhookResponseError):
            await client.create_appointment(self.payload())


@pytest.mark.asyncio
async def test_connection_refused() -> None:
    with pytest.raises(WebhookConnectionError) as exc_info:
        await api_request("get", "http://127.0.0.1:1/check-patient", timeout=2)

    assert exc_info.value.url == "http://127.0.0.1:1/check-patient"


def test_client_from_settings() -> None:
    settings = {
        "webhooks": {
            "check_patient": "https://n8n.test/webhook/check-patient",
            "get_availability": "https://n8n.test/webhook/get-availability",
            "create_appointment": "https://n8n.test/webhook/create-appointment",
            "api_key": None,
        },
        "timeouts": {"lookup": 5, "submit": 8},
    }

    client = WebhookClient.from_settings(settings)

    assert client.availability_url.endswith("/get-availability")
    assert (client.lookup_timeout, client.submit_timeout) == (5, 8)
    assert client._headers() == {}
