"""Pytest configuration and fixtures."""

from datetime import datetime
from unittest.mock import AsyncMock

import pytest

from turnero.application.services.tools.booking_flow import BookingFlowController
from turnero.domain.entities.models import FormPolicy


# Sunday 2 March 2025, 09:00 at the office: the booking window starts on Monday 3 March
FIXED_NOW = datetime(2025, 3, 2, 9, 0)

# Short debounce so tests do not wait 400 ms per lookup
TEST_DEBOUNCE = 0.02


class FakeWebhookClient:
    """Stand-in for WebhookClient recording every call."""

    def __init__(self) -> None:
        self.check_patient = AsyncMock(return_value={"found": False, "patient": None})
        self.get_availability = AsyncMock(return_value=["15:00", "15:30", "16:15"])
        self.create_appointment = AsyncMock(return_value={"ok": True})


@pytest.fixture
def fake_client() -> FakeWebhookClient:
    return FakeWebhookClient()


@pytest.fixture
def make_controller(fake_client):
    """Build controllers bound to the fake client and the fixed clock."""

    def _make(policy: FormPolicy = None, debounce: float = TEST_DEBOUNCE) -> BookingFlowController:
        return BookingFlowController(fake_client, policy=policy, debounce=debounce, now=FIXED_NOW)

    return _make


@pytest.fixture
def controller(make_controller) -> BookingFlowController:
    return make_controller()
