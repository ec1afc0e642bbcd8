"""
Rutas y endpoints del formulario de turnos.
Expone las sesiones de reserva para que el front-end maneje el formulario por HTTP.
"""
import logging
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from turnero.domain.entities.models import (
    AppointmentType, AvailableDate, FieldEditRequest, SessionResponse
)
from turnero.application.services.tools.booking_flow import BookingFlowController
from turnero.application.services.tools.catalog_tools import get_appointment_types, get_obras_sociales
from turnero.application.services.tools.date_utils import compute_available_dates
from turnero.services.session_service import BookingSessionService, session_service

logger = logging.getLogger(__name__)

# Crear router para los endpoints de turnos
router = APIRouter(prefix="/turnos", tags=["turnos"])

def get_session_service() -> BookingSessionService:
    return session_service

def _get_controller(session_id: str, service: BookingSessionService) -> BookingFlowController:
    controller = service.get_session(session_id)
    if controller is None:
        raise HTTPException(status_code=404, detail="Sesión inexistente o vencida")
    return controller

def _session_response(session_id: str, controller: BookingFlowController) -> SessionResponse:
    return SessionResponse(
        session_id=session_id,
        state=controller.state,
        can_submit=controller.can_submit,
        available_dates=controller.available_dates,
    )

@router.get("/tipos", response_model=List[AppointmentType])
async def list_appointment_types():
    """Catálogo de tipos de turno con su duración."""
    return get_appointment_types()

@router.get("/fechas", response_model=List[AvailableDate])
async def list_available_dates():
    """Fechas que se pueden reservar (próximos 14 días, de lunes a jueves)."""
    return compute_available_dates()

@router.get("/obras-sociales", response_model=List[str])
async def list_obras_sociales():
    """Obras sociales ordenadas alfabéticamente."""
    return get_obras_sociales()

@router.post("/sesiones", response_model=SessionResponse, status_code=201)
async def create_session(service: BookingSessionService = Depends(get_session_service)):
    """Abre un formulario vacío."""
    session_id, controller = await service.create_session()
    return _session_response(session_id, controller)

@router.get("/sesiones/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str, service: BookingSessionService = Depends(get_session_service)):
    """Estado actual del formulario."""
    controller = _get_controller(session_id, service)
    return _session_response(session_id, controller)

@router.patch("/sesiones/{session_id}", response_model=SessionResponse)
async def edit_field(
    session_id: str,
    edit: FieldEditRequest,
    esperar: bool = Query(False, description="Esperar a que terminen las búsquedas disparadas"),
    service: BookingSessionService = Depends(get_session_service)
):
    """
    Edita un campo del formulario.

    Editar el DNI dispara la búsqueda del paciente y editar la fecha o el tipo de
    turno dispara la consulta de horarios.
    """
    controller = _get_controller(session_id, service)
    try:
        controller.edit_field(edit.field, edit.value)
    except KeyError:
        raise HTTPException(status_code=400, detail=f"Campo desconocido: {edit.field}")

    if esperar:
        await controller.wait_idle()
    return _session_response(session_id, controller)

@router.post("/sesiones/{session_id}/confirmar", response_model=SessionResponse)
async def submit(session_id: str, service: BookingSessionService = Depends(get_session_service)):
    """Confirma el turno. Si el webhook lo rechaza, el motivo queda en `state.error`."""
    controller = _get_controller(session_id, service)
    if not controller.can_submit:
        raise HTTPException(status_code=400, detail="Formulario incompleto")

    await controller.submit()
    return _session_response(session_id, controller)

@router.delete("/sesiones/{session_id}", status_code=204)
async def close_session(session_id: str, service: BookingSessionService = Depends(get_session_service)):
    """Descarta el formulario."""
    if not await service.close_session(session_id):
        raise HTTPException(status_code=404, detail="Sesión inexistente o vencida")
    return Response(status_code=204)

@router.get("/health")
async def health_check():
    """Endpoint para verificar el estado del servicio."""
    return {"status": "healthy", "timestamp": datetime.now().isoformat()}
