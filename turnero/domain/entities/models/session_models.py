"""
Modelos específicos relacionados con la API de sesiones de reserva.
Define las estructuras de datos utilizadas en los endpoints HTTP.
"""
from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field

from turnero.domain.entities.models.booking_models import AvailableDate
from turnero.domain.entities.models.form_models import BookingState

class FieldEditRequest(BaseModel):
    """Modelo para la edición de un campo del formulario"""
    field: str = Field(..., description="Nombre del campo (p. ej. dni, tipoTurno, fecha)")
    value: Optional[Any] = Field("", description="Valor ingresado")

class SessionResponse(BaseModel):
    """Modelo de respuesta con el estado de una sesión de reserva"""
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(..., alias="sessionId", description="Identificador de la sesión")
    state: BookingState = Field(..., description="Estado del formulario")
    can_submit: bool = Field(..., alias="canSubmit", description="Indica si se puede confirmar el turno")
    available_dates: List[AvailableDate] = Field(default_factory=list, alias="availableDates",
                                                 description="Fechas ofrecidas en esta sesión")
