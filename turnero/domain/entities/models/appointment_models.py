"""
Modelos específicos relacionados con los tipos de turno.
Define el catálogo fijo de prestaciones que ofrece el consultorio.
"""
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

class AppointmentType(BaseModel):
    """Modelo para representar un tipo de turno y su duración"""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Identificador del tipo de turno")
    name: str = Field(..., description="Nombre visible del tipo de turno")
    duration: int = Field(..., description="Duración en minutos", gt=0)

# Catálogo de prestaciones (el orden es el que se muestra en el formulario)
APPOINTMENT_TYPES: List[AppointmentType] = [
    AppointmentType(id="consulta", name="Consulta", duration=30),
    AppointmentType(id="limpieza", name="Limpieza", duration=45),
    AppointmentType(id="ensenanza", name="Enseñanza de técnica de cepillado y flúor en niños", duration=30),
    AppointmentType(id="caries_chicos", name="Arreglos caries chicos", duration=45),
    AppointmentType(id="caries_grandes", name="Arreglos caries grandes", duration=60),
    AppointmentType(id="molde_blanqueamiento", name="Toma de molde para blanqueamiento ambulatorio", duration=30),
    AppointmentType(id="molde_relajacion", name="Toma de molde para placa de relajación", duration=30),
    AppointmentType(id="instalacion_placas", name="Instalación de placas de relajación", duration=45),
    AppointmentType(id="carillas", name="Carillas anteriores", duration=90),
    AppointmentType(id="contenciones", name="Contenciones", duration=45),
    AppointmentType(id="incrustaciones", name="Incrustaciones", duration=75),
]

_APPOINTMENT_TYPES_BY_ID = {appointment_type.id: appointment_type for appointment_type in APPOINTMENT_TYPES}

def get_appointment_type(type_id: Optional[str]) -> Optional[AppointmentType]:
    """Busca un tipo de turno por su identificador. Devuelve None si no existe."""
    if not type_id:
        return None
    return _APPOINTMENT_TYPES_BY_ID.get(type_id)
