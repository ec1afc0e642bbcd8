"""
Modelos específicos relacionados con el formulario de reserva.
Define el formulario, el estado derivado de la sesión y la política de validación.
"""
from enum import Enum
from typing import Dict, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field

class BookingForm(BaseModel):
    """Modelo inmutable con los campos del formulario de turno"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    dni: str = Field("", description="DNI del paciente (solo dígitos)")
    nombre: str = Field("", description="Nombre completo")
    telefono: str = Field("", description="Teléfono de contacto")
    email: str = Field("", description="Correo electrónico")
    obra_social: str = Field("", alias="obraSocial", description="Obra social")
    numero_afiliado: str = Field("", alias="numeroAfiliado", description="Número de afiliado")
    alergias: str = Field("", description="Alergias conocidas")
    antecedentes: str = Field("", description="Antecedentes médicos")
    tipo_turno: str = Field("", alias="tipoTurno", description="Identificador del tipo de turno")
    fecha: str = Field("", description="Fecha seleccionada (YYYY-MM-DD)")
    hora: str = Field("", description="Hora seleccionada (HH:MM)")

# Campos de contacto y datos médicos que completa la búsqueda de paciente
PATIENT_FIELDS = (
    "nombre", "telefono", "email", "obra_social",
    "numero_afiliado", "alergias", "antecedentes",
)

def _build_field_names() -> Dict[str, str]:
    names = {}
    for name, info in BookingForm.model_fields.items():
        names[name] = name
        if info.alias:
            names[info.alias] = name
    return names

# Nombre aceptado (alias o atributo) -> atributo del formulario
FORM_FIELD_NAMES: Dict[str, str] = _build_field_names()

class FormPhase(str, Enum):
    """Fases de la sesión de reserva"""
    IDLE = "idle"
    EDITING = "editing"
    SUBMITTING = "submitting"
    CONFIRMED = "confirmed"

class Confirmation(BaseModel):
    """Datos que se muestran al confirmar el turno"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    fecha: str = Field(..., description="Fecha del turno (YYYY-MM-DD)")
    fecha_label: str = Field(..., alias="fechaLabel", description="Fecha legible")
    hora: str = Field(..., description="Hora del turno (HH:MM)")
    tipo_turno_nombre: str = Field(..., alias="tipoTurnoNombre", description="Nombre del tipo de turno")
    duracion: int = Field(..., description="Duración en minutos")

class BookingState(BaseModel):
    """Estado completo de una sesión de reserva (formulario + estado transitorio)"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    form: BookingForm = Field(default_factory=BookingForm)
    phase: FormPhase = Field(FormPhase.IDLE)
    patient_found: bool = Field(False, alias="patientFound")
    patient_searched: bool = Field(False, alias="patientSearched")
    available_slots: Tuple[str, ...] = Field((), alias="availableSlots")
    checking_patient: bool = Field(False, alias="checkingPatient")
    loading_availability: bool = Field(False, alias="loadingAvailability")
    submitting: bool = Field(False)
    error: str = Field("", description="Mensaje de error actual")
    confirmation: Optional[Confirmation] = Field(None)

class FormPolicy(BaseModel):
    """Reglas de normalización y validación del formulario"""
    model_config = ConfigDict(frozen=True)

    normalize_phone: bool = True
    require_email: bool = False
    min_dni_digits: Optional[int] = None
    min_phone_digits: Optional[int] = None
    clear_on_not_found: bool = True
    clear_stale_hora: bool = True

    @classmethod
    def strict(cls) -> "FormPolicy":
        return cls(require_email=True, min_dni_digits=8, min_phone_digits=10)

    @classmethod
    def from_name(cls, name: Optional[str]) -> "FormPolicy":
        """Obtiene la política por nombre ("default" o "strict")."""
        if (name or "default").lower() == "strict":
            return cls.strict()
        return cls()
