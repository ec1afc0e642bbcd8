"""
Modelos específicos relacionados con reservas y disponibilidad.
Define las estructuras de datos utilizadas en la gestión de fechas, horarios y turnos.
"""
from typing_extensions import TypedDict
from pydantic import BaseModel, ConfigDict, Field

class AvailableDate(TypedDict):
    """Modelo para representar una fecha ofrecida en el formulario"""
    value: str
    label: str

class AppointmentPayload(BaseModel):
    """Modelo del cuerpo enviado al webhook de creación de turnos"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    # Datos del paciente
    dni: str = Field(..., description="DNI del paciente")
    nombre: str = Field(..., description="Nombre completo")
    telefono: str = Field(..., description="Teléfono de contacto")
    email: str = Field("", description="Correo electrónico")
    obra_social: str = Field("", alias="obraSocial", description="Obra social")
    numero_afiliado: str = Field("", alias="numeroAfiliado", description="Número de afiliado")
    alergias: str = Field(..., description="Alergias (\"Ninguna\" si no se indicó)")
    antecedentes: str = Field(..., description="Antecedentes (\"Ninguno\" si no se indicó)")
    # Datos del turno
    tipo_turno: str = Field(..., alias="tipoTurno", description="Identificador del tipo de turno")
    tipo_turno_nombre: str = Field(..., alias="tipoTurnoNombre", description="Nombre del tipo de turno")
    duracion: int = Field(..., description="Duración en minutos")
    fecha_hora: str = Field(..., alias="fechaHora", description="Fecha y hora ISO 8601 con offset")
    timezone: str = Field(..., description="Zona horaria del consultorio")
    # Metadatos
    is_new_patient: bool = Field(..., alias="isNewPatient", description="True si el paciente no estaba registrado")

    def to_json_dict(self) -> dict:
        """Serializa con los nombres de campo que espera el webhook."""
        return self.model_dump(by_alias=True)
