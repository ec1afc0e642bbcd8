"""
Exportación de todos los modelos de dominio.
Este módulo centraliza la exportación de todos los modelos para facilitar su importación.
"""
# Modelos de tipos de turno
from turnero.domain.entities.models.appointment_models import (
    AppointmentType,
    APPOINTMENT_TYPES,
    get_appointment_type
)

# Modelos del formulario
from turnero.domain.entities.models.form_models import (
    BookingForm,
    BookingState,
    Confirmation,
    FormPhase,
    FormPolicy,
    FORM_FIELD_NAMES,
    PATIENT_FIELDS
)

# Modelos de pacientes
from turnero.domain.entities.models.patient_models import (
    PatientLookupResult,
    PATIENT_FIELD_CANDIDATES,
    OPTIONAL_PATIENT_FIELDS
)

# Modelos de reservas
from turnero.domain.entities.models.booking_models import (
    AvailableDate,
    AppointmentPayload
)

# Modelos de la API de sesiones
from turnero.domain.entities.models.session_models import (
    FieldEditRequest,
    SessionResponse
)

# Modelos de errores
from turnero.domain.entities.models.error_models import (
    ErrorResult,
    WebhookError,
    WebhookTimeoutError,
    WebhookConnectionError,
    WebhookStatusError,
    WebhookResponseError
)

# Exportar todos los modelos para facilitar importación
__all__ = [
    # Tipos de turno
    'AppointmentType',
    'APPOINTMENT_TYPES',
    'get_appointment_type',

    # Formulario
    'BookingForm',
    'BookingState',
    'Confirmation',
    'FormPhase',
    'FormPolicy',
    'FORM_FIELD_NAMES',
    'PATIENT_FIELDS',

    # Pacientes
    'PatientLookupResult',
    'PATIENT_FIELD_CANDIDATES',
    'OPTIONAL_PATIENT_FIELDS',

    # Reservas
    'AvailableDate',
    'AppointmentPayload',

    # API de sesiones
    'FieldEditRequest',
    'SessionResponse',

    # Errores
    'ErrorResult',
    'WebhookError',
    'WebhookTimeoutError',
    'WebhookConnectionError',
    'WebhookStatusError',
    'WebhookResponseError'
]
