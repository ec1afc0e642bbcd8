"""
Reglas del formulario de turnos.
Normalización de campos, validación, autocompletado desde el registro del paciente
y armado del cuerpo que se envía al webhook de creación.
"""
import re
import pytz
from typing import Any, Dict, Optional

from turnero.domain.entities.models import (
    AppointmentPayload, BookingForm, FormPolicy, FORM_FIELD_NAMES, PATIENT_FIELDS,
    PATIENT_FIELD_CANDIDATES, OPTIONAL_PATIENT_FIELDS, get_appointment_type
)
from turnero.application.services.tools.date_utils import combine_date_time, get_timezone_name

# Longitud mínima del DNI para consultar al paciente
DNI_LOOKUP_MIN_LENGTH = 8

DEFAULT_ALERGIAS = "Ninguna"
DEFAULT_ANTECEDENTES = "Ninguno"

_NON_DIGITS = re.compile(r"\D")
_PHONE_SEPARATORS = re.compile(r"[\s.\-]")

REQUIRED_FIELDS = ("dni", "nombre", "telefono", "tipo_turno", "fecha", "hora")

def resolve_field_name(field: str) -> str:
    """
    Traduce el nombre de un campo (alias o atributo) al atributo del formulario.

    Raises:
        KeyError: Si el campo no existe
    """
    try:
        return FORM_FIELD_NAMES[field]
    except KeyError:
        raise KeyError(f"Campo desconocido: {field}") from None

def normalize_dni(value: str) -> str:
    """Deja solo los dígitos del DNI, en el mismo orden."""
    return _NON_DIGITS.sub("", value or "")

def normalize_phone(value: str) -> str:
    """Quita espacios, puntos y guiones del teléfono."""
    return _PHONE_SEPARATORS.sub("", value or "")

def normalize_field_value(field: str, value: Any, policy: Optional[FormPolicy] = None) -> str:
    policy = policy or FormPolicy()
    text = "" if value is None else str(value)
    if field == "dni":
        return normalize_dni(text)
    if field == "telefono" and policy.normalize_phone:
        return normalize_phone(text)
    return text

def _digit_count(value: str) -> int:
    return len(normalize_dni(value))

def is_form_valid(form: BookingForm, policy: Optional[FormPolicy] = None) -> bool:
    """
    Indica si el formulario puede enviarse.

    Requiere dni, nombre, teléfono, tipo de turno, fecha y hora no vacíos; la
    política estricta además exige email y una cantidad mínima de dígitos.
    """
    policy = policy or FormPolicy()
    if not all(getattr(form, name).strip() for name in REQUIRED_FIELDS):
        return False
    if get_appointment_type(form.tipo_turno) is None:
        return False
    if policy.require_email and not form.email.strip():
        return False
    if policy.min_dni_digits and _digit_count(form.dni) < policy.min_dni_digits:
        return False
    if policy.min_phone_digits and _digit_count(form.telefono) < policy.min_phone_digits:
        return False
    return True

def _first_non_empty(record: Dict[str, Any], keys) -> str:
    for key in keys:
        value = record.get(key)
        if value is None:
            continue
        text = str(value).strip()
        if text:
            return text
    return ""

def apply_patient_record(form: BookingForm, patient: Dict[str, Any]) -> BookingForm:
    """
    Completa los datos de contacto y médicos con el registro devuelto por el webhook.

    Acepta los nombres de campo en español o en inglés. El email solo se
    sobrescribe si el registro trae uno.
    """
    update = {}
    for field, keys in PATIENT_FIELD_CANDIDATES.items():
        value = _first_non_empty(patient, keys)
        if not value and field in OPTIONAL_PATIENT_FIELDS:
            continue
        update[field] = value
    return form.model_copy(update=update)

def clear_patient_fields(form: BookingForm) -> BookingForm:
    """Vacía los datos de contacto y médicos, conservando DNI y turno."""
    return form.model_copy(update={field: "" for field in PATIENT_FIELDS})

def build_appointment_payload(
    form: BookingForm,
    patient_found: bool,
    timezone_name: Optional[str] = None
) -> AppointmentPayload:
    """
    Arma el cuerpo para el webhook de creación de turnos.

    Raises:
        ValueError: Si el tipo de turno es desconocido o la fecha/hora son inválidas
    """
    appointment_type = get_appointment_type(form.tipo_turno)
    if appointment_type is None:
        raise ValueError(f"Tipo de turno desconocido: {form.tipo_turno}")

    timezone_name = timezone_name or get_timezone_name()
    fecha_hora = combine_date_time(form.fecha, form.hora, pytz.timezone(timezone_name))

    return AppointmentPayload(
        dni=form.dni,
        nombre=form.nombre.strip(),
        telefono=form.telefono,
        email=form.email.strip(),
        obra_social=form.obra_social,
        numero_afiliado=form.numero_afiliado,
        alergias=form.alergias.strip() or DEFAULT_ALERGIAS,
        antecedentes=form.antecedentes.strip() or DEFAULT_ANTECEDENTES,
        tipo_turno=appointment_type.id,
        tipo_turno_nombre=appointment_type.name,
        duracion=appointment_type.duration,
        fecha_hora=fecha_hora,
        timezone=timezone_name,
        is_new_patient=not patient_found,
    )
