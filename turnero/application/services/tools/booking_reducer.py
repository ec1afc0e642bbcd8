"""
Transiciones del estado de una sesión de reserva.
Cada función recibe el estado actual y devuelve uno nuevo; ninguna modifica el estado recibido.
"""
from typing import Iterable

from turnero.domain.entities.models import (
    BookingState, Confirmation, FormPhase, PatientLookupResult
)
from turnero.application.services.tools.form_rules import apply_patient_record, clear_patient_fields

def _editing_phase(state: BookingState) -> FormPhase:
    if state.phase == FormPhase.IDLE:
        return FormPhase.EDITING
    return state.phase

def field_edited(state: BookingState, field: str, value: str) -> BookingState:
    form = state.form.model_copy(update={field: value})
    return state.model_copy(update={"form": form, "phase": _editing_phase(state)})

def patient_invalidated(state: BookingState) -> BookingState:
    """El DNI cambió: el paciente encontrado deja de corresponder."""
    return state.model_copy(update={
        "patient_found": False,
        "patient_searched": False,
        "checking_patient": False,
    })

def patient_lookup_started(state: BookingState) -> BookingState:
    return state.model_copy(update={"checking_patient": True, "error": ""})

def patient_lookup_cancelled(state: BookingState) -> BookingState:
    return state.model_copy(update={"checking_patient": False})

def patient_lookup_succeeded(
    state: BookingState,
    result: PatientLookupResult,
    clear_on_not_found: bool = True
) -> BookingState:
    if result["found"] and result["patient"]:
        return state.model_copy(update={
            "form": apply_patient_record(state.form, result["patient"]),
            "patient_found": True,
            "patient_searched": True,
            "checking_patient": False,
        })

    form = clear_patient_fields(state.form) if clear_on_not_found else state.form
    return state.model_copy(update={
        "form": form,
        "patient_found": False,
        "patient_searched": True,
        "checking_patient": False,
    })

def patient_lookup_failed(state: BookingState, message: str) -> BookingState:
    return state.model_copy(update={
        "patient_found": False,
        "patient_searched": False,
        "checking_patient": False,
        "error": message,
    })

def availability_started(state: BookingState) -> BookingState:
    return state.model_copy(update={"loading_availability": True})

def availability_loaded(
    state: BookingState,
    slots: Iterable[str],
    clear_stale_hora: bool = True
) -> BookingState:
    slots = tuple(slots)
    form = state.form
    if clear_stale_hora and form.hora and form.hora not in slots:
        form = form.model_copy(update={"hora": ""})
    return state.model_copy(update={
        "form": form,
        "available_slots": slots,
        "loading_availability": False,
    })

def availability_cancelled(state: BookingState) -> BookingState:
    return state.model_copy(update={"loading_availability": False})

def availability_failed(state: BookingState, clear_stale_hora: bool = True) -> BookingState:
    # Sin horarios no se bloquea el formulario ni se muestra error
    return availability_loaded(state, (), clear_stale_hora)

def form_rejected(state: BookingState, message: str) -> BookingState:
    return state.model_copy(update={"error": message})

def submit_started(state: BookingState) -> BookingState:
    return state.model_copy(update={
        "phase": FormPhase.SUBMITTING,
        "submitting": True,
        "error": "",
    })

def submit_failed(state: BookingState, message: str) -> BookingState:
    return state.model_copy(update={
        "phase": FormPhase.EDITING,
        "submitting": False,
        "error": message,
    })

def submit_aborted(state: BookingState) -> BookingState:
    return state.model_copy(update={"phase": FormPhase.EDITING, "submitting": False})

def submit_succeeded(state: BookingState, confirmation: Confirmation) -> BookingState:
    return state.model_copy(update={
        "phase": FormPhase.CONFIRMED,
        "submitting": False,
        "checking_patient": False,
        "loading_availability": False,
        "error": "",
        "confirmation": confirmation,
    })
