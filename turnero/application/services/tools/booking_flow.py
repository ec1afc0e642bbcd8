"""
Controlador del flujo de reserva de turnos.
Coordina la edición del formulario con las búsquedas de paciente y de horarios,
y el envío del turno al webhook de creación.
"""
import asyncio
import logging
from datetime import datetime
from typing import Any, Callable, List, Optional

import pytz

from turnero.domain.entities.models import (
    BookingState, Confirmation, FormPhase, FormPolicy, AvailableDate,
    WebhookError, WebhookStatusError, get_appointment_type
)
from turnero.application.services.tools import booking_reducer as reducer
from turnero.application.services.tools.date_utils import (
    compute_available_dates, format_date_human_readable, get_timezone_instance, parse_iso_date
)
from turnero.application.services.tools.form_rules import (
    DNI_LOOKUP_MIN_LENGTH, build_appointment_payload, is_form_valid,
    normalize_dni, normalize_field_value, resolve_field_name
)
from turnero.application.services.tools.webhook_tools import WebhookClient
from turnero.infrastructure.config.config.settings import PATIENT_LOOKUP_DEBOUNCE, FORM_POLICY

logger = logging.getLogger(__name__)

PATIENT_LOOKUP_ERROR = "Error al verificar el paciente. Intenta nuevamente."
SUBMIT_ERROR = "Error al crear el turno. Intenta nuevamente."
INVALID_DATETIME_ERROR = "Formato de fecha u hora inválido. Use YYYY-MM-DD para fecha y HH:MM para hora."

AVAILABILITY_FIELDS = ("fecha", "tipo_turno")

class BookingFlowController:
    """
    Máquina de estados de un formulario de reserva.

    El estado es inmutable y solo cambia a través de las transiciones de
    `booking_reducer`. La búsqueda de paciente se posterga `debounce` segundos y
    cada nueva edición del DNI cancela la anterior; la búsqueda de horarios no
    tiene demora pero solo el pedido más reciente puede aplicar su resultado.
    """

    def __init__(
        self,
        client: WebhookClient,
        policy: Optional[FormPolicy] = None,
        debounce: float = PATIENT_LOOKUP_DEBOUNCE,
        tz: Optional[pytz.BaseTzInfo] = None,
        now: Optional[datetime] = None
    ):
        self._client = client
        self._policy = policy or FormPolicy()
        self._debounce = debounce
        self._tz = tz or get_timezone_instance()
        self._state = BookingState()
        # Las fechas se calculan una vez por sesión
        self._available_dates = compute_available_dates(now, self._tz)
        self._patient_task: Optional[asyncio.Task] = None
        self._availability_task: Optional[asyncio.Task] = None
        self._patient_seq = 0
        self._availability_seq = 0

    @property
    def state(self) -> BookingState:
        return self._state

    @property
    def policy(self) -> FormPolicy:
        return self._policy

    @property
    def available_dates(self) -> List[AvailableDate]:
        return list(self._available_dates)

    @property
    def is_valid(self) -> bool:
        return is_form_valid(self._state.form, self._policy)

    @property
    def can_submit(self) -> bool:
        """Equivale al botón de confirmar habilitado."""
        state = self._state
        # Mientras se actualizan los horarios la hora elegida puede dejar de ser válida
        return (self.is_valid and not state.submitting and not state.loading_availability
                and state.phase != FormPhase.CONFIRMED)

    def _dispatch(self, transition: Callable[..., BookingState], *args: Any) -> BookingState:
        self._state = transition(self._state, *args)
        return self._state

    # Edición de campos

    def edit_field(self, field: str, raw_value: Any) -> BookingState:
        """
        Escribe un campo del formulario y dispara las búsquedas que correspondan.

        Debe llamarse dentro de un event loop en ejecución, ya que las búsquedas
        se programan como tareas.

        Raises:
            KeyError: Si el campo no existe
        """
        name = resolve_field_name(field)
        if self._state.phase == FormPhase.CONFIRMED:
            logger.info(f"Sesión confirmada: se ignora la edición de '{name}'")
            return self._state

        value = normalize_field_value(name, raw_value, self._policy)
        previous = getattr(self._state.form, name)
        self._dispatch(reducer.field_edited, name, value)

        if name == "dni":
            if value != previous:
                self._on_dni_changed(value)
        elif name in AVAILABILITY_FIELDS:
            # Se usan los valores posteriores a la edición
            form = self._state.form
            if form.fecha and form.tipo_turno:
                self._schedule_availability(form.fecha, form.tipo_turno)
            else:
                self._reset_availability()

        return self._state

    def _on_dni_changed(self, dni: str) -> None:
        self._cancel_patient_lookup()
        self._patient_seq += 1
        self._dispatch(reducer.patient_invalidated)
        if len(dni) >= DNI_LOOKUP_MIN_LENGTH:
            self._patient_task = asyncio.get_running_loop().create_task(
                self._debounced_patient_lookup(dni, self._patient_seq)
            )

    def _cancel_patient_lookup(self) -> None:
        task = self._patient_task
        self._patient_task = None
        if task is not None and not task.done():
            task.cancel()
            self._dispatch(reducer.patient_lookup_cancelled)

    def _cancel_availability_lookup(self) -> None:
        task = self._availability_task
        self._availability_task = None
        if task is not None and not task.done():
            task.cancel()
            self._dispatch(reducer.availability_cancelled)

    def _reset_availability(self) -> None:
        # Falta la fecha o el tipo: los horarios anteriores dejan de corresponder
        self._cancel_availability_lookup()
        self._availability_seq += 1
        self._dispatch(reducer.availability_failed, self._policy.clear_stale_hora)

    # Búsqueda de paciente

    async def _debounced_patient_lookup(self, dni: str, seq: int) -> None:
        await asyncio.sleep(self._debounce)
        await self._run_patient_lookup(dni, seq)

    async def lookup_patient(self, dni: str) -> BookingState:
        """
        Busca al paciente de inmediato, sin demora, reemplazando cualquier búsqueda pendiente.

        Con menos de 8 dígitos no consulta al webhook y solo limpia los indicadores.
        """
        dni = normalize_dni(dni)
        self._cancel_patient_lookup()
        self._patient_seq += 1
        if len(dni) < DNI_LOOKUP_MIN_LENGTH:
            return self._dispatch(reducer.patient_invalidated)
        await self._run_patient_lookup(dni, self._patient_seq)
        return self._state

    async def _run_patient_lookup(self, dni: str, seq: int) -> None:
        self._dispatch(reducer.patient_lookup_started)
        try:
            result = await self._client.check_patient(dni)
        except WebhookError as e:
            if seq != self._patient_seq:
                return
            logger.warning(f"Error al consultar paciente {dni}: {str(e)}")
            self._dispatch(reducer.patient_lookup_failed, PATIENT_LOOKUP_ERROR)
            return
        except Exception:
            if seq != self._patient_seq:
                return
            logger.exception(f"Error inesperado al consultar paciente {dni}")
            self._dispatch(reducer.patient_lookup_failed, PATIENT_LOOKUP_ERROR)
            return

        if seq != self._patient_seq:
            logger.debug(f"Se descarta la respuesta del paciente {dni}: hay una búsqueda más reciente")
            return

        logger.info(f"Paciente {dni} {'encontrado' if result['found'] else 'no encontrado'}")
        self._dispatch(reducer.patient_lookup_succeeded, result, self._policy.clear_on_not_found)

    # Búsqueda de horarios

    def _schedule_availability(self, fecha: str, tipo_turno: str) -> None:
        self._cancel_availability_lookup()
        self._availability_seq += 1
        self._availability_task = asyncio.get_running_loop().create_task(
            self._run_availability_lookup(fecha, tipo_turno, self._availability_seq)
        )

    async def lookup_availability(self, fecha: str, tipo_turno: str) -> BookingState:
        """Consulta los horarios de inmediato, reemplazando cualquier consulta pendiente."""
        self._cancel_availability_lookup()
        self._availability_seq += 1
        await self._run_availability_lookup(fecha, tipo_turno, self._availability_seq)
        return self._state

    async def _run_availability_lookup(self, fecha: str, tipo_turno: str, seq: int) -> None:
        appointment_type = get_appointment_type(tipo_turno)
        if not fecha or appointment_type is None:
            logger.debug(f"Sin consulta de horarios: fecha '{fecha}', tipo de turno '{tipo_turno}'")
            self._dispatch(reducer.availability_failed, self._policy.clear_stale_hora)
            return

        self._dispatch(reducer.availability_started)
        try:
            slots = await self._client.get_availability(fecha, appointment_type.duration)
        except WebhookError as e:
            if seq != self._availability_seq:
                return
            logger.warning(f"Error al obtener disponibilidad para {fecha}: {str(e)}")
            self._dispatch(reducer.availability_failed, self._policy.clear_stale_hora)
            return
        except Exception:
            if seq != self._availability_seq:
                return
            logger.exception(f"Error inesperado al obtener disponibilidad para {fecha}")
            self._dispatch(reducer.availability_failed, self._policy.clear_stale_hora)
            return

        if seq != self._availability_seq:
            logger.debug(f"Se descartan los horarios de {fecha}: hay una consulta más reciente")
            return

        self._dispatch(reducer.availability_loaded, slots, self._policy.clear_stale_hora)

    # Envío

    def _date_label(self, fecha: str) -> str:
        for available_date in self._available_dates:
            if available_date["value"] == fecha:
                return available_date["label"]
        return format_date_human_readable(parse_iso_date(fecha))

    async def submit(self) -> Optional[Confirmation]:
        """
        Envía el turno si el formulario es válido.

        Returns:
            La confirmación si el turno se creó; None si no se envió o falló
            (en ese caso el motivo queda en `state.error`)
        """
        if not self.can_submit:
            logger.info("Envío ignorado: el formulario no está completo")
            return None

        state = self._state
        try:
            payload = build_appointment_payload(state.form, state.patient_found, self._tz.zone)
            fecha_label = self._date_label(state.form.fecha)
        except ValueError as e:
            logger.warning(f"No se pudo armar el turno: {str(e)}")
            self._dispatch(reducer.form_rejected, INVALID_DATETIME_ERROR)
            return None

        self._dispatch(reducer.submit_started)
        try:
            await self._client.create_appointment(payload)
        except WebhookStatusError as e:
            logger.error(f"El webhook rechazó el turno ({e.status}): {e.body}")
            self._dispatch(reducer.submit_failed, e.message or SUBMIT_ERROR)
            return None
        except WebhookError as e:
            logger.error(f"Error al crear el turno: {str(e)}")
            self._dispatch(reducer.submit_failed, SUBMIT_ERROR)
            return None
        except BaseException:
            # Cancelación u otro error inesperado: el indicador no puede quedar activo
            self._dispatch(reducer.submit_aborted)
            raise

        confirmation = Confirmation(
            fecha=state.form.fecha,
            fecha_label=fecha_label,
            hora=state.form.hora,
            tipo_turno_nombre=payload.tipo_turno_nombre,
            duracion=payload.duracion,
        )
        self._cancel_patient_lookup()
        self._cancel_availability_lookup()
        self._dispatch(reducer.submit_succeeded, confirmation)
        logger.info(f"Turno confirmado: {confirmation.fecha} {confirmation.hora} ({confirmation.tipo_turno_nombre})")
        return confirmation

    # Tareas pendientes

    async def wait_idle(self) -> BookingState:
        """Espera a que terminen las búsquedas en curso (incluidas las que estas disparen)."""
        while True:
            tasks = [task for task in (self._patient_task, self._availability_task)
                     if task is not None and not task.done()]
            if not tasks:
                return self._state
            await asyncio.gather(*tasks, return_exceptions=True)

    async def aclose(self) -> None:
        """Cancela las búsquedas pendientes."""
        tasks = [task for task in (self._patient_task, self._availability_task)
                 if task is not None and not task.done()]
        for task in tasks:
            task.cancel()
        self._patient_task = None
        self._availability_task = None
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

def create_booking_flow(client: Optional[WebhookClient] = None, **kwargs: Any) -> BookingFlowController:
    """Crea un controlador con el cliente y la política configurados en el entorno."""
    kwargs.setdefault("policy", FormPolicy.from_name(FORM_POLICY))
    return BookingFlowController(client or WebhookClient.from_settings(), **kwargs)
