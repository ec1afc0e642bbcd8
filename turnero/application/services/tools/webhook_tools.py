"""
Herramientas para interactuar con los webhooks de la plataforma de automatización.
Este módulo contiene el cliente para buscar pacientes, consultar horarios disponibles
y crear turnos.
"""
import asyncio
import json
import logging
import aiohttp
from functools import wraps
from typing import Any, Dict, List, Optional, Tuple

from turnero.domain.entities.models import (
    AppointmentPayload, PatientLookupResult,
    WebhookError, WebhookTimeoutError, WebhookConnectionError,
    WebhookStatusError, WebhookResponseError
)
from turnero.infrastructure.config.config.settings import get_settings

logger = logging.getLogger(__name__)

# Decorador para traducir errores de red a la jerarquía de WebhookError
def handle_webhook_errors(func):
    @wraps(func)
    async def wrapper(*args, **kwargs):
        url = kwargs.get("url", args[1] if len(args) > 1 else None)
        try:
            return await func(*args, **kwargs)
        except WebhookError:
            raise
        except asyncio.TimeoutError as e:
            raise WebhookTimeoutError("Tiempo de espera agotado", url=url) from e
        except aiohttp.ClientError as e:
            raise WebhookConnectionError(f"Error de conexión: {str(e)}", url=url) from e
    return wrapper

@handle_webhook_errors
async def api_request(
    method: str,
    url: str,
    params: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
    data: Optional[Dict[str, Any]] = None,
    timeout: Optional[float] = None
) -> Tuple[int, Any]:
    """
    Función genérica para realizar solicitudes a los webhooks.

    Args:
        method: Método HTTP (get, post, etc.)
        url: URL de la solicitud
        params: Parámetros de la solicitud
        headers: Cabeceras de la solicitud
        data: Cuerpo JSON para métodos POST/PUT/PATCH
        timeout: Tiempo máximo total en segundos

    Returns:
        Tupla con (código_respuesta, datos_json)

    Raises:
        WebhookTimeoutError: Si se supera el tiempo máximo
        WebhookConnectionError: Si falla la conexión
        WebhookResponseError: Si el cuerpo no se puede decodificar
    """
    client_timeout = aiohttp.ClientTimeout(total=timeout)
    async with aiohttp.ClientSession(timeout=client_timeout) as session:
        kwargs = {}
        if params:
            kwargs['params'] = params
        if headers:
            kwargs['headers'] = headers
        if data is not None:
            kwargs['json'] = data

        async with session.request(method.upper(), url, **kwargs) as response:
            try:
                response_text = await response.text()
            except UnicodeDecodeError as e:
                raise WebhookResponseError(f"Respuesta con codificación inválida ({response.status})", url=url) from e
            try:
                response_data = json.loads(response_text) if response_text else {}
            except ValueError:
                response_data = {"text": response_text}

            return response.status, response_data

def _is_success(status: int) -> bool:
    return 200 <= status < 300

class WebhookClient:
    """Cliente de los tres webhooks que usa el formulario de turnos."""

    def __init__(
        self,
        check_patient_url: str,
        availability_url: str,
        create_appointment_url: str,
        api_key: Optional[str] = None,
        lookup_timeout: float = 10.0,
        submit_timeout: float = 15.0
    ):
        self.check_patient_url = check_patient_url
        self.availability_url = availability_url
        self.create_appointment_url = create_appointment_url
        self.api_key = api_key
        self.lookup_timeout = lookup_timeout
        self.submit_timeout = submit_timeout

    @classmethod
    def from_settings(cls, settings: Optional[Dict[str, Any]] = None) -> "WebhookClient":
        """Crea el cliente a partir de la configuración del entorno."""
        settings = settings or get_settings()
        webhooks = settings["webhooks"]
        return cls(
            check_patient_url=webhooks["check_patient"],
            availability_url=webhooks["get_availability"],
            create_appointment_url=webhooks["create_appointment"],
            api_key=webhooks["api_key"],
            lookup_timeout=settings["timeouts"]["lookup"],
            submit_timeout=settings["timeouts"]["submit"],
        )

    def _headers(self) -> Dict[str, str]:
        if self.api_key:
            return {"X-API-KEY": self.api_key}
        return {}

    async def check_patient(self, dni: str) -> PatientLookupResult:
        """
        Busca un paciente por DNI.

        Returns:
            {"found": bool, "patient": dict | None}

        Raises:
            WebhookError: Si la llamada falla o la respuesta no es válida
        """
        url = self.check_patient_url
        logger.debug(f"Consultando paciente con DNI {dni}")
        status, data = await api_request("get", url, params={"dni": dni},
                                         headers=self._headers(), timeout=self.lookup_timeout)
        if not _is_success(status):
            raise WebhookStatusError(status, data, url=url)
        if not isinstance(data, dict):
            raise WebhookResponseError("Respuesta de paciente inválida", url=url)

        patient = data.get("patient")
        found = bool(data.get("found")) and isinstance(patient, dict)
        return {"found": found, "patient": patient if found else None}

    async def get_availability(self, fecha: str, duration: int) -> List[str]:
        """
        Obtiene los horarios disponibles para una fecha y duración.

        Returns:
            Lista ordenada de horarios "HH:MM" (vacía si el webhook no informa ninguno)

        Raises:
            WebhookError: Si la llamada falla o la respuesta no es válida
        """
        url = self.availability_url
        logger.debug(f"Consultando disponibilidad para {fecha} ({duration} min)")
        status, data = await api_request("get", url, params={"fecha": fecha, "duration": str(duration)},
                                         headers=self._headers(), timeout=self.lookup_timeout)
        if not _is_success(status):
            raise WebhookStatusError(status, data, url=url)
        if not isinstance(data, dict):
            raise WebhookResponseError("Respuesta de disponibilidad inválida", url=url)

        slots = data.get("availableSlots") or []
        if not isinstance(slots, list):
            raise WebhookResponseError("availableSlots no es una lista", url=url)
        return [str(slot) for slot in slots]

    async def create_appointment(self, payload: AppointmentPayload) -> Any:
        """
        Crea el turno en la plataforma de automatización.

        Returns:
            Cuerpo de la respuesta (no se utiliza)

        Raises:
            WebhookStatusError: Si el webhook responde con error; el mensaje del cuerpo queda en `message`
            WebhookError: Si la llamada falla
        """
        url = self.create_appointment_url
        logger.debug(f"Creando turno {payload.tipo_turno} para {payload.fecha_hora}")
        status, data = await api_request("post", url, headers=self._headers(),
                                         data=payload.to_json_dict(), timeout=self.submit_timeout)
        if not _is_success(status):
            raise WebhookStatusError(status, data, url=url)
        return data
