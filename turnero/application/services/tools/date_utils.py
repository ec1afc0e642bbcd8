"""
Utilidades para el manejo de fechas y zonas horarias.
Este módulo contiene funciones para generar las fechas ofrecidas, combinar fecha y hora
en la zona del consultorio, y dar formato legible en español.
"""
import pytz
from datetime import date, datetime, time, timedelta
from dateutil.rrule import rrule, DAILY
from typing import Iterable, Iterator, List, Optional

from turnero.domain.entities.models import AvailableDate
from turnero.infrastructure.config.config.settings import (
    TimeZones, TIMEZONE_MAP, DEFAULT_TIMEZONE, WORK_DAYS, BOOKING_WINDOW_DAYS
)

DAY_NAMES = ["lunes", "martes", "miércoles", "jueves", "viernes", "sábado", "domingo"]
MONTH_NAMES = ["", "enero", "febrero", "marzo", "abril", "mayo", "junio",
               "julio", "agosto", "septiembre", "octubre", "noviembre", "diciembre"]

def get_timezone_instance(tz: TimeZones = DEFAULT_TIMEZONE) -> pytz.BaseTzInfo:
    """
    Obtiene la instancia de zona horaria basada en la enumeración.

    Args:
        tz: La zona horaria a utilizar (de la enumeración TimeZones)

    Returns:
        Instancia de pytz.timezone para la zona horaria solicitada
    """
    return pytz.timezone(TIMEZONE_MAP[tz])

def get_timezone_name(tz: TimeZones = DEFAULT_TIMEZONE) -> str:
    return TIMEZONE_MAP[tz]

def format_date_human_readable(date_obj: date, include_year: bool = False) -> str:
    """
    Formatea una fecha como la muestra el formulario (es-AR), p. ej. "lunes, 06 de enero".

    Args:
        date_obj: Fecha a formatear
        include_year: Si se debe incluir el año en el formato

    Returns:
        Cadena formateada con la fecha en español
    """
    label = f"{DAY_NAMES[date_obj.weekday()]}, {date_obj.day:02d} de {MONTH_NAMES[date_obj.month]}"
    if include_year:
        return f"{label} de {date_obj.year}"
    return label

def parse_iso_date(value: str) -> date:
    """Convierte una fecha YYYY-MM-DD en date. Lanza ValueError si el formato es inválido."""
    return datetime.strptime(value, "%Y-%m-%d").date()

def today_in_timezone(now: Optional[datetime] = None, tz: Optional[pytz.BaseTzInfo] = None) -> date:
    """
    Devuelve la fecha de hoy en la zona del consultorio.

    Un `now` sin zona horaria se interpreta como hora local del consultorio.
    """
    tz = tz or get_timezone_instance()
    if now is None:
        return datetime.now(tz).date()
    if now.tzinfo is None:
        return now.date()
    return now.astimezone(tz).date()

def iter_available_dates(
    today: date,
    days: int = BOOKING_WINDOW_DAYS,
    work_days: Iterable[int] = WORK_DAYS
) -> Iterator[date]:
    """
    Recorre de forma perezosa los días de atención dentro de la ventana de reserva.

    La ventana empieza mañana (hoy queda excluido) y abarca `days` días corridos.
    """
    if days < 1:
        return iter(())
    start = datetime.combine(today + timedelta(days=1), time())
    until = datetime.combine(today + timedelta(days=days), time())
    return (dt.date() for dt in rrule(DAILY, dtstart=start, until=until, byweekday=tuple(work_days)))

def compute_available_dates(
    now: Optional[datetime] = None,
    tz: Optional[pytz.BaseTzInfo] = None
) -> List[AvailableDate]:
    """
    Genera las fechas que se ofrecen en el formulario.

    Args:
        now: Momento de referencia (por defecto, ahora en la zona del consultorio)
        tz: Zona horaria del consultorio

    Returns:
        Lista de {"value": "YYYY-MM-DD", "label": "lunes, 06 de enero"}
    """
    today = today_in_timezone(now, tz)
    return [
        {"value": day.isoformat(), "label": format_date_human_readable(day)}
        for day in iter_available_dates(today)
    ]

def combine_date_time(fecha: str, hora: str, tz: Optional[pytz.BaseTzInfo] = None) -> str:
    """
    Combina fecha y hora en un timestamp ISO 8601 con el offset de la zona del consultorio.

    La hora se interpreta siempre como hora de pared del consultorio, sin importar
    la zona horaria de quien reserva.

    Args:
        fecha: Fecha en formato YYYY-MM-DD
        hora: Hora en formato HH:MM
        tz: Zona horaria del consultorio

    Returns:
        Timestamp como "2025-03-04T15:30:00-03:00"

    Raises:
        ValueError: Si la fecha o la hora tienen un formato inválido
    """
    tz = tz or get_timezone_instance()
    naive_dt = datetime.strptime(f"{fecha.strip()}T{hora.strip()}", "%Y-%m-%dT%H:%M")
    return tz.localize(naive_dt).isoformat()
