"""
Configuración centralizada del proyecto.
Este módulo gestiona todas las variables de configuración y entorno.
"""
import os
from dotenv import load_dotenv
from typing import Dict, Any, Optional
from enum import Enum, auto

# Carga explícita del archivo .env
load_dotenv(verbose=True)

# Enumeración de zonas horarias soportadas
class TimeZones(Enum):
    """Enumeración de zonas horarias soportadas"""
    ARGENTINA = auto()

# Mapa de zonas horarias
TIMEZONE_MAP = {
    TimeZones.ARGENTINA: "America/Argentina/Buenos_Aires",
}

# El consultorio trabaja en hora de Buenos Aires
DEFAULT_TIMEZONE = TimeZones.ARGENTINA

# Días de atención (0=Lunes ... 6=Domingo): Lunes a Jueves
WORK_DAYS = (0, 1, 2, 3)

# Cantidad de días hacia adelante ofrecidos para reservar
BOOKING_WINDOW_DAYS = 14

def _get_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return float(value)

# Configuración de los webhooks de n8n
N8N_BASE_URL = os.getenv("N8N_BASE_URL", "https://n8n-automation.chilldigital.tech/webhook").rstrip("/")
CHECK_PATIENT_URL = os.getenv("CHECK_PATIENT_URL", f"{N8N_BASE_URL}/check-patient")
GET_AVAILABILITY_URL = os.getenv("GET_AVAILABILITY_URL", f"{N8N_BASE_URL}/get-availability")
CREATE_APPOINTMENT_URL = os.getenv("CREATE_APPOINTMENT_URL", f"{N8N_BASE_URL}/create-appointment")
API_KEY: Optional[str] = os.getenv("API_KEY") or None

# Tiempos máximos (segundos)
LOOKUP_TIMEOUT = _get_float("LOOKUP_TIMEOUT", 10.0)
SUBMIT_TIMEOUT = _get_float("SUBMIT_TIMEOUT", 15.0)
PATIENT_LOOKUP_DEBOUNCE = _get_float("PATIENT_LOOKUP_DEBOUNCE", 0.4)

# Política del formulario: "default" o "strict"
FORM_POLICY = os.getenv("FORM_POLICY", "default").lower()

# Sesiones de reserva en memoria
SESSION_TTL = _get_float("SESSION_TTL", 3600.0)
MAX_SESSIONS = int(os.getenv("MAX_SESSIONS", "1000"))

# Configuración del servidor
WEBHOOK_PORT = int(os.getenv("WEBHOOK_PORT", "8000"))
WEBHOOK_HOST = os.getenv("WEBHOOK_HOST", "0.0.0.0")
ALLOWED_ORIGINS = [origin.strip() for origin in os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",") if origin.strip()]

# Función para obtener la configuración como diccionario
def get_settings() -> Dict[str, Any]:
    """Retorna la configuración actual como un diccionario."""
    return {
        "webhooks": {
            "check_patient": CHECK_PATIENT_URL,
            "get_availability": GET_AVAILABILITY_URL,
            "create_appointment": CREATE_APPOINTMENT_URL,
            "api_key": API_KEY,
        },
        "timeouts": {
            "lookup": LOOKUP_TIMEOUT,
            "submit": SUBMIT_TIMEOUT,
            "debounce": PATIENT_LOOKUP_DEBOUNCE,
        },
        "form": {
            "policy": FORM_POLICY,
            "work_days": WORK_DAYS,
            "window_days": BOOKING_WINDOW_DAYS,
        },
        "sessions": {
            "ttl": SESSION_TTL,
            "max": MAX_SESSIONS,
        },
        "server": {
            "port": WEBHOOK_PORT,
            "host": WEBHOOK_HOST,
            "allowed_origins": ALLOWED_ORIGINS,
        },
        "timezone": {
            "default": TIMEZONE_MAP[DEFAULT_TIMEZONE],
        }
    }
