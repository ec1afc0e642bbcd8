"""
Catálogos estáticos del formulario: tipos de turno y obras sociales.
"""
import json
import os
import unicodedata
from functools import lru_cache
from typing import List

from turnero.domain.entities.models import APPOINTMENT_TYPES, AppointmentType

OBRAS_SOCIALES_FILE = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(
    os.path.dirname(os.path.abspath(__file__))))), "data", "obras_sociales.json")

# La ñ es una letra propia: va después de cualquier "n" seguida de otra letra y antes de la "o"
_ENIE_KEY = "n\uffff"

def spanish_sort_key(value: str) -> str:
    """
    Clave de orden que ignora mayúsculas y acentos ("Óptica" queda junto a "Optica").

    La ñ no se trata como acento: "Ñandú" queda entre las palabras con "N" y las con "O".
    """
    text = unicodedata.normalize("NFC", value).casefold().replace("ñ", _ENIE_KEY)
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(char for char in decomposed if not unicodedata.combining(char))

@lru_cache(maxsize=1)
def _load_obras_sociales(path: str) -> tuple:
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    names = {str(name).strip() for name in data if str(name).strip()}
    return tuple(sorted(names, key=lambda name: (spanish_sort_key(name), name)))

def get_obras_sociales(path: str = OBRAS_SOCIALES_FILE) -> List[str]:
    """Lista de obras sociales ordenada alfabéticamente."""
    return list(_load_obras_sociales(path))

def get_appointment_types() -> List[AppointmentType]:
    return list(APPOINTMENT_TYPES)
