"""
Modelos específicos relacionados con pacientes.
Define la respuesta del webhook de búsqueda y el mapeo de sus campos al formulario.
"""
from typing import Any, Dict, Optional, Tuple, TypedDict

class PatientLookupResult(TypedDict):
    """Modelo para representar la respuesta de la búsqueda de paciente"""
    found: bool
    patient: Optional[Dict[str, Any]]

# Claves candidatas por campo del formulario (español primero, luego inglés).
# Gana el primer valor no vacío.
PATIENT_FIELD_CANDIDATES: Dict[str, Tuple[str, ...]] = {
    "nombre": ("nombre", "name"),
    "telefono": ("telefono", "phone"),
    "email": ("email",),
    "obra_social": ("obraSocial", "insurance"),
    "numero_afiliado": ("numeroAfiliado", "affiliateNumber"),
    "alergias": ("alergias", "allergies"),
    "antecedentes": ("antecedentes", "background"),
}

# Campos que solo se sobrescriben si el registro trae un valor
OPTIONAL_PATIENT_FIELDS = frozenset({"email"})
