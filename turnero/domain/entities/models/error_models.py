"""
Modelos específicos relacionados con errores.
Define las estructuras de datos y excepciones utilizadas para representar errores en la aplicación.
"""
from typing import Any, Optional, TypedDict

class ErrorResult(TypedDict):
    """Modelo para representar un resultado de error"""
    error: str
    details: Optional[str]

class WebhookError(Exception):
    """Error base de las llamadas a los webhooks."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url

class WebhookTimeoutError(WebhookError):
    """La llamada superó el tiempo máximo permitido."""

class WebhookConnectionError(WebhookError):
    """No se pudo conectar con el webhook."""

class WebhookStatusError(WebhookError):
    """El webhook respondió con un código HTTP de error."""

    def __init__(self, status: int, body: Any = None, url: Optional[str] = None):
        super().__init__(f"El webhook respondió {status}", url=url)
        self.status = status
        self.body = body

    @property
    def message(self) -> Optional[str]:
        """Mensaje de error informado por el webhook, si lo hay."""
        if isinstance(self.body, dict):
            message = self.body.get("message")
            if isinstance(message, str) and message.strip():
                return message
        return None

class WebhookResponseError(WebhookError):
    """La respuesta del webhook no tiene el formato esperado."""
