"""
Servicio para administrar las sesiones de reserva.
Cada sesión equivale a un formulario abierto y vive solo en memoria.
"""
import logging
import time
import uuid
from typing import Callable, Dict, List, Optional, Tuple

from turnero.application.services.tools.booking_flow import BookingFlowController, create_booking_flow
from turnero.infrastructure.config.config.settings import SESSION_TTL, MAX_SESSIONS

logger = logging.getLogger(__name__)

class BookingSessionService:
    """Clase para gestionar las sesiones de reserva abiertas."""

    def __init__(
        self,
        controller_factory: Callable[[], BookingFlowController] = create_booking_flow,
        ttl: float = SESSION_TTL,
        max_sessions: int = MAX_SESSIONS,
        clock: Callable[[], float] = time.monotonic
    ):
        self._controller_factory = controller_factory
        self._ttl = ttl
        self._max_sessions = max_sessions
        self._clock = clock
        self._sessions: Dict[str, BookingFlowController] = {}
        self._last_used: Dict[str, float] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    async def create_session(self) -> Tuple[str, BookingFlowController]:
        """
        Abre una sesión nueva con el formulario vacío.

        Returns:
            Tupla con (id_de_sesión, controlador)
        """
        await self._prune()
        session_id = uuid.uuid4().hex
        self._sessions[session_id] = self._controller_factory()
        self._last_used[session_id] = self._clock()
        logger.info(f"Sesión de reserva creada: {session_id}")
        return session_id, self._sessions[session_id]

    def get_session(self, session_id: str) -> Optional[BookingFlowController]:
        """Obtiene el controlador de una sesión o None si no existe o expiró."""
        controller = self._sessions.get(session_id)
        if controller is None:
            return None
        if self._is_expired(session_id):
            return None
        self._last_used[session_id] = self._clock()
        return controller

    async def close_session(self, session_id: str) -> bool:
        """Cierra una sesión cancelando sus búsquedas pendientes."""
        controller = self._sessions.pop(session_id, None)
        self._last_used.pop(session_id, None)
        if controller is None:
            return False
        await controller.aclose()
        logger.info(f"Sesión de reserva cerrada: {session_id}")
        return True

    async def close_all(self) -> None:
        for session_id in list(self._sessions):
            await self.close_session(session_id)

    def _is_expired(self, session_id: str) -> bool:
        return self._clock() - self._last_used[session_id] > self._ttl

    async def _prune(self) -> None:
        # Limpiar sesiones vencidas
        expired: List[str] = [session_id for session_id in self._sessions if self._is_expired(session_id)]
        for session_id in expired:
            await self.close_session(session_id)

        # Si se alcanza el máximo, se descartan las menos usadas
        while self._sessions and len(self._sessions) >= self._max_sessions:
            oldest = min(self._last_used, key=self._last_used.get)
            logger.warning(f"Máximo de sesiones alcanzado, se descarta {oldest}")
            await self.close_session(oldest)

# Instancia global del servicio
session_service = BookingSessionService()
