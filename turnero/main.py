"""
Punto de entrada principal de la aplicación.
Configura y ejecuta el servidor web con FastAPI.
"""
import os
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from turnero.domain.entities.models import ErrorResult
from turnero.infrastructure.config.config.settings import ALLOWED_ORIGINS
from turnero.presentation.booking.routes import router as booking_router
from turnero.services.session_service import session_service

# Configuración de logging con nivel configurable
log_level = os.getenv("LOG_LEVEL", "INFO")
numeric_level = getattr(logging, log_level.upper(), logging.INFO)
logging.basicConfig(
    level=numeric_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler()]
)

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Cancelar las búsquedas pendientes de los formularios abiertos
    await session_service.close_all()

# Crear la aplicación FastAPI
app = FastAPI(
    title="Turnero del consultorio",
    description="Formulario de reserva de turnos sobre los webhooks de automatización",
    version="1.0.0",
    root_path=os.getenv("ROOT_PATH", ""),
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "turnos", "description": "Formulario de reserva de turnos"},
        {"name": "health", "description": "Verificaciones de estado del sistema"}
    ]
)

# Configurar CORS con orígenes específicos desde variables de entorno
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE"],
    allow_headers=["*"],
)

# Registrar los routers
app.include_router(booking_router)

# Manejador global de excepciones
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Manejador global de excepciones."""
    logger.error(f"Error no manejado: {str(exc)}")
    content: ErrorResult = {"error": "Error interno del servidor", "details": str(exc)}
    return JSONResponse(status_code=500, content=content)

@app.get("/", tags=["health"])
async def root():
    """Endpoint principal para verificar que el servidor está funcionando."""
    return {
        "message": "Turnero del consultorio",
        "docs": "/docs",
        "status": "online"
    }
