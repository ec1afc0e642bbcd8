"""
Configuración de Gunicorn para el turnero.
Este archivo define los parámetros para ejecutar la aplicación en producción.
"""
import os

# Un solo worker: las sesiones de reserva viven en la memoria del proceso
workers = int(os.getenv("GUNICORN_WORKERS", "1"))

# Timeout en segundos
# Debe superar el tiempo máximo de los webhooks (15 s para crear el turno)
timeout = int(os.getenv("GUNICORN_TIMEOUT", "60"))

# Dirección y puerto en que Gunicorn escuchará
bind = os.getenv("GUNICORN_BIND", f"{os.getenv('WEBHOOK_HOST', '0.0.0.0')}:{os.getenv('WEBHOOK_PORT', '8000')}")

# UvicornWorker es específico para FastAPI/ASGI
worker_class = "uvicorn.workers.UvicornWorker"

# Configuración de logging
loglevel = os.getenv("GUNICORN_LOG_LEVEL", "info")
accesslog = os.getenv("GUNICORN_ACCESS_LOG", "-")  # "-" significa stdout
errorlog = os.getenv("GUNICORN_ERROR_LOG", "-")    # "-" significa stderr

# Configuración de recarga automática (solo para desarrollo)
reload = os.getenv("ENVIRONMENT", "production").lower() == "development"

keepalive = 65
graceful_timeout = 30
limit_request_line = 4094
limit_request_fields = 100
limit_request_field_size = 8190

# Configuración para FastAPI con prefijo
if os.getenv("ROOT_PATH"):
    raw_env = [f"ROOT_PATH={os.getenv('ROOT_PATH')}"]
