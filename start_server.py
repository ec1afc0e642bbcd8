#!/usr/bin/env python
"""
Script para iniciar el servidor Gunicorn con la configuración adecuada.
Facilita el arranque del turnero en diferentes entornos.
"""
import os
import sys
import subprocess
import logging
from dotenv import load_dotenv

# Configurar logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("start_server")

CONFIG_FILE = os.path.join(os.path.dirname(os.path.abspath(__file__)), "gunicorn_config.py")

def build_command(config_file: str = CONFIG_FILE) -> list:
    """Comando para iniciar Gunicorn con la aplicación del turnero."""
    return [
        "gunicorn",
        "--config", config_file,
        "turnero.main:app"
    ]

def main():
    """Función principal para iniciar el servidor Gunicorn."""
    # Cargar variables de entorno
    load_dotenv()

    # Verificar que el archivo de configuración existe
    if not os.path.exists(CONFIG_FILE):
        logger.error("El archivo de configuración de Gunicorn no existe. Asegúrate de que estás en el directorio correcto.")
        sys.exit(1)

    # Verificar que la aplicación existe
    try:
        from turnero.main import app  # noqa: F401
        logger.info("Aplicación cargada correctamente")
    except ImportError as e:
        logger.error(f"No se pudo cargar la aplicación: {str(e)}")
        sys.exit(1)

    port = os.getenv("WEBHOOK_PORT", "8000")
    host = os.getenv("WEBHOOK_HOST", "0.0.0.0")
    environment = os.getenv("ENVIRONMENT", "development")
    root_path = os.getenv("ROOT_PATH", "")

    # Mostrar configuración
    logger.info(f"Iniciando servidor en {host}:{port}")
    logger.info(f"Entorno: {environment}")
    logger.info(f"La API estará disponible en: http://{host}:{port}{root_path}/docs")

    try:
        logger.info("Iniciando Gunicorn...")
        subprocess.run(build_command())
    except KeyboardInterrupt:
        logger.info("Servidor detenido manualmente")
    except Exception as e:
        logger.error(f"Error al iniciar el servidor: {str(e)}")
        sys.exit(1)

if __name__ == "__main__":
    main()
