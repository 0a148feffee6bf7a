"""
Endpoint de liveness del servicio
"""
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse
from .config import Config


def create_app() -> FastAPI:
    """Crea la aplicación HTTP con la única ruta de liveness"""
    app = FastAPI(title="MongoDB Backup", docs_url=None, redoc_url=None, openapi_url=None)

    @app.get("/", response_class=PlainTextResponse)
    def liveness() -> str:
        return Config.LIVENESS_MESSAGE

    return app
