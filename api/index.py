# api/index.py
# Serverless entry: the platform forwards /api/* here, the app has no /api prefix.
from fastapi import FastAPI

from main import app as core_app

app = FastAPI(openapi_url=None, docs_url=None, redoc_url=None, lifespan=core_app.router.lifespan_context)
app.mount("/api", core_app)
