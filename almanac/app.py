import logging
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from .routers import celestial as celestial_router
from .routers import harmonic as harmonic_router
from .routers import intervention as intervention_router
from .routers import chords as chords_router
from .middleware.logging import LoggingMiddleware
from .services import config
from .services.errors import InvalidInputError
from .services.events import CHANNEL
from .services.harmonic import RESOLVER

logging.basicConfig(level=config.log_level(), format="%(asctime)s %(levelname)s %(name)s %(message)s")

app = FastAPI(title="almanac-engine (dev)", version="0.1.0")

app.add_middleware(LoggingMiddleware)

app.include_router(celestial_router.router)
app.include_router(harmonic_router.router)
app.include_router(intervention_router.router)
app.include_router(chords_router.router)

# Event-triggered harmonic rules listen on the shared channel.
RESOLVER.attach(CHANNEL)


@app.exception_handler(InvalidInputError)
async def invalid_input(request: Request, exc: InvalidInputError):
    return JSONResponse({"detail": {"field": exc.field, "message": exc.message}}, status_code=422)


@app.get("/__health")
def health():
    return {"ok": True}


@app.get("/")
def root():
    return {"message": "almanac-engine dev API is running. See /__health and /docs."}
