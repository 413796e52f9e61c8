from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src.adapters.api.controllers.facilities import router as facilities_router
from src.adapters.api.controllers.roads import router as roads_router
from src.adapters.api.controllers.routes import router as routes_router
from src.adapters.aws import env_bool

app = FastAPI(title="GSHealth")
app.include_router(routes_router)
app.include_router(facilities_router)
app.include_router(roads_router)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Ensure API errors are JSON so the map front-end can display them."""

    logging.getLogger("uvicorn.error").exception(
        "Unhandled exception", extra={"path": str(request.url.path)}
    )

    reveal = env_bool("GSHEALTH_REVEAL_ERRORS", False)
    if reveal or isinstance(exc, (FileNotFoundError, RuntimeError, ValueError)):
        detail = str(exc) or exc.__class__.__name__
    else:
        detail = "Internal Server Error"

    return JSONResponse(status_code=500, content={"detail": detail})


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
