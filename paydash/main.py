"""FastAPI entry point for the payment dashboard."""
from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from urllib.parse import quote

from fastapi import FastAPI, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles

from paydash import __version__
from paydash.config import configure_logging
from paydash.database import init_db
from paydash.routers import auth, client, dashboard, payments

STATIC_PATH = Path(__file__).parent / "static"


@asynccontextmanager
async def lifespan(_: FastAPI):
    configure_logging()
    init_db()
    yield


app = FastAPI(title="Payment Dashboard", version=__version__, lifespan=lifespan)

app.include_router(auth.router)
app.include_router(dashboard.router)
app.include_router(client.router)
app.include_router(payments.router)

app.mount("/static", StaticFiles(directory=str(STATIC_PATH)), name="static")


@app.get("/")
def root() -> RedirectResponse:
    return RedirectResponse(url="/dashboard")


@app.get("/health")
def health() -> Response:
    """Simple health endpoint for load balancers and platform checks."""
    return Response(content='{"status":"ok"}', media_type="application/json")


@app.exception_handler(HTTPException)
async def http_exception_redirect_login(request: Request, exc: HTTPException):
    """Redirect 401 HTML page requests to /login; preserve JSON for API calls.

    - Anything other than 401 keeps the normal JSON body.
    - API paths always get JSON.
    - A 401 for a client that accepts text/html is redirected with 303 and a
      ``next`` parameter pointing back at the requested page.
    """
    if exc.status_code != status.HTTP_401_UNAUTHORIZED or request.url.path.startswith("/api/"):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers)

    accept = request.headers.get("accept", "")
    wants_html = "text/html" in accept or "*/*" in accept  # browsers often send */*
    if wants_html:
        target = request.url.path
        if request.url.query:
            target = f"{target}?{request.url.query}"
        return RedirectResponse(url=f"/login?next={quote(target, safe='')}", status_code=status.HTTP_303_SEE_OTHER)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})
