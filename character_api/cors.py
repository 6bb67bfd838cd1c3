"""Uniform CORS headers for every route.

Every response gets the same allow-origin/methods/headers triple, and any
OPTIONS request is answered with an empty 200 before routing, whatever the
path. Starlette's CORSMiddleware only reacts to requests carrying an Origin
header, which is why this is a plain HTTP middleware instead.
"""

from fastapi import FastAPI, Request, Response

from .settings import settings


def cors_headers() -> dict:
    return {
        "Access-Control-Allow-Origin": settings.CORS_ALLOW_ORIGIN,
        "Access-Control-Allow-Methods": settings.CORS_ALLOW_METHODS,
        "Access-Control-Allow-Headers": settings.CORS_ALLOW_HEADERS,
    }


def install(app: FastAPI) -> None:
    @app.middleware("http")
    async def _cors_mw(request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=cors_headers())
        response = await call_next(request)
        response.headers.update(cors_headers())
        return response
