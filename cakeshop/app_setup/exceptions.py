"""
Gestionnaires d’exceptions utilisés par la factory.
- ShopError (erreurs métier): JSON {"detail": ...} avec le status_code de l'exception.
- HTTPException: 401/403 redirigés vers /auth pour les navigateurs (hors /api/*), JSON sinon.
"""
import logging
import urllib.parse
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.status import HTTP_303_SEE_OTHER
from cakeshop.errors import ShopError

logger = logging.getLogger(__name__)


def _wants_html(request: Request) -> bool:
    accept = (request.headers.get("accept") or "").lower()
    return "text/html" in accept and not request.url.path.startswith("/api/")


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ShopError)
    async def shop_error_handler(request: Request, exc: ShopError):
        if exc.status_code >= 500:
            logger.error("shop.error %s %s status=%s context=%s", request.method, request.url.path, exc.status_code, exc.context)
        else:
            logger.info("shop.error %s %s status=%s detail=%s", request.method, request.url.path, exc.status_code, exc.detail)
        content = {"detail": exc.detail}
        if exc.context:
            content["context"] = {k: (v if isinstance(v, (int, str)) else str(v)) for k, v in exc.context.items()}
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(HTTPException)
    async def html_redirect_on_auth_errors(request: Request, exc: HTTPException):
        if exc.status_code in (401, 403) and _wants_html(request):
            detail = str(getattr(exc, "detail", "")) or (
                "Veuillez vous connecter" if exc.status_code == 401 else "Accès interdit"
            )
            msg = urllib.parse.quote_plus(detail)
            return RedirectResponse(url=f"/auth?error={msg}", status_code=HTTP_303_SEE_OTHER)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=getattr(exc, "headers", None))
