"""
ASGI entrypoint: expose `app` pour les process managers / déploiements
(ex: `uvicorn cakeshop.asgi:app`). Toute la configuration est dans cakeshop.app.
"""

from cakeshop.app import app

if __name__ == "__main__":
    import os
    import uvicorn
    uvicorn.run(
        "cakeshop.asgi:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=True,
    )
