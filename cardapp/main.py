# cardapp/main.py
import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from cardapp.core.config import settings
from cardapp.db.init_db import init_models

# routers
from cardapp.registry.router import router as users_router
from cardapp.profiles.router import router as profiles_router
from cardapp.db.router import router as db_router

log = logging.getLogger("uvicorn")

app = FastAPI(title="Twitter Card API")

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allow_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def utf8_json(request: Request, call_next):
    response = await call_next(request)
    # las bios traen coreano/emojis: JSON siempre con charset explícito
    ct = response.headers.get("content-type", "")
    if ct.startswith("application/json") and "charset=" not in ct:
        response.headers["content-type"] = "application/json; charset=utf-8"
    return response


@app.on_event("startup")
async def on_startup():
    log.info("🚀 Iniciando servicio…")
    try:
        await init_models()
    except Exception as e:
        # sin DB igual levantamos: /api/db/init/ permite reintentar
        log.error(f"❌ DB init falló: {e!r}")
    log.info("✅ Startup listo.")


@app.get("/api/health/")
async def health():
    # incluye texto no-ASCII para testear transporte UTF-8
    return {"ok": True, "service": "cards", "msg": "healthy ✨ 카드"}


# routers
app.include_router(users_router)     # /api/users/...
app.include_router(profiles_router)  # /api/profiles/..., /api/oauth-status/
app.include_router(db_router)        # /api/db/...
