# run_dev.py
import os
import sys
import socket

import uvicorn
from dotenv import load_dotenv

# importar cardapp aplica la policy de event loop en Windows
import cardapp  # noqa: F401

APP_MODULE = os.getenv("APP_MODULE", "cardapp.main:app")


def _lan_ip() -> str:
    """Obtiene IP LAN real sin depender de hostname/DNS."""
    try:
        s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        s.connect(("8.8.8.8", 80))
        ip = s.getsockname()[0]
        s.close()
        return ip
    except OSError:
        return "127.0.0.1"


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip() in ("1", "true", "True", "yes", "on")


def main():
    # .env para DATABASE_URL, TWITTER_BEARER_TOKEN, etc.
    if os.path.exists(".env"):
        load_dotenv(".env")

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    # en Windows el reload (proceso hijo) da guerra: apagado por defecto
    reload_flag = _env_flag("RELOAD", not sys.platform.startswith("win"))

    print(f"🔗 API local: http://127.0.0.1:{port}")
    print(f"📱 API LAN:   http://{_lan_ip()}:{port}")
    print(f"🌀 reload={'ON' if reload_flag else 'OFF'}")

    uvicorn.run(
        APP_MODULE,
        host=host,
        port=port,
        loop="asyncio",
        reload=reload_flag,
        reload_dirs=["cardapp"],
        reload_excludes=[".venv", ".git", "__pycache__", "tests"],
        timeout_keep_alive=30,
        timeout_graceful_shutdown=15,
        log_level=os.getenv("LOG_LEVEL", "info"),
        lifespan="on",
    )


if __name__ == "__main__":
    main()
