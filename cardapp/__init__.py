# cardapp/__init__.py
"""
Backend de las tarjetas de perfil de Twitter/X.

En Windows forzamos el Proactor event loop: con el Selector por defecto,
uvicorn --reload (proceso hijo) y asyncpg/aiosqlite a veces revientan con
"Fatal write error on socket transport".
Al ponerlo aquí se aplica a todo `import cardapp...` (uvicorn, alembic, tests).
"""

import sys
import asyncio

if sys.platform.startswith("win"):
    asyncio.set_event_loop_policy(asyncio.WindowsProactorEventLoopPolicy())
