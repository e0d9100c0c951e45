import asyncio
import sys
import os

# Aggiungi backend/ alla PYTHONPATH per importare app.*
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "backend"))

from app.core.config import settings
from app.core.database import close_db, create_all


async def reset():
    print(f"Connessione a {settings.database_url.split('@')[-1]}, eliminazione tabelle...")
    await create_all(drop_first=True)
    await close_db()
    print("Tabelle clienti, fatture, righe e pagamenti ricreate. Database resettato con successo!")


if __name__ == "__main__":
    asyncio.run(reset())
