"""
Configurazione Database - SQLAlchemy 2.0 Async
Progetto: Invoice Manager (Gestionale Fatture)

Definisce engine, session factory, dependency injection per FastAPI
e la primitiva di scrittura atomica usata dai service.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.core.config import settings

# Logger per questo modulo
logger = logging.getLogger(__name__)


def build_engine(database_url: str, **kwargs) -> AsyncEngine:
    """
    Crea un engine async.

    Per SQLite non si passano i parametri del pool (usa pool propri).
    """
    options = {"echo": settings.debug, "pool_pre_ping": True}
    if not database_url.startswith("sqlite"):
        options["pool_size"] = settings.db_pool_size
        options["max_overflow"] = settings.db_max_overflow
    options.update(kwargs)
    return create_async_engine(database_url, **options)


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory con le opzioni usate da tutta l'applicazione."""
    return async_sessionmaker(
        bind=bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


# ------------------------------------------------------------
# Engine Async SQLAlchemy 2.0
# ------------------------------------------------------------
engine: AsyncEngine = build_engine(settings.database_url)


# ------------------------------------------------------------
# Session Factory
# ------------------------------------------------------------
AsyncSessionLocal = build_session_factory(engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency injection per FastAPI.

    Crea una sessione database per ogni richiesta e la chiude
    automaticamente al termine.

    Yields:
        AsyncSession: Sessione database async
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


@asynccontextmanager
async def atomic(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    Esegue un blocco di scritture come unità atomica.

    Se il blocco termina senza errori la transazione viene confermata,
    altrimenti viene annullata per intero e l'eccezione rilanciata.
    Le IntegrityError sollevate al commit arrivano quindi al chiamante
    con la sessione già pulita e riutilizzabile.

    Example:
        async with atomic(db):
            db.add(invoice)
    """
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise


async def create_all(bind: AsyncEngine = engine, drop_first: bool = False) -> None:
    """Crea (ed eventualmente ricrea) tutte le tabelle dei modelli."""
    from app.models import Base

    async with bind.begin() as conn:
        if drop_first:
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


async def init_db() -> None:
    """
    Inizializza la connessione al database.

    Esegue un test di connessione per verificare
    che il database sia raggiungibile.
    """
    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Connessione al database stabilita con successo")
    except Exception as e:
        logger.error("Errore connessione database: %s", e)
        raise


async def close_db() -> None:
    """
    Chiude le connessioni al database.

    Da chiamare durante lo shutdown dell'applicazione.
    """
    await engine.dispose()
    logger.info("Connessioni database chiuse")
