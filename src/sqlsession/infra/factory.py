"""Factory para SqlSessionRepository: criação a partir de Settings.

Responsabilidades:
- Criar o Engine SQLAlchemy conforme DATABASE_URL
- Validar configuração de sessão (fail-fast)
- Aplicar tabela, intervalo padrão, FlushMode e SaveMode
"""

from __future__ import annotations

import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from sqlsession.config.settings import Settings, get_settings
from sqlsession.infra.schema import enable_sqlite_foreign_keys
from sqlsession.infra.session_repository import SqlSessionRepository
from sqlsession.infra.sqlalchemy_operations import (
    SqlAlchemyOperations,
    SqlAlchemyTransactionOperations,
)
from sqlsession.observability.logging import get_logger

logger: logging.Logger = get_logger(__name__)


def create_session_engine(settings: Settings) -> Engine:
    """Cria o Engine; pool dimensionado apenas para bancos servidor."""
    url = settings.database_url
    if url.startswith("sqlite"):
        engine = create_engine(url, echo=settings.database_echo)
        enable_sqlite_foreign_keys(engine)
    else:
        engine = create_engine(
            url,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            pool_pre_ping=True,
            echo=settings.database_echo,
        )

    logger.info(
        "Session database engine created",
        extra={"database": url.split("@")[-1] if "@" in url else url},
    )
    return engine


def create_session_repository(
    settings: Settings | None = None,
    engine: Engine | None = None,
) -> SqlSessionRepository:
    """Factory para SqlSessionRepository.

    Args:
        settings: Configurações (padrão: get_settings())
        engine: Engine já criado (padrão: create_session_engine(settings))

    Returns:
        SqlSessionRepository configurado

    Raises:
        ValueError: Se a configuração de sessão for inválida
    """
    settings = settings or get_settings()
    errors = settings.validate_session_config()
    if errors:
        raise ValueError("; ".join(errors))

    engine = engine or create_session_engine(settings)
    repository = SqlSessionRepository(
        SqlAlchemyOperations(engine),
        SqlAlchemyTransactionOperations(engine),
    )
    repository.set_table_name(settings.session_table_name)
    repository.set_default_max_inactive_interval(settings.session_max_inactive_interval_seconds)
    repository.set_flush_mode(settings.flush_mode)
    repository.set_save_mode(settings.save_mode)

    logger.info(
        "Using SQL session repository",
        extra={
            "table_name": repository.table_name,
            "flush_mode": repository.flush_mode.value,
            "save_mode": repository.save_mode.value,
        },
    )
    return repository
