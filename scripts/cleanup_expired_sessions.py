#!/usr/bin/env python
"""Limpeza de sessões expiradas.

O agendamento é externo (cron, Cloud Scheduler, Kubernetes CronJob); este
script executa uma única passada e termina. Configuração via env vars
(DATABASE_URL, SESSION_TABLE_NAME, ...).

Uso:
    python scripts/cleanup_expired_sessions.py
    python scripts/cleanup_expired_sessions.py --create-schema
"""

import argparse
import sys
from pathlib import Path

# Adicionar src ao path
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from sqlsession.config.settings import get_settings
from sqlsession.infra.factory import create_session_engine, create_session_repository
from sqlsession.infra.schema import create_schema
from sqlsession.observability.context import correlation_scope
from sqlsession.observability.logging import configure_logging, get_logger

logger = get_logger("scripts.cleanup_expired_sessions")


def main() -> int:
    parser = argparse.ArgumentParser(description="Remove sessões expiradas")
    parser.add_argument(
        "--create-schema",
        action="store_true",
        help="cria as tabelas de sessão antes da limpeza (desenvolvimento)",
    )
    args = parser.parse_args()

    settings = get_settings()
    configure_logging(settings.log_level, settings.service_name, settings.log_format)

    errors = settings.validate_database_config()
    if errors:
        for error in errors:
            logger.error("Invalid database configuration", extra={"error": error})
        return 1

    engine = create_session_engine(settings)
    if args.create_schema:
        create_schema(engine, settings.session_table_name)

    repository = create_session_repository(settings, engine)
    with correlation_scope():
        deleted = repository.clean_up_expired_sessions()
        logger.info("Expired sessions cleaned up", extra={"deleted": deleted})

    engine.dispose()
    return 0


if __name__ == "__main__":
    sys.exit(main())
