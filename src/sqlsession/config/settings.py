"""Configurações do repositório de sessões via variáveis de ambiente.

Todas as configurações são carregadas de env vars (ou .env).
Nunca hardcode credenciais de banco em `database_url`.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from sqlsession.domain.enums import FlushMode, SaveMode
from sqlsession.infra.queries import DEFAULT_TABLE_NAME


class Settings(BaseSettings):
    """Configurações lidas do ambiente."""

    model_config = SettingsConfigDict(
        env_prefix="",
        case_sensitive=False,
        env_file=".env",
        extra="ignore",
    )

    # Aplicação
    service_name: str = "sqlsession"
    version: str = "0.1.0"
    environment: str = "development"
    log_level: str = "INFO"
    log_format: str = "json"  # json | text

    # Banco
    database_url: str = "sqlite:///sessions.db"
    database_pool_size: int = 5
    database_max_overflow: int = 10
    database_echo: bool = False

    # Sessão
    session_table_name: str = DEFAULT_TABLE_NAME
    session_max_inactive_interval_seconds: int = 1800  # 30 min
    session_flush_mode: str = FlushMode.ON_SAVE.value  # on_save | immediate
    session_save_mode: str = SaveMode.ON_SET_ATTRIBUTE.value  # on_set_attribute | on_get_attribute | always

    def validate_session_config(self) -> list[str]:
        """Valida configuração do repositório de sessões.

        Retorna lista de erros (vazia = tudo OK).
        """
        errors: list[str] = []

        if not self.session_table_name.strip():
            errors.append("SESSION_TABLE_NAME não pode ser vazio")

        valid_flush_modes = {mode.value for mode in FlushMode}
        if self.session_flush_mode.lower() not in valid_flush_modes:
            errors.append(
                f"SESSION_FLUSH_MODE '{self.session_flush_mode}' inválido. "
                f"Valores válidos: {sorted(valid_flush_modes)}"
            )

        valid_save_modes = {mode.value for mode in SaveMode}
        if self.session_save_mode.lower() not in valid_save_modes:
            errors.append(
                f"SESSION_SAVE_MODE '{self.session_save_mode}' inválido. "
                f"Valores válidos: {sorted(valid_save_modes)}"
            )

        return errors

    def validate_database_config(self) -> list[str]:
        """Valida URL do banco por ambiente.

        Em staging/prod, SQLite é proibido (múltiplas instâncias não
        compartilham o arquivo).
        """
        errors: list[str] = []
        if not self.database_url:
            errors.append("DATABASE_URL é obrigatório")
            return errors

        if (self.is_staging or self.is_production) and self.database_url.startswith("sqlite"):
            errors.append(
                "DATABASE_URL com sqlite é proibido em staging/production. "
                "Use PostgreSQL ou outro banco compartilhado."
            )
        return errors

    @property
    def flush_mode(self) -> FlushMode:
        return FlushMode(self.session_flush_mode.lower())

    @property
    def save_mode(self) -> SaveMode:
        return SaveMode(self.session_save_mode.lower())

    @property
    def is_production(self) -> bool:
        """Retorna True se ambiente é produção."""
        return self.environment.lower() in ("production", "prod")

    @property
    def is_staging(self) -> bool:
        """Retorna True se ambiente é staging."""
        return self.environment.lower() in ("staging", "stage")

    @property
    def is_development(self) -> bool:
        """Retorna True se ambiente é desenvolvimento."""
        return self.environment.lower() in ("development", "dev", "local")


@lru_cache
def get_settings() -> Settings:
    """Retorna instância única de Settings (cacheada)."""
    return Settings()
