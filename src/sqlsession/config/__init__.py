"""Configurações centralizadas do sqlsession.

Este módulo exporta:
- Settings: classe de configuração via variáveis de ambiente
- get_settings: função cacheada para obter instância única

Uso típico:
    from sqlsession.config import get_settings
"""

from sqlsession.config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
