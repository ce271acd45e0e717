"""Templates SQL padrão do repositório de sessões.

Os templates usam o placeholder %TABLE_NAME% (substituído pelo nome da
tabela de sessões) e parâmetros nomeados no estilo `:nome`.
A tabela de atributos é sempre `<tabela>_ATTRIBUTES`.
"""

from __future__ import annotations

DEFAULT_TABLE_NAME = "SPRING_SESSION"

TABLE_NAME_PLACEHOLDER = "%TABLE_NAME%"

CREATE_SESSION_QUERY = (
    "INSERT INTO %TABLE_NAME%(PRIMARY_ID, SESSION_ID, CREATION_TIME, LAST_ACCESS_TIME, "
    "MAX_INACTIVE_INTERVAL, EXPIRY_TIME, PRINCIPAL_NAME) "
    "VALUES (:primary_id, :session_id, :creation_time, :last_access_time, "
    ":max_inactive_interval, :expiry_time, :principal_name)"
)

CREATE_SESSION_ATTRIBUTE_QUERY = (
    "INSERT INTO %TABLE_NAME%_ATTRIBUTES(SESSION_PRIMARY_ID, ATTRIBUTE_NAME, ATTRIBUTE_BYTES) "
    "VALUES (:session_primary_id, :attribute_name, :attribute_bytes)"
)

GET_SESSION_QUERY = (
    "SELECT S.PRIMARY_ID, S.SESSION_ID, S.CREATION_TIME, S.LAST_ACCESS_TIME, "
    "S.MAX_INACTIVE_INTERVAL, SA.ATTRIBUTE_NAME, SA.ATTRIBUTE_BYTES "
    "FROM %TABLE_NAME% S "
    "LEFT OUTER JOIN %TABLE_NAME%_ATTRIBUTES SA ON S.PRIMARY_ID = SA.SESSION_PRIMARY_ID "
    "WHERE S.SESSION_ID = :session_id"
)

UPDATE_SESSION_QUERY = (
    "UPDATE %TABLE_NAME% SET SESSION_ID = :session_id, LAST_ACCESS_TIME = :last_access_time, "
    "MAX_INACTIVE_INTERVAL = :max_inactive_interval, EXPIRY_TIME = :expiry_time, "
    "PRINCIPAL_NAME = :principal_name "
    "WHERE PRIMARY_ID = :primary_id"
)

UPDATE_SESSION_ATTRIBUTE_QUERY = (
    "UPDATE %TABLE_NAME%_ATTRIBUTES SET ATTRIBUTE_BYTES = :attribute_bytes "
    "WHERE SESSION_PRIMARY_ID = :session_primary_id AND ATTRIBUTE_NAME = :attribute_name"
)

DELETE_SESSION_ATTRIBUTE_QUERY = (
    "DELETE FROM %TABLE_NAME%_ATTRIBUTES "
    "WHERE SESSION_PRIMARY_ID = :session_primary_id AND ATTRIBUTE_NAME = :attribute_name"
)

DELETE_SESSION_QUERY = "DELETE FROM %TABLE_NAME% WHERE SESSION_ID = :session_id"

LIST_SESSIONS_BY_PRINCIPAL_NAME_QUERY = (
    "SELECT S.PRIMARY_ID, S.SESSION_ID, S.CREATION_TIME, S.LAST_ACCESS_TIME, "
    "S.MAX_INACTIVE_INTERVAL, SA.ATTRIBUTE_NAME, SA.ATTRIBUTE_BYTES "
    "FROM %TABLE_NAME% S "
    "LEFT OUTER JOIN %TABLE_NAME%_ATTRIBUTES SA ON S.PRIMARY_ID = SA.SESSION_PRIMARY_ID "
    "WHERE S.PRINCIPAL_NAME = :principal_name"
)

DELETE_SESSIONS_BY_EXPIRY_TIME_QUERY = (
    "DELETE FROM %TABLE_NAME% WHERE EXPIRY_TIME < :expiry_time"
)


def render_query(template: str, table_name: str) -> str:
    """Substitui %TABLE_NAME% pelo nome da tabela."""
    return template.replace(TABLE_NAME_PLACEHOLDER, table_name)
