"""SQL templates and placeholder dialects.

Statements are written once with ``?`` placeholders and a ``{{ .TableName }}``
token, then rendered for a concrete table and DB-API placeholder style.
"""

import re
from enum import Enum

TABLE_NAME_TOKEN = re.compile(r"\{\{\s*\.TableName\s*\}\}")
_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

INSERT = "INSERT INTO {{ .TableName }} (id, version, data, at) VALUES (?, ?, ?, ?)"
SELECT = "SELECT version, data, at FROM {{ .TableName }} WHERE id = ? ORDER BY version"
SELECT_VERSION = (
    "SELECT version, data, at FROM {{ .TableName }} WHERE id = ? AND version <= ? ORDER BY version"
)


class Dialect(str, Enum):
    """Placeholder style of a database driver."""

    QMARK = "qmark"
    NUMERIC_DOLLAR = "numeric_dollar"
    FORMAT = "format"

    @classmethod
    def from_paramstyle(cls, paramstyle: str) -> "Dialect":
        """Map a DB-API ``paramstyle`` onto a dialect.

        Raises:
            ValueError: If the paramstyle takes named parameters.
        """
        if paramstyle == "pyformat":
            return cls.FORMAT
        try:
            return cls(paramstyle)
        except ValueError:
            raise ValueError(f"unsupported paramstyle {paramstyle!r}") from None

    def render(self, sql: str) -> str:
        """Rewrite the ``?`` placeholders of ``sql`` for this dialect.

        Examples:
            >>> Dialect.NUMERIC_DOLLAR.render("WHERE id = ? AND version <= ?")
            'WHERE id = $1 AND version <= $2'
        """
        if self is Dialect.QMARK:
            return sql
        if self is Dialect.FORMAT:
            return sql.replace("?", "%s")

        parts = sql.split("?")
        rendered = [parts[0]]
        for index, part in enumerate(parts[1:], start=1):
            rendered.append(f"${index}{part}")
        return "".join(rendered)


def with_table_name(sql: str, table_name: str) -> str:
    """Substitute the table name token in a template.

    Raises:
        ValueError: If ``table_name`` is not a plain SQL identifier.
    """
    if not _IDENTIFIER.match(table_name):
        raise ValueError(f"invalid table name {table_name!r}")
    return TABLE_NAME_TOKEN.sub(table_name, sql)
