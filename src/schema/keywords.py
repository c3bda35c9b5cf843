"""Reserved keywords of the query language.

Explicit table and column names may not collide with these words.
Comparison is case-insensitive, as the query engine treats keywords.
"""

from __future__ import annotations

RESERVED_KEYWORDS = frozenset(
    {
        "ALL", "ALTER", "AND", "ANY", "AS", "ASC", "AVG", "BETWEEN", "BY",
        "CASE", "CAST", "CHECK", "COLUMN", "COUNT", "CREATE", "CROSS",
        "DEFAULT", "DELETE", "DESC", "DISTINCT", "DROP", "ELSE", "END",
        "ESCAPE", "EXCEPT", "EXISTS", "FALSE", "FOREIGN", "FROM", "FULL",
        "GROUP", "HAVING", "IN", "INDEX", "INNER", "INSERT", "INTERSECT",
        "INTO", "IS", "JOIN", "KEY", "LEFT", "LIKE", "LIMIT", "MAX", "MIN",
        "NATURAL", "NOT", "NULL", "OFFSET", "ON", "OR", "ORDER", "OUTER",
        "PRIMARY", "REFERENCES", "RIGHT", "SELECT", "SET", "SOME", "SUM",
        "TABLE", "THEN", "TRUE", "UNION", "UNIQUE", "UPDATE", "USING",
        "VALUES", "VIEW", "WHEN", "WHERE", "WITH",
    }
)
