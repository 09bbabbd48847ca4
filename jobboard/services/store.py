"""
DataStore - generic table client for the external PostgreSQL store.

Route handlers never write SQL; they issue one logical operation:

    await store.select("jobs_public", order_by="created_at")
    await store.select_one("users", filters={"email": email})
    await store.insert("applications", payload)
    await store.update("jobs", {"is_active": False}, filters={"id": job_id})
    await store.delete("jobs", filters={"id": job_id})
    await store.rpc("stats_overview")

Tables, views and columns are internal constants, never user input;
they are still checked against an identifier pattern before being
interpolated. Values always travel as bound parameters.
"""

import asyncio
import json
import logging
import re
from typing import Any, Dict, List, Mapping, Optional, Sequence
from uuid import UUID

from sqlalchemy import bindparam, text
from sqlalchemy.exc import SQLAlchemyError

from jobboard.core.errors import StoreError
from jobboard.db.postgres import SERVICE, get_db_session

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[a-z_][a-z0-9_]*$")


def _ident(name: str) -> str:
    if not _IDENTIFIER.match(name):
        raise ValueError(f"Invalid SQL identifier: {name!r}")
    return name


def _columns(columns: str) -> str:
    if columns.strip() == "*":
        return "*"
    return ", ".join(_ident(c.strip()) for c in columns.split(","))


def _normalize(row: Mapping[str, Any]) -> Dict[str, Any]:
    """Row as a plain dict with uuid values rendered as strings."""
    return {k: str(v) if isinstance(v, UUID) else v for k, v in row.items()}


class DataStore:
    """Async table client bound to one privilege level."""

    def __init__(self, role: str = SERVICE):
        self.role = role

    async def _run(self, statement, params: Dict[str, Any]) -> Any:
        try:
            async with get_db_session(self.role) as db:
                result = await db.execute(statement, params)
                if not result.returns_rows:
                    return result.rowcount
                return [_normalize(row) for row in result.mappings().all()]
        except (SQLAlchemyError, OSError, asyncio.TimeoutError) as e:
            # driver-level connect failures (refused, timed out) are not SQLAlchemyErrors
            logger.error("Store operation failed: %s", e)
            raise StoreError(str(e)) from e

    @staticmethod
    def _where(
        filters: Optional[Dict[str, Any]],
        where_in: Optional[Dict[str, Sequence[Any]]] = None,
    ):
        clauses: List[str] = []
        params: Dict[str, Any] = {}
        expanding: List[str] = []
        for column, value in (filters or {}).items():
            key = f"w_{_ident(column)}"
            if value is None:
                clauses.append(f"{column} IS NULL")
            else:
                clauses.append(f"{column} = :{key}")
                params[key] = value
        for column, values in (where_in or {}).items():
            key = f"in_{_ident(column)}"
            clauses.append(f"{column} IN :{key}")
            params[key] = list(values)
            expanding.append(key)
        sql = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        return sql, params, expanding

    async def select(
        self,
        table: str,
        columns: str = "*",
        *,
        filters: Optional[Dict[str, Any]] = None,
        where_in: Optional[Dict[str, Sequence[Any]]] = None,
        order_by: Optional[str] = None,
        descending: bool = True,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        if where_in and any(len(v) == 0 for v in where_in.values()):
            return []
        where, params, expanding = self._where(filters, where_in)
        sql = f"SELECT {_columns(columns)} FROM {_ident(table)}{where}"
        if order_by:
            sql += f" ORDER BY {_ident(order_by)} {'DESC' if descending else 'ASC'}"
        if limit is not None:
            sql += " LIMIT :limit"
            params["limit"] = int(limit)
        statement = text(sql)
        if expanding:
            statement = statement.bindparams(*(bindparam(k, expanding=True) for k in expanding))
        return await self._run(statement, params)

    async def select_one(
        self,
        table: str,
        columns: str = "*",
        *,
        filters: Dict[str, Any],
    ) -> Optional[Dict[str, Any]]:
        rows = await self.select(table, columns, filters=filters, limit=1)
        return rows[0] if rows else None

    async def insert(self, table: str, values: Dict[str, Any]) -> Dict[str, Any]:
        names = [_ident(c) for c in values]
        sql = (
            f"INSERT INTO {_ident(table)} ({', '.join(names)}) "
            f"VALUES ({', '.join(':v_' + c for c in names)}) RETURNING *"
        )
        rows = await self._run(text(sql), {f"v_{c}": v for c, v in values.items()})
        return rows[0]

    async def update(
        self,
        table: str,
        values: Dict[str, Any],
        *,
        filters: Dict[str, Any],
    ) -> Optional[Dict[str, Any]]:
        """Update matching rows; returns the first updated row or None."""
        if not filters:
            raise ValueError("update requires filters")
        assignments = ", ".join(f"{_ident(c)} = :v_{c}" for c in values)
        where, params, _ = self._where(filters)
        params.update({f"v_{c}": v for c, v in values.items()})
        sql = f"UPDATE {_ident(table)} SET {assignments}{where} RETURNING *"
        rows = await self._run(text(sql), params)
        return rows[0] if rows else None

    async def delete(self, table: str, *, filters: Dict[str, Any]) -> int:
        if not filters:
            raise ValueError("delete requires filters")
        where, params, _ = self._where(filters)
        return await self._run(text(f"DELETE FROM {_ident(table)}{where}"), params)

    async def rpc(self, function: str, **params: Any) -> Any:
        """Call a SQL function returning a single (usually JSON) value."""
        arguments = ", ".join(f"{_ident(k)} => :{k}" for k in params)
        rows = await self._run(
            text(f"SELECT {_ident(function)}({arguments}) AS result"), params
        )
        result = rows[0]["result"] if rows else None
        if isinstance(result, str):
            try:
                return json.loads(result)
            except ValueError:
                return result
        return result
