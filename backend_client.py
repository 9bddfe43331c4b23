"""
Generic data-access client over the BookBridge database.

Every logical table (``profiles``, ``books``, ``book_requests``,
``contact_exchanges``, ``notifications``) is a MongoDB collection reached
through motor. Rows go in and come out as plain dicts whose ``id`` column is
the stringified ``_id`` of the document.

Filters are ``{column: value}`` mappings meaning equality; wrap a value with
``gt()``, ``neq()`` or ``not_null()`` for the other comparisons.
"""

import inspect
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Tuple, Union

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import PyMongoError

from errors import AuthError, BackendError
from models.auth_models import Session
from utils import create_access_token, decode_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Op:
    operator: str
    value: Any


def gt(value: Any) -> Op:
    return Op("$gt", value)


def neq(value: Any) -> Op:
    return Op("$ne", value)


def not_null() -> Op:
    return Op("$ne", None)


Filters = Mapping[str, Any]
Order = Tuple[str, str]


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


def _object_id(value: Any) -> Any:
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return value


def _to_query(filters: Optional[Filters]) -> Dict[str, Any]:
    query = {}
    for column, value in (filters or {}).items():
        if column == "id":
            column = "_id"
            value = Op(value.operator, _object_id(value.value)) if isinstance(value, Op) else _object_id(value)
        if isinstance(value, Op):
            query[column] = {value.operator: _plain(value.value)}
        else:
            query[column] = _plain(value)
    return query


def _to_document(row: Mapping[str, Any]) -> Dict[str, Any]:
    return {key: _plain(value) for key, value in row.items()}


def serialize_row(document: Mapping[str, Any], columns: Optional[List[str]] = None) -> Dict[str, Any]:
    row = dict(document)
    row["id"] = str(row.pop("_id"))
    if columns:
        row = {key: row.get(key) for key in ["id", *columns]}
    return row


class BackendClient:
    """Table-scoped select/insert/update/delete plus named procedures."""

    def __init__(self, db):
        self._db = db
        self._procedures: Dict[str, Callable[[Dict[str, Any]], Awaitable[Any]]] = {
            "create_book_notification": self._create_book_notification,
        }
        self.auth = AuthClient(self)

    async def ping(self) -> None:
        try:
            await self._db.command("ping")
        except PyMongoError as e:
            raise BackendError(str(e)) from e

    async def select(
        self,
        table: str,
        filters: Optional[Filters] = None,
        order: Optional[Order] = None,
        columns: Optional[List[str]] = None,
    ) -> List[Dict[str, Any]]:
        try:
            cursor = self._db[table].find(_to_query(filters))
            if order:
                column, direction = order
                cursor = cursor.sort(
                    "_id" if column == "id" else column,
                    DESCENDING if direction == "desc" else ASCENDING,
                )
            rows = []
            async for document in cursor:
                rows.append(serialize_row(document, columns))
            return rows
        except PyMongoError as e:
            raise BackendError(str(e)) from e

    async def select_one(
        self,
        table: str,
        filters: Filters,
        columns: Optional[List[str]] = None,
    ) -> Optional[Dict[str, Any]]:
        try:
            document = await self._db[table].find_one(_to_query(filters))
        except PyMongoError as e:
            raise BackendError(str(e)) from e
        if document is None:
            return None
        return serialize_row(document, columns)

    async def count(self, table: str, filters: Optional[Filters] = None) -> int:
        try:
            return await self._db[table].count_documents(_to_query(filters))
        except PyMongoError as e:
            raise BackendError(str(e)) from e

    async def insert(self, table: str, row: Mapping[str, Any]) -> Dict[str, Any]:
        document = _to_document(row)
        if "id" in document:
            document["_id"] = _object_id(document.pop("id"))
        document.setdefault("created_at", datetime.utcnow())
        try:
            result = await self._db[table].insert_one(document)
        except PyMongoError as e:
            raise BackendError(str(e)) from e
        document["_id"] = result.inserted_id
        return serialize_row(document)

    async def update(self, table: str, patch: Mapping[str, Any], filters: Filters) -> int:
        """Apply ``patch`` to every matching row and return how many matched."""
        try:
            result = await self._db[table].update_many(
                _to_query(filters),
                {"$set": _to_document(patch)},
            )
        except PyMongoError as e:
            raise BackendError(str(e)) from e
        return result.matched_count

    async def upsert(
        self,
        table: str,
        match: Mapping[str, Any],
        patch: Mapping[str, Any],
        defaults: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Update ``patch`` on the row matching ``match`` or insert a new one.

        The write is a single conditional operation, so two callers patching
        disjoint columns of the same row never overwrite each other.
        ``defaults`` only apply when the row is created.
        """
        now = datetime.utcnow()
        values = _to_document(patch)
        values["updated_at"] = now
        on_insert = {
            key: value
            for key, value in _to_document({**(defaults or {}), "created_at": now}).items()
            if key not in values and key not in match
        }
        query = _to_query(match)
        try:
            await self._db[table].update_one(
                query,
                {"$set": values, "$setOnInsert": on_insert},
                upsert=True,
            )
            document = await self._db[table].find_one(query)
        except PyMongoError as e:
            raise BackendError(str(e)) from e
        return serialize_row(document)

    async def delete(self, table: str, filters: Filters) -> int:
        try:
            result = await self._db[table].delete_many(_to_query(filters))
        except PyMongoError as e:
            raise BackendError(str(e)) from e
        return result.deleted_count

    async def invoke_procedure(self, name: str, args: Dict[str, Any]) -> Any:
        procedure = self._procedures.get(name)
        if procedure is None:
            raise BackendError(f"Unknown procedure: {name}")
        return await procedure(args)

    async def _create_book_notification(self, args: Dict[str, Any]) -> str:
        try:
            row = {
                "user_id": args["user_id"],
                "type": args["notification_type"],
                "title": args["notification_title"],
                "message": args["notification_message"],
                "read": False,
            }
        except KeyError as e:
            raise BackendError(f"Missing procedure argument: {e.args[0]}") from e
        notification = await self.insert("notifications", row)
        return notification["id"]


class AuthEvent(str, Enum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"


AuthHandler = Callable[[AuthEvent, Optional[Session]], Union[None, Awaitable[None]]]


class Subscription:
    def __init__(self, handlers: List[AuthHandler], handler: AuthHandler):
        self._handlers = handlers
        self._handler = handler

    @property
    def active(self) -> bool:
        return self._handler in self._handlers

    def unsubscribe(self) -> None:
        if self._handler in self._handlers:
            self._handlers.remove(self._handler)


class AuthClient:
    """Accounts, bearer-token sessions and auth-state change events."""

    def __init__(self, backend: BackendClient):
        self._backend = backend
        self._handlers: List[AuthHandler] = []

    def on_auth_state_change(self, handler: AuthHandler) -> Subscription:
        self._handlers.append(handler)
        return Subscription(self._handlers, handler)

    async def _emit(self, event: AuthEvent, session: Optional[Session]) -> None:
        for handler in list(self._handlers):
            try:
                result = handler(event, session)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Auth state handler failed for %s", event.value)

    async def sign_up(self, email: str, password: str, full_name: str) -> Session:
        existing = await self._backend.select_one("users", {"email": email})
        if existing:
            raise AuthError("Email already exists")

        user = await self._backend.insert("users", {
            "email": email,
            "password": hash_password(password),
        })
        await self._backend.insert("profiles", {
            "id": user["id"],
            "email": email,
            "full_name": full_name,
            "username": email.split("@")[0],
            "phone": None,
            "address": None,
        })
        logger.info("Registered user %s", user["id"])
        return await self.sign_in_with_password(email, password)

    async def sign_in_with_password(self, email: str, password: str) -> Session:
        user = await self._backend.select_one("users", {"email": email})
        if not user or not verify_password(password, user["password"]):
            raise AuthError("Invalid login credentials")

        token = create_access_token({
            "user_id": user["id"],
            "email": user["email"],
            "jti": str(ObjectId()),
        })
        session = Session(user_id=user["id"], email=user["email"], access_token=token)
        await self._emit(AuthEvent.SIGNED_IN, session)
        return session

    async def get_session(self, access_token: Optional[str]) -> Optional[Session]:
        if not access_token:
            return None
        payload = decode_access_token(access_token)
        if not payload or not payload.get("user_id"):
            return None
        if payload.get("jti") and await self._backend.count("revoked_sessions", {"jti": payload["jti"]}):
            return None
        return Session(user_id=payload["user_id"], email=payload.get("email"), access_token=access_token)

    async def sign_out(self, session: Session) -> None:
        payload = decode_access_token(session.access_token) or {}
        if payload.get("jti"):
            await self._backend.insert("revoked_sessions", {"jti": payload["jti"], "user_id": session.user_id})
        await self._emit(AuthEvent.SIGNED_OUT, session)
