"""
Append-only enforcement for ledger rows

SQLAlchemy fires mapper events before an UPDATE or DELETE reaches the
database. Listeners registered here reject both for stock ledger entries and
stock transactions, so the audit trail can only grow:

    session.flush()
         |
    [before_flush]  --> pending deletes of ledger rows --> ImmutableRecordError
    [before_update] --> any change to a persisted row   --> ImmutableRecordError
    [before_delete] --> any delete                      --> ImmutableRecordError

Bulk ``update()``/``delete()`` statements aimed at these tables are blocked by
a ``do_orm_execute`` hook on every Session.
"""
from sqlalchemy import event
from sqlalchemy.orm import Session

from backoffice.core.exceptions import ImmutableRecordError
from backoffice.core.logging import get_logger

from .stock import StockLog, StockTransaction

logger = get_logger("database")

APPEND_ONLY_MODELS = (StockLog, StockTransaction)
APPEND_ONLY_TABLES = frozenset(model.__tablename__ for model in APPEND_ONLY_MODELS)

_registered = False


def _reject(target, operation: str):
    logger.error(
        f"Blocked {operation} on append-only {target.__class__.__name__} {getattr(target, 'id', None)}"
    )
    raise ImmutableRecordError(target.__class__.__name__, getattr(target, "id", None), operation)


def _before_update(mapper, connection, target):
    _reject(target, "UPDATE")


def _before_delete(mapper, connection, target):
    _reject(target, "DELETE")


def _before_flush(session, flush_context, instances):
    for obj in list(session.deleted):
        if isinstance(obj, APPEND_ONLY_MODELS):
            _reject(obj, "DELETE")


def _block_bulk_statements(orm_execute_state):
    if not (orm_execute_state.is_update or orm_execute_state.is_delete):
        return
    for mapper in orm_execute_state.all_mappers:
        if mapper.local_table.name in APPEND_ONLY_TABLES:
            operation = "UPDATE" if orm_execute_state.is_update else "DELETE"
            logger.error(f"Blocked bulk {operation} on append-only table {mapper.local_table.name}")
            raise ImmutableRecordError(mapper.class_.__name__, None, operation)


def register_immutability_listeners():
    """Install the append-only listeners once per process"""
    global _registered
    if _registered:
        return
    for model in APPEND_ONLY_MODELS:
        event.listen(model, "before_update", _before_update)
        event.listen(model, "before_delete", _before_delete)
    event.listen(Session, "before_flush", _before_flush)
    event.listen(Session, "do_orm_execute", _block_bulk_statements)
    _registered = True
