# src/dbhelper/__init__.py

"""
DBHelper Library Initialization.

A thin data-access toolkit over a single selected SQL connection: statement
execution with named placeholders, dynamic CRUD helpers, a filter criteria
query builder and a record/collection layer with change tracking.

It initializes a logger with a NullHandler and makes the core components
available at the top level.
"""

import logging

# --------------------------------------------------------------------------
# Logging Setup
# --------------------------------------------------------------------------
# Library logs are discarded unless the consuming application configures
# logging for the "dbhelper" logger.
logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())
logger.propagate = False

# --------------------------------------------------------------------------
# Helper and Statement Exports
# --------------------------------------------------------------------------
from .helper import DBHelper, TrackedQuery
from .base.operation_types import OperationType
from .base.connection import ConnectionDescriptor
from .base.options import HelperOptions
from .base.translation import DictTranslator, Translator

# --------------------------------------------------------------------------
# Event Exports
# --------------------------------------------------------------------------
from .base.events import (BeforeWriteEvent, BeforeWriteObserver, Event,
                          InitObserver)

# --------------------------------------------------------------------------
# Filter and Record Exports
# --------------------------------------------------------------------------
from .filters.criteria import FilterCriteria, FilterSource
from .filters.search import FilterMessage, MessageType
from .records.collection import (CollectionFilterCriteria, CollectionSettings,
                                 RecordCollection)
from .records.record import BaseRecord, Loaded, Template

# --------------------------------------------------------------------------
# Exception Exports
# --------------------------------------------------------------------------
from .base.exceptions import (BindingNotAllowed, CollectionAlreadyHasParent,
                              CollectionHasNoParent, ConnectionDriverMissing,
                              ConnectionFailed, DBHelperException,
                              DuplicateConnectionID, EmptySelectFieldsList,
                              ExecutingQueryFailed, FetchFailed, InsertFailed,
                              InvalidSortingOrder, InvalidWhereStatement,
                              ListenerNotCallable, MissingSelectKeyword,
                              NoActiveTransaction, NoConnectionSelected,
                              NoParentRecordBound, PreparingQueryFailed,
                              RecordDoesNotExist, RecordKeyUnknown,
                              RecordPrimaryKeyReadOnly,
                              TransactionAlreadyActive, TransactionRequired,
                              UnknownConfigOption, UnknownConnection)

__all__ = [
    # Helper
    "DBHelper",
    "TrackedQuery",
    "OperationType",
    "ConnectionDescriptor",
    "HelperOptions",
    "Translator",
    "DictTranslator",
    # Events
    "Event",
    "BeforeWriteEvent",
    "InitObserver",
    "BeforeWriteObserver",
    # Filters
    "FilterCriteria",
    "FilterSource",
    "FilterMessage",
    "MessageType",
    # Records
    "CollectionSettings",
    "CollectionFilterCriteria",
    "RecordCollection",
    "BaseRecord",
    "Loaded",
    "Template",
    # Exceptions
    "DBHelperException",
    "ConnectionFailed",
    "ConnectionDriverMissing",
    "DuplicateConnectionID",
    "UnknownConnection",
    "NoConnectionSelected",
    "PreparingQueryFailed",
    "ExecutingQueryFailed",
    "FetchFailed",
    "InsertFailed",
    "UnknownConfigOption",
    "ListenerNotCallable",
    "TransactionAlreadyActive",
    "NoActiveTransaction",
    "TransactionRequired",
    "CollectionHasNoParent",
    "CollectionAlreadyHasParent",
    "BindingNotAllowed",
    "NoParentRecordBound",
    "RecordDoesNotExist",
    "RecordKeyUnknown",
    "RecordPrimaryKeyReadOnly",
    "InvalidWhereStatement",
    "EmptySelectFieldsList",
    "InvalidSortingOrder",
    "MissingSelectKeyword",
    # Logging
    "logger",
]

__version__ = "0.1.0"
