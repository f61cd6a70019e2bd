from typing import Optional


class DBHelperException(Exception):
    """
    Base class for all errors raised by the toolkit.

    Carries a short human readable message plus an optional detail text
    (driver message, formatted SQL, placeholder analysis) and a numeric code.
    """

    code: Optional[int] = None

    def __init__(self, message: str = "A database helper error occurred.", details: str = "", code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.details = details
        if code is not None:
            self.code = code

    def get_details(self) -> str:
        return self.details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}\n{self.details}"
        return self.message


# --- Connection Gateway ---


class ConnectionFailed(DBHelperException):
    """Exception raised when the underlying driver cannot open a connection."""

    code = 37001

    def __init__(self, message: str = "Could not connect to the database.", details: str = ""):
        super().__init__(message, details)


class ConnectionDriverMissing(ConnectionFailed):
    """Exception raised when the driver module for a connection is not available."""

    code = 37002

    def __init__(self, message: str = "The database driver is not available.", details: str = ""):
        super().__init__(message, details)


class DuplicateConnectionID(DBHelperException):
    code = 37003

    def __init__(self, message: str = "A connection with the same ID has already been added.", details: str = ""):
        super().__init__(message, details)


class UnknownConnection(DBHelperException):
    code = 37004

    def __init__(self, message: str = "No connection has been added with this ID.", details: str = ""):
        super().__init__(message, details)


class NoConnectionSelected(DBHelperException):
    code = 37005

    def __init__(self, message: str = "No connection has been selected.", details: str = ""):
        super().__init__(message, details)


class NoConnectionsAdded(NoConnectionSelected):
    code = 37006

    def __init__(self, message: str = "No connections have been added.", details: str = ""):
        super().__init__(message, details)


# --- Statement Execution Core ---


class PreparingQueryFailed(DBHelperException):
    code = 37011

    def __init__(self, message: str = "Could not prepare the query.", details: str = ""):
        super().__init__(message, details)


class ExecutingQueryFailed(DBHelperException):
    code = 37012

    def __init__(self, message: str = "The query could not be executed.", details: str = ""):
        super().__init__(message, details)


class FetchFailed(DBHelperException):
    code = 37013

    def __init__(self, message: str = "Could not fetch the query results.", details: str = ""):
        super().__init__(message, details)


class InsertFailed(DBHelperException):
    code = 37014

    def __init__(self, message: str = "The insert query failed.", details: str = ""):
        super().__init__(message, details)


class UnknownConfigOption(DBHelperException):
    code = 37015

    def __init__(self, message: str = "Unknown configuration option.", details: str = ""):
        super().__init__(message, details)


class ListenerNotCallable(DBHelperException):
    code = 37016

    def __init__(self, message: str = "The event listener is not callable.", details: str = ""):
        super().__init__(message, details)


# --- Transactions ---


class TransactionAlreadyActive(DBHelperException):
    code = 37021

    def __init__(self, message: str = "A transaction has already been started.", details: str = ""):
        super().__init__(message, details)


class NoActiveTransaction(DBHelperException):
    code = 37022

    def __init__(self, message: str = "No transaction has been started.", details: str = ""):
        super().__init__(message, details)


class TransactionRequired(DBHelperException):
    code = 37023

    def __init__(self, message: str = "This operation requires an active transaction.", details: str = ""):
        super().__init__(message, details)


# --- Collections and records ---


class NotACollectionSettings(DBHelperException):
    code = 37031

    def __init__(self, message: str = "The object is not a collection settings instance.", details: str = ""):
        super().__init__(message, details)


class CollectionHasNoParent(DBHelperException):
    code = 37032

    def __init__(self, message: str = "The collection has no parent collection.", details: str = ""):
        super().__init__(message, details)


class CollectionAlreadyHasParent(DBHelperException):
    code = 37033

    def __init__(self, message: str = "A parent record has already been bound to the collection.", details: str = ""):
        super().__init__(message, details)


class BindingNotAllowed(DBHelperException):
    code = 37034

    def __init__(self, message: str = "The collection does not allow binding a parent record.", details: str = ""):
        super().__init__(message, details)


class NoParentRecordBound(DBHelperException):
    code = 37035

    def __init__(self, message: str = "The collection requires a parent record to be bound.", details: str = ""):
        super().__init__(message, details)


class NoParentRecordSpecified(DBHelperException):
    code = 37036

    def __init__(self, message: str = "A parent record is required to create this collection.", details: str = ""):
        super().__init__(message, details)


class InvalidParentRecord(DBHelperException):
    code = 37037

    def __init__(self, message: str = "The parent record does not belong to the parent collection.", details: str = ""):
        super().__init__(message, details)


class IdTableSameAsRecordTable(DBHelperException):
    code = 37038

    def __init__(self, message: str = "The ID table must not be the record table.", details: str = ""):
        super().__init__(message, details)


class RecordDoesNotExist(DBHelperException):
    code = 37041

    def __init__(self, message: str = "The record does not exist.", details: str = ""):
        super().__init__(message, details)


class RecordKeyUnknown(DBHelperException):
    code = 37042

    def __init__(self, message: str = "The record key does not exist.", details: str = ""):
        super().__init__(message, details)


class RecordValueNotScalar(DBHelperException):
    code = 37043

    def __init__(self, message: str = "Record values must be scalar.", details: str = ""):
        super().__init__(message, details)


class RecordPrimaryKeyReadOnly(DBHelperException):
    code = 37044

    def __init__(self, message: str = "The primary key of a record cannot be changed.", details: str = ""):
        super().__init__(message, details)


# --- Filter criteria ---


class InvalidWhereStatement(DBHelperException):
    code = 37051

    def __init__(self, message: str = "Empty or invalid where statement.", details: str = ""):
        super().__init__(message, details)


class EmptySelectFieldsList(DBHelperException):
    code = 37052

    def __init__(self, message: str = "No fields have been selected.", details: str = ""):
        super().__init__(message, details)


class InvalidSortingOrder(DBHelperException):
    code = 37053

    def __init__(self, message: str = "Invalid sorting order.", details: str = ""):
        super().__init__(message, details)


class MissingSelectKeyword(DBHelperException):
    code = 37054

    def __init__(self, message: str = "No SELECT keyword found in the query.", details: str = ""):
        super().__init__(message, details)
