from models.db_storage import DBStorage, StorageError, StorageErrorKind

__all__ = ["DBStorage", "StorageError", "StorageErrorKind"]
