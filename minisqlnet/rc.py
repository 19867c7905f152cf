"""Result codes shared by the server and its components."""

from __future__ import annotations

from enum import IntEnum

_SUB_SHIFT = 8
_BASE_MASK = (1 << _SUB_SHIFT) - 1


class RC(IntEnum):
    """Result code.

    The low byte holds the primary code; extended codes put a detail
    number in the bits above it.
    """

    SUCCESS = 0
    GENERIC_ERROR = 1
    INVALID_ARGUMENT = 2
    SQL_SYNTAX = 3
    BUFFERPOOL = 4
    RECORD = 5
    INTERNAL = 6
    PERM = 7
    ABORT = 8
    BUSY = 9
    LOCKED = 10
    NOMEM = 11
    READONLY = 12
    INTERRUPT = 13
    IOERR = 14
    CORRUPT = 15
    NOTFOUND = 16
    FULL = 17
    CANTOPEN = 18
    PROTOCOL = 19
    EMPTY = 20
    SCHEMA = 21
    TOOBIG = 22
    CONSTRAINT = 23
    MISMATCH = 24
    MISUSE = 25
    NOLFS = 26
    AUTH = 27
    FORMAT = 28
    RANGE = 29
    NOTADB = 30
    NOTICE = 100

    # buffer pool
    BUFFERPOOL_EXIST = BUFFERPOOL | 1 << 8
    BUFFERPOOL_FILEERR = BUFFERPOOL | 2 << 8
    BUFFERPOOL_INVALIDNAME = BUFFERPOOL | 3 << 8
    BUFFERPOOL_WINDOWS = BUFFERPOOL | 4 << 8
    BUFFERPOOL_CLOSED = BUFFERPOOL | 5 << 8
    BUFFERPOOL_OPEN = BUFFERPOOL | 6 << 8
    BUFFERPOOL_NOBUF = BUFFERPOOL | 7 << 8
    BUFFERPOOL_EOF = BUFFERPOOL | 8 << 8
    BUFFERPOOL_INVALID_PAGE_NUM = BUFFERPOOL | 9 << 8
    BUFFERPOOL_NOTINBUF = BUFFERPOOL | 10 << 8
    BUFFERPOOL_PAGE_PINNED = BUFFERPOOL | 11 << 8
    BUFFERPOOL_OPEN_TOO_MANY_FILES = BUFFERPOOL | 12 << 8
    BUFFERPOOL_ILLEGAL_FILE_ID = BUFFERPOOL | 13 << 8

    # record
    RECORD_CLOSED = RECORD | 1 << 8
    RECORD_OPENNED = RECORD | 2 << 8
    RECORD_INVALIDRECSIZE = RECORD | 3 << 8
    RECORD_INVALIDRID = RECORD | 4 << 8
    RECORD_NOMORERECINMEM = RECORD | 5 << 8
    RECORD_OPEN = RECORD | 6 << 8
    RECORD_NO_MORE_IDX_IN_MEM = RECORD | 7 << 8
    RECORD_INVALID_KEY = RECORD | 8 << 8
    RECORD_DUPLICATE_KEY = RECORD | 9 << 8
    RECORD_NOMEM = RECORD | 10 << 8
    RECORD_SCANCLOSED = RECORD | 11 << 8
    RECORD_SCANOPENNED = RECORD | 12 << 8
    RECORD_EOF = RECORD | 13 << 8
    RECORD_RECORD_NOT_EXIST = RECORD | 14 << 8

    # schema
    SCHEMA_DB_EXIST = SCHEMA | 1 << 8
    SCHEMA_DB_NOT_EXIST = SCHEMA | 2 << 8
    SCHEMA_DB_NOT_OPENED = SCHEMA | 3 << 8
    SCHEMA_TABLE_NOT_EXIST = SCHEMA | 4 << 8
    SCHEMA_TABLE_EXIST = SCHEMA | 5 << 8
    SCHEMA_TABLE_NAME_ILLEGAL = SCHEMA | 6 << 8
    SCHEMA_FIELD_NOT_EXIST = SCHEMA | 7 << 8
    SCHEMA_FIELD_EXIST = SCHEMA | 8 << 8
    SCHEMA_FIELD_NAME_ILLEGAL = SCHEMA | 9 << 8
    SCHEMA_FIELD_MISSING = SCHEMA | 10 << 8
    SCHEMA_FIELD_REDUNDAN = SCHEMA | 11 << 8
    SCHEMA_FIELD_TYPE_MISMATCH = SCHEMA | 12 << 8
    SCHEMA_INDEX_NAME_REPEAT = SCHEMA | 13 << 8
    SCHEMA_INDEX_EXIST = SCHEMA | 14 << 8
    SCHEMA_INDEX_NOT_EXIST = SCHEMA | 15 << 8
    SCHEMA_INDEX_NAME_ILLEGAL = SCHEMA | 16 << 8

    # I/O errors
    IOERR_READ = IOERR | 1 << 8
    IOERR_SHORT_READ = IOERR | 2 << 8
    IOERR_WRITE = IOERR | 3 << 8
    IOERR_FSYNC = IOERR | 4 << 8
    IOERR_DIR_FSYNC = IOERR | 5 << 8
    IOERR_TRUNCATE = IOERR | 6 << 8
    IOERR_FSTAT = IOERR | 7 << 8
    IOERR_DELETE = IOERR | 8 << 8
    IOERR_BLOCKED = IOERR | 9 << 8
    IOERR_ACCESS = IOERR | 10 << 8
    IOERR_CHECKRESERVEDLOCK = IOERR | 11 << 8
    IOERR_CLOSE = IOERR | 12 << 8
    IOERR_DIR_CLOSE = IOERR | 13 << 8
    IOERR_SHMOPEN = IOERR | 14 << 8
    IOERR_SHMSIZE = IOERR | 15 << 8
    IOERR_SHMLOCK = IOERR | 16 << 8
    IOERR_SHMMAP = IOERR | 17 << 8
    IOERR_SEEK = IOERR | 18 << 8
    IOERR_DELETE_NOENT = IOERR | 19 << 8
    IOERR_MMAP = IOERR | 20 << 8
    IOERR_GETTEMPPATH = IOERR | 21 << 8
    IOERR_CONVPATH = IOERR | 22 << 8
    IOERR_VNODE = IOERR | 23 << 8
    IOERR_BEGIN_ATOMIC = IOERR | 24 << 8
    IOERR_COMMIT_ATOMIC = IOERR | 25 << 8
    IOERR_ROLLBACK_ATOMIC = IOERR | 26 << 8
    IOERR_DATA = IOERR | 27 << 8
    IOERR_CORRUPTFS = IOERR | 28 << 8
    IOERR_OPEN_TOO_MANY_FILES = IOERR | 29 << 8

    # locking
    LOCKED_LOCK = LOCKED | 1 << 8
    LOCKED_UNLOCK = LOCKED | 2 << 8
    LOCKED_SHAREDCACHE = LOCKED | 3 << 8
    LOCKED_VIRT = LOCKED | 4 << 8
    LOCKED_NEED_WAIT = LOCKED | 5 << 8
    LOCKED_RESOURCE_DELETED = LOCKED | 6 << 8

    # busy
    BUSY_RECOVERY = BUSY | 1 << 8
    BUSY_SNAPSHOT = BUSY | 2 << 8
    BUSY_TIMEOUT = BUSY | 3 << 8

    # cannot open
    CANTOPEN_NOTEMPDIR = CANTOPEN | 1 << 8
    CANTOPEN_ISDIR = CANTOPEN | 2 << 8
    CANTOPEN_FULLPATH = CANTOPEN | 3 << 8
    CANTOPEN_CONVPATH = CANTOPEN | 4 << 8
    CANTOPEN_DIRTYWAL = CANTOPEN | 5 << 8
    CANTOPEN_SYMLINK = CANTOPEN | 6 << 8

    # read-only
    READONLY_RECOVERY = READONLY | 1 << 8
    READONLY_CANTLOCK = READONLY | 2 << 8
    READONLY_ROLLBACK = READONLY | 3 << 8
    READONLY_DBMOVED = READONLY | 4 << 8
    READONLY_CANTINIT = READONLY | 5 << 8
    READONLY_DIRECTORY = READONLY | 6 << 8

    ABORT_ROLLBACK = ABORT | 1 << 8

    # constraints
    CONSTRAINT_CHECK = CONSTRAINT | 1 << 8
    CONSTRAINT_COMMITHOOK = CONSTRAINT | 2 << 8
    CONSTRAINT_FOREIGNKEY = CONSTRAINT | 3 << 8
    CONSTRAINT_FUNCTION = CONSTRAINT | 4 << 8
    CONSTRAINT_NOTNULL = CONSTRAINT | 5 << 8
    CONSTRAINT_PRIMARYKEY = CONSTRAINT | 6 << 8
    CONSTRAINT_TRIGGER = CONSTRAINT | 7 << 8
    CONSTRAINT_UNIQUE = CONSTRAINT | 8 << 8
    CONSTRAINT_VIRT = CONSTRAINT | 9 << 8
    CONSTRAINT_ROWID = CONSTRAINT | 10 << 8
    CONSTRAINT_PINNED = CONSTRAINT | 11 << 8

    # notices
    NOTICE_RECOVER_WAL = NOTICE | 1 << 8
    NOTICE_RECOVER_ROLLBACK = NOTICE | 2 << 8
    NOTICE_AUTOINDEX = NOTICE | 3 << 8

    AUTH_USER = AUTH | 1 << 8

    @property
    def base(self) -> RC:
        """The primary code this code belongs to."""
        return RC(int(self) & _BASE_MASK)

    @property
    def detail(self) -> int:
        """The extended detail number, 0 for a primary code."""
        return int(self) >> _SUB_SHIFT


def strrc(rc: int) -> str:
    """Return the symbolic name of a result code, or ``"UNKNOWN"``."""
    try:
        return RC(rc).name
    except ValueError:
        return "UNKNOWN"