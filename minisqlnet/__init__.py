"""Result codes, query structures, result tuples, sessions, a NUL-framed socket server and an interactive client for a small SQL database server."""

__version__ = "0.1.0"
__all__ = ["client", "events", "querydefs", "rc", "server", "session", "tuple", "value"]