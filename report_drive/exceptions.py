# exceptions.py

class PermanentError(Exception):
    """An error that will not be fixed by a retry (e.g., unreadable credentials)."""
    pass
