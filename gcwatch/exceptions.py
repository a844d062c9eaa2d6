"""
gcwatch exceptions.
"""


class GcWatchException(Exception):
    """
    Top of the hierarchy of gcwatch exceptions
    """


class ConfigurationError(GcWatchException):
    """
    The allocation driver was given sizes or a delay it can't work with.
    """


class WatchError(GcWatchException):
    """
    There was a problem parsing options for, or starting, the GC watch listener.
    """
