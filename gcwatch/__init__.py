"""
Primary gcwatch exports.

    from gcwatch import AllocationPressureDriver
    driver = AllocationPressureDriver()
    driver.run()    # never returns

Run `python -m gcwatch` to drive a whole process, optionally with the GC
watch listener answering on a TCP port.
"""

from .exceptions import ConfigurationError, GcWatchException, WatchError
from .driver import AllocationPressureDriver

__version__ = '1.0.0'
