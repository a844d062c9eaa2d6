"""Run the allocation-pressure driver until the process is killed."""

import logging
import os

from . import limits
from .driver import AllocationPressureDriver
from .watch import start_watch


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    limits.apply_gc_thresholds()
    options = os.environ.get(limits.OPTIONS_ENV)
    if options:
        start_watch(options)
    AllocationPressureDriver().run()


if __name__ == "__main__":
    main()
