"""The allocation-pressure driver."""

import logging
import random
import time

from . import config

log = logging.getLogger("gcwatch")


class AllocationPressureDriver:
    """
    Keep the heap busy at a roughly constant live size.

    Every iteration allocates one zero-filled buffer of `VALUE_SIZE` bytes.
    While the live-memory counter is at or below `MAX_MEMORY_SIZE` the buffer
    is appended to `values`.  After that, it replaces a randomly chosen entry,
    so the old buffer becomes garbage and the collector has something to do.

    `memory_size` only counts appended buffers.  It is never decremented, so
    after the plateau it is not a measure of live memory.

    `configuration` is a `config.DriverConfiguration`, defaulting to
    `config.get_configuration()`.  `rng` is a `random.Random`, pass a seeded
    one for repeatable replacement order.  `sleep` is called with `DELAY`
    after every iteration.
    """

    def __init__(self, configuration=None, rng=None, sleep=time.sleep):
        if configuration is None:
            configuration = config.get_configuration()
        self.configuration = config.validate(configuration)
        self.rng = rng if rng is not None else random.Random()
        self.sleep = sleep
        self.values = []
        self.memory_size = 0

    @property
    def plateau(self):
        """Has the ceiling been exceeded, so that buffers are now replaced?"""
        return self.memory_size > self.configuration.MAX_MEMORY_SIZE

    def step(self):
        """
        Run one iteration.

        Returns the index of the replaced buffer, or None if the buffer was
        appended.
        """
        value = bytearray(self.configuration.VALUE_SIZE)
        if self.plateau:
            index = self.rng.randrange(len(self.values))
            self.values[index] = value
            return index

        self.values.append(value)
        self.memory_size += self.configuration.VALUE_SIZE
        if self.plateau:
            log.info(
                "Reached memory ceiling with %d buffers (%d bytes), replacing from now on",
                len(self.values), self.memory_size
            )
        return None

    def run(self, stop_event=None):
        """
        Allocate forever.

        If `stop_event` (a `threading.Event`) is given, it is checked before
        each iteration and the loop ends once it is set.  Returns the number
        of iterations run.  Without a `stop_event` this never returns; the
        process ends by signal or by running out of memory.
        """
        log.info(
            "Allocation pressure started: %d byte buffers, %d byte ceiling, %.3fs delay",
            self.configuration.VALUE_SIZE,
            self.configuration.MAX_MEMORY_SIZE,
            self.configuration.DELAY,
        )
        iterations = 0
        while stop_event is None or not stop_event.is_set():
            self.step()
            iterations += 1
            self.sleep(self.configuration.DELAY)
        return iterations
