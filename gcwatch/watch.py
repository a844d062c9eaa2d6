"""
Report whether a garbage collection is running, over TCP.

Each connection to the listener gets one line and is closed: `"OK\\n"` when no
collection is in progress, or `"GC <ms>\\n"` with the milliseconds spent so far
in the current one.  Something like `nc localhost 9999` in a loop shows pauses
as they happen.
"""

import gc
import logging
import re
import socket
import threading
import time

from .exceptions import WatchError

log = logging.getLogger("gcwatch")

# Seconds an idle listener waits in accept before checking for `stop`.
ACCEPT_TIMEOUT = .25


def get_millis():
    """Monotonic clock, in milliseconds."""
    return int(time.monotonic() * 1000)


def parse_options(options):
    """
    Parse the listener options, `"port=<n>"`, and return the port.
    """
    match = re.match(r"port=(\d+)", options or "")
    if match is None:
        raise WatchError("failed to parse port option: {!r}".format(options))
    return int(match.group(1))


class GcWatch:
    """
    Track collector activity through `gc.callbacks`.

    Call `install()` to start tracking and `uninstall()` to stop.
    """

    def __init__(self, clock=get_millis):
        self.clock = clock
        self.in_gc = False
        self.start = 0

    def callback(self, phase, info):  # pylint: disable=unused-argument
        """The `gc.callbacks` hook."""
        if phase == "start":
            self.start = self.clock()
            self.in_gc = True
        elif phase == "stop":
            self.in_gc = False

    def install(self):
        if self.callback not in gc.callbacks:
            gc.callbacks.append(self.callback)

    def uninstall(self):
        if self.callback in gc.callbacks:
            gc.callbacks.remove(self.callback)

    def status(self):
        """The line to send to a client."""
        if self.in_gc:
            return "GC {}\n".format(self.clock() - self.start)
        return "OK\n"


def server_socket(port):
    """
    Make a listening socket on `port`, all interfaces.
    """
    try:
        if socket.has_dualstack_ipv6():
            sock = socket.create_server(
                ("", port), family=socket.AF_INET6, dualstack_ipv6=True,
            )
        else:
            sock = socket.create_server(("", port))
    except OSError as exc:
        raise WatchError("failed to bind GcWatch socket: {}".format(exc)) from exc
    # Wake up now and then so `stop` takes effect.
    sock.settimeout(ACCEPT_TIMEOUT)
    return sock


class GcWatchThread(threading.Thread):
    """
    A thread answering GC status requests on a TCP port.
    """
    def __init__(self, port, watch=None):
        super().__init__(name="GCWatch Listener", daemon=True)
        self.watch = watch or GcWatch()
        self.server = server_socket(port)
        self.port = self.server.getsockname()[1]
        self.stopped = threading.Event()

    def run(self):
        self.watch.install()
        log.info("GcWatch listener started on port %d", self.port)
        try:
            while not self.stopped.is_set():
                try:
                    client, _ = self.server.accept()
                except OSError:
                    continue
                with client:
                    try:
                        client.sendall(self.watch.status().encode("ascii"))
                    except OSError:
                        log.debug("GcWatch client went away before the reply")
        finally:
            self.watch.uninstall()
            self.server.close()

    def stop(self):
        """Ask the listener to close its socket and stop tracking collections."""
        self.stopped.set()


def start_watch(options):
    """
    Parse `options` and start a listener thread.  Returns the thread.
    """
    thread = GcWatchThread(parse_options(options))
    thread.start()
    return thread
