"""Launch the driver in a limited child process."""

import functools
import logging
import os
import resource
import signal
import subprocess
import sys
import threading
import time

from . import limits

log = logging.getLogger("gcwatch")


def run_subprocess(
    cmd, stdin=None, cwd=None, env=None, rlimits=None, realtime=None,
    slug=None,
):
    """
    A helper to make a limited subprocess.

    `cmd`, `cwd`, and `env` are exactly as `subprocess.Popen` expects.

    `stdin` is the data to write to the stdin of the subprocess.

    `rlimits` is a list of tuples, the arguments to pass to
    `resource.setrlimit` to set limits on the process.

    `realtime` is the number of seconds to limit the execution of the process.

    `slug` is a short identifier for use in log messages.

    This function waits until the process has finished executing before
    returning.

    Returns a tuple of three values: the exit status code of the process, and
    the stdout and stderr of the process, as bytes.

    """
    subproc = subprocess.Popen(  # pylint: disable=subprocess-popen-preexec-fn
        cmd, cwd=cwd, env=env,
        preexec_fn=functools.partial(set_process_limits, rlimits or ()),
        stdin=subprocess.PIPE, stdout=subprocess.PIPE, stderr=subprocess.PIPE,
    )

    if slug:
        log.info("Launched %s in %s, with PID %s", slug, cwd, subproc.pid)

    # Start the time killer thread.
    if realtime:
        killer = ProcessKillerThread(subproc, limit=realtime)
        killer.start()

    stdout, stderr = subproc.communicate(stdin)
    return subproc.returncode, stdout, stderr


def set_process_limits(rlimits):       # pragma: no cover
    """
    Set limits on this process, to be used first in a child process.
    """
    # A new session, so the whole process group can be killed later.
    os.setsid()

    for limit, value in rlimits:
        resource.setrlimit(limit, value)


class ProcessKillerThread(threading.Thread):
    """
    A thread to kill a process after a given time limit.
    """
    def __init__(self, subproc, limit):
        super().__init__(daemon=True)
        self.subproc = subproc
        self.limit = limit

    def run(self):
        start = time.time()
        while (time.time() - start) < self.limit:
            time.sleep(.25)
            if self.subproc.poll() is not None:
                # Process ended, no need for us any more.
                return

        if self.subproc.poll() is None:
            try:
                pgid = os.getpgid(self.subproc.pid)
                log.warning(
                    "Killing process %r (group %r), ran too long: %.1fs",
                    self.subproc.pid, pgid, time.time() - start
                )
                os.killpg(pgid, signal.SIGKILL)
            except ProcessLookupError:
                # Exited on its own after the last poll.
                log.debug("Process %r ended before it could be killed", self.subproc.pid)


def driver_command():
    """The command line that runs the driver with the current Python."""
    return [sys.executable, "-m", "gcwatch"]


def launch_driver(port=None, slug=None):
    """
    Run the allocation driver in a child process with the configured limits.

    `port`, if given, starts the GC watch listener in the child on that port.
    The child runs until `limits.LIMITS["REALTIME"]` seconds have passed, or
    until it dies of its own accord, typically of a `MemoryError` when the
    `"VMEM"` limit is too small for the ceiling.

    Returns `(status, stdout, stderr)`.
    """
    options = "port={}".format(port) if port is not None else None
    return run_subprocess(
        cmd=driver_command(),
        env=limits.create_environment(options),
        rlimits=limits.create_rlimits(),
        realtime=limits.LIMITS["REALTIME"],
        slug=slug,
    )
