"""Allocation-stress a long-running Python process.

Run it under the runtime tuning you want to observe, for example:

    PYTHONMALLOC=malloc GCWATCH_OPTIONS=port=9999 python memory_stress.py

then watch the collector with `nc localhost 9999`.
"""

from gcwatch.__main__ import main

if __name__ == "__main__":
    main()
