#!/usr/bin/env python3
"""
Core Suite Runner
=================

Runs tests/core/ for strand_routing with src/ on PYTHONPATH, so the
package needs no install. The working directory does not matter:
    python3 src/run_tests.py -k sterna

Arguments after the script name go straight to pytest. The exit code
is pytest's.
"""

import os
import subprocess
import sys
from pathlib import Path


def main(argv=None):
    """Forward argv to pytest over tests/core/ and return its exit code."""
    src_root = Path(__file__).parent.resolve()

    env = dict(os.environ)
    paths = [str(src_root)] + [p for p in env.get('PYTHONPATH', '').split(os.pathsep) if p]
    env['PYTHONPATH'] = os.pathsep.join(paths)

    extra = list(sys.argv[1:] if argv is None else argv)
    result = subprocess.run(
        [sys.executable, '-m', 'pytest', 'tests/core/', '-v', '--tb=short', *extra],
        cwd=src_root,
        env=env,
    )

    return result.returncode


if __name__ == '__main__':
    sys.exit(main())
