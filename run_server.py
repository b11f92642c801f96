"""Dedicated entry point to launch the OH Plus quotation Dash server.
Ensures predictable startup semantics even if other modules import app.
"""
from datetime import datetime, timezone
import runpy
import traceback
import sys


def main():
    try:
        runpy.run_module('app', run_name='__main__')
    except Exception as e:  # log error
        with open('startup_error.log', 'a', encoding='utf-8') as f:
            f.write(f"[{datetime.now(timezone.utc).isoformat()}] FATAL during run_server: {e}\n")
            f.write(traceback.format_exc())
        print(f"[startup][fatal] {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
