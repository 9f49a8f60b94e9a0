"""CLI entry point for vocab-relay.

Usage:
  python -m vocab_relay [serve] [--host HOST] [--port PORT]
  python -m vocab_relay stop
  python -m vocab_relay status
  python -m vocab_relay check
"""
from __future__ import annotations

import argparse
import os
import signal
import sys
from pathlib import Path

PID_FILE = Path(__file__).resolve().parent.parent / ".server.pid"


def running_pid() -> int | None:
    """PID of the server recorded in PID_FILE, or None (stale files are removed)."""
    try:
        pid = int(PID_FILE.read_text().strip())
        os.kill(pid, 0)
    except FileNotFoundError:
        return None
    except (ValueError, ProcessLookupError, PermissionError):
        PID_FILE.unlink(missing_ok=True)
        return None
    return pid


def cmd_serve(args) -> int:
    import uvicorn

    from vocab_relay.config import load_settings

    if (pid := running_pid()) is not None:
        print(f"Already serving as PID {pid}; run 'stop' first.")
        return 1

    settings = load_settings()
    host = args.host or settings.host
    port = args.port or settings.port
    PID_FILE.write_text(str(os.getpid()))
    print(f"Server is running at http://{host}:{port}")
    try:
        uvicorn.run("vocab_relay.app:app", host=host, port=port, timeout_graceful_shutdown=5)
    finally:
        PID_FILE.unlink(missing_ok=True)
    return 0


def cmd_stop(args) -> int:
    pid = running_pid()
    if pid is None:
        print("Nothing to stop.")
        return 1
    os.kill(pid, signal.SIGTERM)
    PID_FILE.unlink(missing_ok=True)
    print(f"Sent SIGTERM to PID {pid}.")
    return 0


def cmd_status(args) -> int:
    pid = running_pid()
    print("stopped" if pid is None else f"serving (PID {pid})")
    return 0 if pid is not None else 1


def cmd_check(args) -> int:
    from vocab_relay.app import make_provider
    from vocab_relay.config import load_settings

    settings = load_settings()
    for k, v in settings.to_dict().items():
        print(f"  {k}: {v}")
    print(f"Provider: {make_provider(settings).name()}")
    return 0


def build_parser():
    p = argparse.ArgumentParser(prog="vocab-relay")
    sub = p.add_subparsers(dest="cmd")
    s = sub.add_parser("serve", help="Run the HTTP relay")
    s.add_argument("--host", help="Bind address (default from settings)")
    s.add_argument("--port", type=int, help="Listen port (default from settings)")
    s.set_defaults(func=cmd_serve)
    s = sub.add_parser("stop", help="Stop a running server")
    s.set_defaults(func=cmd_stop)
    s = sub.add_parser("status", help="Report whether a server is running")
    s.set_defaults(func=cmd_status)
    s = sub.add_parser("check", help="Print resolved settings and provider")
    s.set_defaults(func=cmd_check)
    return p


def main(argv=None):
    p = build_parser()
    args = p.parse_args(argv)
    if not hasattr(args, "func"):
        args = p.parse_args(["serve"])
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
