#!/usr/bin/env python3
"""
Server management script for the import editor API.

Keeps a single uvicorn instance per checkout: the PID goes to server.pid and
a stale instance is stopped before a new one starts.

Usage:
    python server.py start   # Start server (stops the old one first, Ctrl+C to stop)
    python server.py stop    # Stop server
    python server.py status  # Check if running
"""

import os
import sys
import signal
import socket
import subprocess
import time
from pathlib import Path

from config import settings

PROJECT_DIR = Path(__file__).parent
PID_FILE = PROJECT_DIR / "server.pid"


def read_pid():
    """PID from server.pid, or None."""
    try:
        return int(PID_FILE.read_text().strip())
    except (OSError, ValueError):
        return None


def is_alive(pid: int) -> bool:
    try:
        os.kill(pid, 0)
    except OSError:
        return False
    return True


def port_in_use() -> bool:
    """Whether something already listens on the API port."""
    host = "127.0.0.1" if settings.api_host == "0.0.0.0" else settings.api_host
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.settimeout(0.5)
        return sock.connect_ex((host, settings.api_port)) == 0


def stop_existing() -> bool:
    """Stop the instance recorded in server.pid. Returns True if one was stopped."""
    pid = read_pid()
    stopped = False

    if pid is not None and is_alive(pid):
        os.kill(pid, signal.SIGTERM)
        print(f"[OK] Stopped server (PID: {pid})")
        stopped = True
        time.sleep(1)

    if PID_FILE.exists():
        PID_FILE.unlink()

    return stopped


def start_server():
    """Start uvicorn in the foreground."""
    print("Starting server...")
    stop_existing()

    if port_in_use():
        print(f"[ERROR] Port {settings.api_port} is still in use!")
        print("   Wait a moment or run: python server.py stop")
        sys.exit(1)

    command = [
        sys.executable,
        "-m", "uvicorn",
        "main:app",
        "--host", settings.api_host,
        "--port", str(settings.api_port),
    ]
    if settings.debug:
        command.append("--reload")

    try:
        proc = subprocess.Popen(command, cwd=PROJECT_DIR)
    except FileNotFoundError:
        print("[ERROR] Python interpreter not found")
        sys.exit(1)

    PID_FILE.write_text(str(proc.pid))
    print(f"[OK] Server started (PID: {proc.pid})")
    print(f"[OK] API: http://localhost:{settings.api_port}/api/data")
    if settings.debug:
        print(f"[OK] Docs: http://localhost:{settings.api_port}/docs")
    print("\nPress Ctrl+C to stop")

    try:
        proc.wait()
    except KeyboardInterrupt:
        print("\n\nShutting down...")
        proc.terminate()
        try:
            proc.wait(timeout=5)
        except subprocess.TimeoutExpired:
            proc.kill()
        print("[OK] Server stopped")
    finally:
        if PID_FILE.exists():
            PID_FILE.unlink()


def stop_server():
    print("Stopping server...")
    if not stop_existing():
        print("[OK] No server running")


def show_status():
    pid = read_pid()
    if pid is not None and is_alive(pid):
        print(f"[OK] Server is running (PID: {pid})")
        print(f"     http://localhost:{settings.api_port}")
    elif port_in_use():
        print(f"[OK] Something is listening on port {settings.api_port} (not started by this script)")
    else:
        print("[NOT RUNNING] Server is not running")
        print("              Start with: python server.py start")


def main():
    """Main entry point."""
    command = sys.argv[1] if len(sys.argv) > 1 else "start"

    if command == "start":
        start_server()
    elif command == "stop":
        stop_server()
    elif command == "status":
        show_status()
    else:
        print("Usage: python server.py [start|stop|status]")
        sys.exit(1)


if __name__ == "__main__":
    main()
