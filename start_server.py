#!/usr/bin/env python3
"""Start the shipping API under uvicorn, honouring the PORT environment variable."""

import os
import subprocess
import sys

port = os.environ.get("PORT", "8000")

try:
    port_int = int(port)
except ValueError:
    print(f"Warning: Invalid PORT value '{port}', using default 8000", file=sys.stderr)
    port_int = 8000

src_path = os.path.abspath("src")
if not os.path.isdir(src_path):
    print(f"Warning: src directory not found at {src_path}", file=sys.stderr)
    src_path = os.getcwd()

pythonpath = os.environ.get("PYTHONPATH", "")
os.environ["PYTHONPATH"] = f"{src_path}:{pythonpath}" if pythonpath else src_path
sys.path.insert(0, src_path)

try:
    from shipping_distance.config import settings
except ImportError as e:
    print(f"Failed to import shipping_distance: {e}", file=sys.stderr)
    sys.exit(1)

cmd = [
    sys.executable,
    "-m",
    "uvicorn",
    "shipping_distance.main:app",
    "--host",
    "0.0.0.0",
    "--port",
    str(port_int),
    "--log-level",
    settings.log_level.lower(),
    "--proxy-headers",
    "--forwarded-allow-ips",
    "*",
]

print(f"Starting {settings.app_name} on port {port_int}...", file=sys.stderr)
print(f"PYTHONPATH={os.environ['PYTHONPATH']}", file=sys.stderr)

try:
    result = subprocess.call(cmd)
    if result != 0:
        print(f"Uvicorn exited with code {result}", file=sys.stderr)
    sys.exit(result)
except KeyboardInterrupt:
    print("Server interrupted by user", file=sys.stderr)
    sys.exit(0)
