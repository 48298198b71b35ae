"""Ethereal Overseer: dev launcher. Starts the API server in watch mode."""

import argparse
import logging
import os
import signal
import subprocess
import sys
from pathlib import Path

from dotenv import load_dotenv

ROOT = Path(__file__).parent
load_dotenv(ROOT / ".env")

HOST = os.getenv("HOST", "0.0.0.0")
PORT = os.getenv("PORT", "13013")
LOG_LEVEL = os.getenv("LOG_LEVEL", "info")


def main():
    parser = argparse.ArgumentParser(description="Ethereal Overseer dev launcher")
    parser.add_argument("--data-dir", type=Path, default=None,
                        help="Settings storage directory (default: ./data)")
    parser.add_argument("--provider", choices=["gemini", "lmstudio"], default=None,
                        help="Persist this LLM provider before starting")
    args = parser.parse_args()

    logging.basicConfig(level=LOG_LEVEL.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if args.provider:
        from overseer import settings
        settings.init_settings(args.data_dir or ROOT / "data")
        settings.update_settings({"llm_provider": args.provider})

    # Build env for the subprocess so the app picks up the same data dir
    env = os.environ.copy()
    if args.data_dir:
        env["DATA_DIR"] = str(args.data_dir.resolve())

    print(f"Starting API on http://localhost:{PORT} ...")
    proc = subprocess.Popen(
        ["uv", "run", "uvicorn", "overseer.app:app", "--reload",
         "--host", HOST, "--port", PORT, "--log-level", LOG_LEVEL.lower()],
        cwd=ROOT, env=env,
    )

    def shutdown(*_):
        print("\nShutting down...")
        proc.terminate()
        proc.wait()
        sys.exit(0)

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)
    proc.wait()


if __name__ == "__main__":
    main()
