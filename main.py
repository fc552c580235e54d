"""Pax Historia: dev launcher. Starts the API server in watch mode."""

import argparse
import os
import signal
import subprocess
import sys
from pathlib import Path

from dotenv import load_dotenv

ROOT = Path(__file__).parent
load_dotenv(ROOT / ".env")

HOST = os.getenv("HOST", "0.0.0.0")
PORT = os.getenv("PORT", "3001")


def main():
    parser = argparse.ArgumentParser(description="Pax Historia dev launcher")
    parser.add_argument("--data-dir", type=Path, default=None,
                        help="Data storage directory (default: ./data)")
    parser.add_argument("--llm-url", default=None,
                        help="Chat-completion backend base URL (overrides LLM_API_URL)")
    args = parser.parse_args()

    # Build env for the server process so create_app picks up the overrides
    env = os.environ.copy()
    if args.data_dir:
        env["DATA_DIR"] = str(args.data_dir.resolve())
    if args.llm_url:
        env["LLM_API_URL"] = args.llm_url

    procs: list[subprocess.Popen] = []

    def shutdown(*_):
        print("\nShutting down...")
        for p in procs:
            p.terminate()
        for p in procs:
            p.wait()
        sys.exit(0)

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    print(f"Starting Pax Historia on http://localhost:{PORT} ...")
    procs.append(subprocess.Popen(
        ["uvicorn", "pax_historia.app:create_app", "--factory", "--reload",
         "--host", HOST, "--port", PORT],
        cwd=ROOT, env=env,
    ))

    for p in procs:
        p.wait()


if __name__ == "__main__":
    main()
