#!/usr/bin/env python3
"""
Run the story service API with uvicorn.

Usage:
    python cli/run_api.py
    python cli/run_api.py --port 9000 --reload
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import uvicorn


def main():
    parser = argparse.ArgumentParser(description="Run the illustrated story service API")

    parser.add_argument(
        "--host",
        type=str,
        default="0.0.0.0",
        help="Interface to bind (default: 0.0.0.0)",
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=8000,
        help="Port to listen on (default: 8000)",
    )

    parser.add_argument(
        "--reload",
        action="store_true",
        help="Restart on code changes (development only)",
    )

    args = parser.parse_args()

    uvicorn.run(
        "storyforge.api.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
    )


if __name__ == "__main__":
    main()
