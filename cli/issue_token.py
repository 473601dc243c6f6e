#!/usr/bin/env python3
"""
Mint a bearer token for local development.

Usage:
    python cli/issue_token.py user-123
    python cli/issue_token.py user-123 --days 1
"""

import argparse
import sys
from datetime import timedelta
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from storyforge.api.auth.tokens import create_access_token


def main():
    parser = argparse.ArgumentParser(
        description="Issue a JWT for calling the story API (signed with JWT_SECRET)",
    )

    parser.add_argument(
        "user_id",
        type=str,
        help="User id to place in the token subject; stories are owned by it",
    )

    parser.add_argument(
        "--days",
        type=int,
        default=None,
        help="Token lifetime in days (default: 30)",
    )

    args = parser.parse_args()

    expires = timedelta(days=args.days) if args.days else None
    print(create_access_token(args.user_id, expires_delta=expires))


if __name__ == "__main__":
    main()
