#!/usr/bin/env python3
"""Issue a bearer token for local development.

Usage:
    python scripts/issue_token.py --subject maria --role admin
    python scripts/issue_token.py --subject joao --role customer --ttl 30
"""

import argparse
import sys
from datetime import timedelta
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from loja.api.auth import Role
from loja.infrastructure.security import create_access_token


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Issue a signed bearer token")
    parser.add_argument("--subject", required=True, help="Token subject (user name)")
    parser.add_argument(
        "--role",
        action="append",
        dest="roles",
        choices=[r.value for r in Role],
        required=True,
        help="Role to grant (repeatable)",
    )
    parser.add_argument(
        "--ttl",
        type=int,
        default=None,
        metavar="MINUTES",
        help="Token lifetime in minutes (default: configured TTL)",
    )

    args = parser.parse_args()
    expires = timedelta(minutes=args.ttl) if args.ttl else None

    print(create_access_token(args.subject, args.roles, expires_delta=expires))


if __name__ == "__main__":
    main()
