"""Command line entry points: run the REST API, issue caller tokens."""

import argparse
from datetime import timedelta

from privpool.config import PoolConfig, configure_logging
from privpool.security import create_access_token


def main() -> None:
    parser = argparse.ArgumentParser(description="Privacy pool REST API")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args()

    import uvicorn

    configure_logging(PoolConfig().log_level)
    uvicorn.run("privpool.api.routes:app", host=args.host, port=args.port)


def issue_token() -> None:
    """Print a Bearer token for an account, signed with the configured secret."""
    config = PoolConfig()
    parser = argparse.ArgumentParser(description="Issue a privacy pool access token")
    parser.add_argument("account")
    parser.add_argument("--hours", type=int, default=config.access_token_expire_hours)
    args = parser.parse_args()

    if not config.jwt_secret:
        parser.error("PRIVPOOL_JWT_SECRET is not set")

    token, expires = create_access_token(
        args.account,
        config.jwt_secret,
        algorithm=config.jwt_algorithm,
        expires_delta=timedelta(hours=args.hours),
    )
    print(token)
    print(f"# expires {expires.isoformat()}")


if __name__ == "__main__":
    main()
