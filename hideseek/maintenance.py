import argparse
import asyncio
import logging

from hideseek.config import log_level, superseded_round_ttl_hours
from hideseek.db import init_db
from hideseek.routers.rounds import round_service


def get_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Round store maintenance")
    parser.add_argument("--init-db", action="store_true", help="Create missing tables")
    parser.add_argument(
        "--purge-hours",
        type=int,
        default=None,
        help=f"Delete rounds superseded more than N hours ago (server default {superseded_round_ttl_hours})",
    )
    return parser


async def main(init: bool, purge_hours: int | None):
    if init:
        await init_db()
        logging.info("Tables created")
    if purge_hours is not None:
        deleted = await round_service.delete_superseded_rounds(purge_hours)
        print(f"Deleted {deleted} superseded round(s)")


if __name__ == "__main__":
    logging.basicConfig(level=log_level)
    parser = get_parser()
    args = parser.parse_args()
    if not args.init_db and args.purge_hours is None:
        parser.error("nothing to do: pass --init-db and/or --purge-hours")
    asyncio.run(main(args.init_db, args.purge_hours))
