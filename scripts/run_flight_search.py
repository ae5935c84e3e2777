#!/usr/bin/env python3
"""Invoke the flight search handler locally with an API Gateway-style event."""

from __future__ import annotations

import argparse
import json
import logging
from typing import Any

from dotenv import load_dotenv

from flight_search.handler import lambda_handler


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run the flight search Lambda locally and print its response."
    )
    parser.add_argument("--from", dest="origin", default="DAC", help="Origin airport or city.")
    parser.add_argument("--to", dest="destination", default="LHR", help="Destination airport or city.")
    parser.add_argument("--date", default="2026-03-15", help="Departure date (YYYY-MM-DD).")
    parser.add_argument("--return-date", default=None, help="Return date for round trips.")
    parser.add_argument("--travelers", type=int, default=1)
    parser.add_argument("--children", type=int, default=0)
    parser.add_argument("--method", default="GET", help="HTTP method to simulate.")
    return parser.parse_args(args=args)


def build_event(args: argparse.Namespace) -> dict[str, Any]:
    """Return the API Gateway proxy event matching the CLI arguments."""

    params: dict[str, str] = {
        "from": args.origin,
        "to": args.destination,
        "date": args.date,
        "travelers": str(args.travelers),
        "tripType": "return" if args.return_date else "oneway",
    }
    if args.return_date:
        params["returnDate"] = args.return_date
    if args.children:
        params["children"] = str(args.children)
    return {"httpMethod": args.method.upper(), "queryStringParameters": params}


def main(raw_args: list[str] | None = None) -> None:
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    args = parse_args(raw_args)
    response = lambda_handler(build_event(args), None)
    body = json.loads(response["body"]) if response["body"] else None
    print(json.dumps({"statusCode": response["statusCode"], "body": body}, indent=2))


if __name__ == "__main__":
    main()
