"""Command-line client for the operator control service.

Usage:
    aternos-ctl state     Show coordinator state and last reachability
    aternos-ctl status    Probe the server now
    aternos-ctl unlock    Clear the sticky /startserver lock
"""

from __future__ import annotations

import asyncio
import json
import sys

import httpx

from ..config import CONTROL_URL

COMMANDS = {
    "state": ("GET", "/state"),
    "status": ("GET", "/status"),
    "unlock": ("POST", "/unlock"),
}


async def call_control_service(method: str, path: str, base_url: str = CONTROL_URL) -> dict:
    """Make a request to the control service."""
    url = f"{base_url}{path}"
    try:
        async with httpx.AsyncClient(timeout=30.0) as client:
            if method == "GET":
                resp = await client.get(url)
            else:
                resp = await client.post(url)

            if resp.status_code >= 400:
                return {"error": f"HTTP {resp.status_code}"}
            return resp.json()

    except httpx.ConnectError:
        return {
            "error": f"Control service is not reachable at {base_url}. "
            "It starts together with the bot (aternos-bot)."
        }
    except httpx.TimeoutException:
        return {"error": "Control service timed out."}
    except Exception as e:
        return {"error": f"Failed to connect to control service: {e}"}


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1 or args[0] not in COMMANDS:
        print(__doc__.strip(), file=sys.stderr)
        return 2

    method, path = COMMANDS[args[0]]
    result = asyncio.run(call_control_service(method, path))
    if "error" in result:
        print(f"Error: {result['error']}", file=sys.stderr)
        return 1
    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
