"""Single status query against a Java Edition server, via mcstatus."""

from __future__ import annotations

import asyncio
import json

from mcstatus import JavaServer
from mcstatus.status_response import JavaStatusResponse

from ..constants import MALFORMED_STATUS_ERROR
from ..errors import MalformedResponse, StatusProtocolError, TransportError


async def query_status(host: str, port: int, timeout: float) -> JavaStatusResponse:
    """Perform one status exchange.

    Raises:
        TransportError: connection, DNS, timeout or bad address.
        StatusProtocolError: the reply could not be decoded.
        MalformedResponse: the reply decoded but lacks player or version data.
    """
    try:
        server = JavaServer(host, port, timeout=timeout)
        return await server.async_status(tries=1)
    except asyncio.TimeoutError as e:
        raise TransportError(f"Timed out after {timeout:g}s connecting to {host}:{port}") from e
    except (asyncio.IncompleteReadError, json.JSONDecodeError) as e:
        raise StatusProtocolError(f"Invalid status response: {e}") from e
    except (KeyError, TypeError) as e:
        raise MalformedResponse(MALFORMED_STATUS_ERROR) from e
    except OSError as e:
        # mcstatus reports undecodable replies as a bare IOError without errno
        if type(e) is OSError and e.errno is None:
            if isinstance(e.__cause__, KeyError):
                raise MalformedResponse(MALFORMED_STATUS_ERROR) from e
            raise StatusProtocolError(str(e) or "Invalid status response") from e
        raise TransportError(str(e) or e.__class__.__name__) from e
    except (ValueError, OverflowError) as e:
        raise TransportError(str(e) or e.__class__.__name__) from e
