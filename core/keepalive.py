"""Periodic self-ping to keep hosted instances awake."""

import asyncio
import requests
from fastapi.concurrency import run_in_threadpool
from core.logging import log


def ping_self(url: str, timeout: float = 10.0) -> bool:
    """Call the liveness endpoint once.
    
    Never raises; every failure is logged and reported as False.
    
    Args:
        url: Base URL of this service
        timeout: Request timeout in seconds
        
    Returns:
        bool: True if the server answered successfully
    """
    try:
        resp = requests.get(url, timeout=timeout)
        resp.raise_for_status()
        log.info(f"Server pinged successfully: {resp.json().get('message')}")
        return True
    except Exception as e:
        log.error(f"Error pinging server: {str(e)}")
        return False


async def keep_alive(url: str, interval_seconds: float):
    """Ping ``url`` every ``interval_seconds`` until cancelled."""
    log.info(f"Keep-alive enabled: pinging {url} every {interval_seconds}s")
    while True:
        await asyncio.sleep(interval_seconds)
        await run_in_threadpool(ping_self, url)
