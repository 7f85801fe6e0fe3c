#!/usr/bin/env python3
"""
Example HTTP Client for the Auth Server

Walks through register -> login -> refresh -> logout, then shows the
throttle kicking in after repeated wrong passwords.

Usage:
    # Terminal 1: Start the server
    JWT_SECRET=... JWT_REFRESH_SECRET=... python -m auth_server

    # Terminal 2: Run this client
    python examples/example_client.py
"""

import asyncio
import logging
from typing import Any, Dict, Optional, Tuple

import aiohttp

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("auth_client")


class AuthClient:
    """Small client for the /auth/* endpoints"""

    def __init__(self, base_url: str = "http://localhost:3000"):
        self.base_url = base_url.rstrip("/")
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "AuthClient":
        self.session = aiohttp.ClientSession()
        return self

    async def __aexit__(self, *exc) -> None:
        if self.session:
            await self.session.close()
            self.session = None

    async def post(self, path: str, body: Dict[str, Any]) -> Tuple[int, Dict[str, Any]]:
        """POST a JSON body, return (status, JSON response)"""
        async with self.session.post(f"{self.base_url}{path}", json=body) as resp:
            return resp.status, await resp.json()

    async def register(self, email: str, password: str, name: str = ""):
        return await self.post(
            "/auth/register", {"email": email, "password": password, "name": name}
        )

    async def login(self, email: str, password: str):
        return await self.post("/auth/login", {"email": email, "password": password})

    async def refresh(self, refresh_token: str):
        return await self.post("/auth/refresh", {"refreshToken": refresh_token})

    async def logout(self, refresh_token: str):
        return await self.post("/auth/logout", {"refreshToken": refresh_token})


async def main():
    """Run the demo flow"""
    async with AuthClient() as client:
        status, body = await client.register("demo@example.com", "secret1", "Demo")
        logger.info(f"register -> {status} {body}")

        status, body = await client.login("demo@example.com", "secret1")
        logger.info(f"login -> {status} expiresIn={body.get('expiresIn')}")
        if status != 200:
            return
        refresh_token = body["refreshToken"]

        status, body = await client.refresh(refresh_token)
        logger.info(f"refresh -> {status} expiresIn={body.get('expiresIn')}")

        status, body = await client.logout(refresh_token)
        logger.info(f"logout -> {status} {body}")

        status, body = await client.refresh(refresh_token)
        logger.info(f"refresh after logout -> {status} {body}")

        for _ in range(6):
            status, body = await client.login("demo@example.com", "wrong-password")
            logger.info(f"wrong password -> {status} {body}")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except aiohttp.ClientConnectorError as e:
        logger.error(f"Server not reachable: {e}")
