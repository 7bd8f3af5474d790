from __future__ import annotations

import asyncio
import base64
import json

import aiohttp
from aiohttp import ClientSession
from loguru import logger

from ofsc.core.models import Credentials
from ofsc.exceptions import AuthError


def basic_auth_value(credentials: Credentials) -> str:
    """
    Build the Basic-auth header value for the token exchange.

    The backend expects ``{client_id}@{instance_url}:{client_secret}``,
    base64-encoded.
    """
    user = f"{credentials.client_id}@{credentials.instance_url}"
    raw = f"{user}:{credentials.client_secret}"
    return "Basic " + base64.b64encode(raw.encode("utf-8")).decode("ascii")


class TokenProvider:
    """
    Exchanges client credentials for a bearer token.

    Stateless apart from the HTTP session it sends through. Failures are
    never retried here; the caller decides whether to try again.
    """

    def __init__(self, session: ClientSession) -> None:
        self.session = session

    async def acquire_token(self, credentials: Credentials) -> str:
        """
        Request a new access token with the client-credentials grant.

        Args:
            credentials (Credentials): Credentials of the target instance

        Returns:
            str: The access token

        Raises:
            AuthError: On any non-200 answer, network failure or malformed body
        """
        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "Authorization": basic_auth_value(credentials),
        }
        logger.debug(f"Requesting OAuth token for {credentials.instance_url}")
        try:
            async with self.session.post(
                credentials.token_url,
                headers=headers,
                data={"grant_type": "client_credentials"},
            ) as response:
                status = response.status
                body = await response.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Error fetching OAuth token: {type(e).__name__}: {e}")
            raise AuthError(f"Token request failed: {e}") from e

        if status != 200:
            logger.error(f"Error fetching OAuth token: HTTP {status}")
            raise AuthError(
                f"Token request failed with HTTP {status}", status=status, body=body
            )

        try:
            payload = json.loads(body)
        except ValueError as e:
            raise AuthError(
                "Token response is not valid JSON", status=status, body=body
            ) from e

        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not isinstance(token, str) or not token:
            raise AuthError(
                "Token response has no access_token", status=status, body=body
            )
        return token
