"""
Channel directory.
"""

from wschat.errors import ChatClientError
from wschat.transport.http import HttpClient


class ChannelsAPI:
    def __init__(self, http: HttpClient):
        self._http = http

    async def list(self) -> list[str]:
        """Names of the channels that currently exist on the server."""
        data = await self._http.get("/channels", authenticated=False)
        if not isinstance(data, list) or not all(isinstance(c, str) for c in data):
            raise ChatClientError("http_error", "Unexpected channel list response")
        return data
