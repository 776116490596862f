import httpx


class TokenHttpClient:
    """httpx session that stamps the Snyk API token on every request."""

    def __init__(self, api_token: str, client: httpx.AsyncClient = None):
        self.api_token = api_token
        self.session = client or httpx.AsyncClient()

    async def request(self, method: str, url: str, **kwargs) -> httpx.Response:
        headers = kwargs.pop("headers", None) or {}
        headers["Authorization"] = f"token {self.api_token}"
        headers.setdefault("Content-Type", "application/json")

        return await self.session.request(
            method,
            url,
            headers=headers,
            **kwargs,
        )

    async def get(self, url: str, **kwargs) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs) -> httpx.Response:
        return await self.request("POST", url, **kwargs)

    async def put(self, url: str, **kwargs) -> httpx.Response:
        return await self.request("PUT", url, **kwargs)

    async def delete(self, url: str, **kwargs) -> httpx.Response:
        return await self.request("DELETE", url, **kwargs)

    async def aclose(self) -> None:
        await self.session.aclose()
