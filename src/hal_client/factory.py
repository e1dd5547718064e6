from __future__ import annotations

import logging
from typing import Optional

import httpx

from .client import HalClient, URLTypes
from .config import ClientConfig
from .parser import Parser


def create_client(
    transport: Optional[httpx.AsyncClient] = None,
    *,
    config: Optional[ClientConfig] = None,
    parser: Optional[Parser] = None,
    logger: Optional[logging.Logger] = None,
) -> HalClient:
    """
    Create a HalClient, optionally around a caller-supplied (preconfigured or
    mocked) httpx.AsyncClient. The returned client takes ownership of it.
    """
    return HalClient(config=config, parser=parser, logger=logger, http=transport)


def create_client_from_env(
    transport: Optional[httpx.AsyncClient] = None,
    *,
    parser: Optional[Parser] = None,
    logger: Optional[logging.Logger] = None,
    **overrides,
) -> HalClient:
    """
    Create a HalClient from HAL_CLIENT_* environment variables. Keyword
    overrides (e.g. max_redirects=3) are ClientConfig fields and win over the
    environment; pass a full config to create_client() instead.
    """
    if "config" in overrides:
        raise TypeError(
            "create_client_from_env() builds its own config; "
            "use create_client(config=...) instead."
        )
    return create_client(
        transport,
        config=ClientConfig.from_env(**overrides),
        parser=parser,
        logger=logger,
    )


class HalClientFactory:
    """
    Reusable client factory. Subclasses customise clients by overriding
    configure(), which receives the factory's config and returns the one
    handed to each new client.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        *,
        parser: Optional[Parser] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = config if config is not None else ClientConfig()
        self.parser = parser
        self.logger = logger

    def configure(self, config: ClientConfig) -> ClientConfig:
        return config

    def create_client(
        self, transport: Optional[httpx.AsyncClient] = None
    ) -> HalClient:
        return create_client(
            transport,
            config=self.configure(self.config),
            parser=self.parser,
            logger=self.logger,
        )

    async def create_client_with_root(
        self,
        url: Optional[URLTypes] = None,
        *,
        transport: Optional[httpx.AsyncClient] = None,
    ) -> HalClient:
        """
        Create a client and store the API root (GET `url`, default the base
        address) in client.root. The client is closed if the fetch fails.
        """
        client = self.create_client(transport)
        target = url if url is not None else client.base_url
        if not target:
            await client.aclose()
            raise ValueError("A root url or a configured base_url is required.")

        try:
            client.root = await client.get(target)
        except BaseException:
            await client.aclose()
            raise
        return client


__all__ = [
    "create_client",
    "create_client_from_env",
    "HalClientFactory",
]
