"""
Client session with the CGDSL language server.

The server binary speaks LSP over stdio. A session is started once, serves
any number of requests, and is stopped once; a failed request leaves it
usable.
"""

import logging
import os
from pathlib import Path
from typing import Any

from lsprotocol.types import (
    ClientCapabilities,
    InitializedParams,
    InitializeParams,
)
from pygls.lsp.client import LanguageClient

from cgdsl import __version__
from cgdsl.core.errors import SessionError
from cgdsl.core.manifest import ServerConfig

logger = logging.getLogger(__name__)

GENERATE_GRAPH = "cgdsl/generateGraph"


class LanguageSession:
    """
    One LSP session with the language server process.

    Usage:
        async with LanguageSession(config, root) as session:
            payload = await session.request_graph(Path("game.dot"))
    """

    def __init__(self, config: ServerConfig, root: Path | None = None):
        self.config = config
        self.root = root
        self.client: LanguageClient | None = None
        self._started = False
        self._stopped = False

    @property
    def running(self) -> bool:
        return self._started and not self._stopped

    async def start(self) -> None:
        if self._started:
            raise SessionError("Language server session already started")
        if not self.config.command.exists():
            raise SessionError(f"Language server missing at: {self.config.command}")

        self._started = True
        self.client = LanguageClient("cgdsl-client", __version__)
        logger.info(f"Starting language server: {self.config.command}")
        try:
            await self.client.start_io(str(self.config.command), *self.config.args)
            await self.client.initialize_async(
                InitializeParams(
                    capabilities=ClientCapabilities(),
                    process_id=os.getpid(),
                    root_uri=self.root.resolve().as_uri() if self.root else None,
                )
            )
            self.client.initialized(InitializedParams())
        except Exception as e:
            await self.stop()
            raise SessionError(f"Failed to start language server: {e}") from e

    async def stop(self) -> None:
        if not self._started or self._stopped or self.client is None:
            return
        self._stopped = True
        try:
            await self.client.shutdown_async(None)
            self.client.exit(None)
        except Exception as e:
            logger.warning(f"Language server did not shut down cleanly: {e}")
        finally:
            try:
                await self.client.stop()
            except Exception as e:
                logger.warning(f"Error stopping language server transport: {e}")
        logger.info("Language server stopped")

    async def request(self, method: str, params: Any) -> Any:
        if not self.running or self.client is None:
            raise SessionError(f"Cannot send '{method}': language server session is not running")
        return await self.client.protocol.send_request_async(method, params)

    async def request_graph(self, path: Path) -> Any:
        """Ask the server to write the relationship graph to ``path`` and return its payload."""
        return await self.request(GENERATE_GRAPH, {"path": str(path)})

    async def __aenter__(self) -> "LanguageSession":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()
