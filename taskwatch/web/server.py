"""FastAPI server exposing discovery and monitor controls."""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, HTTPException, Query

from ..errors import TraversalError
from ..monitor.status_monitor import StatusMonitor
from ..notion.discovery import WorkspaceDiscovery

logger = logging.getLogger(__name__)


class TaskwatchServer:
    """HTTP trigger surface for discovery and the status monitor."""

    def __init__(
        self,
        discovery: WorkspaceDiscovery,
        monitor: StatusMonitor,
        root_id: str,
        host: str = "127.0.0.1",
        port: int = 8765,
        start_monitor: bool = True,
    ):
        self.discovery = discovery
        self.monitor = monitor
        self.root_id = root_id
        self.host = host
        self.port = port
        self.start_monitor = start_monitor
        self.app = FastAPI(title="taskwatch", lifespan=self._lifespan)
        self._server: Optional[uvicorn.Server] = None

        self._setup_routes()

    @asynccontextmanager
    async def _lifespan(self, app: FastAPI):
        """Start the monitor with the app and stop it on shutdown."""
        if self.start_monitor:
            await self.monitor.start()
        try:
            yield
        finally:
            await self.monitor.stop()

    def _setup_routes(self):
        """Configure FastAPI routes."""

        @self.app.get("/api/health")
        async def health():
            return {"status": "ok"}

        @self.app.get("/api/workspace/discover")
        async def discover(user_email: str = Query(..., min_length=3)):
            """Discover the pages and databases belonging to a user."""
            try:
                result = await asyncio.to_thread(
                    self.discovery.discover, self.root_id, user_email
                )
            except TraversalError as e:
                logger.error(f"Discovery failed for {user_email}: {e}")
                raise HTTPException(status_code=502, detail="Failed to discover workspace")
            return result.to_dict()

        @self.app.get("/api/workspace/hierarchy")
        async def hierarchy():
            """Summarize pages, databases and record counts under the root."""
            try:
                summary = await asyncio.to_thread(
                    self.discovery.summarize_hierarchy, self.root_id
                )
            except TraversalError as e:
                logger.error(f"Hierarchy summary failed: {e}")
                raise HTTPException(status_code=502, detail="Failed to read workspace hierarchy")
            return summary.to_dict()

        @self.app.get("/api/monitor/status")
        async def monitor_status():
            return self.monitor.get_status().to_dict()

        @self.app.post("/api/monitor/start")
        async def monitor_start():
            await self.monitor.start()
            return self.monitor.get_status().to_dict()

        @self.app.post("/api/monitor/stop")
        async def monitor_stop():
            await self.monitor.stop()
            return self.monitor.get_status().to_dict()

        @self.app.post("/api/monitor/check")
        async def monitor_check():
            """Run one status check now."""
            result = await self.monitor.run_tick()
            if result.rejected:
                raise HTTPException(status_code=409, detail="A status check is already running")
            return result.to_dict()

        @self.app.post("/api/monitor/cache/clear")
        async def monitor_clear_cache():
            self.monitor.clear_cache()
            return self.monitor.get_status().to_dict()

    async def start(self) -> None:
        """Start the web server."""
        config = uvicorn.Config(
            self.app,
            host=self.host,
            port=self.port,
            log_level="warning",
            access_log=False,
        )
        self._server = uvicorn.Server(config)
        await self._server.serve()

    async def stop(self) -> None:
        """Stop the web server."""
        if self._server:
            self._server.should_exit = True

    def get_url(self) -> str:
        """Get the base URL of the server."""
        return f"http://{self.host}:{self.port}"
