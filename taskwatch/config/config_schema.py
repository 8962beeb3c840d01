"""Pydantic models for configuration validation."""

import os
import re
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

_ENV_REF = re.compile(r"^\$\{([A-Za-z_][A-Za-z0-9_]*)\}$")


class NotionConfig(BaseModel):
    """Notion API configuration."""

    api_key: str = Field(..., description="Notion integration secret, or ${ENV_VAR}")
    root_page_id: Optional[str] = Field(default=None, description="Workspace root page ID")
    root_page_url: Optional[str] = Field(default=None, description="Workspace root page URL")
    rate_limit_delay: float = Field(default=0.35, ge=0.0, description="Delay between API calls (seconds)")
    timeout_ms: int = Field(default=30000, gt=0, description="Per-request timeout (milliseconds)")
    page_size: int = Field(default=100, ge=1, le=100, description="Results per paginated request")

    @field_validator("api_key")
    @classmethod
    def resolve_env_reference(cls, v: str) -> str:
        """Expand ${ENV_VAR} references from the environment."""
        match = _ENV_REF.match(v.strip())
        if not match:
            return v
        value = os.environ.get(match.group(1))
        if not value:
            raise ValueError(f"Environment variable '{match.group(1)}' is not set")
        return value

    def resolve_root_id(self) -> str:
        """Return the root page ID, extracting it from the URL if needed."""
        if self.root_page_id:
            return self.root_page_id
        if self.root_page_url:
            from ..notion.client import extract_page_id_from_url

            return extract_page_id_from_url(self.root_page_url)
        raise ValueError("Either root_page_id or root_page_url must be configured")


class DiscoveryConfig(BaseModel):
    """Workspace discovery configuration."""

    max_depth: int = Field(default=1, ge=0, le=5, description="Levels of nested pages to descend into")
    max_workers: int = Field(default=4, ge=1, le=16, description="Parallel collection reads per level")


class MonitorConfig(BaseModel):
    """Status monitor configuration."""

    enabled: bool = Field(default=True, description="Start the monitor with the web server")
    interval_seconds: float = Field(default=60.0, gt=0, description="Seconds between poll ticks")
    read_timeout_seconds: float = Field(default=20.0, gt=0, description="Timeout for one collection read")
    admin_email: Optional[str] = Field(default=None, description="Fallback recipient for change events")
    collection_ids: List[str] = Field(
        default_factory=list,
        description="Collections to watch; empty means every collection under the root page",
    )


class WebConfig(BaseModel):
    """HTTP trigger surface configuration."""

    host: str = Field(default="127.0.0.1", description="Bind address")
    port: int = Field(default=8765, ge=1, le=65535, description="Bind port")


class AppConfig(BaseModel):
    """Main application configuration."""

    notion: NotionConfig = Field(..., description="Notion configuration")
    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig, description="Discovery configuration")
    monitor: MonitorConfig = Field(default_factory=MonitorConfig, description="Monitor configuration")
    web: WebConfig = Field(default_factory=WebConfig, description="Web server configuration")
    log_file: Optional[str] = Field(default=None, description="Log file path (default: logs/taskwatch_<ts>.log)")

    def validate(self) -> None:
        """Validate configuration consistency."""
        # Raises ValueError for a missing root or an unparseable URL
        self.notion.resolve_root_id()

        if self.monitor.read_timeout_seconds >= self.monitor.interval_seconds:
            raise ValueError(
                "monitor.read_timeout_seconds must be shorter than monitor.interval_seconds"
            )
