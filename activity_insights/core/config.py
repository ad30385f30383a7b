"""
Application configuration for the activity insight engine.

Provides environment-aware settings with the defaults dashboards and fixtures
key off. Spike thresholds and ranking caps are configurable instead of being
literals scattered through the pipeline.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SpikeThresholds(BaseModel):
	"""
	Thresholds for the period-over-period spike rule.

	Rationale:
	- With no previous activity, a type needs a minimum absolute volume to count.
	- With a baseline, both a relative and an absolute increase are required so
	  that 1 -> 2 events never reads as a spike.
	"""

	zero_baseline_min: int = Field(
		5, ge=1, description="Current count that flags a type with no previous activity"
	)
	min_ratio: float = Field(1.6, gt=0.0, description="Minimum current/previous ratio (inclusive)")
	min_delta: int = Field(3, ge=0, description="Minimum current - previous increase (inclusive)")


class InsightConfig(BaseModel):
	"""
	Windowing and ranking configuration.

	Notes:
	- window_hours: size of each comparison window (current and previous).
	- volume_limit / anomaly_limit / actor_limit: ranking caps.
	- mini_limit: cap for the compact dashboard summary.
	- page_size: events requested from the source for one insight run.
	- mini_page_size: events requested for the compact dashboard summary.
	- export_page_size: events requested for the raw JSON export.
	- actor_scope: "current" ranks actors and counts categories over the
	  current window only, "snapshot" uses every fetched event.
	"""

	window_hours: float = Field(24.0, gt=0.0)
	volume_limit: int = Field(8, ge=1)
	anomaly_limit: int = Field(4, ge=1)
	actor_limit: int = Field(8, ge=1)
	mini_limit: int = Field(3, ge=1)
	page_size: int = Field(200, ge=1, le=1000)
	mini_page_size: int = Field(120, ge=1, le=1000)
	export_page_size: int = Field(1000, ge=1)
	actor_scope: Literal["current", "snapshot"] = "current"
	spike: SpikeThresholds = SpikeThresholds()


class SourceConfig(BaseModel):
	"""
	Event source (activity listing API) connection settings.
	"""

	base_url: str = Field("http://localhost:8000/api", description="Activity API root")
	token: Optional[str] = Field(None, description="Bearer token for the activity API")
	workspace_path: str = "/workspace/activity"
	admin_path: str = "/admin/activity"
	timeout_seconds: float = Field(10.0, gt=0.0)
	max_retries: int = Field(2, ge=0, le=5)


class Config(BaseSettings):
	"""
	Global configuration with environment overrides.
	"""

	model_config = SettingsConfigDict(
		env_prefix="ACTIVITY_INSIGHTS_",
		env_file=".env",
		env_nested_delimiter="__",
		extra="ignore",
	)

	log_level: str = Field("INFO", description="Default logging level")
	logs_dir: Path = Field(Path("logs"), description="Directory for log files")
	insights: InsightConfig = InsightConfig()
	source: SourceConfig = SourceConfig()

	def model_post_init(self, __context: object) -> None:
		self.logs_dir.mkdir(parents=True, exist_ok=True)


config = Config()
