"""Configuration schema definitions using dataclasses.

Defines the structure of the TOML job file with sensible defaults.
"""

from dataclasses import dataclass, field
from typing import Optional

from ..core.models import Job

CONFIG_VERSION = "1.0"


@dataclass
class GlobalConfig:
    """Global configuration settings.

    Attributes:
        parallel_actions: Max concurrent file operations per directory job
        log_file: Path to log file (None for no file logging)
    """

    parallel_actions: int = 16
    log_file: Optional[str] = None


@dataclass
class Config:
    """Root configuration object.

    Attributes:
        version: Configuration file version
        global_config: Global settings that apply to all jobs
        jobs: Persisted backup jobs
    """

    version: str = CONFIG_VERSION
    global_config: GlobalConfig = field(default_factory=GlobalConfig)
    jobs: list[Job] = field(default_factory=list)

    def get_job(self, job_id: int) -> Optional[Job]:
        """Return the job with the given id, if any."""
        for job in self.jobs:
            if job.id == job_id:
                return job
        return None
