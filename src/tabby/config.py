# ABOUTME: Endpoint configuration for the recognition and search services.
# ABOUTME: Reads service base URLs from the environment with local defaults.

import os
from collections.abc import Mapping
from dataclasses import dataclass

GPU_API_URL_ENV = "TABBY_GPU_API_URL"
CPU_API_URL_ENV = "TABBY_CPU_API_URL"

DEFAULT_GPU_API_URL = "http://localhost:8000"
DEFAULT_CPU_API_URL = "http://localhost:8001"
DEFAULT_TIMEOUT = 30.0


def normalize_base_url(url: str) -> str:
    """Strip surrounding whitespace and any trailing slashes from a base URL."""
    return url.strip().rstrip("/")


@dataclass(frozen=True)
class ApiSettings:
    """Base URLs for the two remote services.

    The GPU host runs image recognition (scan_cover / scan_shelf); the CPU
    host runs the book search endpoint.
    """

    gpu_url: str = DEFAULT_GPU_API_URL
    cpu_url: str = DEFAULT_CPU_API_URL
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        object.__setattr__(self, "gpu_url", normalize_base_url(self.gpu_url))
        object.__setattr__(self, "cpu_url", normalize_base_url(self.cpu_url))
        if self.timeout <= 0:
            msg = f"timeout must be positive, got {self.timeout}"
            raise ValueError(msg)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ApiSettings":
        """Build settings from environment variables, falling back to defaults."""
        env = os.environ if environ is None else environ
        return cls(
            gpu_url=env.get(GPU_API_URL_ENV) or DEFAULT_GPU_API_URL,
            cpu_url=env.get(CPU_API_URL_ENV) or DEFAULT_CPU_API_URL,
        )
