# ABOUTME: Shared Click options for Tabby CLI commands.
# ABOUTME: Service URL options fall back to the TABBY_*_API_URL environment variables.

import click

from tabby.config import (
    CPU_API_URL_ENV,
    DEFAULT_CPU_API_URL,
    DEFAULT_GPU_API_URL,
    GPU_API_URL_ENV,
)

gpu_url_option = click.option(
    "--gpu-url",
    "gpu_url",
    envvar=GPU_API_URL_ENV,
    default=DEFAULT_GPU_API_URL,
    show_envvar=True,
    help=f"Recognition service base URL (default: {DEFAULT_GPU_API_URL})",
)

cpu_url_option = click.option(
    "--cpu-url",
    "cpu_url",
    envvar=CPU_API_URL_ENV,
    default=DEFAULT_CPU_API_URL,
    show_envvar=True,
    help=f"Search service base URL (default: {DEFAULT_CPU_API_URL})",
)
