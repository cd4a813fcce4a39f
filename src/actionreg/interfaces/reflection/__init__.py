"""Reflection API for inspecting registry contents over HTTP."""

from .server import maybe_start_reflection_api, run_reflection_api, start_reflection_api, stop_reflection_api

__all__ = [
    "maybe_start_reflection_api",
    "run_reflection_api",
    "start_reflection_api",
    "stop_reflection_api",
]
