"""Standalone daygrid command-line tools (installed as console scripts)."""

__all__: list[str] = []
