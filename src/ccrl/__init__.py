"""Claude Code Remote Launcher: launch remote-control sessions from Slack."""

__version__ = "0.1.0"

__all__ = ["__version__"]
