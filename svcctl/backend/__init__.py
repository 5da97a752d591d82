"""Platform service manager backends.

Provides a uniform contract over:
- systemd on Linux (D-Bus via busctl)
- the Service Control Manager on Windows (pywin32)
"""

from svcctl.backend.base import ServiceBackend, get_backend

__all__ = ["ServiceBackend", "get_backend"]
