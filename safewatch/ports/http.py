"""
HTTP fetch port interface.

This module defines the protocol used by feed adapters to reach
their upstream providers.
"""

from typing import Any, Dict, Optional, Protocol

class HttpFetchPort(Protocol):
    """Upstream fetch interface"""

    async def get_text(self, url: str, params: Optional[Dict[str, Any]] = None) -> str:
        """
        GET a URL and return its body.

        Raises:
            UpstreamUnavailable: network error, timeout or non-2xx status
        """
        ...

    async def get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET a URL and decode its JSON body."""
        ...
