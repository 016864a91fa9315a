from __future__ import annotations

from typing import Dict, Optional

import requests

from reservation_client.config import Config


def check_api_health(api_url: Optional[str] = None, timeout: Optional[float] = None) -> Dict[str, str]:
    """Send a trivial GraphQL query to make sure the remote API answers."""
    try:
        response = requests.post(
            api_url or Config.API_URL,
            json={"query": "{ __typename }"},
            timeout=timeout or Config.API_TIMEOUT_SECONDS,
        )
    except requests.RequestException as exc:
        return {"status": "DOWN", "detail": str(exc)}
    if response.status_code != 200:
        return {"status": "DOWN", "detail": f"HTTP {response.status_code}"}
    return {"status": "UP"}
