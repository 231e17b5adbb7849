"""
License plate decoder - auto.dev API integration

Posts a plate photo to auto.dev and returns the VIN registered to it.
"""
import logging
from typing import Optional

import httpx

from config import settings
from errors import BackendUnavailable

logger = logging.getLogger(__name__)


class PlateDecoder:
    """Service for decoding license plate images to VINs"""

    def __init__(self, api_key: str = None, api_url: str = None, timeout: float = None,
                 transport: httpx.BaseTransport = None):
        self.api_key = settings.AUTODEV_API_KEY if api_key is None else api_key
        self.api_url = api_url or settings.AUTODEV_API_URL
        self.timeout = timeout or settings.PLATE_DECODER_TIMEOUT
        self.transport = transport

    def decode_plate_to_vin(self, image: bytes) -> Optional[str]:
        """
        Decode a license plate image to a VIN.

        Args:
            image: JPEG bytes of the plate photo

        Returns:
            The decoded VIN, or None if the service found none

        Raises:
            BackendUnavailable: If the API key is missing or the request fails
        """
        if not self.api_key:
            logger.error("[PLATE] auto.dev API key is not configured. Set AUTODEV_API_KEY.")
            raise BackendUnavailable("Plate decoding service is not configured. API key is missing.")

        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(
                    self.api_url,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                    files={"image": ("plate.jpg", image, "image/jpeg")},
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error("[PLATE] auto.dev API error %s: %s", e.response.status_code, e.response.text)
            raise BackendUnavailable(
                f"Failed to process plate decoding: API request failed with status {e.response.status_code}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error("[PLATE] Error decoding plate from image via auto.dev: %s", e)
            raise BackendUnavailable(f"Failed to process plate decoding: {e}") from e

        vin = data.get("vin") if isinstance(data, dict) else None
        if vin:
            return vin.strip().upper()

        logger.warning("[PLATE] auto.dev response did not contain a VIN: %s", data)
        return None
