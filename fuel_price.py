# fuel_price.py
#
# MIT License
#
# Copyright (c) 2025 Chris Cullin

import logging

import httpx

import constants as c

logger = logging.getLogger(__name__)


class FuelPriceClient:
    """
    Looks up the local average E10 price (pence per litre) from the price proxy.

    Any transport, status or payload problem is logged and reported as None so
    a drive can still be saved without a cost.
    """

    def __init__(self, base_url=c.FUEL_PRICE_URL, timeout=c.FUEL_PRICE_TIMEOUT_S, transport=None):
        self.base_url = base_url
        self.timeout = timeout
        self._transport = transport

    async def get_price(self, lat, lng, radius=c.FUEL_PRICE_RADIUS_KM):
        params = {"lat": lat, "lng": lng, "radius": radius}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(self.base_url, params=params)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            logger.warning("Fuel price lookup failed: %s", e)
            return None
        except ValueError as e:
            logger.warning("Fuel price response was not JSON: %s", e)
            return None

        price = data.get("avgE10PencePerLitre") if isinstance(data, dict) else None
        if price is None:
            logger.warning("Fuel price unavailable for %.4f, %.4f", lat, lng)
            return None
        try:
            return float(price)
        except (TypeError, ValueError):
            logger.warning("Fuel price field is not numeric: %r", price)
            return None


class LocalFuelPrice:
    """Binds a FuelPriceClient to the home location so the controller can call it with no args."""

    def __init__(self, client, lat, lng):
        self.client = client
        self.lat = lat
        self.lng = lng

    async def __call__(self):
        return await self.client.get_price(self.lat, self.lng)


class StaticFuelPrice:
    """A fixed, user-entered price."""

    def __init__(self, pence_per_litre):
        self.pence_per_litre = pence_per_litre

    async def __call__(self):
        return self.pence_per_litre
