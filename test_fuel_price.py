import unittest

import httpx

from fuel_price import FuelPriceClient, LocalFuelPrice, StaticFuelPrice

URL = "https://prices.example/"


def client_returning(handler):
    return FuelPriceClient(base_url=URL, transport=httpx.MockTransport(handler))


class TestFuelPriceClient(unittest.IsolatedAsyncioTestCase):

    async def test_returns_average_e10_price(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"avgE10PencePerLitre": 139.9})

        price = await client_returning(handler).get_price(51.5, -0.12)
        self.assertEqual(price, 139.9)
        params = seen[0].url.params
        self.assertEqual(params["lat"], "51.5")
        self.assertEqual(params["lng"], "-0.12")
        self.assertEqual(params["radius"], "10")

    async def test_server_error_gives_none(self):
        client = client_returning(lambda request: httpx.Response(503))
        with self.assertLogs("fuel_price", level="WARNING"):
            self.assertIsNone(await client.get_price(0, 0))

    async def test_missing_field_gives_none(self):
        client = client_returning(lambda request: httpx.Response(200, json={"stations": []}))
        with self.assertLogs("fuel_price", level="WARNING"):
            self.assertIsNone(await client.get_price(0, 0))

    async def test_non_json_gives_none(self):
        client = client_returning(lambda request: httpx.Response(200, text="<html>"))
        with self.assertLogs("fuel_price", level="WARNING"):
            self.assertIsNone(await client.get_price(0, 0))

    async def test_connection_error_gives_none(self):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        with self.assertLogs("fuel_price", level="WARNING"):
            self.assertIsNone(await client_returning(handler).get_price(0, 0))

    async def test_providers(self):
        client = client_returning(lambda request: httpx.Response(200, json={"avgE10PencePerLitre": "141.2"}))
        self.assertEqual(await LocalFuelPrice(client, 51.5, -0.12)(), 141.2)
        self.assertEqual(await StaticFuelPrice(135.0)(), 135.0)


if __name__ == '__main__':
    unittest.main()
