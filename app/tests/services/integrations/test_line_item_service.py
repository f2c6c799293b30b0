import unittest
from unittest.mock import AsyncMock, MagicMock, patch

from app.core.config import BoardConfig
from app.core.exceptions import APIError, BoardException, ErrorSeverity, ValidationError
from app.core.result import Result
from app.models.line_item import LineItem
from app.services.api_clients.line_item_client import LineItemApiClient
from app.services.integrations.line_item_service import LineItemService, create_line_item_service


class TestLineItemService(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.config = BoardConfig(_env_file=None, api_base_url="https://org.example.com", api_token="tok")
        self.mock_client = AsyncMock(spec=LineItemApiClient)
        self.service = LineItemService(self.config, client=self.mock_client)
        await self.service.async_init()

    async def test_async_init_operational_with_token(self):
        self.assertTrue(self.service.is_operational)

    async def test_async_init_not_operational_without_token(self):
        service = LineItemService(BoardConfig(_env_file=None, api_token=None), client=self.mock_client)
        await service.async_init()
        self.assertFalse(service.is_operational)

        result = await service.fetch_line_items("006A")
        self.assertTrue(result.is_failure())
        self.assertEqual(result.error.severity, ErrorSeverity.WARNING)
        self.mock_client.get_line_items.assert_not_called()

    async def test_fetch_line_items_parses_records(self):
        self.mock_client.get_line_items.return_value = Result.success([
            {"Id": "00k1", "Product2Id": "01t1", "Product2": {"Name": "Tracteur", "QuantityInStock__c": 4},
             "UnitPrice": 10, "TotalPrice": 60, "Quantity": 6},
        ])

        result = await self.service.fetch_line_items("006A")

        self.assertTrue(result.is_success())
        self.assertEqual(len(result.value), 1)
        item = result.value[0]
        self.assertIsInstance(item, LineItem)
        self.assertEqual(item.product_name, "Tracteur")
        self.assertEqual(item.stock, 4)
        self.mock_client.get_line_items.assert_awaited_once_with("006A")

    async def test_fetch_empty_body_is_an_empty_list(self):
        self.mock_client.get_line_items.return_value = Result.success(None)
        result = await self.service.fetch_line_items("006A")
        self.assertEqual(result.value, [])

    async def test_fetch_non_list_is_a_validation_failure(self):
        self.mock_client.get_line_items.return_value = Result.success({"records": []})
        result = await self.service.fetch_line_items("006A")
        self.assertIsInstance(result.error, ValidationError)

    async def test_fetch_malformed_record_is_a_validation_failure(self):
        self.mock_client.get_line_items.return_value = Result.success([{"Quantity": 1}])
        result = await self.service.fetch_line_items("006A")
        self.assertIsInstance(result.error, ValidationError)

    async def test_fetch_with_non_object_product_is_a_validation_failure(self):
        self.mock_client.get_line_items.return_value = Result.success([{"Id": "00k1", "Product2": []}])
        result = await self.service.fetch_line_items("006A")
        self.assertIsInstance(result.error, ValidationError)
        self.assertEqual(result.error.field, "Product2")

    async def test_fetch_failure_is_passed_through(self):
        error = APIError("Service unavailable", status_code=503)
        self.mock_client.get_line_items.return_value = Result.failure(error)

        result = await self.service.fetch_line_items("006A")

        self.assertIs(result.error, error)

    async def test_delete_line_item(self):
        self.mock_client.delete_line_item.return_value = Result.success(None)

        result = await self.service.delete_line_item("00k1")

        self.assertTrue(result.is_success())
        self.mock_client.delete_line_item.assert_awaited_once_with("00k1")

    async def test_delete_failure_is_passed_through(self):
        self.mock_client.delete_line_item.return_value = Result.failure(BoardException("locked"))
        result = await self.service.delete_line_item("00k1")
        self.assertEqual(result.error.message, "locked")

    async def test_close(self):
        await self.service.close()
        self.mock_client.close.assert_awaited_once()
        self.assertFalse(self.service.is_operational)

    async def test_factory_creates_client(self):
        with patch('app.services.integrations.line_item_service.get_line_item_client') as mock_factory:
            mock_factory.return_value = MagicMock(spec=LineItemApiClient)
            service = await create_line_item_service(self.config)
        mock_factory.assert_called_once_with(self.config)
        self.assertTrue(service.is_operational)


if __name__ == '__main__':
    unittest.main()
