# tests/conftest.py
import pytest
from unittest.mock import AsyncMock, MagicMock

from app.core.config import BoardConfig
from app.core.result import Result


@pytest.fixture
def board_config():
    return BoardConfig(
        _env_file=None,
        api_base_url="https://org.example.com",
        api_token="test-token",
        record_base_url="https://org.example.com/lightning/r/Product2",
        current_user_id="005xx0000001",
        profile_poll_interval=0,
    )


@pytest.fixture
def mock_line_item_service():
    service = MagicMock()
    service.fetch_line_items = AsyncMock(return_value=Result.success([]))
    service.delete_line_item = AsyncMock(return_value=Result.success(None))
    service.close = AsyncMock()
    return service


@pytest.fixture
def line_item_records():
    return [
        {"Id": "00k1", "Product2Id": "01t1", "Product2": {"Name": "Tracteur", "QuantityInStock__c": 5},
         "UnitPrice": 100.0, "TotalPrice": 200.0, "Quantity": 2},
        {"Id": "00k2", "Product2Id": "01t2", "Product2": {"Name": "Charrue", "QuantityInStock__c": 5},
         "UnitPrice": 50.0, "TotalPrice": 250.0, "Quantity": 5},
        {"Id": "00k3", "Product2Id": "01t3", "Product2": {"Name": "Semoir", "QuantityInStock__c": 4},
         "UnitPrice": 10.0, "TotalPrice": 60.0, "Quantity": 6},
    ]
