import pytest
from faker import Faker


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def faker_instance() -> Faker:
    """Create a Faker instance for test data generation."""
    return Faker()
