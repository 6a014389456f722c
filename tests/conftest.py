from typing import Generator

import pytest

from config import config
from services.price_service import default_coingecko_directory


@pytest.fixture(autouse=True)
def _reset_process_caches() -> Generator[None, None, None]:
    config.cache_clear()
    default_coingecko_directory.cache_clear()
    yield
    config.cache_clear()
    default_coingecko_directory.cache_clear()
