# ordercore/services/product_client.py
from typing import Protocol

import requests
from requests import RequestException

from ordercore.domain.errors import InternalError
from ordercore.domain.schemas import ProductSnapshot
from ordercore.utils.retry import http_retry
from ordercore.utils.settings import PRODUCT_CLIENT_TIMEOUT, PRODUCT_SERVICE_URL
from ordercore.utils.logging import get_logger

logger = get_logger(__name__)


class CatalogReader(Protocol):
    """Odczyt katalogu - tylko do odczytu z punktu widzenia koszyka i zamowien."""

    def get_product_snapshot(self, product_id: int) -> ProductSnapshot | None: ...


class ProductClient:
    def __init__(self, base_url: str | None = None, timeout: int | None = None):
        self.base_url = (base_url or PRODUCT_SERVICE_URL).rstrip("/")
        self.timeout = timeout or PRODUCT_CLIENT_TIMEOUT

    @http_retry()
    def fetch_product(self, product_id: int) -> dict | None:
        url = f"{self.base_url}/products/{product_id}"
        logger.info(f"ProductClient GET {url}")

        resp = requests.get(url, timeout=self.timeout)
        # 404 to odpowiedz, nie blad sieci - nie ponawiamy
        if resp.status_code == 404:
            return None
        resp.raise_for_status()
        return resp.json()

    def get_product_snapshot(self, product_id: int) -> ProductSnapshot | None:
        try:
            data = self.fetch_product(product_id)
        except RequestException as e:
            logger.error(f"product-service niedostepny dla produktu {product_id}: {e}")
            raise InternalError("catalog unavailable") from e

        if data is None:
            return None
        return ProductSnapshot.model_validate(data)
