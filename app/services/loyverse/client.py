import json
import logging
import httpx
from typing import Dict, List, Optional, Any, Union
from datetime import datetime, timezone

from app.core.enums import CatalogCollection
from app.core.exceptions import LoyverseAPIError, UnsupportedCollectionError
from app.core.config import get_settings

logger = logging.getLogger(__name__)

class LoyverseClient:
    """
    Asynchronous client for the Loyverse REST API (v1.0).

    Functionality: bearer-token authentication and cursor-paginated reads of the
    catalog collections (categories, items, variants, inventory levels), either in
    full (fetch_all) or filtered to records updated at or after a timestamp
    (fetch_updated_since). All failures surface as LoyverseAPIError.

    Documentation: https://developer.loyverse.com/docs/
    """

    DEFAULT_BASE_URL = "https://api.loyverse.com/v1.0"
    PAGE_SIZE = 250

    def __init__(
        self,
        api_token: Optional[str] = None,
        base_url: Optional[str] = None,
        page_size: Optional[int] = None,
        timeout: Optional[float] = None
    ):
        """
        Initialize the Loyverse client

        Args:
            api_token: Loyverse API access token (defaults to settings)
            base_url: API root (defaults to settings)
            page_size: Records requested per page
            timeout: Per-request timeout in seconds
        """
        settings = get_settings()
        self.api_token = api_token if api_token is not None else settings.LOYVERSE_API_TOKEN
        self.BASE_URL = (base_url or settings.LOYVERSE_BASE_URL or self.DEFAULT_BASE_URL).rstrip('/')
        self.page_size = page_size or settings.LOYVERSE_PAGE_SIZE or self.PAGE_SIZE
        self.timeout = timeout or settings.LOYVERSE_TIMEOUT_SECONDS
        logger.info(f"Initializing LoyverseClient against {self.BASE_URL}")

    def _get_headers(self) -> Dict[str, str]:
        """Get headers for API requests"""
        return {
            "Authorization": f"Bearer {self.api_token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict] = None
    ) -> Dict:
        """
        Make a request to the Loyverse API

        Args:
            method: HTTP method
            endpoint: API endpoint (without base URL)
            params: Query parameters

        Returns:
            Dict: Response data

        Raises:
            LoyverseAPIError: If the API request fails
        """
        url = f"{self.BASE_URL}/{endpoint.lstrip('/')}"
        headers = self._get_headers()

        logger.debug(f"Making {method} request to {url}")
        if params:
            logger.debug(f"Params: {params}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(
                    method=method,
                    url=url,
                    headers=headers,
                    params=params
                )

                if response.status_code not in (200, 201, 202, 204):
                    logger.error(f"Loyverse API error ({response.status_code}): {response.text}")
                    raise LoyverseAPIError(f"Request failed ({response.status_code}): {response.text}")

                if response.status_code == 204:
                    return {}

                return response.json()

        except LoyverseAPIError:
            raise
        except httpx.TimeoutException as e:
            logger.error(f"Timeout error: {str(e)}")
            raise LoyverseAPIError(f"Request timed out: {str(e)}")
        except httpx.RequestError as e:
            logger.error(f"Network error: {str(e)}")
            raise LoyverseAPIError(f"Network error: {str(e)}")
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON from {url}: {str(e)}")
            raise LoyverseAPIError(f"Invalid JSON response: {str(e)}")

    async def _paginate(
        self,
        collection: CatalogCollection,
        extra_params: Optional[Dict[str, Any]] = None
    ) -> List[Dict]:
        """
        Follow the continuation cursor until the API stops returning one.
        Pages are requested one after another, never in parallel.
        """
        records: List[Dict] = []
        cursor: Optional[str] = None
        page = 0

        while True:
            params: Dict[str, Any] = {"limit": self.page_size}
            if extra_params:
                params.update(extra_params)
            if cursor:
                params["cursor"] = cursor

            response = await self._make_request("GET", collection.endpoint, params=params)
            page += 1

            page_records = response.get(collection.response_key) or []
            records.extend(page_records)
            logger.debug(f"{collection.value}: page {page} returned {len(page_records)} records")

            cursor = response.get("cursor")
            if not cursor:
                break

        return records

    async def fetch_all(self, collection: Union[CatalogCollection, str]) -> List[Dict]:
        """
        Fetch every record of a collection.

        Args:
            collection: Which catalog collection to read

        Returns:
            List[Dict]: Raw records in API order

        Raises:
            LoyverseAPIError: If any page request fails
        """
        collection = CatalogCollection(collection)
        logger.info(f"Fetching all {collection.value} from Loyverse...")
        records = await self._paginate(collection)
        logger.info(f"Found {len(records)} {collection.value}")
        return records

    async def fetch_updated_since(
        self,
        collection: Union[CatalogCollection, str],
        since: Union[datetime, str]
    ) -> List[Dict]:
        """
        Fetch records updated at or after `since`.

        Only items and variants carry an update timestamp upstream.

        Raises:
            UnsupportedCollectionError: For categories and inventory
            LoyverseAPIError: If any page request fails
        """
        collection = CatalogCollection(collection)
        if not collection.supports_updated_since:
            raise UnsupportedCollectionError(
                f"Loyverse does not filter {collection.value} by update time"
            )

        updated_at_min = self._format_timestamp(since)
        logger.info(f"Fetching {collection.value} updated since {updated_at_min}...")
        records = await self._paginate(collection, {"updated_at_min": updated_at_min})
        logger.info(f"Found {len(records)} updated {collection.value}")
        return records

    @staticmethod
    def _format_timestamp(value: Union[datetime, str]) -> str:
        """ISO-8601 in UTC; naive datetimes are taken to be UTC already"""
        if isinstance(value, str):
            return value
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")
