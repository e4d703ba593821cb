"""Korean public-data registries as a registry provider.

Venues and addresses are looked up in the Korea Tourism Organization
KorService2 keyword search; exhibition and event periods in the Culture
Portal performance/display search.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Set
from urllib.parse import urlencode

import httpx
from pydantic import BaseModel, Field

from ...domain.errors import (
    AuthenticationError,
    QuotaExceededError,
    TransientSourceError,
)
from ...domain.models.claim import ClaimType
from ...domain.ports.registry_provider import RegistryLookupResult, RegistryProvider
from ..http_errors import error_for_exception, error_for_response

logger = logging.getLogger(__name__)

TOURISM_SOURCE = "korean_tourism_api_v2"
CULTURE_SOURCE = "culture_portal_api"

RESULT_OK = "0000"
AUTH_RESULT_CODES = {"0020", "0021", "0030", "0031", "0032"}
QUOTA_RESULT_CODES = {"0022"}
TRANSIENT_RESULT_CODES = {"0004", "0005"}

# data.go.kr answers some gateway errors with an XML body and HTTP 200
_XML_AUTH_MARKERS = ("SERVICE_KEY_IS_NOT_REGISTERED_ERROR", "SERVICE ACCESS DENIED", "UNREGISTERED_IP")
_XML_QUOTA_MARKERS = ("LIMITED_NUMBER_OF_SERVICE_REQUESTS_EXCEEDS",)


class KoreaTourismConfig(BaseModel):
    """Configuration for the Korean public-data registry adapter."""

    service_key: str = Field(default="", description="data.go.kr service key, already URL-encoded")
    culture_api_key: Optional[str] = Field(default=None, description="Culture Portal service key")
    base_url: str = Field(default="http://apis.data.go.kr/B551011/KorService2")
    culture_url: str = Field(
        default="http://www.culture.go.kr/openapi/rest/publicperformancedisplays/period"
    )
    mobile_os: str = Field(default="ETC")
    mobile_app: str = Field(default="FactGate")
    num_of_rows: int = Field(default=5, description="Records requested per lookup")
    timeout: float = Field(default=10.0, description="Request timeout in seconds")


def normalize_items(payload: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Items from a KorService2 body as a list.

    The API sends ``""`` for no results and a bare object for one result.
    """
    body = (payload.get("response") or {}).get("body") or {}
    items = body.get("items")
    if not items or not isinstance(items, dict):
        return []
    item = items.get("item")
    if not item:
        return []
    if isinstance(item, list):
        return item
    return [item]


class KoreaTourismRegistryAdapter(RegistryProvider):
    """Registry provider backed by KorService2 and the Culture Portal."""

    def __init__(
        self,
        config: Optional[KoreaTourismConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the adapter.

        Args:
            config: Adapter configuration
            client: Preconfigured HTTP client, mainly for tests
        """
        self._config = config or KoreaTourismConfig()
        self._client = client
        self._owns_client = client is None
        self._initialized = False

    async def initialize(self) -> None:
        """Create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._config.timeout)
        self._initialized = True
        logger.info(
            f"🏛️ Registry ready (tourism={'on' if self._config.service_key else 'off'}, "
            f"culture={'on' if self._config.culture_api_key else 'off'})"
        )

    async def shutdown(self) -> None:
        """Close the HTTP client."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None
        self._initialized = False

    @property
    def provider_name(self) -> str:
        return "korea_public_data"

    @property
    def is_available(self) -> bool:
        return self._initialized and bool(self.supported_claim_types)

    @property
    def supported_claim_types(self) -> Set[ClaimType]:
        types: Set[ClaimType] = set()
        if self._config.service_key:
            types.update({ClaimType.VENUE_EXISTS, ClaimType.LOCATION})
        if self._config.culture_api_key:
            types.add(ClaimType.EVENT_PERIOD)
        return types

    def supports(self, claim_type: ClaimType) -> bool:
        return claim_type in self.supported_claim_types

    async def lookup(self, claim_type: ClaimType, value: str) -> Optional[RegistryLookupResult]:
        """Look up ``value`` in the registry for ``claim_type``."""
        if not self._client:
            raise RuntimeError("Provider not initialized")
        if not self.supports(claim_type):
            return None
        if claim_type == ClaimType.EVENT_PERIOD:
            return await self._lookup_culture(value)
        return await self._lookup_tourism(value)

    async def search_keyword(self, keyword: str) -> Optional[List[Dict[str, Any]]]:
        """KorService2 ``searchKeyword2``.

        Returns None for result codes that say nothing about the keyword.

        Raises:
            AuthenticationError: On a rejected service key
            QuotaExceededError: When the daily quota is spent
            TransientSourceError: On network errors or transient result codes
        """
        params = urlencode({
            "keyword": keyword,
            "numOfRows": self._config.num_of_rows,
            "pageNo": 1,
            "MobileOS": self._config.mobile_os,
            "MobileApp": self._config.mobile_app,
            "_type": "json",
        })
        # the key is issued pre-encoded; encoding it again breaks it
        url = f"{self._config.base_url}/searchKeyword2?serviceKey={self._config.service_key}&{params}"

        try:
            response = await self._client.get(url)
        except httpx.HTTPError as e:
            raise error_for_exception(e, TOURISM_SOURCE)
        if response.status_code != 200:
            raise error_for_response(response, TOURISM_SOURCE)

        try:
            payload = response.json()
        except ValueError:
            raise self._error_for_xml(response.text)

        header = (payload.get("response") or {}).get("header") or {}
        code = str(header.get("resultCode", ""))
        message = header.get("resultMsg", "")
        if code in ("", RESULT_OK, "00"):
            return normalize_items(payload)
        if code in AUTH_RESULT_CODES:
            raise AuthenticationError(f"resultCode {code}: {message}", TOURISM_SOURCE)
        if code in QUOTA_RESULT_CODES:
            raise QuotaExceededError(f"resultCode {code}: {message}", TOURISM_SOURCE)
        if code in TRANSIENT_RESULT_CODES:
            raise TransientSourceError(f"resultCode {code}: {message}", TOURISM_SOURCE)
        logger.warning(f"⚠️ KorService2 returned resultCode {code}: {message}")
        return None

    async def _lookup_tourism(self, value: str) -> Optional[RegistryLookupResult]:
        items = await self.search_keyword(value)
        if items is None:
            return None

        if items:
            first = items[0]
            return RegistryLookupResult(
                found=True,
                data={
                    "title": first.get("title"),
                    "address": first.get("addr1"),
                    "tel": first.get("tel"),
                },
                source=TOURISM_SOURCE,
                checked_at=datetime.utcnow(),
            )
        return RegistryLookupResult(found=False, source=TOURISM_SOURCE, checked_at=datetime.utcnow())

    async def _lookup_culture(self, value: str) -> Optional[RegistryLookupResult]:
        params = urlencode({"keyword": value, "rows": 5})
        url = f"{self._config.culture_url}?serviceKey={self._config.culture_api_key}&{params}"
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as e:
            raise error_for_exception(e, CULTURE_SOURCE)
        if response.status_code in (401, 403, 429) or response.status_code >= 500:
            raise error_for_response(response, CULTURE_SOURCE)
        if response.status_code != 200:
            return None

        return RegistryLookupResult(
            found="<item>" in response.text,
            source=CULTURE_SOURCE,
            checked_at=datetime.utcnow(),
        )

    @staticmethod
    def _error_for_xml(body: str):
        if any(marker in body for marker in _XML_AUTH_MARKERS):
            return AuthenticationError("service key rejected", TOURISM_SOURCE)
        if any(marker in body for marker in _XML_QUOTA_MARKERS):
            return QuotaExceededError("daily request limit exceeded", TOURISM_SOURCE)
        return TransientSourceError(f"unexpected non-JSON response: {body[:200]}", TOURISM_SOURCE)
