"""Result type and shared HTTP plumbing for upstream source clients."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any, Callable, Generic, Mapping, Optional, Type, TypeVar

import requests
from pydantic import BaseModel, ConfigDict, ValidationError

from utils.logging_utils import get_tagged_logger, mask_url

logger = get_tagged_logger(__name__, tag="data_sources/base")

T = TypeVar("T")
SchemaT = TypeVar("SchemaT", bound=BaseModel)

DEFAULT_TIMEOUT_SECONDS = 10.0


class UpstreamPayload(BaseModel):
    """Base for raw response schemas. NaN and Infinity fail validation."""
    model_config = ConfigDict(allow_inf_nan=False)


@dataclass(frozen=True)
class FetchResult(Generic[T]):
    """Outcome of a live fetch: either a value or a reason it failed."""
    value: Optional[T] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        """True when the fetch produced a value."""
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "FetchResult[T]":
        """Wrap a successfully fetched value."""
        return cls(value=value)

    @classmethod
    def failure(cls, error: str) -> "FetchResult[T]":
        """Record why a fetch failed."""
        return cls(error=error)

    def then(self, func: Callable[[T], "FetchResult[Any]"]) -> "FetchResult[Any]":
        """Chain another step onto a successful result; failures pass through."""
        if not self.ok:
            return FetchResult.failure(self.error or "unknown error")
        return func(self.value)  # type: ignore[arg-type]


class HttpSourceClient:
    """Base for clients that call one third-party JSON API.

    Subclasses build their snapshot from a validated response schema and
    provide the fallback used whenever `fetch_live` fails.
    """

    name: str = "source"
    api_key_param: str = "apikey"

    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize with credentials, endpoint root, request timeout and fallback RNG."""
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout_seconds
        self.session = session or requests.Session()
        self.rng = rng

    @property
    def configured(self) -> bool:
        """Return True if an API key is available for this source."""
        return bool(self.api_key)

    def close(self) -> None:
        """Release pooled HTTP connections."""
        close = getattr(self.session, "close", None)
        if close:
            close()

    def _get_json(self, path: str, params: Mapping[str, Any]) -> FetchResult[Any]:
        """GET `path` with the API key attached and return the decoded JSON body."""
        if not self.configured:
            return FetchResult.failure(f"{self.name}: API key not configured")

        url = f"{self.base_url}/{path.lstrip('/')}"
        query = {**params, self.api_key_param: self.api_key}
        try:
            resp = self.session.get(url, params=query, timeout=self.timeout)
            resp.raise_for_status()
            return FetchResult.success(resp.json())
        except requests.Timeout:
            return FetchResult.failure(f"{self.name}: request timed out after {self.timeout}s ({url})")
        except requests.HTTPError as exc:
            response = exc.response
            status = getattr(response, "status_code", "?")
            where = mask_url(getattr(response, "url", None) or url)
            return FetchResult.failure(f"{self.name}: HTTP {status} from {where}")
        except (requests.RequestException, ValueError) as exc:
            return FetchResult.failure(f"{self.name}: {type(exc).__name__} calling {url}")

    def _validate(self, schema: Type[SchemaT], payload: Any) -> FetchResult[SchemaT]:
        """Validate a decoded body against the domain's response schema."""
        try:
            return FetchResult.success(schema.model_validate(payload))
        except ValidationError as exc:
            return FetchResult.failure(
                f"{self.name}: unexpected response shape ({exc.error_count()} validation errors)"
            )

    def _build(self, builder: Callable[[], T]) -> FetchResult[T]:
        """Run the schema-to-snapshot translation, capturing out-of-range values."""
        try:
            return FetchResult.success(builder())
        except (ValueError, TypeError, OverflowError, OSError) as exc:
            return FetchResult.failure(f"{self.name}: could not normalize response ({type(exc).__name__})")

    def _resolve(self, result: FetchResult[T], fallback: Callable[[], T], **context: Any) -> T:
        """Return the live value, or the fallback when the live fetch failed."""
        if result.ok:
            logger.info(f"{self.name}: live data fetched", extra=context)
            return result.value  # type: ignore[return-value]
        logger.warning(f"{self.name}: using fallback data; {result.error}", extra=context)
        return fallback()
