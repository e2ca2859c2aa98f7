"""
Automation platform subscription check.

A constructed service (one instance per app, injected where needed) that
periodically asks the platform for its license and keeps the last result.
The check is informational: it never gates crawling.
"""

import asyncio
import ssl
from dataclasses import dataclass
from datetime import datetime, timezone

import structlog

from galaxy_sync.observability.metrics import get_metrics
from galaxy_sync.scm.http_client import HTTPClient, HTTPClientError, RetryConfig

logger = structlog.get_logger(__name__)

INVALID_SUBSCRIPTION = (
    "Invalid or missing Ansible Automation Platform subscription. "
    "Contact your administrator to enable an enterprise subscription."
)

CONFIG_PATH = "/api/v2/config/"

CERT_EXPIRED_STATUS = 495
CONNECTION_REFUSED_STATUS = 404
FALLBACK_STATUS = 500


@dataclass(frozen=True)
class SubscriptionStatus:
    is_valid: bool
    status_code: int
    checked_at: datetime | None = None

    @property
    def error_message(self) -> str | None:
        return None if self.is_valid else INVALID_SUBSCRIPTION


def _exception_chain(exc: BaseException):
    seen = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def classify_subscription_error(exc: BaseException) -> int:
    """
    Map a failed check to a status code.

    Expired certificate -> 495, connection refused -> 404, otherwise the
    HTTP status if it is a plausible one (100-599), else 500.
    """
    for err in _exception_chain(exc):
        if isinstance(err, ssl.SSLCertVerificationError) and (
            getattr(err, "verify_code", None) == 10 or "expired" in str(err).lower()
        ):
            return CERT_EXPIRED_STATUS
        if "certificate has expired" in str(err).lower():
            return CERT_EXPIRED_STATUS
        if isinstance(err, ConnectionRefusedError) or "connection refused" in str(err).lower():
            return CONNECTION_REFUSED_STATUS

    status_code = getattr(exc, "status_code", None)
    if isinstance(status_code, int) and 100 <= status_code < 600:
        return status_code
    return FALLBACK_STATUS


class SubscriptionService:
    """
    Checks ``<base_url>/api/v2/config/`` for an enterprise license.

    Usage:
        service = SubscriptionService(base_url, token)
        await service.start()       # checks now, then every check_interval
        service.status.is_valid
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        check_ssl: bool = True,
        check_interval_seconds: float = 86400,
        http_client: HTTPClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._check_interval = check_interval_seconds
        self._http = http_client or HTTPClient(
            retry_config=RetryConfig(max_retries=0),
            headers={"Authorization": f"Bearer {token}"},
            verify=check_ssl,
        )
        self._status = SubscriptionStatus(is_valid=False, status_code=FALLBACK_STATUS)
        self._task: asyncio.Task | None = None

    @property
    def status(self) -> SubscriptionStatus:
        return self._status

    async def check(self) -> SubscriptionStatus:
        """Run one subscription check and store the result."""
        url = f"{self.base_url}{CONFIG_PATH}"
        logger.info("Checking AAP subscription", url=url)
        now = datetime.now(timezone.utc)

        try:
            async with self._http as client:
                response = await client.get(url)
            data = response.json()
            license_info = data.get("license_info") or {} if isinstance(data, dict) else {}
            self._status = SubscriptionStatus(
                is_valid=license_info.get("license_type") == "enterprise",
                status_code=response.status_code,
                checked_at=now,
            )
        except (HTTPClientError, ValueError) as e:
            status_code = classify_subscription_error(e)
            logger.error("AAP subscription check failed", url=url, status_code=status_code, error=str(e))
            self._status = SubscriptionStatus(is_valid=False, status_code=status_code, checked_at=now)

        get_metrics().set_subscription_valid(self._status.is_valid)
        return self._status

    async def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._run(), name="subscription-check")

    async def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            await asyncio.gather(self._task, return_exceptions=True)
            self._task = None

    async def _run(self) -> None:
        while True:
            try:
                await self.check()
            except Exception as e:
                logger.error("Subscription check loop error", error=str(e))
            await asyncio.sleep(self._check_interval)
