from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, AsyncIterator, Dict, List, Optional

import anyio
import httpx

from budget_tracker.core.models import Account, DateWindow, Transaction
from budget_tracker.exceptions import RemoteFetchError
from budget_tracker.loaders.base import BaseLoader
from budget_tracker.utils import filter_transactions_by_account

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.up.com.au/api/v1"
DEFAULT_PAGE_SIZE = 100
DEFAULT_TIMEOUT = 10.0
UNKNOWN = "Unknown"


def _dig(node: Any, *keys: str) -> Any:
    for key in keys:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def _parse_decimal(raw: Any) -> Decimal:
    if not isinstance(raw, str):
        return Decimal("0")
    try:
        value = Decimal(raw.strip())
    except InvalidOperation:
        return Decimal("0")
    return value if value.is_finite() else Decimal("0")


def _text(raw: Any, default: str) -> str:
    return raw if isinstance(raw, str) else default


def parse_transaction(item: Any, default_text: str = "") -> Transaction:
    """Map one element of a transactions ``data`` array to a Transaction.

    Missing or malformed fields never raise: the amount falls back to zero
    and the date/description to ``default_text``.
    """
    account_id = _dig(item, "relationships", "account", "data", "id")
    return Transaction(
        date=_text(_dig(item, "attributes", "createdAt"), default_text),
        description=_text(_dig(item, "attributes", "description"), default_text),
        amount=_parse_decimal(_dig(item, "attributes", "amount", "value")),
        account_id=account_id if isinstance(account_id, str) else None,
    )


def parse_account(item: Any) -> Account:
    return Account(
        id=_text(_dig(item, "id"), UNKNOWN),
        display_name=_text(_dig(item, "attributes", "displayName"), UNKNOWN),
        balance=_parse_decimal(_dig(item, "attributes", "balance", "value")),
        currency_code=_text(_dig(item, "attributes", "balance", "currencyCode"), ""),
    )


class UpBankClient(BaseLoader):
    """Cursor-following client for the Up transactions and accounts API.

    Pages are requested one after another; each request is bounded by
    ``timeout`` and the whole fetch by ``fetch_deadline`` when set.
    """

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        page_size: int = DEFAULT_PAGE_SIZE,
        timeout: float = DEFAULT_TIMEOUT,
        fetch_deadline: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.page_size = page_size
        self.timeout = timeout
        self.fetch_deadline = fetch_deadline
        self._transport = transport

    @classmethod
    def from_settings(cls, settings, transport=None) -> "UpBankClient":
        return cls(
            token=settings.token,
            base_url=settings.base_url,
            page_size=settings.page_size,
            timeout=settings.timeout,
            fetch_deadline=settings.fetch_deadline,
            transport=transport,
        )

    def _session(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            headers={"Authorization": f"Bearer {self.token}"},
            timeout=httpx.Timeout(self.timeout),
            transport=self._transport,
        )

    def transactions_url(self, window: DateWindow, status: Optional[str] = None) -> str:
        params: Dict[str, Any] = {
            "filter[since]": window.start,
            "filter[until]": window.end,
        }
        if status:
            params["filter[status]"] = status
        params["page[size]"] = self.page_size
        return str(httpx.URL(f"{self.base_url}/transactions", params=params))

    async def iter_pages(self, url: str, label: str = "transactions") -> AsyncIterator[List[Any]]:
        """Yield the ``data`` array of each page, following ``links.next``."""
        next_url: Optional[str] = url
        async with self._session() as http:
            while next_url:
                logger.debug("GET %s", next_url)
                try:
                    response = await http.get(next_url)
                except httpx.HTTPError as exc:
                    logger.warning("Request to %s failed: %s", next_url, exc)
                    raise RemoteFetchError(f"Failed to fetch {label}: {exc}") from exc

                if not response.is_success:
                    body = response.text
                    logger.warning("Request to %s returned %s", next_url, response.status_code)
                    raise RemoteFetchError(
                        f"Failed to fetch {label}: {body}",
                        status_code=response.status_code,
                        body=body,
                    )

                try:
                    payload = response.json()
                except ValueError as exc:
                    raise RemoteFetchError(
                        f"Failed to parse response: {exc}",
                        status_code=response.status_code,
                        body=response.text,
                    ) from exc

                data = _dig(payload, "data")
                if not isinstance(data, list):
                    # no data array means there is nothing more to read
                    break
                yield data

                link = _dig(payload, "links", "next")
                next_url = link if isinstance(link, str) and link else None

    async def iter_transactions(self, window, status=None, account_id=None, default_text=""):
        async for page in self.iter_pages(self.transactions_url(window, status)):
            txs = [parse_transaction(item, default_text) for item in page]
            if account_id is not None:
                txs = filter_transactions_by_account(txs, account_id)
            for tx in txs:
                yield tx

    async def fetch_transactions(self, window, status=None, account_id=None, default_text=""):
        try:
            with anyio.fail_after(self.fetch_deadline):
                txs = await super().fetch_transactions(
                    window, status=status, account_id=account_id, default_text=default_text
                )
        except TimeoutError as exc:
            raise RemoteFetchError(
                f"Fetching transactions exceeded {self.fetch_deadline} seconds"
            ) from exc
        logger.info("Fetched %d transaction(s) between %s and %s", len(txs), window.start, window.end)
        return txs

    async def list_accounts(self) -> List[Account]:
        accounts: List[Account] = []
        try:
            with anyio.fail_after(self.fetch_deadline):
                async for page in self.iter_pages(f"{self.base_url}/accounts", label="accounts"):
                    accounts.extend(parse_account(item) for item in page)
        except TimeoutError as exc:
            raise RemoteFetchError(f"Fetching accounts exceeded {self.fetch_deadline} seconds") from exc
        logger.info("Fetched %d account(s)", len(accounts))
        return accounts


class TransactionStream:
    """Lazy, restartable view over one transaction query.

    With ``share=True`` the first complete pass is kept and replayed to
    later consumers, so the budget and expense views cost one fetch. With
    ``share=False`` every pass goes back to the API.
    """

    def __init__(self, loader, window, status=None, account_id=None, default_text="", share=True):
        self.loader = loader
        self.window = window
        self.status = status
        self.account_id = account_id
        self.default_text = default_text
        self.share = share
        self._cache: Optional[List[Transaction]] = None

    @property
    def cached(self) -> bool:
        return self._cache is not None

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        if self._cache is not None:
            for tx in self._cache:
                yield tx
            return
        collected = []
        async for tx in self.loader.iter_transactions(
            self.window,
            status=self.status,
            account_id=self.account_id,
            default_text=self.default_text,
        ):
            collected.append(tx)
            yield tx
        if self.share:
            self._cache = collected

    async def collect(self) -> List[Transaction]:
        return [tx async for tx in self]
