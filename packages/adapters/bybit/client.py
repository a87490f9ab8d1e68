from __future__ import annotations

import hashlib
import hmac
import time
from dataclasses import dataclass
from typing import Any, Callable, Mapping
from urllib.parse import urlencode

import aiohttp
from loguru import logger

from packages.common.config import BybitConfig

TRANSACTION_LOG_PATH = "/v5/account/transaction-log"


class PageFetchError(RuntimeError):
    pass


def sign_request(api_key: str, api_secret: str, timestamp_ms: int, recv_window_ms: int, query: str) -> str:
    """
    Bybit V5 HMAC-SHA256 signature for GET requests:
      hex(hmac(secret, timestamp + api_key + recv_window + query_string))
    """
    payload = f"{timestamp_ms}{api_key}{recv_window_ms}{query}"
    return hmac.new(api_secret.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256).hexdigest()


@dataclass
class BybitRestClient:
    cfg: BybitConfig
    clock_ms: Callable[[], int] = lambda: int(time.time() * 1000)

    def _query_string(self, params: Mapping[str, Any]) -> str:
        merged: dict[str, Any] = {
            "accountType": self.cfg.account_type,
            "category": self.cfg.category,
        }
        merged.update({k: v for k, v in params.items() if v is not None and v != ""})
        return urlencode(merged)

    def _headers(self, query: str) -> dict[str, str]:
        ts = self.clock_ms()
        return {
            "X-BAPI-API-KEY": self.cfg.api_key,
            "X-BAPI-TIMESTAMP": str(ts),
            "X-BAPI-RECV-WINDOW": str(self.cfg.recv_window_ms),
            "X-BAPI-SIGN-TYPE": "2",
            "X-BAPI-SIGN": sign_request(
                self.cfg.api_key,
                self.cfg.api_secret,
                ts,
                self.cfg.recv_window_ms,
                query,
            ),
        }

    async def get_transaction_log(self, params: Mapping[str, Any]) -> dict[str, Any]:
        """
        One signed page of GET /v5/account/transaction-log.
        params: {startTime, endTime, limit, cursor?}
        """
        if not self.cfg.api_key or not self.cfg.api_secret:
            raise PageFetchError("Bybit credentials missing (api_key/api_secret)")

        query = self._query_string(params)
        # the signed query string must be byte-identical to the one sent
        url = f"{self.cfg.rest_url}{TRANSACTION_LOG_PATH}?{query}"
        timeout = aiohttp.ClientTimeout(total=self.cfg.request_timeout_s)

        try:
            async with aiohttp.ClientSession(timeout=timeout) as sess:
                async with sess.get(url, headers=self._headers(query)) as resp:
                    text = await resp.text()
                    if resp.status != 200:
                        raise PageFetchError(f"Bybit transaction-log HTTP {resp.status}: {text[:200]}")
                    data = await resp.json(content_type=None)
        except aiohttp.ClientError as e:
            raise PageFetchError(f"Bybit transaction-log request failed: {e}") from e

        if not isinstance(data, dict):
            raise PageFetchError(f"Bybit transaction-log: unexpected payload type {type(data).__name__}")

        ret_code = data.get("retCode")
        if ret_code not in (0, "0", None):
            raise PageFetchError(f"Bybit transaction-log retCode={ret_code} retMsg={data.get('retMsg')!r}")

        logger.trace("Bybit transaction-log ok query={}", query)
        return data
