# infra/http_client.py
from __future__ import annotations

import aiohttp
import asyncio
import base64
import hashlib
import hmac
import json
import random
import time
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlencode
import logging

from trading.errors import TransportError, FameexApiError
from utils.logger import logger as default_logger

JSON_SEPARATORS = (",", ":")
OK_CODES = {"0", "200"}


class HttpError(TransportError):
    def __init__(self, status: int, message: str, payload: Optional[dict] = None):
        super().__init__(f"HTTP {status}: {message}")
        self.status = status
        self.payload = payload or {}


def _now_millis() -> str:
    return str(int(time.time() * 1000))

def _json_dumps_compact(obj: Any) -> str:
    return json.dumps(obj, separators=JSON_SEPARATORS, ensure_ascii=False)

def _build_query(params: Optional[Mapping[str, Any]]) -> str:
    if not params:
        return ""
    return "?" + urlencode(params, doseq=True, safe=":/")

def _mask(s: Optional[str]) -> str:
    if not s:
        return ""
    if len(s) <= 8:
        return "*" * len(s)
    return s[:4] + "*" * (len(s) - 8) + s[-4:]

class HttpClient:
    def __init__(self,
                 cfg: Mapping[str, Any],
                 logger: Optional[logging.Logger] = None,
                 api_key: Optional[str] = None,
                 secret_key: Optional[str] = None,
                 passphrase: Optional[str] = None,
                 *,
                 public_only: Optional[bool] = None,
                 timeout_ms: Optional[int] = None,
                 session: Optional[aiohttp.ClientSession] = None,
                 ) -> None:
        self.cfg = cfg
        self.log = logger or default_logger
        self.session = session
        self._owned_session = session is None

        fx_cfg = cfg.get("fameex", {})
        self.base_url = str(fx_cfg.get("rest_base", "https://api.fameex.com")).rstrip("/")

        # credentials
        self.api_key = api_key
        self.secret_key = secret_key
        self.passphrase = passphrase
        if public_only is None:
            public_only = bool(cfg.get("trading", {}).get("public_only", False))
        self.public_only = public_only

        # timeouts & retries
        timeouts_cfg = cfg.get("timeouts", {})
        retries_cfg = cfg.get("retries", {})
        self.timeout_ms = int(timeout_ms or timeouts_cfg.get("rest_ms", 5000))
        self.max_attempts = int(retries_cfg.get("rest_max_attempts", 3))
        self.backoff_ms = int(retries_cfg.get("backoff_ms", 200))

        self.log.debug(
            f"HttpClient init base_url={self.base_url} public_only={self.public_only} key={_mask(self.api_key)}"
        )

    # ---- async context manager ----------------------------------------------------
    async def __aenter__(self) -> "HttpClient":
        self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._owned_session and (self.session is None or self.session.closed):
            timeout = aiohttp.ClientTimeout(total=self.timeout_ms / 1000.0)
            self.session = aiohttp.ClientSession(timeout=timeout, raise_for_status=False, trust_env=True)
        return self.session

    async def close(self) -> None:
        if self._owned_session and self.session is not None and not self.session.closed:
            await self.session.close()

    def _timestamp(self) -> str:
        return _now_millis()

    def _build_auth_headers(
            self, method: str, path: str, query: str, body: str
    ) -> Dict[str, str]:
        """
        签名串: timestamp + method + requestPath + body
        - requestPath 包含 path + querystring（若有）
        - body 为 JSON 串（GET 为空串）
        - HMAC-SHA256 -> Base64
        """
        if self.public_only:
            raise FameexApiError("401", "client is public-only, private endpoints are disabled")
        if not (self.api_key and self.secret_key and self.passphrase):
            raise FameexApiError("401", "missing API credentials")
        timestamp = self._timestamp()
        request_path = path + (query or "")
        prehash = f"{timestamp}{method.upper()}{request_path}{body}"
        signature = base64.b64encode(
            hmac.new(
                self.secret_key.encode("utf-8"),
                prehash.encode("utf-8"),
                hashlib.sha256,
            ).digest()
        ).decode()

        return {
            "X-ACCESS-KEY": self.api_key,
            "X-ACCESS-SIGN": signature,
            "X-ACCESS-TIMESTAMP": timestamp,
            "X-ACCESS-PASSPHRASE": self.passphrase,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def request(
            self,
            method: str,
            path: str,
            *,
            params: Optional[Mapping[str, Any]] = None,
            json_body: Optional[Mapping[str, Any]] = None,
            auth: bool = False,
            headers: Optional[Mapping[str, str]] = None,
            timeout_ms: Optional[int] = None,
            retry: bool = True,
        ) -> Dict[str, Any]:
        """
        统一请求入口。
        - method: "GET" | "POST"
        - path: 以 "/" 开头
        - params: querystring
        - json_body: JSON 请求体（会用于签名与实际发送）
        - auth: 是否使用私有签名头
        - retry: 遇到 429/5xx/网络错误时启用指数退避
        """
        assert path.startswith("/"), "path must start with /"
        method = method.upper()
        query = _build_query(params)
        url = self.base_url + path + query
        body_str = _json_dumps_compact(json_body) if json_body else ""
        req_headers = {
            "Content-Type": "application/json", "Accept": "application/json"
        }
        if headers:
            req_headers.update(headers)
        if auth:
            req_headers.update(self._build_auth_headers(method, path, query, body_str))

        timeout_ctx = aiohttp.ClientTimeout(total=timeout_ms / 1000.0) if timeout_ms else None
        session = self._ensure_session()

        attempt = 0
        while True:
            attempt += 1
            try:
                async with session.request(
                    method,
                    url,
                    data=body_str if body_str else None,
                    headers=req_headers,
                    timeout=timeout_ctx,
                ) as resp:
                    text = await resp.text()
                    status = resp.status
                    if status >= 400:
                        if retry and (status >= 500 or status == 429) and attempt < self.max_attempts:
                            await self._sleep_backoff(attempt)
                            continue
                        raise HttpError(status, text)

                    try:
                        payload = json.loads(text) if text else {}
                    except json.JSONDecodeError:
                        raise HttpError(status, f"invalid json: {text[:256]}")

                    if isinstance(payload, dict) and "code" in payload:
                        code = str(payload.get("code"))
                        if code not in OK_CODES:
                            raise FameexApiError(code, str(payload.get("msg", "")), payload)
                    return payload
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                if retry and attempt < self.max_attempts:
                    self.log.warning(f"Network error: {e} when requesting {url}, retrying...")
                    await self._sleep_backoff(attempt)
                    continue
                raise HttpError(599, f"Network error: {e}") from e
            except TransportError:
                raise
            except Exception as e:
                raise HttpError(599, f"Unexpected error: {e}") from e

    async def _sleep_backoff(self, attempt: int) -> None:
        base = self.backoff_ms * (2 ** (attempt - 1))
        jitter = random.randint(0, self.backoff_ms)
        await asyncio.sleep((base + jitter) / 1000.0)

    # ---- 便捷包装 -----------------------------------------------------------------
    async def get_public(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        return await self.request("GET", path, params=params, auth=False)

    async def get_private(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        return await self.request("GET", path, params=params, auth=True)

    async def post_private(self, path: str, json_body: Mapping[str, Any]) -> Dict[str, Any]:
        return await self.request("POST", path, json_body=json_body, auth=True)
