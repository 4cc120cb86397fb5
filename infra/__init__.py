# infra/__init__.py
from __future__ import annotations

import logging
from typing import Protocol, Mapping, Any, Optional, Dict

from infra.http_client import HttpClient, HttpError

# ========== 抽象端口：上层依赖这个，而非具体 HttpClient ==========
class HttpPort(Protocol):
    async def get_public(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]: ...
    async def get_private(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]: ...
    async def post_private(self, path: str, json_body: Mapping[str, Any]) -> Dict[str, Any]: ...


# ========== 轻量“容器”：启动/关闭 ==========
class HttpContainer:
    """
    负责 HttpClient 的创建与优雅关闭。
    - 组合根（应用入口）持有它。
    - 上层把 container.http 注入到各服务即可。
    """
    def __init__(self, http: HttpClient) -> None:
        self.http = http

    @classmethod
    async def start(cls,
                    cfg: Mapping[str, Any],
                    logger: Optional[logging.Logger] = None,
                    api_key: Optional[str] = None,
                    secret_key: Optional[str] = None,
                    passphrase: Optional[str] = None,
                    *,
                    public_only: Optional[bool] = None,
                    ) -> "HttpContainer":
        http = HttpClient(cfg, logger=logger, api_key=api_key, secret_key=secret_key,
                          passphrase=passphrase, public_only=public_only)
        await http.__aenter__()
        return cls(http)

    async def stop(self) -> None:
        await self.http.close()


__all__ = ["HttpClient", "HttpError", "HttpPort", "HttpContainer"]
