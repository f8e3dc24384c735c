"""HTTP adapters talking to the remote token authority."""

from __future__ import annotations

from .wechat_token_fetcher import WeChatTokenFetcher

__all__ = ["WeChatTokenFetcher"]
