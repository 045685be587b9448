"""
Consul key-value source.

Talks to the Consul HTTP API directly:

    GET <address>/v1/kv/<path>

The response is a list of entries whose ``Value`` is base64 encoded. A 404
means the key does not exist and contributes an empty fragment.
"""

import base64
from typing import Any, Dict, Optional

import requests

from conflux.codec.base import Decoder
from conflux.codec.yaml_codec import ScalarCodec
from conflux.config import Config
from conflux.context import Context
from conflux.core.exceptions import CodecError, SourceError
from .base import Source


class ConsulSource(Source):
    """
    Source reading one key from Consul's key-value store.

    When ``decoder`` is a :class:`ScalarCodec` the key holds a single value,
    returned as ``{<last path segment>: value}``. Otherwise the value is a
    whole document decoded with ``decoder``.

    Args:
        path: Key path, e.g. ``"services/api/config"``
        decoder: Decoder for the stored value
        address: Consul address; defaults to ``CONSUL_HTTP_ADDR``
        token: ACL token; defaults to ``CONSUL_HTTP_TOKEN``
        timeout: Request timeout in seconds; defaults to ``CONSUL_HTTP_TIMEOUT``
        session: ``requests.Session`` to reuse
    """

    def __init__(self, path: str, decoder: Decoder, address: Optional[str] = None,
                 token: Optional[str] = None, timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None):
        super().__init__(f"consul:{path}")
        if not path or not path.strip("/"):
            raise SourceError(self.name, "init", ValueError("consul key path must not be empty"))
        self.path = path.strip("/")
        self.decoder = decoder
        self.address = (address or Config.CONSUL_HTTP_ADDR).rstrip("/")
        if not self.address.startswith(("http://", "https://")):
            raise SourceError(
                self.name, "init", ValueError(f"invalid consul address {self.address!r}"))
        self.token = token if token is not None else Config.CONSUL_HTTP_TOKEN
        self.timeout = timeout if timeout is not None else Config.CONSUL_HTTP_TIMEOUT
        self.session = session or requests.Session()
        self.last_index: Optional[int] = None

    @property
    def url(self) -> str:
        return f"{self.address}/v1/kv/{self.path}"

    def load(self, ctx: Context) -> Dict[str, Any]:
        headers = {"X-Consul-Token": self.token} if self.token else {}
        timeout = self.timeout
        remaining = ctx.remaining() if ctx is not None else None
        if remaining is not None:
            timeout = min(timeout, remaining)

        try:
            response = self.session.get(self.url, headers=headers, timeout=timeout)
        except requests.RequestException as e:
            raise SourceError(self.name, "fetch", e)

        if response.status_code == 404:
            return {}

        try:
            response.raise_for_status()
            entries = response.json()
        except (requests.RequestException, ValueError) as e:
            raise SourceError(self.name, "fetch", e)

        index = response.headers.get("X-Consul-Index")
        if index is not None and index.isdigit():
            self.last_index = int(index)

        if not entries or entries[0].get("Value") is None:
            return {}

        entry = entries[0]
        try:
            raw = base64.b64decode(entry["Value"])
        except (ValueError, TypeError) as e:
            raise SourceError(self.name, "decode", e)

        try:
            if isinstance(self.decoder, ScalarCodec):
                key = entry.get("Key", self.path).rstrip("/").split("/")[-1]
                return {key: self.decoder.decode(raw)}
            return self.decoder.decode(raw)
        except CodecError as e:
            raise SourceError(self.name, "decode", e)
