"""Anti-corruption reporting client - desktop client library for the reporting service."""

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from anticorruption_client.backends.http import HttpBackend
from anticorruption_client.client import AntiCorruptionClient
from anticorruption_client.config import load_config
from anticorruption_client.dispatch import Dispatcher, Post
from anticorruption_client.models import AccessGroup, Report, ReportFilter, User
from anticorruption_client.session import Session

__all__ = [
    "AccessGroup",
    "AntiCorruptionClient",
    "ClientContext",
    "Dispatcher",
    "Report",
    "ReportFilter",
    "Session",
    "User",
    "create_client",
]


@dataclass
class ClientContext:
    """Everything a UI needs, wired together by ``create_client``."""

    client: AntiCorruptionClient
    dispatcher: Dispatcher
    config: dict[str, Any]

    @property
    def session(self) -> Session:
        return self.client.session

    def close(self) -> None:
        self.dispatcher.shutdown(wait=False)


def create_client(
    test_config: dict[str, Any] | None = None,
    post: Post | None = None,
    transport: httpx.BaseTransport | None = None,
) -> ClientContext:
    """Client factory.

    ``test_config`` overrides individual settings (registry keys) on top of
    the loaded configuration. ``post`` is the UI toolkit's call-on-UI-thread
    hook, ``transport`` an httpx transport to use instead of the network.
    """
    config = load_config()
    if test_config is not None:
        config.update(test_config)

    logging.basicConfig(
        level=str(config["logging.level"]).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    timeout = int(config["http.timeout_seconds"])
    session = Session()
    backend = HttpBackend(
        str(config["server.url"]),
        session,
        timeout=timeout if timeout > 0 else None,
        verify=bool(config["server.verify_tls"]),
        transport=transport,
    )
    dispatcher = Dispatcher(post=post, max_workers=int(config["dispatch.max_workers"]))
    return ClientContext(
        client=AntiCorruptionClient(backend, session), dispatcher=dispatcher, config=config
    )
