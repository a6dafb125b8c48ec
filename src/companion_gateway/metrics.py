from __future__ import annotations

from prometheus_client import Counter, start_http_server

server_errors_total = Counter(
    "server_errors_total",
    "Provider errors converted to HTTP responses",
    labelnames=["kind", "status"],
)

provider_errors_total = Counter(
    "provider_errors_total",
    "Failed HTTP requests to providers",
    labelnames=["provider", "status"],
)


def maybe_start_metrics(*, enable: bool, bind: str, port: int) -> None:
    if not enable:
        return
    start_http_server(port, addr=bind)
