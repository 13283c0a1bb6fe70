"""HTTP surface: landing page, Prometheus metrics and service discovery."""

from fastapi import FastAPI
from fastapi.responses import HTMLResponse, Response
from prometheus_client import CollectorRegistry, generate_latest
from prometheus_client.exposition import CONTENT_TYPE_LATEST

from .services.discovery import ServiceDiscovery

INDEX_PAGE = """<html>
<head><title>Mesos Exporter</title></head>
<body>
<h1>Mesos Exporter</h1>
<p><a href="/metrics">Metrics</a></p>
<p><a href="/sd">Slave service discovery</a></p>
</body>
</html>"""


def create_app(registry: CollectorRegistry, discovery: ServiceDiscovery) -> FastAPI:
    """
    Build the exporter's FastAPI application.

    Handlers are plain functions so each scrape runs the blocking collection
    cycle on its own worker thread.

    Args:
        registry: Registry holding the collectors and the error counter
        discovery: Service-discovery responder

    Returns:
        FastAPI: Application exposing /, /metrics and /sd
    """
    api = FastAPI(title="Mesos Exporter")

    @api.get("/", response_class=HTMLResponse)
    def index():
        return INDEX_PAGE

    @api.get("/metrics")
    def metrics():
        return Response(content=generate_latest(registry), media_type=CONTENT_TYPE_LATEST)

    @api.get("/sd")
    def service_discovery():
        return Response(content=discovery.render(), media_type="application/json")

    return api
