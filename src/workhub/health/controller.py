from __future__ import annotations

import logging

from flask import Flask

from ..common.http import error, ok
from ..container import Container

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/health", methods=["GET"], endpoint="health")
    def health():
        return ok({"status": "ok"})

    @app.route("/health/ready", methods=["GET"], endpoint="health_ready")
    def health_ready():
        try:
            container.health_check()
        except Exception:
            logger.exception("Readiness check failed")
            return error("Database unavailable", status=503, code="SERVICE_UNAVAILABLE")
        return ok({"status": "ready", "active_topics": container.broadcaster.topic_count()})
