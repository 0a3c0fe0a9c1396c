"""Health check endpoint."""

from datetime import datetime, timezone
from http.server import BaseHTTPRequestHandler
import json

SERVICE_NAME = "taskcoin-backend"


def health_payload() -> dict:
    """Body returned by the health check."""
    return {
        "status": "ok",
        "service": SERVICE_NAME,
        "time": datetime.now(timezone.utc).isoformat(),
    }


class handler(BaseHTTPRequestHandler):
    """Health check handler for the serverless deployment."""

    def do_GET(self):
        body = json.dumps(health_payload()).encode('utf-8')
        self.send_response(200)
        self.send_header('Content-Type', 'application/json')
        self.send_header('Content-Length', str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def do_POST(self):
        """Same as GET."""
        self.do_GET()
