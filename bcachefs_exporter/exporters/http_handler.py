# bcachefs_exporter/exporters/http_handler.py - HTTP scrape endpoint
"""
Serves the encoded metrics over HTTP for Prometheus to scrape.
"""

from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Callable, List
import logging
import socket

from bcachefs_exporter.errors import ExporterError
from bcachefs_exporter.exporters.encoder import CONTENT_TYPE, Metric, encode_all


logger = logging.getLogger(__name__)


class MetricsHandler(BaseHTTPRequestHandler):
    """
    Answers GET on the metrics path with a fresh collection pass.

    Collection failures become a 500 with the error message as body.
    """

    def __init__(self, collect: Callable[[], List[Metric]], metrics_path: str, *args, **kwargs):
        self.collect = collect
        self.metrics_path = metrics_path
        super().__init__(*args, **kwargs)

    def do_GET(self):
        if self.path.split('?', 1)[0] != self.metrics_path:
            self._respond(404, 'text/plain; charset=utf-8', b'Not Found\n')
            return

        try:
            payload = encode_all(self.collect()).encode('utf-8')
        except ExporterError as e:
            logger.error(f"Scrape failed: {e}")
            self._respond_error(e)
            return
        except Exception as e:
            logger.exception(f"Scrape failed: {e}")
            self._respond_error(e)
            return

        self._respond(200, CONTENT_TYPE, payload)

    def _respond_error(self, error: Exception):
        # Messages may carry undecodable sysfs names as surrogates
        body = f'Something went wrong: {error}\n'.encode('utf-8', errors='backslashreplace')
        self._respond(500, 'text/plain; charset=utf-8', body)

    def _respond(self, status: int, content_type: str, payload: bytes):
        self.send_response(status)
        self.send_header('Content-Type', content_type)
        self.send_header('Content-Length', str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)

    def log_message(self, format, *args):
        """Route request logs through logging instead of stderr"""
        logger.debug(f"{self.address_string()} - {format % args}")


class _IPv6Server(ThreadingHTTPServer):
    address_family = socket.AF_INET6


def create_server(host: str, port: int, collect: Callable[[], List[Metric]],
                  metrics_path: str = '/metrics') -> ThreadingHTTPServer:
    """
    Create a threaded HTTP server bound to host:port.

    Args:
        host: Address to bind, IPv6 literals without brackets
        port: Port to bind, 0 for an ephemeral port
        collect: Callable returning the metrics of one scrape
        metrics_path: URL path serving the metrics

    Returns:
        Server ready for serve_forever()
    """
    def handler(*args, **kwargs):
        return MetricsHandler(collect, metrics_path, *args, **kwargs)

    server_class = _IPv6Server if ':' in host else ThreadingHTTPServer
    return server_class((host, port), handler)
