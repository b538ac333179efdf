# tests/test_http.py - Tests for the HTTP scrape endpoint
"""
Tests for MetricsHandler served by create_server on an ephemeral port.
"""

import functools
import threading
import urllib.error
import urllib.request

import pytest
from bcachefs_exporter.collector.orchestrator import collect_all
from bcachefs_exporter.errors import MissingAttribute
from bcachefs_exporter.exporters.encoder import ALLOC_BYTES, Metric
from bcachefs_exporter.exporters.http_handler import create_server
from tests.conftest import FS_UUID


# Bypass any proxy set in the environment
_open = urllib.request.build_opener(urllib.request.ProxyHandler({})).open


@pytest.fixture
def serve():
    """Start a server for a collect callable, return its base URL"""
    servers = []

    def _serve(collect, metrics_path='/metrics'):
        server = create_server('127.0.0.1', 0, collect, metrics_path)
        thread = threading.Thread(target=server.serve_forever, daemon=True)
        thread.start()
        servers.append(server)
        host, port = server.server_address[:2]
        return f'http://{host}:{port}'

    yield _serve

    for server in servers:
        server.shutdown()
        server.server_close()


class TestMetricsEndpoint:
    """Test cases for the /metrics endpoint"""

    def test_serves_metrics(self, serve, single_device_root):
        url = serve(functools.partial(collect_all, single_device_root))

        with _open(f'{url}/metrics') as response:
            body = response.read().decode('utf-8')
            assert response.status == 200
            assert response.headers['Content-Type'] == 'text/plain; version=0.0.4'

        assert body.startswith(f'bcachefs_dev_alloc_bytes{{fs="{FS_UUID}"')
        assert body.endswith(' 409600\n')

    def test_empty_body(self, serve, sysfs_root):
        url = serve(functools.partial(collect_all, sysfs_root))

        with _open(f'{url}/metrics') as response:
            assert response.status == 200
            assert response.read() == b''

    def test_collection_error_is_500(self, serve):
        def broken():
            raise MissingAttribute('/sys/fs/bcachefs/x/dev-0/label', 'No such file or directory')

        url = serve(broken)

        with pytest.raises(urllib.error.HTTPError) as exc_info:
            _open(f'{url}/metrics')
        assert exc_info.value.code == 500
        body = exc_info.value.read().decode('utf-8')
        assert body.startswith('Something went wrong: ')
        assert 'dev-0/label' in body

    def test_unencodable_body_is_500(self, serve):
        """A label that cannot be encoded still gets a response"""
        url = serve(lambda: [Metric(ALLOC_BYTES, {'device': 'sd\udcff'}, 1.0)])

        with pytest.raises(urllib.error.HTTPError) as exc_info:
            _open(f'{url}/metrics')
        assert exc_info.value.code == 500
        assert exc_info.value.read().startswith(b'Something went wrong: ')

    def test_error_message_with_surrogates(self, serve):
        def broken():
            raise MissingAttribute('/sys/fs/bcachefs/x/dev-0/lab\udcffel')

        url = serve(broken)

        with pytest.raises(urllib.error.HTTPError) as exc_info:
            _open(f'{url}/metrics')
        assert exc_info.value.code == 500
        assert b'lab\\udcffel' in exc_info.value.read()

    def test_unknown_path_is_404(self, serve, sysfs_root):
        url = serve(functools.partial(collect_all, sysfs_root))

        with pytest.raises(urllib.error.HTTPError) as exc_info:
            _open(f'{url}/')
        assert exc_info.value.code == 404

    def test_custom_metrics_path(self, serve, sysfs_root):
        url = serve(functools.partial(collect_all, sysfs_root), metrics_path='/bcachefs')

        with _open(f'{url}/bcachefs') as response:
            assert response.status == 200

    def test_each_request_collects_fresh(self, serve, sysfs_root):
        """Nothing is cached between scrapes"""
        calls = []

        def collect():
            calls.append(1)
            return collect_all(sysfs_root)

        url = serve(collect)
        for _ in range(3):
            with _open(f'{url}/metrics'):
                pass

        assert len(calls) == 3
