"""Tests for the static file server and the live-reload channel."""

import socket

import httpx
import pytest
from fastapi.testclient import TestClient

from src.server.app import create_app, inject_script, resolve_static
from src.server.config import ServerConfig
from src.server.exceptions import PortUnavailableError
from src.server.reload import ReloadChannel
from src.server.service import StaticServer, bind_socket, serve


INDEX_HTML = """<!DOCTYPE html>
<html>
<head><title>Sample</title></head>
<body>
<div id="app"></div>
<script src="/app.js"></script>
</body>
</html>
"""


@pytest.fixture
def site(tmp_path):
    root = tmp_path / "sample"
    (root / "css").mkdir(parents=True)
    (root / "index.html").write_text(INDEX_HTML)
    (root / "app.js").write_text("var Elm = {};")
    (root / "css" / "main.css").write_text("body { margin: 0; }")
    (tmp_path / "secret.txt").write_text("do not serve")
    return root


@pytest.fixture
def blocker():
    """A listening socket holding a local port."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    sock.listen(1)
    yield sock
    sock.close()


class TestInjectScript:
    """Tests for inject_script."""

    def test_inserted_before_body_end(self):
        html = inject_script("<html><body><p>hi</p></body></html>")
        assert html == '<html><body><p>hi</p><script src="/livereload.js"></script>\n</body></html>'

    def test_last_body_tag(self):
        html = inject_script("<body>text about </body> tags</BODY>")
        assert html.endswith('<script src="/livereload.js"></script>\n</BODY>')
        assert html.count("livereload.js") == 1

    def test_without_body(self):
        assert inject_script("<p>fragment</p>") == '<p>fragment</p><script src="/livereload.js"></script>\n'

    def test_already_present(self):
        html = '<body><script src="/livereload.js"></script></body>'
        assert inject_script(html) == html


class TestResolveStatic:
    """Tests for resolve_static."""

    def test_file(self, site):
        assert resolve_static(site, "css/main.css") == (site / "css" / "main.css").resolve()

    def test_directory_index(self, site):
        assert resolve_static(site, "") == (site / "index.html").resolve()
        assert resolve_static(site, "/") == (site / "index.html").resolve()

    def test_missing(self, site):
        assert resolve_static(site, "missing.js") is None
        assert resolve_static(site, "css") is None

    def test_outside_root(self, site):
        assert resolve_static(site, "../secret.txt") is None


class TestStaticRoutes:
    """Tests for the HTTP routes."""

    def test_index_has_client_script(self, site):
        client = TestClient(create_app(site))

        response = client.get("/")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert '<script src="/livereload.js"></script>' in response.text
        assert '<div id="app"></div>' in response.text

    def test_script_injection_disabled(self, site):
        client = TestClient(create_app(site, config=ServerConfig(inject_script=False)))

        response = client.get("/index.html")

        assert response.text == INDEX_HTML

    def test_javascript_file(self, site):
        client = TestClient(create_app(site))

        response = client.get("/app.js")

        assert response.status_code == 200
        assert response.text == "var Elm = {};"
        assert response.headers["cache-control"] == "no-store"

    def test_serves_latest_content(self, site):
        client = TestClient(create_app(site))
        assert client.get("/app.js").text == "var Elm = {};"

        (site / "app.js").write_text("var Elm = {v: 2};")

        assert client.get("/app.js").text == "var Elm = {v: 2};"

    def test_css_file(self, site):
        client = TestClient(create_app(site))

        response = client.get("/css/main.css")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/css")

    def test_not_found(self, site):
        client = TestClient(create_app(site))

        response = client.get("/missing.js")

        assert response.status_code == 404
        assert response.json() == {"error": "Not found"}

    def test_head(self, site):
        client = TestClient(create_app(site))
        assert client.head("/app.js").status_code == 200

    def test_client_script(self, site):
        client = TestClient(create_app(site))

        response = client.get("/livereload.js")

        assert response.status_code == 200
        assert "javascript" in response.headers["content-type"]
        assert '"/livereload"' in response.text
        assert "location.reload()" in response.text


class TestReloadChannel:
    """Tests for live-reload delivery."""

    def test_hello_on_connect(self, site):
        client = TestClient(create_app(site))

        with client.websocket_connect("/livereload") as ws:
            hello = ws.receive_json()

        assert hello["command"] == "hello"
        assert "http://livereload.com/protocols/official-7" in hello["protocols"]

    def test_push_reaches_connected_client(self, site):
        channel = ReloadChannel()
        client = TestClient(create_app(site, channel))

        with client.websocket_connect("/livereload") as ws:
            ws.receive_json()
            assert channel.client_count() == 1

            future = channel.push_reload("build/app.js")
            assert future.result(timeout=5) == 1

            message = ws.receive_json()

        assert message == {"command": "reload", "path": "build/app.js", "liveCSS": True}

    def test_push_without_clients_is_dropped(self, site):
        channel = ReloadChannel()
        client = TestClient(create_app(site, channel))

        assert channel.push_reload("sample/app.js") is None

        with client.websocket_connect("/livereload") as ws:
            ws.receive_json()
            channel.push_reload("sample/index.html").result(timeout=5)
            message = ws.receive_json()

        # The earlier push was not replayed to the late client.
        assert message["path"] == "sample/index.html"

    def test_client_count_after_disconnect(self, site):
        channel = ReloadChannel()
        client = TestClient(create_app(site, channel))

        with client.websocket_connect("/livereload") as ws:
            ws.receive_json()
            ws.send_text('{"command": "hello"}')
            assert channel.client_count() == 1

        assert channel.client_count() == 0


class TestStaticServer:
    """Tests for the uvicorn-backed StaticServer."""

    def test_bind_socket_taken(self, blocker):
        port = blocker.getsockname()[1]

        with pytest.raises(PortUnavailableError) as excinfo:
            bind_socket("127.0.0.1", port)

        assert excinfo.value.port == port

    def test_start_on_taken_port(self, site, blocker):
        port = blocker.getsockname()[1]
        server = StaticServer(site, ServerConfig(host="127.0.0.1", port=port))

        with pytest.raises(PortUnavailableError):
            server.start()

        assert not server.is_running

    def test_default_port(self):
        assert ServerConfig().port == 8000

    def test_access_log_off_by_default(self):
        assert ServerConfig().access_log is False

    def test_access_log_setting(self, site, monkeypatch):
        import uvicorn

        seen = {}
        real_config = uvicorn.Config

        def capture(app, **kwargs):
            seen.update(kwargs)
            return real_config(app, **kwargs)

        monkeypatch.setattr(uvicorn, "Config", capture)
        config = ServerConfig(host="127.0.0.1", port=0, access_log=True, log_level="info")
        server = StaticServer(site, config)
        server.start()
        try:
            assert httpx.get(f"{server.url}/app.js", timeout=5.0).status_code == 200
        finally:
            server.stop()

        assert seen["access_log"] is True
        assert seen["log_level"] == "info"

    def test_serves_over_http(self, site):
        server = StaticServer(site, ServerConfig(host="127.0.0.1", port=0))
        server.start()
        try:
            assert server.is_running
            response = httpx.get(f"{server.url}/app.js", timeout=5.0)
            assert response.status_code == 200
            assert response.text == "var Elm = {};"
        finally:
            server.stop()

        assert not server.is_running

    def test_url(self, site):
        server = StaticServer(site)
        assert server.url == "http://localhost:8000"

    def test_serve(self, site):
        server = serve(site, port=0, host="127.0.0.1")
        try:
            response = httpx.get(f"{server.url}/", timeout=5.0)
            assert response.status_code == 200
            assert "/livereload.js" in response.text
        finally:
            server.stop()
