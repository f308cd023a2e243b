"""Static file server with a live-reload channel: FastAPI application."""

import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.responses import FileResponse, HTMLResponse, JSONResponse, Response

from .config import ServerConfig
from .reload import ReloadChannel

logger = logging.getLogger(__name__)

CLIENT_SCRIPT_PATH = "/livereload.js"

NO_CACHE = {"Cache-Control": "no-store"}

_CLIENT_JS = """\
(function () {
  if (window.__elmDevserverReload) { return; }
  window.__elmDevserverReload = true;
  var scheme = location.protocol === "https:" ? "wss://" : "ws://";
  var url = scheme + location.host + "%(path)s";

  function refreshStylesheets() {
    var links = document.querySelectorAll('link[rel="stylesheet"]');
    for (var i = 0; i < links.length; i++) {
      var href = links[i].href.replace(/[?&]livereload=\\d+/, "");
      links[i].href = href + (href.indexOf("?") < 0 ? "?" : "&") + "livereload=" + Date.now();
    }
  }

  function connect() {
    var socket = new WebSocket(url);
    socket.onmessage = function (event) {
      var message = JSON.parse(event.data);
      if (message.command !== "reload") { return; }
      if (message.liveCSS && /\\.css$/.test(message.path)) {
        refreshStylesheets();
      } else {
        location.reload();
      }
    };
    socket.onclose = function () { setTimeout(connect, 1000); };
  }

  connect();
})();
"""


def client_script(livereload_path: str) -> str:
    """JavaScript that connects a page to the reload channel."""
    return _CLIENT_JS % {"path": livereload_path}


def inject_script(html: str, src: str = CLIENT_SCRIPT_PATH) -> str:
    """
    Insert the live-reload client tag before ``</body>``.

    Pages that already reference the client are returned unchanged; pages
    without a body tag get the script appended.
    """
    if src in html:
        return html
    tag = f'<script src="{src}"></script>\n'
    index = html.lower().rfind("</body>")
    if index < 0:
        return html + tag
    return html[:index] + tag + html[index:]


def resolve_static(root: Path, path: str) -> Optional[Path]:
    """
    Map a request path onto a file below ``root``.

    Directories resolve to their ``index.html``. Returns None for missing
    files and for paths escaping the root.
    """
    root = root.resolve()
    file_path = (root / path.lstrip("/")).resolve()
    if file_path != root and root not in file_path.parents:
        return None
    if file_path.is_dir():
        file_path = file_path / "index.html"
    if not file_path.is_file():
        return None
    return file_path


def create_app(
    root_dir: Path,
    channel: Optional[ReloadChannel] = None,
    config: Optional[ServerConfig] = None,
) -> FastAPI:
    """
    Build the dev server application.

    Args:
        root_dir: Directory served at ``/``
        channel: Reload channel shared with the watch loop
        config: Server configuration
    """
    cfg = config or ServerConfig()
    reload_channel = channel or ReloadChannel()
    root = Path(root_dir).resolve()

    app = FastAPI(title="Elm Dev Server", docs_url=None, redoc_url=None, openapi_url=None)
    app.state.reload_channel = reload_channel
    app.state.root_dir = root

    # ------------------------------------------------------------------
    # Live reload
    # ------------------------------------------------------------------

    @app.websocket(cfg.livereload_path)
    async def livereload(websocket: WebSocket):
        await reload_channel.connect(websocket)
        try:
            while True:
                # Clients may send their own hello or info; nothing to answer.
                await websocket.receive_text()
        except WebSocketDisconnect:
            pass
        finally:
            reload_channel.disconnect(websocket)

    @app.get(CLIENT_SCRIPT_PATH)
    def livereload_js():
        return Response(
            client_script(cfg.livereload_path),
            media_type="application/javascript",
            headers=NO_CACHE,
        )

    # ------------------------------------------------------------------
    # Static files
    # ------------------------------------------------------------------

    @app.api_route("/{path:path}", methods=["GET", "HEAD"])
    def static_file(path: str):
        file_path = resolve_static(root, path)
        if file_path is None:
            logger.debug(f"Not found: /{path}")
            return JSONResponse({"error": "Not found"}, status_code=404)

        if cfg.inject_script and file_path.suffix.lower() in (".html", ".htm"):
            html = file_path.read_text(encoding="utf-8", errors="replace")
            return HTMLResponse(inject_script(html), headers=NO_CACHE)

        return FileResponse(str(file_path), headers=NO_CACHE)

    return app
