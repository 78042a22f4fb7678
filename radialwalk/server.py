"""Interactive map server for radialwalk."""

import asyncio
import http.server
import json
import socketserver
import threading
import time
import webbrowser
from functools import partial
from typing import Optional

from .config import CONFIG
from .errors import DiscoveryInProgress, GeocodingError, InvalidCoordinate
from .models import Coordinate
from .session import MapSession


# HTML template for the map page
MAP_HTML = '''<!DOCTYPE html>
<html>
<head>
    <title>radialwalk</title>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <link rel="stylesheet" href="https://unpkg.com/leaflet@1.9.4/dist/leaflet.css" />
    <script src="https://unpkg.com/leaflet@1.9.4/dist/leaflet.js"></script>
    <style>
        * { margin: 0; padding: 0; box-sizing: border-box; }
        body { font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, sans-serif; height: 100vh; display: flex; }
        #sidebar { width: 320px; background: #fff; border-right: 1px solid #ddd; display: flex; flex-direction: column; overflow: hidden; }
        .search { padding: 20px; border-bottom: 1px solid #eee; }
        .search h2 { font-size: 20px; color: #333; margin-bottom: 15px; }
        .search input { width: 100%; padding: 10px; border: 1px solid #ddd; border-radius: 4px; font-size: 14px; }
        .search button { width: 100%; margin-top: 10px; padding: 10px; background: #4CAF50; color: white; border: none; border-radius: 4px; font-size: 14px; cursor: pointer; }
        .search button:disabled { cursor: not-allowed; opacity: 0.7; }
        .hint { margin-top: 10px; font-size: 12px; color: #666; }
        .loading { margin-top: 10px; font-size: 12px; color: #2196F3; font-weight: 500; display: none; }
        .error { margin-top: 10px; font-size: 12px; color: #f44336; min-height: 14px; }
        .list { flex: 1; overflow-y: auto; padding: 15px; }
        .list-header { display: flex; justify-content: space-between; align-items: center; margin-bottom: 10px; }
        .list-header h3 { font-size: 16px; color: #333; }
        .clear { padding: 5px 10px; background: #f44336; color: white; border: none; border-radius: 4px; cursor: pointer; font-size: 12px; }
        .empty { color: #999; font-size: 14px; text-align: center; margin-top: 20px; }
        .item { padding: 10px; border-radius: 4px; margin-bottom: 8px; word-break: break-word; }
        .item-marker { background: #e3f2fd; border: 1px solid #2196F3; display: flex; justify-content: space-between; gap: 10px; }
        .item-flag { background: #fff3e0; border: 1px solid #ff9800; }
        .item-title { font-size: 13px; font-weight: 500; color: #333; margin-bottom: 4px; }
        .item-sub { font-size: 11px; color: #666; }
        .delete { padding: 4px 8px; background: #ff5252; color: white; border: none; border-radius: 3px; cursor: pointer; font-size: 11px; flex-shrink: 0; align-self: flex-start; }
        .status-badge { font-size: 11px; color: #fff; background: #22c55e; padding: 2px 8px; border-radius: 10px; margin-left: 6px; }
        .status-badge.disconnected { background: #ef4444; }
        #map { flex: 1; }
    </style>
</head>
<body>
    <div id="sidebar">
        <div class="search">
            <h2>radialwalk <span id="connection-status" class="status-badge disconnected">offline</span></h2>
            <input id="query" type="text" placeholder="Search for a place or address..." />
            <button id="search-btn">Search</button>
            <p class="hint">Click the map to drop a marker and find points ~5 km away on foot</p>
            <p class="loading" id="loading">Finding routes in 4 directions...</p>
            <p class="error" id="error"></p>
        </div>
        <div class="list">
            <div class="list-header">
                <h3 id="counts">Markers (0) &middot; Flags (0)</h3>
                <button class="clear" id="clear-btn" style="display: none;">Clear all</button>
            </div>
            <div id="items"></div>
        </div>
    </div>
    <div id="map"></div>
    <script>
        var map = L.map('map').setView([{{CENTER_LAT}}, {{CENTER_LON}}], {{ZOOM}});
        L.tileLayer('https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png', {
            attribution: '&copy; OpenStreetMap contributors'
        }).addTo(map);

        var ws = null;
        var loading = false;
        var drawn = L.layerGroup().addTo(map);
        var lastCenter = null;

        var flagIcon = L.divIcon({
            className: '',
            html: '<svg xmlns="http://www.w3.org/2000/svg" width="30" height="40" viewBox="0 0 30 40">' +
                  '<path d="M5 5 L5 35 M5 5 L25 10 L5 15 Z" fill="red" stroke="black" stroke-width="1"/></svg>',
            iconSize: [30, 40],
            iconAnchor: [5, 35],
            popupAnchor: [0, -35]
        });

        function connect() {
            ws = new WebSocket('ws://' + location.hostname + ':{{WS_PORT}}');
            ws.onopen = function() {
                var badge = document.getElementById('connection-status');
                badge.textContent = 'online';
                badge.classList.remove('disconnected');
            };
            ws.onclose = function() {
                var badge = document.getElementById('connection-status');
                badge.textContent = 'offline';
                badge.classList.add('disconnected');
                setTimeout(connect, 2000);
            };
            ws.onmessage = function(event) {
                handleMessage(JSON.parse(event.data));
            };
        }

        function send(type, data) {
            if (ws && ws.readyState === WebSocket.OPEN) {
                ws.send(JSON.stringify({type: type, data: data || {}}));
            }
        }

        function handleMessage(msg) {
            switch(msg.type) {
                case 'state':
                    render(msg.data);
                    break;
                case 'flag':
                    drawFlag(msg.data.flag);
                    drawRoute(msg.data.route);
                    break;
                case 'loading':
                    setLoading(msg.data.value);
                    break;
                case 'error':
                    document.getElementById('error').textContent = msg.data.message;
                    break;
            }
        }

        function setLoading(value) {
            loading = value;
            document.getElementById('loading').style.display = value ? 'block' : 'none';
            document.getElementById('search-btn').disabled = value;
            document.getElementById('query').disabled = value;
            document.getElementById('search-btn').textContent = value ? 'Finding routes...' : 'Search';
        }

        function popupText(lines) {
            var div = document.createElement('div');
            lines.forEach(function(line, i) {
                var el = document.createElement(i === 0 ? 'strong' : 'small');
                el.textContent = line;
                div.appendChild(el);
                div.appendChild(document.createElement('br'));
            });
            return div;
        }

        function drawMarker(marker) {
            var pos = marker.position;
            L.marker(pos).addTo(drawn).bindPopup(popupText([
                marker.name, pos[0].toFixed(5) + ', ' + pos[1].toFixed(5)
            ]));
        }

        function drawFlag(flag) {
            L.marker(flag.position, {icon: flagIcon}).addTo(drawn).bindPopup(popupText([
                flag.direction_label, 'Distance: ' + flag.distance_km.toFixed(2) + 'km', flag.name
            ]));
        }

        function drawRoute(route) {
            L.polyline(route.coordinates, {color: route.color, weight: 4, opacity: 0.7}).addTo(drawn);
        }

        function item(className, title, sub, markerId) {
            var div = document.createElement('div');
            div.className = 'item ' + className;
            var text = document.createElement('div');
            var t = document.createElement('div');
            t.className = 'item-title';
            t.textContent = title;
            var s = document.createElement('div');
            s.className = 'item-sub';
            s.textContent = sub;
            text.appendChild(t);
            text.appendChild(s);
            div.appendChild(text);
            if (markerId) {
                var del = document.createElement('button');
                del.className = 'delete';
                del.textContent = 'Delete';
                del.onclick = function(e) {
                    e.stopPropagation();
                    send('delete_marker', {id: markerId});
                };
                div.appendChild(del);
            }
            return div;
        }

        function render(state) {
            drawn.clearLayers();
            state.routes.forEach(drawRoute);
            state.markers.forEach(drawMarker);
            state.flags.forEach(drawFlag);
            setLoading(state.loading);

            var key = state.center.join(',') + ',' + state.zoom;
            if (key !== lastCenter) {
                map.setView(state.center, state.zoom);
                lastCenter = key;
            }

            document.getElementById('counts').textContent =
                'Markers (' + state.markers.length + ') \\u00b7 Flags (' + state.flags.length + ')';
            document.getElementById('clear-btn').style.display =
                (state.markers.length || state.flags.length) ? 'inline-block' : 'none';

            var items = document.getElementById('items');
            items.innerHTML = '';
            if (!state.markers.length && !state.flags.length) {
                var empty = document.createElement('p');
                empty.className = 'empty';
                empty.textContent = 'No markers yet. Search or click the map!';
                items.appendChild(empty);
                return;
            }
            state.markers.forEach(function(m) {
                items.appendChild(item('item-marker', m.name,
                    m.position[0].toFixed(5) + ', ' + m.position[1].toFixed(5), m.id));
            });
            state.flags.forEach(function(f) {
                items.appendChild(item('item-flag',
                    f.direction_label + ' (' + f.distance_km.toFixed(2) + 'km)', f.name));
            });
        }

        function search() {
            var query = document.getElementById('query').value.trim();
            if (!query || loading) return;
            document.getElementById('error').textContent = '';
            send('search', {query: query});
            document.getElementById('query').value = '';
        }

        document.getElementById('search-btn').onclick = search;
        document.getElementById('query').addEventListener('keydown', function(e) {
            if (e.key === 'Enter') search();
        });
        document.getElementById('clear-btn').onclick = function(e) {
            e.stopPropagation();
            send('clear');
        };

        map.on('click', function(e) {
            if (loading) return;
            document.getElementById('error').textContent = '';
            send('click', {lat: e.latlng.lat, lon: e.latlng.lng});
        });

        connect();
    </script>
</body>
</html>'''


class MapServer:
    """HTTP and WebSocket server for the interactive map"""

    def __init__(self, session: MapSession, http_port: Optional[int] = None,
                 ws_port: Optional[int] = None, open_browser: bool = True):
        self.session = session
        self.http_port = http_port or CONFIG["http_port"]
        self.ws_port = ws_port or CONFIG["ws_port"]
        self.open_browser = open_browser
        self.http_thread = None
        self.ws_thread = None
        self.ws_loop = None
        self.connected_clients: set = set()
        self._running = False

        # Session events go straight to the browser
        self.session.listener = self._send_message

    def start(self):
        """Start HTTP and WebSocket servers in background threads"""
        self._running = True

        self.http_thread = threading.Thread(target=self._run_http_server, daemon=True)
        self.http_thread.start()

        self.ws_thread = threading.Thread(target=self._run_ws_server, daemon=True)
        self.ws_thread.start()

        # Give servers time to start
        time.sleep(0.5)

        url = f"http://localhost:{self.http_port}"
        print(f"Map available at: {url}")
        if self.open_browser:
            webbrowser.open(url)

    def serve_forever(self):
        """Start and block until interrupted"""
        self.start()
        try:
            while self._running:
                time.sleep(0.5)
        except KeyboardInterrupt:
            print("\nStopping map server")
        finally:
            self.stop()

    def render_page(self) -> str:
        center = self.session.center
        return (MAP_HTML
                .replace('{{WS_PORT}}', str(self.ws_port))
                .replace('{{CENTER_LAT}}', repr(center.lat))
                .replace('{{CENTER_LON}}', repr(center.lon))
                .replace('{{ZOOM}}', str(self.session.zoom)))

    def _run_http_server(self):
        """Run the HTTP server for serving the page"""
        handler = partial(_MapHTTPHandler, self)
        with _ReusableTCPServer(("", self.http_port), handler) as httpd:
            httpd.timeout = 0.5
            while self._running:
                httpd.handle_request()

    def _run_ws_server(self):
        """Run the WebSocket server"""
        self.ws_loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self.ws_loop)

        async def handler(websocket):
            self.connected_clients.add(websocket)
            try:
                await websocket.send(json.dumps({"type": "state", "data": self.session.snapshot()}))
                async for message in websocket:
                    # Search hits the network and add_marker may block; keep the loop free
                    reply = await self.ws_loop.run_in_executor(None, self.handle_message, message)
                    if reply:
                        await websocket.send(json.dumps(reply))
            finally:
                self.connected_clients.discard(websocket)

        async def main():
            try:
                import websockets
                async with websockets.serve(handler, "localhost", self.ws_port):
                    while self._running:
                        await asyncio.sleep(0.1)
            except Exception as e:
                print(f"WebSocket server error: {e}")

        self.ws_loop.run_until_complete(main())

    def handle_message(self, message: str) -> Optional[dict]:
        """Apply one browser message to the session.

        Returns an error message for the sender, or None. Successful changes
        reach every client through the session listener.
        """
        try:
            msg = json.loads(message)
            msg_type = msg.get("type")
            data = msg.get("data") or {}
        except (json.JSONDecodeError, AttributeError):
            return _error("Malformed message")
        if not isinstance(data, dict):
            return _error("Malformed message")

        try:
            if msg_type == "click":
                self.session.add_marker(Coordinate(data["lat"], data["lon"]))
            elif msg_type == "search":
                marker = self.session.search(data.get("query", ""))
                if marker is None:
                    return _error("No results found for that search.")
            elif msg_type == "delete_marker":
                self.session.delete_marker(str(data.get("id", "")))
            elif msg_type == "clear":
                self.session.clear_all()
            else:
                return _error(f"Unknown message type: {msg_type}")
        except KeyError as e:
            return _error(f"Missing field: {e}")
        except InvalidCoordinate as e:
            return _error(str(e))
        except DiscoveryInProgress as e:
            return _error(str(e))
        except GeocodingError:
            return _error("Search failed. Please try again.")
        return None

    def _send_message(self, msg_type: str, data: dict):
        """Send a message to all connected WebSocket clients"""
        if not self.connected_clients or not self.ws_loop:
            return

        message = json.dumps({"type": msg_type, "data": data})

        async def send_to_all():
            for client in list(self.connected_clients):
                try:
                    await client.send(message)
                except Exception:
                    self.connected_clients.discard(client)

        try:
            asyncio.run_coroutine_threadsafe(send_to_all(), self.ws_loop)
        except RuntimeError:
            pass  # loop already closed

    def send_log(self, message: str, data: Optional[dict] = None):
        """Mirror a log line to the browser"""
        self._send_message("log", {"message": message, "data": data})

    def stop(self):
        """Stop the servers"""
        self._running = False


def _error(message: str) -> dict:
    return {"type": "error", "data": {"message": message}}


class _ReusableTCPServer(socketserver.TCPServer):
    allow_reuse_address = True


class _MapHTTPHandler(http.server.SimpleHTTPRequestHandler):
    """HTTP handler that serves the map page"""

    def __init__(self, server_ref: MapServer, *args, **kwargs):
        self.server_ref = server_ref
        super().__init__(*args, **kwargs)

    def do_GET(self):
        if self.path == '/' or self.path == '/index.html':
            self.send_response(200)
            self.send_header('Content-type', 'text/html; charset=utf-8')
            self.end_headers()
            self.wfile.write(self.server_ref.render_page().encode("utf-8"))
        else:
            self.send_error(404)

    def log_message(self, format, *args):
        pass  # Suppress HTTP log messages
