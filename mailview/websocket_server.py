"""WebSocket render service for viewer front ends."""

import asyncio
import logging
import uuid

import websockets
from websockets.asyncio.server import Server, ServerConnection

from .config import Config
from .inspector import count_resources, inspect_resources
from .protocol import Action, Event, Request, Response, ServerEvent, parse_message, validate_params
from .styles import STYLESHEET, STYLESHEET_VERSION
from .transform import ContentTransformer

logger = logging.getLogger("mailview.websocket")


class RenderServer:
    """WebSocket server that renders email bodies for connected viewers."""

    def __init__(self, config: Config):
        self.config = config
        self.transformer = ContentTransformer(config.render)
        self._clients: dict[str, ServerConnection] = {}
        self._server: Server | None = None
        self._running = False

    async def start(self) -> None:
        """Start the WebSocket server."""
        self._running = True
        host, port = self.config.websocket.host, self.config.websocket.port
        logger.info(f"Starting render service on {host}:{port}")

        self._server = await websockets.serve(self._handle_client, host, port)

        # Keep running until stopped
        while self._running:
            await asyncio.sleep(1)

    async def stop(self) -> None:
        """Stop the WebSocket server."""
        self._running = False
        if self._server:
            self._server.close()
            await self._server.wait_closed()
            logger.info("Render service stopped")

    async def _handle_client(self, websocket: ServerConnection) -> None:
        """Handle a client connection."""
        client_id = str(uuid.uuid4())[:8]

        self._clients[client_id] = websocket
        logger.info(f"Client {client_id} connected from {websocket.remote_address}")

        await self._send_event(websocket, Event.CONNECTED, {"clientId": client_id})

        try:
            async for message in websocket:
                text = message if isinstance(message, str) else message.decode("utf-8")
                await self._handle_message(client_id, websocket, text)
        except websockets.ConnectionClosed:
            logger.info(f"Client {client_id} disconnected")
        finally:
            del self._clients[client_id]

    async def _handle_message(
        self, client_id: str, websocket: ServerConnection, raw: str
    ) -> None:
        """Handle an incoming message from a client."""
        parsed = parse_message(raw)

        if isinstance(parsed, Request):
            response = self.handle_request(parsed)
            await websocket.send(response.to_json())
            return

        logger.warning(f"Unknown message from {client_id}: {raw[:100]}")

    def handle_request(self, request: Request) -> Response:
        """Handle a request from a viewer."""
        error = validate_params(request)
        if error:
            return Response.failure(request.id, error)

        try:
            if request.action == Action.PING.value:
                return Response.success(request.id, {"pong": True})

            elif request.action == Action.RENDER.value:
                body = request.params.get("body")
                result = self.transformer.render(body, request.params.get("allowRemote"))
                return Response.success(request.id, {
                    "html": result.html,
                    "resourceCount": result.resource_count,
                })

            elif request.action == Action.COUNT.value:
                count = count_resources(request.params.get("body"))
                return Response.success(request.id, {"resourceCount": count})

            elif request.action == Action.INSPECT.value:
                render_config = self.config.render
                resources = inspect_resources(
                    request.params.get("body"),
                    render_config.trusted_domains,
                    render_config.exact_host_match,
                )
                return Response.success(request.id, {
                    "resources": [resource.to_dict() for resource in resources],
                })

            elif request.action == Action.STYLES.value:
                return Response.success(request.id, {
                    "version": STYLESHEET_VERSION,
                    "css": STYLESHEET,
                })

            else:
                return Response.failure(request.id, f"Unknown action: {request.action}")

        except Exception as e:
            logger.error(f"Error handling request {request.id}: {e}")
            return Response.failure(request.id, str(e))

    async def _send_event(
        self, websocket: ServerConnection, event: Event, data: dict
    ) -> None:
        """Send an event to a specific client."""
        server_event = ServerEvent(event=event.value, data=data)
        await websocket.send(server_event.to_json())

    @property
    def client_count(self) -> int:
        """Return number of connected clients."""
        return len(self._clients)


async def run_render_server(config: Config) -> None:
    """Run the render service until cancelled."""
    server = RenderServer(config)
    try:
        await server.start()
    finally:
        await server.stop()
