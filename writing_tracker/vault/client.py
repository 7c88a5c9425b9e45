"""WebSocket client for a host application that owns the vault."""

import asyncio
import json
import logging
from typing import Awaitable, Callable, Optional

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed

from writing_tracker.goals.errors import HostError, NotFound

from .paths import candidate_targets, get_parent_folder

logger = logging.getLogger(__name__)

MODIFY_EVENT = "vault_modify"

ChangeCallback = Callable[[str, Optional[str]], Awaitable[None]]


class HostClient:
    """
    WebSocket client for the host's vault API.

    One reader task owns the connection after authentication. It hands each
    result to the command waiting on that id and queues subscription events,
    so commands may run concurrently with each other and with watch().
    """

    def __init__(self, host_url: str, host_token: str):
        """
        Initialize host client.

        Args:
            host_url: Host application URL (e.g., http://localhost:27124)
            host_token: Access token issued by the host
        """
        self.host_url = host_url
        self.host_token = host_token
        self.ws_url = self._convert_to_ws_url(host_url)
        self.websocket: Optional[ClientConnection] = None
        self._message_id = 0
        self._pending: dict[int, asyncio.Future] = {}
        self._reader: Optional[asyncio.Task] = None
        self._events: Optional[asyncio.Queue] = None
        self._subscription_id: Optional[int] = None

    def _convert_to_ws_url(self, http_url: str) -> str:
        """Convert HTTP URL to WebSocket URL."""
        ws_url = http_url.replace("http://", "ws://").replace("https://", "wss://")
        if not ws_url.endswith("/"):
            ws_url += "/"
        return ws_url + "api/websocket"

    @property
    def connected(self) -> bool:
        return self.websocket is not None and self._reader is not None and not self._reader.done()

    async def connect(self):
        """Connect and authenticate to the host WebSocket API."""
        logger.info(f"Connecting to {self.ws_url}")

        self.websocket = await connect(self.ws_url)

        # Receive auth required message
        auth_required = json.loads(await self.websocket.recv())
        logger.debug(f"Auth required: {auth_required}")

        if auth_required.get("type") != "auth_required":
            raise HostError(f"Unexpected message: {auth_required}")

        # Send auth token
        await self.websocket.send(
            json.dumps({"type": "auth", "access_token": self.host_token})
        )

        # Receive auth result
        auth_result = json.loads(await self.websocket.recv())
        logger.debug(f"Auth result: {auth_result}")

        if auth_result.get("type") != "auth_ok":
            raise HostError(f"Authentication failed: {auth_result}")

        self._reader = asyncio.create_task(self._read_messages())
        logger.info("✓ Connected and authenticated to host")

    async def disconnect(self):
        """Disconnect from the host."""
        if self.websocket:
            await self.websocket.close()

        if self._reader:
            self._reader.cancel()
            try:
                await self._reader
            except asyncio.CancelledError:
                pass
            self._reader = None

        if self.websocket:
            self.websocket = None
            logger.info("Disconnected from host")

    async def _read_messages(self):
        """Route every incoming message to its command or to the event queue."""
        try:
            async for raw in self.websocket:
                try:
                    message = json.loads(raw)
                except ValueError:
                    logger.warning(f"Ignoring malformed message: {raw!r}")
                    continue

                if message.get("type") == "event":
                    if self._events is not None and message.get("id") == self._subscription_id:
                        self._events.put_nowait(message.get("event", {}))
                    continue

                future = self._pending.pop(message.get("id"), None)
                if future is None:
                    logger.debug(f"Dropping unexpected message: {message}")
                elif not future.done():
                    future.set_result(message)
        except ConnectionClosed as e:
            logger.warning(f"Connection to host closed: {e}")
        finally:
            for future in self._pending.values():
                if not future.done():
                    future.set_exception(HostError("Connection to host closed"))
            self._pending.clear()
            if self._events is not None:
                self._events.put_nowait(None)

    async def send_command(self, command_type: str, **kwargs):
        """
        Send a command to the host and wait for its result.

        Args:
            command_type: Command type (e.g., "vault/read_file")
            **kwargs: Additional command parameters

        Returns:
            The "result" field of the response

        Raises:
            NotFound: If the host reports error code "not_found"
            HostError: For any other failure
        """
        if not self.connected:
            raise HostError("Not connected to host")

        self._message_id += 1
        message_id = self._message_id
        message = {"id": message_id, "type": command_type, **kwargs}

        future = asyncio.get_running_loop().create_future()
        self._pending[message_id] = future

        logger.debug(f"Sending command: {command_type} (id={message_id})")
        try:
            await self.websocket.send(json.dumps(message))
            response = await future
        finally:
            self._pending.pop(message_id, None)

        if not response.get("success"):
            error = response.get("error") or {}
            if error.get("code") == "not_found":
                raise NotFound(kwargs.get("path", command_type))
            logger.error(f"Command failed: {response}")
            raise HostError(f"Command failed: {error.get('message', 'Unknown error')}")

        logger.debug(f"Received response for id={message_id}")
        return response.get("result")

    async def read_file(self, path: str) -> str:
        """
        Read a file's content from the host.

        Raises:
            NotFound: If the path no longer exists
        """
        result = await self.send_command("vault/read_file", path=path)
        return result.get("content", "") if isinstance(result, dict) else str(result or "")

    async def list_files(self) -> list[str]:
        """Every file path in the vault."""
        return list(await self.send_command("vault/list_files") or [])

    async def list_markdown_files(self, folder_path: str) -> list[str]:
        """Markdown files directly inside a folder."""
        files = await self.send_command("vault/list_markdown_files") or []
        return [f for f in files if get_parent_folder(f) == folder_path]

    def get_parent_folder(self, path: str) -> str:
        return get_parent_folder(path)

    async def list_targets(self) -> list[str]:
        return candidate_targets(await self.list_files())

    async def watch(self, on_change: ChangeCallback):
        """
        Subscribe to modify events and forward them until the connection closes.

        Events may carry the new file content, which is passed along so the
        file does not have to be read back.
        """
        self._events = asyncio.Queue()
        # send_command takes the next id before it first yields
        self._subscription_id = self._message_id + 1
        try:
            await self.send_command("subscribe_events", event_type=MODIFY_EVENT)
            logger.info(f"Subscribed to {MODIFY_EVENT} events")

            while True:
                event = await self._events.get()
                if event is None:
                    break

                if event.get("event_type") != MODIFY_EVENT:
                    continue

                data = event.get("data", {})
                path = data.get("path")
                if not path:
                    logger.warning(f"Modify event without path: {event}")
                    continue

                await on_change(path, data.get("content"))
        finally:
            self._events = None
            self._subscription_id = None


async def test_connection():
    """Test host connection."""
    import os
    from dotenv import load_dotenv

    load_dotenv()

    host_url = os.getenv("HOST_URL")
    host_token = os.getenv("HOST_TOKEN")

    if not host_url or not host_token:
        print("Error: HOST_URL and HOST_TOKEN must be set in .env file")
        return

    client = HostClient(host_url, host_token)

    try:
        await client.connect()

        files = await client.list_files()
        print(f"\nFound {len(files)} files")
        for path in files[:20]:
            print(f"  - {path}")

    finally:
        await client.disconnect()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(test_connection())
