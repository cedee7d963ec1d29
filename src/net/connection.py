"""
The stream between two peers.
----

One peer hosts: it listens on a port and accepts exactly one opponent. The other peer joins by connecting to it.
Right after the connection is made the host picks the colors (uniformly at random) and tells the joiner.

There is no reconnection, no timeout and no acknowledgement. Closing the socket is the only way to stop
a pending read, which then fails with ConnectionLostError.
"""

import logging
import random
import socket
from typing import Callable, Optional, Self

from src.core.exceptions import ConnectionLostError, PeerConnectionError
from src.core.shared_types import Color
from src.net.protocol import (
    HANDSHAKE_SIZE,
    MOVE_MESSAGE_SIZE,
    MoveMessage,
    decode_color_assignment,
    encode_color_assignment,
)

logger = logging.getLogger(__name__)

ColorPicker = Callable[[], Color]


def random_color() -> Color:
    return random.choice([Color.WHITE, Color.BLACK])


def recv_exact(sock: socket.socket, size: int) -> bytes:
    """Block until exactly `size` bytes were read. The peer closing the stream half-way is a lost connection."""
    chunks: list[bytes] = []
    remaining = size
    while remaining > 0:
        try:
            chunk = sock.recv(remaining)
        except OSError as e:
            raise ConnectionLostError(f"Connection to opponent lost: {e}") from e
        if not chunk:
            raise ConnectionLostError("Connection closed by opponent.")
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


class PeerListener:
    """The hosting side, before the opponent showed up."""

    def __init__(self, port: int, address: str = "") -> None:
        try:
            self._socket = socket.create_server((address, port))
        except OSError as e:
            raise PeerConnectionError(f"Could not listen on port {port}: {e}") from e
        self.port: int = self._socket.getsockname()[1]
        logger.info("Waiting for an opponent on port %d", self.port)

    def accept(self, pick_joiner_color: ColorPicker = random_color) -> "PeerConnection":
        """Accept one opponent, assign the colors and stop listening."""
        try:
            sock, peer_address = self._socket.accept()
        except OSError as e:
            raise PeerConnectionError(f"Could not accept an opponent: {e}") from e
        finally:
            self.close()

        joiner_color = pick_joiner_color()
        connection = PeerConnection(sock, local_color=joiner_color.opponent)
        try:
            sock.sendall(encode_color_assignment(joiner_color))
        except OSError as e:
            connection.close()
            raise PeerConnectionError(f"Could not send color assignment: {e}") from e

        logger.info(
            "Opponent connected from %s, playing %s", peer_address, joiner_color
        )
        return connection

    def close(self) -> None:
        self._socket.close()


class PeerConnection:
    """A connected stream to the opponent, plus the color this side plays."""

    def __init__(self, sock: socket.socket, local_color: Color) -> None:
        self._socket = sock
        self.local_color = local_color
        self.closed = False

    @classmethod
    def host(
        cls, port: int, address: str = "", pick_joiner_color: ColorPicker = random_color
    ) -> Self:
        """Listen and block until exactly one opponent connected"""
        return PeerListener(port, address).accept(pick_joiner_color)

    @classmethod
    def join(cls, address: str, port: int, timeout: Optional[float] = None) -> Self:
        """Connect to a host and block until it told us our color"""
        try:
            sock = socket.create_connection((address, port), timeout=timeout)
        except OSError as e:
            raise PeerConnectionError(
                f"Could not connect to {address}:{port}: {e}"
            ) from e
        # the connect timeout must not apply to the (unbounded) wait for the opponent's moves
        sock.settimeout(None)

        try:
            local_color = decode_color_assignment(recv_exact(sock, HANDSHAKE_SIZE))
        except Exception:
            sock.close()
            raise
        logger.info("Joined game at %s:%d, playing %s", address, port, local_color)
        return cls(sock, local_color)

    def send_move(self, message: MoveMessage) -> None:
        try:
            self._socket.sendall(message.to_bytes())
        except OSError as e:
            raise PeerConnectionError(f"Could not send move to opponent: {e}") from e
        logger.debug("Sent %s", message)

    def receive_move(self) -> MoveMessage:
        """The only place a networked game waits for the opponent"""
        message = MoveMessage.from_bytes(recv_exact(self._socket, MOVE_MESSAGE_SIZE))
        logger.debug("Received %s", message)
        return message

    def close(self) -> None:
        """Tear down the stream. A read pending in another thread fails right away."""
        if self.closed:
            return
        self.closed = True
        try:
            self._socket.shutdown(socket.SHUT_RDWR)
        except OSError:
            # already disconnected by the peer
            pass
        self._socket.close()
        logger.info("Connection to opponent closed")
