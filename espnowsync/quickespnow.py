"""Queued ESP-NOW style messaging over a pluggable radio."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Optional

from .peers import PeerList
from .ringbuffer import RingBuffer

BROADCAST_ADDRESS = b"\xff" * 6
MIN_WIFI_CHANNEL = 0
MAX_WIFI_CHANNEL = 14
CURRENT_WIFI_CHANNEL = 255
MAX_MESSAGE_LENGTH = 250
ADDRESS_LENGTH = 6
QUEUE_SIZE = 3
SEND_SUCCESS = 0

ReceivedCallback = Callable[[bytes, bytes, int, bool], None]
SentCallback = Callable[[bytes, int], None]

_log = logging.getLogger(__name__)


class Interface(IntEnum):
    """Radio interface the messages go out on."""

    STA = 0
    AP = 1


class EspNowError(Exception):
    """Raised when the radio or the messaging layer cannot do what was asked."""


class Radio(ABC):
    """The low level radio that actually moves frames."""

    @abstractmethod
    def send(self, dst: bytes, payload: bytes) -> None:
        """Hand one frame to the radio; raise ``EspNowError`` on failure."""

    @abstractmethod
    def add_peer(self, mac: bytes, channel: int) -> None:
        """Register ``mac`` on ``channel``, or update its channel if known."""

    @abstractmethod
    def delete_peer(self, mac: bytes) -> None:
        """Forget the peer ``mac``."""

    @abstractmethod
    def set_channel(self, channel: int) -> None:
        """Tune the radio to ``channel``."""

    @abstractmethod
    def current_channel(self) -> int:
        """Channel the radio is tuned to."""


@dataclass(frozen=True)
class _TxItem:
    dst: bytes
    payload: bytes


@dataclass(frozen=True)
class _RxItem:
    src: bytes
    dst: bytes
    payload: bytes
    rssi: int


def _address(mac, what: str) -> bytes:
    data = bytes(mac)
    if len(data) != ADDRESS_LENGTH:
        raise ValueError(f"{what} must have {ADDRESS_LENGTH} bytes, got {len(data)}")
    return data


def _mac_str(mac: bytes) -> str:
    return ":".join(f"{b:02x}" for b in mac)


class QuickEspNow:
    """Transmit and receive queues in front of a :class:`Radio`.

    Outgoing messages are queued by :meth:`send` and handed to the radio one
    at a time by :meth:`process_tx`; the next one goes out only after the
    radio confirms the previous one through :meth:`handle_sent`. Incoming
    frames are queued by :meth:`handle_received` and delivered to the
    receive callback by :meth:`process_rx`. Both queues keep the newest
    ``QUEUE_SIZE`` messages.
    """

    def __init__(self, radio: Radio, clock: Optional[Callable[[], int]] = None) -> None:
        self._radio = radio
        self._peers = PeerList(clock=clock)
        self._peer_channels: dict[bytes, int] = {}
        self._interface = Interface.STA
        self._channel = 0
        self._follow_wifi_channel = False
        self._ready_to_send = True
        self._transmit_enabled = True
        self._started = False
        self._tx_queue = RingBuffer(QUEUE_SIZE)
        self._rx_queue = RingBuffer(QUEUE_SIZE)
        self._data_received: Optional[ReceivedCallback] = None
        self._data_sent: Optional[SentCallback] = None

    @property
    def channel(self) -> int:
        """Channel in use."""
        return self._channel

    @property
    def interface(self) -> Interface:
        """Interface in use."""
        return self._interface

    def begin(self, channel: int = CURRENT_WIFI_CHANNEL, interface: int = Interface.STA) -> None:
        """Start messaging on ``channel``; ``CURRENT_WIFI_CHANNEL`` follows the radio."""
        try:
            self._interface = Interface(interface)
        except ValueError:
            raise ValueError(f"unknown wifi interface {interface}") from None
        if channel != CURRENT_WIFI_CHANNEL and not MIN_WIFI_CHANNEL <= channel <= MAX_WIFI_CHANNEL:
            raise ValueError(f"invalid wifi channel {channel}")
        if channel == CURRENT_WIFI_CHANNEL:
            channel = self._radio.current_channel()
            self._follow_wifi_channel = True
        else:
            try:
                self.set_channel(channel)
            except EspNowError as exc:
                _log.debug("Error setting wifi channel %d: %s", channel, exc)
        _log.info(
            "Starting ESP-NOW in channel %d interface %s", channel, self._interface.name
        )
        self._channel = channel
        self._tx_queue = RingBuffer(QUEUE_SIZE)
        self._rx_queue = RingBuffer(QUEUE_SIZE)
        self._ready_to_send = True
        self._started = True

    def stop(self) -> None:
        """Stop messaging and discard queued messages."""
        _log.info("ESP-NOW stop")
        self._started = False
        self._tx_queue = RingBuffer(QUEUE_SIZE)
        self._rx_queue = RingBuffer(QUEUE_SIZE)

    def set_channel(self, channel: int) -> None:
        """Tune to ``channel``; not allowed while following the radio's channel."""
        if self._follow_wifi_channel:
            raise EspNowError("cannot set channel while following WiFi channel")
        self._radio.set_channel(channel)
        self._channel = channel

    def send(self, dst, payload) -> None:
        """Queue ``payload`` for ``dst``, dropping the oldest queued message if full."""
        if not self._started:
            raise EspNowError("messaging has not been started")
        address = _address(dst, "destination address")
        data = bytes(payload)
        if not data:
            raise ValueError("payload must not be empty")
        if len(data) > MAX_MESSAGE_LENGTH:
            raise ValueError(
                f"payload of {len(data)} bytes exceeds {MAX_MESSAGE_LENGTH}"
            )
        if not self._tx_queue.push(_TxItem(address, data)):
            _log.debug("Message dropped")
        _log.debug("%d messages queued. Len: %d", len(self._tx_queue), len(data))

    def send_broadcast(self, payload) -> None:
        """Queue ``payload`` for every listener."""
        self.send(BROADCAST_ADDRESS, payload)

    def on_data_received(self, callback: Optional[ReceivedCallback]) -> None:
        """Call ``callback(address, data, rssi, broadcast)`` for each received message."""
        self._data_received = callback

    def on_data_sent(self, callback: Optional[SentCallback]) -> None:
        """Call ``callback(address, status)`` when the radio reports a send result."""
        self._data_sent = callback

    def enable_transmit(self, enable: bool) -> None:
        """Pause or resume the processing of both queues."""
        _log.debug("Send esp-now task %s", "enabled" if enable else "disabled")
        self._transmit_enabled = bool(enable)

    def process_tx(self) -> int:
        """Hand queued messages to the radio while it is ready; return how many went out."""
        if not self._transmit_enabled:
            return 0
        if not self._ready_to_send:
            _log.debug("Not ready to send")
            return 0
        sent = 0
        while self._ready_to_send and not self._tx_queue.is_empty():
            message = self._tx_queue.pop()
            if self._send_message(message):
                sent += 1
        return sent

    def process_rx(self) -> bool:
        """Deliver the oldest received message; return whether there was one."""
        if not self._transmit_enabled or self._rx_queue.is_empty():
            return False
        message = self._rx_queue.pop()
        _log.debug(
            "Received message from %s Len: %d", _mac_str(message.src), len(message.payload)
        )
        if self._data_received is not None:
            broadcast = message.dst == BROADCAST_ADDRESS
            self._data_received(message.src, message.payload, message.rssi, broadcast)
        return True

    def handle_received(self, src, dst, payload, rssi: int) -> None:
        """Queue a frame the radio received, dropping the oldest if the queue is full."""
        source = _address(src, "source address")
        destination = _address(dst, "destination address")
        data = bytes(payload)
        if len(data) > MAX_MESSAGE_LENGTH:
            raise ValueError(
                f"payload of {len(data)} bytes exceeds {MAX_MESSAGE_LENGTH}"
            )
        if not -128 <= rssi <= 127:
            raise ValueError(f"rssi {rssi} does not fit in a signed byte")
        if not self._rx_queue.push(_RxItem(source, destination, data, rssi)):
            _log.debug("Rx message dropped")

    def handle_sent(self, mac, status: int) -> None:
        """Radio confirmation of the last send; lets the next message go out."""
        self._ready_to_send = True
        _log.debug("Ready to send. Status: %d", status)
        if self._data_sent is not None:
            self._data_sent(bytes(mac), status)

    def address_length(self) -> int:
        """Bytes in an address."""
        return ADDRESS_LENGTH

    def max_message_length(self) -> int:
        """Largest payload accepted by :meth:`send`."""
        return MAX_MESSAGE_LENGTH

    def _send_message(self, message: _TxItem) -> bool:
        self._add_peer(message.dst)
        self._ready_to_send = False
        try:
            self._radio.send(message.dst, message.payload)
        except EspNowError as exc:
            _log.warning(
                "Error sending message to %s. Len: %d: %s",
                _mac_str(message.dst),
                len(message.payload),
                exc,
            )
            self._ready_to_send = True
            return False
        _log.debug("Message to %s sent. Len: %d", _mac_str(message.dst), len(message.payload))
        return True

    def _add_peer(self, mac: bytes) -> bool:
        if len(self._peers) >= MAX_PEERS_OF(self._peers):
            deleted = self._peers.delete_oldest()
            if deleted is None:
                _log.error("Error deleting peer")
                return False
            self._peer_channels.pop(deleted, None)
            try:
                self._radio.delete_peer(deleted)
            except EspNowError as exc:
                _log.warning("Error deleting peer %s: %s", _mac_str(deleted), exc)

        if self._peers.peer_exists(mac):
            current = self._peer_channels.get(mac)
            if current != self._channel:
                try:
                    self._radio.add_peer(mac, self._channel)
                except EspNowError as exc:
                    _log.warning("Error changing peer channel: %s", exc)
                    return True
                self._peer_channels[mac] = self._channel
                _log.debug("Peer channel changed to %d", self._channel)
            return True

        channel = self._radio.current_channel()
        try:
            self._radio.add_peer(mac, channel)
        except EspNowError as exc:
            _log.error("Error adding peer %s: %s", _mac_str(mac), exc)
            return False
        self._peers.add_peer(mac)
        self._peer_channels[mac] = channel
        _log.debug("Peer %s added on channel %d", _mac_str(mac), channel)
        return True


def MAX_PEERS_OF(peers: PeerList) -> int:  # noqa: N802
    """Capacity of ``peers``."""
    return len(peers._slots)  # noqa: SLF001