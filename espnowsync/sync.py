"""Team blink synchronisation over broadcast HELLO messages.

Every node broadcasts a HELLO carrying its MAC and millisecond clock once a
second. The node with the largest MAC is the leader; everyone schedules its
blink to line up with the leader's next whole second. Nodes that stop
reporting are dropped at the periodic keep-alive check.
"""

from __future__ import annotations

import dataclasses
import logging
import time
from typing import Callable, Optional

from .messagepack import MessagePack
from .nodes import NodeTable
from .protocol import (
    EspNowMessage,
    MsgType,
    format_message_pack,
    int_to_mac,
    mac_to_int,
)
from .quickespnow import BROADCAST_ADDRESS, SEND_SUCCESS, EspNowError, QuickEspNow

HELLO_PERIOD_MS = 1000
STATUS_PERIOD_MS = 3000
_U32 = 0xFFFFFFFF
_ECHO_TYPES = (MsgType.HELLO, MsgType.ECHO_REQ, MsgType.ECHO_ACK)

Clock = Callable[[], int]
Blink = Callable[[int], None]

_log = logging.getLogger(__name__)


def _default_clock() -> int:
    return time.monotonic_ns() // 1000


class SyncNode:
    """One member of a blink-synchronised team.

    ``clock`` returns microseconds; millisecond times are derived from it.
    ``blink`` is called with the delay in milliseconds after which the LED
    should flash. Set :attr:`temperature` to a callable returning a reading
    to also broadcast a packed status message at every keep-alive check.
    """

    def __init__(
        self,
        espnow: QuickEspNow,
        my_mac: int,
        clock: Optional[Clock] = None,
        blink: Optional[Blink] = None,
    ) -> None:
        if not 0 <= my_mac < 1 << 48:
            raise ValueError(f"{my_mac:#x} is not a 48-bit MAC address")
        self.espnow = espnow
        self.my_mac = my_mac
        self._clock = clock or _default_clock
        self._blink = blink
        self.nodes = NodeTable(my_mac)
        self.received = EspNowMessage()
        self.received_pack = MessagePack()
        self.last_rtt_us: Optional[int] = None
        self.temperature: Optional[Callable[[], float]] = None
        self._pending = False
        self._sent_at_us = 0
        now = self._millis()
        self.nodes.add_or_update(my_mac, now)
        self._last_hello_ms = now
        self._last_status_ms = 0
        espnow.on_data_received(self.data_received)

    # -- time ---------------------------------------------------------------

    def _micros(self) -> int:
        return self._clock() & _U32

    def _millis(self) -> int:
        return (self._clock() // 1000) & _U32

    def _blink_in(self, delay_ms: int) -> None:
        if self._blink is not None:
            self._blink(delay_ms)

    def _send(self, dst: bytes, payload: bytes, failure: str) -> bool:
        try:
            self.espnow.send(dst, payload)
        except (EspNowError, ValueError) as exc:
            _log.warning("%s: %s", failure, exc)
            return False
        return True

    # -- sending ------------------------------------------------------------

    def broadcast_hello(self) -> bool:
        """Broadcast our HELLO and record our own report; return whether it was queued."""
        ums = self._millis()
        message = EspNowMessage(MsgType.HELLO, self.my_mac, ums)
        if not self._send(BROADCAST_ADDRESS, message.pack(), "Message NOT sent"):
            return False
        if self.nodes.leader() == self.my_mac:
            # The leader blinks on its own whole second, with 2 ms of latency allowance.
            self._blink_in(1002 - ums % 1000)
        if self.nodes.add_or_update(self.my_mac, ums):
            _log.info("<%X> Added!", self.my_mac)
        return True

    def send_message_pack(self, temperature: float) -> bool:
        """Broadcast our MAC halves, clock and ``temperature`` as a packed message."""
        pack = MessagePack()
        pack.add_long(self.my_mac >> 32)
        pack.add_long(self.my_mac & 0xFFFFFF)
        pack.add_long(self._millis())
        pack.add_float(temperature)
        frame = bytes([MsgType.MSGPACK]) + pack.pack()
        if not self._send(BROADCAST_ADDRESS, frame, "myEspNowMsgPack NOT sent"):
            return False
        _log.info("myEspNowMsgPack sent!")
        return True

    def unicast_echo_request(self, mac: int) -> bool:
        """Send an echo request straight to ``mac`` and time the radio's confirmation."""
        message = EspNowMessage(MsgType.ECHO_REQ, self.my_mac, self._micros())
        self.espnow.on_data_sent(self.data_sent)
        self._sent_at_us = self._micros()
        return self._send(int_to_mac(mac), message.pack(), "ECHO_REQ NOT sent")

    def send_echo_ack(self) -> bool:
        """Broadcast an acknowledgement of the last message received."""
        message = EspNowMessage(
            MsgType.ECHO_ACK, self.received.mac_addr64, self.received.ums
        )
        return self._send(BROADCAST_ADDRESS, message.pack(), "ECHO_ACK NOT sent")

    # -- callbacks ----------------------------------------------------------

    def data_received(self, address, data, rssi: int, broadcast: bool) -> bool:
        """Take in a received frame for :meth:`process`; return whether it was accepted."""
        raw = bytes(data)
        if not raw:
            return False
        code = raw[0]
        if code in _ECHO_TYPES:
            try:
                message = EspNowMessage.unpack(raw)
            except ValueError as exc:
                _log.warning("Malformed message: %s", exc)
                return False
            message.rssi = rssi
            message.mac_addr64 = mac_to_int(address)
            self.received = message
        elif code == MsgType.MSGPACK:
            pack = MessagePack()
            try:
                pack.unpack(raw[1:])
            except ValueError as exc:
                _log.warning("Malformed message pack: %s", exc)
                return False
            self.received = dataclasses.replace(
                self.received, msg_type=MsgType.MSGPACK, rssi=rssi
            )
            self.received_pack = pack
        else:
            return False
        self._pending = True
        return True

    def data_sent(self, address, status: int) -> str:
        """Report the outcome of a unicast; return the report line."""
        mac = bytes(address)
        if status == SEND_SUCCESS:
            elapsed = (self._micros() - self._sent_at_us) & _U32
            text = f"Unicast to *{mac[4]:02X}{mac[5]:02X}:{elapsed}us!"
        else:
            text = f"Unicast to *{mac[4]:02X}{mac[5]:02X}:FAIL!"
        _log.info("%s", text)
        return text

    # -- periodic work ------------------------------------------------------

    def check_keepalive(self) -> list[int]:
        """Drop nodes that stopped reporting; return their MACs."""
        dropped = self.nodes.drop_stale()
        for mac in dropped:
            _log.info("<%X> Dropped!", mac)
        _log.info("%s", self.nodes.format_rssi(self._millis()).rstrip("\n"))
        return dropped

    def process(self) -> Optional[MsgType]:
        """Act on the message taken in last; return its type, or ``None`` if none waited."""
        if not self._pending:
            return None
        self._pending = False
        message = self.received
        kind = message.msg_type
        if kind == MsgType.HELLO:
            if message.mac_addr64 == self.nodes.leader():
                self._blink_in(1000 - message.ums % 1000)
            if self.nodes.add_or_update(message.mac_addr64, message.ums, message.rssi):
                _log.info("<%X> Added!", message.mac_addr64)
        elif kind in (MsgType.ECHO_REQ, MsgType.ECHO_ACK):
            if message.mac_addr64 == self.my_mac:
                self.last_rtt_us = (self._micros() - message.ums) & _U32
                _log.info(
                    "!!! ECHO RTTI=%dus from:%X (%d)dBm",
                    self.last_rtt_us,
                    message.mac_addr64,
                    message.rssi,
                )
        elif kind == MsgType.MSGPACK:
            _log.info("%s", format_message_pack(self.received_pack).rstrip("\n"))
        return MsgType(kind)

    def run_once(self) -> list[MsgType]:
        """One pass of the main loop; return the types of the messages handled."""
        now = self._millis()
        if (now - self._last_hello_ms) & _U32 >= HELLO_PERIOD_MS:
            self._last_hello_ms = now
            self.espnow.on_data_sent(None)
            self.broadcast_hello()
        if (now - self._last_status_ms) & _U32 >= STATUS_PERIOD_MS:
            self._last_status_ms = now
            self.check_keepalive()
            if self.temperature is not None:
                self.send_message_pack(self.temperature())
        self.espnow.process_tx()
        handled = []
        while self.espnow.process_rx():
            kind = self.process()
            if kind is not None:
                handled.append(kind)
        return handled