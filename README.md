# espnowsync

`espnowsync` keeps a team of nodes blinking an LED in step over a broadcast
radio link in the style of ESP-NOW. Each node broadcasts a `HELLO` carrying its
48-bit MAC and its millisecond clock once a second. The node with the largest
MAC is the leader, and every node schedules its blink to line up with the
leader's next whole second. Nodes that stop reporting are dropped at a
keep-alive check every three seconds.

The package contains no radio driver. You supply one by implementing the
`Radio` interface, which can sit on a real transport, a simulator or a test
double.

## Installation

```
pip install .
pip install ".[test]"   # adds pytest
```

## Modules

- `espnowsync.messagepack`: `MessagePack` packs typed fields into a bounded
  byte buffer and reads them back. The fields are null, boolean, 8-bit short,
  16-bit integer, 32-bit long, float and NUL-terminated text, and each has
  `add_*` and `get_*` methods. `count()`, `type(index)`, `len()`, `pack()` and
  `unpack(data)` work on the buffer as a whole. `FieldType` names the type
  codes. Problems are reported by raising an exception: `OverflowError` when
  the buffer is full, `TypeError` on a type mismatch, `IndexError` for a
  missing field and `ValueError` for a bad value.
- `espnowsync.simplemap`: `SortedMap` keeps its keys in the order given by a
  compare function, with natural ordering as the default. It offers `put`,
  `get`, `remove_key`, `remove_at`, `key_at`, `value_at`, `index_of` and
  `items`. While the map is locked (`lock` / `unlock` / `is_locked`), new keys
  are ignored.
- `espnowsync.ringbuffer`: `RingBuffer` is a fixed-capacity FIFO. `push`
  returns `False` when it had to drop the oldest item to make room.
- `espnowsync.debug`: `DebugTagManager` keeps a `Level` for each tag, capped at
  a default level. `log` sends output through the standard `logging` module,
  to loggers named `espnowsync.<tag>`, and returns the text it emitted.
  `log_error_if_non_zero`, `log_error_if_zero` and `log_if_code` log depending
  on a return code.
- `espnowsync.peers`: `PeerList` is a fixed number of `Peer` slots that track
  when each peer was last used. `delete_oldest` evicts the peer that has gone
  unused longest, and `dump` lists the active peers.
- `espnowsync.quickespnow`: `QuickEspNow` puts a transmit queue and a receive
  queue, each holding the 3 newest messages, in front of a `Radio`. The module
  also defines `Interface` (STA/AP) and `EspNowError`.
- `espnowsync.protocol`: `MsgType` and `EspNowMessage` define the fixed-size
  sync frame, with `pack()` and `EspNowMessage.unpack(data)`. `mac_to_int` and
  `int_to_mac` convert between 6-byte addresses and integers.
  `format_message_pack` renders a `MessagePack` as text.
- `espnowsync.nodes`: `NodeTable` records the last report time, keep-alive
  time and RSSI of each node. `leader()` returns the node with the largest MAC,
  `drop_stale()` performs the keep-alive check, and the `format_*` methods
  produce status lines.
- `espnowsync.chipinfo`: `chip_id_24`, `reset_reason_text`, `flash_chip_mode`
  and `format_partition_table` (with `Partition`) decode values you pass in.
- `espnowsync.sync`: `SyncNode` is the synchronisation application.

## Driving the messaging layer

`QuickEspNow.send(dst, payload)` only queues a message. The queues are worked
by calls that you make:

- `process_tx()` passes queued messages to `Radio.send`. After each send,
  nothing more goes out until you report the radio's confirmation with
  `handle_sent(mac, status)`, where a status of `0` means success.
- `handle_received(src, dst, payload, rssi)` queues a frame the radio
  received. `process_rx()` then delivers one queued frame to the callback set
  with `on_data_received`.

`SyncNode.run_once()` calls `process_tx()` and `process_rx()` for you.

## Example

```python
from espnowsync.messagepack import MessagePack

pack = MessagePack(100)
pack.add_long(0x123456)
pack.add_float(21.5)
data = pack.pack()

received = MessagePack(100)
received.unpack(data)
assert received.get_long(0) == 0x123456
```

A sync node on top of an in-memory radio:

```python
import time

from espnowsync.quickespnow import QuickEspNow, Radio
from espnowsync.sync import SyncNode


class LoopbackRadio(Radio):
    def __init__(self):
        self.frames = []
        self.channel = 1

    def send(self, dst, payload):
        self.frames.append((dst, payload))

    def add_peer(self, mac, channel):
        pass

    def delete_peer(self, mac):
        pass

    def set_channel(self, channel):
        self.channel = channel

    def current_channel(self):
        return self.channel


radio = LoopbackRadio()
espnow = QuickEspNow(radio, clock=lambda: int(time.monotonic() * 1000))  # milliseconds
espnow.begin(1)

node = SyncNode(
    espnow,
    my_mac=0x020000000001,                        # made-up, locally administered
    clock=lambda: time.monotonic_ns() // 1000,    # microseconds
    blink=lambda delay_ms: print(f"blink in {delay_ms} ms"),
)
node.run_once()   # call this repeatedly from your main loop
```

The clock passed to `QuickEspNow` returns milliseconds. The clock passed to
`SyncNode` returns microseconds.

## What the package does not do

- It does not talk to any radio or hardware. Frame transport, send
  confirmations and received frames all pass through your `Radio`
  implementation and your calls to `handle_sent` and `handle_received`.
- It has no command-line program. You run it by calling
  `SyncNode.run_once()` from your own loop.
- It does not read chip registers, efuses, sensors or flash. The
  `espnowsync.chipinfo` functions only decode values that you supply, and a
  temperature is only sent if you set `SyncNode.temperature` to a callable.
- It stores nothing persistently.

## Tests

```
pytest
```