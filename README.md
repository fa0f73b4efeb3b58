# reactornet

Building blocks for event-driven TCP, UDP and Unix-socket programs on Linux,
macOS and the BSDs. The package uses only the standard library.

## Modules

- `reactornet.mathutil` – `is_power_of_two`, `ceil_to_power_of_two` and
  `floor_to_power_of_two` (the last two never return less than 2).
- `reactornet.ringbuffer` – `RingBuffer`, a circular byte buffer whose size is
  a power of two. It grows when a write does not fit and halves its storage on
  `reset()` or when it is read empty. `lazy_read(n)` and `lazy_read_all()`
  return `(head, tail)` without consuming; `shift(n)` consumes; `read(size)`
  and `read_byte()` raise `RingBufferEmptyError` on an empty buffer.
  `byte_buffer()` and `with_byte_buffer(data)` copy the readable bytes into a
  `ByteBuffer`.
- `reactornet.bytebuffer` – `ByteBuffer` (a growable byte buffer) and
  `ByteBufferPool`, plus module-level `get()` / `put()` on a default pool.
- `reactornet.ringbuffer_pool` – `RingBufferPool`, which reuses ring-buffers
  and calibrates its default and maximum kept sizes from how it is used; also
  module-level `get()` / `put()`.
- `reactornet.taskqueue` – `TaskQueue`, a thread-safe FIFO of callables with
  `enqueue`, `dequeue` (returns `None` when empty), `empty` and `len()`.
- `reactornet.netpoll` – `Poller`, built on `selectors`. It watches file
  descriptors (`add_read`, `add_write`, `add_read_write`, `mod_read`,
  `mod_read_write`, `delete`), and `trigger(task)` queues a callable from any
  thread and wakes the loop to run it. `polling(callback)` blocks, passing each
  ready descriptor and its event mask to the callback, and ends when a
  callback, task or hook raises `ServerShutdown` (callbacks may also raise
  `AcceptSocketError`). `init_logic(init, proc, wait_timeout)` installs hooks.
  `dup(fd)` duplicates a descriptor that is closed on exec.
- `reactornet.sockopts` – `set_no_delay`, `set_recv_buffer`,
  `set_send_buffer`, `set_reuseport`, `set_ipv6_only`, `set_keep_alive`
  (accept a socket or a raw descriptor), `max_listener_backlog()`, and
  `sys_socket` / `sys_block_socket` to create non-blocking or blocking sockets
  that are closed on exec.
- `reactornet.sockets` – `tcp_socket`, `udp_socket`, `unix_socket` and
  `tcp_connect` take a network name (`tcp`, `tcp4`, `tcp6`, `udp`, `udp4`,
  `udp6`, `unix`) and an address, apply any `SocketOption`s, and return the
  socket with a `TCPAddr`, `UDPAddr` or `UnixAddr`. Other networks raise
  `UnsupportedProtocolError`. `sockaddr_to_tcp_or_unix_addr`,
  `sockaddr_to_udp_addr` and `ip6_zone_to_string` convert socket-module
  addresses.
- `reactornet.logsetup` – package logging: `init(level)` logs to standard
  error, `setup_logger_with_path(path, level)` to a size-rotated file,
  `setup_logger(logger, level)` uses your own logger; `debug`, `info`,
  `warning`, `error`, `fatal` (logs at error level, does not exit), `log_err`,
  `level` and `cleanup`.
- `reactornet.workerpool` – `WorkerPool(capacity, expiry, nonblocking)` runs
  submitted callables on at most `capacity` threads; idle workers exit after
  `expiry` seconds, and a full non-blocking pool raises `PoolOverloadError`.
  `default_pool()` returns a non-blocking pool of 262144 workers.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Examples

```python
from reactornet.ringbuffer import RingBuffer

rb = RingBuffer(64)
rb.write(b"hello ")
rb.write_string("world")
head, tail = rb.lazy_read(5)   # (b"hello", b""), nothing consumed
rb.shift(6)
print(rb.read(1024))           # b"world"
```

```python
from reactornet.netpoll import Poller, ServerShutdown

def stop():
    raise ServerShutdown()

with Poller() as poller:
    poller.trigger(stop)
    try:
        poller.polling(lambda fd, events: None)
    except ServerShutdown:
        print("loop stopped")
```

```python
from reactornet.sockets import SocketOption, tcp_socket
from reactornet.sockopts import set_no_delay

sock, addr = tcp_socket("tcp", "127.0.0.1:0", [SocketOption(set_no_delay, 1)])
try:
    print(sock.getsockname())
finally:
    sock.close()
```

## What it does not do

This is a set of parts, not a server. There is no event loop that accepts
connections and reads or writes them, no connection object, no way of
spreading connections over several loops, no server options or listener
object, and no command to run.