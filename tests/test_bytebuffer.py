from reactornet import bytebuffer
from reactornet.bytebuffer import ByteBuffer, ByteBufferPool


def test_write_appends_and_reports_length():
    buf = ByteBuffer()
    assert buf.write(b"hello ") == len(b"hello ")
    assert buf.write(b"world") == len(b"world")
    assert buf.bytes() == b"hello world"
    assert len(buf) == len(b"hello world")


def test_initial_data_and_reset():
    buf = ByteBuffer(b"abc")
    assert buf.bytes() == b"abc"
    buf.reset()
    assert len(buf) == 0
    assert buf.bytes() == b""


def test_bytes_is_a_copy():
    buf = ByteBuffer(b"xyz")
    snapshot = buf.bytes()
    buf.write(b"more")
    assert snapshot == b"xyz"


def test_pool_reuses_and_clears_buffers():
    pool = ByteBufferPool()
    buf = pool.get()
    buf.write(b"payload")
    pool.put(buf)
    again = pool.get()
    assert again is buf
    assert len(again) == 0


def test_pool_creates_new_when_empty():
    pool = ByteBufferPool()
    first = pool.get()
    second = pool.get()
    assert first is not second
    assert len(first) == 0 and len(second) == 0


def test_module_put_ignores_none_and_get_is_empty():
    bytebuffer.put(None)
    buf = bytebuffer.get()
    assert len(buf) == 0
    buf.write(b"data")
    bytebuffer.put(buf)
    assert bytebuffer.get().bytes() == b""