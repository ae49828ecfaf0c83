import codecs
import io


class LimitedReader(io.RawIOBase):
    """Reads at most ``limit`` bytes from ``stream``.

    Hitting the limit looks exactly like end of stream to the caller, so
    oversized input is truncated rather than rejected.
    """

    def __init__(self, stream, limit: int):
        super().__init__()
        self._stream = stream
        self.remaining = max(int(limit), 0)

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        if self.remaining <= 0:
            return 0

        size = min(len(buffer), self.remaining)
        data = self._stream.read(size)
        if not data:
            return 0

        n = len(data)
        buffer[:n] = data
        self.remaining -= n
        return n


def read_limited(stream, limit: int) -> bytes:
    return LimitedReader(stream, limit).read()


def read_limited_text(stream, limit: int, encoding: str = "utf-8") -> str:
    # A multibyte sequence cut by the limit is held back by the
    # incremental decoder and dropped; invalid bytes elsewhere show up
    # as U+FFFD.
    decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
    return decoder.decode(read_limited(stream, limit), final=False)
