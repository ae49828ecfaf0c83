import io

from werkzeug.exceptions import RequestEntityTooLarge
from werkzeug.sansio.multipart import (
    Data,
    Epilogue,
    Field,
    File,
    MultipartDecoder,
    NeedData,
)

from imgram.errors import ValidationError


class MultipartPart(io.RawIOBase):
    """One part of a multipart body, readable as a stream.

    Data is pulled from the underlying request only while the part is
    read, so a part is never buffered as a whole.
    """

    def __init__(self, reader, name, filename, headers):
        super().__init__()
        self.name = name
        self.filename = filename
        self.headers = headers
        self._reader = reader
        self._pending = b""
        self._exhausted = False

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        while not self._pending and not self._exhausted:
            self._pending, self._exhausted = self._reader._next_data()

        n = min(len(buffer), len(self._pending))
        buffer[:n] = self._pending[:n]
        self._pending = self._pending[n:]
        return n

    def drain(self):
        self._pending = b""
        while not self._exhausted:
            _, self._exhausted = self._reader._next_data()


class MultipartReader:
    """Iterates the parts of a ``multipart/form-data`` body in arrival order.

    Parts must be consumed sequentially. Moving to the next part discards
    whatever the caller left unread in the current one.
    """

    def __init__(
        self,
        stream,
        boundary,
        chunk_size: int = 64 * 1024,
        max_parts: int | None = None,
        header_limit: int | None = None,
    ):
        if not boundary:
            raise ValidationError("Missing multipart boundary")
        if isinstance(boundary, str):
            boundary = boundary.encode("latin-1")

        self._stream = stream
        self._chunk_size = chunk_size
        self._decoder = MultipartDecoder(
            boundary,
            max_form_memory_size=header_limit,
            max_parts=max_parts,
        )
        self._current = None

    def _next_event(self):
        try:
            event = self._decoder.next_event()
            while isinstance(event, NeedData):
                data = self._stream.read(self._chunk_size)
                self._decoder.receive_data(data or None)
                event = self._decoder.next_event()
        except RequestEntityTooLarge as e:
            raise ValidationError("Multipart body exceeds limits") from e
        except ValueError as e:
            raise ValidationError("Malformed multipart body") from e
        return event

    def _next_data(self):
        event = self._next_event()
        if not isinstance(event, Data):
            raise ValidationError("Malformed multipart body")
        return event.data, not event.more_data

    def __iter__(self):
        while True:
            if self._current is not None:
                self._current.drain()
                self._current = None

            event = self._next_event()
            if isinstance(event, Epilogue):
                return

            if isinstance(event, File):
                self._current = MultipartPart(
                    self, event.name, event.filename, event.headers
                )
                yield self._current
            elif isinstance(event, Field):
                self._current = MultipartPart(self, event.name, None, event.headers)
                yield self._current
