"""Opaque holder for live authentication secrets."""


class SessionSecret:
    """
    Holds a secret (session id, password) in a mutable byte buffer so it
    can be zeroed in place on replacement or disposal.

    There is no public reader: only the owning
    ``SessionManager`` renders the value, and only into an outgoing
    request.
    """

    __slots__ = ("_buf",)

    def __init__(self, value: str) -> None:
        self._buf = bytearray(value.encode("utf-8"))

    def _render(self) -> str:
        return self._buf.decode("utf-8")

    def matches(self, value: str) -> bool:
        return bool(self._buf) and self._buf == value.encode("utf-8")

    def wipe(self) -> None:
        for i in range(len(self._buf)):
            self._buf[i] = 0
        self._buf = bytearray()

    def __bool__(self) -> bool:
        return bool(self._buf)

    def __repr__(self) -> str:
        return "SessionSecret(<redacted>)" if self._buf else "SessionSecret(<empty>)"
