"""
handlers/callback_data.py
-------------------------
Codec for inline-button payloads.

Payloads are colon separated: "<action>:<arg>:<arg>...", e.g.
    confirm:12          confirm application #12
    page:first:5:5      show 5 persons starting after the first 5
    rand:3              pick 3 random persons again
Telegram limits callback data to 64 bytes.
"""

from dataclasses import dataclass
from typing import Optional

from utils.errors import ValidationError

SEPARATOR = ":"
MAX_BYTES = 64


@dataclass(frozen=True)
class CallbackAction:
    name: str
    args: tuple[str, ...] = ()

    def int_arg(self, index: int) -> int:
        """The argument at `index` as a non-negative integer."""
        try:
            raw = self.args[index]
        except IndexError:
            raise ValidationError(f"{self.name}: missing argument {index}") from None
        if not raw.isdecimal() or not raw.isascii():
            raise ValidationError(f"{self.name}: argument {index} is not a number: {raw!r}")
        return int(raw)


def encode(name: str, *args) -> str:
    parts = [name, *map(str, args)]
    if any(not p or SEPARATOR in p for p in parts):
        raise ValidationError(f"invalid callback parts: {parts!r}")
    data = SEPARATOR.join(parts)
    if len(data.encode("utf-8")) > MAX_BYTES:
        raise ValidationError(f"callback data too long: {data!r}")
    return data


def decode(data: Optional[str]) -> CallbackAction:
    if not data:
        raise ValidationError("empty callback data")
    name, *args = data.split(SEPARATOR)
    if not name or any(not a for a in args):
        raise ValidationError(f"malformed callback data: {data!r}")
    return CallbackAction(name=name, args=tuple(args))
