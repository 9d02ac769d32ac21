"""Pydantic models for the i3bar protocol: header, status blocks and click events.

See: https://i3wm.org/docs/i3bar-protocol.html

Every optional field defaults to None and is left out of the encoded JSON
entirely, so the bar host applies its own default for anything not set here.
"""

import json
import re
from enum import Enum
from typing import Annotated, Any, Dict, Literal, Optional, Sequence, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import MalformedEvent

# The only protocol version swaybar and i3bar understand
PROTOCOL_VERSION = 1

HexColor = Annotated[str, Field(pattern=r"^#[0-9A-Fa-f]{6}([0-9A-Fa-f]{2})?$")]
NonNegativeInt = Annotated[int, Field(ge=0)]

# UTF-16 surrogates cannot be encoded as UTF-8 (e.g. from os.fsdecode of undecodable bytes)
_SURROGATE = re.compile("[\ud800-\udfff]")


class Header(BaseModel):
    """Protocol header, written once before the block array opens.

    Immutable after creation (frozen).
    """

    version: Literal[1] = Field(PROTOCOL_VERSION, description="Protocol version (only 1 exists)")
    click_events: Optional[bool] = Field(default=None, description="Ask the host to send click events on stdin")
    const_signal: Optional[NonNegativeInt] = Field(default=None, description="Signal the host sends to resume the producer")
    stop_signal: Optional[NonNegativeInt] = Field(default=None, description="Signal the host sends to pause the producer")

    model_config = {"frozen": True}

    @classmethod
    def new(cls, version: int = PROTOCOL_VERSION) -> "Header":
        """Create a header with only the version set."""
        return cls(version=version)

    def to_json(self) -> Dict[str, Any]:
        """Convert to protocol JSON, omitting unset fields."""
        return self.model_dump(exclude_none=True)

    def encode(self) -> str:
        """Encode as a single compact line, e.g. ``{"version":1}``."""
        return self.model_dump_json(exclude_none=True)


class Block(BaseModel):
    """A single segment of the status line.

    Only ``full_text`` is required. The ``set_*`` mutators each touch exactly
    one field, are validated on assignment and return the block so calls can
    be chained::

        Block.new("12:00").set_color("#a6e3a1").with_separator()
    """

    full_text: str
    short_text: Optional[str] = None
    name: Optional[str] = None              # Identifies the block in click events
    instance: Optional[str] = None          # (name, instance) must be unique per snapshot
    color: Optional[HexColor] = None
    background: Optional[HexColor] = None
    border: Optional[HexColor] = None
    border_top: Optional[NonNegativeInt] = None
    border_right: Optional[NonNegativeInt] = None
    border_bottom: Optional[NonNegativeInt] = None
    border_left: Optional[NonNegativeInt] = None
    min_width: Optional[Union[NonNegativeInt, str]] = None  # Pixels, or a string to measure
    align: Optional[Literal["left", "right", "center"]] = None
    urgent: Optional[bool] = None
    separator: Optional[bool] = None
    separator_block_width: Optional[NonNegativeInt] = None
    markup: Optional[Literal["pango", "none"]] = None

    model_config = {"validate_assignment": True}

    @field_validator("full_text", "short_text", "name", "instance", "min_width")
    @classmethod
    def replace_surrogates(cls, v):
        """Replace lone surrogates with U+FFFD so the block always encodes."""
        if isinstance(v, str):
            return _SURROGATE.sub("\ufffd", v)
        return v

    @classmethod
    def new(cls, full_text: str) -> "Block":
        return cls(full_text=full_text)

    def set_short_text(self, short_text: str) -> "Block":
        self.short_text = short_text
        return self

    def set_name(self, name: str) -> "Block":
        self.name = name
        return self

    def set_instance(self, instance: str) -> "Block":
        self.instance = instance
        return self

    def set_color(self, color: str) -> "Block":
        self.color = color
        return self

    def set_background(self, background: str) -> "Block":
        self.background = background
        return self

    def set_border(self, border: str) -> "Block":
        self.border = border
        return self

    def set_border_widths(
        self,
        top: Optional[int] = None,
        right: Optional[int] = None,
        bottom: Optional[int] = None,
        left: Optional[int] = None,
    ) -> "Block":
        """Set any of the four border widths; sides passed as None are left as they are."""
        if top is not None:
            self.border_top = top
        if right is not None:
            self.border_right = right
        if bottom is not None:
            self.border_bottom = bottom
        if left is not None:
            self.border_left = left
        return self

    def set_min_width(self, min_width: Union[int, str]) -> "Block":
        self.min_width = min_width
        return self

    def set_align(self, align: str) -> "Block":
        self.align = align
        return self

    def set_urgent(self, urgent: bool = True) -> "Block":
        self.urgent = urgent
        return self

    def with_separator(self, separator: bool = True) -> "Block":
        """Mark whether the bar draws a separator after this block."""
        self.separator = separator
        return self

    def set_separator_block_width(self, width: int) -> "Block":
        self.separator_block_width = width
        return self

    def set_markup(self, markup: str) -> "Block":
        self.markup = markup
        return self

    def to_json(self) -> Dict[str, Any]:
        """Convert to protocol JSON, omitting unset fields."""
        return self.model_dump(exclude_none=True)

    def encode(self) -> str:
        return self.model_dump_json(exclude_none=True)


def encode_snapshot(blocks: Sequence[Block]) -> str:
    """Encode one status line as a compact JSON array of blocks.

    Blocks keep their order (left to right on the bar).

    Raises:
        ValueError: If two named blocks share the same (name, instance) pair
    """
    seen = set()
    for block in blocks:
        if block.name is None:
            continue
        identity = (block.name, block.instance)
        if identity in seen:
            raise ValueError(f"Duplicate block identity: name={block.name!r} instance={block.instance!r}")
        seen.add(identity)

    return "[" + ",".join(block.encode() for block in blocks) + "]"


class MouseButton(Enum):
    """Mouse button codes from i3bar protocol."""
    LEFT = 1
    MIDDLE = 2
    RIGHT = 3
    SCROLL_UP = 4
    SCROLL_DOWN = 5


class ClientEvent(BaseModel):
    """A click event written by the bar host to our stdin.

    Unknown keys (``modifiers``, ``scale``, ...) are ignored so newer hosts
    keep working.
    """

    name: str
    instance: str
    x: NonNegativeInt           # Absolute pointer position
    y: NonNegativeInt
    button: NonNegativeInt      # X11 button number
    event: NonNegativeInt       # Event code
    relative_x: NonNegativeInt  # Position within the block
    relative_y: NonNegativeInt
    width: NonNegativeInt       # Block dimensions
    height: NonNegativeInt

    model_config = {"frozen": True, "extra": "ignore", "strict": True}

    @property
    def mouse_button(self) -> Optional[MouseButton]:
        """The button as a MouseButton, or None for codes outside 1-5."""
        try:
            return MouseButton(self.button)
        except ValueError:
            return None

    @classmethod
    def from_json(cls, data: Any) -> "ClientEvent":
        """Parse from i3bar protocol JSON.

        Args:
            data: Click event JSON dict from the host's stdin

        Returns:
            ClientEvent instance

        Raises:
            MalformedEvent: If data is not an object or a field is missing or invalid
        """
        if not isinstance(data, dict):
            raise MalformedEvent(f"Click event must be a JSON object, got {type(data).__name__}", payload=repr(data))
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise MalformedEvent(f"Invalid click event: {e.error_count()} field error(s)", payload=repr(data)) from e


def decode_event(text: str) -> ClientEvent:
    """Decode one click event from its JSON text.

    Raises:
        MalformedEvent: If text is not valid JSON or not a valid click event
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedEvent(f"Click event is not valid JSON: {e.msg}", payload=text) from e
    return ClientEvent.from_json(data)

