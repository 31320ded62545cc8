"""Attribute definitions and error counters shared by the SONAR protocol."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, fields, replace

__all__ = [
    "AttributeOps",
    "Attribute",
    "LinkLayerReceiveErrors",
    "LinkLayerErrors",
    "SonarErrors",
]

_MAX_ATTRIBUTE_ID = 0xFFF


class AttributeOps(enum.IntFlag):
    """Operations an attribute supports: read, write and notify."""

    R = 0x1000
    W = 0x2000
    N = 0x4000
    RW = R | W
    RN = R | N
    WN = W | N
    RWN = R | W | N


@dataclass(frozen=True)
class Attribute:
    """A SONAR attribute: a 12-bit ID, a maximum data size and supported ops."""

    attribute_id: int
    max_size: int
    ops: AttributeOps

    def __post_init__(self) -> None:
        if not 0 <= self.attribute_id <= _MAX_ATTRIBUTE_ID:
            raise ValueError(
                f"attribute_id must fit in 12 bits, got {self.attribute_id:#x}"
            )
        if self.max_size < 0:
            raise ValueError(f"max_size must not be negative, got {self.max_size}")
        ops = AttributeOps[self.ops] if isinstance(self.ops, str) else AttributeOps(self.ops)
        if not ops or ops & ~AttributeOps.RWN:
            raise ValueError(f"invalid attribute ops: {self.ops!r}")
        object.__setattr__(self, "ops", ops)

    def supports(self, ops: AttributeOps | str) -> bool:
        """Return whether every operation in ops is supported."""
        wanted = AttributeOps[ops] if isinstance(ops, str) else AttributeOps(ops)
        return bool(wanted) and (self.ops & wanted) == wanted


class _Counters:
    def clear(self) -> None:
        """Reset every counter to zero."""
        for f in fields(self):
            setattr(self, f.name, 0)


@dataclass
class LinkLayerReceiveErrors(_Counters):
    """Errors seen while receiving and decoding frames."""

    invalid_header: int = 0
    invalid_crc: int = 0
    buffer_overflow: int = 0
    invalid_escape_sequence: int = 0


@dataclass
class LinkLayerErrors(_Counters):
    """Errors seen by the link layer's request / response handling."""

    invalid_packet: int = 0
    unexpected_packet: int = 0
    invalid_sequence_number: int = 0
    retries: int = 0


@dataclass
class SonarErrors:
    """All error counters of a SONAR endpoint."""

    link_layer_receive: LinkLayerReceiveErrors = field(
        default_factory=LinkLayerReceiveErrors
    )
    link_layer: LinkLayerErrors = field(default_factory=LinkLayerErrors)

    def get_and_clear(self) -> SonarErrors:
        """Return a snapshot of the counters and reset them to zero."""
        snapshot = SonarErrors(
            link_layer_receive=replace(self.link_layer_receive),
            link_layer=replace(self.link_layer),
        )
        self.link_layer_receive.clear()
        self.link_layer.clear()
        return snapshot