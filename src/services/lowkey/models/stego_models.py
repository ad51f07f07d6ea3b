from __future__ import annotations

import struct
from pathlib import Path
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field


SEQUENCE_FORMAT = ">II"


class SequenceInfo(BaseModel):
    """Position of one carrier inside a multi-carrier set."""

    index: int = Field(..., ge=0, lt=2**32)
    total: int = Field(..., ge=1, lt=2**32)

    def to_bytes(self) -> bytes:
        return struct.pack(SEQUENCE_FORMAT, self.index, self.total)

    @classmethod
    def from_bytes(cls, data: bytes) -> "SequenceInfo":
        if len(data) != struct.calcsize(SEQUENCE_FORMAT):
            raise ValueError(f"Sequence metadata must be 8 bytes, got {len(data)}")
        index, total = struct.unpack(SEQUENCE_FORMAT, data)
        return cls(index=index, total=total)


class StegoOptions(BaseModel):
    passphrase: Optional[str] = None
    auto_resize: bool = False
    min_dimension: int = Field(default=600, ge=1, description="Smallest allowed short side when auto-resizing")


class StegoCapacityResult(BaseModel):
    carriers: int
    capacity_bits: int
    capacity_bytes: int
    max_payload_bytes: int
    capacity_per_carrier: List[int] = Field(default_factory=list, description="Capacity in bits per carrier")


class StegoEncodeResult(BaseModel):
    output_paths: List[Path]
    payload_size_bytes: int
    used_capacity_bits: int
    capacity_bits: int
    bits_per_carrier: List[int] = Field(default_factory=list)
    resized_to: Optional[Tuple[int, int]] = None
    encrypted_with_passphrase: bool = False


class StegoDecodeResult(BaseModel):
    payload: bytes
    output_path: Optional[Path] = None
    carrier_order: List[Path] = Field(default_factory=list)
    auto_ordered: bool = False

    @property
    def size_bytes(self) -> int:
        return len(self.payload)
