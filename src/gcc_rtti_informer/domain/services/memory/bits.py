#!/usr/bin/env python3

"""Bit helpers for decoding ABI fields."""

# __offset_flags stores the base offset above the low flag byte
OFFSET_SHIFT = 8
FLAGS_MASK = 0xFF
OFFSET_BITS = 24


def sign_extend(value: int, bits: int) -> int:
    """Interpret the low ``bits`` bits of ``value`` as two's complement."""
    sign_bit = 1 << (bits - 1)
    value &= (1 << bits) - 1
    return (value ^ sign_bit) - sign_bit


def sign_extend_24(value: int) -> int:
    """Sign extend a 24 bit base offset, independent of the pointer width."""
    return sign_extend(value, OFFSET_BITS)


def split_offset_flags(word: int) -> tuple[int, int]:
    """Split an ``__offset_flags`` word into ``(offset, flags)``."""
    return sign_extend_24(word >> OFFSET_SHIFT), word & FLAGS_MASK


def bad_address_sentinel(pointer_size: int) -> int:
    """All-ones address a host uses for "no address"."""
    return (1 << (pointer_size * 8)) - 1
