import struct

import pytest

from src.services.lowkey.core.encryption import DEFAULT_KEY, MIN_BODY_SIZE, decrypt_body, derive_key
from src.services.lowkey.core.errors import (
    InvalidCiphertext,
    MalformedBody,
    TruncatedInput,
    UnsupportedVersion,
)
from src.services.lowkey.core.framing import (
    FRAME_OVERHEAD,
    HEADER_SIZE,
    PROTOCOL_VERSION,
    decode_frame,
    encode_frame,
    parse_header,
)


@pytest.mark.parametrize("payload", [b"", b"x", b"This is a secret message.", bytes(range(256)) * 4])
@pytest.mark.parametrize("passphrase", [None, "pw", "pässwörd with spaces"])
def test_frame_round_trip(payload, passphrase):
    assert decode_frame(encode_frame(payload, passphrase), passphrase) == payload


def test_header_layout():
    frame = encode_frame(b"hello", "pw")
    version, body_length = struct.unpack(">BI", frame[:HEADER_SIZE])
    assert HEADER_SIZE == 5
    assert version == PROTOCOL_VERSION
    assert body_length == len(frame) - HEADER_SIZE == len(b"hello") + MIN_BODY_SIZE
    assert len(frame) == len(b"hello") + FRAME_OVERHEAD


def test_nonce_is_fresh_per_encode():
    assert encode_frame(b"same", "pw") != encode_frame(b"same", "pw")


def test_wrong_passphrase_is_rejected():
    frame = encode_frame(b"secret", "right")
    with pytest.raises(InvalidCiphertext):
        decode_frame(frame, "wrong")


def test_default_key_does_not_open_passphrase_frames():
    frame = encode_frame(b"secret", "pw")
    with pytest.raises(InvalidCiphertext):
        decode_frame(frame)


def test_tampered_body_is_rejected():
    frame = bytearray(encode_frame(b"secret", "pw"))
    frame[-1] ^= 0x01
    with pytest.raises(InvalidCiphertext):
        decode_frame(bytes(frame), "pw")


def test_unknown_version_is_rejected():
    frame = bytearray(encode_frame(b"secret"))
    frame[0] = PROTOCOL_VERSION + 1
    with pytest.raises(UnsupportedVersion) as exc:
        decode_frame(bytes(frame))
    assert exc.value.version == PROTOCOL_VERSION + 1


def test_truncated_frame_is_rejected():
    frame = encode_frame(b"secret")
    with pytest.raises(TruncatedInput):
        decode_frame(frame[:-1])


def test_short_header_is_rejected():
    with pytest.raises(TruncatedInput):
        parse_header(b"\x00\x00")


def test_body_shorter_than_nonce_and_tag_fails_before_decrypting():
    body = b"\x00" * (MIN_BODY_SIZE - 1)
    frame = struct.pack(">BI", PROTOCOL_VERSION, len(body)) + body
    with pytest.raises(MalformedBody):
        decode_frame(frame)
    with pytest.raises(MalformedBody):
        decrypt_body(body, DEFAULT_KEY)


def test_truncation_and_bad_key_share_a_base_for_reporting():
    assert issubclass(TruncatedInput, MalformedBody)
    assert issubclass(InvalidCiphertext, ValueError)
    assert issubclass(MalformedBody, ValueError)


def test_derive_key():
    assert derive_key(None) == DEFAULT_KEY
    assert derive_key("") == DEFAULT_KEY
    key = derive_key("pw")
    assert len(key) == 32
    assert key == derive_key("pw")
    assert key != derive_key("pW")
