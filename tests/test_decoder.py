import pytest
from eth_abi import decode
from eth_utils import is_checksum_address, to_checksum_address

from attestind.core.errors import CallDecodeError, PayloadDecodeError, SubjectError
from attestind.core.models import DecodedPayload
from attestind.decoding.call import decode_attest_call
from attestind.decoding.payload import decode_attestation_data, encode_attestation_data
from attestind.decoding.subject import normalize_subject

from conftest import CONTRACT, SCHEMA_ID, SUBMITTER

ADDR_HEX = "AbCdEf0123456789AbCdEf0123456789AbCdEf01"


# ---------- subject ----------


def test_padded_and_literal_subject_normalize_identically() -> None:
    padded = bytes.fromhex("00" * 12 + ADDR_HEX)
    literal = bytes.fromhex(ADDR_HEX)

    assert normalize_subject(padded) == normalize_subject(literal)
    assert normalize_subject(literal) == to_checksum_address("0x" + ADDR_HEX.lower())


@pytest.mark.parametrize("length", [0, 19, 21, 31, 33, 64])
def test_subject_wrong_length_rejected(length: int) -> None:
    with pytest.raises(SubjectError):
        normalize_subject(b"\x01" * length)


# ---------- payload ----------


def test_payload_decodes_reference_encoding(encode_payload) -> None:
    decoded = decode_attestation_data(encode_payload(True, "page-3", SUBMITTER))

    assert decoded == DecodedPayload(is_positive=True, article_page="page-3", submitter=SUBMITTER)


def test_payload_submitter_is_eip55_checksummed(encode_payload) -> None:
    decoded = decode_attestation_data(encode_payload(True, "page-3", "0x" + "aa" * 20))

    assert decoded is not None
    assert decoded.submitter == "0xaAaAaAaaAaAaAaaAaAAAAAAAAaaaAaAaAaaAaaAa"
    assert is_checksum_address(decoded.submitter)


def test_payload_round_trip() -> None:
    original = DecodedPayload(is_positive=True, article_page="page-3", submitter=SUBMITTER)
    encoded = encode_attestation_data(original)

    assert decode_attestation_data(encoded) == original
    # the encoder agrees with a reference decoder
    is_positive, page, submitter = decode(["bool", "string", "address"], encoded)
    assert (is_positive, page, submitter.lower()) == (True, "page-3", SUBMITTER.lower())


def test_payload_empty_is_no_data() -> None:
    assert decode_attestation_data(b"") is None


def test_payload_negative_and_unicode(encode_payload) -> None:
    decoded = decode_attestation_data(encode_payload(False, "página/ünï", SUBMITTER))

    assert decoded is not None
    assert decoded.is_positive is False
    assert decoded.article_page == "página/ünï"


def test_payload_nonzero_bool_is_true(encode_payload) -> None:
    data = bytearray(encode_payload(False))
    data[31] = 2

    decoded = decode_attestation_data(bytes(data))

    assert decoded is not None and decoded.is_positive is True


def test_payload_truncated_tail_rejected(encode_payload) -> None:
    data = encode_payload(True, "a much longer article page than one word" * 2)
    truncated = data[: 32 * 4 + 10]  # head + length word + part of the string

    with pytest.raises(PayloadDecodeError):
        decode_attestation_data(truncated)


def test_payload_short_head_rejected() -> None:
    with pytest.raises(PayloadDecodeError):
        decode_attestation_data(b"\x00" * 40)


def test_payload_offset_out_of_range_rejected(encode_payload) -> None:
    data = bytearray(encode_payload())
    data[32:64] = (10_000).to_bytes(32, "big")

    with pytest.raises(PayloadDecodeError):
        decode_attestation_data(bytes(data))


def test_payload_invalid_utf8_rejected(encode_payload) -> None:
    data = bytearray(encode_payload(True, "ab"))
    # string bytes start right after the length word
    data[32 * 4] = 0xFF

    with pytest.raises(PayloadDecodeError):
        decode_attestation_data(bytes(data))


def test_payload_dirty_address_padding_rejected(encode_payload) -> None:
    data = bytearray(encode_payload())
    data[64] = 0x01

    with pytest.raises(PayloadDecodeError):
        decode_attestation_data(bytes(data))


# ---------- call ----------


def test_call_decodes_all_fields(encode_call, encode_payload, make_tx) -> None:
    payload = encode_payload()
    subject = bytes.fromhex("00" * 12 + ADDR_HEX)
    tx = make_tx(
        "0xaa",
        encode_call(subject=subject, data=payload, expiration=1_800_000_000, validation=(b"\x01\x02", b"")),
    )

    call = decode_attest_call(tx, CONTRACT)

    assert call is not None
    p = call.attestation_payload
    assert p.schema_id == SCHEMA_ID
    assert p.expiration_date == 1_800_000_000
    assert p.subject == subject
    assert p.attestation_data == payload
    assert call.validation_payloads == (b"\x01\x02", b"")


def test_call_contract_match_is_case_insensitive(encode_call, encode_payload, make_tx) -> None:
    tx = make_tx("0xaa", encode_call(subject=b"\x01" * 20, data=encode_payload()))

    assert decode_attest_call(tx, CONTRACT.upper().replace("0X", "0x")) is not None


def test_call_wrong_destination_not_applicable(make_tx) -> None:
    # garbage input would raise if it ever reached schema decoding
    tx = make_tx("0xaa", b"\xde\xad\xbe\xef" + b"\xff" * 7, to="0x" + "12" * 20)

    assert decode_attest_call(tx, CONTRACT) is None


def test_call_contract_creation_not_applicable(make_tx) -> None:
    assert decode_attest_call(make_tx("0xaa", b"\x60\x80", to=None), CONTRACT) is None


def test_call_empty_input_not_applicable(make_tx) -> None:
    assert decode_attest_call(make_tx("0xaa", b""), CONTRACT) is None


def test_call_selector_mismatch_rejected(encode_call, encode_payload, make_tx) -> None:
    data = encode_call(subject=b"\x01" * 20, data=encode_payload())
    tx = make_tx("0xaa", b"\x12\x34\x56\x78" + data[4:])

    with pytest.raises(CallDecodeError):
        decode_attest_call(tx, CONTRACT)


def test_call_truncated_rejected(encode_call, encode_payload, make_tx) -> None:
    data = encode_call(subject=b"\x01" * 20, data=encode_payload())

    with pytest.raises(CallDecodeError):
        decode_attest_call(make_tx("0xaa", data[:100]), CONTRACT)


def test_call_oversized_expiration_rejected(encode_call, encode_payload, make_tx) -> None:
    data = bytearray(encode_call(subject=b"\x01" * 20, data=encode_payload()))
    # tuple head starts at the first offset (0x40) after the selector; word 1 is expirationDate
    exp_word = 4 + 0x40 + 32
    data[exp_word] = 0x01

    with pytest.raises(CallDecodeError):
        decode_attest_call(make_tx("0xaa", bytes(data)), CONTRACT)
