"""Fixed call signature and payload schema this indexer understands.

Only one function (`attest`) and one payload tuple are supported; there is no
schema negotiation.
"""

from __future__ import annotations

from eth_utils import function_signature_to_4byte_selector

# attest(AttestationPayload payload, bytes[] validationPayloads)
# AttestationPayload = (bytes32 schemaId, uint64 expirationDate, bytes subject, bytes attestationData)
ATTEST_SIGNATURE = "attest((bytes32,uint64,bytes,bytes),bytes[])"
ATTEST_SELECTOR: bytes = function_signature_to_4byte_selector(ATTEST_SIGNATURE)

# (bool isPositive, string articlePage, address submitter)
PAYLOAD_TYPES: tuple[str, ...] = ("bool", "string", "address")
PAYLOAD_HEAD_WORDS = len(PAYLOAD_TYPES)

# AttestationPayload tuple head: schemaId, expirationDate, subject offset, data offset
ATTESTATION_PAYLOAD_HEAD_WORDS = 4
