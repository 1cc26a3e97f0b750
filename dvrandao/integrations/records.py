"""dvrandao.integrations.records

Record messages binding a proof circle to an island.

A signing layer commits to (islandID, campaignID, island_index, x, y, radius),
hashes the ABI encoding with Keccak-256 and signs the digest as an EIP-191
personal message. The verifier contract recomputes the same digest, so the
layout here is fixed:

  abi.encode(uint256, uint256, uint32, int64, int64, int64)

Everything in this module is offline. Submitting records is the caller's job.
"""

from __future__ import annotations

from dataclasses import dataclass

from dvrandao.core.exceptions import RecordError
from dvrandao.core.hashchain import keccak256
from dvrandao.simulation.circle import VRFCircle

RECORD_ABI_TYPES = ["uint256", "uint256", "uint32", "int64", "int64", "int64"]

# Island index reported by the verifier when an island may not take records.
INVALID_INDEX = 0xFFFFFFFF

_UINT256_MAX = (1 << 256) - 1
_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1


def _require_eth_account() -> None:
    try:
        import eth_account  # noqa: F401
    except Exception as e:  # pragma: no cover
        raise RuntimeError("Record signing requires eth-account (install with: pip install eth-account)") from e


@dataclass(frozen=True)
class RecordParams:
    island_id: int
    campaign_id: int
    island_index: int
    circle: VRFCircle

    def validate(self) -> None:
        for name in ("island_id", "campaign_id"):
            v = getattr(self, name)
            if not 0 <= v <= _UINT256_MAX:
                raise RecordError(f"{name} out of uint256 range: {v}")
        if not 0 <= self.island_index < INVALID_INDEX:
            raise RecordError(f"island_index not usable for a record: {self.island_index:#x}")
        for name, v in zip(("x", "y", "radius"), self.circle.as_triple()):
            if not _INT64_MIN <= v <= _INT64_MAX:
                raise RecordError(f"circle {name} out of int64 range: {v}")


@dataclass(frozen=True)
class SignedRecord:
    r: int
    s: int
    v: int
    signature: str  # 0x-prefixed 65-byte r|s|v


def encode_record_params(params: RecordParams) -> bytes:
    params.validate()
    from eth_abi import encode

    c = params.circle
    return encode(
        RECORD_ABI_TYPES,
        [params.island_id, params.campaign_id, params.island_index, c.x, c.y, c.radius],
    )


def record_params_hash(params: RecordParams) -> bytes:
    return keccak256(encode_record_params(params))


def _signable(params: RecordParams):
    from eth_account.messages import encode_defunct

    return encode_defunct(primitive=record_params_hash(params))


def sign_record(params: RecordParams, private_key: str | bytes) -> SignedRecord:
    """Sign the record digest with an Ethereum key."""

    _require_eth_account()
    from eth_account import Account

    msg = _signable(params)
    try:
        signed = Account.sign_message(msg, private_key=private_key)
    except ValueError as e:
        raise RecordError(f"cannot sign record: {e}") from e

    return SignedRecord(
        r=int(signed.r),
        s=int(signed.s),
        v=int(signed.v),
        signature="0x" + bytes(signed.signature).hex(),
    )


def recover_record_signer(params: RecordParams, signed: SignedRecord) -> str:
    _require_eth_account()
    from eth_account import Account

    msg = _signable(params)
    return str(Account.recover_message(msg, vrs=(signed.v, signed.r, signed.s)))


def verify_record(params: RecordParams, signed: SignedRecord, address: str) -> bool:
    try:
        recovered = recover_record_signer(params, signed)
    except Exception:  # noqa: BLE001 - bad signatures surface as assorted eth_keys errors
        return False
    return recovered.lower() == str(address).lower()
