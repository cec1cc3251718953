"""Router actions and their parameters.

Every params class carries its wire tag as the ``action`` class attribute.
``RouterActionParams`` is the closed union the planner emits and the encoder
accepts; X_TRANSFER_WITH_CALL is the only variant holding nested actions and
nesting is limited to a single level.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar, Union

from eth_typing import ChecksumAddress


class RouterAction(IntEnum):
    """Action tags understood by the router's ``xBundle`` entry point."""

    DEPOSIT = 0
    WITHDRAW = 1
    BORROW = 2
    PAYBACK = 3
    FLASHLOAN = 4
    SWAP = 5
    PERMIT_WITHDRAW = 6
    PERMIT_BORROW = 7
    X_TRANSFER = 8
    X_TRANSFER_WITH_CALL = 9


@dataclass(frozen=True)
class DepositParams:
    vault: ChecksumAddress
    amount: int
    receiver: ChecksumAddress
    sender: ChecksumAddress

    action: ClassVar[RouterAction] = RouterAction.DEPOSIT


@dataclass(frozen=True)
class WithdrawParams:
    vault: ChecksumAddress
    amount: int
    receiver: ChecksumAddress
    owner: ChecksumAddress

    action: ClassVar[RouterAction] = RouterAction.WITHDRAW


@dataclass(frozen=True)
class BorrowParams:
    vault: ChecksumAddress
    amount: int
    receiver: ChecksumAddress
    owner: ChecksumAddress

    action: ClassVar[RouterAction] = RouterAction.BORROW


@dataclass(frozen=True)
class PaybackParams:
    vault: ChecksumAddress
    amount: int
    receiver: ChecksumAddress
    sender: ChecksumAddress

    action: ClassVar[RouterAction] = RouterAction.PAYBACK


@dataclass(frozen=True)
class PermitBorrowParams:
    """Signed borrow allowance from ``owner`` to ``spender`` (the router)."""

    vault: ChecksumAddress
    owner: ChecksumAddress
    spender: ChecksumAddress
    amount: int
    deadline: int

    action: ClassVar[RouterAction] = RouterAction.PERMIT_BORROW


@dataclass(frozen=True)
class PermitWithdrawParams:
    """Signed withdraw allowance from ``owner`` to ``spender`` (the router)."""

    vault: ChecksumAddress
    owner: ChecksumAddress
    spender: ChecksumAddress
    amount: int
    deadline: int

    action: ClassVar[RouterAction] = RouterAction.PERMIT_WITHDRAW


@dataclass(frozen=True)
class XTransferParams:
    """Bridge ``amount`` of ``asset`` to ``receiver`` on the destination domain."""

    dest_domain: int
    asset: ChecksumAddress
    amount: int
    receiver: ChecksumAddress

    action: ClassVar[RouterAction] = RouterAction.X_TRANSFER


@dataclass(frozen=True)
class XTransferWithCallParams:
    """Bridge ``amount`` of ``asset`` and run ``inner_actions`` once funds arrive."""

    dest_domain: int
    asset: ChecksumAddress
    amount: int
    receiver: ChecksumAddress
    inner_actions: tuple[RouterActionParams, ...]

    action: ClassVar[RouterAction] = RouterAction.X_TRANSFER_WITH_CALL


PermitParams = Union[PermitBorrowParams, PermitWithdrawParams]

RouterActionParams = Union[
    DepositParams,
    WithdrawParams,
    BorrowParams,
    PaybackParams,
    PermitBorrowParams,
    PermitWithdrawParams,
    XTransferParams,
    XTransferWithCallParams,
]

PERMIT_PARAMS = (PermitBorrowParams, PermitWithdrawParams)


@dataclass(frozen=True)
class PermitSignature:
    """ECDSA signature components over a permit digest."""

    v: int
    r: bytes
    s: bytes

    def __post_init__(self) -> None:
        if len(self.r) != 32 or len(self.s) != 32:
            raise ValueError("Signature r and s must be 32 bytes each")
        if self.v in (0, 1):
            object.__setattr__(self, "v", self.v + 27)
        if self.v not in (27, 28):
            raise ValueError(f"Invalid signature v: {self.v}")

    @classmethod
    def from_hex(cls, signature: str) -> PermitSignature:
        """Parse a 65-byte ``r || s || v`` hex signature."""
        raw = bytes.fromhex(signature.removeprefix("0x"))
        if len(raw) != 65:
            raise ValueError(f"Expected a 65-byte signature, got {len(raw)} bytes")
        return cls(v=raw[64], r=raw[:32], s=raw[32:64])

    def to_hex(self) -> str:
        return "0x" + (self.r + self.s + bytes([self.v])).hex()
