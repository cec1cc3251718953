"""Calldata encoder for the router's ``xBundle`` entry point."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from eth_abi.codec import ABICodec
from eth_typing import ChecksumAddress
from web3 import Web3

from ..abi import load_router_abi
from ..domain import (
    PERMIT_PARAMS,
    BorrowParams,
    Chain,
    DepositParams,
    PaybackParams,
    PermitSignature,
    RouterActionParams,
    WithdrawParams,
    XTransferParams,
    XTransferWithCallParams,
    to_address,
)
from ..errors import MissingSignatureError, UnsupportedActionError
from ..planning import ensure_bounded_nesting

logger = logging.getLogger(__name__)

# Argument layouts decoded by the router for each action
DEPOSIT_TYPES = ["address", "uint256", "address", "address"]
WITHDRAW_TYPES = ["address", "uint256", "address", "address"]
BORROW_TYPES = ["address", "uint256", "address", "address"]
PAYBACK_TYPES = ["address", "uint256", "address", "address"]
PERMIT_TYPES = [
    "address",
    "address",
    "address",
    "uint256",
    "uint256",
    "uint8",
    "bytes32",
    "bytes32",
]
X_TRANSFER_TYPES = ["uint256", "address", "uint256", "address"]
X_TRANSFER_WITH_CALL_TYPES = ["uint256", "address", "uint256", "bytes"]
BUNDLE_TYPES = ["uint8[]", "bytes[]"]


@dataclass(frozen=True)
class TxDetails:
    """Transaction request for the wallet layer to submit."""

    to: ChecksumAddress
    from_: ChecksumAddress
    chain_id: int
    data: str

    def to_dict(self) -> dict[str, object]:
        return {
            "to": self.to,
            "from": self.from_,
            "chainId": self.chain_id,
            "data": self.data,
        }


def _encode_action(
    codec: ABICodec,
    action: RouterActionParams,
    signature: PermitSignature | None,
) -> bytes:
    if isinstance(action, DepositParams):
        return codec.encode(
            DEPOSIT_TYPES, [action.vault, action.amount, action.receiver, action.sender]
        )
    if isinstance(action, WithdrawParams):
        return codec.encode(
            WITHDRAW_TYPES, [action.vault, action.amount, action.receiver, action.owner]
        )
    if isinstance(action, BorrowParams):
        return codec.encode(
            BORROW_TYPES, [action.vault, action.amount, action.receiver, action.owner]
        )
    if isinstance(action, PaybackParams):
        return codec.encode(
            PAYBACK_TYPES, [action.vault, action.amount, action.receiver, action.sender]
        )
    if isinstance(action, PERMIT_PARAMS):
        if signature is None:
            raise MissingSignatureError(
                f"{action.action.name} for vault {action.vault} requires a signature"
            )
        return codec.encode(
            PERMIT_TYPES,
            [
                action.vault,
                action.owner,
                action.spender,
                action.amount,
                action.deadline,
                signature.v,
                signature.r,
                signature.s,
            ],
        )
    if isinstance(action, XTransferParams):
        return codec.encode(
            X_TRANSFER_TYPES,
            [action.dest_domain, action.asset, action.amount, action.receiver],
        )
    if isinstance(action, XTransferWithCallParams):
        call_data = _encode_bundle(codec, action.inner_actions, signature)
        return codec.encode(
            X_TRANSFER_WITH_CALL_TYPES,
            [action.dest_domain, action.asset, action.amount, call_data],
        )
    raise UnsupportedActionError(f"Router cannot encode action {action!r}")


def _bundle_args(
    codec: ABICodec,
    actions: Sequence[RouterActionParams],
    signature: PermitSignature | None,
) -> tuple[list[int], list[bytes]]:
    tags: list[int] = []
    args: list[bytes] = []
    for action in actions:
        args.append(_encode_action(codec, action, signature))
        tags.append(int(action.action))
    return tags, args


def _encode_bundle(
    codec: ABICodec,
    actions: Sequence[RouterActionParams],
    signature: PermitSignature | None,
) -> bytes:
    tags, args = _bundle_args(codec, actions, signature)
    return codec.encode(BUNDLE_TYPES, [tags, args])


def encode_xbundle_args(
    actions: Sequence[RouterActionParams],
    signature: PermitSignature | None = None,
) -> tuple[list[int], list[bytes]]:
    """Encode a plan into the ``(actions, args)`` pair taken by ``xBundle``.

    Raises:
        InvalidNestingError: If X_TRANSFER_WITH_CALL is nested more than once
        MissingSignatureError: If a permit is present and ``signature`` is None
        UnsupportedActionError: If an action has no router encoding
    """
    ensure_bounded_nesting(actions)
    return _bundle_args(Web3().codec, actions, signature)


def encode_inner_bundle(
    actions: Sequence[RouterActionParams],
    signature: PermitSignature | None = None,
) -> bytes:
    """Encode the payload an X_TRANSFER_WITH_CALL carries to the destination router."""
    ensure_bounded_nesting(actions)
    return _encode_bundle(Web3().codec, actions, signature)


def encode_router_call(
    actions: Sequence[RouterActionParams],
    origin_chain: Chain,
    sender: str,
    signature: PermitSignature | None = None,
) -> tuple[str, bytes]:
    """Encode ``xBundle(actions, args)`` for the router on ``origin_chain``.

    Args:
        actions: Plan built by the route planner
        origin_chain: Chain the transaction is submitted on
        sender: Account submitting the transaction
        signature: Permit signature, required if the plan holds a permit

    Returns:
        Tuple of (router_address, encoded_calldata)

    The same inputs always produce the same bytes.
    """
    if not actions:
        raise ValueError("Cannot encode an empty plan")

    w3 = Web3()
    tags, args = encode_xbundle_args(actions, signature)

    contract = w3.eth.contract(address=origin_chain.router, abi=load_router_abi())
    calldata_hex = contract.encode_abi(
        abi_element_identifier="xBundle",
        args=[tags, args],
    )
    calldata = bytes.fromhex(calldata_hex.removeprefix("0x"))

    logger.info(
        "Encoded xBundle with %d action(s) for router %s on chain %s (sender %s, %d bytes)",
        len(tags),
        origin_chain.router,
        origin_chain.chain_id,
        sender,
        len(calldata),
    )
    return (origin_chain.router, calldata)


def build_tx_details(
    actions: Sequence[RouterActionParams],
    origin_chain: Chain,
    sender: str,
    signature: PermitSignature | None = None,
) -> TxDetails:
    """Wrap the encoded router call into a transaction request."""
    sender_address = to_address(sender)
    router, calldata = encode_router_call(actions, origin_chain, sender_address, signature)
    return TxDetails(
        to=to_address(router),
        from_=sender_address,
        chain_id=origin_chain.chain_id,
        data="0x" + calldata.hex(),
    )
