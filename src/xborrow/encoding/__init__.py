from __future__ import annotations

from .encoder import (
    TxDetails,
    build_tx_details,
    encode_inner_bundle,
    encode_router_call,
    encode_xbundle_args,
)

__all__ = [
    "TxDetails",
    "build_tx_details",
    "encode_inner_bundle",
    "encode_router_call",
    "encode_xbundle_args",
]
