"""Protocol and network constants."""

from enum import IntEnum


class ChainId(IntEnum):
    ETHEREUM = 1
    GOERLI = 5
    OPTIMISM = 10
    GNOSIS = 100
    MATIC = 137
    FANTOM = 250
    OPTIMISM_GOERLI = 420
    ARBITRUM = 42161
    MATIC_MUMBAI = 80001


# Connext bridge domain ids
# https://docs.connext.network/resources/deployments
CONNEXT_DOMAINS: dict[int, int] = {
    ChainId.ETHEREUM: 6648936,
    ChainId.GOERLI: 1735353714,
    ChainId.OPTIMISM: 1869640809,
    ChainId.GNOSIS: 6778479,
    ChainId.MATIC: 1886350457,
    ChainId.OPTIMISM_GOERLI: 1735356532,
    ChainId.ARBITRUM: 1634886255,
    ChainId.MATIC_MUMBAI: 9991,
}

# keccak("xBundle(uint8[],bytes[])")[:4]
XBUNDLE_SELECTOR = "a3fb20f4"

# Borrow rates are APRs expressed in ray (27 decimals)
RATE_DECIMALS = 27

MAX_UINT256 = 2**256 - 1
