import pytest

from xborrow.domain import NativeCurrency, Token, Vault, to_address

WETH = "0x7ea6eA49B0b0Ae9c5db7907d139D9Cd3439862a1"
USDC = "0x5FfbaC75EFc9547FBc822166feD19B05Cd5890bb"
VAULT = "0xfF4606Aa93e576E61b473f4B11D3e32BB9ec63BB"


def test_to_address_checksums_any_case():
    assert to_address(WETH.lower()) == WETH
    assert to_address(WETH.upper().replace("0X", "0x")) == WETH


@pytest.mark.parametrize("value", ["", "0x", "0x1234", "not an address", None])
def test_to_address_rejects_malformed_input(value):
    with pytest.raises(ValueError):
        to_address(value)


def test_token_equality_ignores_address_case_and_metadata():
    a = Token(5, WETH, 18, "WETH")
    b = Token(5, WETH.lower(), 18, "WETH", name="Wrapped Ether")

    assert a == b
    assert hash(a) == hash(b)
    assert a != Token(420, WETH, 18, "WETH")


def test_native_currency_equality_is_per_chain():
    weth = Token(5, WETH, 18, "WETH")
    eth = NativeCurrency(5, 18, "ETH", weth)

    assert eth == NativeCurrency(5, 18, "ETH", weth, name="Ether")
    assert eth != weth
    assert eth.wrapped is weth
    assert eth.asset_kind == weth.asset_kind == "WETH"
    assert eth.is_native and not weth.is_native


def test_native_currency_wrapped_must_share_chain():
    with pytest.raises(ValueError):
        NativeCurrency(420, 18, "ETH", Token(5, WETH, 18, "WETH"))


@pytest.mark.parametrize("decimals", [-1, 255, 1.5])
def test_decimals_range(decimals):
    with pytest.raises(ValueError):
        Token(5, WETH, decimals, "WETH")


def test_vault_lives_on_its_assets_chain():
    vault = Vault.of(VAULT.lower(), Token(5, WETH, 18, "WETH"), Token(5, USDC, 6, "USDC"))

    assert vault.address == VAULT
    assert vault.chain_id == 5
    assert str(vault) == f"WETH/USDC vault {VAULT} (chain 5)"


def test_vault_rejects_assets_on_other_chains():
    with pytest.raises(ValueError):
        Vault(
            address=VAULT,
            chain_id=5,
            collateral=Token(5, WETH, 18, "WETH"),
            debt=Token(420, USDC, 6, "USDC"),
        )
