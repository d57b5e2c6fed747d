import pytest

from agent_wallet.core.errors import InvalidParameter, RpcError
from agent_wallet.services.tokens import TokenService

USDC = "0x833589fcd6edb6e08f4c7c32d4f71b54bda02913"
USDC_CHECKSUM = "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913"


@pytest.mark.asyncio
async def test_native_balance(session, fake_clients):
    fake_clients["base"].eth.balance = 1_250_000_000_000_000_000

    balance = await TokenService(session).get_balance("base")

    assert balance.raw == 1_250_000_000_000_000_000
    assert balance.formatted == "1.25"
    assert balance.symbol == "ETH"
    assert balance.token is None


@pytest.mark.asyncio
async def test_native_balance_failure_is_an_error(session, fake_clients):
    fake_clients["sepolia"].eth.balance = ConnectionError("rpc down")

    with pytest.raises(RpcError):
        await TokenService(session).get_balance("sepolia")


@pytest.mark.asyncio
async def test_erc20_balance(session, fake_clients):
    fake_clients["base"].eth.add_token(USDC, balanceOf=12_345_678, symbol="USDC", decimals=6)

    balance = await TokenService(session).get_balance("base", USDC)

    assert balance.raw == 12_345_678
    assert balance.formatted == "12.345678"
    assert balance.symbol == "USDC"
    assert balance.token == USDC_CHECKSUM


@pytest.mark.asyncio
async def test_token_info(session, fake_clients):
    fake_clients["base"].eth.add_token(
        USDC,
        name="USD Coin",
        symbol="USDC",
        decimals=6,
        totalSupply=3_000_000_000_000,
    )

    info = await TokenService(session).get_token_info("base", USDC)

    assert info.name == "USD Coin"
    assert info.decimals == 6
    assert info.total_supply_formatted == "3000000"
    assert info.address == USDC_CHECKSUM


@pytest.mark.asyncio
async def test_token_info_rejects_accounts_without_code(session, fake_clients):
    fake_clients["base"].eth.code = b""

    with pytest.raises(InvalidParameter) as exc_info:
        await TokenService(session).get_token_info("base", USDC)
    assert "not a contract" in str(exc_info.value)


@pytest.mark.asyncio
async def test_token_info_rejects_non_erc20_contracts(session, fake_clients):
    fake_clients["base"].eth.add_token(USDC, name=ValueError("execution reverted"))

    with pytest.raises(InvalidParameter) as exc_info:
        await TokenService(session).get_token_info("base", USDC)
    assert "Not a valid ERC20" in str(exc_info.value)


@pytest.mark.asyncio
async def test_wallet_summary(session, fake_clients):
    fake_clients["ethereum"].eth.balance = 2 * 10**18

    summary = await TokenService(session).wallet_summary()

    assert summary == f"EVM Wallet Address: {session.address}\nBalance: 2.0000 ETH"


@pytest.mark.asyncio
async def test_wallet_summary_without_balance(session, fake_clients):
    fake_clients["ethereum"].eth.balance = ConnectionError("rpc down")

    summary = await TokenService(session).wallet_summary()

    assert summary.endswith("Balance: unavailable ETH")
