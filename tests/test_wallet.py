import json

import pytest
from symbolchain.CryptoTypes import PrivateKey, PublicKey, Signature
from symbolchain.symbol.KeyPair import Verifier

from timelock_wallet.wallet import Wallet, WalletError


@pytest.mark.unit
def test_wallet_starts_disconnected():
    """A fresh wallet has no owner session"""
    wallet = Wallet()
    assert not wallet.is_connected
    assert wallet.get_owner_session() is None
    assert not wallet.has_wallet()


@pytest.mark.unit
def test_storage_dir_from_environment(tmp_path, monkeypatch):
    """Wallet storage follows TIMELOCK_WALLET_DIR"""
    monkeypatch.setenv("TIMELOCK_WALLET_DIR", str(tmp_path / "store"))
    wallet = Wallet()
    assert wallet.wallet_file == tmp_path / "store" / "wallet.json"
    assert wallet.wallet_dir.exists()


@pytest.mark.unit
def test_import_wallet_session(testnet_facade, random_private_key):
    """Importing a key exposes the derived address as owner identity"""
    wallet = Wallet()
    session = wallet.import_wallet(str(random_private_key))

    account = testnet_facade.create_account(random_private_key)
    assert session.identity == str(account.address)
    assert session.public_key == str(account.public_key)
    assert session.network_name == "testnet"
    assert session.identity.startswith("T")


@pytest.mark.unit
def test_mainnet_identity_prefix(random_private_key):
    """Mainnet wallets produce N-prefixed identities"""
    wallet = Wallet(network_name="mainnet")
    session = wallet.import_wallet(str(random_private_key))
    assert session.identity.startswith("N")


@pytest.mark.unit
def test_import_invalid_key():
    """Malformed keys are rejected with WalletError"""
    wallet = Wallet()
    with pytest.raises(WalletError):
        wallet.import_wallet("not-a-key")
    assert not wallet.is_connected


@pytest.mark.unit
def test_sign_produces_verifiable_signature():
    """Signatures verify against the session public key"""
    wallet = Wallet()
    session = wallet.create_wallet()
    message = b'{"action":"withdraw","lockId":"L1"}'

    signature_hex = wallet.sign(message)

    assert len(signature_hex) == 128
    verifier = Verifier(PublicKey(session.public_key))
    assert verifier.verify(message, Signature(signature_hex))


@pytest.mark.unit
def test_sign_requires_connection():
    """Signing without a loaded key fails"""
    with pytest.raises(WalletError):
        Wallet().sign(b"payload")


@pytest.mark.unit
def test_disconnect_clears_session():
    """Disconnect drops the key and the owner session"""
    wallet = Wallet()
    wallet.create_wallet()
    wallet.disconnect()
    assert wallet.get_owner_session() is None
    assert wallet.private_key is None


@pytest.mark.unit
def test_keystore_round_trip():
    """A saved keystore reloads the same account with the right password"""
    wallet = Wallet()
    original = wallet.create_wallet()
    wallet_file = wallet.save_wallet("correct horse")

    data = json.loads(wallet_file.read_text())
    assert data["address"] == original.identity
    assert str(wallet.private_key) not in wallet_file.read_text()

    reloaded = Wallet()
    assert reloaded.has_wallet()
    assert reloaded.load_wallet_from_storage("correct horse") == original


@pytest.mark.unit
def test_keystore_wrong_password():
    """Wrong passwords surface as WalletError"""
    wallet = Wallet()
    wallet.create_wallet()
    wallet.save_wallet("correct horse")

    with pytest.raises(WalletError):
        Wallet().load_wallet_from_storage("battery staple")


@pytest.mark.unit
def test_save_requires_password():
    wallet = Wallet()
    wallet.create_wallet()
    with pytest.raises(WalletError):
        wallet.save_wallet("")


@pytest.mark.unit
def test_private_key_hex_is_64_chars():
    """Generated keys are 32 bytes"""
    wallet = Wallet()
    wallet.create_wallet()
    assert isinstance(wallet.private_key, PrivateKey)
    assert len(str(wallet.private_key)) == 64
