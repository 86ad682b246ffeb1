import base64
import json
import os
from pathlib import Path

from cryptography.fernet import Fernet, InvalidToken
from symbolchain.CryptoTypes import PrivateKey
from symbolchain.facade.SymbolFacade import SymbolFacade

from timelock_wallet.features.lock.models import OwnerSession
from timelock_wallet.shared.logging import get_logger

logger = get_logger(__name__)


class WalletError(Exception):
    pass


class Wallet:
    """Symbol key pair holder acting as the owner session and request signer."""

    KEYSTORE_VERSION = 1

    @classmethod
    def _resolve_storage_dir(cls, storage_dir: str | Path | None = None) -> Path:
        if storage_dir:
            return Path(storage_dir).expanduser()

        env_dir = os.getenv("TIMELOCK_WALLET_DIR")
        if env_dir:
            return Path(env_dir).expanduser()

        return Path.home() / ".config" / "timelock-wallet"

    def __init__(self, network_name="testnet", storage_dir=None):
        self.network_name = network_name
        self.facade = SymbolFacade(network_name)
        self.wallet_dir = self._resolve_storage_dir(storage_dir)
        self.wallet_dir.mkdir(parents=True, exist_ok=True)
        self.wallet_file = self.wallet_dir / "wallet.json"
        self.private_key = None
        self.public_key = None
        self.address = None
        self._account = None

    @property
    def is_connected(self) -> bool:
        return self._account is not None

    def has_wallet(self) -> bool:
        return self.wallet_file.exists()

    def _use_private_key(self, private_key: PrivateKey) -> None:
        account = self.facade.create_account(private_key)
        self.private_key = private_key
        self.public_key = account.public_key
        self.address = account.address
        self._account = account
        logger.info("Wallet connected: %s", self.address)

    def create_wallet(self) -> OwnerSession:
        self._use_private_key(PrivateKey.random())
        return self.get_owner_session()

    def import_wallet(self, private_key_hex: str) -> OwnerSession:
        try:
            private_key = PrivateKey(private_key_hex.strip())
        except (ValueError, TypeError) as e:
            raise WalletError(f"Invalid private key: {e}") from e
        self._use_private_key(private_key)
        return self.get_owner_session()

    def disconnect(self) -> None:
        self.private_key = None
        self.public_key = None
        self.address = None
        self._account = None
        logger.info("Wallet disconnected")

    def get_owner_session(self) -> OwnerSession | None:
        if self._account is None:
            return None
        return OwnerSession(
            identity=str(self.address),
            public_key=str(self.public_key),
            network_name=self.network_name,
        )

    def sign(self, message: bytes) -> str:
        if self._account is None:
            raise WalletError("No wallet loaded")
        signature = self._account.key_pair.sign(message)
        return str(signature)

    @staticmethod
    def _cipher(password: str) -> Fernet:
        key = base64.urlsafe_b64encode(password.encode().ljust(32)[:32])
        return Fernet(key)

    def encrypt_private_key(self, password: str) -> str:
        if self.private_key is None:
            raise WalletError("No wallet loaded")
        encrypted = self._cipher(password).encrypt(str(self.private_key).encode())
        return encrypted.decode()

    def decrypt_private_key(self, encrypted_key: str, password: str) -> str:
        try:
            decrypted = self._cipher(password).decrypt(encrypted_key.encode())
        except InvalidToken as e:
            raise WalletError("Failed to decrypt private key: wrong password") from e
        return decrypted.decode()

    def save_wallet(self, password: str) -> Path:
        if not password:
            raise WalletError("Password cannot be empty")
        data = {
            "version": self.KEYSTORE_VERSION,
            "network": self.network_name,
            "address": str(self.address),
            "public_key": str(self.public_key),
            "encrypted_private_key": self.encrypt_private_key(password),
        }
        with open(self.wallet_file, "w") as f:
            json.dump(data, f, indent=2)
        logger.info("Wallet saved to %s", self.wallet_file)
        return self.wallet_file

    def load_wallet_from_storage(self, password: str) -> OwnerSession:
        if not self.has_wallet():
            raise WalletError(f"Wallet file not found: {self.wallet_file}")
        with open(self.wallet_file, "r") as f:
            data = json.load(f)

        encrypted_key = data.get("encrypted_private_key")
        if not encrypted_key:
            raise WalletError("Invalid wallet file")

        private_key_hex = self.decrypt_private_key(encrypted_key, password)
        return self.import_wallet(private_key_hex)
