"""Time lock screens for Time-Locked Wallet."""

from __future__ import annotations

import logging
from datetime import datetime

from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.coordinate import Coordinate
from textual.message import Message
from textual.screen import ModalScreen
from textual.widgets import Button, DataTable, Input, Label, Select, Static

from timelock_wallet.features.lock.countdown import format_remaining
from timelock_wallet.features.lock.models import LockRecord
from timelock_wallet.features.lock.policy import Asset, DurationUnit, LockPolicy

logger = logging.getLogger(__name__)


class BaseModalScreen(ModalScreen):
    BINDINGS = [
        ("escape", "app.pop_screen", "Close"),
        ("tab", "focus_next", "Next"),
        ("shift+tab", "focus_previous", "Previous"),
    ]


class ConnectWalletScreen(BaseModalScreen):
    def __init__(self, has_saved_wallet: bool = False):
        super().__init__()
        self.has_saved_wallet = has_saved_wallet

    def compose(self) -> ComposeResult:
        yield Label("Connect Wallet", id="connect-title")
        yield Label("Private key (leave empty to generate a new account):")
        yield Input(placeholder="64 hex characters", password=True, id="private-key-input")
        yield Label("Keystore password:")
        yield Input(placeholder="Password", password=True, id="password-input")
        yield Horizontal(
            Button("Connect", variant="primary", id="connect-btn"),
            Button("Load Saved", id="load-saved-btn", disabled=not self.has_saved_wallet),
            Button("Cancel", id="cancel-connect-btn"),
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id
        if button_id == "cancel-connect-btn":
            self.app.pop_screen()
            return

        private_key = self.query_one("#private-key-input", Input).value.strip()
        password = self.query_one("#password-input", Input).value
        self.app.pop_screen()
        self.app.post_message(
            self.ConnectRequested(
                private_key=private_key or None,
                password=password or None,
                load_saved=button_id == "load-saved-btn",
            )
        )

    class ConnectRequested(Message):
        def __init__(
            self, private_key: str | None, password: str | None, load_saved: bool
        ):
            super().__init__()
            self.private_key = private_key
            self.password = password
            self.load_saved = load_saved


class CreateLockScreen(BaseModalScreen):
    def __init__(self, policy: LockPolicy):
        super().__init__()
        self.policy = policy

    def compose(self) -> ComposeResult:
        yield Label("Create Time Lock", id="create-lock-title")
        yield Label("Amount:")
        yield Input(placeholder="0.00", id="amount-input")
        yield Static(self._minimum_hint(Asset.NATIVE), id="minimum-hint")
        yield Label("Asset:")
        yield Select(
            [(self.policy.symbol(asset), asset.value) for asset in Asset],
            value=Asset.NATIVE.value,
            allow_blank=False,
            id="asset-select",
        )
        yield Label("Lock duration:")
        yield Input(placeholder="1", id="duration-input")
        yield Select(
            [(unit.value.capitalize(), unit.value) for unit in DurationUnit],
            value=DurationUnit.DAYS.value,
            allow_blank=False,
            id="unit-select",
        )
        yield Horizontal(
            Button("Create Time Lock", variant="primary", id="create-lock-btn"),
            Button("Cancel", id="cancel-create-btn"),
        )

    def _minimum_hint(self, asset: Asset) -> str:
        return f"Min: {self.policy.minimum_amount(asset)} {self.policy.symbol(asset)}"

    def on_select_changed(self, event: Select.Changed) -> None:
        if event.select.id == "asset-select" and isinstance(event.value, str):
            self.query_one("#minimum-hint", Static).update(
                self._minimum_hint(Asset(event.value))
            )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "create-lock-btn":
            self._submit()
        elif event.button.id == "cancel-create-btn":
            self.app.pop_screen()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self._submit()

    def _submit(self) -> None:
        amount = self.query_one("#amount-input", Input).value
        duration = self.query_one("#duration-input", Input).value
        asset = self.query_one("#asset-select", Select).value
        unit = self.query_one("#unit-select", Select).value
        self.app.pop_screen()
        self.app.post_message(
            self.CreateLockRequested(
                amount=amount,
                duration=duration,
                duration_unit=str(unit),
                asset=str(asset),
            )
        )

    class CreateLockRequested(Message):
        def __init__(self, amount: str, duration: str, duration_unit: str, asset: str):
            super().__init__()
            self.amount = amount
            self.duration = duration
            self.duration_unit = duration_unit
            self.asset = asset


class LockResultScreen(BaseModalScreen):
    def __init__(self, title: str, lock_id: str, signature: str):
        super().__init__()
        self.result_title = title
        self.lock_id = lock_id
        self.signature = signature

    def compose(self) -> ComposeResult:
        yield Vertical(
            Label(self.result_title, id="result-title"),
            Label(f"Lock account: {self.lock_id}"),
            Label(f"Signature: {self.signature or '-'}"),
            Label("The lock list updates once the ledger confirms it."),
            Button("Close", variant="primary", id="close-result-btn"),
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "close-result-btn":
            self.app.pop_screen()


class LocksTable(DataTable):
    COLUMNS = ("Lock", "Amount", "Unlocks At", "Remaining", "Status")

    def on_mount(self) -> None:
        self.cursor_type = "row"
        self.add_columns(*self.COLUMNS)

    def update_locks(
        self, records: list[LockRecord], now: float, policy: LockPolicy
    ) -> None:
        selected = self.selected_lock_id()
        self.clear()
        for record in records:
            if record.is_withdrawn:
                status = "Withdrawn"
            elif record.is_pending(now):
                status = "Locked"
            else:
                status = "Unlocked"
            unlock_at = datetime.fromtimestamp(record.unlock_timestamp).strftime(
                "%Y-%m-%d %H:%M:%S"
            )
            remaining = (
                "-" if record.is_withdrawn else format_remaining(record.remaining_seconds(now))
            )
            self.add_row(
                record.lock_id[:16],
                f"{record.amount} {policy.symbol(record.asset)}",
                unlock_at,
                remaining,
                status,
                key=record.lock_id,
            )
        if selected is not None:
            for index, record in enumerate(records):
                if record.lock_id == selected:
                    self.move_cursor(row=index)
                    break

    def selected_lock_id(self) -> str | None:
        if self.row_count == 0:
            return None
        try:
            cell_key = self.coordinate_to_cell_key(Coordinate(self.cursor_row, 0))
        except Exception as e:
            logger.debug("No lock selected: %s", e)
            return None
        return cell_key.row_key.value
