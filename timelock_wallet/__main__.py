"""Main application entry point for Time-Locked Wallet."""

from textual.app import App, ComposeResult
from textual.containers import Horizontal
from textual.widgets import Button, Footer, Header, Label, Static

from timelock_wallet.features.lock.coordinator import LockLifecycleCoordinator
from timelock_wallet.features.lock.handlers import LockHandlersMixin
from timelock_wallet.features.lock.policy import LockPolicy
from timelock_wallet.features.lock.screen import ConnectWalletScreen, LocksTable
from timelock_wallet.shared.config import AppConfig
from timelock_wallet.shared.logging import get_logger, setup_logging
from timelock_wallet.shared.notifications import Notification
from timelock_wallet.styles import CSS
from timelock_wallet.wallet import Wallet, WalletError

logger = get_logger(__name__)


class TimelockApp(LockHandlersMixin, App):
    CSS = CSS
    TITLE = "Time-Locked Wallet"

    BINDINGS = [
        ("n", "create_lock", "New Lock"),
        ("w", "withdraw", "Withdraw"),
        ("r", "refresh", "Refresh"),
        ("c", "connect", "Connect"),
        ("d", "disconnect", "Disconnect"),
        ("q", "quit", "Quit"),
    ]

    def __init__(self, config: AppConfig | None = None):
        super().__init__()
        self.config = config or AppConfig.from_environment()
        self.wallet = Wallet(network_name=self.config.network_name)
        self.coordinator = LockLifecycleCoordinator.from_config(
            self.wallet, self.config, policy=LockPolicy.from_environment()
        )
        self.coordinator.notifications.add_listener(self._on_notification)

    def compose(self) -> ComposeResult:
        yield Header()
        yield Label("Wallet not connected", id="owner-status")
        yield Horizontal(
            Static("", id="error-banner"),
            Button("Dismiss", id="clear-error-btn"),
            id="error-bar",
        )
        yield Horizontal(
            Button("New Lock", variant="primary", id="create-lock-action-btn"),
            Button("Withdraw", id="withdraw-action-btn"),
            Button("Refresh", id="refresh-action-btn"),
            Button("Connect", id="connect-action-btn"),
            Button("Disconnect", id="disconnect-action-btn"),
            id="actions",
        )
        yield LocksTable(id="locks-table")
        yield Footer()

    def on_mount(self) -> None:
        logger.info("Application mounted, ledger gateway: %s", self.config.ledger_url)
        self.locks_table = self.query_one("#locks-table", LocksTable)
        self._error_bar = self.query_one("#error-bar", Horizontal)
        self._error_banner = self.query_one("#error-banner", Static)
        self._owner_status = self.query_one("#owner-status", Label)
        # Display only; lock expiry is driven by the coordinator's countdown.
        self.set_interval(1.0, self.render_locks)
        self.show_connect_wallet()

    def on_unmount(self) -> None:
        self.coordinator.shutdown()

    def _on_notification(self, notification: Notification) -> None:
        self.notify(
            notification.description or notification.title,
            title=notification.title,
            severity=notification.severity.value,
        )
        self.update_error_banner()

    def update_error_banner(self) -> None:
        error = self.coordinator.current_error()
        self._error_banner.update(error or "")
        self._error_bar.set_class(error is not None, "visible")

        session = self.wallet.get_owner_session()
        status = f"Owner: {session.identity}" if session else "Wallet not connected"
        if self.coordinator.is_loading:
            status += f"  [{len(self.coordinator.pending_operations())} pending]"
        self._owner_status.update(status)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id
        if button_id == "create-lock-action-btn":
            self.action_create_lock()
        elif button_id == "withdraw-action-btn":
            self.action_withdraw()
        elif button_id == "refresh-action-btn":
            self.action_refresh()
        elif button_id == "connect-action-btn":
            self.action_connect()
        elif button_id == "disconnect-action-btn":
            self.action_disconnect()
        elif button_id == "clear-error-btn":
            self.coordinator.clear_error()
            self.update_error_banner()

    def action_create_lock(self) -> None:
        self.show_create_lock()

    def action_withdraw(self) -> None:
        self.withdraw_selected()

    def action_refresh(self) -> None:
        self.refresh_locks()

    def action_connect(self) -> None:
        self.show_connect_wallet()

    def action_disconnect(self) -> None:
        self.wallet.disconnect()
        self.coordinator.disconnect()
        self.render_locks()

    def on_connect_wallet_screen_connect_requested(
        self, event: ConnectWalletScreen.ConnectRequested
    ) -> None:
        try:
            if event.load_saved:
                if not event.password:
                    self.notify("Enter the keystore password", severity="error")
                    return
                self.wallet.load_wallet_from_storage(event.password)
            elif event.private_key:
                self.wallet.import_wallet(event.private_key)
            else:
                self.wallet.create_wallet()

            if not event.load_saved and event.password:
                self.wallet.save_wallet(event.password)
        except WalletError as e:
            logger.error("Wallet connection failed: %s", e)
            self.notify(str(e), title="Wallet error", severity="error")
            return

        self.run_worker(self._sync_session(), exclusive=True, group="refresh")

    async def _sync_session(self) -> None:
        await self.coordinator.sync_session()
        self.render_locks()


def main():
    """Entry point for the application."""
    setup_logging()
    app = TimelockApp()
    app.run()


if __name__ == "__main__":
    main()
