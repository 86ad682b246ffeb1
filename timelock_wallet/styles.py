"""CSS styles for the Time-Locked Wallet application."""

CSS = """
Screen {
    background: #1e1e2e;
}

Header {
    background: #181825;
    text-style: bold;
    padding: 0 1;
    height: 3;
}

Footer {
    background: #181825;
    height: 2;
}

#owner-status {
    background: #181825;
    color: #a6adc8;
    padding: 0 2;
    height: 1;
}

#error-bar {
    height: auto;
    display: none;
    background: #45293a;
    padding: 0 1;
}

#error-bar.visible {
    display: block;
}

#error-banner {
    color: #f38ba8;
    width: 1fr;
}

#actions {
    height: 3;
    padding: 0 1;
}

#actions Button {
    margin: 0 1 0 0;
}

#locks-table {
    height: 1fr;
    margin: 1 1;
}

ModalScreen {
    align: center middle;
}

ModalScreen > * {
    width: 70;
}

#create-lock-title, #connect-title, #result-title {
    text-style: bold;
    color: #89b4fa;
    padding: 1 0;
}

#minimum-hint {
    color: #a6adc8;
}
"""
