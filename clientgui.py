import argparse
import sys
import threading

from PyQt5.QtWidgets import (
    QApplication, QMainWindow, QWidget, QVBoxLayout, QPushButton,
    QTextEdit, QLineEdit, QLabel, QMessageBox, QHBoxLayout
)
from PyQt5.QtCore import pyqtSignal, QObject

from clientcli import connect, parse_port
from config import DEFAULT_PARAMETERS, HOST, PORT
from handshake import Role
from key_exchange import time_entropy
from logging_util import setup_logger
from session import establish_session


class Communicator(QObject):
    """Qt signal bridge for thread-safe UI updates."""
    message_received = pyqtSignal(str)
    error_occurred = pyqtSignal(str)


class ChatClient(QMainWindow):
    """PyQt5 connector: encrypts and sends what is typed. Never receives."""

    def __init__(self, host=HOST, port=PORT, params=DEFAULT_PARAMETERS, entropy=time_entropy):
        super().__init__()
        self.setWindowTitle("Stream Chat Client")
        self.setGeometry(100, 100, 700, 500)

        self.host = host
        self.port = port
        self.params = params
        self.entropy = entropy
        self.logger = setup_logger().getChild("gui")

        self.comm = Communicator()
        self.comm.message_received.connect(self._display_message)
        self.comm.error_occurred.connect(self._show_error)

        self.client_socket = None
        self.stream = None
        self.session = None

        self._init_ui()

    def _init_ui(self):
        self.chat_area = QTextEdit()
        self.chat_area.setReadOnly(True)

        self.message_input = QLineEdit()
        self.message_input.setPlaceholderText("Type your message...")
        self.message_input.returnPressed.connect(self._send_message)

        self.send_button = QPushButton("Send")
        self.connect_button = QPushButton("Connect to Server")

        self.send_button.clicked.connect(self._send_message)
        self.connect_button.clicked.connect(self._start_connection)

        top_bar = QHBoxLayout()
        self.status_label = QLabel("Not connected")
        top_bar.addStretch()
        top_bar.addWidget(self.status_label)

        bottom_layout = QHBoxLayout()
        bottom_layout.addWidget(self.send_button)
        bottom_layout.addWidget(self.connect_button)

        layout = QVBoxLayout()
        layout.addLayout(top_bar)
        layout.addWidget(self.chat_area)
        layout.addWidget(self.message_input)
        layout.addLayout(bottom_layout)

        container = QWidget()
        container.setLayout(layout)
        self.setCentralWidget(container)

    def _start_connection(self):
        """Start connection in background thread."""
        self.connect_button.setEnabled(False)
        threading.Thread(target=self._handle_connection, daemon=True).start()

    def _handle_connection(self):
        """Connect and run the connector handshake."""
        try:
            self.client_socket = connect(self.host, self.port)
            self.comm.message_received.emit(f"[+] Connected to {self.host}:{self.port}")
            self.stream = self.client_socket.makefile('rwb')
            self.session = establish_session(Role.CONNECTOR, self.stream, self.params, self.entropy)
            self.comm.message_received.emit(f"[+] Shared secret established: {self.session.shared_secret:016X}")
        except Exception as e:
            self.logger.exception("Connection failed")
            self._drop_connection()
            self.comm.error_occurred.emit(f"[!] Connection error: {e}")

    def _drop_connection(self):
        """Close the half-open socket and stream left by a failed connect or handshake."""
        if self.stream is not None:
            self.stream.close()
            self.stream = None
        if self.client_socket is not None:
            self.client_socket.close()
            self.client_socket = None

    def _send_message(self):
        """Encrypt and send the typed line as one frame."""
        message = self.message_input.text()
        if not message.strip() or self.session is None:
            return
        self.message_input.clear()
        try:
            frame = self.session.send(message)
        except Exception as e:
            self.comm.error_occurred.emit(f"[!] Error sending message: {e}")
            return
        self.chat_area.append(f"[You]: {message}  ({frame.to_line().decode().strip()})")

    def _display_message(self, message: str):
        """Append message to chat area."""
        self.chat_area.append(message)
        if self.session is not None:
            self.status_label.setText("Secure")

    def _show_error(self, message: str):
        """Display error in message box and chat area."""
        self.connect_button.setEnabled(self.session is None)
        QMessageBox.critical(self, "Error", message)
        self.chat_area.append(f"[ERROR]: {message}")

    def closeEvent(self, event):
        self._drop_connection()
        super().closeEvent(event)


def parse_args():
    parser = argparse.ArgumentParser(description="Stream Chat GUI Client")
    parser.add_argument("--host", default=HOST, help="Server host")
    parser.add_argument("--port", type=parse_port, default=PORT, help="Server port")
    return parser.parse_args()


def main():
    args = parse_args()
    app = QApplication(sys.argv)
    client = ChatClient(host=args.host, port=args.port)
    client.show()
    return app.exec_()


if __name__ == '__main__':
    sys.exit(main())
