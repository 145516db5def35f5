"""Send a reboot/shutdown command datagram to a listening host."""

from __future__ import annotations

import argparse
import socket
import sys

from power_controller.matcher import Command, command_strings

DEFAULT_PORT = 9999


def build_payload(machine_identifier: str, action: str) -> bytes:
    reboot, shutdown = command_strings(machine_identifier)
    text = reboot if Command(action) is Command.REBOOT else shutdown
    return text.encode("utf-8")


def send(host: str, port: int, payload: bytes) -> int:
    """Fire one datagram; UDP gives no delivery confirmation."""
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        return sock.sendto(payload, (host, port))


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Ask a remote host to reboot or shut down over UDP.")
    parser.add_argument("host", help="Hostname or IP address of the listening machine.")
    parser.add_argument(
        "action",
        choices=[Command.REBOOT.value, Command.SHUTDOWN.value],
        help="Power action to request.",
    )
    parser.add_argument("--machine-id", default="mac01", help="Machine identifier configured on the host.")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="UDP port the host listens on.")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    payload = build_payload(args.machine_id, args.action)

    try:
        sent = send(args.host, args.port, payload)
    except OSError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(f"Sent {payload.decode('utf-8')} ({sent} bytes) to {args.host}:{args.port}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
