import argparse
import logging
import os
import sys

from . import qr
from .config import DEFAULT_PORT
from .errors import AddressResolutionError, EncodingError, MediaShareError
from .lifecycle import ServerManager


def ask_folder():
    print("\n--- Folder Selection ---")
    while True:
        try:
            path_input = input("Enter folder path to serve (or 'q' to quit): ").strip('"').strip()
            if path_input.lower() == 'q':
                return None
            if not path_input:
                continue # Ignore empty enter presses

            if os.path.isdir(path_input):
                return path_input
            else:
                print(f"Error: '{path_input}' is not a valid directory. Try again.")
        except (EOFError, KeyboardInterrupt):
            return None


def display_qr_code(url):
    try:
        print("\n" + "="*60)
        print("SCAN THIS QR CODE:")
        print("="*60)
        qr.print_terminal(url)
        print(f"\nServer is running at: {url}")
        print("="*60)
    except EncodingError as e:
        print(f"QR code generation failed: {e}")


def build_parser():
    parser = argparse.ArgumentParser(
        prog="mediashare",
        description="Share the images and videos in a folder with devices on the local network.",
    )
    parser.add_argument("folder", nargs="?", help="folder to serve (asked for when omitted)")
    parser.add_argument("-p", "--port", type=int, default=DEFAULT_PORT, help=f"port to listen on (default {DEFAULT_PORT})")
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug messages")
    return parser


def run(folder, port, manager=None):
    if not os.path.isdir(folder):
        print(f"Error: Path not found: {folder}")
        return 1

    manager = manager or ServerManager()
    try:
        info = manager.start(folder, port)
    except (AddressResolutionError, EncodingError) as e:
        # Still serving, only the pairing code is missing
        print(f"Warning: {e}")
        info = None
    except MediaShareError as e:
        print(f"Server error: {e}")
        return 1

    session = manager.session
    print(f"\n{'='*60}")
    print("SERVER STARTING..")
    print(f"Folder: {os.path.abspath(folder)}")
    print(f"Port: {session.port}")
    print(f"Local URL: http://127.0.0.1:{session.port}")
    if info is not None:
        print(f"Network URL: {info.url}")
        display_qr_code(info.url)
    print("Press Ctrl+C to stop the server")
    print(f"{'='*60}\n")

    try:
        while session.alive:
            session.join(0.5)
    except KeyboardInterrupt:
        print("\nStopping server..")
        manager.stop(wait=True, timeout=10)
        print("Server stopped.")
        return 0

    if session.failure is not None:
        print(f"Server error: {session.failure}")
        return 1
    return 0


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    folder = args.folder or ask_folder()
    if not folder:
        return 1
    return run(folder, args.port)


if __name__ == "__main__":
    sys.exit(main())
