"""
POS Print Relay - Command Line Entry Point

Run: python -m pos_print_relay [--port 9978] [--token secret]
"""

import argparse
import logging
import threading

from . import __version__
from .config import PORT, HOST, AUTH_TOKEN, CONTROL_PORT, LOG_PATH, LOG_LEVEL, DEBUG
from .logs import configure_logging
from .host import ServiceHost
from .server import PrintRelayService

logger = logging.getLogger('pos_print_relay.main')


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog='pos-print-relay', description='Local ESC/POS print relay')
    parser.add_argument('--port', type=int, default=PORT, help=f'relay port (default: {PORT})')
    parser.add_argument('--control-port', type=int, default=CONTROL_PORT,
                        help=f'control API port (default: {CONTROL_PORT})')
    parser.add_argument('--token', default=AUTH_TOKEN, help='shared secret clients must present')
    parser.add_argument('--log-path', default=LOG_PATH, help=f'log file (default: {LOG_PATH})')
    parser.add_argument('--log-level', default=LOG_LEVEL, help='logging level')
    parser.add_argument('--no-control', action='store_true', help='do not start the control API')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser.parse_args(argv)


def main(argv=None):
    """Run the relay until interrupted."""
    args = parse_args(argv)
    configure_logging(args.log_path, args.log_level)

    print("=" * 60)
    print("  POS Print Relay")
    print("=" * 60)
    print(f"  Version: {__version__}")
    print(f"  Relay:   ws://{HOST}:{args.port}/?token=...")
    if not args.no_control:
        print(f"  Control: http://{HOST}:{args.control_port}/api")
    print(f"  Log:     {args.log_path}")
    print("=" * 60)

    service = PrintRelayService(port=args.port, token=args.token, log_path=args.log_path)
    host = ServiceHost(service)
    host.start()

    try:
        if args.no_control:
            threading.Event().wait()
        else:
            from .app import create_app
            app = create_app(host, api_key=args.token)
            app.run(host=HOST, port=args.control_port, debug=DEBUG, use_reloader=False)
    except KeyboardInterrupt:
        pass
    finally:
        logger.info('Shutting down')
        host.shutdown()


if __name__ == '__main__':
    main()
