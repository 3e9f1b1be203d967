import argparse
import json
import logging
import signal
import sys
import threading
from typing import List, Optional

from core.app_context import AppContext
from core.config_loader import load_config, ConfigError
from database.init_db import init_db

logger = logging.getLogger(__name__)

# Set by SIGINT/SIGTERM for graceful shutdown
shutdown_event = threading.Event()


def signal_handler(sig, frame):
    logger.info("Shutdown signal received")
    shutdown_event.set()


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    # APScheduler logs every job execution at INFO
    logging.getLogger('apscheduler').setLevel(logging.INFO if verbose else logging.WARNING)


def run_serve(ctx: AppContext) -> int:
    """Run the scheduler in the foreground until a shutdown signal arrives."""
    if not ctx.config.scheduler.enabled:
        logger.warning("Scheduler disabled in config (scheduler.enabled = false), nothing to run")
        return 0

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    init_db(ctx.engine)
    ctx.scheduler.start()
    try:
        # Wake up periodically so signals are handled promptly
        while not shutdown_event.wait(timeout=5):
            pass
    finally:
        ctx.scheduler.stop()
    return 0


def run_api(ctx: AppContext) -> int:
    import uvicorn
    from web.backend.app import create_app

    init_db(ctx.engine)
    app = create_app(ctx)
    host, port = ctx.config.web.host, ctx.config.web.port
    logger.info(f"Starting DueWatch API on {host}:{port}")
    uvicorn.run(app, host=host, port=port, reload=False, log_level="info")
    return 0


def run_scan_now(ctx: AppContext) -> int:
    report = ctx.scheduler.trigger_scan_now()
    print(json.dumps(report.to_dict(), indent=2))
    return 0 if report.success else 1


def run_cleanup(ctx: AppContext) -> int:
    deleted = ctx.scheduler.trigger_cleanup_now()
    print(json.dumps({'deleted': deleted}))
    return 0


def run_test_email(ctx: AppContext, address: str) -> int:
    result = ctx.email_sender.send_test_email(address)
    print(json.dumps({'success': result.success, 'detail': result.detail}))
    return 0 if result.success else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="DueWatch reminder notification service")
    parser.add_argument('--config', type=str, default='config.yaml',
                        help='Path to config.yaml (default: config.yaml)')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')

    subparsers = parser.add_subparsers(dest='command', required=True)
    subparsers.add_parser('serve', help='Run the scan and cleanup scheduler in the foreground')
    subparsers.add_parser('api', help='Run the ops HTTP API with the scheduler attached')
    subparsers.add_parser('scan-now', help='Run one reminder scan and print its report')
    subparsers.add_parser('cleanup', help='Delete read notifications past retention')
    test_email = subparsers.add_parser('test-email', help='Send a test email to verify SMTP settings')
    test_email.add_argument('address', help='Recipient email address')
    subparsers.add_parser('init-db', help='Create database tables')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return 2

    ctx = AppContext.build(config)
    logger.debug(f"Running command '{args.command}'")

    if args.command == 'serve':
        return run_serve(ctx)
    if args.command == 'api':
        return run_api(ctx)
    if args.command == 'scan-now':
        return run_scan_now(ctx)
    if args.command == 'cleanup':
        return run_cleanup(ctx)
    if args.command == 'test-email':
        return run_test_email(ctx, args.address)
    if args.command == 'init-db':
        init_db(ctx.engine)
        return 0
    return 2


if __name__ == "__main__":
    sys.exit(main())
