"""
TwinSync CLI Entry Point

Author: TwinSync Project
License: MIT
"""

import sys
import click

from twinsync import __version__
from twinsync.utils.logger import setup_logging, get_logger
from twinsync.errors import TwinSyncError

logger = get_logger(__name__)


@click.command()
@click.argument('path_a', type=click.Path(dir_okay=False))
@click.argument('path_b', type=click.Path(dir_okay=False))
@click.option(
    '--overwrite',
    is_flag=True,
    help='Resolve differing files at startup (backs up both when both have content)'
)
@click.option(
    '-c', '--config',
    type=click.Path(exists=True, dir_okay=False),
    help='YAML configuration file'
)
@click.option(
    '--debounce-ms',
    type=click.IntRange(min=1),
    help='Event coalescing window in milliseconds [default: 500]'
)
@click.option(
    '--hash-algorithm',
    type=str,
    help='Fingerprint algorithm: crc32 or any hashlib name [default: crc32]'
)
@click.option(
    '--log-level',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
    help='Log level [default: INFO]'
)
@click.option(
    '--log-format',
    type=click.Choice(['text', 'json'], case_sensitive=False),
    help='Log format [default: text]'
)
@click.option(
    '--log-file',
    type=click.Path(dir_okay=False),
    help='Also write logs to this file (rotated)'
)
@click.version_option(version=__version__, prog_name='twinsync')
def main(
    path_a: str,
    path_b: str,
    overwrite: bool,
    config: str,
    debounce_ms: int,
    hash_algorithm: str,
    log_level: str,
    log_format: str,
    log_file: str
):
    """
    Keep two files mirrored: whenever one changes, copy it onto the other.

    Both files must exist, share the same name (ignoring case) and be UTF-8
    text. If they differ at startup, --overwrite is required.

    Examples:

    \b
    # Mirror a notes file between two mounted directories
    twinsync /mnt/laptop/notes.md /mnt/usb/notes.md

    \b
    # Reconcile differing copies first (backups are written next to each file)
    twinsync --overwrite ~/a/todo.txt ~/b/todo.txt
    """
    from twinsync.config.config_loader import load_config

    overrides = {
        "app": {
            "log_level": log_level.upper() if log_level else None,
            "log_format": log_format.lower() if log_format else None,
            "log_to_file": True if log_file else None,
            "log_file_path": log_file,
        },
        "sync": {
            "debounce_ms": debounce_ms,
            "hash_algorithm": hash_algorithm,
        },
    }

    try:
        app_config = load_config(config, overrides)
    except (OSError, ValueError) as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)

    setup_logging(
        log_level=app_config.app.log_level,
        log_to_file=app_config.app.log_to_file,
        log_file_path=app_config.app.log_file_path,
        log_rotation_size=app_config.app.log_rotation_size,
        log_retention_count=app_config.app.log_retention_count,
        json_format=app_config.app.log_format == "json"
    )

    logger.info(f"TwinSync {__version__} starting")

    from twinsync.core.orchestrator import PairSyncService

    service = None
    try:
        service = PairSyncService(app_config, path_a, path_b, overwrite=overwrite)
        service.initialize()
        service.run()
    except KeyboardInterrupt:
        logger.info("Received shutdown signal, stopping...")
        if service:
            service.stop()
    except TwinSyncError as e:
        logger.error(str(e))
        sys.exit(e.exit_code)


if __name__ == '__main__':
    main()
