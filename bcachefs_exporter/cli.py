# bcachefs_exporter/cli.py - Command-line interface
"""
Command-line interface for the bcachefs Prometheus exporter.
"""

import click
import functools
import logging
import sys

from bcachefs_exporter.collector.discovery import discover_devices, discover_filesystems
from bcachefs_exporter.collector.orchestrator import collect_all
from bcachefs_exporter.errors import ExporterError
from bcachefs_exporter.exporters.encoder import encode_all
from bcachefs_exporter.utils.config import Config, parse_listen_address
from bcachefs_exporter.utils.logger import setup_logging


logger = logging.getLogger(__name__)


@click.group()
@click.option('--log-level', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR']),
              help='Log level (default: from config, INFO)')
@click.option('--log-file', type=click.Path(), help='Log file path')
@click.option('--config', 'config_file', type=click.Path(exists=True), help='YAML configuration file')
@click.pass_context
def cli(ctx, log_level, log_file, config_file):
    """
    bcachefs Prometheus exporter

    Exports per-device allocation statistics of mounted bcachefs filesystems.
    """
    ctx.ensure_object(dict)

    cfg = Config(config_file)
    if log_level:
        cfg.set('logging.level', log_level)
    if log_file:
        cfg.set('logging.file', log_file)

    setup_logging(level=cfg.get('logging.level', 'INFO'), log_file=cfg.get('logging.file'))

    ctx.obj['config'] = cfg


@cli.command()
@click.option('--listen', help='Listen address, e.g. "[::1]:22903" or "0.0.0.0:22903"')
@click.option('--sysfs-root', type=click.Path(), help='bcachefs sysfs directory')
@click.option('--metrics-path', help='URL path serving the metrics')
@click.pass_context
def serve(ctx, listen, sysfs_root, metrics_path):
    """
    Serve metrics over HTTP.

    Example:
        bcachefs-exporter serve --listen 0.0.0.0:22903
    """
    from bcachefs_exporter.exporters.http_handler import create_server

    cfg = ctx.obj['config']
    if listen:
        cfg.set('exporter.listen', listen)
    if sysfs_root:
        cfg.set('sysfs.root', sysfs_root)
    if metrics_path:
        cfg.set('exporter.metrics_path', metrics_path)

    try:
        host, port = parse_listen_address(cfg.get('exporter.listen'))
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint='--listen')

    collect = functools.partial(collect_all, cfg.get('sysfs.root'))
    server = create_server(host, port, collect, cfg.get('exporter.metrics_path'))
    logger.info(f"Listening on {cfg.get('exporter.listen')}{cfg.get('exporter.metrics_path')}")

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    finally:
        server.server_close()


@cli.command()
@click.option('--sysfs-root', type=click.Path(), help='bcachefs sysfs directory')
@click.option('--format', 'output_format', type=click.Choice(['text', 'prometheus']), default='text',
              help='Output format')
@click.pass_context
def dump(ctx, sysfs_root, output_format):
    """
    Run one collection pass and print the result.

    Example:
        bcachefs-exporter dump --format prometheus
    """
    root = sysfs_root or ctx.obj['config'].get('sysfs.root')

    try:
        if output_format == 'prometheus':
            from bcachefs_exporter.exporters.prometheus import get_metrics_text
            output = get_metrics_text(root)
        else:
            output = encode_all(collect_all(root))
    except (ExporterError, OSError) as e:
        logger.error(f"Collection failed: {e}")
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(output, nl=False)


@cli.command()
@click.option('--sysfs-root', type=click.Path(), help='bcachefs sysfs directory')
@click.pass_context
def check(ctx, sysfs_root):
    """
    List the filesystems and devices the exporter would scrape.
    """
    root = sysfs_root or ctx.obj['config'].get('sysfs.root')

    try:
        filesystems = discover_filesystems(root)
        for fs in filesystems:
            click.echo(f"Filesystem {fs.uuid}")
            for device in discover_devices(fs):
                click.echo(f"  dev-{device.device_no}: {device.path}")
    except ExporterError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if not filesystems:
        click.echo(f"No bcachefs filesystems found under {root}")


if __name__ == '__main__':
    cli(obj={})
