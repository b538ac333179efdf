from bcachefs_exporter.cli import cli

cli(obj={})
