# tests/test_logger.py - Tests for logging setup
"""
Unit tests for setup_logging.
"""

import io
import logging

import pytest
from colorama import Fore

from bcachefs_exporter.utils.logger import setup_logging


class _TTY(io.StringIO):
    def isatty(self):
        return True


@pytest.fixture(autouse=True)
def restore_logging():
    root_logger = logging.getLogger()
    handlers, level = root_logger.handlers[:], root_logger.level
    yield
    for handler in root_logger.handlers:
        if handler not in handlers:
            handler.close()
    root_logger.handlers = handlers
    root_logger.setLevel(level)


class TestSetupLogging:
    """Test cases for setup_logging"""

    def test_level_and_plain_output(self):
        stream = io.StringIO()
        setup_logging('WARNING', stream=stream)

        logging.getLogger('bcachefs_exporter.test').info('hidden')
        logging.getLogger('bcachefs_exporter.test').warning('shown')

        assert logging.getLogger().level == logging.WARNING
        output = stream.getvalue()
        assert 'hidden' not in output
        assert ' - bcachefs_exporter.test - WARNING - shown' in output
        assert Fore.YELLOW not in output

    def test_colors_on_terminal(self):
        stream = _TTY()
        setup_logging('INFO', stream=stream)

        logging.getLogger('bcachefs_exporter.test').error('boom')

        assert f'{Fore.RED}ERROR' in stream.getvalue()

    def test_file_handler_is_uncolored(self, tmp_path):
        log_file = tmp_path / 'exporter.log'
        setup_logging('INFO', log_file=str(log_file), stream=_TTY())

        logging.getLogger('bcachefs_exporter.test').error('to file')
        for handler in logging.getLogger().handlers:
            handler.flush()

        content = log_file.read_text()
        assert ' - ERROR - to file' in content
        assert Fore.RED not in content

    def test_unknown_level_falls_back_to_info(self):
        setup_logging('VERBOSE', stream=io.StringIO())
        assert logging.getLogger().level == logging.INFO
