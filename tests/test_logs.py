import logging
import re

import pytest

from pos_print_relay.logs import configure_logging, read_log, NO_LOGS, PACKAGE_LOGGER


@pytest.fixture
def package_logger():
    logger = logging.getLogger(PACKAGE_LOGGER)
    before = list(logger.handlers)
    yield logger
    for handler in logger.handlers[:]:
        if handler not in before:
            logger.removeHandler(handler)
            handler.close()


def test_records_are_timestamped_lines(package_logger, tmp_path):
    log_path = tmp_path / 'logs' / 'relay.log'

    configure_logging(str(log_path))
    logging.getLogger('pos_print_relay.server').info('Print relay running')
    for handler in package_logger.handlers:
        handler.flush()

    line = log_path.read_text(encoding='utf-8').splitlines()[-1]
    assert re.match(r'^\[\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\] ', line)
    assert line.endswith('INFO pos_print_relay.server: Print relay running')


def test_configure_is_idempotent(package_logger, tmp_path):
    log_path = str(tmp_path / 'relay.log')

    configure_logging(log_path)
    count = len(package_logger.handlers)
    configure_logging(log_path)

    assert len(package_logger.handlers) == count


def test_log_is_appended(package_logger, tmp_path):
    log_path = tmp_path / 'relay.log'
    log_path.write_text('earlier line\n', encoding='utf-8')

    configure_logging(str(log_path))
    logging.getLogger('pos_print_relay').warning('later line')
    for handler in package_logger.handlers:
        handler.flush()

    content = read_log(str(log_path))
    assert content.startswith('earlier line\n')
    assert 'later line' in content


def test_read_missing_log(tmp_path):
    assert read_log(str(tmp_path / 'missing.log')) == NO_LOGS
