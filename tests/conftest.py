"""Shared fixtures: a recording transport and a wired-up service."""

import pytest

from print_agent.app import create_app
from print_agent.config import PrinterSettings
from print_agent.job_queue import PrintQueue
from print_agent.printers import PrinterDirectory
from print_agent.service import PrintService

from .fakes import FakeTransport


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def settings(tmp_path):
    return PrinterSettings(str(tmp_path / 'config.json'))


@pytest.fixture
def directory(transport, settings):
    return PrinterDirectory(transport, settings)


@pytest.fixture
def print_queue(transport, directory):
    q = PrintQueue(transport, directory)
    q.start()
    yield q
    q.stop(timeout=5)


@pytest.fixture
def service(print_queue, directory):
    return PrintService(print_queue, directory, column_width=32, sync_timeout=5)


@pytest.fixture
def client(service):
    app = create_app(service)
    app.config['TESTING'] = True
    return app.test_client()
