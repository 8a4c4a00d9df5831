import json
import logging

import pytest

from print_agent.config import ENV_TEMPLATE, PrinterSettings, ServerConfig
from print_agent.errors import ConfigError
from print_agent.printers import PrinterDirectory

from .fakes import FakeTransport

ENV_VARS = ('PRINTAGENT_PREFIX', 'PRINTAGENT_HOST', 'PRINTAGENT_PORT',
            'PRINTAGENT_LISTEN_ALL', 'PRINTAGENT_ENV_PATH')


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


# =============================================================================
# ServerConfig
# =============================================================================

def test_defaults_and_template(tmp_path):
    env_path = tmp_path / 'printagent.env'
    config = ServerConfig.load(str(env_path))

    assert (config.host, config.port, config.listen_all) == ('localhost', 5000, False)
    assert config.prefix == 'http://localhost:5000/'
    assert env_path.read_text(encoding='utf-8') == ENV_TEMPLATE


def test_env_file_values(tmp_path):
    env_path = tmp_path / 'printagent.env'
    env_path.write_text('# comment\nHOST=192.168.0.50\nPORT="7000"\nLISTEN_ALL=no\n', encoding='utf-8')

    config = ServerConfig.load(str(env_path))
    assert config.prefix == 'http://192.168.0.50:7000/'
    assert config.address == ('192.168.0.50', 7000)


def test_environment_wins_over_file(tmp_path, monkeypatch):
    env_path = tmp_path / 'printagent.env'
    env_path.write_text('HOST=filehost\nPORT=7000\n', encoding='utf-8')
    monkeypatch.setenv('PRINTAGENT_PORT', '8123')
    monkeypatch.setenv('PRINTAGENT_LISTEN_ALL', 'yes')

    config = ServerConfig.load(str(env_path))
    assert config.host == 'filehost'
    assert config.port == 8123
    assert config.listen_all
    assert config.prefix == 'http://0.0.0.0:8123/'
    assert config.address == ('0.0.0.0', 8123)


def test_explicit_prefix(tmp_path, monkeypatch):
    monkeypatch.setenv('PRINTAGENT_PREFIX', 'http://+:9000/')
    config = ServerConfig.load(str(tmp_path / 'printagent.env'))
    assert config.prefix == 'http://+:9000/'
    assert config.address == ('0.0.0.0', 9000)


@pytest.mark.parametrize('port', ['abc', '0', '70000', ''])
def test_bad_port_falls_back(tmp_path, monkeypatch, port):
    monkeypatch.setenv('PRINTAGENT_PORT', port)
    assert ServerConfig.load(str(tmp_path / 'printagent.env')).port == 5000


# =============================================================================
# PrinterSettings
# =============================================================================

def test_settings_round_trip(tmp_path):
    path = tmp_path / 'config.json'
    settings = PrinterSettings(str(path))
    assert settings.preferred_printer is None

    settings.preferred_printer = 'POS-80'
    settings.save()
    assert json.loads(path.read_text()) == {'preferredPrinter': 'POS-80'}
    assert PrinterSettings(str(path)).preferred_printer == 'POS-80'


def test_settings_reload(tmp_path):
    path = tmp_path / 'config.json'
    settings = PrinterSettings(str(path))
    path.write_text(json.dumps({'preferredPrinter': 'Zebra'}))
    assert settings.preferred_printer is None
    settings.reload()
    assert settings.preferred_printer == 'Zebra'


def test_corrupt_settings_are_logged(tmp_path, caplog):
    path = tmp_path / 'config.json'
    path.write_text('{not json')
    with caplog.at_level(logging.ERROR, logger='print_agent'):
        settings = PrinterSettings(str(path))
    assert settings.preferred_printer is None
    assert 'Could not read config' in caplog.text


# =============================================================================
# PrinterDirectory
# =============================================================================

def test_preferred_falls_back_to_default(settings):
    directory = PrinterDirectory(FakeTransport(), settings)
    assert directory.get_system_default() == 'POS-80'
    assert directory.get_preferred() == 'POS-80'


def test_set_preferred_persists(settings):
    directory = PrinterDirectory(FakeTransport(), settings)
    directory.set_preferred(' Zebra-ZD220 ')
    assert directory.get_preferred() == 'Zebra-ZD220'
    assert PrinterSettings(str(settings.path)).preferred_printer == 'Zebra-ZD220'


def test_unknown_printer_is_rejected_before_saving(settings):
    directory = PrinterDirectory(FakeTransport(), settings)
    with pytest.raises(ConfigError):
        directory.set_preferred('Nope')
    assert not settings.path.exists()
    assert directory.get_preferred() == 'POS-80'


def test_directory_reload(settings):
    directory = PrinterDirectory(FakeTransport(), settings)
    settings.path.write_text(json.dumps({'preferredPrinter': 'Zebra-ZD220'}))
    directory.reload()
    assert directory.to_dict() == {
        'defaultPrinter': 'POS-80',
        'preferredPrinter': 'Zebra-ZD220',
        'printers': ['POS-80', 'Zebra-ZD220'],
    }
