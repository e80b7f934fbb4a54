"""
Tests for host list collection and validation
"""
import pytest

from services.errors import HostListError
from services.host_validator import HostValidator


@pytest.mark.parametrize('hostname', ['H1', 'PC-0042', 'pc001.corp.example.com', '10.20.30.40', 'fe80::1'])
def test_valid_hostnames(hostname):
    assert HostValidator.validate_hostname(hostname)


@pytest.mark.parametrize('hostname', ['', '   ', 'bad host', 'pc_01!', '-leading.example.com'])
def test_invalid_hostnames(hostname):
    assert not HostValidator.validate_hostname(hostname)


def test_validate_host_list_rejects_empty():
    with pytest.raises(HostListError):
        HostValidator().validate_host_list([])


def test_validate_host_list_names_invalid_entries():
    with pytest.raises(HostListError) as excinfo:
        HostValidator().validate_host_list(['H1', 'bad host'])

    assert "'bad host'" in str(excinfo.value)


def test_merge_hosts_keeps_first_occurrence():
    merged = HostValidator.merge_hosts(['H2', 'H1'], ['h1', 'H3'], ['H2', ' H4 '])

    assert merged == ['H2', 'H1', 'H3', 'H4']


def test_read_hosts_file(tmp_path):
    hosts_file = tmp_path / 'hosts.txt'
    hosts_file.write_text('# lab machines\nH1\n\nH2  # second floor\n')

    assert HostValidator.read_hosts_file(str(hosts_file)) == ['H1', 'H2']


def test_read_missing_hosts_file(tmp_path):
    with pytest.raises(HostListError):
        HostValidator.read_hosts_file(str(tmp_path / 'missing.txt'))
