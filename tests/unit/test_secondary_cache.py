"""
Tests for the secondary cache reset
"""
import pytest

from models.settings import SecondaryCacheSettings
from services.errors import RemoteCommandError, ServiceControlError
from services.reclaim_results import SecondaryReset
from services.secondary_cache import SecondaryCacheReset, measure_script, service_script


def open_session(fleet, hostname='H1', **kwargs):
    fleet.add(hostname, **kwargs)
    session = fleet.session_factory(hostname)
    session.open()
    return session


def test_reset_sequence(fleet):
    session = open_session(fleet, secondary_sizes_mb=[12000, 50])
    sleeps = []

    outcome = SecondaryCacheReset(sleep=sleeps.append).reset(session)

    assert session.host.events == [
        'measure-directory',
        'stop-service',
        'remove-directory',
        'start-service',
        'directory-exists',
        'measure-directory',
    ]
    assert outcome.size_before_mb == pytest.approx(12000)
    assert outcome.size_after_mb == pytest.approx(50)
    assert outcome.reclaimed_mb == pytest.approx(11950)
    assert outcome.stop.succeeded and outcome.start.succeeded
    assert outcome.directory_removed and outcome.directory_recreated
    assert sleeps == [10]


def test_stop_failure_is_recorded_and_deletion_proceeds(fleet, caplog):
    session = open_session(fleet, secondary_sizes_mb=[400, 10], stop_error='Cannot stop service wuauserv')

    outcome = SecondaryCacheReset(sleep=lambda seconds: None).reset(session)

    assert not outcome.stop.succeeded
    assert outcome.stop.error == 'Cannot stop service wuauserv'
    assert 'remove-directory' in session.host.events
    assert outcome.errors == []
    assert 'could not stop service wuauserv' in caplog.text


def test_regrowth_gives_negative_delta(fleet):
    session = open_session(fleet, secondary_sizes_mb=[10, 25])

    outcome = SecondaryCacheReset(sleep=lambda seconds: None).reset(session)

    assert outcome.reclaimed_mb == pytest.approx(-15)


def test_missing_directory_measures_zero(fleet):
    session = open_session(fleet, secondary_sizes_mb=[0, 0])

    assert SecondaryCacheReset().measure_mb(session) == 0


def test_custom_grace_period(fleet):
    session = open_session(fleet, secondary_sizes_mb=[1, 1])
    sleeps = []
    settings = SecondaryCacheSettings(grace_period_seconds=30, service_name='bits', path='D:\\Cache')

    SecondaryCacheReset(settings, sleep=sleeps.append).reset(session)

    assert sleeps == [30]


def test_scripts_quote_their_arguments():
    assert "$path = 'C:\\Program Files\\It''s'" in measure_script("C:\\Program Files\\It's")
    assert "Stop-Service -Name $service -Force" in service_script('wuauserv', 'stop')
    assert "Start-Service -Name $service" in service_script('wuauserv', 'start')


def test_unreadable_first_measurement_stops_nothing(fleet):
    session = open_session(fleet, documents={'measure-directory': []})

    with pytest.raises(RemoteCommandError, match='measure-directory returned a list'):
        SecondaryCacheReset(sleep=lambda seconds: None).reset(session)

    assert session.host.events == ['measure-directory']


def test_malformed_service_reply_is_a_failed_control(fleet, caplog):
    session = open_session(fleet, secondary_sizes_mb=[100, 5], documents={'stop-service': ['unexpected']})

    outcome = SecondaryCacheReset(sleep=lambda seconds: None).reset(session)

    assert not outcome.stop.succeeded
    assert isinstance(outcome.stop.failure, ServiceControlError)
    assert outcome.stop.failure.action == 'stop'
    assert outcome.start.succeeded and outcome.start.failure is None
    assert outcome.reclaimed_mb == pytest.approx(95)
    assert 'could not stop service wuauserv: stop-service returned a list instead of an object' in caplog.text


def test_remove_timeout_keeps_before_figure(fleet):
    session = open_session(fleet, secondary_sizes_mb=[800, 790], remove_error='Command timed out')

    outcome = SecondaryCacheReset(sleep=lambda seconds: None).reset(session)

    assert 'start-service' in session.host.events
    assert outcome.size_before_mb == pytest.approx(800)
    assert outcome.errors == ['Command timed out']
    assert outcome.reclaimed_mb == pytest.approx(10)


def test_reclaimed_is_zero_without_second_measurement():
    assert SecondaryReset(path='C:\\Cache', size_before_mb=300).reclaimed_mb == 0
