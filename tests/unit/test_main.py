"""Unit tests for the command-line entry point."""

import json
from unittest.mock import patch

import dns.resolver
import pytest

from dnsbl_client import main as main_module
from dnsbl_client.exceptions import TransportError
from dnsbl_client.models.check_entry import CheckType, HitRecord
from dnsbl_client.services.dnsbl_client import DNSBLClient


@pytest.fixture(autouse=True)
def cli_env(monkeypatch):
    monkeypatch.setenv("DNSBL_ZONES", "d1,d2")
    monkeypatch.delenv("DNSBL_CHECKS_FILE", raising=False)
    monkeypatch.delenv("DNSBL_TIMEOUT", raising=False)
    monkeypatch.delenv("DNSBL_NAMESERVERS", raising=False)
    with patch.object(main_module, "setup_logging"):
        yield


def test_usage_error_without_address(capsys):
    assert main_module.main([]) == main_module.EXIT_ERROR
    assert "usage" in capsys.readouterr().err


def test_listed_address_prints_report(capsys, fake_resolver, make_reply):
    resolver = fake_resolver(
        replies={"2.0.0.127.d1": make_reply("2.0.0.127.d1", ["127.0.0.2"])}
    )
    client = DNSBLClient(timeout=1, resolver=resolver)

    with patch.object(main_module, "build_client", return_value=client):
        code = main_module.main(["127.0.0.2"])

    report = json.loads(capsys.readouterr().out)
    assert code == main_module.EXIT_LISTED
    assert report["ip"] == "127.0.0.2"
    assert report["hits"] == [
        HitRecord("d1", CheckType.NORMAL, None, None, "127.0.0.2").to_dict()
    ]


def test_clean_address_exit_code(capsys, fake_resolver):
    client = DNSBLClient(timeout=1, resolver=fake_resolver())

    with patch.object(main_module, "build_client", return_value=client):
        code = main_module.main(["127.0.0.1"])

    assert code == main_module.EXIT_CLEAN
    assert json.loads(capsys.readouterr().out)["hits"] == []


def test_transport_failure_exit_code(fake_resolver):
    client = DNSBLClient(timeout=1, resolver=fake_resolver(fail_on=".d2"))

    with patch.object(main_module, "build_client", return_value=client):
        assert main_module.main(["127.0.0.2"]) == main_module.EXIT_ERROR


def test_invalid_configuration_exit_code(monkeypatch):
    monkeypatch.delenv("DNSBL_ZONES")

    assert main_module.main(["127.0.0.2"]) == main_module.EXIT_ERROR


def test_build_client_uses_configured_nameservers(monkeypatch):
    monkeypatch.setenv("DNSBL_NAMESERVERS", "192.0.2.53")
    monkeypatch.setenv("DNSBL_TIMEOUT", "4")
    config = main_module.Config.from_env()

    client = main_module.build_client(config)

    assert client.get_timeout() == 4
    assert client.get_resolver().nameservers == ["192.0.2.53"]


def test_transport_error_is_dnsbl_error():
    assert issubclass(TransportError, main_module.DNSBLError)


@patch(
    "dnsbl_client.services.resolver.dns.resolver.Resolver",
    side_effect=dns.resolver.NoResolverConfiguration("no nameservers"),
)
def test_missing_system_resolver_exit_code(mock_resolver_class, monkeypatch):
    monkeypatch.setenv("DNSBL_ZONES", "d1")

    assert main_module.main(["127.0.0.2"]) == main_module.EXIT_ERROR
