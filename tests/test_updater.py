from __future__ import annotations

import asyncio
import ipaddress
import itertools
from typing import Dict, List, Optional
from unittest.mock import AsyncMock

import pytest

from providerupdater.config import ResolverSettings, Settings
from providerupdater.constants import DEFAULT_ZIP_URL
from providerupdater.core.unzip import Unzipper, extract_zip
from providerupdater.exceptions import NetworkError, NotEnoughServersError, ResolveError
from providerupdater.models import Server
from providerupdater.resolver import ParallelResolver, derive_parallel_settings
from providerupdater.updater import Updater
from providerupdater.warner import CollectingWarner


def ip(value: str):
    return ipaddress.ip_address(value)


class FakeUnzipper:
    def __init__(self, contents: Optional[Dict[str, bytes]] = None, error: Optional[Exception] = None):
        self.contents = contents or {}
        self.error = error
        self.urls: List[str] = []

    async def fetch_and_extract(self, url: str) -> Dict[str, bytes]:
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return dict(self.contents)


def make_resolver(host_to_ips=None, warnings=(), error=None) -> AsyncMock:
    resolver = AsyncMock()
    if error is not None:
        resolver.resolve.side_effect = error
    else:
        resolver.resolve.return_value = (host_to_ips or {}, list(warnings))
    return resolver


@pytest.mark.asyncio
async def test_unzipper_error_is_propagated():
    error = NetworkError("dummy")
    resolver = make_resolver()
    warner = CollectingWarner()
    updater = Updater(FakeUnzipper(error=error), resolver, warner)

    with pytest.raises(NetworkError) as excinfo:
        await updater.get_servers(0)

    assert excinfo.value is error
    resolver.resolve.assert_not_called()
    assert warner.messages == []


@pytest.mark.asyncio
async def test_fetches_configured_url():
    unzipper = FakeUnzipper()
    updater = Updater(unzipper, make_resolver(), CollectingWarner(), zip_url="https://example.com/c.zip")
    await updater.get_servers(0)
    assert unzipper.urls == ["https://example.com/c.zip"]


@pytest.mark.asyncio
async def test_default_url():
    unzipper = FakeUnzipper()
    await Updater(unzipper, make_resolver(), CollectingWarner()).get_servers(0)
    assert unzipper.urls == [DEFAULT_ZIP_URL]


@pytest.mark.asyncio
@pytest.mark.parametrize("minimum", [1, 2, 10])
async def test_empty_archive_is_not_enough(minimum):
    resolver = make_resolver()
    updater = Updater(FakeUnzipper({}), resolver, CollectingWarner())

    with pytest.raises(NotEnoughServersError) as excinfo:
        await updater.get_servers(minimum)

    assert str(excinfo.value) == f"not enough servers found: 0 and expected at least {minimum}"
    assert excinfo.value.count == 0
    resolver.resolve.assert_not_called()


@pytest.mark.asyncio
async def test_empty_archive_with_zero_minimum_succeeds():
    servers = await Updater(FakeUnzipper({}), make_resolver(), CollectingWarner()).get_servers(0)
    assert servers == []


@pytest.mark.asyncio
async def test_no_openvpn_file():
    warner = CollectingWarner()
    resolver = make_resolver()
    updater = Updater(FakeUnzipper({"somefile.txt": b""}), resolver, warner)

    with pytest.raises(NotEnoughServersError, match="not enough servers found: 0 and expected at least 1"):
        await updater.get_servers(1)

    assert warner.messages == []
    resolver.resolve.assert_not_called()


@pytest.mark.asyncio
async def test_invalid_proto():
    warner = CollectingWarner()
    updater = Updater(FakeUnzipper({"badproto.ovpn": b"proto invalid"}), make_resolver(), warner)

    with pytest.raises(NotEnoughServersError, match="not enough servers found: 0 and expected at least 1"):
        await updater.get_servers(1)

    assert warner.messages == ["unknown protocol: invalid in badproto.ovpn"]


@pytest.mark.asyncio
async def test_no_host():
    warner = CollectingWarner()
    updater = Updater(FakeUnzipper({"nohost.ovpn": b""}), make_resolver(), warner)

    with pytest.raises(NotEnoughServersError):
        await updater.get_servers(1)

    assert warner.messages == ["remote host not found in nohost.ovpn"]


@pytest.mark.asyncio
async def test_multiple_hosts():
    warner = CollectingWarner()
    resolver = make_resolver()
    updater = Updater(
        FakeUnzipper({"ipvanish-CA-City-A-hosta.ovpn": b"remote hosta\nremote hostb"}),
        resolver,
        warner,
    )

    with pytest.raises(NotEnoughServersError, match="not enough servers found: 0 and expected at least 1"):
        await updater.get_servers(1)

    assert warner.messages == ['only using the first host "hosta" and discarding 1 other hosts']
    resolver.resolve.assert_awaited_once_with(["hosta"], derive_parallel_settings(1))


@pytest.mark.asyncio
async def test_resolve_error():
    error = ResolveError("dummy", warnings=["resolve warning"])
    warner = CollectingWarner()
    resolver = make_resolver(error=error)
    updater = Updater(FakeUnzipper({"ipvanish-CA-City-A-hosta.ovpn": b"remote hosta"}), resolver, warner)

    with pytest.raises(ResolveError) as excinfo:
        await updater.get_servers(0)

    assert excinfo.value is error
    assert str(excinfo.value) == "dummy"
    assert warner.messages == ["resolve warning"]
    resolver.resolve.assert_awaited_once_with(["hosta"], derive_parallel_settings(0))


@pytest.mark.asyncio
@pytest.mark.parametrize("minimum", [0, 1, 5])
async def test_resolve_error_regardless_of_minimum(minimum):
    updater = Updater(
        FakeUnzipper({"hosta.ovpn": b"remote hosta"}),
        make_resolver(error=ResolveError("dummy")),
        CollectingWarner(),
    )
    with pytest.raises(ResolveError, match="dummy"):
        await updater.get_servers(minimum)


@pytest.mark.asyncio
async def test_unexpected_resolver_error_is_not_wrapped():
    error = RuntimeError("boom")
    updater = Updater(FakeUnzipper({"hosta.ovpn": b"remote hosta"}), make_resolver(error=error), CollectingWarner())
    with pytest.raises(RuntimeError) as excinfo:
        await updater.get_servers(0)
    assert excinfo.value is error


@pytest.mark.asyncio
async def test_filename_parsing_error():
    warner = CollectingWarner()
    resolver = make_resolver()
    updater = Updater(FakeUnzipper({"ipvanish-unknown-City-A-hosta.ovpn": b"remote hosta"}), resolver, warner)

    with pytest.raises(NotEnoughServersError):
        await updater.get_servers(1)

    assert warner.messages == ["country code is unknown: unknown in ipvanish-unknown-City-A-hosta.ovpn"]
    resolver.resolve.assert_not_called()


@pytest.mark.asyncio
async def test_success():
    warner = CollectingWarner()
    resolver = make_resolver(
        host_to_ips={
            "hosta": [ip("1.1.1.1"), ip("2.2.2.2")],
            "hostb": [ip("3.3.3.3"), ip("4.4.4.4")],
        },
        warnings=["resolve warning"],
    )
    updater = Updater(
        FakeUnzipper(
            {
                "ipvanish-CA-City-A-hosta.ovpn": b"remote hosta",
                "ipvanish-LU-City-B-hostb.ovpn": b"remote hostb",
            }
        ),
        resolver,
        warner,
    )

    servers = await updater.get_servers(1)

    assert servers == [
        Server(
            hostname="hosta",
            country="Canada",
            city="City A",
            udp=True,
            ips=(ip("1.1.1.1"), ip("2.2.2.2")),
        ),
        Server(
            hostname="hostb",
            country="Luxembourg",
            city="City B",
            udp=True,
            ips=(ip("3.3.3.3"), ip("4.4.4.4")),
        ),
    ]
    assert servers[0].vpn == "openvpn"
    assert warner.messages == ["resolve warning"]
    resolver.resolve.assert_awaited_once_with(["hosta", "hostb"], derive_parallel_settings(1))


@pytest.mark.asyncio
async def test_single_profile_end_to_end():
    resolver = make_resolver(host_to_ips={"hosta": [ip("1.1.1.1")]})
    updater = Updater(FakeUnzipper({"x-CA-City-A-hosta.ovpn": b"remote hosta"}), resolver, CollectingWarner())

    servers = await updater.get_servers(1)

    assert [server.to_dict() for server in servers] == [
        {
            "vpn": "openvpn",
            "country": "Canada",
            "city": "City A",
            "hostname": "hosta",
            "udp": True,
            "ips": ["1.1.1.1"],
        }
    ]


@pytest.mark.asyncio
async def test_unresolved_hosts_are_dropped():
    resolver = make_resolver(host_to_ips={"hostb": [ip("3.3.3.3")], "hostc": []})
    updater = Updater(
        FakeUnzipper(
            {
                "hosta.ovpn": b"remote hosta",
                "hostb.ovpn": b"remote hostb",
                "hostc.ovpn": b"remote hostc",
            }
        ),
        resolver,
        CollectingWarner(),
    )

    servers = await updater.get_servers(1)
    assert [server.hostname for server in servers] == ["hostb"]

    with pytest.raises(NotEnoughServersError, match="not enough servers found: 1 and expected at least 2"):
        await updater.get_servers(2)


@pytest.mark.asyncio
async def test_shared_hostname_is_resolved_once():
    resolver = make_resolver(host_to_ips={"hosta": [ip("1.1.1.1")]})
    updater = Updater(
        FakeUnzipper(
            {
                "ipvanish-CA-City-A-hosta.ovpn": b"proto udp\nremote hosta",
                "ipvanish-CA-City-A-hosta-tcp.ovpn": b"proto tcp\nremote hosta",
            }
        ),
        resolver,
        CollectingWarner(),
    )

    servers = await updater.get_servers(1)

    resolver.resolve.assert_awaited_once_with(["hosta"], derive_parallel_settings(1))
    assert len(servers) == 1
    assert servers[0].tcp and servers[0].udp


ENTRIES = [
    ("ipvanish-US-New-York-nyc-a01.ovpn", b"remote nyc-a01"),
    ("ipvanish-CA-Toronto-tor-a01.ovpn", b"proto tcp\nremote tor-a01"),
    ("ipvanish-LU-Luxembourg-lux-a01.ovpn", b"remote lux-a01"),
    ("ipvanish-DE-Berlin-ber-a01.ovpn", b"remote ber-a01\nremote ber-a02"),
]


@pytest.mark.asyncio
async def test_output_is_independent_of_entry_order():
    host_to_ips = {
        "nyc-a01": [ip("1.0.0.1")],
        "tor-a01": [ip("1.0.0.2")],
        "lux-a01": [ip("1.0.0.3")],
        "ber-a01": [ip("1.0.0.4")],
    }
    results = []
    for permutation in itertools.permutations(ENTRIES):
        updater = Updater(
            FakeUnzipper(dict(permutation)), make_resolver(host_to_ips=host_to_ips), CollectingWarner()
        )
        results.append(await updater.get_servers(4))

    first = results[0]
    assert [server.hostname for server in first] == ["ber-a01", "lux-a01", "nyc-a01", "tor-a01"]
    assert all(result == first for result in results)


@pytest.mark.asyncio
async def test_custom_settings_factory():
    calls = []

    def factory(min_servers):
        calls.append(min_servers)
        return derive_parallel_settings(min_servers * 2)

    resolver = make_resolver(host_to_ips={"hosta": [ip("1.1.1.1")]})
    updater = Updater(FakeUnzipper({"hosta.ovpn": b"remote hosta"}), resolver, CollectingWarner(), settings_factory=factory)
    await updater.get_servers(1)

    assert calls == [1]
    resolver.resolve.assert_awaited_once_with(["hosta"], derive_parallel_settings(2))


def test_derive_parallel_settings_follows_config():
    config = ResolverSettings(max_fail_ratio=0.5, max_concurrency=3, max_no_new=4)
    settings = derive_parallel_settings(7, config)
    assert settings.min_found == 7
    assert settings.max_fail_ratio == 0.5
    assert settings.max_concurrency == 3
    assert settings.repeat.max_no_new == 4
    assert settings.repeat.sort_ips is True


@pytest.mark.asyncio
async def test_from_settings_wires_real_collaborators():
    cfg = Settings()
    updater = Updater.from_settings(cfg)
    assert isinstance(updater.unzipper, Unzipper)
    assert isinstance(updater.presolver, ParallelResolver)
    assert updater.zip_url == cfg.updater.zip_url
    assert updater.settings_factory(3) == derive_parallel_settings(3, cfg.resolver)
    await updater.close()


@pytest.mark.asyncio
async def test_timeout_cancels_running_lookups():
    cancelled: List[str] = []

    class SlowRepeat:
        async def resolve(self, host, settings):
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.append(host)
                raise
            return [ip("1.1.1.1")]

    updater = Updater(
        FakeUnzipper(
            {
                "ipvanish-CA-City-A-hosta.ovpn": b"remote hosta",
                "ipvanish-LU-City-B-hostb.ovpn": b"remote hostb",
            }
        ),
        ParallelResolver(SlowRepeat()),
        CollectingWarner(),
    )

    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(updater.get_servers(0), timeout=0.05)

    assert sorted(cancelled) == ["hosta", "hostb"]


@pytest.mark.asyncio
async def test_profiles_in_protocol_folders_are_merged(make_zip):
    contents = extract_zip(
        make_zip(
            {
                "udp/ipvanish-CA-Toronto-hosta.ovpn": b"proto udp\nremote hosta",
                "tcp/ipvanish-CA-Toronto-hosta.ovpn": b"proto tcp\nremote hosta",
            }
        )
    )
    updater = Updater(
        FakeUnzipper(contents),
        make_resolver(host_to_ips={"hosta": [ip("1.1.1.1")]}),
        CollectingWarner(),
    )

    servers = await updater.get_servers(1)

    assert servers == [
        Server(
            hostname="hosta",
            country="Canada",
            city="Toronto",
            tcp=True,
            udp=True,
            ips=(ip("1.1.1.1"),),
        )
    ]
