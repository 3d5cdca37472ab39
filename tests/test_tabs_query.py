from __future__ import annotations

import pytest


def _registry(*, active: int | None = None, last_focused: int | None = 1):  # noqa: ANN202
    from compat_servers.chrome_shim.windows import StaticTab, StaticWindow, StaticWindowRegistry

    return StaticWindowRegistry(
        [
            StaticWindow(tabs=[StaticTab(1), StaticTab(2), StaticTab(3)], active_index=2),
            StaticWindow(tabs=[StaticTab(10), StaticTab(11)], active_index=0),
        ],
        active=active,
        last_focused=last_focused,
    )


def _adapter(registry):  # noqa: ANN001, ANN202
    from compat_servers.chrome_shim.adapter import ChromeAdapter
    from compat_servers.chrome_shim.settings_store import MemorySettingsStore

    store = MemorySettingsStore()
    return ChromeAdapter(store, registry), store


def test_current_window_active_tab_uses_last_focused_when_no_active_window() -> None:
    adapter, _store = _adapter(_registry(active=None, last_focused=1))

    res = adapter.tabs.query({"currentWindow": True, "active": True})
    assert res.ok
    assert res.value == [{"id": 10}]


def test_current_window_prefers_active_window() -> None:
    adapter, _store = _adapter(_registry(active=0, last_focused=1))

    assert adapter.tabs.query({"currentWindow": True, "active": True}).value == [{"id": 3}]
    assert adapter.tabs.query({"currentWindow": True}).value == [{"id": 1}, {"id": 2}, {"id": 3}]


def test_active_tabs_across_all_windows() -> None:
    adapter, _store = _adapter(_registry())

    assert adapter.tabs.query({"active": True}).value == [{"id": 3}, {"id": 10}]


@pytest.mark.parametrize("query", [{}, {"active": False}, {"active": "yes"}, {"currentWindow": False}])
def test_all_tabs_in_window_then_tab_order(query: dict) -> None:
    adapter, store = _adapter(_registry())

    res = adapter.tabs.query(query)
    assert res.value == [{"id": 1}, {"id": 2}, {"id": 3}, {"id": 10}, {"id": 11}]
    assert "logs" not in store


def test_window_without_active_tab_is_skipped() -> None:
    from compat_servers.chrome_shim.windows import StaticTab, StaticWindow, StaticWindowRegistry

    registry = StaticWindowRegistry(
        [StaticWindow(tabs=[], active_index=None), StaticWindow(tabs=[StaticTab("t")], active_index=0)]
    )
    adapter, _store = _adapter(registry)

    assert adapter.tabs.query({"active": True}).value == [{"id": "t"}]


def test_malformed_query_reports_and_returns_empty() -> None:
    from compat_servers.chrome_shim.result import UNDEFINED

    adapter, store = _adapter(_registry())

    for raw in (UNDEFINED, None, "active", 3):
        res = adapter.tabs.query(raw)
        assert res.ok
        assert res.value == []
    assert len(store["logs"]) == 4


def test_list_query_matches_every_tab() -> None:
    adapter, store = _adapter(_registry())

    for raw in ([], [True]):
        assert adapter.tabs.query(raw).value == [{"id": 1}, {"id": 2}, {"id": 3}, {"id": 10}, {"id": 11}]
    assert "logs" not in store


def test_no_current_window_is_an_error() -> None:
    adapter, _store = _adapter(_registry(active=None, last_focused=None))

    res = adapter.tabs.query({"currentWindow": True})
    assert res.legacy() == -1
    assert res.error_message == "No current window"
    assert isinstance(adapter.runtime.last_error, LookupError)


def test_host_failure_becomes_error_result() -> None:
    from compat_servers.chrome_shim.windows import StaticWindowRegistry

    class Exploding(StaticWindowRegistry):
        def browser_windows(self):  # noqa: ANN202
            raise RuntimeError("window list unavailable")

    adapter, _store = _adapter(Exploding())

    res = adapter.tabs.query({})
    assert not res.ok
    assert res.error_message == "window list unavailable"


def test_send_message_contract_points_fail_explicitly() -> None:
    adapter, _store = _adapter(_registry())

    res_tabs = adapter.tabs.send_message(1, {"hello": True})
    assert res_tabs.legacy() == -1
    assert isinstance(res_tabs.error, NotImplementedError)
    assert res_tabs.error_message == "tabs.sendMessage is not implemented"

    res_rt = adapter.runtime.send_message({"hello": True})
    assert res_rt.error_message == "runtime.sendMessage is not implemented"


def test_resolve_current_window_helpers() -> None:
    from compat_servers.chrome_shim.windows import active_tabs, all_tabs, make_tab_records, resolve_current_window

    registry = _registry(active=None, last_focused=0)
    window = resolve_current_window(registry)
    assert window is registry.windows[0]
    assert [t.id for t in active_tabs([window])] == [3]
    assert [r.to_dict() for r in make_tab_records(all_tabs(registry.browser_windows()))][-1] == {"id": 11}
