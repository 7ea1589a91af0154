"""Tests for prowl.settings — service-prefix list and its XML file."""

from pathlib import Path

from prowl.settings import ServicePrefixSettings, clean_prefixes


class TestCleanPrefixes:
    def test_blank_entries_dropped(self) -> None:
        assert clean_prefixes(["user", "", "  ", " order "]) == ["user", "order"]

    def test_order_kept(self) -> None:
        assert clean_prefixes(["b", "a"]) == ["b", "a"]

    def test_slashes_stripped(self) -> None:
        assert clean_prefixes(["/user/", " /order ", "/", "api/v1"]) == ["user", "order", "api/v1"]


class TestServicePrefixSettings:
    def test_in_memory_default_empty(self) -> None:
        assert ServicePrefixSettings().get_service_prefixes() == []

    def test_set_filters_blanks(self) -> None:
        settings = ServicePrefixSettings()
        settings.set_service_prefixes(["user", "", "order"])

        assert settings.get_service_prefixes() == ["user", "order"]

    def test_get_returns_copy(self) -> None:
        settings = ServicePrefixSettings(prefixes=["user"])
        settings.get_service_prefixes().append("order")

        assert settings.get_service_prefixes() == ["user"]

    def test_persisted_across_instances(self, tmp_path: Path) -> None:
        path = tmp_path / ".prowl" / "settings.xml"
        ServicePrefixSettings(path).set_service_prefixes(["user", "order"])

        assert path.is_file()
        assert ServicePrefixSettings(path).get_service_prefixes() == ["user", "order"]

    def test_clearing_persists(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.xml"
        ServicePrefixSettings(path).set_service_prefixes(["user"])
        ServicePrefixSettings(path).set_service_prefixes([])

        assert ServicePrefixSettings(path).get_service_prefixes() == []

    def test_unreadable_file_ignored(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.xml"
        path.write_text("<settings><servicePrefixes>")

        assert ServicePrefixSettings(path).get_service_prefixes() == []
