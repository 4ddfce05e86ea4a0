"""Tests for the Product model."""

from dataclasses import FrozenInstanceError
from unittest.mock import MagicMock, patch

import pytest

from product_selector.backends.base import BackendError, PackageBackend
from product_selector.core.language import set_language
from product_selector.models.product import Product, ResolvableStatus


BASE_ATTRS = {
    "name": "openSUSE",
    "version": "20160405",
    "arch": "x86_64",
    "category": "addon",
    "status": "installed",
    "vendor": "openSUSE",
}


@pytest.fixture
def backend():
    return MagicMock(spec=PackageBackend)


@pytest.fixture
def product(backend):
    return Product.from_dict(BASE_ATTRS, backend=backend)


# ═══════════════════════════════════════════
# Construction
# ═══════════════════════════════════════════


class TestConstruction:
    def test_from_dict(self, product):
        assert product.name == "openSUSE"
        assert product.version == "20160405"
        assert product.arch == "x86_64"
        assert product.category == "addon"
        assert product.status == "installed"
        assert product.display_name is None

    def test_unknown_keys_ignored(self):
        product = Product.from_dict({"name": "SLES", "order": 100, "register_target": "sle-15"})
        assert product.name == "SLES"
        assert product.short_name is None

    def test_status_enum_stored_as_value(self):
        product = Product.from_dict({"name": "SLES", "status": ResolvableStatus.SELECTED})
        assert product.status == "selected"

    def test_to_dict_skips_collaborators(self, product):
        d = product.to_dict()
        assert d["name"] == "openSUSE"
        assert d["vendor"] == "openSUSE"
        assert "backend" not in d
        assert "language" not in d

    @pytest.mark.parametrize("attr", ["name", "status", "display_name", "backend"])
    def test_attributes_cannot_be_reassigned(self, product, attr):
        with pytest.raises(FrozenInstanceError):
            setattr(product, attr, "SLED")
        assert product.name == "openSUSE"


# ═══════════════════════════════════════════
# Equality
# ═══════════════════════════════════════════


class TestEquality:
    def test_equal_when_name_arch_version_vendor_match(self, product):
        other = Product.from_dict(BASE_ATTRS)
        assert (product == other) is True

    def test_other_attributes_ignored(self, product):
        other = Product.from_dict(
            {**BASE_ATTRS, "category": "base", "status": "none", "display_name": "openSUSE Leap"}
        )
        assert (product == other) is True

    @pytest.mark.parametrize(
        "attr,value",
        [("name", "other"), ("version", "20160409"), ("arch", "i586"), ("vendor", "SUSE")],
    )
    def test_not_equal_when_attribute_differs(self, product, attr, value):
        other = Product.from_dict({**BASE_ATTRS, attr: value})
        assert (product == other) is False

    def test_deduplicated_in_sets(self, product):
        other = Product.from_dict({**BASE_ATTRS, "status": "selected"})
        assert len({product, other}) == 1

    def test_not_equal_to_other_types(self, product):
        assert product != BASE_ATTRS


# ═══════════════════════════════════════════
# Label
# ═══════════════════════════════════════════


class TestLabel:
    def test_display_name(self):
        product = Product(name="NAME", display_name="DISPLAY", short_name="SHORT")
        assert product.label() == "DISPLAY"

    def test_short_name_without_display_name(self):
        product = Product(name="NAME", short_name="SHORT")
        assert product.label() == "SHORT"

    def test_name_as_fallback(self):
        product = Product(name="NAME")
        assert product.label() == "NAME"


# ═══════════════════════════════════════════
# Selection
# ═══════════════════════════════════════════


class TestSelected:
    def _report(self, backend, product, status):
        backend.resolvable_properties.return_value = [{"name": product.name, "status": status}]

    def test_selected(self, backend, product):
        self._report(backend, product, "selected")
        assert product.selected() is True
        backend.resolvable_properties.assert_called_once_with("openSUSE", "product", "")

    def test_not_selected(self, backend, product):
        self._report(backend, product, "none")
        assert product.selected() is False

    def test_installed_is_not_selected(self, backend, product):
        self._report(backend, product, "installed")
        assert product.selected() is False

    def test_not_found(self, backend, product):
        backend.resolvable_properties.return_value = []
        assert product.selected() is False

    def test_malformed_records_ignored(self, backend, product):
        backend.resolvable_properties.return_value = ["openSUSE", None, {"name": "openSUSE", "status": "selected"}]
        assert product.selected() is True

    def test_only_malformed_records(self, backend, product):
        backend.resolvable_properties.return_value = ["selected"]
        assert product.selected() is False

    def test_enum_status(self, backend, product):
        self._report(backend, product, ResolvableStatus.SELECTED)
        assert product.selected() is True

    def test_installed(self, backend, product):
        self._report(backend, product, "installed")
        assert product.installed() is True


class TestSelectRestore:
    def test_select(self, backend, product):
        assert product.select() is None
        backend.resolvable_install.assert_called_once_with("openSUSE", "product", "")

    def test_restore(self, backend, product):
        assert product.restore() is None
        backend.resolvable_neutral.assert_called_once_with("openSUSE", "product", True)

    def test_select_does_not_change_local_status(self, backend, product):
        product.select()
        assert product.status == "installed"

    def test_without_backend(self):
        with pytest.raises(BackendError):
            Product(name="orphan").select()


class TestSelectedBase:
    def test_returns_first_selected(self):
        not_selected = MagicMock(spec=Product)
        not_selected.selected.return_value = False
        selected = MagicMock(spec=Product)
        selected.selected.return_value = True

        assert Product.selected_base([not_selected, selected]) is selected

    def test_stops_at_first_match(self):
        first = MagicMock(spec=Product)
        first.selected.return_value = True
        second = MagicMock(spec=Product)

        assert Product.selected_base([first, second]) is first
        second.selected.assert_not_called()

    def test_none_selected(self):
        not_selected = MagicMock(spec=Product)
        not_selected.selected.return_value = False
        assert Product.selected_base([not_selected]) is None
        assert Product.selected_base([]) is None


# ═══════════════════════════════════════════
# License
# ═══════════════════════════════════════════


class TestLicense:
    @pytest.mark.parametrize("text", ["license content", "", None])
    def test_returns_backend_value(self, backend, product, text):
        backend.license_to_confirm.return_value = text
        assert product.license("en_US") == text
        backend.license_to_confirm.assert_called_once_with("openSUSE", "en_US")

    def test_uses_language_accessor(self, backend):
        product = Product.from_dict(BASE_ATTRS, backend=backend, language=lambda: "de_DE")
        product.license()
        backend.license_to_confirm.assert_called_once_with("openSUSE", "de_DE")

    def test_uses_process_language(self, backend, product):
        set_language("cs_CZ")
        try:
            product.license()
        finally:
            set_language(None)
        backend.license_to_confirm.assert_called_once_with("openSUSE", "cs_CZ")


class TestHasLicense:
    @pytest.mark.parametrize("text,expected", [("license content", True), ("", False), (None, False)])
    def test_delegates_to_license(self, backend, product, text, expected):
        with patch.object(Product, "license", return_value=text) as license:
            assert product.has_license() is expected
        license.assert_called_once_with()
        backend.license_to_confirm.assert_not_called()


class TestLicenseConfirmation:
    @pytest.mark.parametrize("needed", [True, False])
    def test_confirmation_required(self, backend, product, needed):
        backend.need_to_accept_license.return_value = needed
        assert product.license_confirmation_required() is needed
        backend.need_to_accept_license.assert_called_once_with("openSUSE")

    def test_confirm(self, backend, product):
        product.confirm_license(True)
        backend.mark_license_confirmed.assert_called_once_with("openSUSE")
        backend.mark_license_not_confirmed.assert_not_called()

    def test_unconfirm(self, backend, product):
        product.confirm_license(False)
        backend.mark_license_not_confirmed.assert_called_once_with("openSUSE")
        backend.mark_license_confirmed.assert_not_called()

    @pytest.mark.parametrize("confirmed", [True, False])
    def test_confirmed(self, backend, product, confirmed):
        backend.has_license_confirmed.return_value = confirmed
        assert product.license_confirmed() is confirmed
        backend.has_license_confirmed.assert_called_once_with("openSUSE")
