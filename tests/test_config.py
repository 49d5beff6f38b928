import pytest
from pydantic import ValidationError

from qrmenu.core.config import EnvironmentMode, Settings
from qrmenu.core.currency import format_price
from qrmenu.order_status import available_actions, customer_label, is_forward_transition, is_terminal
from qrmenu.models import OrderStatus


@pytest.mark.parametrize("price,expected", [(15000, "Rp 15.000"), (0, "Rp 0"), (1250000, "Rp 1.250.000"), (-5000, "-Rp 5.000")])
def test_format_price(price, expected):
    assert format_price(price, "Rp") == expected


def test_env_mode_is_case_insensitive():
    settings = Settings(env_mode="PRODUCTION", _env_file=None)
    assert settings.env_mode == EnvironmentMode.PRODUCTION
    assert settings.use_real_services


def test_invalid_env_mode():
    with pytest.raises(ValidationError):
        Settings(env_mode="qa", _env_file=None)


def test_invalid_image_backend():
    with pytest.raises(ValidationError):
        Settings(image_storage_backend="s3", _env_file=None)


def test_production_config_reports_missing_values():
    settings = Settings(env_mode="production", admin_email=None, admin_password=None, database_url="sqlite+aiosqlite://", _env_file=None)
    missing = settings.validate_production_config()
    assert "ADMIN_EMAIL" in missing
    assert "ADMIN_PASSWORD" in missing
    assert any(m.startswith("DATABASE_URL") for m in missing)


def test_development_config_needs_nothing():
    assert Settings(env_mode="development", _env_file=None).validate_production_config() == []


def test_public_media_url():
    settings = Settings(app_base_url="https://menu.parmato.id/", media_url_prefix="media/", _env_file=None)
    assert settings.public_media_url == "https://menu.parmato.id/media/menu-images"


@pytest.mark.parametrize(
    "status,actions",
    [
        (OrderStatus.PENDING, [OrderStatus.CONFIRMED, OrderStatus.CANCELLED]),
        (OrderStatus.CONFIRMED, [OrderStatus.COMPLETED]),
        (OrderStatus.PREPARING, [OrderStatus.COMPLETED]),
        (OrderStatus.COMPLETED, []),
        (OrderStatus.CANCELLED, []),
    ],
)
def test_available_actions(status, actions):
    assert available_actions(status) == actions
    assert is_terminal(status) == (actions == [])


def test_no_transition_leads_into_preparing_or_backwards():
    assert not any(is_forward_transition(s, OrderStatus.PREPARING) for s in OrderStatus)
    assert not is_forward_transition(OrderStatus.COMPLETED, OrderStatus.PENDING)


def test_every_status_has_a_customer_label():
    assert all(customer_label(s) != s.value for s in OrderStatus)
