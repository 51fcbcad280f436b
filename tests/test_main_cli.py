import httpx

from main import _list_orders, _parse_args
from managepetro.config import Settings


def test_default_command_invokes_serve() -> None:
    args = _parse_args([])
    assert args.command == "serve"


def test_default_command_accepts_options_without_subcommand() -> None:
    args = _parse_args(["--host", "0.0.0.0", "--port", "8080"])
    assert args.command == "serve"
    assert args.host == "0.0.0.0"
    assert args.port == 8080


def test_config_option_precedes_default_command() -> None:
    args = _parse_args(["--config", "dashboard.yaml"])
    assert args.command == "serve"
    assert args.config == "dashboard.yaml"

    args = _parse_args(["--config=dashboard.yaml", "--port", "9000"])
    assert args.command == "serve"
    assert args.port == 9000


def test_orders_subcommand_available() -> None:
    args = _parse_args(["orders", "--page", "2"])
    assert args.command == "orders"
    assert args.page == 2

    assert _parse_args(["check-config"]).command == "check-config"


def test_orders_command_prints_a_page(monkeypatch, capsys) -> None:
    monkeypatch.setenv("MANAGEPETRO_CLI_EMAIL", "a@b.com")
    monkeypatch.setenv("MANAGEPETRO_CLI_PASSWORD", "x")
    monkeypatch.setattr(
        httpx,
        "post",
        lambda url, json=None, headers=None, timeout=None: httpx.Response(200, json={"token": "abc"}),
    )
    monkeypatch.setattr(
        httpx,
        "get",
        lambda url, params=None, headers=None, timeout=None: httpx.Response(
            200,
            json={
                "member": [
                    {
                        "id": 5,
                        "status": "delivered",
                        "fuelAmount": "40.50",
                        "deliveryAddress": "1 Main St",
                        "createdAt": "2024-05-01T10:00:00+00:00",
                    }
                ],
                "totalItems": 1,
            },
        ),
    )

    settings = Settings(api_base_url="https://api.example.com", session_secret="tests")
    assert _list_orders(settings, 1) == 0

    output = capsys.readouterr().out
    assert "1 order(s); page 1 of 1" in output
    assert "delivered" in output
    assert "2024-05-01" in output


def test_orders_command_requires_credentials(monkeypatch, capsys) -> None:
    monkeypatch.delenv("MANAGEPETRO_CLI_EMAIL", raising=False)
    monkeypatch.delenv("MANAGEPETRO_CLI_PASSWORD", raising=False)

    settings = Settings(api_base_url="https://api.example.com", session_secret="tests")
    assert _list_orders(settings, 1) == 1
    assert "MANAGEPETRO_CLI_EMAIL" in capsys.readouterr().out
