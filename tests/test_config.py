"""Test configuration loading and building strategies from it."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from realclientip.configs import config as config_module
from realclientip.configs.config import AppConfig, get_app_config
from realclientip.configs.system import StrategyConfig
from realclientip.core import (
    ChainStrategy,
    RemoteAddrStrategy,
    RightmostTrustedCountStrategy,
    RightmostTrustedRangeStrategy,
    SingleIPHeaderStrategy,
    StrategyConfigError,
)
from realclientip.registry import StrategyRegistry, build_strategy


class TestConfigSources:
    """Test configuration loading from multiple sources."""

    def test_defaults(self):
        config = AppConfig()

        assert config.strategy.type == "remote_addr"
        assert config.middleware.reject_on_failure is False
        assert config.middleware.exempt_paths == ["/health", "/metrics"]
        assert config.logging.level == "INFO"

    def test_env_vars(self):
        env_vars = {
            "REALCLIENTIP_STRATEGY__TYPE": "rightmost_trusted_count",
            "REALCLIENTIP_STRATEGY__HEADER": "X-Forwarded-For",
            "REALCLIENTIP_STRATEGY__TRUSTED_COUNT": "2",
            "REALCLIENTIP_MIDDLEWARE__REJECT_ON_FAILURE": "true",
        }

        with patch.dict(os.environ, env_vars, clear=False):
            config = AppConfig()

            assert config.strategy.type == "rightmost_trusted_count"
            assert config.strategy.header == "X-Forwarded-For"
            assert config.strategy.trusted_count == 2
            assert config.middleware.reject_on_failure is True

    def test_env_var_list_as_json(self):
        env_vars = {
            "REALCLIENTIP_STRATEGY__TYPE": "rightmost_trusted_range",
            "REALCLIENTIP_STRATEGY__HEADER": "X-Forwarded-For",
            "REALCLIENTIP_STRATEGY__TRUSTED_RANGES": '["10.0.0.0/8", "3.3.3.3"]',
        }

        with patch.dict(os.environ, env_vars, clear=False):
            config = get_app_config()

            assert config.strategy.trusted_ranges == ["10.0.0.0/8", "3.3.3.3"]

    def test_init_kwargs_win_over_env(self):
        with patch.dict(
            os.environ, {"REALCLIENTIP_STRATEGY__TYPE": "chain"}, clear=False
        ):
            config = AppConfig(strategy=StrategyConfig(type="remote_addr"))

            assert config.strategy.type == "remote_addr"

    def test_override_yaml(self, tmp_path: Path):
        override = tmp_path / "override.yaml"
        override.write_text(
            "strategy:\n"
            "  type: chain\n"
            "  strategies:\n"
            "    - type: single_ip_header\n"
            "      header: CF-Connecting-IP\n"
            "    - type: remote_addr\n"
            "logging:\n"
            "  json_output: false\n"
        )

        with patch.object(config_module, "OVERRIDE_CONFIG_FILE", override):
            config = AppConfig()

        assert config.strategy.type == "chain"
        assert [s.type for s in config.strategy.strategies] == [
            "single_ip_header",
            "remote_addr",
        ]
        assert config.strategy.strategies[0].header == "CF-Connecting-IP"
        assert config.logging.json_output is False

    def test_override_yaml_beats_env(self, tmp_path: Path):
        override = tmp_path / "override.yaml"
        override.write_text("middleware:\n  reject_on_failure: true\n")

        with patch.object(config_module, "OVERRIDE_CONFIG_FILE", override), patch.dict(
            os.environ,
            {"REALCLIENTIP_MIDDLEWARE__REJECT_ON_FAILURE": "false"},
            clear=False,
        ):
            config = AppConfig()

        assert config.middleware.reject_on_failure is True

    def test_missing_override_file_is_ignored(self, tmp_path: Path):
        with patch.object(
            config_module, "OVERRIDE_CONFIG_FILE", tmp_path / "missing.yaml"
        ):
            config = AppConfig()

        assert config.strategy.type == "remote_addr"

    def test_unknown_type_rejected(self):
        with pytest.raises(ValueError):
            StrategyConfig(type="leftmost_anything")


# =========================================================================
# StrategyRegistry
# =========================================================================


class TestStrategyRegistry:
    def test_build_each_type(self):
        configs = {
            "remote_addr": StrategyConfig(type="remote_addr"),
            "single_ip_header": StrategyConfig(
                type="single_ip_header", header="X-Real-IP"
            ),
            "leftmost_non_private": StrategyConfig(
                type="leftmost_non_private", header="X-Forwarded-For"
            ),
            "rightmost_non_private": StrategyConfig(
                type="rightmost_non_private", header="Forwarded"
            ),
            "rightmost_trusted_count": StrategyConfig(
                type="rightmost_trusted_count",
                header="X-Forwarded-For",
                trusted_count=1,
            ),
            "rightmost_trusted_range": StrategyConfig(
                type="rightmost_trusted_range",
                header="X-Forwarded-For",
                trusted_ranges=["10.0.0.0/8"],
            ),
        }

        for name, config in configs.items():
            assert build_strategy(config).name == name

    def test_trusted_count(self):
        strategy = build_strategy(
            StrategyConfig(
                type="rightmost_trusted_count",
                header="x-forwarded-for",
                trusted_count=2,
            )
        )

        assert isinstance(strategy, RightmostTrustedCountStrategy)
        assert strategy.trusted_count == 2
        assert strategy.header_name == "X-Forwarded-For"

    def test_include_cloudflare(self):
        strategy = build_strategy(
            StrategyConfig(
                type="rightmost_trusted_range",
                header="X-Forwarded-For",
                trusted_ranges=["10.0.0.0/8"],
                include_cloudflare=True,
            )
        )

        assert isinstance(strategy, RightmostTrustedRangeStrategy)
        headers = {"X-Forwarded-For": "1.1.1.1, 4.4.4.4, 2400:cb00::1, 10.0.0.1"}
        assert strategy.client_ip(headers, "") == "4.4.4.4"

    def test_chain(self):
        strategy = build_strategy(
            StrategyConfig(
                type="chain",
                strategies=[
                    StrategyConfig(type="single_ip_header", header="CF-Connecting-IP"),
                    StrategyConfig(type="remote_addr"),
                ],
            )
        )

        assert isinstance(strategy, ChainStrategy)
        assert isinstance(strategy.strategies[0], SingleIPHeaderStrategy)
        assert isinstance(strategy.strategies[1], RemoteAddrStrategy)
        assert strategy.client_ip({}, "192.168.1.2:8888") == "192.168.1.2"

    def test_empty_chain_rejected(self):
        with pytest.raises(StrategyConfigError, match="at least one"):
            build_strategy(StrategyConfig(type="chain"))

    def test_invalid_settings_raise(self):
        bad = (
            StrategyConfig(type="single_ip_header"),
            StrategyConfig(type="single_ip_header", header="Forwarded"),
            StrategyConfig(type="rightmost_non_private", header="X-Real-IP"),
            StrategyConfig(type="rightmost_trusted_count", header="Forwarded"),
            StrategyConfig(
                type="rightmost_trusted_range",
                header="Forwarded",
                trusted_ranges=["fe80::1%eth0"],
            ),
            StrategyConfig(
                type="chain",
                strategies=[StrategyConfig(type="leftmost_non_private")],
            ),
        )

        for config in bad:
            with pytest.raises(StrategyConfigError):
                build_strategy(config)

    def test_unknown_type(self):
        config = StrategyConfig.model_construct(type="bogus")

        with pytest.raises(StrategyConfigError, match="unknown strategy type"):
            StrategyRegistry().build(config)
