"""Tests for TOML configuration loading."""

import pytest


class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults_without_file(self):
        from pileup_caller.config import load_config
        from pileup_caller.merge import ChromosomeOrder, UnmatchedPileupPolicy
        from pileup_caller.models import TransitionsMode

        settings = load_config()

        assert settings.mode is None
        assert settings.min_depth == 1
        assert settings.transitions_mode == TransitionsMode.ALL_SITES
        assert settings.chrom_order == ChromosomeOrder.LEXICOGRAPHIC
        assert settings.unmatched_pileup == UnmatchedPileupPolicy.SKIP
        assert settings.sample_pop_name == "Unknown"

    def test_load_from_toml(self, tmp_path):
        from pileup_caller.config import load_config
        from pileup_caller.merge import ChromosomeOrder
        from pileup_caller.models import CallingMode, TransitionsMode

        config_path = tmp_path / "caller.toml"
        config_path.write_text(
            "[pileup_caller]\n"
            'mode = "majority"\n'
            "min_depth = 3\n"
            "downsample = true\n"
            "seed = 42\n"
            'transitions_mode = "transitions-missing"\n'
            'chrom_order = "natural"\n'
            'sample_pop_name = "Yamnaya"\n'
        )

        settings = load_config(config_path)

        assert settings.mode == CallingMode.MAJORITY
        assert settings.min_depth == 3
        assert settings.downsample is True
        assert settings.seed == 42
        assert settings.transitions_mode == TransitionsMode.TRANSITIONS_MISSING
        assert settings.chrom_order == ChromosomeOrder.NATURAL
        assert settings.sample_pop_name == "Yamnaya"
        assert settings.to_calling_config().downsample is True

    def test_overrides_take_precedence(self, tmp_path):
        from pileup_caller.config import load_config
        from pileup_caller.models import CallingMode

        config_path = tmp_path / "caller.toml"
        config_path.write_text('[pileup_caller]\nmode = "majority"\nmin_depth = 3\n')

        settings = load_config(config_path, {"mode": "random-diploid", "min_depth": None})

        assert settings.mode == CallingMode.RANDOM_DIPLOID
        assert settings.min_depth == 3

    def test_missing_file_raises(self, tmp_path):
        from pileup_caller.config import load_config

        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.toml")

    def test_unknown_keys_are_ignored(self, tmp_path, caplog):
        from pileup_caller.config import load_config

        config_path = tmp_path / "caller.toml"
        config_path.write_text('[pileup_caller]\nmode = "majority"\nbatch_size = 10\n')

        settings = load_config(config_path)

        assert settings.mode is not None
        assert "batch_size" in caplog.text

    def test_invalid_toml_raises(self, tmp_path):
        from pileup_caller.config import ConfigValidationError, load_config

        config_path = tmp_path / "caller.toml"
        config_path.write_text("[pileup_caller\nmode = ")

        with pytest.raises(ConfigValidationError, match="Invalid TOML"):
            load_config(config_path)

    def test_downsample_without_majority_fails_on_use(self):
        from pileup_caller.config import ConfigValidationError, load_config

        settings = load_config(overrides={"mode": "random-haploid", "downsample": True})

        with pytest.raises(ConfigValidationError, match="downsample"):
            settings.to_calling_config()


class TestValidateConfig:
    """Tests for configuration value validation."""

    @pytest.mark.parametrize(
        "config_dict,message",
        [
            ({"min_depth": -1}, "min_depth must be non-negative"),
            ({"min_depth": "3"}, "min_depth must be int"),
            ({"min_depth": True}, "min_depth must be int"),
            ({"seed": 1.5}, "seed must be int"),
            ({"downsample": "yes"}, "downsample must be bool"),
            ({"mode": "bayesian"}, "mode must be one of"),
            ({"transitions_mode": "none"}, "transitions_mode must be one of"),
            ({"chrom_order": "random"}, "chrom_order must be one of"),
            ({"unmatched_pileup": "warn"}, "unmatched_pileup must be one of"),
            ({"log_level": "LOUD"}, "log_level must be one of"),
            ({"sample_pop_name": "  "}, "sample_pop_name cannot be empty"),
        ],
    )
    def test_invalid_values_raise(self, config_dict, message):
        from pileup_caller.config import ConfigValidationError, validate_config

        with pytest.raises(ConfigValidationError, match=message):
            validate_config(config_dict)

    def test_valid_values_pass(self):
        from pileup_caller.config import validate_config

        validate_config(
            {
                "mode": "random_haploid",
                "min_depth": 0,
                "seed": None,
                "transitions_mode": "SKIP-TRANSITIONS",
                "log_level": "debug",
            }
        )

    def test_config_error_is_a_configuration_error(self):
        from pileup_caller.config import ConfigValidationError
        from pileup_caller.errors import ConfigurationError

        assert issubclass(ConfigValidationError, ConfigurationError)
