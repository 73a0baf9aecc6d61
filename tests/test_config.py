"""Tests for simulation constants and YAML config loading."""

from dataclasses import FrozenInstanceError

import pytest

from brunelnet.simulation.config import BrunelConfig, load_config


class TestDefaults:
    def test_reference_values(self):
        c = BrunelConfig()
        assert c.dt == 0.1
        assert c.steps_per_ms == 10
        assert c.population_size == 12500
        assert (c.n_excitatory, c.n_inhibitory) == (10000, 2500)
        assert (c.c_excitatory, c.c_inhibitory) == (1000, 250)
        assert c.delay_steps == 15
        assert c.refractory_steps == 20

    def test_derived_quantities(self):
        c = BrunelConfig()
        assert c.resistance == pytest.approx(20.0)
        assert c.j_inhibitory == pytest.approx(-0.5)
        assert c.delay_ms == pytest.approx(1.5)
        assert c.refractory_ms == pytest.approx(2.0)
        assert c.nu_thr == pytest.approx(0.01)
        # V_EXT = 2 * V_THRESHOLD / (C_E * J * TAU)
        assert c.nu_ext == pytest.approx(2 * 20.0 / (1000 * 0.1 * 20.0))

    def test_time_conversion(self):
        c = BrunelConfig()
        assert c.to_steps(1.5) == 15
        assert c.to_steps(400.0) == 4000
        assert c.to_steps(0.3) == 3
        assert c.to_ms(4000) == pytest.approx(400.0)

    def test_half_steps_round_up(self):
        c = BrunelConfig()
        assert c.to_steps(0.25) == 3
        assert c.to_steps(1.25) == 13
        assert c.to_steps(0.75) == 8
        assert c.to_steps(0.24) == 2

    def test_frozen(self):
        c = BrunelConfig()
        with pytest.raises(FrozenInstanceError):
            c.delay_steps = 3

    def test_to_dict_round_trip(self):
        c = BrunelConfig(g=4.0)
        assert BrunelConfig(**c.to_dict()) == c


class TestValidation:
    def test_zero_delay(self):
        with pytest.raises(ValueError, match="delay_steps"):
            BrunelConfig(delay_steps=0)

    def test_population_mismatch(self):
        with pytest.raises(ValueError, match="population_size"):
            BrunelConfig(population_size=100)

    def test_negative_refractory(self):
        with pytest.raises(ValueError, match="refractory_steps"):
            BrunelConfig(refractory_steps=-1)

    def test_non_integer_count(self):
        with pytest.raises(ValueError, match="c_excitatory"):
            BrunelConfig(c_excitatory=10.5)

    def test_inconsistent_converter(self):
        with pytest.raises(ValueError, match="steps_per_ms"):
            BrunelConfig(dt=0.2)

    def test_replace_revalidates(self):
        c = BrunelConfig()
        assert c.replace(g=4.0).g == 4.0
        with pytest.raises(ValueError):
            c.replace(n_excitatory=1)


class TestScaled:
    def test_sizes(self):
        c = BrunelConfig.scaled(1000)
        assert c.population_size == 1250
        assert (c.n_excitatory, c.n_inhibitory) == (1000, 250)
        assert (c.c_excitatory, c.c_inhibitory) == (100, 25)

    def test_same_drive(self):
        ref = BrunelConfig()
        c = BrunelConfig.scaled(1000)
        assert c.j_excitatory == pytest.approx(1.0)
        assert c.c_excitatory * c.j_excitatory == pytest.approx(
            ref.c_excitatory * ref.j_excitatory)
        assert c.nu_ext == pytest.approx(ref.nu_ext)

    def test_overrides(self):
        c = BrunelConfig.scaled(400, g=6.0)
        assert c.g == 6.0
        assert c.population_size == 500


class TestLoadConfig:
    def test_partial_file(self, tmp_path):
        path = tmp_path / "small.yaml"
        path.write_text(
            "population_size: 100\n"
            "n_excitatory: 80\n"
            "n_inhibitory: 20\n"
            "c_excitatory: 8\n"
            "c_inhibitory: 2\n"
            "g: 4.5\n"
        )
        c = load_config(path)
        assert c.population_size == 100
        assert c.g == 4.5
        assert c.delay_steps == 15

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path) == BrunelConfig()

    def test_unknown_key(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("tau_syn: 0.5\n")
        with pytest.raises(ValueError, match="tau_syn"):
            load_config(path)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ValueError, match="mapping"):
            load_config(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_invalid_values_rejected(self, tmp_path):
        path = tmp_path / "delay.yaml"
        path.write_text("delay_steps: 0\n")
        with pytest.raises(ValueError):
            load_config(path)
