"""Tests for post-simulation analysis tools."""

import numpy as np
import pandas as pd
import pytest

from brunelnet.simulation.analysis import (
    firing_rates, spike_raster, population_rate, spike_table,
    connectivity_table, ei_input_balance,
)
from brunelnet.simulation.config import BrunelConfig
from brunelnet.simulation.network import Network


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def ei_network():
    """Three neurons: 0 and 1 excitatory, 2 inhibitory.

    0 -> 2, 1 -> 2, 2 -> 0 (twice). Neurons 0 and 2 are driven.
    """
    config = BrunelConfig(population_size=3, n_excitatory=2, n_inhibitory=1)
    net = Network(3, enable_population_split=True, config=config)
    net.get_neuron(0).add_connection(2)
    net.get_neuron(1).add_connection(2)
    net.get_neuron(2).add_connections([0, 0])
    net.set_current(1.1, 0, 0, 100)
    net.set_current(1.5, 2, 0, 100)
    return net


@pytest.fixture
def ei_result(ei_network):
    ei_network.run(1000)
    return ei_network.result()


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------

class TestRates:
    def test_firing_rates(self, ei_result):
        rates = firing_rates(ei_result)
        assert rates.shape == (3,)
        assert rates[1] == 0.0
        assert rates[0] > 0.0
        assert rates[2] > rates[0]

    def test_time_window(self, ei_result):
        rates = firing_rates(ei_result, time_window=(0.0, 10.0))
        assert np.all(rates == 0.0)

    def test_population_rate_conserves_spikes(self, ei_result):
        times, rates = population_rate(ei_result, bin_ms=5.0)
        assert len(times) == 20
        assert times[0] == 0.0
        n_spikes = rates.sum() * ei_result.n_neurons * 5.0 / 1000.0
        assert n_spikes == pytest.approx(ei_result.n_spikes)


class TestRaster:
    def test_raster(self, ei_result):
        times, neurons = spike_raster(ei_result)
        assert len(times) == ei_result.n_spikes
        assert set(neurons) <= {0, 2}

    def test_raster_subset(self, ei_result):
        times, neurons = spike_raster(ei_result, neuron_indices=[1])
        assert len(times) == 0

    def test_spike_table(self, ei_result):
        df = spike_table(ei_result)
        assert isinstance(df, pd.DataFrame)
        assert list(df.columns) == ["neuron", "time_ms", "population"]
        assert len(df) == ei_result.n_spikes
        assert np.all(np.diff(df["time_ms"].values) >= 0)
        assert set(df.loc[df["neuron"] == 2, "population"]) == {"I"}
        assert set(df.loc[df["neuron"] == 0, "population"]) == {"E"}


class TestConnectivity:
    def test_degrees(self, ei_network):
        table = connectivity_table(ei_network)
        assert list(table["out_degree"]) == [1, 1, 2]
        assert list(table["in_degree"]) == [2, 0, 2]
        assert list(table["population"]) == ["E", "E", "I"]
        assert table.loc[2, "amplitude"] == pytest.approx(-0.5)

    def test_unconnected(self):
        table = connectivity_table(Network(4))
        assert np.all(table["in_degree"] == 0)
        assert np.all(table["out_degree"] == 0)

    def test_ei_input_balance(self, ei_network):
        df = ei_input_balance(ei_network)
        assert df.loc[0, "exc_input"] == 0.0
        assert df.loc[0, "inh_input"] == pytest.approx(1.0)
        assert df.loc[2, "exc_input"] == pytest.approx(0.2)
        assert df.loc[2, "inh_input"] == 0.0
        assert df.loc[2, "ei_ratio"] == np.inf
        assert df.loc[0, "net_input"] == pytest.approx(-1.0)
