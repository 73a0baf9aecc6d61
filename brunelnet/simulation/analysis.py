"""Post-simulation analysis tools.

Functions for firing rates, spike rasters, population activity and
connectivity statistics, computed from SimulationResult and Network
objects.
"""

import numpy as np
import pandas as pd


def firing_rates(result, time_window=None):
    """Compute per-neuron firing rates.

    Parameters
    ----------
    result : SimulationResult
        Simulation output.
    time_window : tuple of float, optional
        (start_ms, end_ms) to restrict rate computation.

    Returns
    -------
    np.ndarray
        Firing rate per neuron (Hz).
    """
    if time_window is not None:
        t0, t1 = time_window
        duration_s = (t1 - t0) / 1000.0
        rates = np.array([
            np.sum((st >= t0) & (st < t1)) / duration_s
            for st in result.spike_times
        ])
    else:
        rates = result.neuron_rates()

    return rates


def spike_raster(result, neuron_indices=None, time_window=None):
    """Extract spike raster data.

    Parameters
    ----------
    result : SimulationResult
        Simulation output.
    neuron_indices : array-like, optional
        Subset of neurons. If None, all neurons.
    time_window : tuple of float, optional
        (start_ms, end_ms) to restrict.

    Returns
    -------
    times : np.ndarray
        Spike times (ms).
    neurons : np.ndarray
        Neuron indices for each spike.
    """
    if neuron_indices is None:
        neuron_indices = range(result.n_neurons)

    times = []
    neurons = []
    for i in neuron_indices:
        st = result.spike_times[i]
        if time_window is not None:
            t0, t1 = time_window
            st = st[(st >= t0) & (st < t1)]
        times.append(st)
        neurons.append(np.full(len(st), i))

    if times:
        return np.concatenate(times), np.concatenate(neurons)
    return np.array([]), np.array([])


def population_rate(result, bin_ms=1.0):
    """Population firing rate in time bins.

    Parameters
    ----------
    result : SimulationResult
        Simulation output.
    bin_ms : float
        Bin width (ms).

    Returns
    -------
    times : np.ndarray
        Left edge of each bin (ms).
    rates : np.ndarray
        Mean rate per neuron in each bin (Hz).
    """
    n_bins = max(1, int(np.ceil(result.duration / bin_ms)))
    edges = np.arange(n_bins + 1) * bin_ms
    all_spikes, _ = spike_raster(result)
    counts, _ = np.histogram(all_spikes, bins=edges)
    rates = counts / (max(result.n_neurons, 1) * bin_ms / 1000.0)
    return edges[:-1], rates


def spike_table(result):
    """All spikes as a table.

    Returns
    -------
    pd.DataFrame
        One row per spike: neuron, time_ms, population ("E" or "I"),
        sorted by time then neuron.
    """
    times, neurons = spike_raster(result)
    neurons = neurons.astype(int)
    df = pd.DataFrame({
        "neuron": neurons,
        "time_ms": times.astype(float),
        "population": np.where(neurons < result.n_excitatory, "E", "I"),
    })
    return df.sort_values(["time_ms", "neuron"], kind="stable").reset_index(drop=True)


def connectivity_table(network):
    """Per-neuron degree statistics.

    Parameters
    ----------
    network : Network
        A constructed network.

    Returns
    -------
    pd.DataFrame
        Indexed by neuron: population, amplitude (mV), in_degree,
        out_degree.
    """
    n = len(network)
    neurons = network.neurons
    out_degree = np.array([neuron.n_connections for neuron in neurons])
    if out_degree.sum() > 0:
        targets = np.concatenate([neuron.connections for neuron in neurons])
        in_degree = np.bincount(targets, minlength=n)
    else:
        in_degree = np.zeros(n, dtype=np.int64)

    return pd.DataFrame({
        "population": ["E" if neuron.excitatory else "I" for neuron in neurons],
        "amplitude": [neuron.amplitude for neuron in neurons],
        "in_degree": in_degree,
        "out_degree": out_degree,
    }, index=pd.RangeIndex(n, name="neuron"))


def ei_input_balance(network):
    """Summed excitatory and inhibitory input weight per neuron.

    Returns
    -------
    pd.DataFrame
        Per-neuron: exc_input (mV), inh_input (mV, positive), net_input,
        ei_ratio.
    """
    n = len(network)
    exc_input = np.zeros(n)
    inh_input = np.zeros(n)
    for neuron in network.neurons:
        if neuron.n_connections == 0:
            continue
        if neuron.amplitude >= 0:
            np.add.at(exc_input, neuron.connections, neuron.amplitude)
        else:
            np.add.at(inh_input, neuron.connections, -neuron.amplitude)

    with np.errstate(divide="ignore", invalid="ignore"):
        ei_ratio = np.where(inh_input > 0, exc_input / inh_input, np.inf)

    return pd.DataFrame({
        "exc_input": exc_input,
        "inh_input": inh_input,
        "net_input": exc_input - inh_input,
        "ei_ratio": ei_ratio,
    })
