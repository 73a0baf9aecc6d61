"""Brunel network: population, clock and delayed spike delivery.

The Network owns its neurons for their whole life and steps them in
lockstep. Each loop() integrates every neuron first and only then
delivers the spikes of that step into the targets' delay buffers, so no
spike can affect any integration within the step it was emitted.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from brunelnet.simulation.config import BrunelConfig
from brunelnet.simulation.connectivity import generate_random_connectivity
from brunelnet.simulation.neuron import Neuron
from brunelnet.utils import get_logger

LOG = get_logger("simulation.network")


@dataclass
class SimulationResult:
    """Spikes and traces collected from a Network.

    Attributes
    ----------
    spike_times : list of np.ndarray
        spike_times[i] holds the spike times (ms) of neuron i.
    v_trace : Optional[np.ndarray]
        Potential traces, shape (n_neurons, n_steps). Only with recording.
    dt : float
        Time step (ms).
    duration : float
        Simulated time (ms).
    n_neurons : int
        Population size.
    n_excitatory : int
        Number of excitatory neurons; they occupy indices [0, n_excitatory).
    """
    spike_times: list
    v_trace: Optional[np.ndarray] = None
    dt: float = 0.1
    duration: float = 0.0
    n_neurons: int = 0
    n_excitatory: int = 0

    @property
    def n_spikes(self):
        """Total number of spikes across all neurons."""
        return sum(len(st) for st in self.spike_times)

    def mean_spike_count(self):
        """Mean number of spikes per neuron."""
        return self.n_spikes / self.n_neurons if self.n_neurons > 0 else 0.0

    def mean_rate(self):
        """Mean firing rate across all neurons (Hz)."""
        duration_s = self.duration / 1000.0
        if self.n_neurons == 0 or duration_s == 0:
            return 0.0
        return self.n_spikes / (self.n_neurons * duration_s)

    def neuron_rates(self):
        """Per-neuron firing rates (Hz)."""
        duration_s = self.duration / 1000.0
        if duration_s == 0:
            return np.zeros(self.n_neurons)
        return np.array([len(st) / duration_s for st in self.spike_times])


class Network:
    """A population of LIF neurons stepped on a shared clock.

    Parameters
    ----------
    population_size : int
        Number of neurons, at least 1.
    record_potentials : bool
        Keep a full potential trace for every neuron.
    enable_default_current : bool
        Drive every neuron with external Poisson input at rate nu_ext
        through C_E external synapses of amplitude J.
    enable_connections : bool
        Deliver spikes along outgoing connections.
    enable_population_split : bool
        Neurons below config.n_excitatory are excitatory, the rest
        inhibitory. Otherwise every neuron is excitatory.
    enable_random_connectivity : bool
        Generate fixed in-degree random connectivity at construction.
        Requires enable_connections.
    config : BrunelConfig, optional
        Simulation constants. Defaults to the reference model.
    seed : int, optional
        Seed of the network random source. Defaults to config.seed.

    Notes
    -----
    The flags are positional in the order above. `enable_default_current`
    switches the external Poisson drive on; it is off by default, so a
    single neuron built as `Network(1, True)` integrates only the current
    given through `set_current`. An active population of 12500 neurons
    needs `Network(12500, False, True, True, True, True)`. Passing
    `enable_default_current=False` leaves the population silent unless
    currents are set by hand.
    """

    def __init__(self, population_size, record_potentials=False,
                 enable_default_current=False, enable_connections=True,
                 enable_population_split=False, enable_random_connectivity=False,
                 config=None, seed=None):
        if isinstance(population_size, bool) or not isinstance(population_size, (int, np.integer)):
            raise ValueError(f"population_size must be an integer, got {population_size!r}")
        if population_size < 1:
            raise ValueError(f"population_size must be at least 1, got {population_size}")
        if enable_random_connectivity and not enable_connections:
            raise ValueError("Random connectivity requires enable_connections=True")

        self.config = config if config is not None else BrunelConfig()
        self.record_potentials = record_potentials
        self.enable_default_current = enable_default_current
        self.enable_connections = enable_connections
        self.enable_population_split = enable_population_split
        self.seed = self.config.seed if seed is None else seed

        self._rng = np.random.RandomState(self.seed)
        self._step = 0

        n = int(population_size)
        if enable_population_split:
            self.n_excitatory = min(self.config.n_excitatory, n)
        else:
            self.n_excitatory = n

        self._neurons = [
            Neuron(i, self.config,
                   excitatory=i < self.n_excitatory,
                   record_potentials=record_potentials,
                   population_size=n)
            for i in range(n)
        ]

        # expected external spikes per neuron per step
        self._external_lambda = self.config.c_excitatory * self.config.nu_ext * self.config.dt

        self.n_edges = 0
        if enable_random_connectivity:
            self.n_edges = generate_random_connectivity(
                self._neurons, self.config, self._rng, n_excitatory=self.n_excitatory,
            )

        LOG.info("Network: %d neurons (%d E, %d I), connections=%s, "
                 "external drive=%s, recording=%s",
                 n, self.n_excitatory, n - self.n_excitatory,
                 enable_connections, enable_default_current, record_potentials)
        if enable_default_current:
            LOG.info("  nu_ext=%.4f kHz, %.3f external spikes/neuron/step",
                     self.config.nu_ext, self._external_lambda)

    def __len__(self):
        return len(self._neurons)

    def __repr__(self):
        return (f"Network({len(self._neurons)} neurons, step={self._step}, "
                f"{self.n_connections} connections)")

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    @property
    def step(self):
        """Index of the next step to be simulated."""
        return self._step

    @property
    def time_ms(self):
        return self.config.to_ms(self._step)

    @property
    def neurons(self):
        return tuple(self._neurons)

    @property
    def n_connections(self):
        return sum(neuron.n_connections for neuron in self._neurons)

    def _check_index(self, index):
        n = len(self._neurons)
        if isinstance(index, bool) or not isinstance(index, (int, np.integer)):
            raise IndexError(f"Neuron index must be an integer, got {index!r}")
        if not 0 <= index < n:
            raise IndexError(f"Neuron index {index} outside population [0, {n})")

    def get_neuron(self, index):
        """The neuron at `index`."""
        self._check_index(index)
        return self._neurons[index]

    def get_current(self, index, step):
        """Injected current scheduled for neuron `index` at `step`."""
        return self.get_neuron(index).current_at(step)

    def spike_counts(self):
        """Number of spikes per neuron so far."""
        return np.array([len(neuron.spike_times) for neuron in self._neurons])

    def summary(self):
        """Return a summary string."""
        n = len(self._neurons)
        counts = self.spike_counts()
        lines = [
            f"Network: {n:,} neurons ({self.n_excitatory:,} E, {n - self.n_excitatory:,} I), "
            f"{self.n_connections:,} connections",
            f"  step: {self._step} ({self.time_ms:.1f} ms)",
            f"  J_E={self.config.j_excitatory} mV, J_I={self.config.j_inhibitory} mV, "
            f"delay: {self.config.delay_steps} steps",
            f"  spikes: {int(counts.sum()):,} (mean {counts.mean():.2f} per neuron)",
        ]
        return "\n".join(lines)

    # ------------------------------------------------------------------
    # Stimulation
    # ------------------------------------------------------------------

    def set_current(self, amplitude, index, start_ms, stop_ms):
        """Inject `amplitude` into neuron `index` during [start_ms, stop_ms).

        Raises
        ------
        IndexError
            If `index` is outside the population.
        ValueError
            If the converted window is empty or starts before 0.
        """
        neuron = self.get_neuron(index)
        neuron.schedule_current(amplitude,
                                self.config.to_steps(start_ms),
                                self.config.to_steps(stop_ms))

    def _external_drive(self):
        if not self.enable_default_current:
            return None
        n_spikes = self._rng.poisson(self._external_lambda, len(self._neurons))
        return n_spikes * self.config.j_excitatory

    # ------------------------------------------------------------------
    # Stepping
    # ------------------------------------------------------------------

    def loop(self):
        """Simulate exactly one step."""
        step = self._step
        drive = self._external_drive()

        # 1. Integrate every neuron
        spiking = []
        for neuron in self._neurons:
            psp = neuron.consume_buffered_at(step)
            if drive is not None:
                psp += drive[neuron.index]
            if neuron.integrate_step(step, neuron.current_at(step), psp):
                spiking.append(neuron)

        # 2. Deliver this step's spikes
        if spiking and self.enable_connections:
            self._deliver(spiking, step + self.config.delay_steps)

        self._step += 1

    def _deliver(self, spiking, arrival):
        senders = [neuron for neuron in spiking if neuron.n_connections > 0]
        if not senders:
            return
        targets = np.concatenate([neuron.connections for neuron in senders])
        amplitudes = np.concatenate([
            np.full(neuron.n_connections, neuron.amplitude) for neuron in senders
        ])
        totals = np.bincount(targets, weights=amplitudes, minlength=len(self._neurons))
        # sum per target first; a target receives one write per step
        hit = np.zeros(len(self._neurons), dtype=bool)
        hit[targets] = True
        for index in np.flatnonzero(hit):
            self._neurons[index].receive_at(arrival, float(totals[index]))

    def run(self, n_steps):
        """Simulate `n_steps` steps.

        Returns
        -------
        tuple of Neuron
            The network's neurons, for inspection. The network keeps them.
        """
        if n_steps < 0:
            raise ValueError(f"n_steps must be non-negative, got {n_steps}")

        LOG.info("Running %d steps (%.1f ms) from step %d",
                 n_steps, self.config.to_ms(n_steps), self._step)
        for _ in range(n_steps):
            self.loop()

        counts = self.spike_counts()
        LOG.info("Run complete: step %d, %d spikes, mean %.2f per neuron",
                 self._step, int(counts.sum()), counts.mean())
        return self.neurons

    def run_ms(self, duration_ms):
        """Simulate `duration_ms` milliseconds."""
        return self.run(self.config.to_steps(duration_ms))

    def result(self):
        """Collect spikes and traces so far into a SimulationResult."""
        spike_times = [
            np.array(neuron.spike_times, dtype=np.float64) / self.config.steps_per_ms
            for neuron in self._neurons
        ]
        v_trace = None
        if self.record_potentials:
            v_trace = np.array([neuron.potentials for neuron in self._neurons],
                               dtype=np.float64).reshape(len(self._neurons), self._step)
        return SimulationResult(
            spike_times=spike_times,
            v_trace=v_trace,
            dt=self.config.dt,
            duration=self.time_ms,
            n_neurons=len(self._neurons),
            n_excitatory=self.n_excitatory,
        )
