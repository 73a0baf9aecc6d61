"""Leaky integrate-and-fire point neuron.

Each Neuron carries its own membrane state, spike history, outgoing
connections and a sparse delay buffer of pending synaptic input. The
membrane is integrated with the exact exponential step

    V <- V_inf + (V - V_inf) * exp(-dt / tau_m) + psp,   V_inf = R * I

where I is the injected current and psp the summed synaptic amplitude
arriving this step (delta synapses: each spike moves V by J mV).
"""

import numpy as np

from brunelnet.simulation.config import BrunelConfig


class Neuron:
    """A single LIF unit of a Brunel network.

    Parameters
    ----------
    index : int
        Position in the owning population, fixed for life.
    config : BrunelConfig, optional
        Simulation constants. Defaults to the reference model.
    excitatory : bool
        Sub-population membership; sets the sign of outgoing amplitudes.
    record_potentials : bool
        Keep one potential entry per integrated step.
    population_size : int, optional
        Bound for connection targets. Unchecked when None.
    """

    def __init__(self, index, config=None, excitatory=True,
                 record_potentials=False, population_size=None):
        self.config = config if config is not None else BrunelConfig()
        self.index = index
        self.excitatory = excitatory
        self.population_size = population_size
        self.record_potentials = record_potentials

        self.potential = self.config.v_reset
        self.refractory_countdown = 0
        self._next_step = 0

        self._spikes = []
        self._trace = []
        self._targets = np.empty(0, dtype=np.int32)
        self._buffer = {}
        self._schedule = None

        self._decay = self.config.decay

    def __repr__(self):
        kind = "E" if self.excitatory else "I"
        state = "refractory" if self.is_refractory else "integrating"
        return (f"Neuron({self.index}, {kind}, V={self.potential:.3f} mV, "
                f"{state}, {len(self._spikes)} spikes)")

    # ------------------------------------------------------------------
    # Membrane dynamics
    # ------------------------------------------------------------------

    @property
    def is_refractory(self):
        return self.refractory_countdown > 0

    def integrate_step(self, step, current=0.0, psp=0.0):
        """Advance the membrane by one time step.

        Parameters
        ----------
        step : int
            Index of the step being integrated.
        current : float
            Injected current during this step (pA).
        psp : float
            Summed synaptic amplitude arriving this step (mV).

        Returns
        -------
        bool
            True if the neuron spiked at this step.
        """
        cfg = self.config
        spiked = False

        if self.is_refractory:
            # inputs are dropped while refractory
            self.refractory_countdown -= 1
            self.potential = cfg.v_reset
        else:
            v_inf = cfg.resistance * current
            self.potential = v_inf + (self.potential - v_inf) * self._decay + psp
            if self.potential >= cfg.v_threshold:
                spiked = True
                self._spikes.append(step)

        if self.record_potentials:
            self._trace.append(self.potential)

        if spiked:
            self.potential = cfg.v_reset
            self.refractory_countdown = cfg.refractory_steps

        self._next_step = step + 1
        return spiked

    # ------------------------------------------------------------------
    # Injected current
    # ------------------------------------------------------------------

    def schedule_current(self, amplitude, start_step, stop_step):
        """Inject `amplitude` during steps [start_step, stop_step).

        Replaces any previous schedule.

        Raises
        ------
        ValueError
            If start_step is negative or stop_step <= start_step.
        """
        if start_step < 0:
            raise ValueError(f"start_step must be non-negative, got {start_step}")
        if stop_step <= start_step:
            raise ValueError(
                f"Empty current schedule: stop_step {stop_step} <= start_step {start_step}"
            )
        self._schedule = (float(amplitude), int(start_step), int(stop_step))

    def clear_current(self):
        self._schedule = None

    def current_at(self, step):
        """Scheduled injected current at `step`."""
        if self._schedule is None:
            return 0.0
        amplitude, start, stop = self._schedule
        return amplitude if start <= step < stop else 0.0

    # ------------------------------------------------------------------
    # Delay buffer
    # ------------------------------------------------------------------

    def receive_at(self, step, amplitude):
        """Add `amplitude` to the input pending for `step`.

        Pending input lives in the window
        [next step, next step + config.delay_steps].

        Raises
        ------
        ValueError
            If `step` has already been integrated, or lies beyond the
            synaptic delay window.
        """
        if step < self._next_step:
            raise ValueError(
                f"Neuron {self.index}: cannot deliver to step {step}, "
                f"already integrated up to {self._next_step - 1}"
            )
        horizon = self._next_step + self.config.delay_steps
        if step > horizon:
            raise ValueError(
                f"Neuron {self.index}: cannot deliver to step {step}, "
                f"beyond the delay window ending at {horizon}"
            )
        self._buffer[step] = self._buffer.get(step, 0.0) + amplitude

    def consume_buffered_at(self, step):
        """Remove and return the input pending for `step` (0.0 if none)."""
        return self._buffer.pop(step, 0.0)

    def peek_buffered_at(self, step):
        """Input pending for `step`, left in place."""
        return self._buffer.get(step, 0.0)

    def pending_steps(self):
        """Sorted steps that still hold undelivered input."""
        return sorted(self._buffer)

    # ------------------------------------------------------------------
    # Outgoing connections
    # ------------------------------------------------------------------

    @property
    def amplitude(self):
        """Signed amplitude carried by every outgoing connection (mV)."""
        if self.excitatory:
            return self.config.j_excitatory
        return self.config.j_inhibitory

    def _check_targets(self, targets):
        if self.population_size is None or len(targets) == 0:
            return
        bad = targets[(targets < 0) | (targets >= self.population_size)]
        if len(bad) > 0:
            raise IndexError(
                f"Connection target {int(bad[0])} outside population "
                f"[0, {self.population_size})"
            )

    def add_connection(self, target):
        """Connect this neuron to neuron `target`."""
        self.add_connections([target])

    def add_connections(self, targets):
        """Connect this neuron to each of `targets`, in order."""
        targets = np.asarray(targets, dtype=np.int64).ravel()
        self._check_targets(targets)
        self._targets = np.concatenate([self._targets, targets.astype(np.int32)])

    @property
    def connections(self):
        """Target indices of outgoing connections, in creation order."""
        view = self._targets.view()
        view.flags.writeable = False
        return view

    @property
    def n_connections(self):
        return len(self._targets)

    # ------------------------------------------------------------------
    # Recordings
    # ------------------------------------------------------------------

    @property
    def spike_times(self):
        """Steps at which this neuron spiked, increasing."""
        return list(self._spikes)

    @property
    def potentials(self):
        """Potential after each integrated step; empty unless recording."""
        return list(self._trace)
