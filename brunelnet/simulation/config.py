"""Simulation constants for the Brunel network.

One immutable BrunelConfig is built per run and handed to the Network,
which passes it on to every Neuron. Defaults reproduce the reference
model: 12500 neurons split 10000/2500, 10% connectivity, J = 0.1 mV,
g = 5, 1.5 ms delay, dt = 0.1 ms.

References:
    Brunel N (2000). J Comp Neurosci 8(3):183-208.
"""

from dataclasses import asdict, dataclass, fields, replace
import math
from pathlib import Path


_STEP_FIELDS = ("steps_per_ms", "population_size", "n_excitatory", "n_inhibitory",
                "c_excitatory", "c_inhibitory", "delay_steps", "refractory_steps")


@dataclass(frozen=True)
class BrunelConfig:
    """Named constants of a Brunel network simulation.

    Parameters
    ----------
    dt : float
        Time step (ms).
    steps_per_ms : int
        Steps per millisecond; ms are converted by multiplying with this
        rather than dividing by dt.
    population_size : int
        Total number of neurons.
    n_excitatory, n_inhibitory : int
        Sub-population sizes. Must sum to population_size.
    c_excitatory, c_inhibitory : int
        Incoming connections per neuron from each sub-population.
    j_excitatory : float
        Excitatory synaptic amplitude (mV).
    g : float
        Relative inhibitory strength: inhibitory amplitude is -g * J.
    delay_steps : int
        Transmission delay (steps). At least 1.
    tau_m : float
        Membrane time constant (ms).
    capacitance : float
        Membrane capacitance (pF); resistance is tau_m / capacitance.
    v_threshold : float
        Spike threshold (mV).
    v_reset : float
        Reset potential (mV).
    refractory_steps : int
        Refractory period (steps).
    eta : float
        External rate relative to the threshold rate: nu_ext = eta * nu_thr.
    seed : int
        Default seed of the network random source.
    """
    dt: float = 0.1
    steps_per_ms: int = 10
    population_size: int = 12500
    n_excitatory: int = 10000
    n_inhibitory: int = 2500
    c_excitatory: int = 1000
    c_inhibitory: int = 250
    j_excitatory: float = 0.1
    g: float = 5.0
    delay_steps: int = 15
    tau_m: float = 20.0
    capacitance: float = 1.0
    v_threshold: float = 20.0
    v_reset: float = 0.0
    refractory_steps: int = 20
    eta: float = 2.0
    seed: int = 42

    def __post_init__(self):
        for name in _STEP_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"{name} must be a non-negative integer, got {value!r}")
        if self.delay_steps < 1:
            raise ValueError(f"delay_steps must be at least 1, got {self.delay_steps}")
        if self.n_excitatory + self.n_inhibitory != self.population_size:
            raise ValueError(
                f"n_excitatory + n_inhibitory ({self.n_excitatory} + {self.n_inhibitory}) "
                f"must equal population_size ({self.population_size})"
            )
        if self.dt <= 0 or self.tau_m <= 0 or self.capacitance <= 0:
            raise ValueError("dt, tau_m and capacitance must be positive")
        if abs(self.dt * self.steps_per_ms - 1.0) > 1e-9:
            raise ValueError(
                f"steps_per_ms ({self.steps_per_ms}) does not match dt ({self.dt} ms)"
            )

    @property
    def resistance(self):
        """Membrane resistance (ms/pF) = tau_m / C."""
        return self.tau_m / self.capacitance

    @property
    def j_inhibitory(self):
        """Inhibitory synaptic amplitude (mV), negative."""
        return -self.g * self.j_excitatory

    @property
    def nu_thr(self):
        """External rate (kHz) whose mean drive alone reaches threshold."""
        return self.v_threshold / (self.c_excitatory * self.j_excitatory * self.tau_m)

    @property
    def nu_ext(self):
        """External Poisson rate per external synapse (kHz)."""
        return self.eta * self.nu_thr

    @property
    def delay_ms(self):
        return self.delay_steps / self.steps_per_ms

    @property
    def refractory_ms(self):
        return self.refractory_steps / self.steps_per_ms

    @property
    def decay(self):
        """Membrane decay factor over one step, exp(-dt / tau_m)."""
        return math.exp(-self.dt / self.tau_m)

    def to_steps(self, ms):
        """Convert a time in ms to the nearest whole step, halves rounding up."""
        return int(math.floor(ms * self.steps_per_ms + 0.5))

    def to_ms(self, step):
        return step / self.steps_per_ms

    def replace(self, **changes):
        """Return a copy with some fields changed (validated again)."""
        return replace(self, **changes)

    def to_dict(self):
        return asdict(self)

    @classmethod
    def scaled(cls, n_excitatory, gamma=0.25, epsilon=0.1, **overrides):
        """Build a smaller (or larger) network with the same mean drive.

        Keeps the E/I ratio, the connection probability and the total
        synaptic efficacy C_E * J of the default model, so the mean
        recurrent and external drive per neuron are unchanged. J grows as
        C_E shrinks, and the input variance C_E * J**2 grows with it: a
        network ten times smaller has ten times the fluctuations, and
        recurrent inhibition there lowers the rate by less than half.

        Parameters
        ----------
        n_excitatory : int
            Excitatory population size.
        gamma : float
            N_I / N_E.
        epsilon : float
            Connection probability.
        **overrides
            Any other field.
        """
        reference = cls()
        n_inhibitory = int(n_excitatory * gamma)
        c_excitatory = max(1, int(epsilon * n_excitatory))
        c_inhibitory = int(epsilon * n_inhibitory)
        j = reference.j_excitatory * reference.c_excitatory / c_excitatory
        params = dict(
            population_size=n_excitatory + n_inhibitory,
            n_excitatory=n_excitatory,
            n_inhibitory=n_inhibitory,
            c_excitatory=c_excitatory,
            c_inhibitory=c_inhibitory,
            j_excitatory=j,
        )
        params.update(overrides)
        return cls(**params)


def load_config(path):
    """Read a BrunelConfig from a YAML file.

    Keys absent from the file keep their default values.

    Parameters
    ----------
    path : str or Path
        YAML file holding a mapping of field names to values.

    Returns
    -------
    BrunelConfig

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the document is not a mapping or names unknown fields.
    """
    import yaml

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        data = yaml.safe_load(f)

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping, got {type(data).__name__}")

    known = {f.name for f in fields(BrunelConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"{path}: unknown config keys {unknown}")

    return BrunelConfig(**data)
