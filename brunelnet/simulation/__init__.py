"""simulation — Brunel balanced random network of LIF neurons.

Fixed-step simulation of a sparsely connected excitatory/inhibitory
population with delta synapses and a fixed transmission delay.

References:
    Brunel N (2000). J Comp Neurosci 8(3):183-208.
"""

from .config import (
    BrunelConfig,
    load_config,
)
from .neuron import Neuron
from .connectivity import generate_random_connectivity
from .network import (
    Network,
    SimulationResult,
)
from .analysis import (
    firing_rates,
    spike_raster,
    population_rate,
    spike_table,
    connectivity_table,
    ei_input_balance,
)
