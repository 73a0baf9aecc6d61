"""brunelnet — Brunel balanced random network of LIF neurons.

A fixed-step simulator for sparsely connected excitatory/inhibitory
populations of leaky integrate-and-fire point neurons, with delayed
spike transmission (Brunel 2000).

Subpackages:
    simulation    Configuration, neurons, connectivity, network and analysis
    explore       Experiments built on the simulation core
    utils         Logging and small helpers
"""

__version__ = "0.1.0"
