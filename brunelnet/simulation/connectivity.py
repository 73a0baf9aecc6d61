"""Random sparse connectivity of a Brunel network.

Every neuron receives exactly C_E inputs drawn uniformly from the
excitatory population and C_I inputs drawn from the inhibitory one.
Draws are with replacement, so self-connections and repeated pairs
occur, as in the reference model's fixed in-degree graph. Out-degrees
are whatever the draws produce; their mean equals C_E + C_I.
"""

import numpy as np

from brunelnet.utils import get_logger

LOG = get_logger("simulation.connectivity")


def draw_sources(rng, n_targets, low, high, in_degree):
    """Draw `in_degree` source indices in [low, high) for each target.

    Returns
    -------
    np.ndarray
        Shape (n_targets, in_degree). Empty along axis 1 if the range
        or the in-degree is empty.
    """
    if in_degree <= 0 or high <= low:
        return np.empty((n_targets, 0), dtype=np.int32)
    return rng.randint(low, high, size=(n_targets, in_degree)).astype(np.int32)


def generate_random_connectivity(neurons, config, rng, n_excitatory=None):
    """Wire a population with fixed in-degree random connectivity.

    Parameters
    ----------
    neurons : sequence of Neuron
        The population, indexed by position.
    config : BrunelConfig
        Supplies c_excitatory and c_inhibitory.
    rng : np.random.RandomState
        Random source; the only randomness used.
    n_excitatory : int, optional
        Size of the excitatory index range [0, n_excitatory). Defaults to
        the number of excitatory neurons in `neurons`.

    Returns
    -------
    int
        Number of connections created.
    """
    n = len(neurons)
    if n_excitatory is None:
        n_excitatory = sum(1 for neuron in neurons if neuron.excitatory)
    n_excitatory = min(n_excitatory, n)

    exc_sources = draw_sources(rng, n, 0, n_excitatory, config.c_excitatory)
    inh_sources = draw_sources(rng, n, n_excitatory, n, config.c_inhibitory)

    # one row of sources per target, E draws before I draws
    sources = np.hstack([exc_sources, inh_sources])
    targets = np.repeat(np.arange(n, dtype=np.int32), sources.shape[1])
    sources = sources.ravel()

    # group edges by source; stable sort keeps targets ascending per source
    order = np.argsort(sources, kind="stable")
    sources = sources[order]
    targets = targets[order]
    counts = np.bincount(sources, minlength=n)
    bounds = np.concatenate([[0], np.cumsum(counts)])

    for i, neuron in enumerate(neurons):
        if counts[i] > 0:
            neuron.add_connections(targets[bounds[i]:bounds[i + 1]])

    n_edges = len(sources)
    LOG.info("Random connectivity: %d neurons (%d E, %d I), C_E=%d, C_I=%d, %d edges",
             n, n_excitatory, n - n_excitatory,
             exc_sources.shape[1], inh_sources.shape[1], n_edges)
    if n > 0 and n_edges > 0:
        LOG.info("  mean out-degree %.1f, max %d", n_edges / n, int(counts.max()))

    return n_edges
