"""
Small helpers shared across brunelnet.
"""
import functools

from .logging import get_logger


def partial(method, **kwargs):
    """
    Bind keyword arguments to a function and keep its name.
    """
    bound = functools.partial(method, **kwargs)
    bound.__name__ = method.__name__
    return bound
