from .rng import DisplayRng, Rng, coerce_seed

__all__ = ["Rng", "DisplayRng", "coerce_seed"]
