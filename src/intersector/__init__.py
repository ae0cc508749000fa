"""Intersector: find annotated features intersecting reference regions.

Intersector takes a list of reference features, given as genomic
coordinates or as named features, and for each one searches an
annotation database for target features of requested types. The target
with the greatest overlap is reported together with its distance and
overlap extent relative to the search region.

Example:
    >>> import intersector
    >>> intersector.__version__
    '2.4.0'

Modules:
    core: Interval metrics, region building, feature resolution
    io: Feature stores, reference tables, FASTA lengths
    config: Configuration handling
    utils: Logging utilities
"""

__version__ = "2.4.0"

__all__ = [
    "__version__",
]
