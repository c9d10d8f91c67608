"""Top-level package for the arb-oppity liquidity regime toolkit.

Subpackages mirror the data flow: ``data_feed`` fetches observations from the
venues, ``market`` turns them into historical profiles, regime labels and
window predictions, ``scanner`` ranks cross-venue candidates and ``service``
wires everything together for callers and agents.
"""

__all__: list[str] = []
