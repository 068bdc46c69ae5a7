"""
MentalSum: adaptive practice engine for mental arithmetic.

Picks which calculation strategy a learner should practise next,
synthesises problems that exercise it, and runs timed practice sessions
whose outcomes feed back into future strategy selection.
"""

__version__ = "1.0.0"
