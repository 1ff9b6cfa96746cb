"""Package-wide logger of orthokit.

All modules log through ``orthokit_logger``, a standard library
:mod:`logging` logger named ``"orthokit"``. Two levels are used:

* ``INFO``: one summary line per constructed basis (size, envelope, number
    of samples) and the step table of verbose finite-difference checks.
* ``WARNING``: measures with samples outside the envelope domain, bases
    that are not orthonormal on their own measure, and failed
    finite-difference checks.

Nothing is configured here, so only warnings reach the default handler of
the root logger. To follow basis construction, raise the level, e.g.::

    >>> import logging
    >>> logging.getLogger("orthokit").setLevel(logging.INFO)
"""
import logging

logger_name = "orthokit"
orthokit_logger = logging.getLogger(logger_name)
