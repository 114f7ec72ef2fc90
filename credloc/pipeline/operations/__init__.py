"""
Pipeline operations.

Each operation takes the current Value and its compiled Operation and
returns an EvalResult.
"""

from credloc.pipeline.operations.branch import branch_op
from credloc.pipeline.operations.decode import decode
from credloc.pipeline.operations.decode import decode_op
from credloc.pipeline.operations.lookup import lookup
from credloc.pipeline.operations.lookup import lookup_op

__all__ = [
    "decode",
    "decode_op",
    "lookup",
    "lookup_op",
    "branch_op",
]
