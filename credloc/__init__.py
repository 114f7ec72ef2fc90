"""
credloc: locate credentials in proxy request metadata.

Credentials are found by running configured pipelines of decode, lookup
and alternation operations over headers, query parameters and proxy
properties.
"""

from credloc.addon import CredentialLocator
from credloc.compiler import compile_credentials
from credloc.compiler import compile_location
from credloc.compiler import compile_operations
from credloc.errors import EvalResult
from credloc.errors import LocationConfigError
from credloc.models import CredentialMatch
from credloc.models import CredentialSpec
from credloc.models import Location
from credloc.pipeline import evaluate
from credloc.pipeline import matches
from credloc.registry import get_registry
from credloc.registry import load_registry
from credloc.registry import LocationRegistry
from credloc.resolver import resolve
from credloc.selectors import RequestData

__all__ = [
    "CredentialLocator",
    "CredentialMatch",
    "CredentialSpec",
    "EvalResult",
    "Location",
    "LocationConfigError",
    "LocationRegistry",
    "RequestData",
    "compile_credentials",
    "compile_location",
    "compile_operations",
    "evaluate",
    "get_registry",
    "load_registry",
    "matches",
    "resolve",
]

# For use with `mitmdump -s .../credloc/__init__.py`
addons = [CredentialLocator()]
