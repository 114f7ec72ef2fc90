"""
Credential resolver: walks configured locations in order until one yields.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable
from typing import Iterator

from credloc.errors import EngineError
from credloc.errors import EvalResult
from credloc.errors import SelectorUnresolved
from credloc.models import CredentialMatch
from credloc.models import CredentialSpec
from credloc.models import Key
from credloc.models import Location
from credloc.models import Value
from credloc.pipeline import evaluate
from credloc.pipeline import extract_strings
from credloc.pipeline.operations import lookup
from credloc.selectors import RequestData
from credloc.selectors import resolve_seed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocationOutcome:
    """What happened at one location, for diagnostics."""

    kind: str
    location: Location
    index: int
    result: EvalResult
    match: CredentialMatch | None = None

    @property
    def error(self) -> EngineError | None:
        return self.result.error

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "location": self.location.describe(),
            "index": self.index,
            "found": self.match is not None,
            "error": self.result.error.message if self.result.error else None,
        }


def resolve(
    credentials: Iterable[CredentialSpec],
    request: RequestData,
) -> CredentialMatch | None:
    """
    Find the first credential present in the request.

    Credentials are tried in order, and within each credential its
    locations in order. A failing location only means the credential is
    not there; the next location is tried.
    """
    for outcome in _outcomes(credentials, request):
        if outcome.match is not None:
            logger.debug(
                f"Found {outcome.kind} credential at {outcome.location.describe()}"
            )
            return outcome.match
    return None


def resolve_all(
    credentials: Iterable[CredentialSpec],
    request: RequestData,
) -> list[LocationOutcome]:
    """Evaluate every location of every credential, without stopping early."""
    return list(_outcomes(credentials, request))


def _outcomes(
    credentials: Iterable[CredentialSpec],
    request: RequestData,
) -> Iterator[LocationOutcome]:
    for credential in credentials:
        for index, location in enumerate(credential.locations):
            seed = resolve_seed(location, request)
            if seed is None:
                error = SelectorUnresolved(location.selector.value, location.args)
                logger.debug(f"{credential.kind}: {error.message}")
                yield LocationOutcome(
                    kind=credential.kind,
                    location=location,
                    index=index,
                    result=EvalResult.failure(error),
                )
                continue

            result = evaluate(location, seed)
            match = None
            if result.ok:
                assert result.value is not None
                value = _credential_value(credential, result.value)
                if value is not None:
                    match = CredentialMatch(
                        kind=credential.kind,
                        value=value,
                        location=location,
                        index=index,
                    )
                else:
                    logger.debug(
                        f"{credential.kind}: no accepted value at {location.describe()}"
                    )

            yield LocationOutcome(
                kind=credential.kind,
                location=location,
                index=index,
                result=result,
                match=match,
            )


def _credential_value(credential: CredentialSpec, value: Value) -> str | None:
    """
    The credential carried by a final value.

    With keys, the first key the value contains selects it: text and list
    values yield the key itself, structs yield the string stored under it.
    """
    if credential.keys:
        for key in credential.keys:
            result = lookup(Key(key), value)
            if result.ok:
                assert result.value is not None
                strings = extract_strings(result.value)
                if strings:
                    return strings[0]
        return None

    strings = extract_strings(value)
    return strings[0] if strings else None
