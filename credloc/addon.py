"""
mitmproxy addon that locates credentials in incoming requests.

For every request the configured locations are tried in order; the first
credential found is stored on the flow. With enforcement on, requests
without a credential are answered with 403 and never reach upstream.
"""

from __future__ import annotations

import logging
import sys

from mitmproxy import ctx
from mitmproxy import http

from credloc import config
from credloc.errors import LocationConfigError
from credloc.registry import LocationRegistry
from credloc.registry import load_registry_from_file
from credloc.selectors import RequestData

# Configure logging to output to stderr
logging.basicConfig(
    level=logging.INFO,
    format="[%(levelname)s] %(name)s: %(message)s",
    stream=sys.stderr,
)

logger = logging.getLogger(__name__)

# Metadata key for storing the result on flows
CREDLOC_METADATA_KEY = "credloc"

FORBIDDEN_BODY = b"Access forbidden.\n"


class CredentialLocator:
    """
    Mitmproxy addon that resolves credentials from request metadata.

    Usage:
        mitmdump -s path/to/credloc/__init__.py --set credloc_config=locations.json

    Or load programmatically:
        from credloc import CredentialLocator
        addons = [CredentialLocator()]
    """

    def __init__(self):
        self._registry: LocationRegistry | None = None
        self._enabled: bool = False
        # set when the configured file could not be loaded
        self._load_failed: bool = False

    def load(self, loader) -> None:
        """Register addon options."""
        loader.add_option(
            name="credloc_config",
            typespec=str,
            default=config.CONFIG_PATH,
            help="Path to the credential locations JSON config",
        )
        loader.add_option(
            name="credloc_enforce",
            typespec=bool,
            default=config.ENFORCE,
            help="Reject requests without a credential with 403",
        )
        loader.add_option(
            name="credloc_verbose",
            typespec=bool,
            default=config.VERBOSE,
            help="Log every location evaluation",
        )

    def configure(self, updated: set[str]) -> None:
        """Handle configuration changes."""
        if "credloc_verbose" in updated:
            if ctx.options.credloc_verbose:
                logging.getLogger("credloc").setLevel(logging.DEBUG)
                logger.info("Verbose logging ENABLED")
            else:
                logging.getLogger("credloc").setLevel(logging.INFO)

        if "credloc_config" not in updated:
            return

        config_path = ctx.options.credloc_config
        if not config_path:
            self._load_failed = False
            if self._enabled:
                logger.info("No credentials config, credloc addon disabled")
            self._registry = None
            self._enabled = False
            return

        try:
            self._registry = load_registry_from_file(config_path)
        except LocationConfigError as e:
            logger.error(f"Failed to load credentials config {config_path}: {e}")
            self._registry = None
            self._enabled = False
            self._load_failed = True
            if ctx.options.credloc_enforce:
                logger.warning("ENFORCE: no valid credentials config, rejecting every request")
            else:
                logger.warning("No valid credentials config, requests pass through unchecked")
            return

        self._enabled = True
        self._load_failed = False
        logger.info(f"Credential locations loaded from {config_path}")
        if ctx.options.credloc_enforce:
            logger.info("ENFORCE: requests without a credential are rejected")

    def request(self, flow: http.HTTPFlow) -> None:
        """Resolve the request's credential and store it on the flow."""
        if self._load_failed and ctx.options.credloc_enforce:
            # fail closed: without a config no request can carry a credential
            flow.metadata[CREDLOC_METADATA_KEY] = {"found": False}
            flow.response = http.Response.make(403, FORBIDDEN_BODY)
            return

        if not self._enabled or not self._registry:
            return

        try:
            request = RequestData.from_flow(flow)
            match = self._registry.resolve(request)

            if match is not None:
                flow.metadata[CREDLOC_METADATA_KEY] = {"found": True, **match.to_dict()}
                logger.debug(
                    f"{flow.request.pretty_host}: {match.kind} credential "
                    f"from {match.location.describe()}"
                )
                return

            flow.metadata[CREDLOC_METADATA_KEY] = {"found": False}
            if ctx.options.credloc_verbose:
                for outcome in self._registry.resolve_all(request):
                    logger.debug(
                        f"{flow.request.pretty_host}: {outcome.kind} at "
                        f"{outcome.location.describe()}: {outcome.error}"
                    )

            if ctx.options.credloc_enforce:
                flow.response = http.Response.make(403, FORBIDDEN_BODY)
        except Exception as e:
            logger.error(
                f"Error in request hook for {flow.request.pretty_host}: {e}",
                exc_info=True,
            )

