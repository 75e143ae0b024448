"""
Orientation sensor capability probe.

The platform is inspected exactly once, when an effect instance is created,
and the result is kept as a terminal flag. Call sites branch on the
capability value instead of on platform identity.

Capabilities:
- 'always_on': Sensor events are delivered without any consent step
- 'consent_required': Sensor events need an explicit user-granted permission
- 'unsupported': No sensor, pointer/touch fallback only
"""

import logging
from enum import Enum

log = logging.getLogger("effect.sensor")


class SensorCapability(Enum):
    ALWAYS_ON = "always_on"
    CONSENT_REQUIRED = "consent_required"
    UNSUPPORTED = "unsupported"


def probe_capability(platform) -> SensorCapability:
    """
    Resolve the sensor capability of a host platform.

    Args:
        platform: Host platform exposing `has_orientation_sensor` and
                  `requires_permission` attributes (missing = False).

    Returns:
        SensorCapability for the lifetime of the caller
    """
    if not getattr(platform, "has_orientation_sensor", False):
        capability = SensorCapability.UNSUPPORTED
    elif getattr(platform, "requires_permission", False):
        # A consent requirement without a consent API can never be satisfied
        if callable(getattr(platform, "request_permission", None)):
            capability = SensorCapability.CONSENT_REQUIRED
        else:
            capability = SensorCapability.UNSUPPORTED
    else:
        capability = SensorCapability.ALWAYS_ON

    log.info(f"[Capability] Orientation sensor: {capability.value}")
    return capability
