"""Exception types for radialwalk."""


class RadialWalkError(Exception):
    """Base class for radialwalk errors"""


class InvalidCoordinate(RadialWalkError, ValueError):
    """Latitude or longitude outside the valid range"""


class GeocodingError(RadialWalkError):
    """Forward search could not reach the geocoding service"""


class DiscoveryInProgress(RadialWalkError):
    """A discovery is already running for this session"""
