"""Configuration settings for radialwalk."""

CONFIG = {
    # Discovery
    "target_km": 5.0,  # seed offset for each cardinal direction
    "min_km": 4.0,  # accepted walking distance band (inclusive)
    "max_km": 6.0,
    "pacing_delay": 1.0,  # seconds between directions
    # Geometry
    "km_per_degree": 111.0,  # flat-earth approximation, degrees of latitude
    "earth_radius_km": 6371.0,
    # External services
    "osrm_url": "https://router.project-osrm.org",
    "nominatim_url": "https://nominatim.openstreetmap.org",
    "user_agent": "radialwalk/0.1 (+https://github.com/radialwalk/radialwalk)",
    "request_timeout": 10,  # seconds per external call
    "reverse_zoom": 16,  # nominatim detail level for place names
    "rate_limit_per_second": 1.0,  # shared token bucket refill rate
    "rate_limit_burst": 2,
    # Map display
    "route_color": "#2196F3",
    "default_center": (37.5665, 126.9780),  # Seoul City Hall
    "default_zoom": 13,
    "search_zoom": 15,
    # Interactive server
    "http_port": 8080,
    "ws_port": 8765,
}
