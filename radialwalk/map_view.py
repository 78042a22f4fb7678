"""Static HTML map of a session, rendered with folium."""

from html import escape
from typing import Optional

import folium
from folium import plugins

from .config import CONFIG


def _legend_html(marker_count: int, flag_count: int) -> str:
    return f"""
    <div style="
        position: fixed;
        bottom: 50px;
        left: 50px;
        z-index: 1000;
        background-color: white;
        padding: 10px;
        border-radius: 5px;
        border: 2px solid grey;
        font-family: Arial;
        font-size: 12px;
    ">
        <b>radialwalk</b><br>
        <hr style="margin: 5px 0">
        <div style="display: flex; align-items: center; margin: 3px 0;">
            <div style="width: 30px; height: 4px; background: {CONFIG['route_color']}; margin-right: 5px;"></div>
            Walking route
        </div>
        <hr style="margin: 5px 0">
        Markers: {marker_count}<br>
        Flags: {flag_count}
    </div>
    """


def create_map(snapshot: dict, zoom_start: Optional[int] = None) -> folium.Map:
    """Build a folium map from a MapSession snapshot.

    Markers get a blue pin, flags a red flag, routes a polyline each. The view
    fits all drawn points when there are any.
    """
    center = snapshot.get("center") or list(CONFIG["default_center"])
    m = folium.Map(
        location=center,
        zoom_start=zoom_start or snapshot.get("zoom") or CONFIG["default_zoom"],
        tiles="OpenStreetMap",
    )
    folium.TileLayer("CartoDB positron", name="Light").add_to(m)

    markers_layer = folium.FeatureGroup(name="Markers", show=True)
    flags_layer = folium.FeatureGroup(name="Flags", show=True)
    routes_layer = folium.FeatureGroup(name="Routes", show=True)

    bounds = []

    for route in snapshot.get("routes", []):
        coords = route["coordinates"]
        if len(coords) < 2:
            continue
        folium.PolyLine(
            coords,
            weight=4,
            color=route.get("color", CONFIG["route_color"]),
            opacity=0.7,
        ).add_to(routes_layer)
        bounds.extend(coords)

    for marker in snapshot.get("markers", []):
        lat, lon = marker["position"]
        popup_text = f"""
            <b>{escape(marker['name'])}</b><br>
            <small>{lat:.5f}, {lon:.5f}</small>
        """
        folium.Marker(
            [lat, lon],
            popup=folium.Popup(popup_text, max_width=250),
            tooltip=escape(marker["name"]),
            icon=folium.Icon(color="blue", icon="map-marker"),
        ).add_to(markers_layer)
        bounds.append([lat, lon])

    for flag in snapshot.get("flags", []):
        lat, lon = flag["position"]
        label = flag.get("direction_label") or flag["direction"].capitalize()
        popup_text = f"""
            <b>{escape(label)}</b><br>
            <small>Distance: {flag['distance_km']:.2f}km</small><br>
            <small>{escape(flag['name'])}</small>
        """
        folium.Marker(
            [lat, lon],
            popup=folium.Popup(popup_text, max_width=250),
            tooltip=f"{label} ({flag['distance_km']:.2f}km)",
            icon=folium.Icon(color="red", icon="flag"),
        ).add_to(flags_layer)
        bounds.append([lat, lon])

    routes_layer.add_to(m)
    markers_layer.add_to(m)
    flags_layer.add_to(m)
    folium.LayerControl().add_to(m)

    m.get_root().html.add_child(folium.Element(
        _legend_html(len(snapshot.get("markers", [])), len(snapshot.get("flags", [])))
    ))
    plugins.Fullscreen().add_to(m)

    if len(bounds) > 1:
        lats = [p[0] for p in bounds]
        lons = [p[1] for p in bounds]
        m.fit_bounds([[min(lats), min(lons)], [max(lats), max(lons)]])

    return m


def save_map(snapshot: dict, path: str) -> str:
    """Render a snapshot and write it to path"""
    m = create_map(snapshot)
    m.save(path)
    return path
