import folium

from radialwalk.map_view import create_map, save_map


SNAPSHOT = {
    "markers": [{"id": "marker-1-1", "position": [37.5665, 126.978], "name": "Seoul <City Hall>"}],
    "flags": [{
        "id": "flag-1-north",
        "position": [37.611, 126.98],
        "name": "Bukhansan",
        "direction": "north",
        "direction_label": "North",
        "distance_km": 5.02,
    }],
    "routes": [{
        "id": "route-1-north",
        "coordinates": [[37.5665, 126.978], [37.59, 126.979], [37.611, 126.98]],
        "color": "#2196F3",
    }],
    "loading": False,
    "center": [37.5665, 126.978],
    "zoom": 13,
}


def test_create_map_draws_markers_flags_and_routes():
    m = create_map(SNAPSHOT)
    assert isinstance(m, folium.Map)

    html = m.get_root().render()
    assert "North" in html
    assert "5.02km" in html
    assert "Bukhansan" in html
    assert "#2196F3" in html
    assert "City Hall" in html


def test_empty_snapshot_still_renders():
    m = create_map({"markers": [], "flags": [], "routes": []})
    assert "Markers: 0" in m.get_root().render()


def test_save_map_writes_html(tmp_path):
    out = tmp_path / "map.html"
    save_map(SNAPSHOT, str(out))
    assert out.exists()
    assert "leaflet" in out.read_text(encoding="utf-8").lower()
